import sys

from po_extractor.cli import main

sys.exit(main())
