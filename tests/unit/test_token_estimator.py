import pytest

from po_extractor.tokens import TokenEstimator

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("byte_length", "expected"),
    [(0, 0), (1, 1), (4, 1), (5, 2), (400_000, 100_000), (400_001, 100_001)],
)
def test_estimate_rounds_up_quarter_of_bytes(byte_length, expected):
    assert TokenEstimator().estimate(byte_length) == expected


def test_estimate_is_deterministic():
    estimator = TokenEstimator()
    assert estimator.estimate(123_456) == estimator.estimate(123_456)


def test_custom_ratio():
    assert TokenEstimator(bytes_per_token=2.0).estimate(5) == 3


def test_negative_length_rejected():
    with pytest.raises(ValueError, match="byte_length"):
        TokenEstimator().estimate(-1)


def test_non_positive_ratio_rejected():
    with pytest.raises(ValueError, match="bytes_per_token"):
        TokenEstimator(bytes_per_token=0)
