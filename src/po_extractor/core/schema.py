"""Purchase-order extraction schema.

The model is asked to answer with a JSON object of this shape. Values are kept
as the text found in the document; only numbers are stringified so that a
``"cost": 12.5`` answer is not rejected.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Material(BaseModel):
    """A single line item from a purchase order."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    description: str | None = None
    cost: str | None = None


class ExtractionResult(BaseModel):
    """Entities extracted from one purchase-order document."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    seller_name: str | None = Field(..., description="Selling company name")
    materials: list[Material] = Field(..., description="Line items in document order")
    confidence: str | None = Field(..., description="Model-reported confidence")

    @field_validator("materials", mode="before")
    @classmethod
    def null_materials_as_empty(cls, v: Any) -> Any:
        """The prompt asks for null when an entity is missing."""
        return [] if v is None else v

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready mapping with the wire key names."""
        return self.model_dump(mode="json")


EXTRACTION_INSTRUCTION = """
You are a document entity extraction specialist. Given a set of Purchase Order documents from different companies (aka sellers), your task is to extract the text value of the following entities from each PDF file:
{
"seller_name": "",
"materials": [{"description": "", "cost": ""}],
"confidence": ""
}

- The JSON schema must be followed during the extraction.
- The values must only include text found in the document
- Do not normalize any entity value.
- If an entity is not found in the document, set the entity value to null.
- The description of the material should be a human-readable description of the material.
- If a document is empty or cannot be read, return an empty JSON object for that document.
"""
