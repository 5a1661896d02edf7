"""
OpenSea-compatible token metadata document.

The document is derived on every request and never stored.
"""

from pydantic import BaseModel, Field


class MetadataAttribute(BaseModel):
    """One trait entry in the attributes list."""

    trait_type: str
    value: str | int
    display_type: str | None = None


class NFTMetadata(BaseModel):
    """Metadata document for a single token."""

    name: str
    description: str
    image: str
    external_url: str
    attributes: list[MetadataAttribute] = Field(default_factory=list)


def validate_metadata(metadata: NFTMetadata) -> list[str]:
    """
    Check that a metadata document is complete.

    Returns a list of problems; an empty list means the document is valid.
    """
    problems: list[str] = []

    for field_name in ("name", "description", "image", "external_url"):
        if not getattr(metadata, field_name):
            problems.append(f"{field_name} is empty")

    for index, attribute in enumerate(metadata.attributes):
        if not attribute.trait_type:
            problems.append(f"attributes[{index}].trait_type is empty")
        # bool is an int subclass but not a valid trait value
        if isinstance(attribute.value, bool) or not isinstance(attribute.value, (str, int)):
            problems.append(f"attributes[{index}].value must be a string or number")

    return problems
