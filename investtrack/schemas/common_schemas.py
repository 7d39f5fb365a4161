from pydantic import BaseModel, ConfigDict, Field


class AddressSchema(BaseModel):
    """Postal address embedded in firms and members"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    street_line1: str | None = Field(None, max_length=255)
    street_line2: str | None = Field(None, max_length=255)
    locality: str | None = Field(None, max_length=255)
    state: str = Field(..., min_length=1, max_length=255)
    region: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)
    postal_code: str = Field(..., min_length=1, max_length=20)


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    success: bool = True
    message: str


def split_csv(value: str | None) -> list[str] | None:
    """Parse a comma-separated query parameter"""
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None
