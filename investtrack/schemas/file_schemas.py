from datetime import datetime
from pydantic import BaseModel


class FileResponse(BaseModel):
    """Attachment metadata; content_base64 only when explicitly requested"""

    model_config = {"from_attributes": True}

    id: int
    firm_id: int
    member_id: int | None
    original_name: str
    mime_type: str
    size: int
    tags: list[str] | None
    created_at: datetime
    content_base64: str | None = None
