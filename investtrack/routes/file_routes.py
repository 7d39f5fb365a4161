import base64
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import get_current_user
from investtrack.models.user import User
from investtrack.schemas.file_schemas import FileResponse
from investtrack.services.file_service import FileService

router = APIRouter()


def content_disposition(filename: str) -> str:
    """Build an attachment header; names outside printable latin-1 use RFC 5987 encoding"""
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=utf-8''{quote(filename)}"
    if not filename.isprintable():
        return f"attachment; filename*=utf-8''{quote(filename)}"
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    return f'attachment; filename="{escaped}"'


@router.get("/{file_id}", response_model=FileResponse)
def get_file(
    file_id: int,
    include_content: bool = Query(False, description="Include base64-encoded content"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get file metadata, optionally with its content"""
    file = FileService(db).get_file(file_id, include_content=include_content)
    response = FileResponse.model_validate(file)
    if include_content:
        response.content_base64 = base64.b64encode(file.content).decode()
    return response


@router.get("/{file_id}/download")
def download_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download the raw file with its stored MIME type"""
    file = FileService(db).get_file(file_id, include_content=True)
    return Response(
        content=file.content,
        media_type=file.mime_type,
        headers={"Content-Disposition": content_disposition(file.original_name)},
    )
