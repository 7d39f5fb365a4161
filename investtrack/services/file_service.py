from sqlalchemy.orm import Session

from investtrack.core.exceptions import NotFoundException
from investtrack.models.file import File
from investtrack.repositories.file_repository import FileRepository


class FileService:
    """Read access to stored attachments; writes go through the owning entity"""

    def __init__(self, db: Session):
        self.db = db
        self.file_repo = FileRepository(db)

    def get_file(self, file_id: int, include_content: bool = False) -> File:
        """
        Raises:
            NotFoundException: If file doesn't exist
        """
        if include_content:
            file = self.file_repo.get_with_content(file_id)
        else:
            file = self.file_repo.get_by_id(file_id)
        if not file:
            raise NotFoundException(f"File {file_id} not found")
        return file
