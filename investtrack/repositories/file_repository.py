from sqlalchemy import update
from sqlalchemy.orm import Session, undefer

from investtrack.models.file import File


class FileRepository:
    """Repository for File (attachment) data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, file_id: int) -> File | None:
        """Get file metadata; the payload loads lazily on access"""
        return self.db.query(File).filter(File.id == file_id).first()

    def get_with_content(self, file_id: int) -> File | None:
        """Get file with its binary payload loaded"""
        return (
            self.db.query(File)
            .options(undefer(File.content))
            .filter(File.id == file_id)
            .first()
        )

    def add(self, file: File) -> File:
        self.db.add(file)
        self.db.flush()
        return file

    def delete(self, file: File) -> None:
        self.db.delete(file)
        self.db.flush()

    def delete_by_ids(self, file_ids: list[int]) -> None:
        """Delete the given files; ids that no longer exist are skipped"""
        if not file_ids:
            return
        for file in self.db.query(File).filter(File.id.in_(file_ids)).all():
            self.db.delete(file)
        self.db.flush()

    def reassign_member(self, old_member_id: int, new_member_id: int, firm_id: int) -> int:
        """Re-parent a member's files onto the member record that replaced it"""
        result = self.db.execute(
            update(File)
            .where(File.member_id == old_member_id)
            .values(member_id=new_member_id, firm_id=firm_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
