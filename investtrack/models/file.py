from sqlalchemy import String, Integer, LargeBinary, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from investtrack.models.base import Base, TimestampMixin


class File(Base, TimestampMixin):
    """
    Uploaded attachment stored in the database.

    A file belongs to exactly one parent at a time (business card, coverage
    document or fund factsheet). It is never garbage-collected: whichever
    operation drops or replaces the reference deletes the file.
    The payload column is deferred so metadata queries don't load it.
    """

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("firms.id"), nullable=False, index=True
    )
    member_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("members.id", deferrable=True, initially="DEFERRED"),
        nullable=True,
        index=True,
    )
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, deferred=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=list)

    def __repr__(self) -> str:
        return f"<File(id={self.id}, original_name='{self.original_name}', mime_type='{self.mime_type}')>"
