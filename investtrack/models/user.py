from sqlalchemy import String, Integer, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from investtrack.models.base import Base, TimestampMixin
from investtrack.models.role import UserRole

if TYPE_CHECKING:
    from investtrack.models.firm import Firm

DEFAULT_AVATAR = "https://cdn-icons-png.flaticon.com/512/149/149071.png"


class User(Base, TimestampMixin):
    """
    Application user.

    Email is stored lower-cased. Only the bcrypt hash of the password is kept.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=UserRole.MEMBER,
    )
    avatar: Mapped[str] = mapped_column(String(1024), nullable=False, default=DEFAULT_AVATAR)

    # Firms created by this user
    firms: Mapped[list["Firm"]] = relationship(
        "Firm", back_populates="created_by", order_by="Firm.id"
    )

    @property
    def firm_ids(self) -> list[int]:
        return [firm.id for firm in self.firms]

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"
