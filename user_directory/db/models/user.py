"""
User tables for the durable store.
Hobbies live in an ordered child table so membership filters run as EXISTS queries.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from user_directory.db.base import Base


class UserRow(Base):
    """Persisted user. Uniqueness of email, phone and (country_code, phone) is enforced here."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("phone", name="uq_users_phone"),
        UniqueConstraint("country_code", "phone", name="uq_users_country_code_phone"),
        # Ids are never reused after a delete
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(String(16), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    place: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    hobby_rows: Mapped[list["UserHobby"]] = relationship(
        "UserHobby",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserHobby.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<UserRow(id={self.id}, email={self.email})>"


class UserHobby(Base):
    """One entry of a user's hobby list; ``position`` keeps the list order."""

    __tablename__ = "user_hobbies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    user: Mapped[UserRow] = relationship("UserRow", back_populates="hobby_rows")
