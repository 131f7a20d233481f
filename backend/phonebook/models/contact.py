"""
Contact model for the phonebook directory.
"""

from sqlalchemy import Column, Integer, String, DateTime, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from phonebook.db.base import Base


class Contact(Base):
    """Contact model (one-to-many with Phone). Soft-deleted by stamping deleted_at."""

    __tablename__ = "contacts"
    __table_args__ = (
        # Only one active contact may hold a given email
        Index(
            "ux_contacts_email_active",
            "email",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    address = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Relationships
    phones = relationship(
        "Phone",
        back_populates="contact",
        order_by="Phone.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def phone_numbers(self) -> list:
        return [phone.phone_number for phone in self.phones]

    def __repr__(self) -> str:
        return f"<Contact {self.id} {self.email}>"
