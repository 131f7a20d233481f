"""
Phone model. A phone row belongs to exactly one contact.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from phonebook.db.base import Base


class Phone(Base):
    """Phone number owned by a contact (many-to-one with Contact)."""

    __tablename__ = "phones"
    __table_args__ = (
        UniqueConstraint("contact_id", "phone_number", name="uq_phones_contact_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(
        Integer,
        ForeignKey("contacts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    phone_number = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    contact = relationship("Contact", back_populates="phones")

    def __repr__(self) -> str:
        return f"<Phone {self.phone_number}>"
