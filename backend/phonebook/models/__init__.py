"""
Database models.
Import all models here to ensure they're registered with Base.
"""

from phonebook.models.contact import Contact
from phonebook.models.phone import Phone

__all__ = [
    "Contact",
    "Phone",
]
