"""
Filter translation for contact list and count queries.
Both queries must build their WHERE clause from build_contact_predicates so they never drift apart.
"""

from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Optional

from sqlalchemy import ColumnElement

from phonebook.models.contact import Contact
from phonebook.models.phone import Phone


@dataclass(frozen=True)
class ContactFilters:
    """Optional substring constraints applied to contact listings."""
    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ContactFilters":
        """Build filters from a mapping, ignoring unknown keys and empty values."""
        if not data:
            return cls()
        values = {}
        for field in fields(cls):
            value = data.get(field.name)
            if value is not None and str(value) != "":
                values[field.name] = str(value)
        return cls(**values)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, field.name) is None for field in fields(self))


def build_contact_predicates(filters: Optional[ContactFilters] = None) -> List[ColumnElement]:
    """
    Translate filters into SQL predicates, ANDed by the caller.

    Active contacts only. Each present field adds a case-insensitive substring
    match; wildcard characters in the input match literally. The phone filter
    is an EXISTS over the contact's phones, so a contact matching through
    several numbers still counts once.
    """
    predicates: List[ColumnElement] = [Contact.deleted_at.is_(None)]

    if filters is None:
        return predicates

    if filters.name:
        predicates.append(Contact.name.icontains(filters.name, autoescape=True))

    if filters.address:
        predicates.append(Contact.address.icontains(filters.address, autoescape=True))

    if filters.email:
        predicates.append(Contact.email.icontains(filters.email, autoescape=True))

    if filters.phone:
        predicates.append(
            Contact.phones.any(Phone.phone_number.icontains(filters.phone, autoescape=True))
        )

    return predicates
