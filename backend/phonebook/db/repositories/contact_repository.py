"""
Contact repository for database operations.
Multi-row writes (a contact and its phones) run inside one storage transaction.
"""

from typing import Iterable, List, Optional
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.orm import selectinload

from phonebook.core.exceptions import ContactNotFoundError
from phonebook.core.logging import get_logger
from phonebook.db.repositories.base_repository import BaseRepository
from phonebook.db.repositories.contact_filters import ContactFilters, build_contact_predicates
from phonebook.db.storage import StorageEngine
from phonebook.models.contact import Contact
from phonebook.models.phone import Phone

logger = get_logger(__name__)

# Writes go through the tables directly; reads go through the mapped classes
contacts_table = Contact.__table__
phones_table = Phone.__table__


class ContactRepository(BaseRepository[Contact]):
    """Repository for contact operations. Soft-deleted contacts are invisible to every read."""

    def __init__(self, storage: StorageEngine):
        super().__init__(Contact, storage)

    def _base_query(self):
        """Active contacts with phones loaded by a second SELECT ... IN query."""
        return (
            select(Contact)
            .options(selectinload(Contact.phones))
            .where(Contact.deleted_at.is_(None))
        )

    def _filtered_query(self, filters: Optional[ContactFilters]):
        return (
            select(Contact)
            .options(selectinload(Contact.phones))
            .where(*build_contact_predicates(filters))
            .order_by(Contact.name.asc(), Contact.id.asc())
        )

    async def _insert_phones(self, contact_id: int, phones: Iterable[str]) -> int:
        """Insert a contact's phone numbers in a single multi-row statement."""
        result = await self.storage.execute_many(
            insert(phones_table),
            [{"contact_id": contact_id, "phone_number": number} for number in phones],
        )
        return result.rowcount

    async def create(
        self,
        name: str,
        address: str,
        email: str,
        phones: Iterable[str],
    ) -> Contact:
        """
        Create a contact together with its phones.

        Both inserts commit together or not at all; the storage error that
        aborted the transaction is re-raised unchanged.

        Returns:
            The contact as read back from storage
        """
        phones = list(phones)

        async with self.storage.transaction():
            result = await self.storage.execute(
                insert(contacts_table).values(name=name, address=address, email=email)
            )
            contact_id = result.inserted_id
            await self._insert_phones(contact_id, phones)

        logger.info(
            "Contact created",
            extra={"contact_id": contact_id, "phone_count": len(phones)},
        )

        contact = await self.get(contact_id)
        if not contact:
            raise ContactNotFoundError(contact_id)
        return contact

    async def list(self, filters: Optional[ContactFilters] = None) -> List[Contact]:
        """
        List active contacts matching the filters, ordered by name.

        Args:
            filters: Optional substring constraints, ANDed together

        Returns:
            Every matching contact, each once
        """
        return await self.storage.fetch_all(self._filtered_query(filters))

    async def list_page(
        self,
        filters: Optional[ContactFilters] = None,
        page: int = 1,
        limit: int = 10,
    ) -> List[Contact]:
        """List one 1-indexed page of list(filters), pushed down as OFFSET/LIMIT."""
        query = self._filtered_query(filters).offset((page - 1) * limit).limit(limit)
        return await self.storage.fetch_all(query)

    async def count(self, filters: Optional[ContactFilters] = None) -> int:
        """Count active contacts matching the same predicate as list()."""
        return await self._count_where(*build_contact_predicates(filters))

    async def update(
        self,
        contact_id: int,
        name: Optional[str] = None,
        address: Optional[str] = None,
        email: Optional[str] = None,
        phones: Optional[Iterable[str]] = None,
    ) -> Contact:
        """
        Update an active contact.

        Only the given scalar fields change; updated_at is always stamped.
        When phones is given, the whole phone set is replaced.

        Raises:
            ContactNotFoundError: The contact is missing or soft-deleted
        """
        values = {
            key: value
            for key, value in (("name", name), ("address", address), ("email", email))
            if value is not None
        }
        values["updated_at"] = func.now()

        async with self.storage.transaction():
            found = await self.storage.fetch_value(
                select(Contact.id).where(Contact.id == contact_id, Contact.deleted_at.is_(None))
            )
            if found is None:
                raise ContactNotFoundError(contact_id)

            await self.storage.execute(
                update(contacts_table)
                .where(contacts_table.c.id == contact_id, contacts_table.c.deleted_at.is_(None))
                .values(**values)
            )

            if phones is not None:
                phones = list(phones)
                await self.storage.execute(delete(phones_table).where(phones_table.c.contact_id == contact_id))
                await self._insert_phones(contact_id, phones)

        logger.info(
            "Contact updated",
            extra={
                "contact_id": contact_id,
                "fields": sorted(key for key in values if key != "updated_at"),
                "phones_replaced": phones is not None,
            },
        )

        contact = await self.get(contact_id)
        if not contact:
            raise ContactNotFoundError(contact_id)
        return contact

    async def delete(self, contact_id: int) -> bool:
        """
        Soft-delete a contact by stamping deleted_at. Phone rows are kept.

        Raises:
            ContactNotFoundError: The contact is missing or already deleted
        """
        result = await self.storage.execute(
            update(contacts_table)
            .where(contacts_table.c.id == contact_id, contacts_table.c.deleted_at.is_(None))
            .values(deleted_at=func.now())
        )
        if result.rowcount == 0:
            raise ContactNotFoundError(contact_id)

        logger.info("Contact soft-deleted", extra={"contact_id": contact_id})
        return True

    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """
        Check whether an active contact holds this exact email.

        Args:
            email: Email to look up (case-sensitive)
            exclude_id: Contact to ignore, so an update can keep its own email
        """
        predicates = [Contact.email == email, Contact.deleted_at.is_(None)]
        if exclude_id is not None:
            predicates.append(Contact.id != exclude_id)
        return await self._exists_where(*predicates)

    async def phone_exists_for_contact(self, contact_id: int, phone_number: str) -> bool:
        """Check whether a contact already lists this phone number."""
        found = await self.storage.fetch_value(
            select(Phone.id).where(
                Phone.contact_id == contact_id,
                Phone.phone_number == phone_number,
            ).limit(1)
        )
        return found is not None
