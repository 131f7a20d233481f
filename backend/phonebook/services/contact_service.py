"""
Contact service with business logic.
"""

import logging
from typing import List, Optional, Tuple

from phonebook.core.exceptions import ContactNotFoundError, EmailAlreadyInUseError
from phonebook.db.repositories.contact_filters import ContactFilters
from phonebook.db.repositories.contact_repository import ContactRepository
from phonebook.models.contact import Contact
from phonebook.schemas.contact import ContactCreate, ContactUpdate, ContactResponse
from phonebook.services.base_service import BaseService
from phonebook.utils.pagination import Pagination

logger = logging.getLogger(__name__)


class ContactService(BaseService):
    """Service for contact operations."""

    def __init__(self, contact_repo: ContactRepository):
        self.contact_repo = contact_repo

    async def create_contact(self, contact_data: ContactCreate) -> ContactResponse:
        """Create a new contact. The email must not belong to another active contact."""
        if await self.contact_repo.email_exists(contact_data.email):
            logger.info(f"Rejected contact creation, email in use: {contact_data.email}")
            raise EmailAlreadyInUseError(contact_data.email)

        contact = await self.contact_repo.create(
            name=contact_data.name,
            address=contact_data.address,
            email=contact_data.email,
            phones=contact_data.phones,
        )
        return self._to_response(contact)

    async def get_contact(self, contact_id: int) -> Optional[ContactResponse]:
        """Get contact by ID."""
        contact = await self.contact_repo.get(contact_id)
        if not contact:
            return None
        return self._to_response(contact)

    async def list_contacts(
        self,
        filters: Optional[ContactFilters] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ContactResponse], Pagination]:
        """List one page of contacts matching the filters, ordered by name."""
        total = await self.contact_repo.count(filters)
        pagination = Pagination(page=page, limit=limit, total=total)
        contacts = await self.contact_repo.list_page(filters, page=page, limit=limit)
        return [self._to_response(contact) for contact in contacts], pagination

    async def update_contact(
        self,
        contact_id: int,
        contact_data: ContactUpdate,
    ) -> ContactResponse:
        """
        Update a contact.

        Raises:
            ContactNotFoundError: The contact is missing or deleted
            EmailAlreadyInUseError: The new email belongs to another active contact
        """
        existing = await self.contact_repo.get(contact_id)
        if not existing:
            raise ContactNotFoundError(contact_id)

        update_dict = contact_data.model_dump(exclude_unset=True, exclude_none=True)

        email = update_dict.get("email")
        if email and email != existing.email:
            if await self.contact_repo.email_exists(email, exclude_id=contact_id):
                logger.info(f"Rejected contact {contact_id} update, email in use: {email}")
                raise EmailAlreadyInUseError(email)

        updated = await self.contact_repo.update(contact_id, **update_dict)
        return self._to_response(updated)

    async def delete_contact(self, contact_id: int) -> None:
        """
        Soft-delete a contact.

        Raises:
            ContactNotFoundError: The contact is missing or already deleted
        """
        await self.contact_repo.delete(contact_id)

    def _to_response(self, contact: Contact) -> ContactResponse:
        """Convert contact model to response schema."""
        return ContactResponse(
            id=contact.id,
            name=contact.name,
            address=contact.address,
            email=contact.email,
            phones=contact.phone_numbers,
            created_at=contact.created_at,
            updated_at=contact.updated_at,
        )
