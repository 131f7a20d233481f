"""
Contact controller.
"""

from typing import Optional

from phonebook.controllers.base_controller import BaseController
from phonebook.db.repositories.contact_filters import ContactFilters
from phonebook.services.contact_service import ContactService
from phonebook.services.weather_service import WeatherService
from phonebook.schemas.contact import (
    ContactCreate,
    ContactUpdate,
    ContactResponse,
    ContactDetailResponse,
    ContactListResponse,
    ContactDeleteResponse,
    PaginationMeta,
)


class ContactController(BaseController):
    """Controller for contact operations."""

    def __init__(self, contact_service: ContactService, weather_service: WeatherService):
        self.contact_service = contact_service
        self.weather_service = weather_service

    async def create_contact(self, contact_data: ContactCreate) -> ContactResponse:
        """Create a new contact."""
        return await self.contact_service.create_contact(contact_data)

    async def get_contact(self, contact_id: int) -> Optional[ContactDetailResponse]:
        """Get contact by ID, with a weather suggestion for its address."""
        contact = await self.contact_service.get_contact(contact_id)
        if not contact:
            return None

        weather = await self.weather_service.get_report(contact.address)
        return ContactDetailResponse(**contact.model_dump(), weather=weather)

    async def list_contacts(
        self,
        filters: Optional[ContactFilters] = None,
        page: int = 1,
        limit: int = 10,
    ) -> ContactListResponse:
        """List contacts with filters and pagination."""
        contacts, pagination = await self.contact_service.list_contacts(
            filters=filters,
            page=page,
            limit=limit,
        )
        return ContactListResponse(
            items=contacts,
            pagination=PaginationMeta(**pagination.to_dict()),
        )

    async def update_contact(
        self,
        contact_id: int,
        contact_data: ContactUpdate,
    ) -> ContactResponse:
        """Update a contact."""
        return await self.contact_service.update_contact(contact_id, contact_data)

    async def delete_contact(self, contact_id: int) -> ContactDeleteResponse:
        """Soft-delete a contact."""
        await self.contact_service.delete_contact(contact_id)
        return ContactDeleteResponse()
