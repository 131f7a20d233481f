"""
Contact API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, HTTPException, status

from phonebook.controllers.contact_controller import ContactController
from phonebook.db.repositories.contact_filters import ContactFilters
from phonebook.deps.di_container import get_contact_controller
from phonebook.schemas.contact import (
    ContactCreate,
    ContactUpdate,
    ContactResponse,
    ContactDetailResponse,
    ContactListResponse,
    ContactDeleteResponse,
)
from phonebook.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter()


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    contact_data: ContactCreate,
    controller: ContactController = Depends(get_contact_controller),
) -> ContactResponse:
    """Create a new contact with its phone numbers."""
    return await controller.create_contact(contact_data)


@router.get("", response_model=ContactListResponse)
async def list_contacts(
    name: Optional[str] = Query(None, max_length=100),
    address: Optional[str] = Query(None, max_length=200),
    email: Optional[str] = Query(None, max_length=255),
    phone: Optional[str] = Query(None, max_length=20),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    controller: ContactController = Depends(get_contact_controller),
) -> ContactListResponse:
    """List active contacts ordered by name, filtered by case-insensitive substrings."""
    filters = ContactFilters.from_mapping({
        "name": name.strip() if name else None,
        "address": address.strip() if address else None,
        "email": email.strip() if email else None,
        "phone": phone.strip() if phone else None,
    })
    return await controller.list_contacts(filters=filters, page=page, limit=limit)


@router.get("/{contact_id}", response_model=ContactDetailResponse)
async def get_contact(
    contact_id: int,
    controller: ContactController = Depends(get_contact_controller),
) -> ContactDetailResponse:
    """Get contact by ID, including a weather suggestion for its address."""
    contact = await controller.get_contact(contact_id)
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact not found",
        )
    return contact


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    contact_data: ContactUpdate,
    controller: ContactController = Depends(get_contact_controller),
) -> ContactResponse:
    """Update a contact. A supplied phone list replaces the existing one."""
    return await controller.update_contact(contact_id, contact_data)


@router.delete("/{contact_id}", response_model=ContactDeleteResponse)
async def delete_contact(
    contact_id: int,
    controller: ContactController = Depends(get_contact_controller),
) -> ContactDeleteResponse:
    """Soft-delete a contact."""
    return await controller.delete_contact(contact_id)
