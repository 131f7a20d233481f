"""
Contact Pydantic schemas for request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator
from typing import Annotated, Optional, List

from phonebook.schemas.weather import WeatherReport


PHONE_PATTERN = r"^[\d\s\-\(\)\+]+$"

# Digits, spaces, hyphens, parentheses and plus sign only
PhoneNumber = Annotated[str, Field(min_length=8, max_length=20, pattern=PHONE_PATTERN)]


def _reject_duplicate_phones(phones: Optional[List[str]]) -> Optional[List[str]]:
    if phones is not None and len(set(phones)) != len(phones):
        raise ValueError("Duplicate phone numbers are not allowed")
    return phones


class ContactCreate(BaseModel):
    """Schema for creating a contact."""
    name: str = Field(..., min_length=2, max_length=100)
    address: str = Field(..., min_length=5, max_length=200)
    email: EmailStr
    phones: List[PhoneNumber] = Field(..., min_length=1, max_length=5)

    class Config:
        str_strip_whitespace = True

    @field_validator("phones")
    @classmethod
    def unique_phones(cls, phones):
        return _reject_duplicate_phones(phones)


class ContactUpdate(BaseModel):
    """Schema for updating a contact (all fields optional, at least one required)."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    address: Optional[str] = Field(None, min_length=5, max_length=200)
    email: Optional[EmailStr] = None
    phones: Optional[List[PhoneNumber]] = Field(None, min_length=1, max_length=5)

    class Config:
        str_strip_whitespace = True

    @field_validator("phones")
    @classmethod
    def unique_phones(cls, phones):
        return _reject_duplicate_phones(phones)

    @model_validator(mode="after")
    def require_one_field(self):
        if all(getattr(self, field) is None for field in ("name", "address", "email", "phones")):
            raise ValueError("At least one field must be provided for update")
        return self


class ContactResponse(BaseModel):
    """Schema for contact response."""
    id: int
    name: str
    address: str
    email: str
    phones: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContactDetailResponse(ContactResponse):
    """Single contact with the weather suggestion for its address."""
    weather: WeatherReport


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""
    page: int
    limit: int
    total: int
    total_pages: int


class ContactListResponse(BaseModel):
    """Schema for contact list response."""
    items: List[ContactResponse]
    pagination: PaginationMeta


class ContactDeleteResponse(BaseModel):
    """Schema for contact deletion response."""
    message: str = "Contact deleted successfully"
