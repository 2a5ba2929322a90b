"""
Contact Pydantic schemas
"""

from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class ContactRecord(BaseModel):
    """Structured contact produced by OCR inference or vCard decoding.

    Every field is a string and defaults to "" when it could not be
    resolved. Records are frozen; use ``model_copy(update=...)`` to edit.
    """
    name: str = ""
    phone: str = ""
    email: str = ""
    company: str = ""
    event_tag: str = ""

    @field_validator("name", "phone", "email", "company", "event_tag", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    def is_empty(self) -> bool:
        """True when nothing could be inferred and the user must fill it in"""
        return not any((self.name, self.phone, self.email, self.company, self.event_tag))

    class Config:
        frozen = True


class ContactUpdate(BaseModel):
    """Contact update schema"""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    event_tag: Optional[str] = None


class ContactResponse(ContactRecord):
    """Stored contact response schema"""
    id: int
    image_ref: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TextPayload(BaseModel):
    """Raw OCR text or a raw vCard string"""
    text: str = ""


class ScanResponse(BaseModel):
    """Result of scanning a business card image"""
    source: str
    contact: ContactRecord
    raw_text: str = ""
    error: Optional[str] = None
