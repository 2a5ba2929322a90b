"""
Contact Store Service
Persists ContactRecords and supports listing, search and event-tag filtering
"""

import structlog
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from cardsnap.models.contact import Contact
from cardsnap.schemas.contact import ContactRecord

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("name", "phone", "email", "company", "event_tag")


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ContactStoreService:
    """Database-backed contact store"""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logger

    def _newest_first(self, query):
        return query.order_by(Contact.created_at.desc(), Contact.id.desc())

    def save_contact(self, record: ContactRecord, image_ref: Optional[str] = None) -> Contact:
        """Insert a record and return the stored row"""
        contact = Contact(
            name=record.name,
            phone=record.phone,
            email=record.email,
            company=record.company,
            event_tag=record.event_tag,
            image_ref=image_ref,
        )
        self.db.add(contact)
        self.db.commit()
        self.db.refresh(contact)
        self.logger.info("Contact saved", contact_id=contact.id)
        return contact

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        return self.db.get(Contact, contact_id)

    def list_contacts(self) -> List[Contact]:
        return self._newest_first(self.db.query(Contact)).all()

    def update_contact(self, contact_id: int, updates: Dict[str, Any]) -> Optional[Contact]:
        """Apply field updates; None values and unknown keys are ignored"""
        contact = self.get_contact(contact_id)
        if contact is None:
            return None

        for field, value in updates.items():
            if field in UPDATABLE_FIELDS and value is not None:
                setattr(contact, field, value)

        self.db.commit()
        self.db.refresh(contact)
        self.logger.info("Contact updated", contact_id=contact_id)
        return contact

    def delete_contact(self, contact_id: int) -> bool:
        contact = self.get_contact(contact_id)
        if contact is None:
            return False
        self.db.delete(contact)
        self.db.commit()
        self.logger.info("Contact deleted", contact_id=contact_id)
        return True

    def clear_contacts(self) -> int:
        removed = self.db.query(Contact).delete()
        self.db.commit()
        self.logger.info("Contacts cleared", removed=removed)
        return removed

    def search_contacts(self, query: Optional[str]) -> List[Contact]:
        """Substring search over name, email, company (case-insensitive) and phone"""
        if not query or not query.strip():
            return self.list_contacts()

        pattern = _like_pattern(query.strip())
        matches = self.db.query(Contact).filter(
            or_(
                Contact.name.ilike(pattern, escape="\\"),
                Contact.email.ilike(pattern, escape="\\"),
                Contact.company.ilike(pattern, escape="\\"),
                Contact.phone.like(pattern, escape="\\"),
            )
        )
        return self._newest_first(matches).all()

    def filter_by_event(self, event_tag: Optional[str]) -> List[Contact]:
        if not event_tag:
            return self.list_contacts()
        return self._newest_first(
            self.db.query(Contact).filter(Contact.event_tag == event_tag)
        ).all()

    def get_event_tags(self) -> List[str]:
        rows = (
            self.db.query(Contact.event_tag)
            .filter(Contact.event_tag != "")
            .distinct()
            .order_by(Contact.event_tag)
            .all()
        )
        return [row[0] for row in rows]
