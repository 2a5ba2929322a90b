"""
Contact endpoints: inference from OCR text, card scanning and the record store
"""

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional
import structlog

from cardsnap.core.config import settings
from cardsnap.core.database import get_db
from cardsnap.schemas.contact import (
    ContactRecord,
    ContactResponse,
    ContactUpdate,
    ScanResponse,
    TextPayload,
)
from cardsnap.services.contact_parser_service import ContactParserService
from cardsnap.services.contact_store_service import ContactStoreService
from cardsnap.services.ocr_service import OCRService
from cardsnap.services.qr_service import QRService
from cardsnap.services.vcard_service import VCardService

router = APIRouter()
logger = structlog.get_logger(__name__)

# Initialize services
contact_parser = ContactParserService()
ocr_service = OCRService(parser=contact_parser)
qr_service = QRService()
vcard_service = VCardService()

VCARD_MEDIA_TYPE = "text/vcard"


def get_store(db: Session = Depends(get_db)) -> ContactStoreService:
    return ContactStoreService(db)


@router.post("/parse-text", response_model=ContactRecord)
async def parse_text(payload: TextPayload):
    """Infer a contact from raw OCR text"""
    return contact_parser.infer(payload.text)


@router.post("/scan", response_model=ScanResponse)
async def scan_card(file: UploadFile = File(...)):
    """Scan a card image: a vCard QR code wins, otherwise OCR the printed text"""
    if not file.content_type or not file.content_type.startswith('image/'):
        raise HTTPException(status_code=400, detail="File must be an image")

    content = await file.read()
    if len(content) > settings.MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail="Image too large")

    qr_contact = qr_service.extract_contact(content)
    if qr_contact is not None:
        logger.info("Card scanned", filename=file.filename, source="qr")
        return ScanResponse(source="qr", contact=qr_contact)

    result = await ocr_service.process_business_card(content)
    logger.info("Card scanned",
                filename=file.filename,
                source="ocr",
                success=result["success"])
    return ScanResponse(
        source="ocr",
        contact=result["contact"],
        raw_text=result["raw_text"],
        error=result["error"]
    )


@router.get("/", response_model=List[ContactResponse])
async def get_contacts(
    q: Optional[str] = Query(None, description="Substring to search for"),
    event_tag: Optional[str] = Query(None, description="Only contacts with this event tag"),
    store: ContactStoreService = Depends(get_store)
):
    """List contacts, newest first"""
    contacts = store.search_contacts(q)
    if event_tag:
        contacts = [contact for contact in contacts if contact.event_tag == event_tag]
    return contacts


@router.post("/", response_model=ContactResponse, status_code=201)
async def create_contact(
    contact: ContactRecord,
    image_ref: Optional[str] = Query(None, description="Opaque reference to the card image"),
    store: ContactStoreService = Depends(get_store)
):
    """Save a contact"""
    return store.save_contact(contact, image_ref=image_ref)


@router.delete("/")
async def clear_contacts(store: ContactStoreService = Depends(get_store)):
    """Delete every stored contact"""
    return {"deleted": store.clear_contacts()}


@router.get("/tags", response_model=List[str])
async def get_event_tags(store: ContactStoreService = Depends(get_store)):
    """Distinct event tags in use"""
    return store.get_event_tags()


@router.get("/export")
async def export_contacts(
    event_tag: Optional[str] = Query(None, description="Only export contacts with this event tag"),
    store: ContactStoreService = Depends(get_store)
):
    """Export stored contacts as one .vcf document"""
    contacts = store.filter_by_event(event_tag)
    records = [ContactRecord.model_validate(contact, from_attributes=True) for contact in contacts]
    return Response(
        content=vcard_service.encode_batch(records),
        media_type=VCARD_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="contacts.vcf"'}
    )


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(contact_id: int, store: ContactStoreService = Depends(get_store)):
    """Get contact by ID"""
    contact = store.get_contact(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.get("/{contact_id}/vcard")
async def get_contact_vcard(contact_id: int, store: ContactStoreService = Depends(get_store)):
    """Download a single contact as a vCard"""
    contact = store.get_contact(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    record = ContactRecord.model_validate(contact, from_attributes=True)
    return Response(content=vcard_service.encode(record), media_type=VCARD_MEDIA_TYPE)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    updates: ContactUpdate,
    store: ContactStoreService = Depends(get_store)
):
    """Update contact"""
    contact = store.update_contact(contact_id, updates.model_dump(exclude_unset=True))
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.delete("/{contact_id}")
async def delete_contact(contact_id: int, store: ContactStoreService = Depends(get_store)):
    """Delete contact"""
    if not store.delete_contact(contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"deleted": True}
