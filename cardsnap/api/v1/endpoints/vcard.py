"""
vCard endpoints
"""

from fastapi import APIRouter, Response
from typing import List

from cardsnap.schemas.contact import ContactRecord, TextPayload
from cardsnap.services.vcard_service import VCardService

router = APIRouter()

vcard_service = VCardService()


@router.post("/encode")
async def encode_vcard(contact: ContactRecord):
    """Serialize a contact as vCard 3.0 text"""
    return Response(content=vcard_service.encode(contact), media_type="text/vcard")


@router.post("/decode", response_model=ContactRecord)
async def decode_vcard(payload: TextPayload):
    """Parse vCard text into a contact"""
    return vcard_service.decode(payload.text)


@router.post("/decode-batch", response_model=List[ContactRecord])
async def decode_vcard_batch(payload: TextPayload):
    """Parse every vCard in a .vcf document"""
    return vcard_service.decode_batch(payload.text)
