"""
API v1 router configuration
"""

from fastapi import APIRouter
from cardsnap.api.v1.endpoints import contacts, vcard

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
api_router.include_router(vcard.router, prefix="/vcard", tags=["vcard"])
