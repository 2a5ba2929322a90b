"""
Contact database model
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from cardsnap.core.database import Base


class Contact(Base):
    """Contact model"""
    __tablename__ = "contacts"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=False, default="")
    email = Column(String(255), nullable=False, default="", index=True)
    company = Column(String(255), nullable=False, default="")
    event_tag = Column(String(255), nullable=False, default="", index=True)
    image_ref = Column(String(1024))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
