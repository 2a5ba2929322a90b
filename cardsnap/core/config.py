"""
Application configuration settings
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""
    
    # Application
    APP_NAME: str = "CardSnap Contact Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    
    # Database
    DATABASE_URL: str = "sqlite:///./cardsnap.db"
    
    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    
    # File Upload
    MAX_FILE_SIZE: int = 10485760  # 10MB
    
    # Contact inference
    SINGLE_LINE_SPLIT_LENGTH: int = 50  # single OCR lines longer than this get re-split
    STRIP_US_COUNTRY_CODE: bool = False
    
    # OCR
    OCR_MAX_DIMENSION: int = 1200
    TESSERACT_CONFIG: str = "--psm 6"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()
