"""
OCR service for business card images
"""

import asyncio
import io
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import cv2
import numpy as np
import structlog
from PIL import Image

from cardsnap.core.config import settings
from cardsnap.services.contact_parser_service import ContactParserService

# OCR imports
try:
    import pytesseract
    TESSERACT_AVAILABLE = True
except ImportError:
    TESSERACT_AVAILABLE = False

logger = structlog.get_logger(__name__)


class OCRService:
    """Runs Tesseract on card images and hands the text to the contact parser"""

    def __init__(
        self,
        parser: Optional[ContactParserService] = None,
        max_dimension: Optional[int] = None,
        tesseract_config: Optional[str] = None,
    ):
        self.logger = logger
        self.executor = ThreadPoolExecutor(max_workers=3)
        self.parser = parser or ContactParserService()
        self.max_dimension = max_dimension or settings.OCR_MAX_DIMENSION
        self.tesseract_config = settings.TESSERACT_CONFIG if tesseract_config is None else tesseract_config
        self.available = TESSERACT_AVAILABLE
        if not self.available:
            self.logger.warning("⚠️ Tesseract not available, OCR disabled")

    def prepare_image(self, image_data: bytes) -> np.ndarray:
        """Load image bytes, downscale large images and convert to grayscale"""
        image = Image.open(io.BytesIO(image_data)).convert("RGB")
        cv_image = cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)

        height, width = cv_image.shape[:2]
        if width > self.max_dimension or height > self.max_dimension:
            scale = min(self.max_dimension / width, self.max_dimension / height)
            new_size = (int(width * scale), int(height * scale))
            cv_image = cv2.resize(cv_image, new_size, interpolation=cv2.INTER_AREA)
            self.logger.info(f"📏 Image resized for OCR: {width}x{height} → {new_size[0]}x{new_size[1]}")

        return cv2.cvtColor(cv_image, cv2.COLOR_BGR2GRAY)

    def _run_tesseract(self, gray_image: np.ndarray) -> str:
        pil_image = Image.fromarray(gray_image)
        return pytesseract.image_to_string(pil_image, config=self.tesseract_config)

    async def extract_text(self, image_data: bytes) -> Dict[str, Any]:
        """Extract raw text from a card image"""
        if not self.available:
            return {
                "success": False,
                "error": "Tesseract OCR is not installed",
                "text": "",
                "engine": "tesseract"
            }

        try:
            gray_image = self.prepare_image(image_data)
            loop = asyncio.get_running_loop()
            text = await loop.run_in_executor(self.executor, self._run_tesseract, gray_image)
            self.logger.info("✅ Tesseract OCR complete", text_length=len(text.strip()))
            return {
                "success": True,
                "text": text.strip(),
                "engine": "tesseract"
            }
        except Exception as e:
            self.logger.error("❌ OCR processing failed", err=str(e))
            return {
                "success": False,
                "error": str(e),
                "text": "",
                "engine": "tesseract"
            }

    async def process_business_card(self, image_data: bytes) -> Dict[str, Any]:
        """OCR a card image and infer a contact; failures yield an empty contact"""
        result = await self.extract_text(image_data)
        contact = self.parser.infer(result.get("text", ""))
        return {
            "success": result["success"],
            "contact": contact,
            "raw_text": result.get("text", ""),
            "error": result.get("error")
        }
