#!/usr/bin/env python3
"""
QR Code Detection and Contact Service
Finds QR codes in card images and turns vCard payloads into ContactRecords
"""

import cv2
import numpy as np
import structlog
from typing import Dict, List, Optional

from cardsnap.schemas.contact import ContactRecord
from cardsnap.services.vcard_service import VCardService

logger = structlog.get_logger(__name__)


class QRService:
    """Service for QR code detection and vCard payload handling"""

    def __init__(self, vcard_service: Optional[VCardService] = None):
        self.logger = logger
        self.vcard_service = vcard_service or VCardService()

    def detect_qr_codes(self, image_data: bytes) -> List[Dict[str, str]]:
        """Detect QR codes in the image, trying preprocessed variants if needed"""
        try:
            nparr = np.frombuffer(image_data, np.uint8)
            cv_image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
        except Exception as e:
            self.logger.warning("Failed to decode image", err=str(e))
            return []

        if cv_image is None:
            self.logger.warning("Failed to decode image")
            return []

        self.logger.info("🔍 Scanning image for QR codes", shape=cv_image.shape)

        qr_detector = cv2.QRCodeDetector()
        results = self._decode_variant(qr_detector, cv_image, "original")

        if not results:
            gray = cv2.cvtColor(cv_image, cv2.COLOR_BGR2GRAY)
            preprocessing_methods = [
                ("grayscale", lambda: gray),
                ("gaussian", lambda: cv2.GaussianBlur(gray, (3, 3), 0)),
                ("median", lambda: cv2.medianBlur(gray, 3)),
                ("threshold", lambda: cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1]),
                ("adaptive", lambda: cv2.adaptiveThreshold(
                    gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 11, 2)),
            ]
            for method_name, build in preprocessing_methods:
                try:
                    results = self._decode_variant(qr_detector, build(), method_name)
                except cv2.error as e:
                    self.logger.warning(f"Preprocessing method {method_name} failed", err=str(e))
                    continue
                if results:
                    break

        # Remove duplicates based on data content
        unique_results = []
        seen_data = set()
        for result in results:
            if result["data"] not in seen_data:
                seen_data.add(result["data"])
                unique_results.append(result)

        self.logger.info(f"✅ QR detection complete: {len(unique_results)} unique codes found")
        return unique_results

    def _decode_variant(self, qr_detector, image, method_name: str) -> List[Dict[str, str]]:
        results = []
        try:
            retval, decoded_list, _, _ = qr_detector.detectAndDecodeMulti(image)
        except cv2.error:
            retval, decoded_list = False, []
        if retval:
            for data in decoded_list:
                if data:
                    results.append({"data": data, "method": f"opencv_multi_{method_name}"})

        if not results:
            try:
                data, _, _ = qr_detector.detectAndDecode(image)
            except cv2.error:
                data = ""
            if data:
                results.append({"data": data, "method": f"opencv_single_{method_name}"})

        if results:
            self.logger.info(f"📱 QR codes detected ({method_name})", count=len(results))
        return results

    def is_vcard_payload(self, payload: Optional[str]) -> bool:
        """Whether a decoded QR payload carries a vCard"""
        if not payload:
            return False
        data = payload.strip()
        return data.startswith('BEGIN:VCARD') or 'BEGIN:VCARD' in data

    def contact_from_payload(self, payload: Optional[str]) -> Optional[ContactRecord]:
        """Decode a vCard payload; any other payload is not a contact"""
        if not self.is_vcard_payload(payload):
            return None
        return self.vcard_service.decode(payload.strip())

    def extract_contact(self, image_data: bytes) -> Optional[ContactRecord]:
        """Contact from the first vCard QR code in the image, if any"""
        for result in self.detect_qr_codes(image_data):
            contact = self.contact_from_payload(result["data"])
            if contact is not None:
                self.logger.info("📇 vCard QR code decoded", method=result["method"])
                return contact
        return None
