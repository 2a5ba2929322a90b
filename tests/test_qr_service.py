"""
Tests for QR payload handling and the OpenCV detector adapter.
"""

import pytest

from cardsnap.schemas.contact import ContactRecord
from cardsnap.services.qr_service import QRService


@pytest.fixture
def service():
    return QRService()


class TestPayloads:

    def test_vcard_detection(self, service, sample_vcard):
        assert service.is_vcard_payload(sample_vcard)
        assert service.is_vcard_payload("  \n" + sample_vcard)
        assert service.is_vcard_payload("MECARD prefix BEGIN:VCARD\nFN:Jane\nEND:VCARD")

    @pytest.mark.parametrize("payload", [None, "", "https://acme.com", "WIFI:T:WPA;S:net;;"])
    def test_non_vcard_payloads(self, service, payload):
        assert not service.is_vcard_payload(payload)
        assert service.contact_from_payload(payload) is None

    def test_contact_from_payload(self, service, sample_vcard):
        contact = service.contact_from_payload("\n  " + sample_vcard + "\n")
        assert contact.name == "Jane Doe"
        assert contact.phone == "+14155552671"
        assert contact.event_tag == "WebSummit"


class TestDetection:

    def test_undecodable_bytes(self, service):
        assert service.detect_qr_codes(b"not an image") == []

    def test_blank_image_has_no_codes(self, service, blank_png):
        assert service.detect_qr_codes(blank_png) == []
        assert service.extract_contact(blank_png) is None

    def test_extract_contact_skips_non_vcard_codes(self, service, sample_vcard, monkeypatch):
        monkeypatch.setattr(service, "detect_qr_codes", lambda image_data: [
            {"data": "https://acme.com", "method": "opencv_single_original"},
            {"data": sample_vcard, "method": "opencv_single_original"},
        ])
        contact = service.extract_contact(b"ignored")
        assert isinstance(contact, ContactRecord)
        assert contact.email == "jane@acme.com"
