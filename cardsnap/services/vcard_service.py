#!/usr/bin/env python3
"""
vCard Service
Encodes and decodes ContactRecords as vCard 3.0 text, for export and for
contacts recovered from QR codes.
"""

import re
import structlog
from typing import Iterable, List, Optional

from cardsnap.schemas.contact import ContactRecord

logger = structlog.get_logger(__name__)

CRLF = '\r\n'
LINE_SPLIT = re.compile(r'[\r\n]+')
COMPONENT_SPLIT = re.compile(r'(?<!\\);')
VCARD_START = re.compile(r'BEGIN:VCARD', re.IGNORECASE)
ENCODE_PHONE_STRIP = re.compile(r'[\s\-()]')


def escape(value: Optional[str]) -> str:
    """Escape a vCard property value"""
    if not value:
        return ''
    return (
        str(value)
        .replace('\\', '\\\\')
        .replace(';', '\\;')
        .replace(',', '\\,')
        .replace('\n', '\\n')
        .replace('\r', '')
    )


def unescape(value: Optional[str]) -> str:
    """Inverse of ``escape``"""
    if not value:
        return ''
    return (
        str(value)
        .replace('\\n', '\n')
        .replace('\\,', ',')
        .replace('\\;', ';')
        .replace('\\\\', '\\')
    )


class VCardService:
    """Service for vCard 3.0 generation and parsing"""

    def __init__(self):
        self.logger = logger

    def encode(self, record: ContactRecord) -> str:
        """Serialize a record to a single vCard, CRLF line endings"""
        lines = ['BEGIN:VCARD', 'VERSION:3.0']

        if record.name:
            lines.append(f"FN:{escape(record.name)}")
            name_parts = record.name.split()
            if len(name_parts) > 1:
                lines.append(f"N:{escape(name_parts[-1])};{escape(' '.join(name_parts[:-1]))};;;")
            else:
                lines.append(f"N:{escape(record.name)};;;")

        if record.phone:
            lines.append(f"TEL;TYPE=CELL:{escape(ENCODE_PHONE_STRIP.sub('', record.phone))}")

        if record.email:
            lines.append(f"EMAIL;TYPE=INTERNET:{escape(record.email)}")

        if record.company:
            lines.append(f"ORG:{escape(record.company)}")

        if record.event_tag:
            lines.append(f"X-EVENT-TAG:{escape(record.event_tag)}")

        lines.append('END:VCARD')
        return CRLF.join(lines)

    def decode(self, text: Optional[str]) -> ContactRecord:
        """Parse vCard text into a record.

        Lines without a ``:`` are skipped. FN, N, ORG and X-EVENT-TAG
        overwrite earlier values; the first TEL and EMAIL win.
        """
        fields = {
            "name": "",
            "phone": "",
            "email": "",
            "company": "",
            "event_tag": "",
        }

        if not text:
            return ContactRecord(**fields)

        for line in LINE_SPLIT.split(text):
            if not line.strip() or line.upper().startswith(('BEGIN', 'END')):
                continue

            field_part, sep, value = line.partition(':')
            if not sep or not field_part or not value:
                self.logger.debug("Skipping malformed vCard line", line=line[:50])
                continue

            field = field_part.split(';', 1)[0].strip().upper()

            if field == 'FN':
                fields["name"] = unescape(value)
            elif field == 'N':
                parts = COMPONENT_SPLIT.split(value)
                if len(parts) >= 2:
                    fields["name"] = f"{unescape(parts[1])} {unescape(parts[0])}".strip()
                elif parts[0]:
                    fields["name"] = unescape(parts[0])
            elif field == 'TEL':
                if not fields["phone"]:
                    fields["phone"] = unescape(value)
            elif field == 'EMAIL':
                if not fields["email"]:
                    fields["email"] = unescape(value)
            elif field == 'ORG':
                fields["company"] = unescape(value)
            elif field == 'X-EVENT-TAG':
                fields["event_tag"] = unescape(value)

        return ContactRecord(**fields)

    def encode_batch(self, records: Iterable[ContactRecord]) -> str:
        """Serialize several records into one .vcf document"""
        return (CRLF * 2).join(self.encode(record) for record in records)

    def decode_batch(self, text: Optional[str]) -> List[ContactRecord]:
        """Parse every vCard found in ``text``"""
        if not text:
            return []

        starts = [match.start() for match in VCARD_START.finditer(text)]
        blocks = [text[start:end] for start, end in zip(starts, starts[1:] + [len(text)])]
        self.logger.debug("Decoding vCard batch", cards=len(blocks))
        return [self.decode(block) for block in blocks]


vcard_service = VCardService()
