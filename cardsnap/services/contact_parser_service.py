#!/usr/bin/env python3
"""
Contact Parsing Service
Infers a structured contact (name, phone, email, company) from raw OCR text
using an ordered chain of line classification rules.
"""

import re
import structlog
from enum import Enum
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from cardsnap.core.config import settings
from cardsnap.schemas.contact import ContactRecord
from cardsnap.services.text_normalizer import TextNormalizer

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
# Separators are horizontal only so a number never spans two OCR lines
PHONE_PATTERN = re.compile(r'(\+?\d{1,3}[ \t.\-]?)?\(?\d{3}\)?[ \t.\-]?\d{3}[ \t.\-]?\d{4}')
PHONE_ALT_PATTERN = re.compile(
    r'(\+?\d{1,4}[ \t.\-]?)?\(?\d{2,4}\)?[ \t.\-]?\d{2,4}[ \t.\-]?\d{2,4}[ \t.\-]?\d{0,4}'
)
URL_PATTERN = re.compile(r'https?://\S+')
PLUS_DIGIT_PATTERN = re.compile(r'\+\d')
WWW_PATTERN = re.compile(r'www\.', re.IGNORECASE)
LONG_DIGIT_RUN = re.compile(r'\d{7,}')
STATE_ZIP_PATTERN = re.compile(r'\b[A-Z]{2}\s+\d{5}\b')
ZIP_PATTERN = re.compile(r'\b\d{5}\b')
STREET_SUFFIX_PATTERN = re.compile(
    r'\b(street|st|avenue|ave|road|rd|boulevard|blvd|drive|dr|lane|ln|way|circle|ct)\b',
    re.IGNORECASE,
)
PHONE_SEPARATORS = re.compile(r'[\s\-.()]')
LINE_BREAK = re.compile(r'\r\n|\r|\n')

WEBSITE_MARKERS = ('www.', '.com', '.net', '.org')
COMPANY_KEYWORDS = (
    'inc', 'ltd', 'llc', 'corp', 'pvt', 'limited', 'incorporated', 'company',
    'co.', 'group', 'solutions', 'systems', 'services', 'agency',
)
TITLE_KEYWORDS = (
    'agent', 'manager', 'director', 'executive', 'president', 'ceo', 'cfo', 'cto',
    'vp', 'vice president', 'specialist', 'consultant', 'advisor', 'representative',
    'assistant', 'coordinator',
)
REAL_ESTATE_MARKERS = ('real estate', 'realestate')


class LineKind(str, Enum):
    """What a single OCR line most likely holds"""
    EMAIL = "email"
    PHONE = "phone"
    WEBSITE = "website"
    ADDRESS = "address"
    COMPANY = "company"
    TITLE = "title"
    NAME = "name"
    NAME_OR_COMPANY = "name_or_company"
    UNKNOWN = "unknown"


class ClassifiedLine(BaseModel):
    """A cleaned line with the kind and strength of the rule that matched it"""
    text: str
    kind: LineKind = LineKind.UNKNOWN
    confidence: int = Field(default=0, ge=0, le=10)


def _is_email_line(line: str) -> bool:
    return '@' in line or EMAIL_PATTERN.search(line) is not None


def _is_phone_line(line: str) -> bool:
    return (
        '+' in line
        or LONG_DIGIT_RUN.search(line) is not None
        or PHONE_PATTERN.search(line) is not None
        or PHONE_ALT_PATTERN.search(line) is not None
    )


def _is_website_line(line: str) -> bool:
    lower_line = line.lower()
    return URL_PATTERN.search(line) is not None or any(m in lower_line for m in WEBSITE_MARKERS)


def _is_address_line(line: str) -> bool:
    return (
        STATE_ZIP_PATTERN.search(line) is not None
        or ZIP_PATTERN.search(line) is not None
        or STREET_SUFFIX_PATTERN.search(line) is not None
    )


def _has_company_keyword(line: str) -> bool:
    lower_line = line.lower()
    return any(keyword in lower_line for keyword in COMPANY_KEYWORDS)


def _has_title_keyword(line: str) -> bool:
    lower_line = line.lower()
    return any(keyword in lower_line for keyword in TITLE_KEYWORDS)


def _is_real_estate_title(line: str) -> bool:
    lower_line = line.lower()
    return _has_title_keyword(line) and any(m in lower_line for m in REAL_ESTATE_MARKERS)


def _looks_like_proper_noun_phrase(line: str) -> bool:
    words = line.split()
    return (
        len(words) >= 2
        and all('A' <= word[0] <= 'Z' for word in words)
        and not any(ch.isdigit() for ch in line)
        and 3 <= len(line) <= 40
    )


def _is_name_line(line: str) -> bool:
    return len(line.split()) == 2 and _looks_like_proper_noun_phrase(line)


# First match wins. Later rules rely on earlier ones having consumed their
# lines, e.g. the name rules never re-check for phone numbers.
CLASSIFICATION_RULES: List[Tuple[Callable[[str], bool], LineKind, int]] = [
    (_is_email_line, LineKind.EMAIL, 10),
    (_is_phone_line, LineKind.PHONE, 10),
    (_is_website_line, LineKind.WEBSITE, 9),
    (_is_address_line, LineKind.ADDRESS, 8),
    (_has_company_keyword, LineKind.COMPANY, 10),
    (_is_real_estate_title, LineKind.COMPANY, 8),
    (_has_title_keyword, LineKind.TITLE, 7),
    (_is_name_line, LineKind.NAME, 9),
    (_looks_like_proper_noun_phrase, LineKind.NAME_OR_COMPANY, 6),
]


class ContactParserService:
    """Service for turning business card OCR text into a ContactRecord"""

    def __init__(
        self,
        normalizer: Optional[TextNormalizer] = None,
        single_line_split_length: Optional[int] = None,
        strip_us_country_code: Optional[bool] = None,
    ):
        self.logger = logger
        self.normalizer = normalizer or TextNormalizer()
        self.single_line_split_length = (
            settings.SINGLE_LINE_SPLIT_LENGTH if single_line_split_length is None
            else single_line_split_length
        )
        self.strip_us_country_code = (
            settings.STRIP_US_COUNTRY_CODE if strip_us_country_code is None
            else strip_us_country_code
        )

    def infer(self, raw_text: Optional[str]) -> ContactRecord:
        """Best-guess contact from raw OCR text.

        Never raises: any unexpected fault is logged and an all-empty
        record is returned so the caller can ask the user instead.
        """
        if not raw_text:
            return ContactRecord()

        try:
            return self._infer(raw_text)
        except Exception as e:
            self.logger.error("Contact inference failed", err=str(e), exc_info=True)
            return ContactRecord()

    def classify_line(self, line: str) -> ClassifiedLine:
        """Classify one cleaned line with the first rule that matches"""
        for predicate, kind, confidence in CLASSIFICATION_RULES:
            if predicate(line):
                return ClassifiedLine(text=line, kind=kind, confidence=confidence)
        return ClassifiedLine(text=line)

    def split_single_line(self, line: str) -> List[str]:
        """Re-split a line that OCR flattened from a multi-column card.

        Cuts happen where an email, a phone number and a website start.
        Returns ``[line]`` unchanged when fewer than two segments come out.
        """
        offsets = []

        email_match = EMAIL_PATTERN.search(line)
        if email_match:
            offsets.append(email_match.start())

        phone_match = PHONE_PATTERN.search(line) or PLUS_DIGIT_PATTERN.search(line)
        if phone_match:
            offsets.append(phone_match.start())

        website_match = URL_PATTERN.search(line) or WWW_PATTERN.search(line)
        if website_match:
            offsets.append(website_match.start())

        segments = []
        last = 0
        for offset in sorted(offsets):
            if offset > last:
                segment = line[last:offset].strip()
                if segment:
                    segments.append(segment)
            last = offset
        remaining = line[last:].strip()
        if remaining:
            segments.append(remaining)

        if len(segments) < 2:
            return [line]

        cleaned = [self.normalizer.normalize(segment) for segment in segments]
        return [segment for segment in cleaned if segment]

    def _infer(self, raw_text: str) -> ContactRecord:
        # Line breaks are kept so blank lines between card blocks don't merge them
        cleaned_text = '\n'.join(
            self.normalizer.normalize(raw_line) for raw_line in LINE_BREAK.split(raw_text)
        )

        email = ""
        email_match = EMAIL_PATTERN.search(cleaned_text)
        if email_match:
            email = email_match.group().strip().lower()

        phone = ""
        phone_match = PHONE_PATTERN.search(cleaned_text) or PHONE_ALT_PATTERN.search(cleaned_text)
        if phone_match:
            phone = phone_match.group().strip()

        lines = [self.normalizer.normalize(line.strip()) for line in cleaned_text.split('\n')]
        lines = [line for line in lines if line]

        if len(lines) == 1 and len(lines[0]) > self.single_line_split_length:
            lines = self.split_single_line(lines[0])
            if len(lines) > 1:
                self.logger.debug("Split flattened OCR line", segments=len(lines))

        classified = [self.classify_line(line) for line in lines]
        self.logger.debug("Classified OCR lines",
                          kinds=[cl.kind.value for cl in classified])

        name = self._resolve_name(classified)
        company = self._resolve_company(classified, name)

        if not company:
            fallback = next(
                (cl for cl in classified
                 if cl.kind == LineKind.TITLE
                 or (cl.kind == LineKind.COMPANY and cl.confidence >= 7)),
                None,
            )
            if fallback:
                company = fallback.text

        contact = ContactRecord(
            name=self.normalizer.normalize(name),
            phone=self._clean_phone(phone),
            email=email.strip().lower(),
            company=self.normalizer.normalize(company),
        )
        self.logger.info("Contact inferred",
                         lines=len(lines),
                         has_name=bool(contact.name),
                         has_phone=bool(contact.phone),
                         has_email=bool(contact.email),
                         has_company=bool(contact.company))
        return contact

    def _resolve_name(self, classified: List[ClassifiedLine]) -> str:
        for kind, threshold in ((LineKind.NAME, 9), (LineKind.NAME_OR_COMPANY, 6)):
            for cl in classified:
                if cl.kind == kind and cl.confidence >= threshold:
                    return self.normalizer.normalize(cl.text)
        return ""

    def _resolve_company(self, classified: List[ClassifiedLine], name: str) -> str:
        candidates = [
            cl for cl in classified
            if (cl.kind == LineKind.COMPANY and cl.confidence >= 8)
            or (cl.kind == LineKind.TITLE and cl.confidence >= 7)
        ]
        if candidates:
            chosen = next((cl for cl in candidates if cl.kind == LineKind.COMPANY), candidates[0])
            return self.normalizer.normalize(chosen.text)

        for cl in classified:
            if cl.kind == LineKind.NAME_OR_COMPANY and cl.text != name and cl.confidence >= 6:
                return self.normalizer.normalize(cl.text)
        return ""

    def _clean_phone(self, phone: str) -> str:
        phone = PHONE_SEPARATORS.sub('', phone)
        if self.strip_us_country_code and phone.startswith('+1'):
            phone = phone[2:]
        return phone


contact_parser_service = ContactParserService()
