#!/usr/bin/env python3
"""
Text Normalization Service
Cleans raw OCR output of scanner artifacts before contact inference
"""

import re
from typing import Optional

# Hyphen, non-breaking hyphen, figure dash, en/em dash, horizontal bar, minus sign,
# small and fullwidth hyphen-minus
DASH_CHARS = re.compile(r'[\u2010-\u2015\u2212\ufe58\ufe63\uff0d]')

# Anything outside letters, digits, @ . + , - and whitespace at either end of the text
EDGE_JUNK = re.compile(r'^[^a-zA-Z0-9@.+,\s\-]+|[^a-zA-Z0-9@.+,\s\-]+\Z')

# Common OCR garbage punctuation, minus "+" which starts phone country codes
GARBAGE_PUNCTUATION = re.compile(r'[{}>\])(_=\u2022|\\/~]+')

REPEATED_DASHES = re.compile(r'[-_]{2,}')
REPEATED_WHITESPACE = re.compile(r'\s{2,}')
NON_ASCII = re.compile(r'[^\x00-\x7F]+')
DISALLOWED = re.compile(r'[^\w\s@.+,\-]', re.ASCII)


class TextNormalizer:
    """Deterministic cleaner for noisy OCR text"""

    def normalize(self, raw: Optional[str]) -> str:
        """Return a canonical, parseable version of ``raw``.

        Total over strings: ``None`` or empty input gives "". Single
        newlines survive so callers can still split on line boundaries.
        """
        if not raw:
            return ""

        text = DASH_CHARS.sub('-', raw)
        text = EDGE_JUNK.sub('', text)
        text = GARBAGE_PUNCTUATION.sub(' ', text)
        text = REPEATED_DASHES.sub(' ', text)
        text = REPEATED_WHITESPACE.sub(' ', text)
        text = NON_ASCII.sub(' ', text)
        text = DISALLOWED.sub(' ', text)
        text = REPEATED_WHITESPACE.sub(' ', text)
        return text.strip()


text_normalizer = TextNormalizer()


def normalize(raw: Optional[str]) -> str:
    """Module-level shortcut for ``TextNormalizer.normalize``"""
    return text_normalizer.normalize(raw)
