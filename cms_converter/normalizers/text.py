"""
OCR Text Cleaning.

Tesseract output from a scanned claim form is full of box-drawing
debris, stray symbols and ragged line breaks. Field patterns are written
against a single-line, whitespace-collapsed rendition of the text with
only letters, digits and a small punctuation set left in it.
"""

import re

# Characters kept in cleaned OCR text besides letters, digits and spaces
ALLOWED_PUNCTUATION = ".,:;/#&()'-"

_WHITESPACE_RUN = re.compile(r'\s+')
# Underscores are dropped along with symbols
_DISALLOWED = re.compile(r"[^\w\s" + re.escape(ALLOWED_PUNCTUATION) + r"]|_")


def clean_ocr_text(text: str) -> str:
    """
    Collapse whitespace, drop characters outside the allow-list and trim.

    Example:
        >>> clean_ocr_text("PATIENT'S  NAME |  DOE, JANE\\n* 1a.")
        "PATIENT'S NAME DOE, JANE 1a."
    """
    if not text:
        return ""

    collapsed = _WHITESPACE_RUN.sub(' ', text)
    stripped = _DISALLOWED.sub('', collapsed)
    # Removing symbols can leave double spaces behind
    return _WHITESPACE_RUN.sub(' ', stripped).strip()


def clean_value(value: str) -> str:
    """
    Tidy a captured field value: collapse whitespace, strip edge punctuation.

    Example:
        >>> clean_value(" : DOE, JANE ,")
        "DOE, JANE"
    """
    if not value:
        return ""

    value = ' '.join(value.split())

    edge_chars = ':-.,;'
    while value and value[0] in edge_chars:
        value = value[1:].strip()
    while value and value[-1] in edge_chars:
        value = value[:-1].strip()

    return value
