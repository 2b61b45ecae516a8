"""
Normalization Module for the CMS-1500 / HL7 Converter.

This module provides:
    - Date normalization to the wire format's YYYYMMDD token
    - OCR text cleaning
    - Date part validation for extracted values
"""

from .dates import DateNormalizer, normalize_date
from .text import clean_ocr_text, clean_value
from .validators import DateValidator

__all__ = [
    'DateNormalizer',
    'normalize_date',
    'clean_ocr_text',
    'clean_value',
    'DateValidator'
]
