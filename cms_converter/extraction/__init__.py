"""
Extraction Module for the CMS-1500 / HL7 Converter.

This module provides:
    - Heuristic field extraction from claim form OCR text
    - The default CMS-1500 field table
    - Key/value form intake
"""

from .field_spec import FieldSpec, split_target
from .extraction_result import ExtractionResult
from .cms1500_fields import (
    EXTRACTION_QUORUM,
    MIN_TEXT_LENGTH,
    DOCUMENT_KEYWORDS,
    DEFAULT_SENTINELS,
    default_field_specs,
    header_record
)
from .extractor import FieldExtractor, extract
from .key_value import parse_key_value_text, KeyValueMapper, key_value_to_record

__all__ = [
    'FieldSpec',
    'split_target',
    'ExtractionResult',
    'EXTRACTION_QUORUM',
    'MIN_TEXT_LENGTH',
    'DOCUMENT_KEYWORDS',
    'DEFAULT_SENTINELS',
    'default_field_specs',
    'header_record',
    'FieldExtractor',
    'extract',
    'parse_key_value_text',
    'KeyValueMapper',
    'key_value_to_record'
]
