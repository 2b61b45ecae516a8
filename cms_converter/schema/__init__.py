"""
Segment Schema Module for the CMS-1500 / HL7 Converter.

This module provides:
    - Positional field mapping tables per segment type
    - A fluent builder and a configuration-table loader
    - The built-in claim message variants
"""

from .segment_schema import (
    FieldMapping,
    SegmentDefinition,
    SegmentSchema,
    SchemaBuilder,
    TRANSFORMS,
    generic_field_name,
    generic_position,
)
from .variants import VARIANTS, get_schema, build_cms1500_schema, build_cms1500_legacy_schema

__all__ = [
    'FieldMapping',
    'SegmentDefinition',
    'SegmentSchema',
    'SchemaBuilder',
    'TRANSFORMS',
    'generic_field_name',
    'generic_position',
    'VARIANTS',
    'get_schema',
    'build_cms1500_schema',
    'build_cms1500_legacy_schema'
]
