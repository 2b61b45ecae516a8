"""
Codec Module for the CMS-1500 / HL7 Converter.

This module provides:
    - Canonical record JSON loading and dumping
    - Record to wire-format encoding
    - Wire-format to record decoding
"""

from .record import CanonicalRecord, load_record, dump_record, copy_record
from .encoder import SegmentEncoder, encode
from .decoder import SegmentDecoder, decode

__all__ = [
    'CanonicalRecord',
    'load_record',
    'dump_record',
    'copy_record',
    'SegmentEncoder',
    'encode',
    'SegmentDecoder',
    'decode'
]
