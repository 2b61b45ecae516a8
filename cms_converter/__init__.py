"""
CMS-1500 / HL7 Converter - Source Package.

Converts CMS-1500 health insurance claim data between a canonical
segment-keyed record and a pipe-delimited HL7 v2 style message, and
recovers claim records from scanned forms.

Modules:
    - codec: Record JSON I/O, encoder and decoder
    - schema: Positional segment tables and variants
    - normalizers: Date tokens, OCR text cleaning, date validation
    - extraction: Heuristic claim form field extraction, key/value intake
    - ocr_engine: Text recognition for PDFs and images
    - input_handler / output_handler: File intake and output
    - converter: Conversion service tying the above together

Architecture:
    Document → OCR → Extraction ─┐
    JSON record ─────────────────┼→ Encoder → Message
    Message → Decoder → Record ──┘
"""

__version__ = "1.0.0"

from .codec import encode, decode, load_record, dump_record
from .extraction import extract
from .converter import ConversionService, ConversionResult

__all__ = [
    'encode',
    'decode',
    'extract',
    'load_record',
    'dump_record',
    'ConversionService',
    'ConversionResult',
    '__version__'
]
