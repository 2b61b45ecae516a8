"""
Conversion Service Module.

Ties the codec, the extractor and the OCR engine together into the
conversions the converter offers:

    json_to_hl7        canonical record JSON  ->  message (+ decoded preview)
    hl7_to_json        message                ->  canonical record
    text_to_hl7        claim form OCR text    ->  message
    document_to_hl7    scanned PDF / image    ->  message
    key_value_to_hl7   key: value form export ->  message

Usage:
    from cms_converter.converter import ConversionService

    service = ConversionService()
    result = service.hl7_to_json(open("claim.hl7").read())
    print(result.to_json())
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cms_converter.codec import CanonicalRecord, SegmentDecoder, SegmentEncoder, copy_record, load_record
from cms_converter.extraction import ExtractionResult, FieldExtractor, KeyValueMapper, parse_key_value_text
from cms_converter.schema import SegmentSchema, get_schema
from cms_converter.utils.exceptions import MalformedInputError
from cms_converter.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class ConversionResult:
    """
    Outcome of one conversion.

    Attributes:
        wire_text: Message text (encoded output, or the decoded input)
        record: Canonical record (decoded output, or the preview decoded
                back from the encoded message)
        source: Conversion that produced the result
        warnings: Non-fatal issues
        extraction: Extraction report for OCR-based conversions
    """
    wire_text: str
    record: CanonicalRecord
    source: str
    warnings: List[str] = field(default_factory=list)
    extraction: Optional[ExtractionResult] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        data = {
            'hl7': self.wire_text,
            'record': copy_record(self.record),
            'source': self.source,
            'warnings': list(self.warnings),
        }
        if self.extraction is not None:
            data['extraction'] = self.extraction.to_dict()
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


class ConversionService:
    """
    Runs conversions with one schema.

    The OCR engine is only created when a document conversion needs it,
    so text-only use does not require Tesseract.

    Example:
        >>> service = ConversionService()
        >>> result = service.json_to_hl7('{"PID": {"patientId": "12345"}}')
        >>> result.wire_text
        'PID|||12345'
    """

    def __init__(
        self,
        schema: Optional[SegmentSchema] = None,
        extractor: Optional[FieldExtractor] = None,
        ocr_engine=None
    ) -> None:
        """
        Initialize the service.

        Args:
            schema: Segment schema. If None, the configured variant is used.
            extractor: Field extractor. If None, the CMS-1500 defaults are used.
            ocr_engine: OCR engine with ``extract_text(data, filename)``.
        """
        self.schema = schema or get_schema()
        self.encoder = SegmentEncoder(self.schema)
        self.decoder = SegmentDecoder(self.schema)
        self._extractor = extractor
        self._ocr_engine = ocr_engine

        logger.debug(f"ConversionService initialized with schema '{self.schema.name}'")

    @property
    def extractor(self) -> FieldExtractor:
        """Get or create the field extractor."""
        if self._extractor is None:
            self._extractor = FieldExtractor()
        return self._extractor

    @property
    def ocr_engine(self):
        """Get or create the OCR engine."""
        if self._ocr_engine is None:
            from cms_converter.ocr_engine import OCREngine
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def json_to_hl7(self, json_text: str) -> ConversionResult:
        """
        Encode a canonical record given as JSON.

        Args:
            json_text: JSON object of segment key to field map.

        Returns:
            ConversionResult with the message and its decoded preview.

        Raises:
            MalformedInputError: If the JSON cannot be parsed.
        """
        record = load_record(json_text, source="json")
        wire_text = self.encoder.encode(record)
        preview = self.decoder.decode(wire_text)

        logger.info(f"Encoded {len(record)} segment(s) from JSON")
        return ConversionResult(wire_text, preview, "json")

    def hl7_to_json(self, wire_text: str) -> ConversionResult:
        """
        Decode a message into a canonical record.

        Raises:
            MalformedInputError: If the message is empty.
        """
        if not wire_text or not wire_text.strip():
            raise MalformedInputError("message is empty", source="hl7")

        record = self.decoder.decode(wire_text)

        logger.info(f"Decoded {len(record)} segment(s) from message")
        return ConversionResult(wire_text, record, "hl7")

    def text_to_hl7(self, ocr_text: str, source: Optional[str] = None) -> ConversionResult:
        """
        Extract a claim form from OCR text and encode it.

        Raises:
            DocumentRejectedError: If the text is not a claim form.
            ExtractionQuorumFailure: If too few required fields matched.
        """
        report = self.extractor.extract_with_report(ocr_text, source=source)
        wire_text = self.encoder.encode(report.record)

        logger.info(
            f"Encoded extracted claim ({report.matched_count} field(s) matched, "
            f"{len(report.defaulted)} defaulted)"
        )
        return ConversionResult(
            wire_text,
            report.record,
            "ocr_text",
            warnings=list(report.warnings),
            extraction=report
        )

    def document_to_hl7(self, data: bytes, filename: Optional[str] = None) -> ConversionResult:
        """
        OCR a scanned claim form (PDF or image) and encode it.

        Raises:
            CorruptedFileError: If the document cannot be read.
            UpstreamServiceFailure: If OCR produced no text.
        """
        text = self.ocr_engine.extract_text(data, filename)
        result = self.text_to_hl7(text, source=filename)
        result.source = "document"
        return result

    def key_value_to_hl7(self, text: str) -> ConversionResult:
        """Map a ``key: value`` form export onto a record and encode it."""
        data = parse_key_value_text(text)
        if not data:
            raise MalformedInputError("no 'key: value' lines found", source="key_value")

        mapper = KeyValueMapper()
        record = mapper.to_record(data)
        wire_text = self.encoder.encode(record)

        logger.info(f"Encoded key/value form ({len(data)} key(s))")
        return ConversionResult(wire_text, record, "key_value", warnings=list(mapper.warnings))
