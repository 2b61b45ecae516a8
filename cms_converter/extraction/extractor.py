"""
Claim Form Extractor Module.

This module provides the FieldExtractor class that recovers canonical
record fields from OCR text of a scanned CMS-1500 claim form.

Approach:
    Each field has an ordered list of regex candidates (a primary
    pattern anchored on the printed box label, then looser fallbacks).
    The first candidate that yields a usable value wins. Dates are
    checked against a year range and the calendar before they are
    accepted.

Acceptance:
    - Cleaned text shorter than the minimum length is rejected
    - Text without any claim-form keyword is rejected
    - Fewer matched required fields than the quorum fails the whole
      extraction and reports what was missing
"""

import re
import time
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from config import get_config
from cms_converter.codec.record import CanonicalRecord
from cms_converter.normalizers.dates import DateNormalizer
from cms_converter.normalizers.text import clean_ocr_text, clean_value
from cms_converter.normalizers.validators import DateValidator
from cms_converter.utils.exceptions import DocumentRejectedError, ExtractionQuorumFailure
from cms_converter.utils.logger import get_logger
from .cms1500_fields import (
    DEFAULT_SENTINELS,
    DOCUMENT_KEYWORDS,
    EXTRACTION_QUORUM,
    MIN_TEXT_LENGTH,
    default_field_specs,
    header_record,
)
from .extraction_result import ExtractionResult
from .field_spec import FieldSpec

# Initialize module logger
logger = get_logger(__name__)

_DATE_DELIMITERS = re.compile(r'[\s./-]+')


class FieldExtractor:
    """
    Heuristic CMS-1500 field extractor.

    Attributes:
        field_specs: Extraction rules, in declaration order
        quorum: Minimum number of matched required fields
        min_text_length: Minimum cleaned text length
        keywords: Claim-form keywords; one must be present
        defaults: Sentinels for unmatched optional fields

    Example:
        >>> extractor = FieldExtractor()
        >>> record = extractor.extract(ocr_text)
        >>> record["PID"]["dob"]
        "19800415"
    """

    def __init__(
        self,
        field_specs: Optional[Sequence[FieldSpec]] = None,
        quorum: Optional[int] = None,
        min_text_length: Optional[int] = None,
        keywords: Optional[Sequence[str]] = None,
        defaults: Optional[Dict[str, str]] = None,
        date_validator: Optional[DateValidator] = None,
        now: Optional[datetime] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            field_specs: Extraction rules. If None, the CMS-1500 table is used.
            quorum: Required-field quorum. If None, uses config.
            min_text_length: Minimum text length. If None, uses config.
            keywords: Claim-form keywords. If None, uses config.
            defaults: Optional-field sentinels, merged over config.
            date_validator: Validator for captured dates.
            now: Fixed generation time for the message header.
        """
        self.field_specs = list(field_specs) if field_specs is not None else self._configured_specs()
        self.quorum = quorum if quorum is not None else \
            get_config("extraction.quorum", EXTRACTION_QUORUM)
        self.min_text_length = min_text_length if min_text_length is not None else \
            get_config("extraction.min_text_length", MIN_TEXT_LENGTH)
        self.keywords = [k.upper() for k in (keywords or get_config("extraction.keywords", DOCUMENT_KEYWORDS))]

        self.defaults = dict(DEFAULT_SENTINELS)
        self.defaults.update(get_config("extraction.defaults", {}) or {})
        self.defaults.update(defaults or {})

        self.date_validator = date_validator or DateValidator(
            today=now.date() if now is not None else None
        )
        self.now = now

        required = sum(1 for spec in self.field_specs if spec.required)
        if required < self.quorum:
            logger.warning(
                f"Quorum {self.quorum} exceeds the {required} required field(s); "
                f"every extraction will fail"
            )

        logger.debug(
            f"FieldExtractor initialized with {len(self.field_specs)} field(s), "
            f"quorum {self.quorum}"
        )

    def _configured_specs(self) -> List[FieldSpec]:
        """Field specs from ``extraction.fields`` in config, else the defaults."""
        entries = get_config("extraction.fields")
        if entries:
            return [FieldSpec.from_dict(entry) for entry in entries]
        return default_field_specs()

    def extract(self, ocr_text: str) -> CanonicalRecord:
        """
        Extract a canonical record from OCR text.

        Args:
            ocr_text: Raw text produced by OCR.

        Returns:
            Canonical record.

        Raises:
            DocumentRejectedError: If the text is too short or lacks keywords.
            ExtractionQuorumFailure: If too few required fields matched.
        """
        return self.extract_with_report(ocr_text).record

    def extract_with_report(self, ocr_text: str, source: Optional[str] = None) -> ExtractionResult:
        """
        Extract a canonical record and report how each field was resolved.

        Args:
            ocr_text: Raw text produced by OCR.
            source: Name of the source document, for the report.

        Returns:
            ExtractionResult with the record and match bookkeeping.
        """
        start_time = time.time()

        text = self.preprocess(ocr_text)
        self.check_document(text)

        result = ExtractionResult(
            record=header_record(self.now),
            quorum=self.quorum,
            source=source
        )

        for spec in self.field_specs:
            outcome = self._match_field(spec, text)
            if outcome is None:
                continue
            index, value = outcome
            result.matched[spec.name] = value
            result.pattern_index[spec.name] = index
            for path in spec.targets:
                result.set_value(path, value)
            if index > 0:
                logger.debug(f"Fallback pattern {index} matched {spec.name}: {value}")

        required = [spec for spec in self.field_specs if spec.required]
        result.missing_required = [spec.name for spec in required if spec.name not in result.matched]
        matched_required = len(required) - len(result.missing_required)

        if matched_required < self.quorum:
            logger.warning(
                f"Only {matched_required} of {len(required)} required fields matched "
                f"(quorum {self.quorum}), missing: {result.missing_required}"
            )
            raise ExtractionQuorumFailure(result.missing_required, matched_required, self.quorum)

        for name in result.missing_required:
            result.add_warning(f"Required field '{name}' not found")

        self._apply_defaults(result)

        result.processing_time = time.time() - start_time
        logger.info(
            f"Extracted {result.matched_count}/{len(self.field_specs)} fields "
            f"({matched_required} required) in {result.processing_time:.3f}s"
        )
        return result

    def preprocess(self, ocr_text: str) -> str:
        """Flatten and clean OCR text before matching."""
        return clean_ocr_text(ocr_text or "")

    def check_document(self, text: str) -> None:
        """
        Reject text that cannot be a claim form.

        Args:
            text: Cleaned OCR text.

        Raises:
            DocumentRejectedError: If the text is too short or has no keyword.
        """
        if len(text) < self.min_text_length:
            raise DocumentRejectedError(
                f"text is shorter than {self.min_text_length} characters",
                text_length=len(text)
            )

        upper = text.upper()
        if not any(keyword in upper for keyword in self.keywords):
            raise DocumentRejectedError(
                "no claim form keyword found",
                text_length=len(text)
            )

    def _match_field(self, spec: FieldSpec, text: str) -> Optional[Tuple[int, str]]:
        """
        Resolve one field against the text.

        Returns:
            Tuple of (pattern index, value), or None when nothing usable
            matched. A date that fails validation counts as no match, so
            the next pattern is tried.
        """
        for index, match in spec.search(text):
            if spec.is_date:
                value = self._date_from_match(spec, match)
                if not value:
                    continue
                return index, value

            value = clean_value(match.group(1) if match.groups() else match.group(0))
            if not value:
                continue
            if spec.postprocess is not None:
                value = spec.postprocess(value)
            return index, value

        return None

    def _date_from_match(self, spec: FieldSpec, match) -> str:
        """
        Turn a date match into a ``YYYYMMDD`` token.

        Three groups are read as month, day, year. A single group is split
        on any run of delimiters.
        """
        groups = [g for g in match.groups() if g is not None]
        if len(groups) >= 3:
            month, day, year = groups[:3]
        elif len(groups) == 1:
            parts = _DATE_DELIMITERS.split(groups[0].strip())
            if len(parts) != 3:
                logger.debug(f"{spec.name}: cannot split date '{groups[0]}'")
                return ""
            month, day, year = parts
        else:
            return ""

        valid, message = self.date_validator.validate(month, day, year)
        if not valid:
            logger.debug(f"{spec.name}: rejected date {month}/{day}/{year} ({message})")
            return ""

        return DateNormalizer.from_parts(month, day, year)

    def _apply_defaults(self, result: ExtractionResult) -> None:
        """Fill unmatched optional fields with their sentinel (or empty)."""
        for spec in self.field_specs:
            if spec.required or spec.name in result.matched:
                continue
            value = spec.default if spec.default is not None else self.defaults.get(spec.name, "")
            for path in spec.targets:
                result.set_value(path, value)
            if value:
                result.defaulted.append(spec.name)


def extract(ocr_text: str, field_specs: Optional[Sequence[FieldSpec]] = None) -> CanonicalRecord:
    """
    Extract a canonical record from OCR text with the given (or default) specs.
    """
    return FieldExtractor(field_specs).extract(ocr_text)
