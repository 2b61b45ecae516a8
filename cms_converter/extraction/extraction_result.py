"""
Extraction Result Data Class.

This module defines the data structure returned by heuristic extraction:
the canonical record plus bookkeeping about which fields matched, which
needed a fallback pattern and which were filled with a default.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from cms_converter.codec.record import CanonicalRecord, copy_record
from .field_spec import split_target


@dataclass
class ExtractionResult:
    """
    Represents the result of extracting one claim form.

    Attributes:
        record: Canonical record built from the OCR text
        matched: Field spec name to extracted value
        pattern_index: Field spec name to the index of the pattern that
                       matched (0 is the primary pattern)
        defaulted: Optional fields filled with their default sentinel
        missing_required: Required fields that did not match
        quorum: Required-field quorum applied
        warnings: Non-fatal issues
        source: Name of the source document
        extraction_timestamp: When extraction was performed
        processing_time: Seconds spent matching

    Example:
        >>> result = extractor.extract_with_report(text)
        >>> result.record["PID"]["patientName"]
        "DOE, JANE A"
        >>> result.used_fallback
        ["gender"]
    """
    record: CanonicalRecord = field(default_factory=dict)
    matched: Dict[str, str] = field(default_factory=dict)
    pattern_index: Dict[str, int] = field(default_factory=dict)
    defaulted: List[str] = field(default_factory=list)
    missing_required: List[str] = field(default_factory=list)
    quorum: int = 0
    warnings: List[str] = field(default_factory=list)
    source: Optional[str] = None
    extraction_timestamp: Optional[str] = None
    processing_time: float = 0.0

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.extraction_timestamp is None:
            self.extraction_timestamp = datetime.now().isoformat()

    @property
    def used_fallback(self) -> List[str]:
        """Fields recovered by a fallback rather than the primary pattern."""
        return [name for name, index in self.pattern_index.items() if index > 0]

    @property
    def matched_count(self) -> int:
        """Number of fields that matched a pattern."""
        return len(self.matched)

    def set_value(self, path: str, value: str) -> None:
        """
        Store a value at a ``SEGMENT.field`` record path.

        Args:
            path: Record path.
            value: Value to store.
        """
        segment_key, field_name = split_target(path)
        self.record.setdefault(segment_key, {})[field_name] = value

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the extraction result.
        """
        return {
            'record': copy_record(self.record),
            'matched': dict(self.matched),
            'used_fallback': self.used_fallback,
            'defaulted': list(self.defaulted),
            'missing_required': list(self.missing_required),
            'quorum': self.quorum,
            'warnings': list(self.warnings),
            'source': self.source,
            'extraction_timestamp': self.extraction_timestamp,
            'processing_time': self.processing_time
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"ExtractionResult("
            f"matched={self.matched_count}, "
            f"defaulted={len(self.defaulted)}, "
            f"missing_required={self.missing_required})"
        )
