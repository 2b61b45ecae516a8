"""
Segment Decoder Module.

Turns wire-format message text into a canonical record using the inverse
of a :class:`SegmentSchema`.

Line rules:
    - Blank and whitespace-only lines are skipped
    - Token 0 is the segment type; token N is wire position N
    - Repeating segments are keyed ``<TYPE><setId>`` (bare ``<TYPE>`` when
      the set identifier is missing or "0")
    - A repeated key overwrites the earlier field map, it does not merge
    - Unmapped positions and unknown segment types use ``field<N>``
    - Values are stored as received; encode-time transforms are not undone
    - Empty values are not stored
"""

import re
from typing import Optional, Tuple

from config import get_config
from cms_converter.schema import SegmentSchema, get_schema
from cms_converter.utils.logger import get_logger
from .record import CanonicalRecord, FieldMap

logger = get_logger(__name__)

LINE_BREAK_PATTERN = re.compile(r'\r\n|\r|\n')


class SegmentDecoder:
    """
    Decodes wire-format text into canonical records.

    Attributes:
        schema: Segment schema resolving positions to names
        field_separator: Character between fields

    Example:
        >>> decoder = SegmentDecoder(schema)
        >>> decoder.decode("MSH|a|b\\nPID|x")
        {'MSH': {'sendingApp': 'a', 'field2': 'b'}, 'PID': {'patientId': 'x'}}
    """

    def __init__(
        self,
        schema: Optional[SegmentSchema] = None,
        field_separator: Optional[str] = None
    ) -> None:
        """
        Initialize the decoder.

        Args:
            schema: Segment schema. If None, the configured variant is used.
            field_separator: Field separator. If None, uses config.
        """
        self.schema = schema or get_schema()
        self.field_separator = field_separator or get_config("codec.field_separator", "|")

    def decode(self, wire_text: str) -> CanonicalRecord:
        """
        Decode message text into a new record.

        Args:
            wire_text: Message text.

        Returns:
            CanonicalRecord keyed by segment key.
        """
        record: CanonicalRecord = {}

        for line_no, line in enumerate(LINE_BREAK_PATTERN.split(wire_text or ""), start=1):
            if not line.strip():
                continue

            segment_key, fields = self.decode_segment(line)

            if segment_key in record:
                logger.debug(f"Line {line_no}: '{segment_key}' replaces an earlier segment")
            record[segment_key] = fields

        logger.debug(f"Decoded {len(record)} segment(s) with schema '{self.schema.name}'")
        return record

    def decode_segment(self, line: str) -> Tuple[str, FieldMap]:
        """
        Decode a single segment line.

        Args:
            line: One non-blank message line.

        Returns:
            Tuple of (segment key, field map).
        """
        tokens = line.split(self.field_separator)
        segment_type = tokens[0].strip()
        values = tokens[1:]

        if segment_type not in self.schema:
            logger.debug(f"Unknown segment type '{segment_type}', using generic names")

        fields: FieldMap = {}
        for position, value in enumerate(values, start=1):
            if value == "":
                continue
            fields[self.schema.name_for(segment_type, position)] = value

        segment_key = self.schema.segment_key(segment_type, self._set_id(segment_type, values))
        return segment_key, fields

    def _set_id(self, segment_type: str, values: list) -> Optional[str]:
        """Set identifier of a repeating segment instance, if present."""
        if not self.schema.is_repeating(segment_type):
            return None
        position = self.schema.definition(segment_type).set_id_position
        if position is None or position > len(values):
            return None
        return values[position - 1]


def decode(wire_text: str, schema: Optional[SegmentSchema] = None) -> CanonicalRecord:
    """
    Decode message text with the given (or configured) schema.
    """
    return SegmentDecoder(schema).decode(wire_text)
