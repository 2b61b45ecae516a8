"""
Segment Encoder Module.

Turns a canonical record into wire-format message text, driven entirely
by a :class:`SegmentSchema`.

Line rules:
    - One line per segment key present in the record; types absent from
      the record produce no line
    - Interior empty fields are kept, trailing empty fields are trimmed
    - A segment with nothing populated is emitted as the bare type token
    - Repeating segments are ordered by the string value of their set
      identifier, so "10" sorts before "2"
"""

from collections import OrderedDict
from typing import Dict, List, Optional

from config import get_config
from cms_converter.schema import SegmentSchema, get_schema, generic_position
from cms_converter.utils.logger import get_logger
from .record import CanonicalRecord, FieldMap

logger = get_logger(__name__)


class SegmentEncoder:
    """
    Encodes canonical records into wire-format text.

    Attributes:
        schema: Segment schema driving field placement
        field_separator: Character between fields
        line_separator: Text between segment lines

    Example:
        >>> encoder = SegmentEncoder(schema)
        >>> encoder.encode({"PID": {"patientId": "12345"}})
        "PID|||12345"
    """

    def __init__(
        self,
        schema: Optional[SegmentSchema] = None,
        field_separator: Optional[str] = None,
        line_separator: Optional[str] = None
    ) -> None:
        """
        Initialize the encoder.

        Args:
            schema: Segment schema. If None, the configured variant is used.
            field_separator: Field separator. If None, uses config.
            line_separator: Line separator. If None, uses config.
        """
        self.schema = schema or get_schema()
        self.field_separator = field_separator or get_config("codec.field_separator", "|")
        self.line_separator = line_separator or get_config("codec.line_separator", "\n")

    def encode(self, record: CanonicalRecord) -> str:
        """
        Encode a record into message text.

        Args:
            record: Canonical record. It is not modified.

        Returns:
            Message text, lines joined by the line separator.
        """
        grouped = self._group_by_type(record)
        lines: List[str] = []

        for segment_type in self._emission_order(grouped):
            keys = grouped[segment_type]
            if self.schema.is_repeating(segment_type):
                keys = self._order_instances(segment_type, keys, record)

            for segment_key in keys:
                lines.append(self.encode_segment(segment_type, record[segment_key]))

        logger.debug(f"Encoded {len(lines)} segment(s) with schema '{self.schema.name}'")
        return self.line_separator.join(lines)

    def encode_segment(self, segment_type: str, fields: FieldMap) -> str:
        """
        Encode one segment instance into a single line.

        Args:
            segment_type: Segment type code.
            fields: Field map of the instance.

        Returns:
            Segment line.
        """
        placed: Dict[int, str] = {}

        for mapping in self.schema.fields_for(segment_type):
            value = fields.get(mapping.name)
            if value:
                placed[mapping.position] = mapping.apply(value)

        for name, value in fields.items():
            if not value or generic_position(name) is None:
                continue
            position = self.schema.position_for(segment_type, name)
            if position is None:
                logger.debug(
                    f"{segment_type}.{name} collides with a mapped position, not emitted"
                )
                continue
            placed[position] = value

        unplaced = [
            name for name, value in fields.items()
            if value and self.schema.position_for(segment_type, name) is None
        ]
        if unplaced:
            logger.debug(f"{segment_type}: no position for fields {unplaced}")

        size = max([self.schema.max_position(segment_type)] + list(placed))
        slots = [""] * size
        for position, value in placed.items():
            if self.field_separator in value or '\n' in value:
                logger.warning(
                    f"{segment_type}-{position} contains a separator, "
                    f"the line will not decode cleanly"
                )
            slots[position - 1] = value

        return self.build_segment(segment_type, slots)

    def build_segment(self, segment_type: str, slots: List[str]) -> str:
        """
        Join a type token and field slots into a line.

        Trailing empty slots are trimmed; interior ones are kept.

        Example:
            >>> encoder.build_segment("PID", ["", "B", ""])
            "PID||B"
        """
        slots = list(slots)
        while slots and slots[-1] == "":
            slots.pop()
        return self.field_separator.join([segment_type] + slots)

    def _group_by_type(self, record: CanonicalRecord) -> "OrderedDict[str, List[str]]":
        """Group record keys by the segment type they belong to."""
        grouped: "OrderedDict[str, List[str]]" = OrderedDict()
        for segment_key in record:
            segment_type = self.schema.segment_type_for_key(segment_key)
            grouped.setdefault(segment_type, []).append(segment_key)
        return grouped

    def _emission_order(self, grouped: "OrderedDict[str, List[str]]") -> List[str]:
        """Schema-declared types first, then unknown types in record order."""
        known = [t for t in self.schema.segment_types if t in grouped]
        unknown = [t for t in grouped if t not in self.schema]
        if unknown:
            logger.debug(f"Segments without schema entries: {unknown}")
        return known + unknown

    def _order_instances(
        self,
        segment_type: str,
        keys: List[str],
        record: CanonicalRecord
    ) -> List[str]:
        """
        Order repeating instances by set identifier, compared as strings.

        Instances without a set identifier sort by their record key.
        """
        set_id_field = self.schema.definition(segment_type).set_id_field
        return sorted(keys, key=lambda k: record[k].get(set_id_field) or k)


def encode(record: CanonicalRecord, schema: Optional[SegmentSchema] = None) -> str:
    """
    Encode a canonical record with the given (or configured) schema.

    Example:
        >>> encode({"MSH": {"sendingApplication": "CMS1500App"}})
        "MSH|||CMS1500App"
    """
    return SegmentEncoder(schema).encode(record)
