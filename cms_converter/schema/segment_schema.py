"""
Segment Schema Module.

A segment schema is the table that maps wire positions to canonical
field names, per segment type. The same wire format carries several
business documents with different field sets, so the table is a value
handed to the encoder and decoder rather than logic baked into them.

Classes:
    FieldMapping: One (position, name, transform) entry
    SegmentDefinition: All mappings of one segment type
    SegmentSchema: Ordered collection of segment definitions
    SchemaBuilder: Fluent builder for schemas

Position 0 is the segment type token and never appears in a table.
Positions that no mapping claims are addressed by the generic name
``field<N>``.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from cms_converter.normalizers.dates import normalize_date
from cms_converter.utils.exceptions import SchemaError
from cms_converter.utils.logger import get_logger

logger = get_logger(__name__)

Transform = Callable[[str], str]

GENERIC_FIELD_PREFIX = "field"
GENERIC_NAME_PATTERN = re.compile(r'^field(\d+)$')

# Named transforms usable from configuration tables
TRANSFORMS: Dict[str, Transform] = {
    'date': normalize_date,
}


def generic_field_name(position: int) -> str:
    """
    Name used for a wire position that no mapping claims.

    Example:
        >>> generic_field_name(2)
        "field2"
    """
    return f"{GENERIC_FIELD_PREFIX}{position}"


def generic_position(name: str) -> Optional[int]:
    """Position encoded in a generic field name, or None for other names."""
    match = GENERIC_NAME_PATTERN.match(name)
    if match:
        position = int(match.group(1))
        return position if position >= 1 else None
    return None


def resolve_transform(transform: Union[str, Transform, None]) -> Optional[Transform]:
    """
    Resolve a transform given by registry name or as a callable.

    Raises:
        SchemaError: If a named transform is not registered.
    """
    if transform is None or callable(transform):
        return transform
    if transform in TRANSFORMS:
        return TRANSFORMS[transform]
    raise SchemaError(
        f"Unknown transform '{transform}' (available: {sorted(TRANSFORMS)})"
    )


@dataclass(frozen=True)
class FieldMapping:
    """
    Maps one wire position to one canonical field name.

    Attributes:
        position: 1-based field index within the segment line
        name: Canonical field name in the record
        transform: Optional encode-time value transform
    """
    position: int
    name: str
    transform: Optional[Transform] = None

    def apply(self, value: str) -> str:
        """Apply the transform, if any, to a populated value."""
        if self.transform is None:
            return value
        return self.transform(value)


@dataclass(frozen=True)
class SegmentDefinition:
    """
    All field mappings of a single segment type.

    Attributes:
        segment_type: Segment type code (e.g., "PID")
        fields: Mappings ordered by position
        repeating: Whether several instances may appear in one message
        set_id_field: Field carrying the instance's set identifier
        zero_sentinel: Set identifier value meaning "no suffix"
    """
    segment_type: str
    fields: Tuple[FieldMapping, ...]
    repeating: bool = False
    set_id_field: Optional[str] = None
    zero_sentinel: str = "0"

    def __post_init__(self):
        if not self.segment_type:
            raise SchemaError("Segment type code is empty")

        seen_positions = set()
        seen_names = set()
        for mapping in self.fields:
            if mapping.position < 1:
                raise SchemaError(
                    f"Position {mapping.position} of '{mapping.name}' is below 1",
                    self.segment_type
                )
            if mapping.position in seen_positions:
                raise SchemaError(
                    f"Position {mapping.position} is mapped more than once",
                    self.segment_type
                )
            if mapping.name in seen_names:
                raise SchemaError(
                    f"Field '{mapping.name}' is mapped more than once",
                    self.segment_type
                )
            seen_positions.add(mapping.position)
            seen_names.add(mapping.name)

        if self.repeating and self.set_id_field not in seen_names:
            raise SchemaError(
                f"Repeating segment needs a mapped set identifier field, "
                f"got '{self.set_id_field}'",
                self.segment_type
            )

        object.__setattr__(
            self, 'fields', tuple(sorted(self.fields, key=lambda m: m.position))
        )

    @property
    def max_position(self) -> int:
        """Highest mapped position (0 when nothing is mapped)."""
        return max((m.position for m in self.fields), default=0)

    @property
    def set_id_position(self) -> Optional[int]:
        """Wire position of the set identifier field."""
        if self.set_id_field is None:
            return None
        return self.position_of(self.set_id_field)

    def position_of(self, name: str) -> Optional[int]:
        """Position mapped to a canonical name."""
        for mapping in self.fields:
            if mapping.name == name:
                return mapping.position
        return None

    def name_at(self, position: int) -> Optional[str]:
        """Canonical name mapped to a position."""
        for mapping in self.fields:
            if mapping.position == position:
                return mapping.name
        return None


class SegmentSchema:
    """
    Table-driven description of every known segment type.

    The declaration order of segment types is the order in which the
    encoder emits them.

    Example:
        >>> schema = (SchemaBuilder("demo")
        ...           .segment("MSH").field(1, "sendingApp")
        ...           .segment("PID").field(1, "patientId")
        ...           .build())
        >>> schema.name_for("MSH", 2)
        "field2"
    """

    def __init__(self, definitions: Iterable[SegmentDefinition], name: str = "custom") -> None:
        """
        Initialize the schema.

        Args:
            definitions: Segment definitions in emission order.
            name: Variant name, used in logs.

        Raises:
            SchemaError: If a segment type is defined twice.
        """
        self.name = name
        self._definitions: Dict[str, SegmentDefinition] = {}

        for definition in definitions:
            if definition.segment_type in self._definitions:
                raise SchemaError("Segment defined more than once", definition.segment_type)
            self._definitions[definition.segment_type] = definition

        logger.debug(f"SegmentSchema '{name}' built with segments: {self.segment_types}")

    @property
    def segment_types(self) -> List[str]:
        """Known segment types in declaration order."""
        return list(self._definitions.keys())

    def __contains__(self, segment_type: str) -> bool:
        return segment_type in self._definitions

    def __repr__(self) -> str:
        return f"SegmentSchema(name='{self.name}', segments={self.segment_types})"

    def definition(self, segment_type: str) -> Optional[SegmentDefinition]:
        """Definition of a segment type, or None when unknown."""
        return self._definitions.get(segment_type)

    def fields_for(self, segment_type: str) -> List[FieldMapping]:
        """
        Ordered mappings of a segment type.

        Unknown segment types have no mappings.
        """
        definition = self._definitions.get(segment_type)
        return list(definition.fields) if definition else []

    def name_for(self, segment_type: str, position: int) -> str:
        """
        Canonical name of a wire position, falling back to ``field<N>``.
        """
        definition = self._definitions.get(segment_type)
        if definition is not None:
            name = definition.name_at(position)
            if name is not None:
                return name
        return generic_field_name(position)

    def position_for(self, segment_type: str, name: str) -> Optional[int]:
        """
        Wire position for a canonical field name.

        Generic ``field<N>`` names resolve to N unless a mapping already
        owns that position. Names that resolve to nothing return None.
        """
        definition = self._definitions.get(segment_type)
        if definition is not None:
            position = definition.position_of(name)
            if position is not None:
                return position

        position = generic_position(name)
        if position is None:
            return None
        if definition is not None and definition.name_at(position) is not None:
            return None
        return position

    def max_position(self, segment_type: str) -> int:
        """Highest mapped position of a segment type (0 when unknown)."""
        definition = self._definitions.get(segment_type)
        return definition.max_position if definition else 0

    def is_repeating(self, segment_type: str) -> bool:
        """Whether a segment type may repeat within one message."""
        definition = self._definitions.get(segment_type)
        return bool(definition and definition.repeating)

    def segment_type_for_key(self, segment_key: str) -> str:
        """
        Segment type a record key belongs to.

        ``OBX3`` resolves to ``OBX`` when OBX is a repeating type. Keys
        matching no known type are their own type.
        """
        if segment_key in self._definitions:
            return segment_key

        candidates = [
            segment_type for segment_type, definition in self._definitions.items()
            if definition.repeating and segment_key.startswith(segment_type)
        ]
        if candidates:
            return max(candidates, key=len)
        return segment_key

    def segment_key(self, segment_type: str, set_id: Optional[str]) -> str:
        """
        Record key for a decoded segment instance.

        Repeating types are suffixed with the set identifier unless it is
        absent or equal to the zero sentinel.
        """
        definition = self._definitions.get(segment_type)
        if definition is None or not definition.repeating:
            return segment_type
        if not set_id or set_id == definition.zero_sentinel:
            return segment_type
        return f"{segment_type}{set_id}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: str = "custom") -> 'SegmentSchema':
        """
        Build a schema from a configuration table.

        Args:
            data: Mapping of segment type to a dict with ``fields`` (list
                  of ``{position, name, transform?}``) and optional
                  ``repeating``, ``set_id_field`` and ``zero_sentinel``.
            name: Variant name.

        Returns:
            SegmentSchema instance.

        Raises:
            SchemaError: If the table is inconsistent.
        """
        if not isinstance(data, dict):
            raise SchemaError("Schema table must be a mapping of segment types")

        builder = SchemaBuilder(name)
        for segment_type, spec in data.items():
            spec = spec or {}
            builder.segment(
                str(segment_type),
                repeating=bool(spec.get('repeating', False)),
                set_id_field=spec.get('set_id_field'),
                zero_sentinel=str(spec.get('zero_sentinel', "0"))
            )
            for entry in spec.get('fields', []):
                try:
                    builder.field(int(entry['position']), str(entry['name']), entry.get('transform'))
                except (KeyError, TypeError, ValueError) as e:
                    raise SchemaError(f"Bad field entry {entry!r}: {e}", str(segment_type))

        return builder.build()


class SchemaBuilder:
    """
    Fluent builder for :class:`SegmentSchema`.

    Example:
        >>> schema = (SchemaBuilder("lab")
        ...           .segment("PID").field(3, "patientId").field(7, "dob", "date")
        ...           .segment("OBX", repeating=True, set_id_field="setId")
        ...           .field(1, "setId").field(5, "observationValue")
        ...           .build())
    """

    def __init__(self, name: str = "custom") -> None:
        self.name = name
        self._segments: List[Dict[str, Any]] = []

    def segment(
        self,
        segment_type: str,
        repeating: bool = False,
        set_id_field: Optional[str] = None,
        zero_sentinel: str = "0"
    ) -> 'SchemaBuilder':
        """Start a new segment definition."""
        self._segments.append({
            'segment_type': segment_type,
            'fields': [],
            'repeating': repeating,
            'set_id_field': set_id_field,
            'zero_sentinel': zero_sentinel,
        })
        return self

    def field(
        self,
        position: int,
        name: str,
        transform: Union[str, Transform, None] = None
    ) -> 'SchemaBuilder':
        """Add a mapping to the current segment."""
        if not self._segments:
            raise SchemaError(f"Field '{name}' declared before any segment")
        self._segments[-1]['fields'].append(
            FieldMapping(position, name, resolve_transform(transform))
        )
        return self

    def build(self) -> SegmentSchema:
        """Validate and return the schema."""
        definitions = [
            SegmentDefinition(
                segment_type=spec['segment_type'],
                fields=tuple(spec['fields']),
                repeating=spec['repeating'],
                set_id_field=spec['set_id_field'],
                zero_sentinel=spec['zero_sentinel'],
            )
            for spec in self._segments
        ]
        return SegmentSchema(definitions, name=self.name)
