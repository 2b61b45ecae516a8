"""
Field Specification Module.

A field spec describes how one value is recovered from cleaned OCR text:
an ordered tuple of regex candidates (primary first, then fallbacks),
where in the canonical record the value goes, and whether it counts
toward the required-field quorum.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Pattern, Sequence, Tuple

from cms_converter.utils.exceptions import SchemaError


def split_target(target: str) -> Tuple[str, str]:
    """
    Split a ``SEGMENT.field`` record path.

    Example:
        >>> split_target("PID.patientName")
        ("PID", "patientName")
    """
    segment_key, _, field_name = target.partition('.')
    if not segment_key or not field_name:
        raise SchemaError(f"Record path must look like SEGMENT.field, got '{target}'")
    return segment_key, field_name


@dataclass(frozen=True)
class FieldSpec:
    """
    Extraction rule for one canonical field.

    Attributes:
        name: Field name reported in results and quorum failures
        target: Record path receiving the value (``SEGMENT.field``)
        patterns: Compiled candidates, tried in order
        required: Whether the field counts toward the quorum
        default: Sentinel used when an optional field does not match
        is_date: Whether the match is post-processed as a date
        also: Extra record paths receiving the same value
        postprocess: Optional callable applied to the cleaned value
    """
    name: str
    target: str
    patterns: Tuple[Pattern, ...]
    required: bool = False
    default: Optional[str] = None
    is_date: bool = False
    also: Tuple[str, ...] = ()
    postprocess: Optional[Callable[[str], str]] = None

    def __post_init__(self):
        if not self.patterns:
            raise SchemaError(f"Field spec '{self.name}' has no patterns")
        for path in (self.target,) + tuple(self.also):
            split_target(path)

    @property
    def targets(self) -> Tuple[str, ...]:
        """Every record path receiving this field's value."""
        return (self.target,) + tuple(self.also)

    def search(self, text: str):
        """
        Yield ``(index, match)`` for each pattern that matches, in order.

        Evaluation is lazy; callers stop at the first usable match.
        """
        for index, pattern in enumerate(self.patterns):
            match = pattern.search(text)
            if match:
                yield index, match

    @classmethod
    def create(
        cls,
        name: str,
        target: str,
        primary: str,
        fallback: Optional[str] = None,
        *,
        required: bool = False,
        default: Optional[str] = None,
        is_date: bool = False,
        also: Sequence[str] = (),
        postprocess: Optional[Callable[[str], str]] = None,
        flags: int = re.IGNORECASE
    ) -> 'FieldSpec':
        """
        Build a spec from a primary and an optional fallback pattern.

        Example:
            >>> FieldSpec.create("patientDob", "PID.dob",
            ...                  r"BIRTH DATE (\\d{1,2})/(\\d{1,2})/(\\d{4})",
            ...                  r"DOB:? (\\S+)", required=True, is_date=True)
        """
        sources = [primary] + ([fallback] if fallback else [])
        try:
            patterns = tuple(re.compile(source, flags) for source in sources)
        except re.error as e:
            raise SchemaError(f"Bad pattern for field '{name}': {e}")

        return cls(
            name=name,
            target=target,
            patterns=patterns,
            required=required,
            default=default,
            is_date=is_date,
            also=tuple(also),
            postprocess=postprocess,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldSpec':
        """
        Build a spec from a configuration entry.

        Expected keys: ``name``, ``target``, ``primary`` and optionally
        ``fallback``, ``required``, ``default``, ``date``, ``also``.
        """
        try:
            return cls.create(
                data['name'],
                data['target'],
                data['primary'],
                data.get('fallback'),
                required=bool(data.get('required', False)),
                default=data.get('default'),
                is_date=bool(data.get('date', False)),
                also=data.get('also', ()),
            )
        except KeyError as e:
            raise SchemaError(f"Field spec entry is missing {e}: {data!r}")
