"""
Canonical Record Helpers.

A canonical record is a plain ``Dict[str, Dict[str, str]]``: segment key
to a map of canonical field name to string value. This module loads and
dumps the JSON rendition of that shape.
"""

import json
from typing import Any, Dict, Optional

from config import get_config
from cms_converter.utils.exceptions import MalformedInputError
from cms_converter.utils.logger import get_logger

logger = get_logger(__name__)

FieldMap = Dict[str, str]
CanonicalRecord = Dict[str, FieldMap]


def _to_text(value: Any) -> str:
    """Render a JSON scalar as the string the wire format will carry."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def load_record(text: str, source: Optional[str] = None) -> CanonicalRecord:
    """
    Parse a canonical record from JSON text.

    Segment values that are ``null`` are treated as absent, as are
    ``null`` field values. Numbers and booleans are converted to strings.

    Args:
        text: JSON document.
        source: Optional name of the input, for error details.

    Returns:
        CanonicalRecord.

    Raises:
        MalformedInputError: If the text is not JSON or not record-shaped.

    Example:
        >>> load_record('{"PID": {"patientId": "12345"}}')
        {'PID': {'patientId': '12345'}}
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedInputError(f"JSON parsing failed: {e}", source)

    if not isinstance(data, dict):
        raise MalformedInputError(
            "Record must be a JSON object keyed by segment", source
        )

    record: CanonicalRecord = {}
    for segment_key, fields in data.items():
        if fields is None:
            continue
        if not isinstance(fields, dict):
            raise MalformedInputError(
                f"Segment '{segment_key}' must be an object of field values", source
            )

        field_map: FieldMap = {}
        for name, value in fields.items():
            if value is None:
                continue
            if isinstance(value, (dict, list)):
                raise MalformedInputError(
                    f"Field '{segment_key}.{name}' must be a scalar value", source
                )
            field_map[name] = _to_text(value)
        record[segment_key] = field_map

    logger.debug(f"Loaded record with segments: {list(record)}")
    return record


def dump_record(record: CanonicalRecord, indent: Optional[int] = None) -> str:
    """
    Serialize a canonical record to JSON text.

    Args:
        record: Record to serialize.
        indent: JSON indentation. Defaults to ``output.json_indent``.
    """
    if indent is None:
        indent = get_config("output.json_indent", 2)
    return json.dumps(record, indent=indent, ensure_ascii=False)


def copy_record(record: CanonicalRecord) -> CanonicalRecord:
    """Copy a record so that neither copy shares a field map."""
    return {segment_key: dict(fields) for segment_key, fields in record.items()}
