"""
Key/Value Form Intake.

Some front ends export a filled claim as plain ``key: value`` lines
(``pt_name: DOE, JANE``). This module parses that text and maps the known
keys onto a canonical record carrying the standard message header.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from cms_converter.codec.record import CanonicalRecord
from cms_converter.normalizers.dates import DateNormalizer
from cms_converter.utils.logger import get_logger
from .cms1500_fields import header_record
from .field_spec import split_target

logger = get_logger(__name__)

# Keys copied verbatim into one or more record paths
KEY_VALUE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "insurance_id": ("PID.patientId", "IN1.insuranceId"),
    "pt_name": ("PID.patientName",),
    "insurance_name": ("IN1.insurancePlan",),
    "physician_signature": ("PV1.attendingDoctor",),
    "physician_date": ("PV1.physicianSignatureDate",),
}

# Keys handled by dedicated rules in KeyValueMapper
DERIVED_KEYS = ("birth_yy", "birth_mm", "birth_dd", "sex", "pt_city", "pt_state")


def parse_key_value_text(text: str) -> Dict[str, str]:
    """
    Parse ``key: value`` lines into a dictionary.

    The line is split on its first colon, so values may contain colons.
    Lines without a colon, or with an empty key or value, are ignored.
    A repeated key keeps its last value.

    Example:
        >>> parse_key_value_text("pt_name: DOE, JANE\\nnote: seen 10:30")
        {'pt_name': 'DOE, JANE', 'note': 'seen 10:30'}
    """
    data: Dict[str, str] = {}
    for line in (text or "").splitlines():
        key, sep, value = line.partition(':')
        key, value = key.strip(), value.strip()
        if sep and key and value:
            data[key] = value
    return data


class KeyValueMapper:
    """
    Maps parsed key/value form data onto a canonical record.

    Example:
        >>> mapper = KeyValueMapper()
        >>> record = mapper.to_record({"pt_name": "DOE, JANE", "sex": "female"})
        >>> record["PID"]
        {'setId': '1', 'patientName': 'DOE, JANE', 'gender': 'F'}
    """

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.now = now
        self.warnings: List[str] = []

    def to_record(self, data: Dict[str, str]) -> CanonicalRecord:
        """
        Build a record from key/value data.

        Args:
            data: Parsed form data.

        Returns:
            Canonical record with MSH, PV1, PID and IN1 segments.
        """
        self.warnings = []
        record = header_record(self.now)
        record["PV1"]["assignedLocation"] = "Clinic"
        record["PID"] = {"setId": "1"}
        record["IN1"] = {"setId": "1"}

        for key, paths in KEY_VALUE_FIELDS.items():
            value = data.get(key)
            if value:
                for path in paths:
                    segment_key, field_name = split_target(path)
                    record[segment_key][field_name] = value

        dob = self._birth_date(data)
        if dob:
            record["PID"]["dob"] = dob

        sex = data.get("sex")
        if sex:
            record["PID"]["gender"] = sex[0].upper()

        city, state = data.get("pt_city", ""), data.get("pt_state", "")
        if city or state:
            record["PID"]["address"] = f"{city}^{state}"

        unknown = [k for k in data if k not in KEY_VALUE_FIELDS and k not in DERIVED_KEYS]
        if unknown:
            logger.debug(f"Ignoring unmapped keys: {unknown}")

        return record

    def _birth_date(self, data: Dict[str, str]) -> str:
        """Combine birth_mm/birth_dd/birth_yy into a date token."""
        parts = [data.get(k, "") for k in ("birth_mm", "birth_dd", "birth_yy")]
        if not any(parts):
            return ""

        month, day, year = parts
        if not all(p.isdigit() for p in parts) or len(year) != 4:
            warning = f"Birth date parts not usable: {month}/{day}/{year}"
            logger.warning(warning)
            self.warnings.append(warning)
            return ""

        return DateNormalizer.from_parts(month, day, year)


def key_value_to_record(text: str, now: Optional[datetime] = None) -> CanonicalRecord:
    """Parse key/value text and map it onto a canonical record."""
    return KeyValueMapper(now).to_record(parse_key_value_text(text))
