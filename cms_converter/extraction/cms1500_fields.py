"""
CMS-1500 Field Table.

Default extraction rules for the paper CMS-1500 claim form, plus the
constants the extractor gates on. OCR output is flattened onto a single
line before matching, so most primary patterns anchor on a printed box
label and capture up to the next numbered box (``" 5. "``, ``" 11a. "``).
Fallbacks accept the looser ``Label: value`` layout seen on re-typed or
non-standard forms.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from config import get_config
from cms_converter.codec.record import CanonicalRecord
from cms_converter.normalizers.dates import DateNormalizer
from .field_spec import FieldSpec

# At least this many required fields must match for a form to be accepted
EXTRACTION_QUORUM = 3

# Shorter OCR output is treated as a failed scan
MIN_TEXT_LENGTH = 50

# One of these must appear (case-insensitive) for text to count as a claim form
DOCUMENT_KEYWORDS = (
    "HEALTH INSURANCE CLAIM FORM",
    "CMS-1500",
    "CMS 1500",
)

# Sentinels for optional fields that did not match
DEFAULT_SENTINELS: Dict[str, str] = {
    "gender": "U",
    "procedureCode": "99213",
    "providerName": "Unknown Provider",
}

MESSAGE_HEADER_DEFAULTS: Dict[str, str] = {
    "encodingCharacters": "^~\\&",
    "sendingApplication": "CMS1500App",
    "sendingFacility": "Hospital",
    "receivingApplication": "HL7Receiver",
    "receivingFacility": "HL7Facility",
    "messageType": "ADT^A01",
    "controlId": "MSG00001",
    "processingId": "P",
    "versionId": "2.5",
}

VISIT_DEFAULTS: Dict[str, str] = {
    "setId": "1",
    "patientClass": "O",
}

# Lookaheads bounding a lazily captured box value
_NEXT_BOX = r"(?=\s+\d{1,2}[a-d]?\.\s|$)"
_ADDRESS_END = r"(?=\s+(?:CITY|STATE|ZIP CODE|TELEPHONE)\b|\s+\d{1,2}[a-d]?\.\s|$)"
_NEXT_LABEL = r"(?=\s+[A-Z']+:|$)"

_LETTERS = r"(?:[^\W\d_]|['-])+"
_NAME = r"(" + _LETTERS + r", ?" + _LETTERS + r"(?: [^\W\d_]\b\.?)?)"
_DATE_PARTS = r"(\d{1,2})[ /-](\d{1,2})[ /-](\d{4})"
_DATE_TOKEN = r"(\d{1,2}[/-]\d{1,2}[/-]\d{4})"
_PHONE = r"(\(?\d{3}\)? ?\d{3}-?\d{4})"


def _boxed(label: str, end: str = _NEXT_BOX) -> str:
    """Pattern capturing the text after a box label up to ``end``."""
    return label + r"\s+(.+?)" + end


def _first_letter(value: str) -> str:
    return value[:1].upper()


def default_field_specs() -> List[FieldSpec]:
    """
    Build the CMS-1500 field specs in declaration order.

    Required fields: insuredId, patientName, patientDob, insurancePlan,
    serviceDate.
    """
    return [
        FieldSpec.create(
            "insuredId", "IN1.insuranceId",
            r"INSURED'?S I\.?D\.? NUMBER(?: \(FOR PROGRAM IN ITEM 1\))? ([A-Z0-9-]{4,})",
            r"\b(?:MEMBER|SUBSCRIBER|POLICY) ?(?:ID|NO|NUMBER)\.?:? ([A-Z0-9-]{4,})",
            required=True,
            also=("PID.patientId",),
        ),
        FieldSpec.create(
            "patientName", "PID.patientName",
            _boxed(r"PATIENT'?S NAME(?: \(LAST NAME, FIRST NAME, MIDDLE INITIAL\))?"),
            r"\bPATIENT NAME:? " + _NAME,
            required=True,
        ),
        FieldSpec.create(
            "patientDob", "PID.dob",
            r"PATIENT'?S BIRTH DATE(?: MM DD YY)? " + _DATE_PARTS,
            r"\b(?:DOB|DATE OF BIRTH):? " + _DATE_TOKEN,
            required=True,
            is_date=True,
        ),
        FieldSpec.create(
            "gender", "PID.gender",
            r"\bSEX:? (MALE|FEMALE)\b",
            r"\b(?:SEX|GENDER):? (M|F)\b",
            postprocess=_first_letter,
        ),
        FieldSpec.create(
            "patientAddress", "PID.address",
            _boxed(r"PATIENT'?S ADDRESS(?: \(NO\.?, STREET\))?", _ADDRESS_END),
            r"\bADDRESS:? (\d+ .+?)" + _NEXT_LABEL,
        ),
        FieldSpec.create(
            "patientPhone", "PID.phoneNumber",
            r"TELEPHONE(?: \(INCLUDE AREA CODE\))? " + _PHONE,
            r"\b(?:PHONE|PH #?):? " + _PHONE,
        ),
        FieldSpec.create(
            "insuredName", "IN1.insuredName",
            _boxed(r"(?<!OTHER )INSURED'?S NAME(?: \(LAST NAME, FIRST NAME, MIDDLE INITIAL\))?"),
            r"\bINSURED:? " + _NAME,
        ),
        FieldSpec.create(
            "insuredDob", "IN1.insuredDob",
            r"INSURED'?S DATE OF BIRTH(?: MM DD YY)? " + _DATE_PARTS,
            is_date=True,
        ),
        FieldSpec.create(
            "insurancePlan", "IN1.insurancePlan",
            _boxed(r"INSURANCE PLAN NAME OR PROGRAM NAME"),
            r"\b(?:INSURANCE CARRIER|PAYER|CARRIER):? (.+?)" + _NEXT_LABEL,
            required=True,
        ),
        FieldSpec.create(
            "serviceDate", "PR1.procedureDate",
            r"DATE\(S\) OF SERVICE(?: FROM)?(?: MM DD YY)? " + _DATE_PARTS,
            r"\b(?:SERVICE DATE|DOS):? " + _DATE_TOKEN,
            required=True,
            is_date=True,
        ),
        FieldSpec.create(
            "procedureCode", "PR1.procedureCode",
            r"CPT/HCPCS\)?(?: MODIFIER)?\s+(\d{5}|[A-Z]\d{4})\b",
            r"\b(?:CPT|PROCEDURE)(?: CODE)?:? (\d{5}|[A-Z]\d{4})\b",
        ),
        FieldSpec.create(
            "accountNumber", "PID.patientAccountNumber",
            r"PATIENT'?S ACCOUNT NO\.? ([A-Z0-9-]+)",
            r"\bACCOUNT (?:NO|NUMBER|#)\.?:? ([A-Z0-9-]+)",
        ),
        FieldSpec.create(
            "providerName", "PR1.providerName",
            _boxed(r"SIGNATURE OF PHYSICIAN OR SUPPLIER(?: INCLUDING DEGREES OR CREDENTIALS)?"),
            r"\b(?:RENDERING PROVIDER|PHYSICIAN):? (.+?)" + _NEXT_LABEL,
            also=("PV1.attendingDoctor",),
        ),
    ]


def header_record(now: Optional[datetime] = None) -> CanonicalRecord:
    """
    Segments every generated claim message starts from.

    The message header comes from ``message_header`` in config over the
    built-in defaults; its ``dateTime`` is the generation date.

    Args:
        now: Generation time. Defaults to the current time.

    Returns:
        New record holding ``MSH`` and ``PV1``.
    """
    now = now or datetime.now()
    today = now.date() if isinstance(now, datetime) else now

    header = dict(MESSAGE_HEADER_DEFAULTS)
    header.update({
        key: str(value)
        for key, value in (get_config("message_header", {}) or {}).items()
        if value is not None
    })
    header["dateTime"] = _date_token(today)

    return {"MSH": header, "PV1": dict(VISIT_DEFAULTS)}


def _date_token(day: date) -> str:
    return DateNormalizer.from_parts(day.month, day.day, day.year)
