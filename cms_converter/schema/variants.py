"""
Built-in Segment Schema Variants.

Two layouts of the claim message have been in use:

    cms1500         MSH fields at their conventional positions (sending
                    application at MSH-3, date/time at MSH-7). Default.
    cms1500_legacy  Older readers placed every MSH field one position
                    earlier (sending application at MSH-2). Kept so that
                    archived messages still decode under their own names.

The rest of the segment tables is shared. Which variant a deployment
uses is pinned in ``config/settings.yaml`` (``schema.variant``); a full
custom table may be supplied under ``schema.segments`` instead.
"""

from typing import Callable, Dict, Optional

from config import get_config
from cms_converter.utils.exceptions import SchemaError
from cms_converter.utils.logger import get_logger
from .segment_schema import SchemaBuilder, SegmentSchema

logger = get_logger(__name__)

DEFAULT_VARIANT = "cms1500"


def _add_clinical_segments(builder: SchemaBuilder) -> SchemaBuilder:
    """Patient, visit, procedure, insurance and observation segments."""
    return (
        builder
        .segment("PID")
        .field(1, "setId")
        .field(3, "patientId")
        .field(5, "patientName")
        .field(7, "dob", "date")
        .field(8, "gender")
        .field(11, "address")
        .field(13, "phoneNumber")
        .field(18, "patientAccountNumber")

        .segment("PV1")
        .field(1, "setId")
        .field(2, "patientClass")
        .field(3, "assignedLocation")
        .field(7, "attendingDoctor")
        .field(18, "physicianSignatureDate", "date")
        .field(19, "providerPhoneNumber")

        .segment("PR1")
        .field(1, "setId")
        .field(3, "procedureCode")
        .field(4, "procedureDescription")
        .field(5, "procedureDate", "date")
        .field(11, "providerName")

        .segment("IN1")
        .field(1, "setId")
        .field(2, "insurancePlan")
        .field(3, "otherInsured")
        .field(4, "insuranceId")
        .field(5, "secondaryInsurancePlan")
        .field(16, "insuredName")
        .field(18, "insuredDob", "date")
        .field(19, "insuredAddress")
        .field(20, "insuredPhoneNumber")

        .segment("OBX", repeating=True, set_id_field="setId")
        .field(1, "setId")
        .field(2, "valueType")
        .field(3, "observationIdentifier")
        .field(5, "observationValue")
        .field(11, "observationStatus")
    )


def build_cms1500_schema() -> SegmentSchema:
    """Default claim message layout."""
    builder = (
        SchemaBuilder("cms1500")
        .segment("MSH")
        .field(1, "encodingCharacters")
        .field(3, "sendingApplication")
        .field(4, "sendingFacility")
        .field(5, "receivingApplication")
        .field(6, "receivingFacility")
        .field(7, "dateTime", "date")
        .field(9, "messageType")
        .field(10, "controlId")
        .field(11, "processingId")
        .field(12, "versionId")
    )
    return _add_clinical_segments(builder).build()


def build_cms1500_legacy_schema() -> SegmentSchema:
    """Older layout with the MSH fields shifted one position left."""
    builder = (
        SchemaBuilder("cms1500_legacy")
        .segment("MSH")
        .field(1, "encodingCharacters")
        .field(2, "sendingApplication")
        .field(3, "sendingFacility")
        .field(4, "receivingApplication")
        .field(5, "receivingFacility")
        .field(6, "dateTime", "date")
        .field(8, "messageType")
        .field(9, "controlId")
        .field(10, "processingId")
        .field(11, "versionId")
    )
    return _add_clinical_segments(builder).build()


VARIANTS: Dict[str, Callable[[], SegmentSchema]] = {
    'cms1500': build_cms1500_schema,
    'cms1500_legacy': build_cms1500_legacy_schema,
}


def get_schema(variant: Optional[str] = None) -> SegmentSchema:
    """
    Resolve the segment schema for this deployment.

    An explicit ``variant`` argument wins. Otherwise a custom table under
    ``schema.segments`` is used when configured, then ``schema.variant``.

    Args:
        variant: Built-in variant name.

    Returns:
        SegmentSchema instance.

    Raises:
        SchemaError: If the variant is unknown or the custom table is invalid.

    Example:
        >>> get_schema("cms1500_legacy").name_for("MSH", 2)
        "sendingApplication"
    """
    if variant is None:
        custom_table = get_config("schema.segments")
        if custom_table:
            logger.info("Using custom segment schema from configuration")
            return SegmentSchema.from_dict(custom_table, name="configured")
        variant = get_config("schema.variant", DEFAULT_VARIANT)

    factory = VARIANTS.get(variant)
    if factory is None:
        raise SchemaError(
            f"Unknown schema variant '{variant}' (available: {sorted(VARIANTS)})"
        )

    logger.debug(f"Using schema variant: {variant}")
    return factory()
