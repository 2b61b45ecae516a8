import re

import pytest

from cms_converter.extraction import (
    DEFAULT_SENTINELS,
    EXTRACTION_QUORUM,
    FieldExtractor,
    FieldSpec,
    default_field_specs,
    extract,
    split_target,
)
from cms_converter.utils.exceptions import DocumentRejectedError, ExtractionQuorumFailure, SchemaError


FALLBACK_TEXT = (
    "HEALTH INSURANCE CLAIM FORM Member ID: ABC12345 Patient Name: DOE, JANE "
    "DOB: 04/15/1980 Carrier: AETNA Sex: F"
)


def test_full_form_extraction(claim_text, fixed_now):
    record = FieldExtractor(now=fixed_now).extract(claim_text)

    assert record["PID"] == {
        "patientId": "XYZ123456789",
        "patientName": "DOE, JANE A",
        "dob": "19800415",
        "gender": "F",
        "address": "123 MAIN ST",
        "phoneNumber": "(555) 123-4567",
        "patientAccountNumber": "ACC-7788",
    }
    assert record["IN1"] == {
        "insuranceId": "XYZ123456789",
        "insuredName": "DOE, JOHN B",
        "insuredDob": "19780102",
        "insurancePlan": "BLUE CROSS PPO",
    }
    assert record["PR1"] == {
        "procedureDate": "20240310",
        "procedureCode": "99214",
        "providerName": "DR. ALAN SMITH",
    }
    assert record["PV1"]["attendingDoctor"] == "DR. ALAN SMITH"
    assert record["PV1"]["patientClass"] == "O"
    assert record["MSH"]["dateTime"] == "20240601"
    assert record["MSH"]["sendingApplication"] == "CMS1500App"


def test_report_for_full_form(claim_text, fixed_now):
    report = FieldExtractor(now=fixed_now).extract_with_report(claim_text, source="claim.pdf")

    assert report.matched_count == len(default_field_specs())
    assert report.used_fallback == []
    assert report.defaulted == []
    assert report.missing_required == []
    assert report.quorum == EXTRACTION_QUORUM
    assert report.to_dict()["source"] == "claim.pdf"


def test_fallback_patterns_and_defaults(fixed_now):
    report = FieldExtractor(now=fixed_now).extract_with_report(FALLBACK_TEXT)
    record = report.record

    assert record["IN1"]["insuranceId"] == "ABC12345"
    assert record["PID"]["patientName"] == "DOE, JANE"
    assert record["PID"]["dob"] == "19800415"
    assert record["PID"]["gender"] == "F"
    assert record["IN1"]["insurancePlan"] == "AETNA"
    assert report.used_fallback == ["insuredId", "patientName", "patientDob", "gender", "insurancePlan"]

    assert "procedureDate" not in record["PR1"]
    assert record["PR1"]["procedureCode"] == DEFAULT_SENTINELS["procedureCode"]
    assert record["PR1"]["providerName"] == DEFAULT_SENTINELS["providerName"]
    assert report.defaulted == ["procedureCode", "providerName"]
    assert report.missing_required == ["serviceDate"]
    assert any("serviceDate" in w for w in report.warnings)


def test_quorum_failure_lists_missing_required_fields(fixed_now):
    text = "HEALTH INSURANCE CLAIM FORM Patient Name: DOE, JANE and some further unrelated scanned words"

    with pytest.raises(ExtractionQuorumFailure) as excinfo:
        FieldExtractor(now=fixed_now).extract(text)

    assert excinfo.value.missing == ["insuredId", "patientDob", "insurancePlan", "serviceDate"]
    assert excinfo.value.matched == 1
    assert excinfo.value.quorum == 3


def test_quorum_boundary(fixed_now):
    base = "HEALTH INSURANCE CLAIM FORM Member ID: ABC12345 Patient Name: DOE, JANE"
    extractor = FieldExtractor(now=fixed_now)

    record = extractor.extract(base + " DOB: 04/15/1980")
    assert record["PID"]["dob"] == "19800415"

    with pytest.raises(ExtractionQuorumFailure) as excinfo:
        extractor.extract(base + " nothing else was legible on this page")
    assert excinfo.value.missing == ["patientDob", "insurancePlan", "serviceDate"]


def test_short_text_is_rejected():
    with pytest.raises(DocumentRejectedError):
        FieldExtractor().extract("CMS-1500 DOE")


def test_text_without_keywords_is_rejected():
    with pytest.raises(DocumentRejectedError):
        FieldExtractor().extract(
            "This is a grocery receipt for apples, bananas and a very large bag of oranges"
        )


@pytest.mark.parametrize("dob", ["04/15/1850", "04/15/2030", "02/30/1980"])
def test_unacceptable_dates_leave_field_unset(dob, fixed_now):
    text = (
        "HEALTH INSURANCE CLAIM FORM Member ID: ABC12345 Patient Name: DOE, JANE "
        f"DOB: {dob} Carrier: AETNA"
    )
    report = FieldExtractor(now=fixed_now).extract_with_report(text)

    assert "dob" not in report.record["PID"]
    assert "patientDob" in report.missing_required


def test_current_year_is_accepted(fixed_now):
    text = (
        "HEALTH INSURANCE CLAIM FORM Member ID: ABC12345 Patient Name: DOE, JANE "
        "DOB: 04/15/1980 Carrier: AETNA DOS: 05/31/2024"
    )
    record = FieldExtractor(now=fixed_now).extract(text)
    assert record["PR1"]["procedureDate"] == "20240531"


def test_custom_field_specs():
    specs = [FieldSpec.create("claimNumber", "ZZZ.claimNumber", r"CLAIM NO\.? (\d+)", required=True)]
    extractor = FieldExtractor(field_specs=specs, quorum=1, min_text_length=10, keywords=["claim"])

    record = extractor.extract("CLAIM NO. 98765 received today")
    assert record["ZZZ"] == {"claimNumber": "98765"}


def test_optional_spec_default_overrides_sentinels():
    specs = [
        FieldSpec.create("claimNumber", "ZZZ.claimNumber", r"CLAIM NO\.? (\d+)", required=True),
        FieldSpec.create("priority", "ZZZ.priority", r"PRIORITY (\w+)", default="ROUTINE"),
    ]
    extractor = FieldExtractor(field_specs=specs, quorum=1, min_text_length=10, keywords=["claim"])

    report = extractor.extract_with_report("CLAIM NO. 98765 received today")
    assert report.record["ZZZ"]["priority"] == "ROUTINE"
    assert report.defaulted == ["priority"]


def test_module_level_extract(claim_text):
    assert extract(claim_text)["PID"]["patientName"] == "DOE, JANE A"


def test_field_spec_validation():
    with pytest.raises(SchemaError):
        FieldSpec.create("bad", "PID.x", r"(unclosed")
    with pytest.raises(SchemaError):
        FieldSpec.create("bad", "PIDx", r"x")
    with pytest.raises(SchemaError):
        FieldSpec.from_dict({"name": "noTarget", "primary": "x"})
    with pytest.raises(SchemaError):
        split_target("PID.")


def test_field_spec_from_dict():
    spec = FieldSpec.from_dict({
        "name": "dob",
        "target": "PID.dob",
        "primary": r"BORN (\S+)",
        "fallback": r"DOB (\S+)",
        "required": True,
        "date": True,
    })
    assert spec.required and spec.is_date
    assert [p.pattern for p in spec.patterns] == [r"BORN (\S+)", r"DOB (\S+)"]
    assert all(p.flags & re.IGNORECASE for p in spec.patterns)


def test_accented_names_survive_extraction(fixed_now):
    text = (
        "HEALTH INSURANCE CLAIM FORM Member ID: ABC12345 Patient Name: MÜLLER, ANA "
        "DOB: 04/15/1980 Carrier: AETNA"
    )
    record = FieldExtractor(now=fixed_now).extract(text)
    assert record["PID"]["patientName"] == "MÜLLER, ANA"


def test_rejected_box_date_falls_back_to_labelled_date(fixed_now):
    text = (
        "HEALTH INSURANCE CLAIM FORM 3. PATIENT'S BIRTH DATE MM DD YY 04 15 1850 "
        "Member ID: ABC12345 Patient Name: DOE, JANE DOB: 04/15/1980 Carrier: AETNA"
    )
    report = FieldExtractor(now=fixed_now).extract_with_report(text)

    assert report.record["PID"]["dob"] == "19800415"
    assert "patientDob" in report.used_fallback
