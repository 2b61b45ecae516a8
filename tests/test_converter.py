import json

import pytest

from cms_converter.converter import ConversionService
from cms_converter.extraction import FieldExtractor
from cms_converter.schema import get_schema
from cms_converter.utils.exceptions import ExtractionQuorumFailure, MalformedInputError


class FakeOCREngine:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def extract_text(self, data, filename=None):
        self.calls.append((data, filename))
        return self.text


@pytest.fixture
def service(fixed_now):
    return ConversionService(schema=get_schema("cms1500"), extractor=FieldExtractor(now=fixed_now))


def test_json_to_hl7_returns_message_and_preview(service):
    result = service.json_to_hl7('{"PID": {"patientId": "12345", "dob": "4/15/1980"}}')

    assert result.wire_text == "PID|||12345||||19800415"
    assert result.record == {"PID": {"patientId": "12345", "dob": "19800415"}}
    assert result.source == "json"


def test_json_to_hl7_rejects_bad_json(service):
    with pytest.raises(MalformedInputError):
        service.json_to_hl7("{not json")


def test_hl7_to_json(service):
    result = service.hl7_to_json("MSH|^~\\&||CMS1500App\nPID|1||12345")

    assert result.record == {
        "MSH": {"encodingCharacters": "^~\\&", "sendingApplication": "CMS1500App"},
        "PID": {"setId": "1", "patientId": "12345"},
    }
    assert json.loads(result.to_json())["record"] == result.record


def test_hl7_to_json_with_legacy_layout():
    result = ConversionService(schema=get_schema("cms1500_legacy")).hl7_to_json("MSH|^~\\&|CMS1500App")
    assert result.record["MSH"]["sendingApplication"] == "CMS1500App"


def test_hl7_to_json_rejects_empty_message(service):
    with pytest.raises(MalformedInputError):
        service.hl7_to_json("  \n ")


def test_text_to_hl7(service, claim_text):
    result = service.text_to_hl7(claim_text)
    lines = result.wire_text.split("\n")

    assert [line.split("|")[0] for line in lines] == ["MSH", "PID", "PV1", "PR1", "IN1"]
    assert lines[0].startswith("MSH|^~\\&||CMS1500App|Hospital")
    assert "XYZ123456789" in lines[1]
    assert "19800415" in lines[1]
    assert result.extraction.matched_count == 13
    assert result.to_dict()["extraction"]["missing_required"] == []


def test_text_to_hl7_propagates_quorum_failure(service):
    with pytest.raises(ExtractionQuorumFailure):
        service.text_to_hl7("HEALTH INSURANCE CLAIM FORM with nothing legible on it at all today")


def test_document_to_hl7_uses_ocr_engine(fixed_now, claim_text):
    engine = FakeOCREngine(claim_text)
    service = ConversionService(extractor=FieldExtractor(now=fixed_now), ocr_engine=engine)

    result = service.document_to_hl7(b"%PDF-1.4 ...", "claim.pdf")

    assert engine.calls == [(b"%PDF-1.4 ...", "claim.pdf")]
    assert result.source == "document"
    assert result.extraction.source == "claim.pdf"
    assert "DOE, JANE A" in result.wire_text


def test_key_value_to_hl7(service):
    result = service.key_value_to_hl7("pt_name: DOE, JANE\ninsurance_id: XYZ1\nbirth_yy: 80")

    assert "PID|1||XYZ1||DOE, JANE" in result.wire_text.split("\n")
    assert len(result.warnings) == 1


def test_key_value_to_hl7_rejects_empty_export(service):
    with pytest.raises(MalformedInputError):
        service.key_value_to_hl7("no pairs here")
