from cms_converter.extraction import KeyValueMapper, key_value_to_record, parse_key_value_text


FORM_EXPORT = {
    "insurance_id": "XYZ1",
    "pt_name": "DOE, JANE",
    "birth_mm": "4",
    "birth_dd": "15",
    "birth_yy": "1980",
    "sex": "female",
    "pt_city": "Springfield",
    "pt_state": "IL",
    "insurance_name": "AETNA",
    "physician_signature": "DR SMITH",
    "physician_date": "06/01/2024",
}


def test_parse_splits_on_first_colon():
    text = "pt_name: DOE, JANE\nnote: seen 10:30\nbadline\n: novalue\nempty:\n"
    assert parse_key_value_text(text) == {"pt_name": "DOE, JANE", "note": "seen 10:30"}


def test_parse_keeps_last_value_for_repeated_key():
    assert parse_key_value_text("sex: M\nsex: F") == {"sex": "F"}


def test_mapper_builds_claim_record(fixed_now):
    record = KeyValueMapper(now=fixed_now).to_record(FORM_EXPORT)

    assert record["PID"] == {
        "setId": "1",
        "patientId": "XYZ1",
        "patientName": "DOE, JANE",
        "dob": "19800415",
        "gender": "F",
        "address": "Springfield^IL",
    }
    assert record["IN1"] == {"setId": "1", "insuranceId": "XYZ1", "insurancePlan": "AETNA"}
    assert record["PV1"] == {
        "setId": "1",
        "patientClass": "O",
        "assignedLocation": "Clinic",
        "attendingDoctor": "DR SMITH",
        "physicianSignatureDate": "06/01/2024",
    }
    assert record["MSH"]["dateTime"] == "20240601"
    assert record["MSH"]["messageType"] == "ADT^A01"


def test_mapper_skips_two_digit_birth_year(fixed_now):
    mapper = KeyValueMapper(now=fixed_now)
    record = mapper.to_record({"birth_mm": "04", "birth_dd": "15", "birth_yy": "80"})

    assert "dob" not in record["PID"]
    assert len(mapper.warnings) == 1


def test_mapper_leaves_missing_values_out(fixed_now):
    record = key_value_to_record("pt_name: DOE, JANE", now=fixed_now)
    assert record["PID"] == {"setId": "1", "patientName": "DOE, JANE"}
    assert record["IN1"] == {"setId": "1"}
