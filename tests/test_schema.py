import pytest

from cms_converter.schema import SchemaBuilder, SegmentSchema, get_schema
from cms_converter.utils.exceptions import SchemaError


def test_duplicate_position_is_rejected():
    builder = SchemaBuilder().segment("PID").field(3, "patientId").field(3, "patientName")
    with pytest.raises(SchemaError):
        builder.build()


def test_duplicate_field_name_is_rejected():
    builder = SchemaBuilder().segment("PID").field(3, "patientId").field(4, "patientId")
    with pytest.raises(SchemaError):
        builder.build()


def test_position_below_one_is_rejected():
    with pytest.raises(SchemaError):
        SchemaBuilder().segment("PID").field(0, "type").build()


def test_duplicate_segment_type_is_rejected():
    builder = SchemaBuilder().segment("PID").field(1, "a").segment("PID").field(2, "b")
    with pytest.raises(SchemaError):
        builder.build()


def test_repeating_segment_needs_mapped_set_id():
    builder = SchemaBuilder().segment("OBX", repeating=True, set_id_field="setId").field(2, "value")
    with pytest.raises(SchemaError):
        builder.build()


def test_field_before_segment_is_rejected():
    with pytest.raises(SchemaError):
        SchemaBuilder().field(1, "orphan")


def test_fields_are_ordered_by_position():
    schema = SchemaBuilder().segment("PID").field(7, "dob").field(3, "patientId").field(5, "name").build()
    assert [m.position for m in schema.fields_for("PID")] == [3, 5, 7]
    assert schema.max_position("PID") == 7


def test_generic_names(small_schema):
    assert small_schema.name_for("MSH", 1) == "sendingApp"
    assert small_schema.name_for("MSH", 2) == "field2"
    assert small_schema.name_for("ZZZ", 4) == "field4"

    assert small_schema.position_for("MSH", "field2") == 2
    assert small_schema.position_for("MSH", "field1") is None
    assert small_schema.position_for("MSH", "nonsense") is None
    assert small_schema.position_for("ZZZ", "field3") == 3


def test_unknown_segment_has_no_mappings(small_schema):
    assert small_schema.fields_for("ZZZ") == []
    assert small_schema.max_position("ZZZ") == 0
    assert "ZZZ" not in small_schema


def test_segment_keys(small_schema):
    assert small_schema.segment_type_for_key("OBX12") == "OBX"
    assert small_schema.segment_type_for_key("OBX") == "OBX"
    assert small_schema.segment_type_for_key("PID") == "PID"
    assert small_schema.segment_type_for_key("ZZZ1") == "ZZZ1"

    assert small_schema.segment_key("OBX", "3") == "OBX3"
    assert small_schema.segment_key("OBX", "0") == "OBX"
    assert small_schema.segment_key("OBX", "") == "OBX"
    assert small_schema.segment_key("OBX", None) == "OBX"
    assert small_schema.segment_key("PID", "3") == "PID"


def test_from_dict_builds_schema():
    schema = SegmentSchema.from_dict({
        "PID": {"fields": [
            {"position": 7, "name": "dob", "transform": "date"},
            {"position": 3, "name": "patientId"},
        ]},
        "NTE": {"repeating": True, "set_id_field": "setId", "fields": [
            {"position": 1, "name": "setId"},
            {"position": 3, "name": "comment"},
        ]},
    }, name="lab")

    assert schema.name == "lab"
    assert schema.segment_types == ["PID", "NTE"]
    assert [m.name for m in schema.fields_for("PID")] == ["patientId", "dob"]
    assert schema.fields_for("PID")[1].apply("4/15/1980") == "19800415"
    assert schema.is_repeating("NTE")


def test_from_dict_rejects_unknown_transform():
    with pytest.raises(SchemaError):
        SegmentSchema.from_dict({"PID": {"fields": [{"position": 7, "name": "dob", "transform": "upper"}]}})


def test_from_dict_rejects_bad_entries():
    with pytest.raises(SchemaError):
        SegmentSchema.from_dict({"PID": {"fields": [{"name": "dob"}]}})
    with pytest.raises(SchemaError):
        SegmentSchema.from_dict(["PID"])


def test_builtin_variants_pin_msh_layout():
    current = get_schema("cms1500")
    legacy = get_schema("cms1500_legacy")

    assert current.position_for("MSH", "sendingApplication") == 3
    assert current.position_for("MSH", "versionId") == 12
    assert legacy.position_for("MSH", "sendingApplication") == 2
    assert legacy.position_for("MSH", "versionId") == 11

    assert current.fields_for("PID") == legacy.fields_for("PID")
    assert current.segment_types == ["MSH", "PID", "PV1", "PR1", "IN1", "OBX"]


def test_configured_variant_is_default():
    assert get_schema().name == "cms1500"


def test_unknown_variant():
    with pytest.raises(SchemaError):
        get_schema("hl7v3")
