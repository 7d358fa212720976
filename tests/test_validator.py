"""Tests for the encounter field schema and validator."""

from datetime import datetime
from decimal import Decimal
from itertools import product

import pytest

from intake.errors import UnknownFieldError
from intake.models.encounter import ErrorCode, IdType, ServiceType
from intake.services.validator import (
    REQUIRED_FIELDS,
    normalize_field_name,
    validate_encounter,
)


@pytest.fixture
def raw(valid_fields):
    return {"timestamp": "2024-05-01T10:30", **valid_fields}


class TestValidRecord:
    def test_complete_record_is_valid(self, raw):
        result = validate_encounter(raw)
        assert result.ok
        assert result.errors == {}
        record = result.record
        assert record.attention_id == "ATN-2024-0001"
        assert record.id_type is IdType.NATIONAL_ID
        assert record.service_type is ServiceType.EMERGENCY
        assert record.timestamp == datetime(2024, 5, 1, 10, 30)
        assert record.temperature == Decimal("36.8")
        assert record.glasgow_total == 15

    def test_optional_fields_may_be_absent(self, raw):
        for name in ("heartRate", "respiratoryRate", "spo2", "bloodPressure", "temperature"):
            del raw[name]
        result = validate_encounter(raw)
        assert result.ok
        assert result.record.heart_rate is None
        assert result.record.temperature is None
        assert result.record.medical_history is None

    def test_blank_optional_fields_normalize_to_none(self, raw):
        raw.update({"medicalHistory": "  ", "heartRate": "", "temperature": ""})
        record = validate_encounter(raw).record
        assert record.medical_history is None
        assert record.heart_rate is None
        assert record.temperature is None

    def test_required_text_is_stripped(self, raw):
        raw["patientName"] = "  Juan Pérez  "
        assert validate_encounter(raw).record.patient_name == "Juan Pérez"

    def test_snake_case_names_accepted(self, raw):
        raw["patient_name"] = raw.pop("patientName")
        assert validate_encounter(raw).ok

    def test_id_type_alias(self, raw):
        raw["idType"] = "passport"
        assert validate_encounter(raw).record.id_type is IdType.PASSPORT

    def test_serializes_with_camel_case(self, raw):
        data = validate_encounter(raw).record.model_dump(by_alias=True)
        assert data["attentionId"] == "ATN-2024-0001"
        assert data["glasgowTotal"] == 15
        assert "attention_id" not in data


class TestRequiredFields:
    @pytest.mark.parametrize("name", ["patientName", "attentionId", "destinationFacility"])
    def test_empty_required_field(self, raw, name):
        raw[name] = ""
        result = validate_encounter(raw)
        assert not result.ok
        assert result.record is None
        field = normalize_field_name(name)
        assert result.errors[field].code is ErrorCode.MISSING_FIELD
        assert list(result.errors) == [field]

    def test_whitespace_only_is_missing(self, raw):
        raw["patientId"] = "   "
        assert validate_encounter(raw).errors["patient_id"].code is ErrorCode.MISSING_FIELD

    def test_absent_key_is_missing(self, raw):
        del raw["serviceAddress"]
        error = validate_encounter(raw).errors["service_address"]
        assert error.code is ErrorCode.MISSING_FIELD
        assert error.message

    def test_empty_record_reports_every_required_field(self):
        result = validate_encounter({})
        assert set(result.errors) == REQUIRED_FIELDS
        assert all(e.code is ErrorCode.MISSING_FIELD for e in result.errors.values())

    def test_non_text_value_is_invalid_type(self, raw):
        raw["patientName"] = 12345
        assert validate_encounter(raw).errors["patient_name"].code is ErrorCode.INVALID_TYPE


class TestEnumeratedFields:
    def test_unknown_plate_rejected(self, raw):
        raw["vehiclePlate"] = "AMB-999"
        result = validate_encounter(raw)
        assert list(result.errors) == ["vehicle_plate"]
        assert result.errors["vehicle_plate"].code is ErrorCode.INVALID_ENUM_VALUE

    def test_plate_checked_against_given_fleet(self, raw):
        raw["vehiclePlate"] = "TRK-42"
        assert validate_encounter(raw, fleet=["TRK-42"]).ok
        assert not validate_encounter(raw).ok

    def test_invalid_id_type(self, raw):
        raw["idType"] = "XX"
        error = validate_encounter(raw).errors["id_type"]
        assert error.code is ErrorCode.INVALID_ENUM_VALUE
        assert "CC" in error.message

    def test_invalid_service_type(self, raw):
        raw["serviceType"] = "pickup"
        assert validate_encounter(raw).errors["service_type"].code is ErrorCode.INVALID_ENUM_VALUE

    def test_blank_enum_is_missing(self, raw):
        raw["serviceType"] = ""
        assert validate_encounter(raw).errors["service_type"].code is ErrorCode.MISSING_FIELD


class TestGlasgowBounds:
    def test_every_in_range_triple_is_valid(self, raw):
        for eye, verbal, motor in product(range(1, 5), range(1, 6), range(1, 7)):
            raw.update(glasgowEye=eye, glasgowVerbal=verbal, glasgowMotor=motor)
            record = validate_encounter(raw).record
            assert record.glasgow_total == eye + verbal + motor
            assert 3 <= record.glasgow_total <= 15

    @pytest.mark.parametrize(
        "eye,verbal,motor,offending",
        [
            (0, 5, 6, {"glasgow_eye"}),
            (5, 5, 6, {"glasgow_eye"}),
            (4, 6, 6, {"glasgow_verbal"}),
            (4, 5, 7, {"glasgow_motor"}),
            (4, 0, 0, {"glasgow_verbal", "glasgow_motor"}),
            (-1, 9, 0, {"glasgow_eye", "glasgow_verbal", "glasgow_motor"}),
        ],
    )
    def test_out_of_range_reports_only_offending_fields(self, raw, eye, verbal, motor, offending):
        raw.update(glasgowEye=eye, glasgowVerbal=verbal, glasgowMotor=motor)
        errors = validate_encounter(raw).errors
        assert set(errors) == offending
        assert all(errors[f].code is ErrorCode.OUT_OF_RANGE for f in offending)

    def test_values_are_not_clamped(self, raw):
        raw["glasgowMotor"] = 99
        result = validate_encounter(raw)
        assert result.record is None
        assert "between 1 and 6" in result.errors["glasgow_motor"].message

    @pytest.mark.parametrize("value", [2.5, "abc", True, [3]])
    def test_non_integral_is_invalid_type(self, raw, value):
        raw["glasgowEye"] = value
        assert validate_encounter(raw).errors["glasgow_eye"].code is ErrorCode.INVALID_TYPE

    @pytest.mark.parametrize("value", ["3", 3.0, " 3 "])
    def test_integral_input_accepted(self, raw, value):
        raw["glasgowEye"] = value
        assert validate_encounter(raw).record.glasgow_eye == 3

    def test_string_out_of_range(self, raw):
        raw["glasgowVerbal"] = "6"
        assert validate_encounter(raw).errors["glasgow_verbal"].code is ErrorCode.OUT_OF_RANGE


class TestVitalsAndTimestamp:
    def test_non_numeric_heart_rate(self, raw):
        raw["heartRate"] = "fast"
        assert validate_encounter(raw).errors["heart_rate"].code is ErrorCode.INVALID_TYPE

    @pytest.mark.parametrize("value", ["١٢٠", "１２０", "12٠"])
    def test_non_ascii_digits_rejected(self, raw, value):
        raw["heartRate"] = value
        assert validate_encounter(raw).errors["heart_rate"].code is ErrorCode.INVALID_TYPE

    def test_integer_spo2_becomes_string(self, raw):
        raw["spo2"] = 97
        assert validate_encounter(raw).record.spo2 == "97"

    def test_bad_temperature(self, raw):
        raw["temperature"] = "warm"
        assert validate_encounter(raw).errors["temperature"].code is ErrorCode.INVALID_TYPE

    def test_blood_pressure_is_free_text(self, raw):
        raw["bloodPressure"] = "unable to obtain"
        assert validate_encounter(raw).record.blood_pressure == "unable to obtain"

    def test_bad_timestamp(self, raw):
        raw["timestamp"] = "yesterday"
        assert validate_encounter(raw).errors["timestamp"].code is ErrorCode.INVALID_TYPE

    def test_missing_timestamp(self, raw):
        del raw["timestamp"]
        assert validate_encounter(raw).errors["timestamp"].code is ErrorCode.MISSING_FIELD


class TestIdempotence:
    def test_same_input_same_result(self, raw):
        raw["patientName"] = ""
        raw["glasgowEye"] = 9
        assert validate_encounter(raw) == validate_encounter(raw)

    def test_valid_input_same_result(self, raw):
        assert validate_encounter(raw) == validate_encounter(raw)

    def test_input_not_mutated(self, raw):
        snapshot = dict(raw)
        validate_encounter(raw)
        assert raw == snapshot


class TestProgrammerMisuse:
    def test_unknown_field_raises(self, raw):
        raw["favouriteColour"] = "blue"
        with pytest.raises(UnknownFieldError):
            validate_encounter(raw)

    @pytest.mark.parametrize("name", ["glasgowTotal", "glasgow_total"])
    def test_derived_total_cannot_be_set(self, raw, name):
        raw[name] = 15
        with pytest.raises(UnknownFieldError, match="derived"):
            validate_encounter(raw)

    def test_non_mapping_raises(self):
        with pytest.raises(TypeError):
            validate_encounter(["patientName"])

    def test_normalize_field_name(self):
        assert normalize_field_name("vehiclePlate") == "vehicle_plate"
        assert normalize_field_name("vehicle_plate") == "vehicle_plate"
        with pytest.raises(KeyError):
            normalize_field_name("nope")
