from datetime import datetime

from hms_records.parsers.vitals import (
    canonicalize_blood_glucose,
    canonicalize_blood_pressure,
    canonicalize_temperature,
    canonicalize_vitals,
    serialize_vitals,
)

VITALS = {
    "_id": "v1",
    "patientId": "p1",
    "recordedBy": "nurse-7",
    "bloodPressure": {"systolic": 150, "diastolic": 95},
    "heartRate": "88",
    "temperature": 38.2,
    "weight": {"value": 70, "unit": "kg"},
    "bloodGlucose": {"value": 110, "testType": "Fasting"},
    "abnormalFlags": [{"vital": "bp", "severity": "High"}, "noise"],
    "recordedAt": "2025-03-10T09:30:00",
}


def test_blood_pressure_from_object_and_string():
    bp = canonicalize_blood_pressure({"systolic": 150, "diastolic": 95})
    assert bp.reading == "150/95"
    assert bp.is_high
    assert bp.classification == "high"

    bp = canonicalize_blood_pressure("120/80")
    assert bp.systolic == 120.0
    assert bp.diastolic == 80.0
    assert bp.is_normal


def test_low_blood_pressure():
    assert canonicalize_blood_pressure({"systolic": 85, "diastolic": 55}).classification == "low"


def test_temperature_thresholds():
    assert canonicalize_temperature(38.2).is_fever
    assert canonicalize_temperature(38.2).display == "38.2°C"
    assert not canonicalize_temperature({"value": 99.0, "unit": "F"}).is_fever
    assert canonicalize_temperature({"value": 101.3, "unit": "F"}).is_fever
    assert not canonicalize_temperature(37.5).is_fever


def test_canonicalize_vitals():
    vitals = canonicalize_vitals(VITALS)
    assert vitals.heart_rate == 88.0
    assert vitals.bp_display == "150/95"
    assert vitals.temp_display == "38.2°C"
    assert vitals.weight_display == "70.0 kg"
    assert vitals.height_display == "--"
    assert vitals.blood_glucose.display == "110 mg/dL"
    assert vitals.blood_glucose.test_type == "Fasting"
    assert len(vitals.abnormal_flags) == 1
    assert vitals.recorded_at == datetime(2025, 3, 10, 9, 30)
    assert vitals.location == "Clinic"


def test_missing_optional_vitals():
    vitals = canonicalize_vitals({"patientId": "p1"})
    assert vitals.blood_pressure is None
    assert vitals.bp_display == "--/--"
    assert vitals.bmi_display == "--"
    assert vitals.pain_scale is None

    wire = serialize_vitals(vitals)
    for key in ("bloodPressure", "temperature", "heartRate", "bmi", "painScale", "appointmentId", "_id"):
        assert key not in wire
    assert wire["abnormalFlags"] == []


def test_serialize_vitals():
    wire = serialize_vitals(canonicalize_vitals(VITALS))
    assert wire["_id"] == "v1"
    assert wire["bloodPressure"] == {"systolic": 150.0, "diastolic": 95.0, "reading": "150/95"}
    assert wire["temperature"] == {"value": 38.2, "unit": "C"}
    assert wire["bloodGlucose"] == {"value": 110.0, "testType": "Fasting"}
    assert wire["abnormalFlags"] == [{"vital": "bp", "severity": "High"}]
    assert wire["recordedAt"] == "2025-03-10T09:30:00"


def test_blood_glucose_thresholds():
    high = canonicalize_blood_glucose({"value": 180})
    assert high.is_high and not high.is_low
    low = canonicalize_blood_glucose({"value": 65, "testType": "Fasting"})
    assert low.is_low and not low.is_high
    normal = canonicalize_blood_glucose(140)
    assert not normal.is_high
    assert not normal.is_low
    assert canonicalize_blood_glucose(70).is_low is False
