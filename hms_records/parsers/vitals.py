"""
Modelos de signos vitales: valores pequeños e independientes (presión,
temperatura, peso, talla, glucosa, banderas anormales) agregados en
PatientVitals. Cada uno tiene su par canonicalize/serialize.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from hms_records.commons.coercion import compact, fixed, iso, to_datetime, to_float
from hms_records.commons.resolver import FieldResolver, as_record
from hms_records.commons.types import DEFAULTS, RecordDefaults

_BP_READING = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)")


@dataclass(frozen=True)
class BloodPressure:
    systolic: float = 0
    diastolic: float = 0
    reading: str = ""

    @property
    def is_high(self) -> bool:
        return self.systolic > 140 or self.diastolic > 90

    @property
    def is_low(self) -> bool:
        return self.systolic < 90 or self.diastolic < 60

    @property
    def is_normal(self) -> bool:
        return not self.is_high and not self.is_low

    @property
    def classification(self) -> str:
        if self.is_high:
            return "high"
        if self.is_low:
            return "low"
        return "normal"


@dataclass(frozen=True)
class Temperature:
    value: float = 0.0
    unit: str = "C"

    @property
    def display(self) -> str:
        return f"{fixed(self.value, 1)}°{self.unit}"

    @property
    def is_fever(self) -> bool:
        return self.value > 37.5 if self.unit == "C" else self.value > 99.5


@dataclass(frozen=True)
class Weight:
    value: float = 0.0
    unit: str = "kg"

    @property
    def display(self) -> str:
        return f"{fixed(self.value, 1)} {self.unit}"


@dataclass(frozen=True)
class Height:
    value: float = 0.0
    unit: str = "cm"

    @property
    def display(self) -> str:
        return f"{fixed(self.value, 0)} {self.unit}"


@dataclass(frozen=True)
class BloodGlucose:
    value: float = 0.0
    test_type: str = "Random"

    @property
    def display(self) -> str:
        return f"{fixed(self.value, 0)} mg/dL"

    @property
    def is_high(self) -> bool:
        return self.value > 140

    @property
    def is_low(self) -> bool:
        return self.value < 70


@dataclass(frozen=True)
class AbnormalFlag:
    vital: str = ""
    severity: str = "Normal"
    note: Optional[str] = None


@dataclass(frozen=True)
class PatientVitals:
    id: str = ""
    patient_id: str = ""
    appointment_id: Optional[str] = None
    recorded_by: str = ""
    blood_pressure: Optional[BloodPressure] = None
    heart_rate: Optional[float] = None
    temperature: Optional[Temperature] = None
    respiratory_rate: Optional[float] = None
    oxygen_saturation: Optional[float] = None
    weight: Optional[Weight] = None
    height: Optional[Height] = None
    bmi: Optional[float] = None
    blood_glucose: Optional[BloodGlucose] = None
    pain_scale: Optional[int] = None
    notes: Optional[str] = None
    abnormal_flags: List[AbnormalFlag] = field(default_factory=list)
    recorded_at: datetime = field(default_factory=datetime.now)
    location: str = DEFAULTS.vitals_location
    device_info: Optional[str] = None

    @property
    def bp_display(self) -> str:
        return self.blood_pressure.reading if self.blood_pressure and self.blood_pressure.reading else "--/--"

    @property
    def temp_display(self) -> str:
        return self.temperature.display if self.temperature else "--"

    @property
    def weight_display(self) -> str:
        return self.weight.display if self.weight else "--"

    @property
    def height_display(self) -> str:
        return self.height.display if self.height else "--"

    @property
    def bmi_display(self) -> str:
        return fixed(self.bmi, 1) if self.bmi is not None else "--"


# -------- Canonicalizadores --------

def canonicalize_blood_pressure(raw: Any) -> BloodPressure:
    # Algunos backends mandan solo la lectura "120/80"
    if isinstance(raw, str):
        m = _BP_READING.match(raw)
        if not m:
            return BloodPressure(reading=raw.strip())
        return BloodPressure(systolic=to_float(m.group(1)), diastolic=to_float(m.group(2)), reading=raw.strip())
    r = FieldResolver(raw)
    systolic = r.number("systolic")
    diastolic = r.number("diastolic")
    reading = r.text("reading") or f"{fixed(systolic, 0)}/{fixed(diastolic, 0)}"
    return BloodPressure(systolic=systolic, diastolic=diastolic, reading=reading)


def serialize_blood_pressure(bp: BloodPressure) -> Dict[str, Any]:
    return {"systolic": bp.systolic, "diastolic": bp.diastolic, "reading": bp.reading}


def _measure(raw: Any):
    """Acepta {'value', 'unit'} o un número suelto."""
    if isinstance(raw, dict):
        return FieldResolver(raw)
    return FieldResolver({"value": raw})


def canonicalize_temperature(raw: Any) -> Temperature:
    r = _measure(raw)
    return Temperature(value=r.number("value"), unit=r.text("unit", default="C"))


def canonicalize_weight(raw: Any) -> Weight:
    r = _measure(raw)
    return Weight(value=r.number("value"), unit=r.text("unit", default="kg"))


def canonicalize_height(raw: Any) -> Height:
    r = _measure(raw)
    return Height(value=r.number("value"), unit=r.text("unit", default="cm"))


def canonicalize_blood_glucose(raw: Any) -> BloodGlucose:
    r = _measure(raw)
    return BloodGlucose(value=r.number("value"), test_type=r.text("testType", default="Random"))


def serialize_measure(measure: Any) -> Dict[str, Any]:
    if isinstance(measure, BloodGlucose):
        return {"value": measure.value, "testType": measure.test_type}
    return {"value": measure.value, "unit": measure.unit}


def canonicalize_abnormal_flag(raw: Any) -> AbnormalFlag:
    r = FieldResolver(raw)
    return AbnormalFlag(
        vital=r.text("vital"),
        severity=r.text("severity", default="Normal"),
        note=r.opt_text("note"),
    )


def serialize_abnormal_flag(flag: AbnormalFlag) -> Dict[str, Any]:
    return compact({"vital": flag.vital, "severity": flag.severity, "note": flag.note})


def _optional(raw: Any, key: str, parse):
    value = as_record(raw).get(key)
    if value is None or value == "" or value == {}:
        return None
    return parse(value)


def canonicalize_vitals(raw: Any, defaults: Optional[RecordDefaults] = None) -> PatientVitals:
    defaults = defaults or DEFAULTS
    r = FieldResolver(raw)
    flags = r.first("abnormalFlags")
    return PatientVitals(
        id=r.text("_id", "id"),
        patient_id=r.text("patientId"),
        appointment_id=r.opt_text("appointmentId"),
        recorded_by=r.text("recordedBy"),
        blood_pressure=_optional(raw, "bloodPressure", canonicalize_blood_pressure),
        heart_rate=r.opt_number("heartRate"),
        temperature=_optional(raw, "temperature", canonicalize_temperature),
        respiratory_rate=r.opt_number("respiratoryRate"),
        oxygen_saturation=r.opt_number("oxygenSaturation"),
        weight=_optional(raw, "weight", canonicalize_weight),
        height=_optional(raw, "height", canonicalize_height),
        bmi=r.opt_number("bmi"),
        blood_glucose=_optional(raw, "bloodGlucose", canonicalize_blood_glucose),
        pain_scale=r.opt_integer("painScale"),
        notes=r.opt_text("notes"),
        abnormal_flags=[canonicalize_abnormal_flag(f) for f in flags if isinstance(f, dict)]
        if isinstance(flags, list)
        else [],
        recorded_at=to_datetime(r.first("recordedAt")),
        location=r.text("location", default=defaults.vitals_location),
        device_info=r.opt_text("deviceInfo"),
    )


def serialize_vitals(vitals: PatientVitals) -> Dict[str, Any]:
    out: Dict[str, Any] = compact({"_id": vitals.id})
    out["patientId"] = vitals.patient_id
    out.update(compact({"appointmentId": vitals.appointment_id}))
    out["recordedBy"] = vitals.recorded_by
    if vitals.blood_pressure is not None:
        out["bloodPressure"] = serialize_blood_pressure(vitals.blood_pressure)
    out.update(compact({"heartRate": vitals.heart_rate}))
    if vitals.temperature is not None:
        out["temperature"] = serialize_measure(vitals.temperature)
    out.update(
        compact(
            {
                "respiratoryRate": vitals.respiratory_rate,
                "oxygenSaturation": vitals.oxygen_saturation,
            }
        )
    )
    if vitals.weight is not None:
        out["weight"] = serialize_measure(vitals.weight)
    if vitals.height is not None:
        out["height"] = serialize_measure(vitals.height)
    out.update(compact({"bmi": vitals.bmi}))
    if vitals.blood_glucose is not None:
        out["bloodGlucose"] = serialize_measure(vitals.blood_glucose)
    out.update(compact({"painScale": vitals.pain_scale, "notes": vitals.notes}))
    out["abnormalFlags"] = [serialize_abnormal_flag(f) for f in vitals.abnormal_flags]
    out["recordedAt"] = iso(vitals.recorded_at)
    out["location"] = vitals.location
    out.update(compact({"deviceInfo": vitals.device_info}))
    return out
