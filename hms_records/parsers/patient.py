from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from hms_records.commons.coercion import age_on, compact, fixed, to_opt_date, to_opt_float, to_str
from hms_records.commons.resolver import FieldResolver
from hms_records.commons.types import DEFAULTS, RecordDefaults

from .identity import resolve_reference, serialize_reference
from .models import Embedded, RecordRef, Role


@dataclass(frozen=True)
class PatientRecord:
    patient_id: str = ""
    name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    age: int = 0
    gender: str = ""
    blood_group: str = DEFAULTS.blood_group
    # vitales como texto de formulario; se convierten a número al serializar
    weight: str = ""
    height: str = ""
    bmi: str = ""
    bp: str = ""
    pulse: str = ""
    temp: str = ""
    oxygen: str = ""
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    phone: str = ""
    house_no: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""
    address: str = ""
    insurance_number: str = ""
    expiry_date: str = ""
    avatar_url: str = ""
    date_of_birth: str = ""
    last_visit_date: str = ""
    doctor: Optional[RecordRef] = None
    doctor_id: str = ""
    doctor_name: str = ""
    medical_history: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)
    notes: str = ""
    patient_code: Optional[str] = None
    is_selected: bool = field(default=False, compare=False)

    @property
    def display_id(self) -> str:
        return self.patient_code or self.patient_id

    @property
    def doctor_display_name(self) -> str:
        if isinstance(self.doctor, Embedded) and self.doctor.display_name:
            return self.doctor.display_name
        return self.doctor_name or self.doctor_id or "No doctor"

    @property
    def bmi_display(self) -> str:
        value = to_opt_float(self.bmi)
        return fixed(value, 1) if value is not None else "--"

    @property
    def weight_display(self) -> str:
        value = to_opt_float(self.weight)
        return f"{fixed(value, 1)} kg" if value is not None else "--"

    @property
    def height_display(self) -> str:
        value = to_opt_float(self.height)
        return f"{fixed(value, 0)} cm" if value is not None else "--"

    @property
    def bp_display(self) -> str:
        return self.bp or "--"


@dataclass(frozen=True)
class CheckupRecord:
    doctor: str = ""
    speciality: str = ""
    reason: str = ""
    date: str = ""
    report_status: str = ""


def _scalar(key: str):
    """Accesor de primer nivel que ignora sub-objetos (p.ej. 'address' como dict)."""
    return lambda raw: None if isinstance(raw.get(key), (dict, list)) else raw.get(key)


def _resolve_age(r: FieldResolver, today: Optional[date]) -> int:
    age = r.integer("age")
    if age == 0:
        age = r.integer("metadata.age")
    if age == 0:
        dob = to_opt_date(r.first("dateOfBirth"))
        if dob is not None:
            age = age_on(dob, today)
    return age


def _resolve_doctor(r: FieldResolver):
    doctor_raw = r.first("doctor")
    doctor_id_raw = r.first("doctorId", "doctor_id")

    refs = [resolve_reference(v, Role.DOCTOR) for v in (doctor_raw, doctor_id_raw)]
    embedded = next((ref for ref in refs if isinstance(ref, Embedded)), None)
    ref = embedded or next((ref for ref in refs if ref is not None), None)

    if isinstance(doctor_id_raw, dict):
        doctor_id = FieldResolver(doctor_id_raw).text("_id", "id")
    elif doctor_id_raw is not None:
        doctor_id = to_str(doctor_id_raw).strip()
    else:
        doctor_id = ref.id if ref is not None else ""

    doctor_name = ""
    if embedded is not None:
        source = doctor_raw if isinstance(doctor_raw, dict) else doctor_id_raw
        doctor_name = FieldResolver(source).text("name", "fullName") or embedded.display_name
    if not doctor_name:
        doctor_name = r.text("doctorName", "doctor_name")
    return ref, doctor_id, doctor_name


def canonicalize_patient(
    raw: Any, defaults: Optional[RecordDefaults] = None, today: Optional[date] = None
) -> PatientRecord:
    defaults = defaults or DEFAULTS
    r = FieldResolver(raw)

    first = r.text("firstName")
    last = r.text("lastName")
    doctor, doctor_id, doctor_name = _resolve_doctor(r)

    return PatientRecord(
        patient_id=r.text("_id", "id", "patientId"),
        name=r.text("name") or " ".join(p for p in (first, last) if p),
        first_name=first or None,
        last_name=last or None,
        age=_resolve_age(r, today),
        gender=r.text("gender"),
        blood_group=r.text("bloodGroup", "metadata.bloodGroup", default=defaults.blood_group),
        weight=r.text("vitals.weightKg", "weight"),
        height=r.text("vitals.heightCm", "height"),
        bmi=r.text("vitals.bmi", "bmi"),
        oxygen=r.text("vitals.spo2", "oxygen"),
        bp=r.text("vitals.bp", "bp"),
        pulse=r.text("vitals.pulse", "pulse"),
        temp=r.text("vitals.temp", "temp"),
        emergency_contact_name=r.text("metadata.emergencyContactName", "emergencyContactName"),
        emergency_contact_phone=r.text("metadata.emergencyContactPhone", "emergencyContactPhone"),
        phone=r.text("phone"),
        house_no=r.text("address.houseNo", "houseNo"),
        street=r.text("address.street", "street"),
        city=r.text("address.city", "city"),
        state=r.text("address.state", "state"),
        pincode=r.text("address.pincode", "pincode"),
        country=r.text("address.country", "country"),
        address=r.text("address.line1", _scalar("address")),
        insurance_number=r.text("metadata.insuranceNumber", "insuranceNumber"),
        expiry_date=r.text("metadata.expiryDate", "expiryDate"),
        avatar_url=r.text("metadata.avatarUrl", "avatarUrl"),
        date_of_birth=r.text("dateOfBirth"),
        last_visit_date=r.text("lastVisitDate", "updatedAt"),
        doctor=doctor,
        doctor_id=doctor_id,
        doctor_name=doctor_name,
        medical_history=r.str_list(
            "metadata.medicalHistory", "medicalHistory", sub_key="currentConditions"
        ),
        allergies=r.str_list("allergies", "metadata.allergies"),
        notes=r.text("notes"),
        patient_code=r.opt_text(
            "patientCode", "patient_code", "metadata.patientCode", "metadata.patient_code"
        ),
        is_selected=r.first("isSelected") is True,
    )


def serialize_patient(patient: PatientRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = compact(
        {
            "patientId": patient.patient_id,
            "name": patient.name,
            "firstName": patient.first_name,
            "lastName": patient.last_name,
        }
    )
    out.update(
        {
            "age": patient.age,
            "gender": patient.gender,
            "bloodGroup": patient.blood_group,
            "phone": patient.phone,
        }
    )
    out.update(
        compact(
            {
                "dateOfBirth": patient.date_of_birth,
                "lastVisitDate": patient.last_visit_date,
            }
        )
    )

    address = compact(
        {
            "houseNo": patient.house_no,
            "street": patient.street,
            "city": patient.city,
            "state": patient.state,
            "pincode": patient.pincode,
            "country": patient.country,
            "line1": patient.address,
        }
    )
    if address:
        out["address"] = address

    vitals = compact(
        {
            "heightCm": to_opt_float(patient.height),
            "weightKg": to_opt_float(patient.weight),
            "bmi": to_opt_float(patient.bmi),
            "bp": patient.bp,
            "pulse": to_opt_float(patient.pulse),
            "spo2": to_opt_float(patient.oxygen),
            "temp": to_opt_float(patient.temp),
        }
    )
    if vitals:
        out["vitals"] = vitals

    if patient.doctor_id:
        out["doctorId"] = patient.doctor_id
    if isinstance(patient.doctor, Embedded):
        out["doctor"] = serialize_reference(patient.doctor)
    if patient.doctor_name:
        out["doctorName"] = patient.doctor_name

    out["allergies"] = list(patient.allergies)
    out["notes"] = patient.notes

    metadata = {
        "age": patient.age,
        "bloodGroup": patient.blood_group,
        "medicalHistory": list(patient.medical_history),
    }
    metadata.update(
        compact(
            {
                "emergencyContactName": patient.emergency_contact_name,
                "emergencyContactPhone": patient.emergency_contact_phone,
                "insuranceNumber": patient.insurance_number,
                "expiryDate": patient.expiry_date,
                "avatarUrl": patient.avatar_url,
            }
        )
    )
    out["metadata"] = metadata

    if patient.patient_code:
        out["patientCode"] = patient.patient_code
    return out


def canonicalize_checkup(raw: Any) -> CheckupRecord:
    r = FieldResolver(raw)
    return CheckupRecord(
        doctor=r.text("doctor"),
        speciality=r.text("speciality", "specialty"),
        reason=r.text("reason"),
        date=r.text("date"),
        report_status=r.text("reportStatus"),
    )


def serialize_checkup(checkup: CheckupRecord) -> Dict[str, Any]:
    return {
        "doctor": checkup.doctor,
        "speciality": checkup.speciality,
        "reason": checkup.reason,
        "date": checkup.date,
        "reportStatus": checkup.report_status,
    }
