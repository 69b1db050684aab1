from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from hms_records.commons.coercion import compact, iso, to_opt_date, to_opt_float, to_time_of_day
from hms_records.commons.resolver import FieldResolver
from hms_records.commons.types import DEFAULTS, RecordDefaults

from .identity import resolve_reference
from .models import Embedded, RecordRef


@dataclass(frozen=True)
class AppointmentRecord:
    id: str = ""
    client_name: str = ""
    appointment_type: str = DEFAULTS.appointment_type
    appointment_date: date = field(default_factory=date.today)
    appointment_time: time = time(0, 0)
    location: str = ""
    notes: str = ""
    gender: Optional[str] = None
    patient: Optional[RecordRef] = None
    patient_id: str = ""
    phone_number: Optional[str] = None
    mode: str = DEFAULTS.appointment_mode
    priority: str = DEFAULTS.appointment_priority
    duration_minutes: int = DEFAULTS.appointment_duration_minutes
    reminder: bool = True
    chief_complaint: str = ""
    height_cm: Optional[str] = None
    weight_kg: Optional[str] = None
    bp: Optional[str] = None
    heart_rate: Optional[str] = None
    spo2: Optional[str] = None
    status: str = DEFAULTS.appointment_status

    @property
    def start_at(self) -> datetime:
        """Fecha + hora combinadas; única fuente para leer el instante."""
        return datetime.combine(self.appointment_date, self.appointment_time)


def _positive_or(value: int, default: int) -> int:
    return value if value > 0 else default


def _resolve_schedule(r: FieldResolver):
    start = r.moment("startAt", "start_at", "dateTime")
    if start is not None:
        return start.date(), start.timetz()
    day = to_opt_date(r.first("date", "appointmentDate")) or date.today()
    return day, to_time_of_day(r.first("time", "appointmentTime"))


def canonicalize_appointment(raw: Any, defaults: Optional[RecordDefaults] = None) -> AppointmentRecord:
    defaults = defaults or DEFAULTS
    r = FieldResolver(raw)
    day, moment = _resolve_schedule(r)

    patient = resolve_reference(r.first("patientId", "patient"))
    snapshot = FieldResolver(r.first("patientId", "patient") if isinstance(patient, Embedded) else {})

    return AppointmentRecord(
        id=r.text("_id", "id"),
        client_name=(patient.display_name if patient is not None else "")
        or r.text("clientName", "patientName"),
        appointment_type=r.text("appointmentType", "type", default=defaults.appointment_type),
        appointment_date=day,
        appointment_time=moment,
        location=r.text("location"),
        notes=r.text("notes"),
        gender=r.opt_text("metadata.gender") or snapshot.opt_text("gender") or r.opt_text("gender"),
        patient=patient,
        patient_id=patient.id if patient is not None else "",
        phone_number=r.opt_text("metadata.phoneNumber")
        or snapshot.opt_text("phone")
        or r.opt_text("phoneNumber", "phone"),
        mode=r.text("metadata.mode", "mode", default=defaults.appointment_mode),
        priority=r.text("metadata.priority", "priority", default=defaults.appointment_priority),
        duration_minutes=_positive_or(
            r.integer("metadata.durationMinutes", "durationMinutes"), defaults.appointment_duration_minutes
        ),
        reminder=r.flag("metadata.reminder", "reminder", default=True),
        chief_complaint=r.text("metadata.chiefComplaint", "chiefComplaint"),
        height_cm=r.opt_text("vitals.heightCm", "heightCm"),
        weight_kg=r.opt_text("vitals.weightKg", "weightKg"),
        bp=r.opt_text("vitals.bp", "bp"),
        heart_rate=r.opt_text("vitals.heartRate", "heartRate"),
        spo2=r.opt_text("vitals.spo2", "spo2"),
        status=r.text("status", default=defaults.appointment_status),
    )


def serialize_appointment(appointment: AppointmentRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = compact({"_id": appointment.id, "patientId": appointment.patient_id})
    out.update(
        {
            "clientName": appointment.client_name,
            "appointmentType": appointment.appointment_type,
            "startAt": iso(appointment.start_at),
            "location": appointment.location,
            "status": appointment.status,
            "notes": appointment.notes,
        }
    )

    vitals = compact(
        {
            "heightCm": to_opt_float(appointment.height_cm),
            "weightKg": to_opt_float(appointment.weight_kg),
            "bp": appointment.bp,
            "heartRate": to_opt_float(appointment.heart_rate),
            "spo2": to_opt_float(appointment.spo2),
        }
    )
    if vitals:
        out["vitals"] = vitals

    metadata: Dict[str, Any] = {
        "mode": appointment.mode,
        "priority": appointment.priority,
        "durationMinutes": appointment.duration_minutes,
        "reminder": appointment.reminder,
        "chiefComplaint": appointment.chief_complaint,
    }
    metadata.update(compact({"gender": appointment.gender, "phoneNumber": appointment.phone_number}))
    out["metadata"] = metadata
    return out
