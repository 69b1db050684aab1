from typing import Any, Callable, Dict, Optional

from hms_records.commons.types import DEFAULTS, RecordDefaults
from hms_records.parsers.appointment import (
    AppointmentRecord,
    canonicalize_appointment,
    serialize_appointment,
)
from hms_records.parsers.base import detect_kind
from hms_records.parsers.patient import PatientRecord, canonicalize_patient, serialize_patient
from hms_records.parsers.payroll import PayrollRecord, canonicalize_payroll, serialize_payroll
from hms_records.parsers.staff import StaffRecord, canonicalize_staff, serialize_staff
from hms_records.parsers.vitals import PatientVitals, canonicalize_vitals, serialize_vitals

# kind -> (tipo canónico, canonicalize, serialize)
HANDLERS: Dict[str, tuple] = {
    "patient": (PatientRecord, canonicalize_patient, serialize_patient),
    "appointment": (AppointmentRecord, canonicalize_appointment, serialize_appointment),
    "vitals": (PatientVitals, canonicalize_vitals, serialize_vitals),
    "staff": (StaffRecord, canonicalize_staff, serialize_staff),
    "payroll": (PayrollRecord, canonicalize_payroll, serialize_payroll),
}


class RecordNormalizer:
    def __init__(
        self,
        autodetect: bool = True,
        override: str = "",
        defaults: Optional[RecordDefaults] = None,
    ):
        self.autodetect = autodetect
        self.override = (override or "").strip().lower()
        self.defaults = defaults or DEFAULTS

    def resolve_kind(self, raw: Any, kind: Optional[str] = None) -> str:
        """Explícito > override de config > autodetección > 'patient'."""
        chosen = (kind or "").strip().lower() or self.override
        if not chosen:
            chosen = detect_kind(raw) if self.autodetect else "patient"
        if chosen not in HANDLERS:
            raise ValueError(f"Tipo de registro desconocido: '{chosen}' (válidos: {', '.join(HANDLERS)})")
        return chosen

    def canonicalize(self, raw: Any, kind: Optional[str] = None):
        canonicalize: Callable[..., Any] = HANDLERS[self.resolve_kind(raw, kind)][1]
        return canonicalize(raw, defaults=self.defaults)

    def kind_of(self, entity: Any) -> str:
        for kind, (entity_type, _, _) in HANDLERS.items():
            if isinstance(entity, entity_type):
                return kind
        raise ValueError(f"No es una entidad canónica: {type(entity).__name__}")

    def serialize(self, entity: Any) -> Dict[str, Any]:
        return HANDLERS[self.kind_of(entity)][2](entity)
