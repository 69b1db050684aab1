from typing import Any

from hms_records.commons.resolver import as_record

# Claves que delatan cada tipo de registro, en orden de prioridad
_KIND_MARKERS = (
    ("payroll", ("payPeriodMonth", "payPeriodYear", "basicSalary", "netSalary", "earnings")),
    ("vitals", ("recordedAt", "recordedBy", "bloodPressure", "abnormalFlags")),
    ("appointment", ("startAt", "appointmentType", "durationMinutes", "clientName")),
    ("staff", ("designation", "shift", "qualifications", "patientFacingId", "staffCode")),
)


def detect_kind(raw: Any) -> str:
    """Return 'payroll', 'vitals', 'appointment', 'staff' or 'patient'."""
    record = as_record(raw)
    for kind, markers in _KIND_MARKERS:
        if any(key in record for key in markers):
            return kind
    return "patient"
