# hms_records/validation/validators.py
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class WireModel(BaseModel):
    # El backend tolera claves extra; solo se valida lo que conocemos
    model_config = ConfigDict(extra="allow")


def _finite(v: Optional[float]):
    if v is not None and not math.isfinite(v):
        raise ValueError(f"valor numérico no finito: {v}")
    return v


# --------- Paciente ----------
class AddressWire(WireModel):
    houseNo: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None
    line1: Optional[str] = None


class PatientVitalsWire(WireModel):
    heightCm: Optional[float] = None
    weightKg: Optional[float] = None
    bmi: Optional[float] = None
    bp: Optional[str] = None
    pulse: Optional[float] = None
    spo2: Optional[float] = None
    temp: Optional[float] = None

    @field_validator("heightCm", "weightKg", "bmi", "pulse", "spo2", "temp")
    @classmethod
    def _check_finite(cls, v):
        return _finite(v)


class PatientMetadataWire(WireModel):
    age: int
    bloodGroup: str
    medicalHistory: List[str] = []


class PatientWire(WireModel):
    name: str
    age: int
    gender: str
    bloodGroup: str
    phone: str
    address: Optional[AddressWire] = None
    vitals: Optional[PatientVitalsWire] = None
    doctorId: Optional[str] = None
    allergies: List[str] = []
    notes: str = ""
    metadata: PatientMetadataWire


# --------- Cita ----------
class AppointmentMetadataWire(WireModel):
    mode: str
    priority: str
    durationMinutes: int
    reminder: bool
    chiefComplaint: str = ""
    gender: Optional[str] = None
    phoneNumber: Optional[str] = None

    @field_validator("durationMinutes")
    @classmethod
    def _positive(cls, v: int):
        if v <= 0:
            raise ValueError("durationMinutes debe ser > 0")
        return v


class AppointmentWire(WireModel):
    clientName: str
    appointmentType: str
    startAt: str
    status: str
    patientId: Optional[str] = None
    vitals: Optional[Dict[str, Any]] = None
    metadata: AppointmentMetadataWire


# --------- Signos vitales ----------
class BloodPressureWire(WireModel):
    systolic: float
    diastolic: float
    reading: str


class VitalsWire(WireModel):
    patientId: str
    recordedBy: str
    recordedAt: str
    location: str
    bloodPressure: Optional[BloodPressureWire] = None
    heartRate: Optional[float] = None
    respiratoryRate: Optional[float] = None
    oxygenSaturation: Optional[float] = None
    bmi: Optional[float] = None
    painScale: Optional[int] = None
    abnormalFlags: List[Dict[str, Any]] = []

    @field_validator("heartRate", "respiratoryRate", "oxygenSaturation", "bmi")
    @classmethod
    def _check_finite(cls, v):
        return _finite(v)


# --------- Personal ----------
class StaffWire(WireModel):
    name: str
    designation: str
    department: str
    contact: str
    status: str
    roles: List[str] = []
    qualifications: List[str] = []
    experienceYears: int = 0
    notes: Dict[str, str] = {}
    tags: List[str] = []
    metadata: Dict[str, Any] = {}

    @field_validator("notes")
    @classmethod
    def _no_meta_keys(cls, v: Dict[str, str]):
        # Las claves meta_ viajan dentro de metadata, nunca en notes
        leaked = [k for k in v if k.startswith("meta_")]
        if leaked:
            raise ValueError(f"notes contiene claves meta_: {leaked}")
        return v


# --------- Nómina ----------
class SalaryComponentWire(WireModel):
    name: str
    type: str
    amount: float

    @field_validator("type")
    @classmethod
    def _known_type(cls, v: str):
        if v not in ("earning", "deduction", "reimbursement"):
            raise ValueError(f"tipo de componente inválido: {v}")
        return v

    @field_validator("amount")
    @classmethod
    def _check_finite(cls, v):
        return _finite(v)


class PayrollWire(WireModel):
    staffId: str
    payPeriodMonth: int
    payPeriodYear: int
    payPeriodStart: str
    payPeriodEnd: str
    status: str
    basicSalary: float
    earnings: List[SalaryComponentWire] = []
    deductions: List[SalaryComponentWire] = []
    reimbursements: List[SalaryComponentWire] = []
    grossSalary: float
    netSalary: float
    ctc: float
    attendance: Dict[str, Any]
    statutory: Dict[str, Any]
    revisionNumber: int
    metadata: Dict[str, Any] = {}

    @field_validator("basicSalary", "grossSalary", "netSalary", "ctc")
    @classmethod
    def _check_finite(cls, v):
        return _finite(v)

    @field_validator("revisionNumber")
    @classmethod
    def _revision(cls, v: int):
        if v < 1:
            raise ValueError("revisionNumber debe ser >= 1")
        return v


WIRE_MODELS = {
    "patient": PatientWire,
    "appointment": AppointmentWire,
    "vitals": VitalsWire,
    "staff": StaffWire,
    "payroll": PayrollWire,
}


def validate_wire_or_raise(kind: str, payload: Dict[str, Any]):
    """Construye el modelo y levanta ValidationError si algo falta/está mal."""
    model = WIRE_MODELS.get(kind)
    if model is None:
        raise ValueError(f"Tipo de registro desconocido: '{kind}'")
    return model.model_validate(payload)
