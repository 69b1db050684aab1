from typing import Any, Dict

from pydantic import BaseModel


class RecordDefaults(BaseModel):
    """Valores literales que usan los canonicalizadores cuando falta el dato."""

    blood_group: str = "O+"
    appointment_type: str = "Consultation"
    appointment_mode: str = "In-clinic"
    appointment_priority: str = "Normal"
    appointment_duration_minutes: int = 20
    appointment_status: str = "Scheduled"
    staff_status: str = "Off Duty"
    payroll_status: str = "draft"
    payment_mode: str = "bank_transfer"
    payroll_group: str = "regular"
    vitals_location: str = "Clinic"


DEFAULTS = RecordDefaults()


class PathsCfg(BaseModel):
    logs_root: str = "logs"


class LoggingCfg(BaseModel):
    level: str = "INFO"


class EngineCfg(BaseModel):
    autodetect: bool = True
    override: str = ""
    validate_writes: bool = False


class Settings(BaseModel):
    app: Dict[str, Any] = {"name": "hms-records"}
    paths: PathsCfg = PathsCfg()
    logging: LoggingCfg = LoggingCfg()
    engine: EngineCfg = EngineCfg()
    defaults: RecordDefaults = RecordDefaults()
