from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from hms_records.commons.coercion import compact, iso, to_str, to_str_map
from hms_records.commons.resolver import FieldResolver, sub_record
from hms_records.commons.types import DEFAULTS, RecordDefaults

META_PREFIX = "meta_"

# Claves de metadata que el canonicalizador ya interpreta; el resto se
# conserva en `notes` con prefijo meta_ para devolverlo intacto al backend.
KNOWN_METADATA_KEYS = frozenset(
    {
        "staffCode",
        "staff_code",
        "code",
        "patientFacingId",
        "roles",
        "qualifications",
        "experienceYears",
        "joinedAt",
        "lastActiveAt",
        "location",
        "dob",
        "appointmentsCount",
        "tags",
    }
)

_CODE_KEYS = ("staffCode", "staff_code", "code", "patientFacingId")


@dataclass(frozen=True)
class StaffRecord:
    id: str = ""
    name: str = ""
    designation: str = "-"
    department: str = ""
    patient_facing_id: str = ""
    contact: str = "-"
    email: str = ""
    avatar_url: str = ""
    gender: str = ""
    status: str = DEFAULTS.staff_status
    shift: str = ""
    roles: List[str] = field(default_factory=list)
    qualifications: List[str] = field(default_factory=list)
    experience_years: int = 0
    joined_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
    location: str = ""
    dob: str = ""
    notes: Dict[str, str] = field(default_factory=dict)
    appointments_count: int = 0
    tags: List[str] = field(default_factory=list)
    is_selected: bool = field(default=False, compare=False)

    @property
    def metadata_overflow(self) -> Dict[str, str]:
        return {k[len(META_PREFIX):]: v for k, v in self.notes.items() if k.startswith(META_PREFIX)}


def _parse_notes(value: Any) -> Dict[str, str]:
    if isinstance(value, dict):
        return to_str_map(value)
    if isinstance(value, str) and value.strip():
        return {"notes": value}
    return {}


def _patient_facing_id(r: FieldResolver, notes: Dict[str, str]) -> str:
    direct = r.trimmed("patientFacingId", "patientFacing", "code")
    if direct:
        return direct
    meta = r.sub("metadata") or r.sub("meta")
    code = FieldResolver(meta).trimmed(*_CODE_KEYS)
    if code:
        return code
    return FieldResolver(notes).trimmed("staffCode", "staff_code", "code")


def canonicalize_staff(raw: Any, defaults: Optional[RecordDefaults] = None) -> StaffRecord:
    defaults = defaults or DEFAULTS
    r = FieldResolver(raw)

    notes = _parse_notes(r.first("notes"))
    patient_facing_id = _patient_facing_id(r, notes)

    merged_notes = dict(notes)
    for key, value in sub_record(raw, "metadata").items():
        if key in KNOWN_METADATA_KEYS:
            continue
        merged_notes.setdefault(f"{META_PREFIX}{key}", to_str(value))

    return StaffRecord(
        id=r.text("_id", "id"),
        name=r.text("name", "fullName", "firstName"),
        designation=r.trimmed("designation", "role", "title", default="-"),
        department=r.text("department", "dept"),
        patient_facing_id=patient_facing_id,
        contact=r.trimmed("contact", "phone", "phoneNumber", "contactNumber", default="-"),
        email=r.text("email"),
        avatar_url=r.text("avatarUrl", "photo"),
        gender=r.text("gender"),
        status=r.text("status", default=defaults.staff_status),
        shift=r.text("shift"),
        roles=r.str_list("roles", "metadata.roles"),
        qualifications=r.str_list("qualifications", "metadata.qualifications"),
        experience_years=r.integer("experienceYears", "metadata.experienceYears", "experience"),
        joined_at=r.moment("joinedAt", "metadata.joinedAt", "createdAt"),
        last_active_at=r.moment("lastActiveAt", "metadata.lastActiveAt", "updatedAt"),
        location=r.text("location", "metadata.location"),
        dob=r.text("dob", "metadata.dob"),
        notes=merged_notes,
        appointments_count=r.integer("appointmentsCount", "metadata.appointmentsCount", "apptCount"),
        tags=r.str_list("tags", "metadata.tags"),
        is_selected=r.first("isSelected") is True,
    )


def serialize_staff(staff: StaffRecord) -> Dict[str, Any]:
    # TODO: confirmar contra la API qué claves espera el backend dentro de
    # `metadata` y cuáles en primer nivel; hoy solo staffCode + overflow meta_.
    metadata: Dict[str, Any] = compact({"staffCode": staff.patient_facing_id})
    metadata.update(staff.metadata_overflow)
    notes = {k: v for k, v in staff.notes.items() if not k.startswith(META_PREFIX)}

    out: Dict[str, Any] = compact({"_id": staff.id})
    out.update(
        {
            "name": staff.name,
            "designation": staff.designation,
            "department": staff.department,
            "code": staff.patient_facing_id,
            "contact": staff.contact,
            "email": staff.email,
            "avatarUrl": staff.avatar_url,
            "gender": staff.gender,
            "status": staff.status,
            "shift": staff.shift,
            "roles": list(staff.roles),
            "qualifications": list(staff.qualifications),
            "experienceYears": staff.experience_years,
        }
    )
    out.update(compact({"joinedAt": iso(staff.joined_at), "lastActiveAt": iso(staff.last_active_at)}))
    out.update(
        {
            "location": staff.location,
            "dob": staff.dob,
            "notes": notes,
            "appointmentsCount": staff.appointments_count,
            "tags": list(staff.tags),
            "metadata": metadata,
        }
    )
    return out
