# ===============================
# File: hms_records/parsers/models.py
# ===============================
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from hms_records.commons.coercion import age_on


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    DOCTOR = "doctor"
    PHARMACIST = "pharmacist"
    PATHOLOGIST = "pathologist"
    RECEPTION = "reception"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Rol reconocido o UNKNOWN; nunca un string arbitrario."""
        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


class RoleMismatch(ValueError):
    """El perfil de rol no coincide con el rol declarado por la identidad."""

    def __init__(self, expected: Role, actual: Role):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"identity role '{actual.value}' does not match profile role '{expected.value}'"
        )


@dataclass(frozen=True)
class UserIdentity:
    id: str = ""
    role: Role = Role.UNKNOWN
    first_name: str = ""
    last_name: str = ""
    date_of_birth: Optional[date] = None
    email: str = ""
    phone: str = ""
    country: str = ""
    state: str = ""
    city: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def age(self) -> Optional[int]:
        return self.age_on(None)

    def age_on(self, today: Optional[date]) -> Optional[int]:
        if self.date_of_birth is None:
            return None
        return age_on(self.date_of_birth, today)


@dataclass(frozen=True)
class RoleProfile:
    """Identidad + atributos propios del rol. Valida el rol al construirse."""

    identity: UserIdentity
    target_role: ClassVar[Role] = Role.UNKNOWN

    def __post_init__(self):
        if self.identity.role != self.target_role:
            raise RoleMismatch(self.target_role, self.identity.role)

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def full_name(self) -> str:
        return self.identity.full_name

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def phone(self) -> str:
        return self.identity.phone

    @property
    def role(self) -> Role:
        return self.identity.role


@dataclass(frozen=True)
class Doctor(RoleProfile):
    specialization: str = ""
    license_number: str = ""
    department: str = ""
    target_role: ClassVar[Role] = Role.DOCTOR


@dataclass(frozen=True)
class Pharmacist(RoleProfile):
    license_number: Optional[str] = None
    department: Optional[str] = None
    target_role: ClassVar[Role] = Role.PHARMACIST


@dataclass(frozen=True)
class Pathologist(RoleProfile):
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    department: Optional[str] = None
    target_role: ClassVar[Role] = Role.PATHOLOGIST


@dataclass(frozen=True)
class Admin(RoleProfile):
    target_role: ClassVar[Role] = Role.ADMIN


PROFILE_TYPES = {cls.target_role: cls for cls in (Doctor, Pharmacist, Pathologist, Admin)}


# Referencias que el backend envía como objeto embebido o como id suelto
@dataclass(frozen=True)
class Embedded:
    entity: Union[RoleProfile, UserIdentity]

    @property
    def id(self) -> str:
        return self.entity.id

    @property
    def display_name(self) -> str:
        return self.entity.full_name


@dataclass(frozen=True)
class Reference:
    id: str

    @property
    def display_name(self) -> str:
        return ""


RecordRef = Union[Embedded, Reference]
