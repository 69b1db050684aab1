from typing import Any, Dict, Mapping, Optional, Union

from hms_records.commons.coercion import iso, to_datetime, to_opt_date
from hms_records.commons.logger import logger
from hms_records.commons.resolver import FieldResolver

from .models import (
    PROFILE_TYPES,
    Admin,
    Doctor,
    Embedded,
    Pathologist,
    Pharmacist,
    RecordRef,
    Reference,
    Role,
    RoleMismatch,
    RoleProfile,
    UserIdentity,
)


def parse_identity(raw: Any) -> UserIdentity:
    r = FieldResolver(raw)
    return UserIdentity(
        id=r.text("id", "_id"),
        role=Role.parse(r.first("role")),
        first_name=r.text("firstName", "first_name"),
        last_name=r.text("lastName", "last_name"),
        date_of_birth=to_opt_date(r.first("dateOfBirth", "dob")),
        email=r.text("email"),
        phone=r.text("phone"),
        country=r.text("country"),
        state=r.text("state"),
        city=r.text("city"),
        created_at=to_datetime(r.first("createdAt")),
    )


def serialize_identity(identity: UserIdentity) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": identity.id,
        "role": identity.role.value,
        "firstName": identity.first_name,
        "lastName": identity.last_name,
        "email": identity.email,
        "phone": identity.phone,
        "country": identity.country,
        "state": identity.state,
        "city": identity.city,
        "createdAt": iso(identity.created_at),
    }
    if identity.date_of_birth is not None:
        out["dateOfBirth"] = identity.date_of_birth.isoformat()
    return out


def compose_role_profile(
    identity: UserIdentity, target_role: Union[Role, str], extras: Optional[Mapping[str, Any]] = None
) -> RoleProfile:
    """Compone el perfil de rol. Lanza RoleMismatch si identity.role != target_role."""
    role = Role.parse(target_role)
    if identity.role != role:
        logger.warning(f"identidad {identity.id!r} con rol {identity.role.value} no es {role.value}")
        raise RoleMismatch(role, identity.role)
    profile_cls = PROFILE_TYPES.get(role)
    if profile_cls is None:
        # superadmin/reception/unknown no tienen perfil propio
        raise ValueError(f"no profile variant for role '{role.value}'")

    r = FieldResolver(extras or {})
    if profile_cls is Doctor:
        return Doctor(
            identity=identity,
            specialization=r.text("specialization"),
            license_number=r.text("licenseNumber", "license_number"),
            department=r.text("department"),
        )
    if profile_cls is Pharmacist:
        return Pharmacist(
            identity=identity,
            license_number=r.opt_text("licenseNumber", "license_number"),
            department=r.opt_text("department"),
        )
    if profile_cls is Pathologist:
        return Pathologist(
            identity=identity,
            specialization=r.opt_text("specialization"),
            license_number=r.opt_text("licenseNumber", "license_number"),
            department=r.opt_text("department"),
        )
    return Admin(identity=identity)


def parse_role_profile(raw: Any, target_role: Union[Role, str]) -> RoleProfile:
    return compose_role_profile(parse_identity(raw), target_role, raw if isinstance(raw, dict) else {})


def serialize_role_profile(profile: RoleProfile) -> Dict[str, Any]:
    out = serialize_identity(profile.identity)
    extras = {
        "specialization": getattr(profile, "specialization", None),
        "licenseNumber": getattr(profile, "license_number", None),
        "department": getattr(profile, "department", None),
    }
    if isinstance(profile, Doctor):
        out.update(extras)
    else:
        out.update({k: v for k, v in extras.items() if v is not None})
    return out


def resolve_reference(raw_ref: Any, target_role: Optional[Role] = None) -> Optional[RecordRef]:
    """Objeto embebido o id suelto -> Embedded | Reference.

    Con `target_role` se intenta componer el perfil; si el objeto no declara
    ese rol se conserva la identidad plana para no perder el nombre.
    """
    if isinstance(raw_ref, dict):
        identity = parse_identity(raw_ref)
        if target_role is not None:
            if identity.role == target_role:
                return Embedded(compose_role_profile(identity, target_role, raw_ref))
            logger.debug(
                f"referencia embebida {identity.id!r} con rol {identity.role.value}, "
                f"se conserva como identidad"
            )
        return Embedded(identity)
    if isinstance(raw_ref, (str, int)) and not isinstance(raw_ref, bool):
        ref_id = str(raw_ref).strip()
        return Reference(ref_id) if ref_id else None
    return None


def serialize_reference(ref: Optional[RecordRef]) -> Any:
    if ref is None:
        return None
    if isinstance(ref, Reference):
        return ref.id
    if isinstance(ref.entity, RoleProfile):
        return serialize_role_profile(ref.entity)
    return serialize_identity(ref.entity)
