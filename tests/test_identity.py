import pytest

from hms_records.parsers.identity import (
    compose_role_profile,
    parse_identity,
    parse_role_profile,
    resolve_reference,
    serialize_reference,
    serialize_role_profile,
)
from hms_records.parsers.models import (
    Admin,
    Doctor,
    Embedded,
    Pathologist,
    Pharmacist,
    Reference,
    Role,
    RoleMismatch,
    UserIdentity,
)

DOCTOR_RAW = {
    "_id": "d1",
    "role": "Doctor",
    "firstName": "Ana",
    "lastName": "Ruiz",
    "email": "ana@clinic.test",
    "dateOfBirth": "1980-06-01",
    "specialization": "Cardiology",
    "licenseNumber": "LIC-9",
}


def test_role_parse_is_case_insensitive():
    assert Role.parse(" Doctor ") == Role.DOCTOR
    assert Role.parse("nurse") == Role.UNKNOWN
    assert Role.parse(None) == Role.UNKNOWN


def test_parse_identity_reads_underscore_id():
    identity = parse_identity(DOCTOR_RAW)
    assert identity.id == "d1"
    assert identity.role == Role.DOCTOR
    assert identity.full_name == "Ana Ruiz"
    assert identity.date_of_birth.year == 1980


def test_compose_role_profile_rejects_wrong_role():
    patient = parse_identity({"id": "u1", "role": "patient"})
    with pytest.raises(RoleMismatch) as err:
        compose_role_profile(patient, "doctor", {"specialization": "x"})
    assert err.value.expected == Role.DOCTOR
    assert err.value.actual == Role.UNKNOWN


def test_compose_role_profile_for_role_without_profile():
    reception = parse_identity({"id": "u2", "role": "reception"})
    with pytest.raises(ValueError, match="no profile variant") as err:
        compose_role_profile(reception, Role.RECEPTION)
    assert not isinstance(err.value, RoleMismatch)

    with pytest.raises(RoleMismatch):
        compose_role_profile(parse_identity({"id": "u3"}), Role.RECEPTION)


def test_compose_doctor_profile():
    profile = compose_role_profile(parse_identity(DOCTOR_RAW), "doctor", DOCTOR_RAW)
    assert isinstance(profile, Doctor)
    assert profile.specialization == "Cardiology"
    assert profile.license_number == "LIC-9"
    assert profile.department == ""
    assert profile.full_name == "Ana Ruiz"
    assert profile.id == "d1"


def test_profile_constructor_enforces_role():
    with pytest.raises(RoleMismatch):
        Doctor(identity=UserIdentity(id="x", role=Role.ADMIN))


def test_pharmacist_omits_missing_extras_on_wire():
    profile = parse_role_profile({"id": "p1", "role": "pharmacist", "department": "Store"}, "pharmacist")
    assert isinstance(profile, Pharmacist)
    wire = serialize_role_profile(profile)
    assert wire["department"] == "Store"
    assert "licenseNumber" not in wire
    assert "specialization" not in wire


def test_doctor_always_emits_extras():
    profile = parse_role_profile({"id": "d2", "role": "doctor"}, "doctor")
    wire = serialize_role_profile(profile)
    assert wire["specialization"] == ""
    assert wire["licenseNumber"] == ""
    assert wire["role"] == "doctor"
    assert "dateOfBirth" not in wire


def test_resolve_reference_variants():
    embedded = resolve_reference(DOCTOR_RAW, Role.DOCTOR)
    assert isinstance(embedded, Embedded)
    assert isinstance(embedded.entity, Doctor)
    assert embedded.display_name == "Ana Ruiz"

    plain = resolve_reference({"_id": "d3", "firstName": "Luis"}, Role.DOCTOR)
    assert isinstance(plain, Embedded)
    assert isinstance(plain.entity, UserIdentity)

    assert resolve_reference("d4") == Reference("d4")
    assert resolve_reference(42) == Reference("42")
    assert resolve_reference("  ") is None
    assert resolve_reference(True) is None
    assert resolve_reference(None) is None


def test_serialize_reference():
    assert serialize_reference(Reference("d4")) == "d4"
    assert serialize_reference(None) is None
    wire = serialize_reference(resolve_reference(DOCTOR_RAW, Role.DOCTOR))
    assert wire["id"] == "d1"
    assert wire["licenseNumber"] == "LIC-9"


def test_pathologist_profile_round_trip():
    raw = {"id": "pa1", "role": "pathologist", "firstName": "Rita", "specialization": "Histology"}
    profile = parse_role_profile(raw, "pathologist")
    assert isinstance(profile, Pathologist)
    assert profile.specialization == "Histology"
    assert profile.license_number is None

    wire = serialize_role_profile(profile)
    assert wire["specialization"] == "Histology"
    assert "licenseNumber" not in wire
    assert parse_role_profile(wire, "pathologist") == profile


def test_admin_profile_round_trip():
    profile = parse_role_profile({"_id": "ad1", "role": "ADMIN", "firstName": "Root"}, Role.ADMIN)
    assert isinstance(profile, Admin)
    assert profile.role == Role.ADMIN

    wire = serialize_role_profile(profile)
    for key in ("specialization", "licenseNumber", "department"):
        assert key not in wire
    assert parse_role_profile(wire, "admin") == profile


def test_admin_profile_rejects_doctor_identity():
    with pytest.raises(RoleMismatch):
        parse_role_profile({"id": "d1", "role": "doctor"}, "admin")
