from hms_records.parsers.staff import canonicalize_staff, serialize_staff

STAFF = {
    "_id": "s1",
    "fullName": "Ana Ruiz",
    "role": "Nurse",
    "dept": "ICU",
    "phoneNumber": "555-0199",
    "shift": "Night",
    "qualifications": "BSc, RN",
    "metadata": {
        "staffCode": "ST-01",
        "experienceYears": "7",
        "shiftPattern": "rotating",
        "badges": ["cpr", "acls"],
    },
    "notes": {"general": "prefers nights"},
}


def test_fallback_chains():
    staff = canonicalize_staff(STAFF)
    assert staff.name == "Ana Ruiz"
    assert staff.designation == "Nurse"
    assert staff.department == "ICU"
    assert staff.contact == "555-0199"
    assert staff.qualifications == ["BSc", "RN"]
    assert staff.experience_years == 7


def test_defaults_for_missing_fields():
    staff = canonicalize_staff({})
    assert staff.designation == "-"
    assert staff.contact == "-"
    assert staff.status == "Off Duty"
    assert staff.joined_at is None
    assert staff.notes == {}


def test_patient_facing_id_from_metadata():
    assert canonicalize_staff(STAFF).patient_facing_id == "ST-01"
    assert canonicalize_staff({"code": "C-9", "metadata": {"staffCode": "ST-01"}}).patient_facing_id == "C-9"
    assert canonicalize_staff({"notes": {"staff_code": "N-3"}}).patient_facing_id == "N-3"


def test_unknown_metadata_goes_to_meta_overflow():
    staff = canonicalize_staff(STAFF)
    assert staff.notes["meta_shiftPattern"] == "rotating"
    assert staff.notes["meta_badges"] == "cpr,acls"
    assert "meta_staffCode" not in staff.notes
    assert staff.metadata_overflow == {"shiftPattern": "rotating", "badges": "cpr,acls"}


def test_existing_meta_note_is_not_overwritten():
    staff = canonicalize_staff({"notes": {"meta_x": "keep"}, "metadata": {"x": "new"}})
    assert staff.notes["meta_x"] == "keep"


def test_string_notes_are_wrapped():
    assert canonicalize_staff({"notes": "on leave"}).notes == {"notes": "on leave"}


def test_serialize_staff_rebuilds_metadata():
    wire = serialize_staff(canonicalize_staff(STAFF))
    assert wire["_id"] == "s1"
    assert wire["metadata"] == {"staffCode": "ST-01", "shiftPattern": "rotating", "badges": "cpr,acls"}
    assert wire["notes"] == {"general": "prefers nights"}
    assert wire["code"] == "ST-01"
    assert "joinedAt" not in wire
    assert "isSelected" not in wire


def test_fallback_chains_trim_and_skip_whitespace():
    staff = canonicalize_staff(
        {
            "name": "Ana Ruiz ",
            "designation": "   ",
            "role": " Lab Tech ",
            "contact": "\n",
            "phone": " 555-0123 ",
            "code": "  ",
            "metadata": {"staffCode": " ST-07 "},
        }
    )
    assert staff.designation == "Lab Tech"
    assert staff.contact == "555-0123"
    assert staff.patient_facing_id == "ST-07"
    # el nombre no pasa por el recorte
    assert staff.name == "Ana Ruiz "


def test_whitespace_only_chains_use_dash():
    staff = canonicalize_staff({"designation": "  ", "contact": " "})
    assert staff.designation == "-"
    assert staff.contact == "-"
