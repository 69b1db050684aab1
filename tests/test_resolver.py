from hms_records.commons.resolver import FieldResolver, lookup, resolve

RAW = {
    "phone": "",
    "contact": "555-0101",
    "metadata": {"age": "41", "a.b": "dotted"},
    "vitals": "not-an-object",
}


def test_resolve_earlier_candidate_wins():
    assert resolve({"a": "1", "b": "2"}, ["a", "b"]) == "1"
    assert resolve({"a": "1", "b": "2"}, ["b", "a"]) == "2"


def test_resolve_skips_null_and_blank():
    assert resolve(RAW, ["phone", "contact"]) == "555-0101"
    assert resolve(RAW, ["missing", "phone"], default="-") == "-"


def test_lookup_nested_paths():
    assert lookup(RAW, "metadata.age") == "41"
    assert lookup(RAW, ("metadata", "a.b")) == "dotted"
    assert lookup(RAW, "vitals.bp") is None
    assert lookup(RAW, "nope.deeper") is None


def test_lookup_callable_errors_become_none():
    assert lookup(RAW, lambda raw: raw["missing"]) is None
    assert lookup(RAW, lambda raw: raw["contact"][:3]) == "555"


def test_field_resolver_typed_accessors():
    r = FieldResolver(RAW)
    assert r.integer("age", "metadata.age") == 41
    assert r.number("metadata.age") == 41.0
    assert r.text("phone", "contact") == "555-0101"
    assert r.opt_text("phone") is None
    assert r.sub("vitals") == {}


def test_field_resolver_non_dict_is_empty_record():
    r = FieldResolver(["not", "a", "record"])
    assert r.text("name", default="anon") == "anon"
    assert r.integer("age") == 0
    assert r.str_list("tags") == []
    assert r.moment("createdAt") is None


def test_whitespace_string_is_a_value():
    raw = {"a": "  ", "b": "x", "note": "  keep me\n"}
    assert resolve(raw, ["a", "b"]) == "  "
    r = FieldResolver(raw)
    assert r.text("note") == "  keep me\n"
    assert r.trimmed("a", "b") == "x"
    assert r.trimmed("a", default="-") == "-"
    assert r.trimmed("note") == "keep me"
