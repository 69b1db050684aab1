import json

import pytest
import yaml
from loguru import logger
from typer.testing import CliRunner

from run import app, resource_path

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # la CLI instala sinks sobre streams del runner que se cierran al terminar
    logger.remove()


def _config(tmp_path, validate_writes=False):
    cfg = {
        "paths": {"logs_root": str(tmp_path / "logs")},
        "logging": {"level": "WARNING"},
        "engine": {"validate_writes": validate_writes},
    }
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return str(path)


def _records(tmp_path, data):
    path = tmp_path / "records.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_normalize_prints_wire_record(tmp_path):
    file = _records(tmp_path, {"name": "Eva", "vitals": {"weightKg": "70"}})
    result = runner.invoke(app, ["normalize", file, "--kind", "patient", "--config", _config(tmp_path)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["vitals"] == {"weightKg": 70.0}
    assert payload["bloodGroup"] == "O+"


def test_canonicalize_accepts_backend_envelope(tmp_path):
    file = _records(tmp_path, {"data": [{"designation": "Nurse"}, {"role": "Porter", "shift": "Day"}]})
    result = runner.invoke(app, ["canonicalize", file, "--config", _config(tmp_path)])
    assert result.exit_code == 0, result.output
    entities = json.loads(result.stdout)
    assert [e["designation"] for e in entities] == ["Nurse", "Porter"]


def test_normalize_reports_invalid_payload(tmp_path):
    file = _records(tmp_path, {"age": 3})
    config = _config(tmp_path, validate_writes=True)
    result = runner.invoke(app, ["normalize", file, "--kind", "patient", "--config", config])
    assert result.exit_code == 1


def test_normalize_without_validation_accepts_incomplete_record(tmp_path):
    file = _records(tmp_path, {"age": 3})
    result = runner.invoke(app, ["normalize", file, "--kind", "patient", "--config", _config(tmp_path)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["age"] == 3


def test_resource_path_resolves_config_location(tmp_path):
    absolute = str(tmp_path / "settings.yaml")
    assert resource_path(absolute) == absolute
    assert resource_path("hms_records/configs/settings.yaml").endswith("hms_records/configs/settings.yaml")
