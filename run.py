import json
import os
import sys
from dataclasses import asdict
from typing import Optional

import typer
import yaml

from hms_records.commons.logger import setup_logging
from hms_records.commons.record_engine import RecordEngine

app = typer.Typer(add_completion=False, help="HMS Records: canonicalización de registros")


def resource_path(relative_path: str) -> str:
    """Resuelve settings.yaml (u otro recurso) contra el bundle de PyInstaller o el cwd.
    Rutas absolutas (p.ej. --config /etc/hms/settings.yaml) pasan sin cambios."""
    base_path = getattr(sys, "_MEIPASS", os.path.abspath("."))
    return os.path.join(base_path, relative_path)


def load_cfg(path: str = "hms_records/configs/settings.yaml") -> dict:
    with open(resource_path(path), "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _bootstrap(config: str) -> RecordEngine:
    cfg = load_cfg(config)
    engine = RecordEngine(cfg)
    setup_logging(engine.settings.paths.logs_root, os.getenv("LOG_LEVEL", engine.settings.logging.level))
    return engine


def _read_records(file: str):
    with open(file, "r", encoding="utf-8") as f:
        data = json.load(f)
    # Acepta un registro suelto, una lista o la envoltura {"data": [...]} del backend
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return data["data"], True
    if isinstance(data, list):
        return data, True
    return [data], False


def _dump(items, many: bool):
    typer.echo(json.dumps(items if many else items[0], indent=2, ensure_ascii=False, default=str))


@app.command()
def canonicalize(
    file: str = typer.Argument(..., help="JSON con uno o varios registros crudos"),
    kind: Optional[str] = typer.Option(None, help="patient|appointment|vitals|staff|payroll"),
    config: str = typer.Option("hms_records/configs/settings.yaml", help="settings.yaml"),
):
    """Imprime la entidad canónica de cada registro."""
    engine = _bootstrap(config)
    raws, many = _read_records(file)
    entities = engine.canonicalize_many(raws, kind)
    _dump([asdict(e) for e in entities], many)


@app.command()
def normalize(
    file: str = typer.Argument(..., help="JSON con uno o varios registros crudos"),
    kind: Optional[str] = typer.Option(None, help="patient|appointment|vitals|staff|payroll"),
    config: str = typer.Option("hms_records/configs/settings.yaml", help="settings.yaml"),
):
    """Imprime serialize(canonicalize(raw)): el payload listo para el backend."""
    engine = _bootstrap(config)
    raws, many = _read_records(file)
    try:
        payloads = [engine.normalize(raw, kind) for raw in raws]
    except ValueError as e:
        # incluye ValidationError de pydantic
        typer.echo(f"Registro inválido: {e}", err=True)
        raise typer.Exit(code=1)
    _dump(payloads, many)


if __name__ == "__main__":
    app()
