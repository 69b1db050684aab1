from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

import yaml

from hms_records.commons.logger import logger
from hms_records.commons.record_normalizer import RecordNormalizer
from hms_records.commons.types import Settings
from hms_records.validation.validators import validate_wire_or_raise


class RecordEngine:
    """Fachada: carga la configuración y expone canonicalize/serialize.

    Acepta una ruta a YAML, un dict ya cargado, un Settings o nada
    (defaults incorporados).
    """

    def __init__(self, config_path_or_obj: Any = None):
        # Soportar rutas o dict ya cargado
        if isinstance(config_path_or_obj, Settings):
            self.settings = config_path_or_obj
        elif isinstance(config_path_or_obj, str):
            with open(config_path_or_obj, "r", encoding="utf-8") as f:
                self.settings = Settings(**(yaml.safe_load(f) or {}))
        elif isinstance(config_path_or_obj, dict):
            self.settings = Settings(**config_path_or_obj)
        else:
            self.settings = Settings()

        engine_cfg = self.settings.engine
        self.normalizer = RecordNormalizer(
            autodetect=engine_cfg.autodetect,
            override=engine_cfg.override,
            defaults=self.settings.defaults,
        )

    @property
    def defaults(self):
        return self.settings.defaults

    def canonicalize(self, raw: Any, kind: Optional[str] = None):
        return self.normalizer.canonicalize(raw, kind)

    def canonicalize_many(
        self, raws: Iterable[Any], kind: Optional[str] = None, workers: int = 1
    ) -> List[Any]:
        """Canonicaliza una página de registros; el orden de salida respeta el de entrada."""
        raws = list(raws)
        if workers <= 1:
            return [self.canonicalize(raw, kind) for raw in raws]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda raw: self.canonicalize(raw, kind), raws))

    def serialize(self, entity: Any) -> Dict[str, Any]:
        payload = self.normalizer.serialize(entity)
        if self.settings.engine.validate_writes:
            kind = self.normalizer.kind_of(entity)
            validate_wire_or_raise(kind, payload)
            logger.debug(f"payload {kind} validado ({len(payload)} claves)")
        return payload

    def normalize(self, raw: Any, kind: Optional[str] = None) -> Dict[str, Any]:
        return self.serialize(self.canonicalize(raw, kind))
