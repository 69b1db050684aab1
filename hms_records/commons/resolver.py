from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from hms_records.commons import coercion

# Un candidato es:
#   - "phone"                -> clave de primer nivel
#   - "metadata.patientCode" -> ruta anidada separada por puntos
#   - ("metadata", "a.b")    -> ruta explícita (claves que contienen puntos)
#   - callable(raw) -> valor -> accesor libre
Candidate = Union[str, Tuple[str, ...], Callable[[Dict[str, Any]], Any]]

_MISSING = object()


def as_record(raw: Any) -> Dict[str, Any]:
    """Cualquier entrada que no sea dict se trata como registro vacío."""
    return raw if isinstance(raw, dict) else {}


def sub_record(raw: Any, key: str) -> Dict[str, Any]:
    """Sub-objeto anidado (p.ej. 'vitals', 'metadata') o {} si no es dict."""
    return as_record(as_record(raw).get(key))


def _split_path(candidate: Union[str, Tuple[str, ...]]) -> Sequence[str]:
    if isinstance(candidate, tuple):
        return candidate
    return candidate.split(".")


def lookup(raw: Any, candidate: Candidate) -> Any:
    """Valor en la ruta indicada, o None si algún tramo no existe."""
    if callable(candidate):
        try:
            return candidate(as_record(raw))
        except (KeyError, TypeError, AttributeError, ValueError):
            return None
    node: Any = raw
    for part in _split_path(candidate):
        if not isinstance(node, dict):
            return None
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return None
    return node


def resolve(raw: Any, candidates: Iterable[Candidate], default: Any = None) -> Any:
    """Primer candidato con valor no nulo y no vacío; si ninguno, `default`.

    El orden manda: un candidato anterior siempre gana a uno posterior.
    """
    for candidate in candidates:
        value = lookup(raw, candidate)
        if not coercion.is_blank(value):
            return value
    return default


class FieldResolver:
    """Envoltura sobre un registro crudo con atajos tipados.

    >>> r = FieldResolver({"metadata": {"age": "41"}})
    >>> r.integer("age", "metadata.age")
    41
    """

    def __init__(self, raw: Any):
        self.raw = as_record(raw)

    def sub(self, key: str) -> Dict[str, Any]:
        return sub_record(self.raw, key)

    def first(self, *candidates: Candidate, default: Any = None) -> Any:
        return resolve(self.raw, candidates, default)

    def text(self, *candidates: Candidate, default: str = "") -> str:
        """Texto tal cual llega (sin strip); `default` solo si no hay valor."""
        value = resolve(self.raw, candidates)
        out = coercion.to_str(value) if value is not None else ""
        return out or default

    def trimmed(self, *candidates: Candidate, default: str = "") -> str:
        """Primer candidato que no queda vacío tras strip, ya recortado."""
        for candidate in candidates:
            value = lookup(self.raw, candidate)
            if value is None:
                continue
            out = coercion.to_str(value).strip()
            if out:
                return out
        return default

    def opt_text(self, *candidates: Candidate) -> Optional[str]:
        return coercion.to_opt_str(resolve(self.raw, candidates))

    def number(self, *candidates: Candidate, default: float = 0.0) -> float:
        return coercion.to_float(resolve(self.raw, candidates), default)

    def opt_number(self, *candidates: Candidate) -> Optional[float]:
        return coercion.to_opt_float(resolve(self.raw, candidates))

    def integer(self, *candidates: Candidate, default: int = 0) -> int:
        return coercion.to_int(resolve(self.raw, candidates), default)

    def opt_integer(self, *candidates: Candidate) -> Optional[int]:
        return coercion.to_opt_int(resolve(self.raw, candidates))

    def flag(self, *candidates: Candidate, default: bool = False) -> bool:
        return coercion.to_bool(resolve(self.raw, candidates), default)

    def str_list(self, *candidates: Candidate, sub_key: Optional[str] = None) -> List[str]:
        return coercion.to_str_list(resolve(self.raw, candidates), sub_key=sub_key)

    def moment(self, *candidates: Candidate):
        return coercion.to_opt_datetime(resolve(self.raw, candidates))
