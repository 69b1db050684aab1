import json
import math
import re
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from hms_records.commons.logger import logger

# Prefijo numérico al estilo parseFloat/parseInt: "12.5kg" -> 12.5, "20 min" -> 20
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_TIME_OF_DAY = re.compile(r"^\s*(\d{1,2})(?::(\d{1,2}))?(?::(\d{1,2}))?")

_TRUE_WORDS = {"true", "1", "yes", "y", "on"}
_FALSE_WORDS = {"false", "0", "no", "n", "off"}


def is_blank(value: Any) -> bool:
    """None o string vacío. Un string de espacios cuenta como valor."""
    return value is None or value == ""


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(to_str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def to_opt_str(value: Any) -> Optional[str]:
    """Como to_str pero devuelve None cuando no hay valor útil."""
    if is_blank(value):
        return None
    out = to_str(value)
    return out or None


def to_float(value: Any, default: float = 0.0) -> float:
    """Número finito o `default`. Nunca NaN ni inf."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        m = _FLOAT_PREFIX.match(value)
        if not m:
            logger.debug(f"valor no numérico {value!r}, usando {default}")
            return default
        num = float(m.group(1))
    else:
        return default
    if not math.isfinite(num):
        return default
    return num


def to_opt_float(value: Any) -> Optional[float]:
    if is_blank(value):
        return None
    num = to_float(value, default=math.nan)
    return None if math.isnan(num) else num


def to_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        m = _INT_PREFIX.match(value)
        if not m:
            logger.debug(f"valor no entero {value!r}, usando {default}")
            return default
        return int(m.group(1))
    return default


def to_opt_int(value: Any) -> Optional[int]:
    if is_blank(value):
        return None
    num = to_float(value, default=math.nan)
    return None if math.isnan(num) else int(num)


def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def to_str_list(value: Any, sub_key: Optional[str] = None) -> List[str]:
    """Normaliza listas de texto.

    - list/tuple -> cada elemento a string (se descartan None)
    - "a, b"     -> ["a", "b"]
    - dict       -> la sub-lista `sub_key` si existe, si no []
    - ausente    -> []
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [to_str(v) for v in value if v is not None]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, dict) and sub_key:
        return to_str_list(value.get(sub_key)) if isinstance(value.get(sub_key), list) else []
    return []


def to_str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): to_str(v) for k, v in value.items()}


def to_int_map(value: Any) -> Dict[str, int]:
    if not isinstance(value, dict):
        return {}
    return {str(k): to_int(v) for k, v in value.items()}


def _from_epoch_ms(value: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_opt_datetime(value: Any) -> Optional[datetime]:
    """ISO-8601 (con o sin 'Z'), date, datetime o epoch en ms. Inválido -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return _from_epoch_ms(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"fecha inválida {value!r}")
            return None
    return None


def to_datetime(value: Any, default: Optional[datetime] = None) -> datetime:
    """Fecha obligatoria: inválido -> `default` o el instante actual."""
    parsed = to_opt_datetime(value)
    if parsed is not None:
        return parsed
    return default if default is not None else datetime.now()


def to_opt_date(value: Any) -> Optional[date]:
    parsed = to_opt_datetime(value)
    return parsed.date() if parsed is not None else None


def to_time_of_day(value: Any) -> time:
    """'HH:mm[:ss]' o {'hour', 'minute'} -> time. Partes inválidas -> 0."""
    if isinstance(value, time):
        return value
    if isinstance(value, dict):
        hour, minute = to_int(value.get("hour")), to_int(value.get("minute"))
    else:
        m = _TIME_OF_DAY.match(to_str(value))
        if not m:
            return time(0, 0)
        hour, minute = int(m.group(1)), int(m.group(2) or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return time(0, 0)
    return time(hour, minute)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def fixed(value: float, places: int) -> str:
    """Redondeo como Number.toFixed: half-up sobre el valor binario exacto."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def age_on(dob: date, today: Optional[date] = None) -> int:
    """Años cumplidos: diferencia de años menos uno si aún no llega mes/día."""
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Descarta claves opcionales sin valor (None o '') antes de serializar."""
    return {k: v for k, v in values.items() if v is not None and v != ""}
