from typing import Any, List, Optional

def to_int(v) -> Optional[int]:
    try:
        if v is None or v == "" or str(v).lower() in ("null", "nan"):
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None

def to_float(v) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).lower() in ("null", "nan"):
            return None
        value = float(v)
    except (TypeError, ValueError):
        return None
    if value != value:
        return None
    return value

def to_price(v) -> Optional[float]:
    """Parse a user-entered price bound; negative or garbage input counts as absent."""
    value = to_float(str(v).strip()) if isinstance(v, str) else to_float(v)
    if value is None or value < 0:
        return None
    return value

def to_str(v) -> str:
    if v is None or (isinstance(v, float) and v != v):
        return ""
    return str(v)

def to_str_list(v: Any) -> List[str]:
    if not isinstance(v, (list, tuple)):
        return []
    return [item for item in v if isinstance(item, str)]
