from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import numpy as np

from smartscore.utils.errors import InvalidField


# Divide a by b safely, return default if b is zero
def safe_divide(a: float, b: float, default: float = 0.0) -> float:
    try:
        return a / b if b != 0 else default
    except (ZeroDivisionError, TypeError, ValueError):
        return default


def parse_decimal(value: Any, field: str, tx_hash: Optional[str] = None) -> Decimal:
    # Strict decimal parsing of str, int, float or Decimal; bools and non-finite values rejected
    if value is None or isinstance(value, bool):
        raise InvalidField(field, value, tx_hash)
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidField(field, value, tx_hash)
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            raise InvalidField(field, value, tx_hash) from None
    else:
        raise InvalidField(field, value, tx_hash)

    if not parsed.is_finite():
        raise InvalidField(field, value, tx_hash)
    return parsed


def ensure_json_serializable(obj: Any) -> Any:
    # Convert numpy / Decimal values and nested structures to JSON-friendly types
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, (np.generic,)):
        return obj.item()
    if isinstance(obj, dict):
        return {k: ensure_json_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [ensure_json_serializable(v) for v in obj]
    return obj
