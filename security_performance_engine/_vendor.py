"""Small helpers for JSON-safe serialization of calculation results."""

from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd


def make_json_safe(obj: Any) -> Any:
    """Recursively convert values into JSON-serializable forms."""
    if isinstance(obj, dict):
        out = {}
        for key, value in obj.items():
            if isinstance(key, (pd.Timestamp, datetime, date)):
                safe_key = key.isoformat()
            elif isinstance(key, (int, float, str, bool, type(None))):
                safe_key = key
            else:
                safe_key = str(key)
            out[safe_key] = make_json_safe(value)
        return out

    if isinstance(obj, (list, tuple)):
        return [make_json_safe(item) for item in obj]

    if isinstance(obj, pd.DataFrame):
        return make_json_safe(obj.to_dict("records"))

    if isinstance(obj, pd.Series):
        return {str(k): make_json_safe(v) for k, v in obj.to_dict().items()}

    if isinstance(obj, np.ndarray):
        return make_json_safe(obj.tolist())

    if isinstance(obj, np.integer):
        return int(obj)

    if isinstance(obj, np.floating):
        obj = float(obj)

    if isinstance(obj, np.bool_):
        return bool(obj)

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, (pd.Timestamp, datetime, date)):
        return obj.isoformat()

    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None

    if isinstance(obj, (int, str, bool, type(None))):
        return obj

    return str(obj)
