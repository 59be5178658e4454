from typing import Any


def normalize_props(value: Any) -> dict:
    """
    props is always an object:
      {"a": 1}  -> {"a": 1}
      "plain"   -> {"value": "plain"}
      42 / [..] / true / null -> {"value": ...}
    """
    if isinstance(value, dict):
        return value
    return {"value": value}
