# lrid/engine/precedence.py
from typing import Any


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def resolve_value(override: Any, primary: Any, default: Any = None) -> Any:
    """
    Single precedence rule for optional values: override > primary > default.
    None and blank strings count as absent. A callable default is only
    evaluated when both override and primary are absent.
    """
    if _present(override):
        return override
    if _present(primary):
        return primary
    return default() if callable(default) else default
