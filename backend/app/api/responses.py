from typing import Any, Dict

from app.core.errors import utc_now_iso


def envelope(data: Any, **extra: Any) -> Dict[str, Any]:
    """Standard success body: {success, data, ..., timestamp}."""
    body: Dict[str, Any] = {"success": True, "data": data}
    body.update(extra)
    body["timestamp"] = utc_now_iso()
    return body
