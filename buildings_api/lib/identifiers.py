import uuid
from typing import Any, Dict


def new_id() -> str:
    return str(uuid.uuid4())


def ensure_id(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with a generated ``id`` when none was given."""
    return {**data, "id": data.get("id") or new_id()}
