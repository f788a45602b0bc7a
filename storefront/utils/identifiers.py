from typing import Any, Optional
from uuid import UUID


def parse_uuid(raw: Any) -> Optional[UUID]:
    """Ids arrive as path or form strings; anything malformed is treated as unknown."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        return None
