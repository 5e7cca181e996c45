# errors.py: typed failures raised by the housekeeping services
from typing import Any, Dict, Optional


class HousekeepingError(Exception):
    """Base class for every rejected housekeeping operation."""

    kind = "error"

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[str] = None):
        self.message = message
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "error": self.kind,
            "entity": self.entity,
            "entityId": self.entity_id,
        }


class NotFound(HousekeepingError, LookupError):
    """Entity key absent."""

    kind = "not_found"


class Conflict(HousekeepingError, ValueError):
    """Transition would break a cross-entity invariant."""

    kind = "conflict"


class Unauthorized(HousekeepingError):
    """Credential mismatch."""

    kind = "unauthorized"


class InvalidState(HousekeepingError, ValueError):
    """Operation not valid for the entity's current state."""

    kind = "invalid_state"
