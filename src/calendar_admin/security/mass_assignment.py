from __future__ import annotations

from typing import Iterable, Mapping

from ..core.constants import SERVER_CONTROLLED_FIELDS
from ..core.exceptions import ValidationError
from . import audit


def strip_server_controlled(
    payload: object,
    *,
    user_id: int,
    resource: str,
    fields: Iterable[str] = SERVER_CONTROLLED_FIELDS,
) -> dict:
    """Copy of a JSON object body without keys only the server may set.

    Dropped keys are reported as a security event; the request itself goes on.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    blocked = set(fields)
    dropped = [k for k in payload if k in blocked]
    if dropped:
        audit.mass_assignment_attempt(user_id, resource, dropped)
    return {k: v for k, v in payload.items() if k not in blocked}
