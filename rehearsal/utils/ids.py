from __future__ import annotations

import uuid

from rehearsal.utils.errors import NotFoundError


def parse_uuid(raw: str | uuid.UUID | None, resource: str) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw or "").strip())
    except ValueError as exc:
        raise NotFoundError(resource) from exc
