import json
import uuid

from sqlalchemy import JSON, String, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB


class GUID(TypeDecorator):
    """Cross-dialect UUID storage.

    - PostgreSQL: native UUID
    - Others (e.g. SQLite): CHAR(36)
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return uuid.UUID(str(value))


class JSONText(TypeDecorator):
    """Lists/objects serialized as JSON text.

    Script columns keep the text encoding on every dialect so rows stay
    portable between the sqlite dev database and exports.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if value is None or value == "":
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError):
            return None


JSONType = JSON().with_variant(JSONB(), "postgresql")
