import uuid

from docportal.core.errors import bad_request


def as_uuid(value) -> uuid.UUID:
    """Task payloads carry ids as strings; ORM filters need UUIDs."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise bad_request(message="Invalid id", details={"id": str(value)}) from None
