"""Identifiers of entities.

Entities created by the app get a native id: a random uuid in lowercase hex.
Entities may also be reachable by an external id provided at creation, eg.
'tech-summit-2024'. Ids in any other format are rejected.

"""
import re
import secrets
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from eventhub.common.models.errors import InvalidIdError, ValidationError

_NATIVE_PATTERN = re.compile(r'^[0-9a-f]{32}$')
# No `#` or `|`, because those are separators in keys.
_EXTERNAL_PATTERN = re.compile(r'^[A-Za-z0-9._~-]{1,128}$')


def new_id() -> str:
    """Generate a native id."""
    return uuid.uuid4().hex


def new_sortable_id() -> str:
    """Generate an id that sorts by creation time.

    Eg. '01718023468123a1b2c3d4e5f6' is the millisecond timestamp padded to 14
    digits followed by 12 random hex digits.

    """
    millis = time.time_ns() // 1_000_000
    return f'{millis:014d}{secrets.token_hex(6)}'


def is_native(identifier: str) -> bool:
    """Check whether an id is in the native format."""
    return bool(_NATIVE_PATTERN.match(identifier))


def is_external(identifier: str) -> bool:
    """Check whether an id is in the external format."""
    return bool(_EXTERNAL_PATTERN.match(identifier))


def validate(identifier: Optional[str], name: str = 'id') -> str:
    """Make sure that an id is in the native or the external format.

    Args:
        identifier: The id to validate.
        name: The name of the parameter for the error message.

    Returns:
        The id.

    Raises:
        InvalidIdError if the id is missing or malformed.

    """
    if not isinstance(identifier, str) or not identifier:
        raise InvalidIdError(f'Missing {name}')
    if not (is_native(identifier) or is_external(identifier)):
        raise InvalidIdError(f'Invalid {name}: {identifier}')
    return identifier


def parse_timestamp(value: str) -> Optional[str]:
    """Normalize an ISO 8601 timestamp to the format of `CreatedAt`.

    Eg. '2024-05-01T10:00:00.000Z' -> '2024-05-01T10:00:00'. Naive timestamps
    are assumed to be UTC.

    Args:
        value: The timestamp or date string.

    Returns:
        The normalized timestamp or None if the value is not a timestamp.

    """
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=0).isoformat()


def require_timestamp(value: str, name: str) -> str:
    """Normalize a timestamp or raise ValidationError if it's malformed."""
    res = parse_timestamp(value)
    if res is None:
        raise ValidationError(f'Invalid {name}: {value}')
    return res
