import re
from urllib.parse import urlparse

from redislink.exceptions import InvalidInputError
from redislink.schemas.url import CODE_PATTERN


ALLOWED_SCHEMES = ("http", "https")

_CODE_RE = re.compile(CODE_PATTERN)


def validate_long_url(value: str, max_length: int = 2048) -> str:
    """Return the trimmed long URL, or raise InvalidInputError.

    Only the limits the engine depends on are checked here (length, scheme,
    host). Anything richer belongs to the request layer.
    """
    if not isinstance(value, str):
        raise InvalidInputError(f"Long URL must be a string (given type: {type(value).__name__}).")

    long_url = value.strip()
    if not long_url:
        raise InvalidInputError("Long URL must not be empty.")
    if len(long_url) > max_length:
        raise InvalidInputError(f"Long URL is longer than {max_length} characters.")

    parsed = urlparse(long_url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidInputError(f"Long URL must be an absolute http(s) URL: {long_url!r}.")
    return long_url


def validate_code(value: str) -> str:
    if not isinstance(value, str) or not _CODE_RE.fullmatch(value):
        raise InvalidInputError(f"Invalid short code: {value!r}.")
    return value
