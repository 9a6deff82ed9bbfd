from __future__ import annotations

import re

__all__ = [
    "DEFAULT_CODE",
    "StatusCodeError",
    "parse_status_code",
    "status_class",
    "is_informational",
]

DEFAULT_CODE = 404

_CODE_RE = re.compile(r"^[0-9]{3}$")


class StatusCodeError(ValueError):
    code: str = "invalid_status_code"


def parse_status_code(raw: str | None) -> int:
    """Turn the ``X-Code`` header into a status code.

    A missing or empty header means `DEFAULT_CODE`. Anything else must be three
    decimal digits within 100-599.

    Raises:
        StatusCodeError: if the header is present but not a usable status code.
    """
    if raw is None or raw.strip() == "":
        return DEFAULT_CODE
    value = raw.strip()
    if not _CODE_RE.match(value):
        raise StatusCodeError(f"status code {raw!r} is not a three digit number")
    code = int(value)
    if not (100 <= code <= 599):
        raise StatusCodeError(f"status code {code} is outside 100-599")
    return code


def status_class(code: int) -> str:
    """Return the class wildcard for `code`, e.g. 503 -> ``5xx``."""
    return f"{str(code)[0]}xx"


def is_informational(code: int) -> bool:
    """1xx codes are interim responses and can never be the final answer."""
    return 100 <= code < 200
