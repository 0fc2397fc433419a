# pricewatch/filters/watch_validator.py

"""Input validation for watchlist mutations and displayed URLs."""

import logging
import re
from urllib.parse import urlparse

from pricewatch.config.settings import Settings
from pricewatch.errors import ValidationError

logger = logging.getLogger("pricewatch.filters")

_SOURCE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 ._&-]*$")
_DIGITS_RE = re.compile(r"^[0-9]{1,19}$")

# SQLite INTEGER is a signed 64-bit value
_MAX_IDENTIFIER = 2**63 - 1


class WatchValidator:
    """Validate identifiers and marketplace names before any storage call."""

    @staticmethod
    def identifier(value: object, field: str) -> int:
        """Return *value* as a positive int or raise ``ValidationError``.

        Accepts ints and digit-only strings up to the SQLite INTEGER
        range; rejects bools.
        """
        if isinstance(value, bool):
            raise ValidationError(field, f"Invalid {field}: expected an integer")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and _DIGITS_RE.match(value.strip()):
            number = int(value.strip())
        else:
            raise ValidationError(field, f"Invalid {field}: expected an integer")
        if number <= 0:
            raise ValidationError(field, f"Invalid {field}: must be positive")
        if number > _MAX_IDENTIFIER:
            raise ValidationError(field, f"Invalid {field}: out of range")
        return number

    @staticmethod
    def source(value: object) -> str:
        """Return the stripped marketplace name or raise ``ValidationError``."""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("source", "Source is required")
        name = value.strip()
        if len(name) > Settings.MAX_SOURCE_LENGTH:
            raise ValidationError(
                "source",
                f"Source exceeds {Settings.MAX_SOURCE_LENGTH} characters",
            )
        if not _SOURCE_RE.match(name):
            raise ValidationError(
                "source", f"Source contains invalid characters: {name!r}",
            )
        return name

    @staticmethod
    def watch_triple(
        user_id: object, product_id: object, source: object,
    ) -> tuple[int, int, str]:
        """Validate a (user, product, source) triple in one call."""
        return (
            WatchValidator.identifier(user_id, "user_id"),
            WatchValidator.identifier(product_id, "product_id"),
            WatchValidator.source(source),
        )


def absolute_url(raw: str | None) -> str | None:
    """Return *raw* if it is an absolute http(s) URL, else ``None``."""
    if not raw or not isinstance(raw, str):
        return None
    candidate = raw.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError:
        logger.debug("Unparseable URL dropped: %r", raw)
        return None
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        logger.debug("Non-absolute URL dropped: %r", raw)
        return None
    if any(ch.isspace() for ch in candidate):
        return None
    return candidate
