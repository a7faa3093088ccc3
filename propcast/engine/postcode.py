"""UK postcode validation and normalisation."""

import re

from propcast.errors import ValidationError

FULL_POSTCODE_RE = re.compile(r"^[A-Z]{1,2}[0-9]{1,2}[A-Z]?\s?[0-9][A-Z]{2}$", re.IGNORECASE)
OUTWARD_CODE_RE = re.compile(r"^[A-Z]{1,2}[0-9]{1,2}[A-Z]?$", re.IGNORECASE)


def normalize_postcode(postcode: str) -> str:
    """Uppercase with all whitespace removed: 'sw1a 1aa' -> 'SW1A1AA'."""
    return "".join(postcode.split()).upper()


def is_valid_uk_postcode(postcode: str | None) -> bool:
    if not postcode:
        return False
    stripped = postcode.strip()
    return bool(FULL_POSTCODE_RE.match(stripped) or OUTWARD_CODE_RE.match(normalize_postcode(stripped)))


def validate_postcode(postcode: str | None) -> str:
    """Return the uppercased postcode, or raise ValidationError."""
    if not postcode or not postcode.strip():
        raise ValidationError("Postcode is required")
    if not is_valid_uk_postcode(postcode):
        raise ValidationError("Invalid UK postcode format")
    return postcode.strip().upper()


def outward_code(postcode: str) -> str:
    """Outward part of a postcode: 'SW1A 1AA' -> 'SW1A', 'M1' -> 'M1'."""
    clean = normalize_postcode(postcode)
    if OUTWARD_CODE_RE.match(clean):
        return clean
    return clean[:-3]
