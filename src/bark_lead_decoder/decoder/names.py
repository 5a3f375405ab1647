"""Name decomposition helpers."""

import re
from typing import Optional

from bark_lead_decoder.models.lead import DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME, PersonName

HONORIFIC_PATTERN = re.compile(r"\b(?:Dr|Mr|Mrs|Ms|Prof)\b\.?\s*", re.IGNORECASE)
BUSINESS_SUFFIX_PATTERN = re.compile(
    r"\b(?:Ltd|Limited|Inc|LLC|Corp|Corporation|Co|Company|Services|Solutions|Group)\b\.?",
    re.IGNORECASE,
)


def clean_name(full_name: str) -> str:
    """Strip honorifics and business suffixes from a display name."""
    cleaned = HONORIFIC_PATTERN.sub("", full_name or "")
    cleaned = BUSINESS_SUFFIX_PATTERN.sub("", cleaned)
    return cleaned.strip()


def parse_full_name(full_name: Optional[str]) -> PersonName:
    """
    Decompose a full display name into first and last name.

    The first remaining token becomes the first name and the rest are joined
    into the last name, e.g. ``"Dr. John A. Smith Ltd"`` gives ``John`` and
    ``A. Smith``. A single token gets the last name ``"Provider"``; nothing
    left at all gives ``("Unknown", "Provider")``.
    """
    tokens = clean_name(full_name or "").split()

    if len(tokens) >= 2:
        return PersonName(first_name=tokens[0], last_name=" ".join(tokens[1:]))
    if len(tokens) == 1:
        return PersonName(first_name=tokens[0], last_name=DEFAULT_LAST_NAME)
    return PersonName(first_name=DEFAULT_FIRST_NAME, last_name=DEFAULT_LAST_NAME)


def resolve_name(
    first_name: Optional[str],
    last_name: Optional[str],
    full_name: Optional[str],
) -> PersonName:
    """
    Combine explicit name markers with a parsed full name.

    Explicit first/last values win; a full name only fills the parts that
    are missing.
    """
    first = (first_name or "").strip() or None
    last = (last_name or "").strip() or None

    if (not first or not last) and full_name:
        parsed = parse_full_name(full_name)
        if not parsed.is_default:
            first = first or parsed.first_name
            last = last or parsed.last_name

    return PersonName(
        first_name=first or DEFAULT_FIRST_NAME,
        last_name=last or DEFAULT_LAST_NAME,
    )
