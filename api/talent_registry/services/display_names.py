from __future__ import annotations

from typing import Literal

InitialsMode = Literal["custom-2", "custom-3", "name-initials", "single-letter", "anonymous"]

ANONYMOUS_DISPLAY_NAME = "Anonymous Professional"


def clean_custom_initials(custom_initials: str | None) -> str | None:
    """Return uppercased custom initials, or None when they are unusable.

    Only alphabetic values of two or more letters are honoured.
    """
    if not isinstance(custom_initials, str):
        return None
    stripped = custom_initials.strip()
    if len(stripped) < 2 or not stripped.isalpha():
        return None
    return stripped.upper()


def select_initials_mode(
    first_name: str | None,
    last_name: str | None,
    custom_initials: str | None,
) -> InitialsMode:
    initials = clean_custom_initials(custom_initials)
    if initials is not None:
        return "custom-3" if len(initials) >= 3 else "custom-2"
    first = _first_letter(first_name)
    last = _first_letter(last_name)
    if first and last:
        return "name-initials"
    if first:
        return "single-letter"
    return "anonymous"


def resolve_display(
    first_name: str | None,
    last_name: str | None,
    custom_initials: str | None,
    mode: InitialsMode,
) -> str:
    first = _first_letter(first_name)
    last = _first_letter(last_name)

    if mode in ("custom-2", "custom-3"):
        initials = clean_custom_initials(custom_initials)
        if initials is not None:
            letters = initials[:3] if mode == "custom-3" else initials[:2]
            return "".join(f"{letter}." for letter in letters)
        # Invalid custom initials fall back to the name-derived rendering.
        mode = select_initials_mode(first_name, last_name, None)

    if mode == "name-initials" and first and last:
        return f"{first}.{last}."
    if mode in ("name-initials", "single-letter") and first:
        return f"{first}. Anonymous"
    return ANONYMOUS_DISPLAY_NAME


def full_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(part.strip() for part in (first_name, last_name) if part and part.strip())


def _first_letter(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    stripped = value.strip()
    return stripped[0].upper() if stripped else ""
