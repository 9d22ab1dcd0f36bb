"""Conversion of free text to PascalCase identifiers."""

from __future__ import annotations

import enum
import unicodedata

__all__ = ["pascal_case", "mark_letter_case_changes"]


class _State(enum.Enum):
    IDLE = enum.auto()
    FIRST_ALNUM = enum.auto()
    ALNUM = enum.auto()
    DELIMITER = enum.auto()

    def next(self, ch: str) -> "_State":
        alnum = _is_alnum(ch)
        if self is _State.IDLE:
            return _State.FIRST_ALNUM if alnum else _State.IDLE
        if self is _State.FIRST_ALNUM:
            return _State.ALNUM if alnum else _State.DELIMITER
        if self is _State.ALNUM:
            return _State.ALNUM if alnum else _State.DELIMITER
        return _State.FIRST_ALNUM if alnum else _State.IDLE


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


def _is_upper(ch: str) -> bool:
    return unicodedata.category(ch) == "Lu"


def _is_alnum(ch: str) -> bool:
    category = unicodedata.category(ch)
    return category.startswith("L") or category.startswith("N")


def _single(converted: str, original: str) -> str:
    return converted if len(converted) == 1 else original


def pascal_case(text: str) -> str:
    """Join the alphanumeric words of ``text`` as PascalCase."""
    out: list[str] = []
    state = _State.IDLE
    for ch in mark_letter_case_changes(text):
        state = state.next(ch)
        if state is _State.FIRST_ALNUM:
            out.append(_single(ch.upper(), ch))
        elif state is _State.ALNUM:
            out.append(_single(ch.lower(), ch))
    return "".join(out)


def mark_letter_case_changes(text: str) -> str:
    """Insert underscores at letter case changes: "camelCaseTEXT" -> "camel_Case_TEXT"."""
    out: list[str] = []
    was_letter = False
    upper_run = 0
    for ch in text:
        if _is_letter(ch):
            upper = _is_upper(ch)
            if was_letter and upper_run > 1 and not upper:
                out.append("_")
            if was_letter and upper_run == 0 and upper:
                out.append("_")
        was_letter = _is_letter(ch)
        upper_run = upper_run + 1 if _is_upper(ch) else 0
        out.append(ch)
    return "".join(out)