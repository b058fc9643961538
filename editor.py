"""
Expression Editor for CalDB
Keystroke rules that keep the expression buffer well-formed.

Each operation takes the current buffer and cursor and returns an
EditResult; the caller owns the state and decides what to render.
"""
from collections import namedtuple

import config

EditResult = namedtuple("EditResult", ["text", "cursor", "changed"])


def is_operator(c):
    """True if c is one of the buffer's operator glyphs"""
    return c is not None and c in config.OPERATOR_CHARS


def normalize_operator(op):
    """Map keyboard/API spellings ("-", "*", "/") onto buffer glyphs"""
    try:
        return config.OPERATOR_ALIASES[op]
    except KeyError:
        raise ValueError(f"Unknown operator: {op!r}")


def _clamp(text, cursor):
    # An unknown or stale selection falls back to the end of the buffer
    if cursor is None or cursor < 0 or cursor > len(text):
        return len(text)
    return cursor


def _unchanged(text, cursor):
    return EditResult(text, cursor, False)


def insert_digit(text, cursor, digit):
    """Splice a single digit in at the cursor"""
    digit = str(digit)
    if len(digit) != 1 or not digit.isdigit():
        raise ValueError(f"Not a digit: {digit!r}")
    cursor = _clamp(text, cursor)
    return EditResult(text[:cursor] + digit + text[cursor:], cursor + 1, True)


def insert_decimal(text, cursor):
    """Add a decimal point if the current number segment has none.

    A fresh segment (empty buffer, cursor at 0, or right after an
    operator) gets "0." instead of a bare ".".
    """
    cursor = _clamp(text, cursor)

    if not text or cursor == 0 or is_operator(text[cursor - 1]):
        new_text = text[:cursor] + "0" + config.DECIMAL_POINT + text[cursor:]
        return EditResult(new_text, cursor + 2, True)

    before = text[:cursor]
    last_op = max(before.rfind(op) for op in config.OPERATOR_CHARS)
    segment = before[last_op + 1:]

    if config.DECIMAL_POINT in segment:
        return _unchanged(text, cursor)

    new_text = before + config.DECIMAL_POINT + text[cursor:]
    return EditResult(new_text, cursor + 1, True)


def set_operator(text, cursor, op):
    """Insert an operator, or replace a neighbouring one"""
    op = normalize_operator(op)
    minus = config.DISPLAY_MINUS

    # Only a unary minus makes sense in an empty buffer
    if not text:
        if op == minus:
            return EditResult(minus, 1, True)
        return _unchanged(text, 0)

    # A lone minus is a sign; it is never swapped for another operator
    if text == minus:
        return _unchanged(text, _clamp(text, cursor))

    cursor = _clamp(text, cursor)
    left = text[cursor - 1] if cursor > 0 else None
    right = text[cursor] if cursor < len(text) else None

    if cursor == 0:
        if op != minus or is_operator(right):
            return _unchanged(text, cursor)
        return EditResult(op + text, 1, True)

    if is_operator(left):
        if left == op:
            return _unchanged(text, cursor)
        return EditResult(text[:cursor - 1] + op + text[cursor:], cursor, True)

    if is_operator(right):
        return EditResult(text[:cursor] + op + text[cursor + 1:], cursor + 1, True)

    return EditResult(text[:cursor] + op + text[cursor:], cursor + len(op), True)


def delete_left(text, cursor):
    """Backspace: drop the character left of the cursor"""
    cursor = _clamp(text, cursor)
    if cursor == 0:
        return _unchanged(text, cursor)
    return EditResult(text[:cursor - 1] + text[cursor:], cursor - 1, True)


def clear():
    """Empty buffer, cursor at 0"""
    return EditResult("", 0, True)
