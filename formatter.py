"""
Number Formatter for CalDB
Turns evaluation results and raw expressions into display strings
"""
import math
from decimal import Context, Decimal, ROUND_HALF_UP

import config


def format_number_for_display(value, error_text=config.ERROR_TEXT):
    """Format a result as grouped decimal or scientific notation"""
    if math.isnan(value) or math.isinf(value):
        return error_text
    if value == 0:
        return "0"

    abs_val = abs(value)
    if abs_val >= config.SCI_NOTATION_UPPER or abs_val < config.SCI_NOTATION_LOWER:
        return format_scientific(value)
    return format_number_with_commas(format_result_with_precision(value))


def format_scientific(value):
    """Format like 3.9362976532E46, trimming mantissa zeros.

    The mantissa always uses a period and an ASCII minus, whatever the
    device locale is.
    """
    # Round the shortest repr digits half-up and lay them out without
    # going back through float
    ctx = Context(prec=config.SCI_SIG_DIGITS + 1, rounding=ROUND_HALF_UP)
    rounded = ctx.plus(Decimal(str(value)))
    formatted = format(rounded, f".{config.SCI_SIG_DIGITS}E")
    parts = formatted.split("E")
    if len(parts) != 2:
        return formatted

    mantissa = parts[0].rstrip("0").rstrip(".")
    exponent = int(parts[1])
    # At least two exponent digits: 1E-07, 1E13, 1E100
    sign = "-" if exponent < 0 else ""
    return f"{mantissa}E{sign}{abs(exponent):02d}"


def format_result_with_precision(result):
    """Keep up to 10 decimals and trim trailing zeros.

    Rounds from the shortest repr of the float, so 1234567.891 stays
    1234567.891 rather than picking up binary noise in the last place.
    """
    if result.is_integer():
        return str(int(result))
    q = Decimal(10) ** -config.RESULT_DECIMALS
    formatted = format(Decimal(str(result)).quantize(q, rounding=ROUND_HALF_UP), "f")
    return formatted.rstrip("0").rstrip(".")


def format_number_with_commas(number):
    """Insert thousands separators into the integer part of a number string.

    A leading "–" or "-" is re-emitted as the display minus, leading zeros
    are dropped (a lone "0" is kept) and the fractional part is left as is.
    """
    sanitized = number
    negative = sanitized.startswith(config.DISPLAY_MINUS) or sanitized.startswith(config.ASCII_MINUS)
    if negative:
        sanitized = sanitized[1:]
    sign = config.DISPLAY_MINUS if negative else ""
    if not sanitized:
        return sign

    int_part, point, dec_part = sanitized.partition(config.DECIMAL_POINT)
    int_part = int_part.lstrip("0") or "0"

    grouped = []
    for i, digit in enumerate(int_part):
        if i > 0 and (len(int_part) - i) % 3 == 0:
            grouped.append(config.GROUPING_SEPARATOR)
        grouped.append(digit)

    return sign + "".join(grouped) + point + dec_part


def format_expression_with_commas(expr):
    """Group every number in an expression, leaving operators untouched"""
    out = []
    number_buffer = ""
    for c in expr:
        if c.isdigit() or c == config.DECIMAL_POINT or (
            not number_buffer and c in (config.DISPLAY_MINUS, config.ASCII_MINUS)
        ):
            number_buffer += c
        else:
            if number_buffer:
                out.append(format_number_with_commas(number_buffer))
                number_buffer = ""
            out.append(c)

    if number_buffer:
        out.append(format_number_with_commas(number_buffer))
    return "".join(out)


def reformat_with_commas(text, cursor):
    """Regroup an edited buffer and map the cursor onto the new text.

    Returns a (text, cursor) tuple. A cursor at the end stays at the end;
    otherwise it lands after the regrouped form of the digits that were
    to its left.
    """
    if not text:
        return text, cursor
    if cursor is None or cursor < 0 or cursor > len(text):
        cursor = len(text)
    at_end = cursor >= len(text)

    raw_cursor = sum(1 for c in text[:cursor] if c != config.GROUPING_SEPARATOR)
    raw = text.replace(config.GROUPING_SEPARATOR, "")
    formatted = format_expression_with_commas(raw)
    if formatted == text:
        return text, cursor

    if at_end:
        new_cursor = len(formatted)
    else:
        new_cursor = len(format_expression_with_commas(raw[:raw_cursor]))
    return formatted, min(new_cursor, len(formatted))


def space_operators(expr):
    """Pad operators with spaces, e.g. "2+3×4" -> "2 + 3 × 4" """
    for op in config.OPERATOR_CHARS:
        expr = expr.replace(op, f" {op} ")
    return expr.strip()


def parse_display_number(text):
    """Parse a grouped-decimal display string back into a float"""
    raw = text.strip().replace(config.GROUPING_SEPARATOR, "")
    raw = raw.replace(config.DISPLAY_MINUS, config.ASCII_MINUS)
    return float(raw)
