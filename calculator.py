"""
Calculator Engine for CalDB
Handles expression evaluation and the editing session around it
"""
import math
import threading

import config
import editor
from debouncer import Debouncer
from formatter import (
    format_number_for_display,
    reformat_with_commas,
    space_operators,
)
from history_manager import build_entry, expression_from_entry

EVAL_OPERATORS = "+-×÷%"


class CalculatorError(ValueError):
    """Base error for expressions the engine cannot handle"""


class MalformedExpression(CalculatorError):
    """An expression that does not tokenize into operand/operator pairs"""


def _normalize(expr):
    return (expr.replace(config.DISPLAY_MINUS, config.ASCII_MINUS)
                .replace(config.GROUPING_SEPARATOR, ""))


def _parse_operand(token):
    try:
        return float(token)
    except ValueError:
        raise MalformedExpression(f"Bad number: {token!r}")


def tokenize(expr):
    """Split an expression into (operands, operators).

    A "-" opens a signed number only when no number is being read,
    so "3×-2" is 3 times -2 while "3-2" is a subtraction.
    """
    numbers = []
    operators = []
    current = ""

    for c in _normalize(expr):
        if c.isdigit() or c == config.DECIMAL_POINT or (c == config.ASCII_MINUS and not current):
            current += c
        elif c in EVAL_OPERATORS:
            if current:
                numbers.append(_parse_operand(current))
                current = ""
            operators.append(c)
        elif not c.isspace():
            raise MalformedExpression(f"Unexpected character {c!r} in {expr!r}")

    if current:
        numbers.append(_parse_operand(current))
    return numbers, operators


def _apply(op, a, b):
    if op == "×":
        return a * b
    if op == "÷":
        return a / b
    if op == "%":
        # Remainder keeps the dividend's sign, as in IEEE fmod
        if b == 0 or math.isinf(a):
            return math.nan
        return math.fmod(a, b)
    if op == "+":
        return a + b
    return a - b


def evaluate_expression(expr):
    """Evaluate with ×, ÷, % before +, -, left to right within a tier.

    Returns NaN for division by zero instead of raising.
    """
    numbers, operators = tokenize(expr)

    # No operands at all, even with stray operators, evaluates to 0
    if not numbers:
        return 0.0
    if len(operators) != len(numbers) - 1:
        raise MalformedExpression(f"Operator without operand in {expr!r}")
    if not operators:
        return numbers[0]

    for tier in ("×÷%", "+-"):
        j = 0
        while j < len(operators):
            op = operators[j]
            if op not in tier:
                j += 1
                continue
            if op == "÷" and numbers[j + 1] == 0:
                return math.nan
            numbers[j] = _apply(op, numbers[j], numbers[j + 1])
            del numbers[j + 1]
            del operators[j]

    return numbers[0]


def _strip_incomplete_tail(expr):
    while expr and (editor.is_operator(expr[-1]) or expr[-1] == config.DECIMAL_POINT):
        expr = expr[:-1]
    return expr


def _has_binary_operator(expr):
    for i, c in enumerate(expr):
        if editor.is_operator(c):
            if i == 0 and c == config.DISPLAY_MINUS:
                continue
            return True
    return False


def preview_expression(expr, error_text=config.ERROR_TEXT):
    """Running total shown while typing, or "" when there is nothing to show"""
    eval_expr = _strip_incomplete_tail(expr.replace(config.GROUPING_SEPARATOR, ""))
    if not eval_expr or not _has_binary_operator(eval_expr):
        return ""

    try:
        result = evaluate_expression(eval_expr)
    except CalculatorError:
        return ""
    if math.isnan(result):
        return ""
    return format_number_for_display(result, error_text)


def _commit_expression(raw):
    """Turn a buffer ending in an operator into something evaluable"""
    last_char = raw[-1]
    if not editor.is_operator(last_char):
        return raw

    trimmed = raw[:-1]
    if last_char != config.DISPLAY_MINUS:
        return trimmed

    # "A–B–" evaluates as "A–B-B"
    last_op = max(trimmed.rfind(op) for op in config.OPERATOR_CHARS)
    last_token = trimmed[last_op + 1:]
    abs_token = last_token.strip().lstrip(config.DISPLAY_MINUS)
    if not abs_token:
        return trimmed
    return trimmed + config.ASCII_MINUS + abs_token


class Calculator:
    """Editing session: buffer, cursor, preview and the last committed result"""

    def __init__(self, history=None, error_text=config.ERROR_TEXT, reformat_delay_ms=None):
        self.history = history
        self.error_text = error_text
        # Edits and the reformat timer both touch text and cursor
        self._lock = threading.RLock()
        self._debouncer = Debouncer(reformat_delay_ms) if reformat_delay_ms is not None else None
        self.text = ""
        self.cursor = 0
        self.preview = ""
        self.last_calculated_expression = ""

    def _apply_edit(self, result):
        if result.changed:
            self.last_calculated_expression = ""
        self.text = result.text
        self.cursor = result.cursor
        self.preview = self.live_result()
        if result.changed and self._debouncer is not None:
            self.schedule_reformat()
        return self.text

    def _editable_text(self):
        # Typing over an error starts a fresh expression
        if self.text == self.error_text:
            self.text = ""
            self.cursor = 0
        return self.text

    def add_digit(self, digit):
        """Add a digit at the cursor"""
        with self._lock:
            return self._apply_edit(editor.insert_digit(self._editable_text(), self.cursor, digit))

    def add_decimal(self):
        """Add a decimal point at the cursor"""
        with self._lock:
            return self._apply_edit(editor.insert_decimal(self._editable_text(), self.cursor))

    def set_operator(self, op):
        """Insert or replace an operator at the cursor"""
        with self._lock:
            return self._apply_edit(editor.set_operator(self._editable_text(), self.cursor, op))

    def backspace(self):
        """Remove the character left of the cursor"""
        with self._lock:
            self.last_calculated_expression = ""
            return self._apply_edit(editor.delete_left(self._editable_text(), self.cursor))

    def clear(self):
        """Clear the buffer and preview"""
        with self._lock:
            self.cancel_reformat()
            self.last_calculated_expression = ""
            result = editor.clear()
            self.text, self.cursor = result.text, result.cursor
            self.preview = ""
            return self.text

    def move_cursor(self, position):
        with self._lock:
            self.cursor = max(0, min(position, len(self.text)))
            return self.cursor

    def set_expression(self, expression):
        """Replace the buffer, cursor at the end"""
        with self._lock:
            self.text = expression
            self.cursor = len(expression)
            self.last_calculated_expression = ""
            self.preview = self.live_result()
            return self.text

    def get_expression(self):
        return self.text if self.text else "0"

    def live_result(self):
        return preview_expression(self.text, self.error_text)

    def reformat(self):
        """Regroup thousands separators in the buffer, keeping the cursor"""
        with self._lock:
            self.text, self.cursor = reformat_with_commas(self.text, self.cursor)
            return self.text

    def schedule_reformat(self):
        """Reformat once edits have been quiet for the debounce delay.

        Without a delay configured the buffer is reformatted right away.
        """
        if self._debouncer is None:
            self.reformat()
        else:
            self._debouncer.call(self.reformat)

    def cancel_reformat(self):
        if self._debouncer is not None:
            self._debouncer.cancel()

    @property
    def reformat_pending(self):
        return self._debouncer is not None and self._debouncer.pending

    def calculate(self):
        """Evaluate the buffer and commit the result.

        Returns the new buffer text, or None when there was nothing to do.
        Complete operations are written to history; a history failure is
        raised after the result has been committed to the buffer.
        """
        with self._lock:
            return self._calculate()

    def _calculate(self):
        expression = self.text
        if not expression or expression == self.last_calculated_expression:
            return None

        raw = expression.replace(config.GROUPING_SEPARATOR, "")
        if not raw:
            return None
        ends_with_operator = editor.is_operator(raw[-1])
        # The committed result replaces the buffer a pending reformat would touch
        self.cancel_reformat()

        try:
            eval_expr = _commit_expression(raw)
            if not eval_expr:
                return None
            result = evaluate_expression(eval_expr)
        except CalculatorError:
            self.text = self.error_text
            self.cursor = len(self.text)
            self.preview = ""
            self.last_calculated_expression = ""
            return self.text

        formatted_result = format_number_for_display(result, self.error_text)
        # A leading minus is a sign, not an operation: "–5" commits but is
        # not written to history
        is_complete = _has_binary_operator(raw) and not ends_with_operator

        self.text = formatted_result
        self.cursor = len(formatted_result)
        self.preview = ""
        self.last_calculated_expression = formatted_result

        if is_complete and self.history is not None:
            self.history.append(build_entry(space_operators(expression), formatted_result))
        return self.text

    def load_from_history(self, entry):
        """Put the expression half of a history entry back in the buffer"""
        return self.set_expression(expression_from_entry(entry))
