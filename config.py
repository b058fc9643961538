"""
CalDB Calculator Configuration Settings
"""
import os

# Application Settings
APP_NAME = "CalDB Calculator"
VERSION = "1.0.0"

# ── Expression glyphs ──────────────────────────────────────────────────────────

DISPLAY_MINUS = "–"          # en-dash, shown instead of a hyphen
ASCII_MINUS = "-"
PLUS = "+"
MULTIPLY = "×"
DIVIDE = "÷"
MODULO = "%"
DECIMAL_POINT = "."
GROUPING_SEPARATOR = ","

# Operators as they appear in the editable buffer
OPERATOR_CHARS = (PLUS, DISPLAY_MINUS, MULTIPLY, DIVIDE, MODULO)

# Keyboard / API spellings accepted for each operator
OPERATOR_ALIASES = {
    "+": PLUS,
    "-": DISPLAY_MINUS,
    "–": DISPLAY_MINUS,
    "−": DISPLAY_MINUS,
    "*": MULTIPLY,
    "x": MULTIPLY,
    "×": MULTIPLY,
    "/": DIVIDE,
    "÷": DIVIDE,
    "%": MODULO,
}

# Shown for NaN / Infinity results; a localized UI passes its own text
ERROR_TEXT = "Error"

# ── Number formatting ──────────────────────────────────────────────────────────

SCI_NOTATION_UPPER = 1e12
SCI_NOTATION_LOWER = 1e-6
SCI_SIG_DIGITS = 10
RESULT_DECIMALS = 10

# Live preview / regrouping debounce
FORMAT_DELAY_MS = 120

# Database Settings
DB_PATH = os.environ.get(
    "CALDB_DB_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "history.db"),
)

# History Settings
MAX_HISTORY_ITEMS = 12

# Web API settings
WEB_HOST = '0.0.0.0'
WEB_PORT = 8888
