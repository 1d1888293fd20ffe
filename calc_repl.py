# calc_repl.py

"""
Interactive front end for the shunting-yard calculator.

Reads expressions line by line, evaluates them with calculator.evaluate and
prints the result. Error kinds raised by the core are rendered here using the
calculator's fixed message strings; the core itself carries no display text.

Configuration comes from (lowest to highest precedence):
- defaults in CalculatorSettings
- environment variables CALC_HISTORY_FILE, CALC_LOG_LEVEL, CALC_PROMPT
  (a .env file in the working directory is loaded first)
- command-line flags
"""

import argparse
import logging
import math
import os
import sys
from typing import Dict, List, Optional, Tuple

from dotenv import find_dotenv, load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from pydantic import BaseModel, Field, ValidationError, field_validator

from calculator import CalculatorError, ErrorKind, evaluate

logger = logging.getLogger(__name__)

# ---------------------------
# Messages
# ---------------------------

MISSING_OPERAND = "Missing or bad operand"
DIV_BY_ZERO = "Division with 0"
MISSING_OPERATOR = "Missing operator or parenthesis"
OP_NOT_FOUND = "Operator not found"

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.MISSING_OPERAND: MISSING_OPERAND,
    ErrorKind.DIVISION_BY_ZERO: DIV_BY_ZERO,
    ErrorKind.UNBALANCED_PARENTHESES: MISSING_OPERATOR,
    ErrorKind.UNKNOWN_OPERATOR: OP_NOT_FOUND,
}

HELP_TEXT = """
Calculator Help
---------------
Supported operations (non-negative integers only):
  - Addition:        1 + 2
  - Subtraction:     3 - 4
  - Multiplication:  5 * 6
  - Division:        7 / 8
  - Power:           2 ^ 3 ^ 2   (right-associative, = 2 ^ 9)
  - Parentheses:     (1 + 2) * 3

Commands:
  help        show this message
  exit, quit  leave the calculator (Ctrl-D also works)
"""


def render_error(error: CalculatorError) -> str:
    """Return the display message for a calculator error."""
    return ERROR_MESSAGES[error.kind]


def format_result(value: float) -> str:
    """Print integer-valued results without a trailing .0."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


# ---------------------------
# Configuration
# ---------------------------

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class CalculatorSettings(BaseModel):
    """Runtime settings for the REPL."""
    history_file: str = Field(
        default_factory=lambda: os.path.expanduser("~/.shunting_calc_history"),
        description="File used by prompt_toolkit to persist input history",
    )
    log_level: str = Field("WARNING", description="Root logging level")
    prompt: str = "> "

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('history_file')
    @classmethod
    def history_file_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('History file cannot be empty')
        return os.path.expanduser(v.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shunting-yard calculator REPL.")
    parser.add_argument(
        "-e", "--expression",
        type=str,
        help="Evaluate a single expression, print the result and exit.",
    )
    parser.add_argument(
        "--history-file",
        type=str,
        help="Path of the input history file (default: ~/.shunting_calc_history).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: WARNING).",
    )
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Tuple[CalculatorSettings, argparse.Namespace]:
    """
    Build settings from .env, the environment and command-line flags.

    Returns:
        The validated settings and the parsed arguments
    """
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    values = {}
    env_map = {
        "history_file": "CALC_HISTORY_FILE",
        "log_level": "CALC_LOG_LEVEL",
        "prompt": "CALC_PROMPT",
    }
    for key, env_name in env_map.items():
        env_value = os.getenv(env_name)
        if env_value is not None:
            values[key] = env_value
    if args.history_file:
        values["history_file"] = args.history_file
    if args.log_level:
        values["log_level"] = args.log_level

    try:
        settings = CalculatorSettings(**values)
    except ValidationError as e:
        # parser.error exits with status 2, like any other bad option.
        messages = "; ".join(err["msg"] for err in e.errors())
        parser.error(f"invalid settings: {messages}")
    return settings, args


# ---------------------------
# REPL
# ---------------------------

class REPL:
    """Read-Eval-Print Loop for the calculator."""

    def __init__(self, settings: Optional[CalculatorSettings] = None):
        self.settings = settings or CalculatorSettings()
        self.running = True

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single line (either command or expression). Returns (ok, output)."""
        command = line.strip().lower()
        if command in ('exit', 'quit'):
            self.running = False
            return True, "Goodbye!"
        if command == 'help':
            return True, HELP_TEXT.strip()

        try:
            result = evaluate(line)
        except CalculatorError as e:
            logger.info(f"Rejected expression {line!r}: {e.kind.value}")
            return False, f"Error: {render_error(e)}"
        return True, format_result(result)

    def repl_loop(self) -> None:
        """Interactive loop; input history is persisted by prompt_toolkit."""
        session = PromptSession(history=FileHistory(self.settings.history_file))
        print("Welcome to the calculator. Type 'help' for instructions, or 'exit' to quit.")
        while self.running:
            try:
                line = session.prompt(self.settings.prompt)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print("Exiting.")
                break
            if not line.strip():
                continue
            ok, out = self.evaluate_line(line)
            print(out)


# ---------------------------
# Main Entry Point
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    settings, args = load_settings(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Settings: {settings}")

    repl = REPL(settings)
    if args.expression is not None:
        ok, out = repl.evaluate_line(args.expression)
        print(out, file=sys.stdout if ok else sys.stderr)
        return 0 if ok else 1

    repl.repl_loop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
