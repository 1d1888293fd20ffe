# calculator.py

"""
Arithmetic expression evaluator built on the shunting-yard algorithm.

An expression string goes through three stages:
1. tokenize     - raw text to a flat list of NUMBER / OP tokens
2. to_postfix   - infix tokens to Reverse Polish order (shunting-yard)
3. eval_postfix - postfix tokens to a single float, using an operand stack

`evaluate` composes the three and is the only function the REPL needs.
Supported grammar: non-negative integer literals, + - * / ^ and parentheses.
Whitespace is ignored.

Errors are raised as CalculatorError subclasses tagged with an ErrorKind.
They carry no display text; calc_repl renders them for the user.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


# ---------------------------
# Error Classes
# ---------------------------

class ErrorKind(Enum):
    """Failure families a caller can map to its own messages."""
    MISSING_OPERAND = "missing_operand"
    DIVISION_BY_ZERO = "division_by_zero"
    UNKNOWN_OPERATOR = "unknown_operator"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"


class CalculatorError(Exception):
    """Base class for calculator errors."""
    kind: ErrorKind

    def __init__(self, pos: Optional[int] = None):
        super().__init__(self.kind, pos)
        self.pos = pos


class MissingOperandError(CalculatorError):
    """An operator lacked operands, or operands were left over."""
    kind = ErrorKind.MISSING_OPERAND


class DivisionByZeroError(CalculatorError):
    kind = ErrorKind.DIVISION_BY_ZERO


class UnknownOperatorError(CalculatorError):
    """A token in operator position is not one of + - * / ^."""
    kind = ErrorKind.UNKNOWN_OPERATOR

    def __init__(self, symbol: str, pos: Optional[int] = None):
        super().__init__(pos)
        self.args = (self.kind, symbol, pos)
        self.symbol = symbol


class UnbalancedParenthesesError(CalculatorError):
    kind = ErrorKind.UNBALANCED_PARENTHESES


# ---------------------------
# Tokens and operator tables
# ---------------------------

class TokenType:
    """Enumeration of token types."""
    NUMBER = 'NUMBER'
    OP = 'OP'


@dataclass
class Token:
    """A NUMBER (float value) or OP (single character) token.

    `pos` is the offset of the token in the source text. It is only used for
    diagnostics and does not take part in equality.
    """
    type: str
    value: Union[float, str]
    pos: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, pos={self.pos})"


LPAREN = '('
RPAREN = ')'

# Higher number binds tighter.
PRIORITY: Dict[str, int] = {
    '+': 1,
    '-': 1,
    '*': 2,
    '/': 2,
    '^': 3,
}

RIGHT_ASSOCIATIVE = {'^'}


def priority(op: str, pos: Optional[int] = None) -> int:
    try:
        return PRIORITY[op]
    except KeyError:
        raise UnknownOperatorError(op, pos) from None


def is_left_associative(op: str) -> bool:
    return op not in RIGHT_ASSOCIATIVE


# ---------------------------
# Tokenizer
# ---------------------------

def _is_digit(ch: str) -> bool:
    # str.isdigit() accepts superscripts and other Unicode digits.
    return '0' <= ch <= '9'


def tokenize(expr: str) -> List[Token]:
    """
    Split an expression into tokens.

    Runs of ASCII digits become one NUMBER token. Whitespace is skipped and
    does not end a run, so "1 2" is the number 12. Every other character
    becomes a single-character OP token, including characters that are not
    valid operators; those are rejected later by the converter.
    """
    tokens: List[Token] = []
    digits: List[str] = []
    run_start = 0

    for i, ch in enumerate(expr):
        if ch.isspace():
            continue
        if _is_digit(ch):
            if not digits:
                run_start = i
            digits.append(ch)
            continue
        if digits:
            tokens.append(Token(TokenType.NUMBER, float(''.join(digits)), run_start))
            digits = []
        tokens.append(Token(TokenType.OP, ch, i))

    if digits:
        tokens.append(Token(TokenType.NUMBER, float(''.join(digits)), run_start))
    return tokens


def _format_number(value: float) -> str:
    if math.isfinite(value):
        return str(int(value))
    # Literals past float range parse to inf.
    return repr(value)


def serialize_tokens(tokens: List[Token], sep: str = " ") -> str:
    """Render tokens back into expression text.

    Numbers are written as integers. tokenize never emits two NUMBER tokens
    in a row, so its output survives a round trip with any separator.
    """
    parts = []
    for tok in tokens:
        if tok.type == TokenType.NUMBER:
            parts.append(_format_number(tok.value))
        else:
            parts.append(tok.value)
    return sep.join(parts)


# ---------------------------
# Infix to Postfix
# ---------------------------

def _should_pop(top: str, op: str, pos: Optional[int] = None) -> bool:
    op_priority = priority(op, pos)
    top_priority = priority(top)
    if top_priority > op_priority:
        return True
    return top_priority == op_priority and is_left_associative(op)


def to_postfix(tokens: List[Token]) -> List[Token]:
    """
    Convert infix tokens to postfix order with the shunting-yard algorithm.

    Raises:
        UnknownOperatorError: an OP token is neither a parenthesis nor in PRIORITY
        UnbalancedParenthesesError: a ')' has no matching '('
    """
    operators: List[Token] = []
    output: List[Token] = []

    for tok in tokens:
        if tok.type == TokenType.NUMBER:
            output.append(tok)
        elif tok.value == LPAREN:
            operators.append(tok)
        elif tok.value == RPAREN:
            while True:
                if not operators:
                    raise UnbalancedParenthesesError(tok.pos)
                top = operators.pop()
                if top.value == LPAREN:
                    break
                output.append(top)
        else:
            # Validate before looking at the stack, so an empty stack does
            # not let an unknown symbol through.
            priority(tok.value, tok.pos)
            while (operators
                   and operators[-1].value != LPAREN
                   and _should_pop(operators[-1].value, tok.value, tok.pos)):
                output.append(operators.pop())
            operators.append(tok)

    while operators:
        top = operators.pop()
        if top.value in (LPAREN, RPAREN):
            continue
        output.append(top)
    return output


# ---------------------------
# Postfix Evaluator
# ---------------------------

def _power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and int(exponent) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # math.pow raises where IEEE pow returns inf (0 ** negative) or nan.
        if base == 0:
            return math.inf
        return math.nan


def apply_operator(op: str, left: float, right: float) -> float:
    """Apply a binary operator as `left op right`."""
    if op == '+':
        return left + right
    if op == '-':
        return left - right
    if op == '*':
        return left * right
    if op == '/':
        if right == 0:
            raise DivisionByZeroError()
        return left / right
    if op == '^':
        return _power(left, right)
    raise UnknownOperatorError(op)


def eval_postfix(postfix: List[Token]) -> float:
    """
    Evaluate a postfix token sequence.

    The top of the operand stack is the right-hand operand of the next
    operator, so it is popped first.
    """
    operands: List[float] = []

    for tok in postfix:
        if tok.type == TokenType.NUMBER:
            operands.append(tok.value)
            continue
        if len(operands) < 2:
            raise MissingOperandError(tok.pos)
        right = operands.pop()
        left = operands.pop()
        try:
            operands.append(apply_operator(tok.value, left, right))
        except CalculatorError as e:
            if e.pos is None:
                e.pos = tok.pos
            raise

    if len(operands) != 1:
        raise MissingOperandError()
    return operands[0]


# ---------------------------
# Entry point
# ---------------------------

def evaluate(expr: str) -> float:
    """
    Evaluate an infix expression and return the result.

    An empty string yields NaN without running the pipeline. All other
    failures surface as CalculatorError subclasses.
    """
    if len(expr) == 0:
        return math.nan
    tokens = tokenize(expr)
    logger.debug("Tokens: %s", tokens)
    postfix = to_postfix(tokens)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Postfix: {serialize_tokens(postfix)}")
    result = eval_postfix(postfix)
    logger.debug(f"Result of {expr!r}: {result}")
    return result
