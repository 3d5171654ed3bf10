"""Command-line arithmetic over numbers and the operators +, -, x and /."""

from __future__ import annotations

import math
import re
import sys
from collections.abc import Iterable, Sequence

_NUMBER_PREFIX = re.compile(
    r"""\s*[+-]?(?:
        0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?
      | (?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?
      | inf(?:inity)?
      | nan
    )""",
    re.IGNORECASE | re.VERBOSE,
)

_HIGH_PRECEDENCE = ("x", "/")
_LOW_PRECEDENCE = ("+", "-")


def _leading_number(token: str) -> float:
    """Value of the number that starts ``token``, or 0.0 if there is none."""
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        return 0.0
    text = match.group(0).strip()
    unsigned = text.lstrip("+-")
    if unsigned[:2].lower() == "0x":
        value = float.fromhex(unsigned)
        return -value if text.startswith("-") else value
    return float(text)


def apply_operator(op: str, value1: float, value2: float) -> float:
    """Apply ``op`` as ``value2 op value1``; division by zero follows IEEE rules."""
    if op == "+":
        return value2 + value1
    if op == "-":
        return value2 - value1
    if op == "x":
        return value2 * value1
    if op == "/":
        if value1 == 0:
            if value2 == 0 or math.isnan(value2):
                return math.nan
            return math.copysign(math.inf, value2) * math.copysign(1.0, value1)
        return value2 / value1
    raise ValueError(f"unknown operator: {op!r}")


def _reduce(numbers: list[float], operators: list[str]) -> float:
    if not operators or len(numbers) < 2:
        raise ValueError("malformed expression")
    op = operators.pop()
    value1 = numbers.pop()
    value2 = numbers.pop()
    return apply_operator(op, value1, value2)


def evaluate(tokens: Iterable[str]) -> float:
    """Evaluate a tokenised expression.

    Tokens that start with a non-zero number are operands; the rest are
    operators, judged by their first character, and unknown ones are ignored.
    A pending ``x`` or ``/`` is applied when a ``+`` or ``-`` arrives; the
    remaining operators are applied from the right.
    """
    numbers: list[float] = []
    operators: list[str] = []

    for token in tokens:
        value = _leading_number(token)
        if value:
            numbers.append(value)
            continue
        head = token[:1]
        if head in _HIGH_PRECEDENCE:
            operators.append(head)
        elif head in _LOW_PRECEDENCE:
            if operators and operators[-1] in _HIGH_PRECEDENCE:
                numbers.append(_reduce(numbers, operators))
            operators.append(head)

    result = 0.0
    while numbers:
        result = _reduce(numbers, operators)
        if numbers:
            numbers.append(result)
    return result


def main(argv: Sequence[str] | None = None) -> int:
    """Evaluate the arguments as an expression and print the result."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        result = evaluate(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"{result:g}")
    return 0


if __name__ == "__main__":
    sys.exit(main())