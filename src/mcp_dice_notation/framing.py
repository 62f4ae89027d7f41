"""Entry points for the two ways an expression reaches the roller.

Direct framing: the caller already isolated the expression (a command
argument), so every failure is reported back.

Triggered framing: free chat text is scanned for a leading ``r``/``R``;
anything that does not start with the marker, or does not roll, is ignored.
"""

from __future__ import annotations

import logging

from .config import Settings, get_settings
from .dice import Randomness, render_result, roll_parsed
from .errors import DiceError
from .limits import check_limits
from .models import ParsedRoll
from .parser import parse_expression, parse_message, parse_triggered


logger = logging.getLogger(__name__)


def _roll(roll: ParsedRoll, rng: Randomness | None, settings: Settings | None) -> str:
    check_limits(roll, settings or get_settings())
    result = roll_parsed(roll, rng)
    logger.debug("rolled %s -> %d", roll.normalized_expression, result.total)
    return render_result(result)


def roll_expression(
    text: str, rng: Randomness | None = None, settings: Settings | None = None
) -> str:
    return _roll(parse_expression(text), rng, settings)


def scan_message(
    text: str, rng: Randomness | None = None, settings: Settings | None = None
) -> str | None:
    if parse_message(text) is None:
        return None

    try:
        return _roll(parse_triggered(text), rng, settings)
    except DiceError as e:
        logger.debug("ignoring message %r: %s", text, e)
        return None
