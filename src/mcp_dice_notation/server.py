from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .dice import roll_from_text
from .errors import DiceError
from .framing import roll_expression, scan_message


logger = logging.getLogger(__name__)

mcp = FastMCP(get_settings().server_name)


@mcp.tool()
def roll_dice(expression: str) -> str:
    """Roll a dice expression such as '2d6+3', 'd20a' or '-1/stealth'.

    Output: Markdown text. Extreme dice and totals are **bold**, discarded
    advantage/disadvantage rolls are ~~struck through~~.

    Raises a hard error (exception) on invalid input.
    """

    try:
        text = roll_expression(expression)
    except DiceError as e:
        # Fail-fast: every syntax error is in the message, joined by "; ".
        raise ValueError(str(e)) from None
    logger.info("roll_dice %r -> %s", expression, text)
    return text


@mcp.tool()
def roll_message(text: str) -> str:
    """Roll a chat message if it starts with 'r' or 'R' (e.g. 'r2d6+1').

    Output: Markdown text, or an empty string when the message is not a roll.
    """

    rendered = scan_message(text)
    if rendered is None:
        return ""
    logger.info("roll_message %r -> %s", text, rendered)
    return rendered


@mcp.tool()
def roll_dice_audit(expression: str) -> dict:
    """Roll a dice expression and return structured JSON with audit details.

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(expression, settings=get_settings())
    except DiceError as e:
        raise ValueError(str(e)) from None


def run() -> None:
    # stdout carries the stdio transport, so logs go to stderr.
    logging.basicConfig(stream=sys.stderr, level=get_settings().log_level.upper())
    mcp.run()


if __name__ == "__main__":
    run()
