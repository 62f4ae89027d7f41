from __future__ import annotations

from .config import Settings
from .errors import DiceValidationError
from .models import DieTerm, ParsedRoll


def check_limits(roll: ParsedRoll, settings: Settings) -> None:
    """Reject rolls whose cost would be unreasonable before drawing anything."""

    if roll.die_count > settings.max_dice:
        raise DiceValidationError(
            f"too many dice: {roll.die_count} (max {settings.max_dice})"
        )

    for term in roll.terms:
        if isinstance(term, DieTerm) and term.sides > settings.max_sides:
            raise DiceValidationError(
                f"too many sides: {term.sides} (max {settings.max_sides})"
            )

    magnitude = abs(roll.advantageousness)
    if magnitude > settings.max_advantage:
        raise DiceValidationError(
            f"too much {roll.mode}: {magnitude} (max {settings.max_advantage})"
        )
