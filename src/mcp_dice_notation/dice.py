from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from .config import Settings
from .errors import DiceValidationError
from .limits import check_limits
from .models import (
    ConstantTerm,
    DieTerm,
    Maximality,
    ParsedRoll,
    ParsedTerm,
    RollResult,
    TrialOutcome,
)
from .parser import parse_expression


logger = logging.getLogger(__name__)

EMPHASIS = "**"
STRIKE = "~~"
DIE_SEPARATOR = " "
TERM_SEPARATOR = " + "
TRIAL_SEPARATOR = " "


class Randomness(Protocol):
    def randint(self, a: int, b: int) -> int:
        """Uniform integer in [a, b], both ends inclusive."""


def default_rng() -> Randomness:
    return secrets.SystemRandom()


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def emphasize(text: str) -> str:
    return f"{EMPHASIS}{text}{EMPHASIS}"


def strike(text: str) -> str:
    return f"{STRIKE}{text}{STRIKE}"


def is_notable(value: int, sides: int) -> bool:
    """A natural 1 or a natural max, except on a one-sided die where every
    roll is both and none is worth pointing out."""

    if sides == 1:
        return False
    return value == 1 or value == sides


def validate(roll: ParsedRoll) -> None:
    for term in roll.terms:
        if isinstance(term, DieTerm) and term.sides == 0:
            raise DiceValidationError("cannot roll dice of size 0")


def _roll_die(value: int, sides: int) -> TrialOutcome:
    return TrialOutcome(
        total=value,
        rendered=emphasize(str(value)) if is_notable(value, sides) else str(value),
        maximality=Maximality(all_max=value == sides, all_min=value == 1),
        die_count=1,
    )


def evaluate_term(term: ParsedTerm, rng: Randomness) -> TrialOutcome:
    """Roll one term once. Zero-sided dice must already be rejected by validate()."""

    if isinstance(term, DieTerm):
        outcome = TrialOutcome.empty()
        for _ in range(term.count):
            die = _roll_die(rng.randint(1, term.sides), term.sides)
            outcome = outcome.combine(die, DIE_SEPARATOR)
        return outcome

    if isinstance(term, ConstantTerm):
        return TrialOutcome(total=term.value, rendered=str(term.value), die_count=1)

    raise TypeError(f"unknown term {term!r}")


def roll_trial(terms: list[ParsedTerm], rng: Randomness) -> TrialOutcome:
    outcome = TrialOutcome.empty()
    for term in terms:
        outcome = outcome.combine(evaluate_term(term, rng), TERM_SEPARATOR)
    return outcome


def select_index(trials: list[TrialOutcome], advantageousness: int) -> int:
    """Index of the governing trial: highest total with advantage (or none),
    lowest with disadvantage. The leftmost one wins a tie."""

    if not trials:
        raise ValueError("no trials to select from")

    sign = 1 if advantageousness >= 0 else -1
    best = 0
    for index, trial in enumerate(trials):
        if trial.total * sign > trials[best].total * sign:
            best = index
    return best


def roll_parsed(roll: ParsedRoll, rng: Randomness | None = None) -> RollResult:
    validate(roll)
    rng = rng or default_rng()
    trials = [roll_trial(roll.terms, rng) for _ in range(roll.trials)]
    return RollResult(trials=trials, selected=select_index(trials, roll.advantageousness))


def render_trial(trial: TrialOutcome) -> str:
    if trial.die_count <= 1:
        return trial.rendered
    total = str(trial.total)
    if trial.maximality.uniform_extreme:
        total = emphasize(total)
    return f"{trial.rendered} = {total}"


def render_result(result: RollResult) -> str:
    chunks: list[str] = []
    for index, trial in enumerate(result.trials):
        text = render_trial(trial)
        chunks.append(text if index == result.selected else strike(text))
    return TRIAL_SEPARATOR.join(chunks)


def evaluate(text: str, rng: Randomness | None = None) -> str:
    """Parse and roll an expression body, returning Markdown text.

    Raises DiceError (syntax or validation) without rolling anything.
    """

    roll = parse_expression(text)
    result = roll_parsed(roll, rng)
    logger.debug("rolled %s -> %d", roll.normalized_expression, result.total)
    return render_result(result)


def _trial_payload(index: int, trial: TrialOutcome, result: RollResult) -> dict[str, Any]:
    return {
        "index": index,
        "selected": index == result.selected,
        "total": trial.total,
        "die_count": trial.die_count,
        "all_max": trial.maximality.all_max,
        "all_min": trial.maximality.all_min,
        "rendered": render_trial(trial),
    }


def _term_payload(term: ParsedTerm) -> dict[str, Any]:
    if isinstance(term, DieTerm):
        return {"type": "die", "count": term.count, "sides": term.sides}
    return {"type": "constant", "value": term.value}


def roll_from_text(
    text: str, rng: Randomness | None = None, settings: Settings | None = None
) -> dict[str, Any]:
    """Parse, validate, then roll. Raises DiceError for invalid input.

    With settings, the roll must also fit their ceilings.
    """

    roll = parse_expression(text)
    if settings is not None:
        check_limits(roll, settings)
    source = "secrets.SystemRandom" if rng is None else type(rng).__name__
    result = roll_parsed(roll, rng)

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "normalized_expression": roll.normalized_expression,
        "mode": roll.mode,
        "advantageousness": roll.advantageousness,
        "rng": {
            "source": source,
            "nonce": str(uuid.uuid4()),
        },
        "terms": [_term_payload(t) for t in roll.terms],
        "trials": [_trial_payload(i, t, result) for i, t in enumerate(result.trials)],
        "selected": result.selected,
        "total": result.total,
        "text": render_result(result),
    }
