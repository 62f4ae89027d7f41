from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias


Mode: TypeAlias = Literal["advantage", "disadvantage", "none"]


@dataclass(frozen=True)
class DieTerm:
    count: int
    sides: int


@dataclass(frozen=True)
class ConstantTerm:
    value: int


ParsedTerm: TypeAlias = DieTerm | ConstantTerm


def _describe_term(term: ParsedTerm) -> str:
    if isinstance(term, DieTerm):
        return f"{term.count}d{term.sides}" if term.count != 1 else f"d{term.sides}"
    if isinstance(term, ConstantTerm):
        return str(term.value)
    raise TypeError(f"unknown term {term!r}")


@dataclass(frozen=True)
class ParsedRoll:
    """A flat sum of terms, rolled ``abs(advantageousness) + 1`` times.

    Positive advantageousness keeps the best trial, negative keeps the worst.
    """

    input: str
    terms: list[ParsedTerm]
    advantageousness: int = 0

    @property
    def mode(self) -> Mode:
        if self.advantageousness > 0:
            return "advantage"
        if self.advantageousness < 0:
            return "disadvantage"
        return "none"

    @property
    def trials(self) -> int:
        return abs(self.advantageousness) + 1

    @property
    def die_count(self) -> int:
        return sum(t.count for t in self.terms if isinstance(t, DieTerm))

    @property
    def normalized_expression(self) -> str:
        expr = " + ".join(_describe_term(t) for t in self.terms)
        if self.mode == "none":
            return expr
        short = "adv" if self.mode == "advantage" else "disadv"
        magnitude = abs(self.advantageousness)
        return f"{expr} ({short})" if magnitude == 1 else f"{expr} ({short} x{magnitude})"


@dataclass(frozen=True)
class Maximality:
    """Whether every die folded in so far landed on its highest / lowest face."""

    all_max: bool = True
    all_min: bool = True

    def combine(self, other: Maximality) -> Maximality:
        return Maximality(
            all_max=self.all_max and other.all_max,
            all_min=self.all_min and other.all_min,
        )

    @property
    def uniform_extreme(self) -> bool:
        # True for a clean all-max or all-min result; a constant-only or empty
        # unit is both at once and does not count.
        return self.all_max != self.all_min


@dataclass(frozen=True)
class TrialOutcome:
    total: int
    rendered: str
    maximality: Maximality = field(default_factory=Maximality)
    die_count: int = 0

    @classmethod
    def empty(cls) -> TrialOutcome:
        return cls(total=0, rendered="")

    def combine(self, other: TrialOutcome, separator: str) -> TrialOutcome:
        if self.rendered:
            rendered = f"{self.rendered}{separator}{other.rendered}"
        else:
            rendered = other.rendered
        return TrialOutcome(
            total=self.total + other.total,
            rendered=rendered,
            maximality=self.maximality.combine(other.maximality),
            die_count=self.die_count + other.die_count,
        )


@dataclass(frozen=True)
class RollResult:
    trials: list[TrialOutcome]
    selected: int

    @property
    def selected_trial(self) -> TrialOutcome:
        return self.trials[self.selected]

    @property
    def total(self) -> int:
        return self.selected_trial.total
