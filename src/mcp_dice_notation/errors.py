from __future__ import annotations


class DiceError(ValueError):
    """User-facing errors (fail-fast, no roll performed)."""


class DiceValidationError(DiceError):
    """The expression parsed but cannot be rolled."""


class DiceSyntaxError(DiceError):
    """The expression does not match the dice grammar at some position."""

    def __init__(self, position: int, found: str | None, expected: list[str]) -> None:
        self.position = position
        self.found = found
        self.expected = expected
        super().__init__(self._describe())

    def _describe(self) -> str:
        found = "end of input" if self.found is None else repr(self.found)
        if not self.expected:
            return f"found {found} at {self.position}"
        if len(self.expected) == 1:
            wanted = self.expected[0]
        else:
            wanted = ", ".join(self.expected[:-1]) + f" or {self.expected[-1]}"
        return f"found {found} at {self.position}, expected {wanted}"


class DiceParseErrors(DiceError):
    """One or more syntax errors from a single parse attempt."""

    def __init__(self, errors: list[DiceSyntaxError]) -> None:
        if not errors:
            raise ValueError("DiceParseErrors needs at least one error")
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))
