from __future__ import annotations

import logging
import re

from .errors import DiceParseErrors, DiceSyntaxError
from .models import ConstantTerm, DieTerm, ParsedRoll, ParsedTerm


logger = logging.getLogger(__name__)

TRIGGER_MARKERS = frozenset("rR")

# No leading zeros: "05" reads as "0" followed by a stray "5".
_INT_RE = re.compile(r"0|[1-9][0-9]*")

_END = "end of input"


def _expected_order(label: str) -> tuple[bool, str]:
    return label == _END, label


class _ExpressionParser:
    """Backtracking parser for a single expression body.

    Each rule returns ``(value, next_position)`` or ``None``. Failures are
    recorded at the furthest position reached so the final error points at
    the real problem instead of the first alternative that gave up.
    """

    def __init__(self, text: str, offset: int = 0) -> None:
        self.text = text
        self.offset = offset
        self._furthest = -1
        self._expected: set[str] = set()

    def _fail(self, pos: int, *labels: str) -> None:
        if pos > self._furthest:
            self._furthest = pos
            self._expected = set(labels)
        elif pos == self._furthest:
            self._expected.update(labels)
        return None

    def _peek(self, pos: int) -> str | None:
        return self.text[pos] if pos < len(self.text) else None

    def _char(self, pos: int, ch: str) -> int | None:
        if self._peek(pos) == ch:
            return pos + 1
        return self._fail(pos, repr(ch))

    def _number(self, pos: int) -> tuple[int, int] | None:
        m = _INT_RE.match(self.text, pos)
        if not m:
            return self._fail(pos, "digit")
        try:
            value = int(m.group())
        except ValueError:
            # Past the interpreter's int conversion limit; no alternative
            # could read these digits either.
            raise DiceParseErrors(
                [DiceSyntaxError(position=pos + self.offset, found=self._peek(pos), expected=["a shorter number"])]
            ) from None
        return value, m.end()

    def _signed(self, pos: int) -> tuple[int, int] | None:
        if self._peek(pos) == "-":
            parsed = self._number(pos + 1)
            if parsed is None:
                return None
            return -parsed[0], parsed[1]
        self._fail(pos, "'-'")
        return self._number(pos)

    def _ending(self, pos: int) -> tuple[int, int] | None:
        ch = self._peek(pos)
        advantageousness = 0
        if ch in ("a", "d"):
            end = pos
            while self._peek(end) == ch:
                end += 1
            advantageousness = end - pos if ch == "a" else pos - end
            pos = end
            self._fail(pos, repr(ch))
        else:
            self._fail(pos, "'a'", "'d'")

        # Everything after the slash is commentary.
        if self._peek(pos) == "/":
            return advantageousness, len(self.text)
        self._fail(pos, "'/'")

        if pos == len(self.text):
            return advantageousness, pos
        return self._fail(pos, _END)

    def _term(self, pos: int) -> tuple[ParsedTerm, int] | None:
        count = self._number(pos)
        after_count = count[1] if count else pos
        after_d = self._char(after_count, "d")
        if after_d is not None:
            sides = self._number(after_d)
            if sides is not None:
                term = DieTerm(count=count[0] if count else 1, sides=sides[0])
                return term, sides[1]

        literal = self._signed(pos)
        if literal is None:
            return None
        return ConstantTerm(value=literal[0]), literal[1]

    def _term_list(self, pos: int) -> tuple[list[ParsedTerm], int] | None:
        first = self._term(pos)
        if first is None:
            return None

        terms = [first[0]]
        pos = first[1]
        while True:
            after_plus = self._char(pos, "+")
            if after_plus is None:
                break
            nxt = self._term(after_plus)
            if nxt is None:
                break
            terms.append(nxt[0])
            pos = nxt[1]
        return terms, pos

    def parse(self) -> tuple[list[ParsedTerm], int]:
        # A bare signed number is "1d20 plus this", so it must win over the
        # general term list, which would read it as a lone constant.
        shorthand = self._signed(0)
        if shorthand is not None:
            ending = self._ending(shorthand[1])
            if ending is not None:
                return [DieTerm(count=1, sides=20), ConstantTerm(value=shorthand[0])], ending[0]

        term_list = self._term_list(0)
        if term_list is not None:
            ending = self._ending(term_list[1])
            if ending is not None:
                return term_list[0], ending[0]

        ending = self._ending(0)
        if ending is not None:
            return [DieTerm(count=1, sides=20)], ending[0]

        raise DiceParseErrors([self._error()])

    def _error(self) -> DiceSyntaxError:
        pos = max(self._furthest, 0)
        return DiceSyntaxError(
            position=pos + self.offset,
            found=self._peek(pos),
            expected=sorted(self._expected, key=_expected_order),
        )


def parse_expression(text: str, *, offset: int = 0) -> ParsedRoll:
    """Parse an expression body with no leading marker (direct framing).

    Raises DiceParseErrors when the text does not match the grammar.
    """

    terms, advantageousness = _ExpressionParser(text, offset=offset).parse()
    roll = ParsedRoll(input=text, terms=terms, advantageousness=advantageousness)
    logger.debug("parsed %r as %s", text, roll.normalized_expression)
    return roll


def parse_message(text: str) -> str | None:
    """Return the expression body after an ``r``/``R`` marker, or None."""

    if text and text[0] in TRIGGER_MARKERS:
        return text[1:]
    return None


def parse_triggered(text: str) -> ParsedRoll:
    """Parse a message that must start with the trigger marker.

    Error positions count the marker, so they point into the whole message.
    """

    body = parse_message(text)
    if body is None:
        found = text[0] if text else None
        raise DiceParseErrors(
            [DiceSyntaxError(position=0, found=found, expected=sorted(repr(m) for m in TRIGGER_MARKERS))]
        )
    return parse_expression(body, offset=1)
