"""Maven version numbers and version range expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum

_INTEGER = re.compile(r"[+-]?[0-9]+")
_COMPONENTS = ("major", "minor", "patch")


@dataclass(frozen=True)
class Version:
    """A parsed Maven version number."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    qualifier: str = ""

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.qualifier:
            text += f"-{self.qualifier}"
        return text


def _to_int(text: str, component: str, whole: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid {component} in {whole!r}: {text!r} is not an integer")
    return int(text)


def parse(s: str) -> Version:
    """Parse a version such as "1.7.3", "1.9.23-SNAPSHOT" or "2.0"."""
    s = s.strip()
    base, _, qualifier = s.partition("-")
    parts = base.split(".", 2)
    numbers = [_to_int(part, name, base) for part, name in zip(parts, _COMPONENTS)]
    numbers.extend([0] * (3 - len(numbers)))
    return Version(*numbers, qualifier=qualifier)


def compare(a: Version, b: Version) -> int:
    """Return -1, 0 or 1 as a is lower than, equal to or higher than b; qualifiers are ignored."""
    left = (a.major, a.minor, a.patch)
    right = (b.major, b.minor, b.patch)
    return (left > right) - (left < right)


class RangeKind(IntEnum):
    """The kind of a Maven version constraint."""

    EXACT = 0
    INCLUSIVE = 1
    EXCLUSIVE = 2
    UNBOUNDED = 3
    LATEST = 4
    RELEASE = 5
    PREFIX = 6


@dataclass(frozen=True)
class Range:
    """A parsed Maven version constraint."""

    kind: RangeKind
    lo: Version = field(default_factory=Version)
    hi: Version = field(default_factory=Version)
    lo_incl: bool = False
    hi_incl: bool = False
    lo_open: bool = False
    hi_open: bool = False
    prefix: Version = field(default_factory=Version)

    def matches(self, v: Version) -> bool:
        """Report whether v satisfies this constraint."""
        if self.kind in (RangeKind.LATEST, RangeKind.RELEASE):
            return True
        if self.kind is RangeKind.EXACT:
            return compare(v, self.lo) == 0
        if self.kind is RangeKind.PREFIX:
            return (
                v.major == self.prefix.major
                and v.minor == self.prefix.minor
                and v.patch >= self.prefix.patch
            )
        if not self.lo_open:
            cmp = compare(v, self.lo)
            if cmp < 0 or (cmp == 0 and not self.lo_incl):
                return False
        if not self.hi_open:
            cmp = compare(v, self.hi)
            if cmp > 0 or (cmp == 0 and not self.hi_incl):
                return False
        return True


def parse_range(s: str) -> Range:
    """Parse a Maven version range expression.

    Supported forms: "1.7.3", "[1.0,2.0)", "[1.0,]", "(,2.0]", "1.7.+",
    "LATEST" and "RELEASE".
    """
    s = s.strip()
    if s == "LATEST":
        return Range(RangeKind.LATEST)
    if s == "RELEASE":
        return Range(RangeKind.RELEASE)
    if s.endswith(".+"):
        try:
            prefix = parse(s[: -len(".+")])
        except ValueError as err:
            raise ValueError(f"invalid prefix range {s!r}: {err}") from err
        return Range(RangeKind.PREFIX, prefix=prefix)
    if s.startswith(("[", "(")):
        return _parse_interval(s)
    v = parse(s)
    return Range(RangeKind.EXACT, lo=v, hi=v, lo_incl=True, hi_incl=True)


def _parse_bound(text: str, which: str, whole: str) -> Version:
    try:
        return parse(text)
    except ValueError as err:
        raise ValueError(f"bad {which} bound in {whole!r}: {err}") from err


def _parse_interval(s: str) -> Range:
    if len(s) < 2:
        raise ValueError(f"empty interval {s!r}")
    inner = s[1:-1]
    if "," not in inner:
        raise ValueError(f"interval {s!r} missing comma")
    lo_text, _, hi_text = (part.strip() for part in inner.partition(","))
    return Range(
        RangeKind.INCLUSIVE,
        lo=_parse_bound(lo_text, "lower", s) if lo_text else Version(),
        hi=_parse_bound(hi_text, "upper", s) if hi_text else Version(),
        lo_incl=s[0] == "[",
        hi_incl=s[-1] == "]",
        lo_open=not lo_text,
        hi_open=not hi_text,
    )