"""Name conversions between Kotlin identifiers and Mochi shim names."""

from __future__ import annotations

from collections import Counter


def _is_lower_or_digit(ch: str) -> bool:
    return ch.islower() or ch.isdecimal()


def kotlin_to_mochi_name(name: str) -> str:
    """Convert a Kotlin identifier to snake_case.

    A run of capitals followed by a lowercase letter counts as one word
    ("getHTTPSStatus" -> "get_https_status"); a capital after a lowercase
    letter or digit starts a new word.
    """
    if not name:
        return ""
    parts: list[str] = []
    start = 0
    for i, (prev, cur) in enumerate(zip(name, name[1:]), start=1):
        if _is_lower_or_digit(prev) and cur.isupper():
            parts.append(name[start:i])
            start = i
        elif prev.isupper() and cur.islower() and i - start > 1:
            parts.append(name[start : i - 1])
            start = i - 1
    parts.append(name[start:])
    return "_".join(part.lower() for part in parts if part)


def class_to_extern_name(fqn: str) -> str:
    """Return the simple extern type name of a qualified class name, with nested-class separators removed."""
    return fqn.rpartition(".")[2].replace("$", "")


def shim_fn_name(class_name: str, fn_name: str) -> str:
    """Combine snake_case class and function names into a shim function name."""
    class_snake = kotlin_to_mochi_name(class_name)
    fn_snake = kotlin_to_mochi_name(fn_name)
    if not class_snake:
        return fn_snake
    if not fn_snake:
        return class_snake
    return f"{class_snake}_{fn_snake}"


class NameRegistry:
    """Hands out unique shim function names."""

    def __init__(self) -> None:
        self._used: Counter[str] = Counter()

    def allocate(self, class_name: str, fn_name: str) -> str:
        """Return a unique shim name, appending _2, _3, ... on repeats."""
        base = shim_fn_name(class_name, fn_name)
        count = self._used[base]
        self._used[base] += 1
        return base if count == 0 else f"{base}_{count + 1}"