"""Decoders for breeding rule sources.

Both decoders yield ``(parent1, parent2, result)`` triples in file order.
"""

from __future__ import annotations

import json
import re
from typing import Iterator, Tuple

Rule = Tuple[str, str, str]

LINE_PATTERN = re.compile(r"([\w:]+)=([\w:]+)\+([\w:]+)", re.ASCII)


class RuleSourceError(ValueError):
    """A structured rule source could not be decoded."""


def read_rules_txt(text: str) -> Iterator[Rule]:
    """Parse ``RESULT=PARENT1+PARENT2`` lines.

    Comment lines (``#``) and blank lines are skipped, and so is anything
    else that does not contain a rule.
    """
    for line in text.split("\n"):
        if not line or line[0] == "#":
            continue
        m = LINE_PATTERN.search(line)
        if m is None:
            continue
        combined, a, b = m.groups()
        yield a, b, combined


def read_rules_json(text: str) -> list[Rule]:
    """Parse a JSON array of ``{"parent1", "parent2", "result"}`` objects."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise RuleSourceError(f"Invalid JSON rule source: {err}") from err
    if not isinstance(data, list):
        raise RuleSourceError("JSON rule source must be an array")

    rules = []
    for i, entry in enumerate(data):
        try:
            rule = (entry["parent1"], entry["parent2"], entry["result"])
        except (KeyError, TypeError) as err:
            raise RuleSourceError(f"Rule #{i} is missing parent1/parent2/result") from err
        if not all(isinstance(name, str) for name in rule):
            raise RuleSourceError(f"Rule #{i} has a non-string parent1/parent2/result")
        rules.append(rule)
    return rules


READERS = {
    "txt": read_rules_txt,
    "json": read_rules_json,
}


def read_rules(text: str, fmt: str) -> list[Rule]:
    try:
        reader = READERS[fmt]
    except KeyError:
        raise RuleSourceError(f"Unknown rule format: {fmt!r}") from None
    return list(reader(text))
