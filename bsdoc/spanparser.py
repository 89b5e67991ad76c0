"""In-line transformation of leaf text.

A SpanParser holds an ordered chain of regular expression rules. Each rule
is applied in turn to the output of the previous one, so a later rule can
match text inserted by an earlier rule."""

import re
from typing import Callable, List, Match, NamedTuple, Pattern, Tuple, Union

Replacement = Union[str, Callable[[Match[str]], str]]


class SpanRule(NamedTuple):
    pattern: Pattern[str]
    replacement: Replacement


class SpanParser:
    def __init__(self) -> None:
        self._rules: List[SpanRule] = []

    @property
    def rules(self) -> Tuple[SpanRule, ...]:
        return tuple(self._rules)

    def add_rule(
        self, pattern: Union[str, Pattern[str]], replacement: Replacement
    ) -> None:
        """Add a new rule. The replacement is either a template string, which may
        refer to groups with \\1 or \\g<name>, or a callable that receives the
        match object and returns the replacement text."""
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        self._rules.append(SpanRule(pattern, replacement))

    def transform(self, text: str) -> str:
        """Transform the text using the rules of this span parser and return the result."""
        for rule in self._rules:
            text = rule.pattern.sub(rule.replacement, text)

        return text
