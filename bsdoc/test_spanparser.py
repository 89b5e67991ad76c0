import re
from typing import Match

from .spanparser import SpanParser


def test_no_rules() -> None:
    span = SpanParser()
    assert span.transform("plain *text*") == "plain *text*"


def test_template_replacement() -> None:
    span = SpanParser()
    span.add_rule(r"\*(.+?)\*", r"<em>\1</em>")
    assert span.transform("an *emphasized* word") == "an <em>emphasized</em> word"
    assert span.transform("nothing here") == "nothing here"


def test_callable_replacement() -> None:
    def shout(match: Match[str]) -> str:
        return match.group(1).upper()

    span = SpanParser()
    span.add_rule(re.compile(r"!(\w+)"), shout)
    assert span.transform("say !hello and !bye") == "say HELLO and BYE"


def test_rules_apply_in_sequence() -> None:
    span = SpanParser()
    span.add_rule(r"\(c\)", "&copy;")
    # Sees the entity inserted by the previous rule
    span.add_rule(r"&(\w+);", r"<span>&\1;</span>")
    assert span.transform("(c) 2024") == "<span>&copy;</span> 2024"

    reordered = SpanParser()
    reordered.add_rule(r"&(\w+);", r"<span>&\1;</span>")
    reordered.add_rule(r"\(c\)", "&copy;")
    assert reordered.transform("(c) 2024") == "&copy; 2024"


def test_rules_are_immutable_view() -> None:
    span = SpanParser()
    span.add_rule("a", "b")
    rules = span.rules
    assert isinstance(rules, tuple)
    assert rules[0].pattern.pattern == "a"
    assert rules[0].replacement == "b"

    span.add_rule("b", "c")
    assert len(rules) == 1
    assert len(span.rules) == 2
    assert span.transform("a") == "c"
