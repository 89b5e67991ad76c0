"""
A line-oriented parser for indentation-structured text. This module defines
the following classes:

- `Scope`, a level of indentation and the tags applied to text written at it
- `Rule`, a (pattern, handler) pair
- `ParagraphParserEnv`, the state of one running parse
- `ParagraphParser`, a reusable rule set with helpers for defining rules

Exception classes:

- `ParserError`
- `UnterminatedBlockError`

How To Use This Module
======================

1. Create a parser and register rules in priority order. The first rule
   whose pattern matches a line wins::

       parser = ParagraphParser()
       parser.add_rule(r"^#\\s+(.*)$", [], ["h1"])
       parser.add_list_rule(r"^\\*\\s+(.*)$", ["ul"], ["ul", "li"])
       parser.add_rule(r"^(.*)$", None, ["p"])

2. Parse a document into a `Generator` and render it::

       generator = Generator()
       parser.parse(text, SpanParser(), generator)
       html = generator.generate()

Handlers receive the running `ParagraphParserEnv` and the match object. They
may write text, push and pop scopes, consume further input lines, or
re-dispatch part of the line with `ParagraphParserEnv.process_text()`.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import (
    Deque,
    List,
    Match,
    NamedTuple,
    Optional,
    Pattern,
    Sequence,
    Tuple,
    Union,
)

from typing_extensions import Protocol

from .generator import Generator
from .spanparser import SpanParser

logger = logging.getLogger(__name__)

DEFAULT_INDENT_TAGS: Tuple[str, ...] = ("blockquote",)
PAT_BLANK = re.compile(r"^\s*$")
PatternLike = Union[str, Pattern[str]]


class RuleHandler(Protocol):
    def __call__(self, env: "ParagraphParserEnv", match: Match[str]) -> None:
        ...


class BlockHandler(Protocol):
    def __call__(
        self,
        env: "ParagraphParserEnv",
        block: Sequence[str],
        start_match: Match[str],
        end_match: Match[str],
    ) -> None:
        ...


@dataclass
class Scope:
    """A scope in the source document. Scopes are created by indentation or by rules
    such as list items, and carry the tags applied to anything written inside them.

    A scope opened by a rule has an indent of None until the next non-blank line
    decides whether it continues the scope."""

    indent: Optional[str]
    tags: Tuple[str, ...]


class Rule(NamedTuple):
    pattern: Pattern[str]
    handler: RuleHandler


def compile_pattern(pattern: PatternLike) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


class ParagraphParserEnv:
    """The environment of a running paragraph parser. One environment parses exactly
    one document; the rules it is given are shared and never modified."""

    def __init__(
        self,
        rules: Sequence[Rule],
        span: SpanParser,
        generator: Generator,
        indent_tags: Sequence[str] = DEFAULT_INDENT_TAGS,
    ) -> None:
        self.rules = tuple(rules)
        self.span = span
        self.generator = generator

        self.indent_tags = tuple(indent_tags)
        """The tags used by default for indented text."""

        self.scopes: List[Scope] = [Scope("", ())]
        """The nested scopes that represent the current state. The bottom scope is a
        sentinel and is never popped."""

        self.lines: Deque[str] = deque()
        """The lines of the document that remain to be processed."""

        self.lineno = 0
        """Number of the line most recently consumed, counting from 1."""

    @property
    def top(self) -> Scope:
        return self.scopes[-1]

    def push_scope(self, tags: Sequence[str]) -> None:
        """Open a scope nested in the current one. Its indentation is decided by the
        next non-blank line."""
        self.scopes.append(Scope(None, self.top.tags + tuple(tags)))
        logger.debug(f"Line {self.lineno}: opened scope {self.top.tags}")

    def pop_scope(self) -> Scope:
        assert len(self.scopes) > 1, "Cannot pop the document scope"
        scope = self.scopes.pop()
        logger.debug(f"Line {self.lineno}: closed scope {scope.tags}")
        return scope

    def lines_shift_chomp(self) -> str:
        """Consume the next line, without trailing whitespace. Raises EOFError when
        no lines remain."""
        if not self.lines:
            raise EOFError

        self.lineno += 1
        return self.lines.popleft().rstrip()

    def parse(self, text: str) -> None:
        """Parse the text, applying the rules and writing the result to the generator."""
        self.lines = deque(text.split("\n"))
        self.lineno = 0

        while self.lines:
            line = self.lines_shift_chomp()

            # Split line into indent and text. Blank lines inherit the last indent
            content = line.lstrip()
            indent: Optional[str] = line[: len(line) - len(content)]
            if not content:
                indent = self.top.indent

            self.process_indent(indent)
            self.process_text(content)

    def indent_width(self) -> int:
        """Length of the indentation prefix of the current scope."""
        return self._threshold(-1)

    def _threshold(self, index: int) -> int:
        """Length of the indentation in effect at the given stack index. A scope whose
        indentation is still open is bounded by the scopes beneath it."""
        for scope in reversed(self.scopes[: len(self.scopes) + index + 1]):
            if scope.indent is not None:
                return len(scope.indent)

        return 0

    def process_indent(self, indent: Optional[str]) -> None:
        """Handle an indentation change. Pops all de-indented scopes and adds a new scope
        for deeper indentation."""
        if indent is None:
            # A blank line says nothing about a scope that is still open
            return

        if self.top.indent and not indent:
            # Unindented text continues an indented scope
            return

        if len(self.scopes) > 1:
            if len(indent) > self._threshold(-2):
                self.top.indent = indent
            else:
                self.pop_scope()
                while self.top.indent is None:
                    self.pop_scope()

        while len(indent) < self._threshold(-1):
            self.pop_scope()

        if len(indent) > self._threshold(-1):
            self.scopes.append(Scope(indent, self.top.tags + self.indent_tags))
            logger.debug(f"Line {self.lineno}: indented scope {self.top.tags}")

    def process_text(self, line: str) -> None:
        """Process text by applying the first rule that matches."""
        for rule in self.rules:
            match = rule.pattern.match(line)
            if match:
                rule.handler(self, match)
                return

        logger.debug(f"Line {self.lineno}: no rule matched {line!r}")

    def write_raw(self, tags: Sequence[str], line: Optional[str]) -> None:
        """Write the line without span transformations. Scope tags are added
        automatically."""
        self.generator.add_with_path(self.top.tags + tuple(tags), line)

    def write_escaped(self, tags: Sequence[str], line: str) -> None:
        line = line.replace("&", "&amp;")
        line = line.replace("<", "&lt;")
        self.write_raw(tags, line)

    def write(self, tags: Sequence[str], line: Optional[str]) -> None:
        """Write the line, transformed by the span parser. A line of None writes a
        divider that ends the current block at the given tags."""
        if line is not None:
            line = self.span.transform(line)
        self.write_raw(tags, line)

    def write_both(self, tags: Sequence[str], raw: str, line: str) -> None:
        """Write some raw text followed by some span-transformed text."""
        self.write_raw(tags, raw + self.span.transform(line))


class ParagraphParser:
    """Parses the lines of a source document.

    The parser is created by adding rules. Each rule is a pattern and the handler
    to run when a line matches it. Only the handler of the first matching rule is
    run. Lines matching no rule produce no output."""

    def __init__(self, indent_tags: Sequence[str] = DEFAULT_INDENT_TAGS) -> None:
        self._rules: List[Rule] = []
        self.indent_tags = tuple(indent_tags)
        self.on(PAT_BLANK, self._blank)

    @staticmethod
    def _blank(env: ParagraphParserEnv, match: Match[str]) -> None:
        env.write((), None)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    def create_env(self, span: SpanParser, generator: Generator) -> ParagraphParserEnv:
        return ParagraphParserEnv(self._rules, span, generator, self.indent_tags)

    def parse(self, text: str, span: SpanParser, generator: Generator) -> None:
        """Parse the text using this rule set, writing the result to the generator."""
        self.create_env(span, generator).parse(text)

    def on(self, pattern: PatternLike, handler: RuleHandler) -> None:
        """Add a generic rule. When the pattern matches, the handler is called with
        the running ParagraphParserEnv and the match object.

        This is the main function for defining rules; the others are conveniences
        built on top of it."""
        self._rules.append(Rule(compile_pattern(pattern), handler))

    def on_block(
        self,
        start_pattern: PatternLike,
        end_pattern: PatternLike,
        handler: BlockHandler,
    ) -> None:
        """Add a rule for a block of lines delimited by a start and an end pattern.
        The handler is called as ``handler(env, block, start_match, end_match)``,
        where block holds the raw lines between the delimiters with the current
        indentation removed.

        Raises `UnterminatedBlockError` if the input ends before the end pattern
        is found."""
        end = compile_pattern(end_pattern)

        def consume_block(env: ParagraphParserEnv, start_match: Match[str]) -> None:
            width = env.indent_width()
            start_lineno = env.lineno
            block: List[str] = []
            while True:
                try:
                    line = env.lines_shift_chomp()
                except EOFError:
                    raise UnterminatedBlockError(start_lineno, end.pattern) from None

                line = line[width:]
                end_match = end.match(line)
                if end_match:
                    break
                block.append(line)

            handler(env, block, start_match, end_match)

        self.on(start_pattern, consume_block)

    def add_rule(
        self,
        pattern: PatternLike,
        before: Optional[Sequence[str]],
        context: Sequence[str],
    ) -> None:
        """Add a rule that writes the first group of the pattern with the given
        context. If before is given, a divider with that context is written first."""

        def write_group(env: ParagraphParserEnv, match: Match[str]) -> None:
            if before is not None:
                env.write(before, None)
            env.write(context, match.group(1))

        self.on(pattern, write_group)

    def add_list_rule(
        self,
        pattern: PatternLike,
        before: Optional[Sequence[str]],
        context: Sequence[str],
    ) -> None:
        """Add a list rule. On a match a new scope with the given context is opened,
        and the first group of the pattern is processed inside it."""

        def open_item(env: ParagraphParserEnv, match: Match[str]) -> None:
            if before is not None:
                env.write(before, None)
            env.push_scope(context)
            env.process_text(match.group(1))

        self.on(pattern, open_item)

    def add_list_rule_with_header(
        self,
        pattern: PatternLike,
        before: Optional[Sequence[str]],
        header_context: Sequence[str],
        main_context: Sequence[str],
    ) -> None:
        """Add a list rule with a header. The first group of the pattern is written
        with header_context, and main_context is the scope for the following lines."""

        def open_item(env: ParagraphParserEnv, match: Match[str]) -> None:
            if before is not None:
                env.write(before, None)
            env.write(header_context, match.group(1))
            env.push_scope(main_context)

        self.on(pattern, open_item)


class ParserError(Exception):
    pass


class UnterminatedBlockError(ParserError):
    def __init__(self, lineno: int, terminator: str) -> None:
        super().__init__(
            f"Block starting on line {lineno} never reached {terminator!r}"
        )
        self.lineno = lineno
        self.terminator = terminator
