"""The default bsdoc markup rules.

Block structure::

    # Header                  <h1>, up to ###### for <h6>
    * Item  or  - Item        unordered list item
    1. Item                   ordered list item
    : Term                    definition list term; indented lines that follow
                              form the definition
    @code ... @endcode        preformatted, HTML-escaped block
    (indented text)           block quote
    (anything else)           paragraph

Inline markup: `code`, **strong**, *emphasis*, and [text](url) links."""

from dataclasses import dataclass
from typing import Mapping, Match, Optional, Sequence

from .generator import Generator
from .paragraphparser import DEFAULT_INDENT_TAGS, ParagraphParser, ParagraphParserEnv
from .spanparser import SpanParser
from .types import ProjectConfig
from .util import PerformanceLogger


def write_code_block(
    env: ParagraphParserEnv,
    block: Sequence[str],
    start_match: Match[str],
    end_match: Match[str],
) -> None:
    env.write((), None)
    env.write_escaped(("pre",), "\n".join(block))


def make_paragraph_parser(
    indent_tags: Sequence[str] = DEFAULT_INDENT_TAGS,
) -> ParagraphParser:
    parser = ParagraphParser(indent_tags)
    parser.on_block(r"^@code\s*$", r"^@endcode\s*$", write_code_block)

    for level in range(1, 7):
        parser.add_rule(rf"^#{{{level}}}\s+(.*)$", [], [f"h{level}"])

    parser.add_list_rule(r"^[*-]\s+(.*)$", ["ul"], ["ul", "li"])
    parser.add_list_rule(r"^\d+\.\s+(.*)$", ["ol"], ["ol", "li"])
    parser.add_list_rule_with_header(r"^:\s+(.*)$", ["dl"], ["dl", "dt"], ["dl", "dd"])
    parser.add_rule(r"^(.*)$", None, ["p"])
    return parser


def make_span_parser(substitutions: Optional[Mapping[str, str]] = None) -> SpanParser:
    span = SpanParser()
    span.add_rule(r"`([^`]+)`", r"<code>\1</code>")
    span.add_rule(r"\*\*(.+?)\*\*", r"<strong>\1</strong>")
    span.add_rule(r"\*(.+?)\*", r"<em>\1</em>")
    span.add_rule(r"\[([^\]]+)\]\(([^)\s]+)\)", r'<a href="\2">\1</a>')

    for pattern, replacement in (substitutions or {}).items():
        span.add_rule(pattern, replacement)

    return span


@dataclass
class Renderer:
    """Renders documents with a fixed rule set. The rule tables are built once and
    shared by every document rendered."""

    paragraph: ParagraphParser
    span: SpanParser

    @classmethod
    def from_config(cls, config: Optional[ProjectConfig] = None) -> "Renderer":
        if config is None:
            return cls(make_paragraph_parser(), make_span_parser())

        return cls(
            make_paragraph_parser(config.indent_tags),
            make_span_parser(config.substitutions),
        )

    def render(self, text: str) -> str:
        generator = Generator()
        with PerformanceLogger.singleton().start("parse"):
            self.paragraph.parse(text, self.span, generator)

        with PerformanceLogger.singleton().start("generate"):
            return generator.generate()


def render(text: str, config: Optional[ProjectConfig] = None) -> str:
    """Render bsdoc markup to an HTML fragment."""
    return Renderer.from_config(config).render(text)
