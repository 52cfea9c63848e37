"""Rule: css.no_literal_color

Detects hex, rgb(a) and hsl(a) colour literals in style code so colours come
from the theme palette instead.

Checked locations:
- string values in style objects: JSX `style`/`sx` attributes and arguments
  of style factories such as StyleSheet.create or makeStyles
- styled-component / css tagged templates

Colours listed in `allowed_colors` (the palette) are accepted.
"""

import re
from typing import Iterator, List, Tuple

from ..engine.nodes import FUNCTION_KINDS, Node, NodeKind, Span
from ..engine.types import BaseRule, Finding, RuleMeta, RuleOptions, WARNING
from ._common import attribute_name, callee_name, template_tag

COLOR_PATTERN = re.compile(
    r"#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{3,4})(?![0-9a-zA-Z_-])"
    r"|\b(?:rgba?|hsla?)\([^)]*\)",
    re.IGNORECASE,
)

TEMPLATE_TAGS = frozenset(["styled", "css", "createGlobalStyle", "keyframes", "injectGlobal"])


class NoLiteralColorOptions(RuleOptions):
    allowed_colors: List[str] = []
    style_attributes: List[str] = ["style", "sx"]
    style_functions: List[str] = ["create", "makeStyles", "css", "styled"]


def normalize_color(color: str) -> str:
    return re.sub(r"\s+", "", color).lower()


def match_span(target: Node, match: "re.Match[str]") -> Span:
    """Span of a colour match inside the literal it was found in."""
    text = target.text or ""
    before = text[:match.start()]
    start = target.span.start + len(before.encode("utf-8"))
    end = start + len(match.group(0).encode("utf-8"))

    line = column = None
    newlines = before.count("\n")
    if target.span.line is not None:
        line = target.span.line + newlines
    if newlines:
        column = len(before) - before.rfind("\n")
    elif target.span.column is not None:
        column = target.span.column + len(before)
    return Span(start, end, line=line, column=column)


class NoLiteralColorRule(BaseRule):
    """Flag colour literals that are not part of the theme palette."""

    meta = RuleMeta(
        id="css.no_literal_color",
        category="style",
        applies_to=frozenset([NodeKind.OBJECT_PROPERTY, NodeKind.TAGGED_TEMPLATE]),
        default_severity=WARNING,
        description="Hard-coded colour literal in styles; use a theme token",
        options=NoLiteralColorOptions,
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...],
              options: NoLiteralColorOptions) -> Iterator[Finding]:
        if node.kind == NodeKind.TAGGED_TEMPLATE:
            if template_tag(node) not in TEMPLATE_TAGS:
                return
            target = node.child_by_field("arguments")
            if target is None:
                templates = node.children_of_kind(NodeKind.TEMPLATE_LITERAL)
                target = templates[0] if templates else None
        else:
            if not self._in_style_object(ancestors, options):
                return
            target = node.child_by_field("value")

        if target is None or target.kind not in (NodeKind.STRING_LITERAL, NodeKind.TEMPLATE_LITERAL):
            return
        if not target.text:
            return

        allowed = {normalize_color(c) for c in options.allowed_colors}
        for match in COLOR_PATTERN.finditer(target.text):
            color = match.group(0)
            if normalize_color(color) in allowed:
                continue
            yield Finding(message=f"Literal colour '{color}' in styles; use a theme colour",
                          span=match_span(target, match), meta={"color": color})

    def _in_style_object(self, ancestors: Tuple[Node, ...], options: NoLiteralColorOptions) -> bool:
        for ancestor in reversed(ancestors):
            if ancestor.kind in FUNCTION_KINDS:
                return False
            if ancestor.kind == NodeKind.JSX_ATTRIBUTE:
                return attribute_name(ancestor) in options.style_attributes
            if ancestor.kind == NodeKind.CALL_EXPRESSION and callee_name(ancestor) in options.style_functions:
                return True
        return False


RULES = [NoLiteralColorRule]
