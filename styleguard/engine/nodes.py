"""
Read-only syntax tree model consumed by the engine.

A front-end (see tsx_adapter.py) converts its concrete tree into these
frozen nodes. Children are tuples of frozen nodes, so a node can never
contain itself or one of its ancestors.
"""

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import FrozenSet, Iterator, Optional, Tuple


class NodeKind(str, Enum):
    """Closed set of node tags understood by the built-in rules."""
    UNIT = "Unit"
    IMPORT = "Import"
    CLASS_DECL = "ClassDecl"
    INTERFACE_DECL = "InterfaceDecl"
    TYPE_ALIAS_DECL = "TypeAliasDecl"
    ENUM_DECL = "EnumDecl"
    FUNCTION_DECL = "FunctionDecl"
    VARIABLE_DECL = "VariableDecl"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    EXPORT_DEFAULT = "ExportDefault"
    EXPORT_NAMED = "ExportNamed"
    JSX_ELEMENT = "JSXElement"
    JSX_ATTRIBUTE = "JSXAttribute"
    JSX_EXPRESSION = "JSXExpression"
    OBJECT_EXPRESSION = "ObjectExpression"
    OBJECT_PROPERTY = "ObjectProperty"
    IDENTIFIER = "Identifier"
    STRING_LITERAL = "StringLiteral"
    TEMPLATE_LITERAL = "TemplateLiteral"
    TEMPLATE_SUBSTITUTION = "TemplateSubstitution"
    TAGGED_TEMPLATE = "TaggedTemplate"
    NUMBER_LITERAL = "NumberLiteral"
    BOOLEAN_LITERAL = "BooleanLiteral"
    NULL_LITERAL = "NullLiteral"
    ARROW_FUNCTION = "ArrowFunction"
    FUNCTION_EXPRESSION = "FunctionExpression"
    PARAMETERS = "Parameters"
    PARAMETER = "Parameter"
    CALL_EXPRESSION = "CallExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    ARGUMENTS = "Arguments"
    BLOCK = "Block"
    RETURN = "Return"
    CONDITIONAL = "Conditional"
    TYPE_ANNOTATION = "TypeAnnotation"
    TYPE_REFERENCE = "TypeReference"
    COMMENT = "Comment"
    OTHER = "Other"


# Kinds whose `text` carries the raw lexeme
LEXEME_KINDS: FrozenSet[NodeKind] = frozenset([
    NodeKind.IDENTIFIER,
    NodeKind.STRING_LITERAL,
    NodeKind.TEMPLATE_LITERAL,
    NodeKind.NUMBER_LITERAL,
    NodeKind.BOOLEAN_LITERAL,
    NodeKind.NULL_LITERAL,
    NodeKind.TYPE_REFERENCE,
    NodeKind.COMMENT,
])

FUNCTION_KINDS: FrozenSet[NodeKind] = frozenset([
    NodeKind.FUNCTION_DECL,
    NodeKind.ARROW_FUNCTION,
    NodeKind.FUNCTION_EXPRESSION,
])

LITERAL_KINDS: FrozenSet[NodeKind] = frozenset([
    NodeKind.STRING_LITERAL,
    NodeKind.NUMBER_LITERAL,
    NodeKind.BOOLEAN_LITERAL,
    NodeKind.NULL_LITERAL,
])


@dataclass(frozen=True)
class Span:
    """Source range of a node: byte offsets plus optional 1-based position."""
    start: int
    end: int
    line: Optional[int] = None
    column: Optional[int] = None

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span ({self.start}, {self.end})")


@dataclass(frozen=True)
class Node:
    """Immutable view of one syntax element.

    Attributes:
        kind: Closed tag for the element
        span: Source range used for reporting
        children: Ordered child nodes, owned by this node
        text: Raw lexeme for leaf-like kinds (identifiers, literals, comments)
        field: Role of this node inside its parent ("name", "source", ...)
        flags: Keyword facts captured by the front-end ("const", "async", ...)
        raw_kind: The front-end's own node type, for diagnostics
    """
    kind: NodeKind
    span: Span
    children: Tuple["Node", ...] = ()
    text: Optional[str] = None
    field: Optional[str] = None
    flags: FrozenSet[str] = dataclass_field(default_factory=frozenset)
    raw_kind: Optional[str] = None

    def child_by_field(self, name: str) -> Optional["Node"]:
        """Return the first child whose field is `name`."""
        for child in self.children:
            if child.field == name:
                return child
        return None

    def children_of_kind(self, *kinds: NodeKind) -> Tuple["Node", ...]:
        """Return the direct children with one of the given kinds."""
        return tuple(child for child in self.children if child.kind in kinds)

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def walk(self) -> Iterator["Node"]:
        """Yield this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_first(self, *kinds: NodeKind) -> Optional["Node"]:
        """Return the first descendant (pre-order, self included) of a kind."""
        for node in self.walk():
            if node.kind in kinds:
                return node
        return None

    def contains_kind(self, *kinds: NodeKind) -> bool:
        return self.find_first(*kinds) is not None


def string_value(node: Optional[Node]) -> Optional[str]:
    """Return the unquoted value of a string literal node."""
    if node is None or node.text is None:
        return None
    text = node.text
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"', "`"):
        return text[1:-1]
    return text


def declared_name(node: Node) -> Optional[Node]:
    """Return the identifier naming a declaration, if any."""
    name = node.child_by_field("name")
    if name is not None and name.kind == NodeKind.IDENTIFIER:
        return name
    return None
