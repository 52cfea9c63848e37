"""
Tree-sitter front-end for TypeScript, TSX and JavaScript.

Parses a file with the grammar matching its extension and converts the
concrete tree into the engine's frozen Node model. Conversion is iterative,
so deeply nested files hit the depth cap instead of Python's recursion limit.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from .errors import ParseError, StructuralLimitError
from .nodes import LEXEME_KINDS, Node, NodeKind, Span
from .traversal import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)


GRAMMAR_BY_EXTENSION: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

KIND_BY_TYPE: Dict[str, NodeKind] = {
    "program": NodeKind.UNIT,
    "import_statement": NodeKind.IMPORT,
    "class_declaration": NodeKind.CLASS_DECL,
    "abstract_class_declaration": NodeKind.CLASS_DECL,
    "interface_declaration": NodeKind.INTERFACE_DECL,
    "type_alias_declaration": NodeKind.TYPE_ALIAS_DECL,
    "enum_declaration": NodeKind.ENUM_DECL,
    "function_declaration": NodeKind.FUNCTION_DECL,
    "generator_function_declaration": NodeKind.FUNCTION_DECL,
    "lexical_declaration": NodeKind.VARIABLE_DECL,
    "variable_declaration": NodeKind.VARIABLE_DECL,
    "variable_declarator": NodeKind.VARIABLE_DECLARATOR,
    "jsx_element": NodeKind.JSX_ELEMENT,
    "jsx_self_closing_element": NodeKind.JSX_ELEMENT,
    "jsx_fragment": NodeKind.JSX_ELEMENT,
    "jsx_attribute": NodeKind.JSX_ATTRIBUTE,
    "jsx_expression": NodeKind.JSX_EXPRESSION,
    "object": NodeKind.OBJECT_EXPRESSION,
    "pair": NodeKind.OBJECT_PROPERTY,
    "identifier": NodeKind.IDENTIFIER,
    "property_identifier": NodeKind.IDENTIFIER,
    "type_identifier": NodeKind.IDENTIFIER,
    "shorthand_property_identifier": NodeKind.IDENTIFIER,
    "string": NodeKind.STRING_LITERAL,
    "template_string": NodeKind.TEMPLATE_LITERAL,
    "template_substitution": NodeKind.TEMPLATE_SUBSTITUTION,
    "number": NodeKind.NUMBER_LITERAL,
    "true": NodeKind.BOOLEAN_LITERAL,
    "false": NodeKind.BOOLEAN_LITERAL,
    "null": NodeKind.NULL_LITERAL,
    "arrow_function": NodeKind.ARROW_FUNCTION,
    "function_expression": NodeKind.FUNCTION_EXPRESSION,
    "function": NodeKind.FUNCTION_EXPRESSION,
    "formal_parameters": NodeKind.PARAMETERS,
    "required_parameter": NodeKind.PARAMETER,
    "optional_parameter": NodeKind.PARAMETER,
    "call_expression": NodeKind.CALL_EXPRESSION,
    "member_expression": NodeKind.MEMBER_EXPRESSION,
    "arguments": NodeKind.ARGUMENTS,
    "statement_block": NodeKind.BLOCK,
    "return_statement": NodeKind.RETURN,
    "if_statement": NodeKind.CONDITIONAL,
    "ternary_expression": NodeKind.CONDITIONAL,
    "switch_statement": NodeKind.CONDITIONAL,
    "type_annotation": NodeKind.TYPE_ANNOTATION,
    "predefined_type": NodeKind.TYPE_REFERENCE,
    "comment": NodeKind.COMMENT,
}

# Anonymous tokens recorded as flags on their parent
KEYWORD_FLAGS = frozenset([
    "const", "let", "var", "default", "async", "export", "static",
    "readonly", "abstract", "declare", "?", "&&", "||", "??",
])

# Lexical pieces of strings and templates; the parent keeps the raw text
_DROPPED_TYPES = frozenset(["string_fragment", "escape_sequence", "html_character_reference"])

_OPEN, _CLOSE = 0, 1


def _span(ts_node) -> Span:
    row, column = ts_node.start_point[0], ts_node.start_point[1]
    return Span(ts_node.start_byte, ts_node.end_byte, line=row + 1, column=column + 1)


def _decode(source: bytes, ts_node) -> str:
    return source[ts_node.start_byte:ts_node.end_byte].decode('utf-8', errors='replace')


def _first_error(root) -> Optional[object]:
    """Return the first ERROR or MISSING node in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


class TreeSitterParser:
    """Parser collaborator backed by tree-sitter grammars."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth
        self._languages: Dict[str, tree_sitter.Language] = {}
        self._lock = threading.Lock()
        # tree_sitter.Parser instances are not shared between worker threads
        self._local = threading.local()

    def _get_language(self, grammar: str) -> tree_sitter.Language:
        with self._lock:
            language = self._languages.get(grammar)
            if language is None:
                if grammar == "tsx":
                    language = tree_sitter.Language(tree_sitter_typescript.language_tsx())
                elif grammar == "typescript":
                    language = tree_sitter.Language(tree_sitter_typescript.language_typescript())
                else:
                    language = tree_sitter.Language(tree_sitter_javascript.language())
                self._languages[grammar] = language
                logger.debug("Loaded %s grammar", grammar)
            return language

    def _get_parser(self, grammar: str) -> tree_sitter.Parser:
        parsers = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = self._local.parsers = {}
        parser = parsers.get(grammar)
        if parser is None:
            parser = tree_sitter.Parser()
            parser.language = self._get_language(grammar)
            parsers[grammar] = parser
        return parser

    def grammar_for(self, path: str) -> Optional[str]:
        lowered = path.lower()
        for extension, grammar in GRAMMAR_BY_EXTENSION.items():
            if lowered.endswith(extension):
                return grammar
        return None

    def parse(self, text: str, path: str) -> Node:
        """Parse source text into a Unit-rooted Node tree.

        Raises:
            ParseError: Unsupported extension or syntax errors in the file
            StructuralLimitError: Tree nested deeper than max_depth
        """
        grammar = self.grammar_for(path)
        if grammar is None:
            raise ParseError(f"Unsupported file type: {path}")

        source = text.encode('utf-8')
        tree = self._get_parser(grammar).parse(source)
        root = tree.root_node

        if root.has_error:
            bad = _first_error(root) or root
            span = _span(bad)
            what = f"missing '{bad.type}'" if bad.is_missing else "unexpected syntax"
            raise ParseError(f"Syntax error at {span.line}:{span.column}: {what}", span)

        return self.convert(root, source)

    def convert(self, root, source: bytes) -> Node:
        """Convert a tree-sitter node (normally `program`) into Nodes."""
        stack: List[tuple] = [(_OPEN, root, None, 1)]
        collected: List[List[Node]] = [[]]

        while stack:
            action, ts_node, field, depth = stack.pop()

            if action == _CLOSE:
                children = collected.pop()
                collected[-1].append(self._build(ts_node, field, children, source))
                continue

            if depth > self.max_depth:
                raise StructuralLimitError(
                    f"Tree depth exceeds {self.max_depth}", limit=self.max_depth, span=_span(ts_node))

            kind = KIND_BY_TYPE.get(ts_node.type, NodeKind.OTHER)
            if kind in (NodeKind.STRING_LITERAL, NodeKind.COMMENT) or ts_node.named_child_count == 0:
                collected[-1].append(self._build(ts_node, field, [], source))
                continue

            stack.append((_CLOSE, ts_node, field, depth))
            collected.append([])
            named = []
            for index, child in enumerate(ts_node.children):
                if child.is_named and child.type not in _DROPPED_TYPES:
                    named.append((child, ts_node.field_name_for_child(index)))
            for child, child_field in reversed(named):
                stack.append((_OPEN, child, child_field, depth + 1))

        return collected[0][0]

    def _build(self, ts_node, field: Optional[str], children: List[Node], source: bytes) -> Node:
        ts_type = ts_node.type
        kind = KIND_BY_TYPE.get(ts_type, NodeKind.OTHER)
        flags = frozenset(
            child.type for child in ts_node.children
            if not child.is_named and child.type in KEYWORD_FLAGS
        )

        if ts_type == "export_statement":
            kind = NodeKind.EXPORT_DEFAULT if "default" in flags else NodeKind.EXPORT_NAMED
        elif ts_type == "call_expression":
            arguments = ts_node.child_by_field_name("arguments")
            if arguments is not None and arguments.type == "template_string":
                kind = NodeKind.TAGGED_TEMPLATE
        elif ts_type == "jsx_attribute":
            children = self._label_attribute(children)
        elif ts_type == "jsx_element":
            children = self._flatten_element(children)

        text = None
        if kind in LEXEME_KINDS or kind == NodeKind.OTHER and not children:
            text = _decode(source, ts_node)

        return Node(
            kind=kind,
            span=_span(ts_node),
            children=tuple(children),
            text=text,
            field=field,
            flags=flags,
            raw_kind=ts_type,
        )

    @staticmethod
    def _label_attribute(children: List[Node]) -> List[Node]:
        """jsx_attribute has no grammar fields: first child is the name, second the value."""
        labelled = []
        for index, child in enumerate(children):
            role = "name" if index == 0 else "value" if index == 1 else child.field
            labelled.append(replace(child, field=role))
        return labelled

    @staticmethod
    def _flatten_element(children: List[Node]) -> List[Node]:
        """Hoist the opening tag's name and attributes; drop the closing tag."""
        flattened: List[Node] = []
        for child in children:
            if child.raw_kind == "jsx_opening_element":
                flattened.extend(child.children)
            elif child.raw_kind != "jsx_closing_element":
                flattened.append(child)
        return flattened
