"""
Shared node-shape helpers for the built-in rules.

These work on the engine's Node model only; nothing here knows about the
tree-sitter grammar.
"""

from typing import List, Optional, Tuple

from ..engine.nodes import FUNCTION_KINDS, LITERAL_KINDS, Node, NodeKind, string_value


def identifier_text(node: Optional[Node]) -> Optional[str]:
    if node is not None and node.kind == NodeKind.IDENTIFIER:
        return node.text
    return None


def is_static_value(value: Node) -> bool:
    """True for literals, templates without substitutions and negative numbers."""
    if value.kind in LITERAL_KINDS:
        return True
    if value.kind == NodeKind.TEMPLATE_LITERAL:
        return not value.children_of_kind(NodeKind.TEMPLATE_SUBSTITUTION)
    # Negative numbers: -1
    if value.raw_kind == "unary_expression" and len(value.children) == 1:
        return value.children[0].kind == NodeKind.NUMBER_LITERAL
    return False


def template_tag(node: Node) -> Optional[str]:
    """Root identifier of a template tag: styled.div`` -> styled, styled(Button)`` -> styled."""
    tag = node.child_by_field("function")
    if tag is None and node.children:
        tag = node.children[0]
    while tag is not None:
        if tag.kind == NodeKind.IDENTIFIER:
            return tag.text
        if tag.kind == NodeKind.MEMBER_EXPRESSION:
            tag = tag.child_by_field("object") or (tag.children[0] if tag.children else None)
        elif tag.kind == NodeKind.CALL_EXPRESSION:
            tag = tag.child_by_field("function") or (tag.children[0] if tag.children else None)
        else:
            return None
    return None


def renders_jsx(function: Node) -> bool:
    """True if the function produces JSX itself (nested functions don't count)."""
    stack = list(function.children)
    while stack:
        node = stack.pop()
        if node.kind == NodeKind.JSX_ELEMENT:
            return True
        if node.kind in FUNCTION_KINDS:
            continue
        stack.extend(node.children)
    return False


def function_body(function: Node) -> Optional[Node]:
    body = function.child_by_field("body")
    if body is None:
        blocks = function.children_of_kind(NodeKind.BLOCK)
        body = blocks[0] if blocks else None
    return body


def body_statements(function: Node) -> Tuple[Node, ...]:
    """Top-level statements of a function's block body (comments excluded)."""
    body = function_body(function)
    if body is None or body.kind != NodeKind.BLOCK:
        return ()
    return tuple(child for child in body.children if child.kind != NodeKind.COMMENT)


def parameter_names(function: Node) -> List[Optional[str]]:
    """Names of a function's parameters in order; None for destructured ones."""
    single = function.child_by_field("parameter")
    if single is not None:
        return [identifier_text(single)]

    params = function.child_by_field("parameters")
    if params is None:
        found = function.children_of_kind(NodeKind.PARAMETERS)
        params = found[0] if found else None
    if params is None:
        return []

    names: List[Optional[str]] = []
    for param in params.children:
        if param.kind == NodeKind.COMMENT:
            continue
        if param.kind == NodeKind.PARAMETER:
            pattern = param.child_by_field("pattern")
            if pattern is None and param.children:
                pattern = param.children[0]
            names.append(identifier_text(pattern))
        else:
            names.append(identifier_text(param))
    return names


def attribute_name(attribute: Node) -> Optional[str]:
    name = attribute.child_by_field("name")
    if name is None and attribute.children:
        name = attribute.children[0]
    return name.text if name is not None else None


def attribute_value(attribute: Node) -> Optional[Node]:
    return attribute.child_by_field("value")


def expression_of(container: Node) -> Optional[Node]:
    """The single expression inside a JSX expression container."""
    for child in container.children:
        if child.kind != NodeKind.COMMENT:
            return child
    return None


def callee_name(call: Node) -> Optional[str]:
    """Name of the called function: `foo(...)` -> foo, `a.b.map(...)` -> map."""
    callee = call.child_by_field("function")
    if callee is None and call.children:
        callee = call.children[0]
    if callee is None:
        return None
    if callee.kind == NodeKind.IDENTIFIER:
        return callee.text
    if callee.kind == NodeKind.MEMBER_EXPRESSION:
        return identifier_text(callee.child_by_field("property"))
    return None


def call_arguments(call: Node) -> Tuple[Node, ...]:
    arguments = call.child_by_field("arguments")
    if arguments is None:
        found = call.children_of_kind(NodeKind.ARGUMENTS)
        arguments = found[0] if found else None
    if arguments is None:
        return ()
    return tuple(child for child in arguments.children if child.kind != NodeKind.COMMENT)


def property_key(prop: Node) -> Optional[str]:
    """Key of an object property as written: identifier name or string value."""
    key = prop.child_by_field("key")
    if key is None and prop.children:
        key = prop.children[0]
    if key is None:
        return None
    if key.kind == NodeKind.STRING_LITERAL:
        return string_value(key)
    return key.text


def style_object(attribute: Node) -> Optional[Node]:
    """The object literal of a `style={{...}}` attribute, if that's what it is."""
    if attribute_name(attribute) != "style":
        return None
    value = attribute_value(attribute)
    if value is None or value.kind != NodeKind.JSX_EXPRESSION:
        return None
    expression = expression_of(value)
    if expression is not None and expression.kind == NodeKind.OBJECT_EXPRESSION:
        return expression
    return None
