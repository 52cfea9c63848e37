"""Rule: imports.order

Checks that the top-level import statements of a file are grouped and sorted.

Groups, in the order they must appear:
    builtin < external < internal < parent < sibling < index < unknown

Within a group, module specifiers must be in case-insensitive alphabetical
order. The rule reports the first out-of-order adjacent pair (or every pair
with ``report_all``), anchored at the first import of the pair.

Examples:
- import fs from 'fs'; import React from 'react'; import x from './x'   # GOOD
- import b from './b'; import a from './a'                             # BAD: './a' before './b'
"""

import re
from typing import Iterator, List, Optional, Tuple

from ..engine.nodes import Node, NodeKind, string_value
from ..engine.types import UNIT, BaseRule, Finding, RuleMeta, RuleOptions, WARNING

GROUPS: Tuple[str, ...] = ("builtin", "external", "internal", "parent", "sibling", "index", "unknown")
GROUP_RANK = {group: rank for rank, group in enumerate(GROUPS)}

NODE_BUILTINS = frozenset([
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console", "constants",
    "crypto", "dgram", "diagnostics_channel", "dns", "domain", "events", "fs", "http", "http2",
    "https", "inspector", "module", "net", "os", "path", "perf_hooks", "process", "punycode",
    "querystring", "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi", "worker_threads", "zlib",
])

_INDEX_SPECIFIERS = frozenset([".", "./", "./index"])
_PACKAGE_NAME = re.compile(r"^(@[\w.-]+/)?[\w.-]+(/.*)?$")


class ImportOrderOptions(RuleOptions):
    internal_prefixes: List[str] = ["@/", "~/"]
    extra_builtins: List[str] = []
    report_all: bool = False


def classify(specifier: str, options: ImportOrderOptions) -> str:
    """Return the import group of a module specifier."""
    root = specifier.split("/", 1)[0]
    if specifier.startswith("node:") or root in NODE_BUILTINS or specifier in options.extra_builtins:
        return "builtin"
    if any(specifier.startswith(prefix) for prefix in options.internal_prefixes):
        return "internal"
    if specifier in _INDEX_SPECIFIERS or re.fullmatch(r"\./index\.[cm]?[jt]sx?", specifier):
        return "index"
    if specifier == ".." or specifier.startswith("../"):
        return "parent"
    if specifier.startswith("./"):
        return "sibling"
    if _PACKAGE_NAME.match(specifier):
        return "external"
    return "unknown"


def import_specifier(node: Node) -> Optional[str]:
    source = node.child_by_field("source")
    if source is None:
        literals = node.children_of_kind(NodeKind.STRING_LITERAL)
        source = literals[0] if literals else None
    return string_value(source)


class ImportOrderRule(BaseRule):
    """Flag import statements that are out of group or alphabetical order."""

    meta = RuleMeta(
        id="imports.order",
        category="imports",
        applies_to=UNIT,
        default_severity=WARNING,
        description="Imports grouped builtin, external, internal, parent, sibling, index and sorted within groups",
        options=ImportOrderOptions,
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...],
              options: ImportOrderOptions) -> Iterator[Finding]:
        entries = []
        for child in node.children_of_kind(NodeKind.IMPORT):
            specifier = import_specifier(child)
            if specifier is None:
                continue
            group = classify(specifier, options)
            entries.append((child, specifier, group, (GROUP_RANK[group], specifier.casefold())))

        for (first, first_spec, first_group, first_key), (_, second_spec, second_group, second_key) \
                in zip(entries, entries[1:]):
            if second_key >= first_key:
                continue
            if first_group == second_group:
                message = (f"Import '{second_spec}' should come before '{first_spec}' "
                           f"(alphabetical order within {first_group} imports)")
            else:
                message = (f"Import '{second_spec}' ({second_group}) should come before "
                           f"'{first_spec}' ({first_group})")
            yield self.report(first, message, expected_before=second_spec,
                              groups=[first_group, second_group])
            if not options.report_all:
                return


RULES = [ImportOrderRule]
