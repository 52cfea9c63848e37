"""
styleguard built-in rules

Rules are discovered when the default registry is first built: every module
in this package is imported in sorted order and its RULES list registered.

To add a new rule:
1. Create a Python file in this directory (e.g., jsx_my_rule.py)
2. Define a rule class with a `meta` RuleMeta and a pure `visit`
3. Add it to the module's RULES list

Example rule structure:

```python
from ..engine.nodes import NodeKind
from ..engine.types import BaseRule, RuleMeta


class MyRule(BaseRule):
    meta = RuleMeta(
        id="style.my_rule",
        category="style",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        description="Detects my specific issue",
    )

    def visit(self, node, ancestors, options):
        if node.text == "bad":
            yield self.report(node, "Found an issue")


RULES = [MyRule]
```
"""
