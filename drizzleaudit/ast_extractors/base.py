"""Base utilities and shared helpers for tree-sitter node inspection.

Every helper here is total: a node of the wrong shape yields None or an
empty list, never an exception. Callers treat absence as "nothing to
report here".
"""

from typing import Any

# Wrappers that do not change the value of the wrapped expression
TRANSPARENT_WRAPPERS = frozenset(
    [
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
    ]
)

FUNCTION_TYPES = frozenset(["arrow_function", "function_expression", "function"])


def node_text(node: Any) -> str:
    """Get text content of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def node_line(node: Any) -> int:
    """Get 1-based line number of a node."""
    return node.start_point[0] + 1


def node_column(node: Any) -> int:
    """Get 0-based column of a node."""
    return node.start_point[1]


def named_children(node: Any) -> list[Any]:
    """Named children without interleaved comments."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_expression(node: Any) -> Any:
    """Strip parentheses and type assertions around an expression."""
    while node is not None and node.type in TRANSPARENT_WRAPPERS:
        inner = named_children(node)
        if not inner:
            return None
        node = inner[0]
    return node


def is_call(node: Any) -> bool:
    return node is not None and node.type == "call_expression"


def is_member(node: Any) -> bool:
    return node is not None and node.type == "member_expression"


def member_property_name(node: Any) -> str | None:
    """Property name of ``a.b`` (``b``), or None for computed access."""
    if not is_member(node):
        return None
    prop = node.child_by_field_name("property")
    if prop is None or prop.type not in ("property_identifier", "private_property_identifier"):
        return None
    return node_text(prop)


def member_object(node: Any) -> Any:
    if not is_member(node):
        return None
    return node.child_by_field_name("object")


def callee(node: Any) -> Any:
    if not is_call(node):
        return None
    return node.child_by_field_name("function")


def callee_identifier(node: Any) -> str | None:
    """Name of a bare-identifier callee: ``pgTable(...)`` -> ``pgTable``."""
    function = callee(node)
    if function is None or function.type != "identifier":
        return None
    return node_text(function)


def callee_property(node: Any) -> str | None:
    """Property name of a member callee: ``db.delete(...)`` -> ``delete``."""
    return member_property_name(callee(node))


def is_tagged_template(node: Any) -> bool:
    if not is_call(node):
        return False
    args = node.child_by_field_name("arguments")
    return args is not None and args.type == "template_string"


def call_arguments(node: Any) -> list[Any]:
    """Argument expressions of a call, in order.

    A tagged template ``tag`...``` has its template as the only argument.
    """
    if not is_call(node):
        return []
    args = node.child_by_field_name("arguments")
    if args is None:
        return []
    if args.type == "template_string":
        return [args]
    return named_children(args)


def argument(node: Any, index: int) -> Any:
    args = call_arguments(node)
    if index < len(args):
        return args[index]
    return None


def string_value(node: Any) -> str | None:
    """Value of a quoted string literal, or None if ``node`` is not one."""
    if node is None or node.type != "string":
        return None
    text = node_text(node)
    if len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]:
        return text[1:-1]
    return None


def template_static_text(node: Any) -> str | None:
    """Concatenate the literal parts of a template string.

    Interpolations are dropped, so ``sql`a ${x} b``` yields ``"a  b"``.
    Returns None when the template cannot be reconstructed.
    """
    if node is None or node.type != "template_string":
        return None
    raw = node.text
    if raw is None or len(raw) < 2:
        return None

    base = node.start_byte
    start = 1  # skip opening backtick
    end = len(raw) - 1  # skip closing backtick
    pieces = []
    for child in node.named_children:
        if child.type != "template_substitution":
            continue
        sub_start = child.start_byte - base
        sub_end = child.end_byte - base
        if sub_start < start or sub_end > end:
            return None
        pieces.append(raw[start:sub_start])
        start = sub_end
    pieces.append(raw[start:end])
    return b"".join(pieces).decode("utf-8", errors="ignore")


def property_key_name(pair: Any) -> str | None:
    """Static name of an object property key, or None for computed keys."""
    key = pair.child_by_field_name("key")
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier", "number"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    return None


def object_pairs(node: Any) -> list[tuple[str, Any, Any]]:
    """``(name, key_node, value_node)`` for each static ``key: value`` entry."""
    node = unwrap_expression(node)
    if node is None or node.type != "object":
        return []
    pairs = []
    for child in named_children(node):
        if child.type != "pair":
            continue
        name = property_key_name(child)
        value = child.child_by_field_name("value")
        if name is None or value is None:
            continue
        pairs.append((name, child.child_by_field_name("key"), value))
    return pairs


def object_property(node: Any, name: str) -> Any:
    """Value of ``name`` in an object literal, unwrapped."""
    for key_name, _key, value in object_pairs(node):
        if key_name == name:
            return unwrap_expression(value)
    return None


def function_parameter_names(node: Any) -> list[str]:
    """Simple identifier parameters of a function value, in order."""
    if node is None or node.type not in FUNCTION_TYPES:
        return []

    single = node.child_by_field_name("parameter")
    if single is not None:
        return [node_text(single)] if single.type == "identifier" else []

    params = node.child_by_field_name("parameters")
    names = []
    for param in named_children(params):
        if param.type == "identifier":
            names.append(node_text(param))
        elif param.type in ("required_parameter", "optional_parameter"):
            pattern = param.child_by_field_name("pattern")
            if pattern is not None and pattern.type == "identifier":
                names.append(node_text(pattern))
            else:
                names.append("")
        else:
            names.append("")
    return names


def function_result_expression(node: Any) -> Any:
    """Expression a function value evaluates to.

    ``(t) => ({...})`` gives the object; ``(t) => { return {...} }`` gives
    the first top-level return argument. None for anything else.
    """
    if node is None or node.type not in FUNCTION_TYPES:
        return None
    body = node.child_by_field_name("body")
    if body is None:
        return None
    if body.type != "statement_block":
        return unwrap_expression(body)
    for statement in named_children(body):
        if statement.type == "return_statement":
            values = named_children(statement)
            return unwrap_expression(values[0]) if values else None
    return None
