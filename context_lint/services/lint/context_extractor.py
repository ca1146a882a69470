"""Извлечение строки контекста из аргумента `.context()` / `.with_context()`."""

from context_lint.constants import COMPLEX_EXPRESSION, FORMAT_MACROS
from .syntax import node_text, path_segments, string_literal_value


def extract_context(argument) -> str | None:
    """
    Строка для отображения по выражению-аргументу комбинатора.

    - `"literal"` -> literal
    - `format!("x {}", y)` -> `format!("x {}", y)` (значение неизвестно статически)
    - `|| "literal"` / `|| format!(...)` -> то же, что для тела замыкания
    - всё остальное -> "<complex expression>"

    Без аргумента возвращает None.
    """
    if argument is None:
        return None

    value = _extract_simple(argument)
    if value is not None:
        return value

    if argument.type == "closure_expression" and _has_no_parameters(argument):
        value = _extract_simple(argument.child_by_field_name("body"))
        if value is not None:
            return value

    return COMPLEX_EXPRESSION


def _extract_simple(node) -> str | None:
    if node is None:
        return None

    value = string_literal_value(node)
    if value is not None:
        return value

    if node.type == "macro_invocation":
        return _render_format_macro(node)

    return None


def _render_format_macro(node) -> str | None:
    segments = path_segments(node.child_by_field_name("macro"))
    if not segments or segments[-1] not in FORMAT_MACROS:
        return None

    tokens = ""
    for child in node.named_children:
        if child.type == "token_tree":
            # без внешних скобок
            tokens = node_text(child)[1:-1]
            break

    return f"{segments[-1]}!({tokens})"


def _has_no_parameters(closure) -> bool:
    params = closure.child_by_field_name("parameters")
    return params is None or not params.named_children
