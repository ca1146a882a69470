"""Распознавание атрибутов `#[...]` по форме пути."""

from context_lint.constants import (
    CONTEXT_ATTRIBUTE,
    CONTEXT_ATTRIBUTE_CRATE,
    TEST_ATTRIBUTE,
)
from .syntax import (
    first_named_child,
    node_text,
    path_segments,
    string_literal_value,
)


def attribute_path(attribute) -> list[str]:
    """Сегменты пути атрибута: `#[tokio::test]` -> ["tokio", "test"]."""
    return path_segments(first_named_child(attribute)) or []


def is_context_attribute(attribute) -> bool:
    """`#[context(...)]` или `#[fn_error_context::context(...)]`."""
    segments = attribute_path(attribute)
    if len(segments) == 1:
        return segments[0] == CONTEXT_ATTRIBUTE
    if len(segments) == 2:
        return segments == [CONTEXT_ATTRIBUTE_CRATE, CONTEXT_ATTRIBUTE]
    return False


def is_test_attribute(attribute) -> bool:
    """`#[test]` или `#[<prefix>::test]` (`#[tokio::test]`)."""
    segments = attribute_path(attribute)
    if len(segments) == 1:
        return segments[0] == TEST_ATTRIBUTE
    if len(segments) == 2:
        return segments[1] == TEST_ATTRIBUTE
    return False


def is_cfg_test_attribute(attribute) -> bool:
    """`#[cfg(test)]`."""
    if attribute_path(attribute) != ["cfg"]:
        return False

    arguments = attribute.child_by_field_name("arguments")
    if arguments is None:
        return False

    tokens = arguments.named_children
    return (
        len(tokens) == 1
        and tokens[0].type == "identifier"
        and node_text(tokens[0]) == TEST_ATTRIBUTE
    )


def first_string_argument(attribute) -> str | None:
    """
    Первый строковый литерал среди аргументов атрибута.

    `#[context("Deleting {}", entry.name)]` -> "Deleting {}"
    `#[context(move, "Opening {path}")]` -> "Opening {path}"
    """
    arguments = attribute.child_by_field_name("arguments")
    if arguments is None:
        return None

    for token in arguments.named_children:
        value = string_literal_value(token)
        if value is not None:
            return value

    return None


def has_context_attribute(attributes: list) -> bool:
    return any(is_context_attribute(attr) for attr in attributes)


def context_template(attributes: list) -> str | None:
    """Строка контекста из первого подходящего атрибута #[context]."""
    for attr in attributes:
        if not is_context_attribute(attr):
            continue
        template = first_string_argument(attr)
        if template is not None:
            return template
    return None
