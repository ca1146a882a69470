"""Структурные хелперы для узлов tree-sitter (грамматика Rust)."""

from typing import Iterator

COMMENT_NODES = frozenset({"line_comment", "block_comment"})

# Листья пути: `foo`, `Foo`, `crate`, `self`, `super`, `$x`
PATH_LEAF_NODES = frozenset(
    {"identifier", "type_identifier", "crate", "self", "super", "metavariable"}
)

# Аргументы дженерика, которые не являются типами
NON_TYPE_ARGUMENT_NODES = frozenset(
    {"lifetime", "type_binding", "line_comment", "block_comment"}
)


def walk(root) -> Iterator:
    """Обход дерева в глубину в порядке исходника."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))


def node_text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def line_of(node) -> int:
    """Номер строки узла (с 1)."""
    return node.start_point[0] + 1


def first_named_child(node):
    """Первый именованный потомок, не являющийся комментарием."""
    for child in node.named_children:
        if child.type not in COMMENT_NODES:
            return child
    return None


def path_segments(node) -> list[str] | None:
    """
    Сегменты пути: `a::b::c` -> ["a", "b", "c"].

    Дженерики отбрасываются (`Vec::<u8>::new` -> ["Vec", "new"]).
    Для узлов, не являющихся путём, возвращает None.
    """
    if node is None:
        return None

    if node.type in ("scoped_identifier", "scoped_type_identifier"):
        name = node.child_by_field_name("name")
        if name is None:
            return None

        path = node.child_by_field_name("path")
        prefix = path_segments(path) if path is not None else []
        if prefix is None:
            return None

        return prefix + [node_text(name)]

    if node.type == "generic_type":
        return path_segments(node.child_by_field_name("type"))

    if node.type in PATH_LEAF_NODES:
        return [node_text(node)]

    return None


def string_literal_value(node) -> str | None:
    """Содержимое строкового литерала (`"..."` или `r#"..."#`) как есть."""
    if node is None or node.type not in ("string_literal", "raw_string_literal"):
        return None

    text = node_text(node)
    if not text.startswith(('"', "r")):
        # байтовые и C-строки не подходят
        return None

    start = text.find('"')
    end = text.rfind('"')
    if start == -1 or end <= start:
        return None

    return text[start + 1 : end]


def outer_attributes(node) -> list:
    """
    Атрибуты `#[...]` перед объявлением, в порядке исходника.

    В дереве tree-sitter атрибуты лежат соседями перед узлом объявления,
    поэтому идём по предыдущим соседям, пропуская комментарии.
    """
    attributes = []
    current = node.prev_named_sibling

    while current is not None:
        if current.type == "attribute_item":
            attribute = first_named_child(current)
            if attribute is not None and attribute.type == "attribute":
                attributes.append(attribute)
        elif current.type not in COMMENT_NODES:
            break
        current = current.prev_named_sibling

    attributes.reverse()
    return attributes


def has_self_parameter(fn_node) -> bool:
    """Есть ли у функции receiver `self`."""
    params = fn_node.child_by_field_name("parameters")
    if params is None:
        return False

    for param in params.named_children:
        if param.type == "self_parameter":
            return True
        # `self: Box<Self>`
        if param.type == "parameter":
            pattern = param.child_by_field_name("pattern")
            if pattern is not None and pattern.type == "self":
                return True

    return False


def visibility(item_node) -> str:
    """Видимость объявления: "pub", "pub(crate)", ... или "private"."""
    for child in item_node.children:
        if child.type == "visibility_modifier":
            return "".join(node_text(child).split())
    return "private"


def type_argument_count(type_node) -> int:
    """Количество типовых аргументов дженерика (`Result<T, E>` -> 2)."""
    if type_node is None or type_node.type != "generic_type":
        return 0

    arguments = type_node.child_by_field_name("type_arguments")
    if arguments is None:
        return 0

    return sum(
        1
        for child in arguments.named_children
        if child.type not in NON_TYPE_ARGUMENT_NODES
    )
