"""
Проход 3: функции, возвращающие `anyhow::Result`, без атрибута #[context].

Не проверяются:
- функции внутри модулей `#[cfg(test)]`;
- методы реализаций трейтов (`impl Trait for Type`), их сигнатуру задаёт трейт;
- `main`, тесты (`#[test]`, `#[tokio::test]`) и уже аннотированные функции.
"""

import logging
from typing import Mapping

from context_lint.constants import ENTRY_POINT, RESULT_CRATE, RESULT_TYPE
from .ast_parser import RustParser, describe_function
from .attributes import is_cfg_test_attribute, is_test_attribute
from .models import FunctionDeclaration, UnattributedFunction
from .syntax import (
    first_named_child,
    node_text,
    outer_attributes,
    path_segments,
    type_argument_count,
)

logger = logging.getLogger(__name__)

QUALIFIED_RESULT = [RESULT_CRATE, RESULT_TYPE]


class UnattributedDetector:
    """Поиск функций с результатом anyhow::Result без #[context]."""

    def __init__(self, parser: RustParser):
        self.parser = parser

    def check_trees(self, trees: Mapping[str, object]) -> list[UnattributedFunction]:
        logger.info("[Unattributed] Checking function signatures...")

        results: list[UnattributedFunction] = []
        for file_path, root in trees.items():
            if root is None:
                continue
            results.extend(self.check_tree(root, file_path))

        logger.info(
            f"[Unattributed] Found {len(results)} functions returning anyhow::Result without #[context]"
        )
        return results

    def check_source(
        self, source: bytes | str, file_path: str
    ) -> list[UnattributedFunction]:
        """Проверить исходник одного файла."""
        root = self.parser.parse(source, file_path)
        if root is None:
            return []
        return self.check_tree(root, file_path)

    def check_tree(self, root, file_path: str) -> list[UnattributedFunction]:
        """
        Обойти файл, отслеживая тестовые модули и реализации трейтов.

        Флаги областей хранятся вместе с узлом в стеке обхода, поэтому
        при выходе из области они восстанавливаются автоматически.
        """
        result_names = resolved_result_names(root)
        results = []

        # (узел, внутри #[cfg(test)] mod, внутри impl Trait for Type)
        stack = [(root, False, False)]
        while stack:
            node, in_test_module, in_trait_impl = stack.pop()

            if node.type == "mod_item":
                if any(is_cfg_test_attribute(a) for a in outer_attributes(node)):
                    in_test_module = True

            elif node.type == "impl_item":
                if node.child_by_field_name("trait") is not None:
                    in_trait_impl = True

            elif node.type == "function_item":
                if not in_test_module and not in_trait_impl:
                    declaration = describe_function(node, file_path)
                    if declaration is not None and self._should_flag(
                        declaration, result_names
                    ):
                        results.append(
                            UnattributedFunction(
                                file=file_path,
                                line=declaration.line,
                                name=declaration.name,
                                is_method=declaration.is_method,
                                is_pub=declaration.is_pub,
                            )
                        )

            stack.extend(
                (child, in_test_module, in_trait_impl)
                for child in reversed(node.named_children)
            )

        return results

    def _should_flag(
        self, declaration: FunctionDeclaration, result_names: frozenset[str]
    ) -> bool:
        if declaration.name == ENTRY_POINT:
            return False

        if any(is_test_attribute(attr) for attr in declaration.attributes):
            return False

        if declaration.has_context_attribute:
            return False

        return is_fallible_result(declaration.return_type, result_names)


def is_fallible_result(type_node, result_names: frozenset[str]) -> bool:
    """
    Похож ли тип на `anyhow::Result<T>`.

    Подходит `anyhow::Result<T>` или `Result<T>` (либо псевдоним импорта),
    если имя импортировано из anyhow. Ровно один типовой аргумент:
    `Result<T, E>` - это другой тип.
    """
    segments = path_segments(type_node)
    if segments is None:
        return False

    if segments != QUALIFIED_RESULT:
        if len(segments) != 1 or segments[0] not in result_names:
            return False

    return type_argument_count(type_node) == 1


def resolved_result_names(root) -> frozenset[str]:
    """
    Имена, под которыми `anyhow::Result` доступен на уровне файла.

    Учитываются импорты `use anyhow::Result;`, `use anyhow::Result as R;`,
    `use anyhow::{Context, Result};` и `use anyhow::*;`. Локальный
    `type Result<T> = ...;` с правой частью, отличной от `anyhow::Result`,
    перекрывает импорт.
    """
    names: set[str] = set()
    for item in root.named_children:
        if item.type == "use_declaration":
            names |= _imported_result_names(item.child_by_field_name("argument"))

    return frozenset(names - _shadowing_aliases(root))


def _imported_result_names(tree) -> set[str]:
    """Имена для anyhow::Result из дерева `use`."""
    if tree is None:
        return set()

    if tree.type == "scoped_identifier":
        if path_segments(tree) == QUALIFIED_RESULT:
            return {RESULT_TYPE}

    elif tree.type == "use_as_clause":
        alias = tree.child_by_field_name("alias")
        path = tree.child_by_field_name("path")
        if alias is not None and path_segments(path) == QUALIFIED_RESULT:
            return {node_text(alias)}

    elif tree.type == "use_wildcard":
        if path_segments(first_named_child(tree)) == [RESULT_CRATE]:
            return {RESULT_TYPE}

    elif tree.type == "scoped_use_list":
        items = tree.child_by_field_name("list")
        path = tree.child_by_field_name("path")
        if items is not None and path_segments(path) == [RESULT_CRATE]:
            names: set[str] = set()
            for item in items.named_children:
                names |= _names_in_crate_group(item)
            return names

    return set()


def _names_in_crate_group(item) -> set[str]:
    """Элемент группы `use anyhow::{...}`."""
    if item.type in ("identifier", "type_identifier"):
        if node_text(item) == RESULT_TYPE:
            return {RESULT_TYPE}

    elif item.type == "use_as_clause":
        alias = item.child_by_field_name("alias")
        path = item.child_by_field_name("path")
        if alias is not None and path_segments(path) == [RESULT_TYPE]:
            return {node_text(alias)}

    elif item.type == "use_wildcard":
        # `use anyhow::{*}`
        if first_named_child(item) is None:
            return {RESULT_TYPE}

    return set()


def _shadowing_aliases(root) -> set[str]:
    """Имена локальных `type X<..> = ...;`, не являющихся anyhow::Result."""
    shadowing = set()
    for item in root.named_children:
        if item.type != "type_item":
            continue

        name = item.child_by_field_name("name")
        if name is None:
            continue

        if path_segments(item.child_by_field_name("type")) != QUALIFIED_RESULT:
            shadowing.add(node_text(name))

    return shadowing
