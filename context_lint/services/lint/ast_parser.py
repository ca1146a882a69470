"""Парсинг Rust-исходников через tree-sitter."""

import logging
from typing import Iterator

from tree_sitter_language_pack import get_parser

from context_lint.constants import LANGUAGE_MAP
from .attributes import context_template, has_context_attribute
from .config import LintConfig
from .models import FunctionDeclaration
from .syntax import (
    has_self_parameter,
    line_of,
    node_text,
    outer_attributes,
    visibility,
    walk,
)

logger = logging.getLogger(__name__)


class RustParser:
    """Парсер Rust-файлов в дерево tree-sitter."""

    def __init__(self, config: LintConfig):
        self.config = config
        self._parser = None

    def parse(self, source: bytes | str, file_path: str = "<source>"):
        """
        Распарсить исходник.

        Returns:
            корневой узел дерева или None, если файл не разбирается
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        if self._parser is None:
            self._parser = get_parser(LANGUAGE_MAP["rs"])

        root = self._parser.parse(source).root_node
        if root.has_error and self.config.skip_files_with_syntax_errors:
            logger.debug(f"[Parser] Syntax errors in {file_path}, skipping")
            return None

        return root


def describe_function(fn_node, file_path: str) -> FunctionDeclaration | None:
    """Собрать FunctionDeclaration из узла `function_item`."""
    name_node = fn_node.child_by_field_name("name")
    if name_node is None:
        return None

    attributes = outer_attributes(fn_node)

    return FunctionDeclaration(
        name=node_text(name_node),
        file=file_path,
        line=line_of(name_node),
        is_method=has_self_parameter(fn_node),
        visibility=visibility(fn_node),
        has_context_attribute=has_context_attribute(attributes),
        context_template=context_template(attributes),
        return_type=fn_node.child_by_field_name("return_type"),
        attributes=attributes,
    )


def iter_functions(root, file_path: str) -> Iterator[FunctionDeclaration]:
    """
    Все объявления функций с телом в файле.

    Свободные функции, методы impl-блоков, методы трейтов с реализацией
    по умолчанию и вложенные функции. Сигнатуры трейтов без тела
    (`function_signature_item`) не учитываются.
    """
    for node in walk(root):
        if node.type == "function_item":
            declaration = describe_function(node, file_path)
            if declaration is not None:
                yield declaration
