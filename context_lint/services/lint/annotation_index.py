"""Проход 1: сбор функций с атрибутом #[context("...")]."""

import logging
from typing import Mapping

from .ast_parser import RustParser, iter_functions
from .models import AnnotatedFunction, AnnotationIndex

logger = logging.getLogger(__name__)


class AnnotationIndexBuilder:
    """Сборщик индекса аннотированных функций."""

    def __init__(self, parser: RustParser):
        self.parser = parser

    def build(self, trees: Mapping[str, object]) -> AnnotationIndex:
        """
        Построить индекс по всем распарсенным файлам.

        Args:
            trees: словарь {file_path: корневой узел или None}

        Returns:
            AnnotationIndex, который дальше не изменяется
        """
        logger.info("[Index] Collecting annotated functions...")

        functions: list[AnnotatedFunction] = []
        for file_path, root in trees.items():
            if root is None:
                continue
            functions.extend(self.collect_from_tree(root, file_path))

        index = AnnotationIndex.build(functions)
        logger.info(f"[Index] Found {len(index)} annotated functions")
        return index

    def collect_from_source(
        self, source: bytes | str, file_path: str
    ) -> list[AnnotatedFunction]:
        """Собрать аннотированные функции из исходника одного файла."""
        root = self.parser.parse(source, file_path)
        if root is None:
            return []
        return self.collect_from_tree(root, file_path)

    def collect_from_tree(self, root, file_path: str) -> list[AnnotatedFunction]:
        results = []

        for declaration in iter_functions(root, file_path):
            if declaration.context_template is None:
                continue

            results.append(
                AnnotatedFunction(
                    name=declaration.name,
                    file=file_path,
                    line=declaration.line,
                    context_template=declaration.context_template,
                    is_method=declaration.is_method,
                )
            )

        return results
