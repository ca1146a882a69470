"""Главный сервис линтера (фасад)."""

import os
import logging

from context_lint.errors import FileReadError
from context_lint.services.workspace_service import Workspace
from .models import LintResult
from .config import LintConfig
from .file_scanner import FileScanner
from .ast_parser import RustParser
from .annotation_index import AnnotationIndexBuilder
from .call_site_matcher import CallSiteMatcher
from .unattributed import UnattributedDetector

logger = logging.getLogger(__name__)


class LintService:
    """Сервис проверки воркспейса на двойной контекст ошибок."""

    def __init__(self, workspace: Workspace, config: LintConfig | None = None):
        self.workspace = workspace
        self.config = config if config is not None else LintConfig()

        self.scanner = FileScanner(workspace.root, self.config)
        self.parser = RustParser(self.config)
        self.index_builder = AnnotationIndexBuilder(self.parser)
        self.unattributed_detector = UnattributedDetector(self.parser)

        # Распарсенные файлы текущего прогона
        self._trees: dict[str, object] = {}

    def run(self) -> LintResult:
        """
        Проверить воркспейс.

        Порядок проходов строгий: индекс строится полностью по всем
        файлам, и только потом проверяются места вызова.

        Returns:
            LintResult с находками, отсортированными по (файл, строка)
        """
        logger.info("[Lint] Starting context lint...")

        files = self.scanner.scan(self.workspace.package_dirs)
        self._scan_and_parse(files)

        # Проход 1: индекс аннотированных функций
        index = self.index_builder.build(self._trees)

        # Проход 2: двойной контекст
        matcher = CallSiteMatcher(index, self.parser)
        double_context = sorted(
            matcher.check_trees(self._trees),
            key=lambda issue: (issue.call_file, issue.call_line),
        )

        # Проход 3 (опционально): функции без #[context]
        unattributed = []
        if self.config.check_unattributed:
            unattributed = sorted(
                self.unattributed_detector.check_trees(self._trees),
                key=lambda issue: (issue.file, issue.line),
            )

        logger.info(
            f"[Lint] Complete. {len(double_context)} double-context, "
            f"{len(unattributed)} unattributed"
        )

        return LintResult(
            double_context=double_context,
            unattributed=unattributed,
            annotated=list(index),
            files_scanned=len(files),
        )

    def _scan_and_parse(self, files: list[str]) -> None:
        """Прочитать и распарсить все файлы. Ошибка чтения фатальна."""
        self._trees = {}

        for file_path in files:
            full_path = os.path.join(self.workspace.root, file_path)

            try:
                with open(full_path, "rb") as f:
                    content = f.read()
            except OSError as e:
                raise FileReadError(f"Reading failed ({e.strerror})", full_path) from e

            # None - файл не разобрался и ничего не даёт
            self._trees[file_path] = self.parser.parse(content, file_path)

        parsed = sum(1 for root in self._trees.values() if root is not None)
        logger.info(f"[Lint] Parsed {parsed}/{len(files)} files")
