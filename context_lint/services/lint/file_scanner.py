"""Поиск `.rs` файлов в директориях пакетов с учётом .gitignore."""

import os
import logging
from pathlib import Path
import pathspec

from context_lint.errors import DiscoveryError
from .config import LintConfig

logger = logging.getLogger(__name__)


class FileScanner:
    """Сбор исходников пакетов воркспейса."""

    def __init__(self, root_path: str, config: LintConfig):
        self.root_path = root_path
        self.config = config
        self._ignore = self._read_gitignore()

    def _read_gitignore(self) -> pathspec.PathSpec | None:
        """Правила .gitignore из корня воркспейса, если включены."""
        gitignore = Path(self.root_path) / ".gitignore"
        if not self.config.respect_gitignore or not gitignore.is_file():
            return None

        lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return pathspec.PathSpec.from_lines("gitwildmatch", lines)

    def scan(self, directories: list[str]) -> list[str]:
        """
        Собрать Rust-файлы из директорий пакетов.

        Пути, указывающие на файл, берутся как есть. Несуществующая
        директория - ошибка запуска.

        Returns:
            Отсортированный список без повторов, пути относительно корня
        """
        logger.info(f"[Scanner] Scanning {len(directories)} package directories...")
        found: set[str] = set()

        for directory in directories:
            if os.path.isfile(directory):
                if self._is_source(directory):
                    found.add(self._relative(directory))
            elif os.path.isdir(directory):
                found.update(self._walk(directory))
            else:
                raise DiscoveryError("Source directory not found", directory)

        logger.info(f"[Scanner] Found {len(found)} Rust files")
        return sorted(found)

    def _walk(self, directory: str) -> list[str]:
        sources = []

        for current, subdirs, filenames in os.walk(directory):
            rel_current = self._relative(current)

            # Обход только разрешённых поддиректорий
            subdirs[:] = sorted(
                d for d in subdirs if not self._is_pruned(d, rel_current)
            )

            for filename in filenames:
                rel_path = os.path.join(rel_current, filename)
                if self._is_source(filename) and not self._is_ignored(rel_path):
                    sources.append(self._relative(os.path.join(current, filename)))

        return sources

    def _relative(self, path: str) -> str:
        """Путь относительно корня; вне воркспейса - абсолютный."""
        rel_path = os.path.relpath(path, self.root_path)
        if rel_path.startswith(os.pardir):
            return os.path.abspath(path)
        return rel_path

    def _is_source(self, filename: str) -> bool:
        return filename.endswith(self.config.file_extensions)

    def _is_pruned(self, name: str, rel_parent: str) -> bool:
        """`target`, `.git` и т.п., а также директории из .gitignore."""
        if name in self.config.skipped_directories:
            return True
        return self._is_ignored(f"{rel_parent}/{name}/")

    def _is_ignored(self, rel_path: str) -> bool:
        return self._ignore is not None and self._ignore.match_file(rel_path)
