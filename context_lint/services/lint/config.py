"""Конфигурация движка линтера."""

from dataclasses import dataclass

from context_lint.constants import LANGUAGE_MAP, SKIPPED_DIRECTORIES


@dataclass
class LintConfig:
    """Конфигурация проверки."""

    # Расширения файлов для анализа
    file_extensions: tuple[str, ...] = tuple(f".{ext}" for ext in LANGUAGE_MAP.keys())

    # Директории, которые пропускаются при обходе
    skipped_directories: tuple[str, ...] = SKIPPED_DIRECTORIES

    # Учитывать .gitignore в корне воркспейса
    respect_gitignore: bool = True

    # Файл с синтаксическими ошибками не даёт ни объявлений, ни вызовов
    skip_files_with_syntax_errors: bool = True

    # Запускать проверку функций без #[context]
    check_unattributed: bool = True
