"""Настройки конфигурации."""

from enum import Enum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from context_lint.constants import SKIPPED_DIRECTORIES
from context_lint.services.lint.config import LintConfig


class LintLevel(str, Enum):
    """Уровень для опциональных проверок."""

    ALLOW = "allow"  # пропустить проверку
    DENY = "deny"  # считать находки предупреждениями


class Config(BaseSettings):
    """Конфигурация приложения (переменные окружения CONTEXT_LINT_*)."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXT_LINT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Вывод
    output_format: Literal["text", "json"] = Field(default="text")
    verbose: bool = Field(default=False)

    # Проверка функций без #[context]
    unattributed: LintLevel = Field(default=LintLevel.DENY)

    # Сканирование
    cargo_path: str = Field(default="cargo")
    respect_gitignore: bool = Field(default=True)
    extra_skipped_directories: list[str] = Field(default_factory=list)
    skip_files_with_syntax_errors: bool = Field(default=True)

    def to_lint_config(self) -> LintConfig:
        """Конфигурация движка линтера."""
        return LintConfig(
            skipped_directories=SKIPPED_DIRECTORIES
            + tuple(self.extra_skipped_directories),
            respect_gitignore=self.respect_gitignore,
            skip_files_with_syntax_errors=self.skip_files_with_syntax_errors,
            check_unattributed=self.unattributed == LintLevel.DENY,
        )
