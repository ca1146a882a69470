"""Ошибки линтера."""


class LintError(Exception):
    """Базовая ошибка линтера."""


class OperationalError(LintError):
    """Фатальная ошибка запуска, привязанная к пути."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class FileReadError(OperationalError):
    """Файл не удалось прочитать."""


class DiscoveryError(OperationalError):
    """Не удалось определить набор файлов для проверки."""
