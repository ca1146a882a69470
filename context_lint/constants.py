"""Константы линтера (неизменяемые таблицы)."""

# Расширение -> язык tree-sitter
LANGUAGE_MAP = {
    "rs": "rust",
}

# Методы-комбинаторы anyhow::Context
CONTEXT_METHOD = "context"
WITH_CONTEXT_METHOD = "with_context"

# Атрибут fn_error_context: короткая форма и полностью квалифицированная
CONTEXT_ATTRIBUTE = "context"
CONTEXT_ATTRIBUTE_CRATE = "fn_error_context"

# Целевой тип результата: anyhow::Result
RESULT_CRATE = "anyhow"
RESULT_TYPE = "Result"

TEST_ATTRIBUTE = "test"
ENTRY_POINT = "main"

# Относительные сегменты пути, не несущие информации о модуле
RELATIVE_PATH_SEGMENTS = frozenset({"crate", "self", "super"})

# Макросы форматирования строк
FORMAT_MACROS = frozenset({"format"})

COMPLEX_EXPRESSION = "<complex expression>"

# Имена, слишком общие для сопоставления только по имени
COMMON_FUNCTION_NAMES = frozenset(
    {
        "new",
        "open",
        "close",
        "read",
        "write",
        "parse",
        "from_str",
        "from",
        "into",
        "try_from",
        "try_into",
        "default",
        "clone",
        "copy",
        "run",
        "start",
        "stop",
        "init",
        "create",
        "delete",
        "remove",
        "update",
        "get",
        "set",
        "load",
        "save",
        "build",
        "execute",
        "exec",
        "send",
        "recv",
        "connect",
        "bind",
        "listen",
        "accept",
        "flush",
        "sync",
        "drop",
        "status",
        "display",
        "fmt",
    }
)

# Директории, которые никогда не сканируются
SKIPPED_DIRECTORIES = ("target", ".git", ".hg")
