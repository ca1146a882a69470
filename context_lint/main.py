"""
Поиск двойного контекста ошибок: `fn_error_context` + `anyhow`.

Функция с атрибутом `#[context("...")]` уже оборачивает свои ошибки
контекстом. Если вызывающий код дополнительно вызывает `.context()` или
`.with_context()`, у ошибки будет два слоя контекста.

USAGE
-----
    cargo context-lint [--manifest-path Cargo.toml] [--format text|json]
                       [--verbose] [--unattributed allow|deny] [PATH ...]

Коды выхода: 0 - нет находок, 1 - есть находки, 2 - ошибка запуска.
"""

import argparse
import logging
import sys

from context_lint.config import Config, LintLevel
from context_lint.errors import OperationalError
from context_lint.services.lint import LintResult, LintService
from context_lint.services.report_service import ReportService
from context_lint.services.workspace_service import Workspace, WorkspaceService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_FAILURE = 2

# Так cargo передаёт имя подкоманды первым аргументом
CARGO_SUBCOMMAND = "context-lint"


class Pipeline:
    """Пайплайн проверки воркспейса."""

    def __init__(self, config: Config):
        self.config = config
        self.workspace_service = WorkspaceService(cargo=config.cargo_path)

    def run(
        self, manifest_path: str | None = None, paths: list[str] | None = None
    ) -> tuple[LintResult, Workspace]:
        """
        Запустить проверку.

        Args:
            manifest_path: путь к Cargo.toml
            paths: явные директории/файлы (без cargo metadata)
        """
        # Шаг 1: Определяем набор директорий
        if paths:
            workspace = self.workspace_service.from_paths(paths)
        else:
            workspace = self.workspace_service.discover(manifest_path)

        # Шаг 2: Все проходы линтера
        service = LintService(workspace, self.config.to_lint_config())
        result = service.run()

        logger.info(
            f"Scanned {result.files_scanned} Rust files across "
            f"{len(workspace.package_dirs)} package directories"
        )
        if self.config.verbose:
            self._log_annotated(result, workspace)

        return result, workspace

    def _log_annotated(self, result: LintResult, workspace: Workspace) -> None:
        """Вывести все найденные аннотированные функции."""
        logger.info(f"Found {len(result.annotated)} annotated functions")
        for entry in result.annotated:
            kind = "method" if entry.is_method else "fn"
            logger.info(
                f'  {entry.file}:{entry.line} - {kind} {entry.name}() #[context("{entry.context_template}")]'
            )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo context-lint",
        description=(
            "Detect double error context from fn_error_context + anyhow. "
            "Finds call sites where a function annotated with #[context(...)] "
            "is additionally wrapped with .context() or .with_context()."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="directories or files to check instead of the cargo workspace",
    )
    parser.add_argument(
        "--manifest-path",
        metavar="PATH",
        help="path to Cargo.toml (defaults to current directory)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["text", "json"],
        default=None,
        help="output format (default: text)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="show verbose output including all annotated functions found",
    )
    parser.add_argument(
        "--unattributed",
        choices=[level.value for level in LintLevel],
        default=None,
        help="check for functions returning anyhow::Result without #[context] (default: deny)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == CARGO_SUBCOMMAND:
        argv = argv[1:]

    args = build_arg_parser().parse_args(argv)

    # Аргументы командной строки важнее переменных окружения
    overrides = {
        key: value
        for key, value in vars(args).items()
        if value is not None and key in Config.model_fields
    }
    config = Config(**overrides)

    logging.basicConfig(
        level=logging.INFO if config.verbose else logging.WARNING,
        format="%(message)s",
    )

    try:
        result, workspace = Pipeline(config).run(args.manifest_path, args.paths)
    except OperationalError as e:
        logger.error(f"error: {e}")
        return EXIT_FAILURE

    report_service = ReportService(strip_prefix=workspace.root)
    output = report_service.format(result, config.output_format)

    if output:
        sys.stdout.write(output)
    elif config.verbose:
        logger.info("No issues found.")

    return EXIT_FINDINGS if result.has_findings else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
