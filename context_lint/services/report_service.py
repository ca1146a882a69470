"""Сервис форматирования результатов линтера."""

import json
import logging
import os
from dataclasses import dataclass, asdict

from context_lint.constants import COMPLEX_EXPRESSION
from context_lint.services.lint.models import (
    DoubleContext,
    LintResult,
    UnattributedFunction,
)

logger = logging.getLogger(__name__)


# Разделитель секций текстового отчёта
SECTION_SEPARATOR = "\n"


@dataclass
class Location:
    """Место в исходниках для JSON-отчёта."""

    file: str
    line: int


@dataclass
class DoubleContextWarning:
    function_name: str
    call_site: Location
    definition: Location
    inner_context: str
    outer_context: str | None
    identical: bool


@dataclass
class UnattributedWarning:
    function_name: str
    location: Location
    is_method: bool
    is_pub: bool


class ReportService:
    """Сервис для форматирования находок в текст или JSON."""

    def __init__(self, strip_prefix: str | None = None):
        """
        Args:
            strip_prefix: префикс, отрезаемый от путей (обычно корень воркспейса)
        """
        self.strip_prefix = strip_prefix

    def format(self, result: LintResult, output_format: str) -> str:
        if output_format == "json":
            return self.format_json(result)
        return self.format_text(result)

    # ── Текст ───────────────────────────────────────────────────────────

    def format_text(self, result: LintResult) -> str:
        """
        Форматировать результаты в текст с отдельными секциями.

        Returns:
            Пустая строка, если находок нет
        """
        sections = []

        if result.double_context:
            sections.append(self._format_double_context_text(result.double_context))

        if result.unattributed:
            sections.append(self._format_unattributed_text(result.unattributed))

        return SECTION_SEPARATOR.join(sections)

    def _format_double_context_text(self, issues: list[DoubleContext]) -> str:
        lines = []

        for issue in issues:
            outer = outer_display(issue)
            lines.extend(
                [
                    f"warning: double context on `{issue.function_name}`",
                    f"  --> {self._strip(issue.call_file)}:{issue.call_line}",
                    f'   | inner context (from #[context]): "{issue.inner_context}"',
                    f"   |   defined at: {self._strip(issue.def_file)}:{issue.def_line}",
                    f'   | outer context (from {issue.combinator.display}): "{outer}"',
                ]
            )
            if is_context_identical(issue.inner_context, outer):
                lines.append("   |")
                lines.append("   = note: these context strings are identical")
            lines.append("")

        lines.append(
            f"Found {len(issues)} double-context {pluralize('warning', len(issues))}"
        )
        return "\n".join(lines) + "\n"

    def _format_unattributed_text(self, issues: list[UnattributedFunction]) -> str:
        lines = []

        for issue in issues:
            vis = "pub " if issue.is_pub else ""
            kind = "method" if issue.is_method else "fn"

            lines.extend(
                [
                    f"warning: {kind} returning Result without #[context]: `{issue.name}`",
                    f"  --> {self._strip(issue.file)}:{issue.line}",
                    f"   | {vis}{kind} {issue.name}",
                    "",
                ]
            )

        lines.append(
            f"Found {len(issues)} unattributed {pluralize('function', len(issues))} "
            "returning anyhow::Result"
        )
        return "\n".join(lines) + "\n"

    # ── JSON ────────────────────────────────────────────────────────────

    def format_json(self, result: LintResult) -> str:
        """Форматировать результаты в JSON."""
        dc_warnings = [
            asdict(self._double_context_warning(issue))
            for issue in result.double_context
        ]
        ua_warnings = [
            asdict(self._unattributed_warning(issue)) for issue in result.unattributed
        ]

        report = {
            "double_context": {"warnings": dc_warnings, "total": len(dc_warnings)},
            "unattributed": {"warnings": ua_warnings, "total": len(ua_warnings)},
        }
        return json.dumps(report, ensure_ascii=False, indent=2) + "\n"

    def _double_context_warning(self, issue: DoubleContext) -> DoubleContextWarning:
        return DoubleContextWarning(
            function_name=issue.function_name,
            call_site=Location(file=self._strip(issue.call_file), line=issue.call_line),
            definition=Location(file=self._strip(issue.def_file), line=issue.def_line),
            inner_context=issue.inner_context,
            outer_context=issue.outer_context,
            identical=is_context_identical(issue.inner_context, outer_display(issue)),
        )

    def _unattributed_warning(self, issue: UnattributedFunction) -> UnattributedWarning:
        return UnattributedWarning(
            function_name=issue.name,
            location=Location(file=self._strip(issue.file), line=issue.line),
            is_method=issue.is_method,
            is_pub=issue.is_pub,
        )

    def _strip(self, path: str) -> str:
        return strip_path(path, self.strip_prefix)


def outer_display(issue: DoubleContext) -> str:
    return issue.outer_context if issue.outer_context is not None else COMPLEX_EXPRESSION


def is_context_identical(inner: str, outer: str) -> bool:
    """Совпадают ли строки контекста (точно или без учёта регистра)."""
    return inner == outer or inner.lower() == outer.lower()


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def strip_path(path: str, prefix: str | None) -> str:
    """Отрезать префикс корня воркспейса от пути."""
    if not prefix:
        return path

    if not prefix.endswith(os.sep):
        prefix += os.sep

    return path[len(prefix) :] if path.startswith(prefix) else path
