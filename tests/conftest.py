"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest

from context_lint.services.lint.annotation_index import AnnotationIndexBuilder
from context_lint.services.lint.ast_parser import RustParser
from context_lint.services.lint.call_site_matcher import CallSiteMatcher
from context_lint.services.lint.config import LintConfig
from context_lint.services.lint.models import AnnotatedFunction, AnnotationIndex
from context_lint.services.lint.syntax import walk
from context_lint.services.lint.unattributed import UnattributedDetector


# =============================================================================
# PARSER FIXTURES
# =============================================================================

@pytest.fixture
def parser():
    """Парсер с настройками по умолчанию."""
    return RustParser(LintConfig())


@pytest.fixture
def collect(parser):
    """Собрать аннотированные функции из исходника."""
    builder = AnnotationIndexBuilder(parser)

    def _collect(source: str, file_path: str = "test.rs"):
        return builder.collect_from_source(source, file_path)

    return _collect


@pytest.fixture
def check_unattributed(parser):
    """Найти функции без #[context] в исходнике."""
    detector = UnattributedDetector(parser)

    def _check(source: str, file_path: str = "test.rs"):
        return detector.check_source(source, file_path)

    return _check


# =============================================================================
# INDEX FIXTURES
# =============================================================================

def make_entry(
    name: str,
    context: str,
    is_method: bool = False,
    file: str = "src/mymodule.rs",
    line: int = 1,
) -> AnnotatedFunction:
    return AnnotatedFunction(
        name=name,
        file=file,
        line=line,
        context_template=context,
        is_method=is_method,
    )


@pytest.fixture
def make_index():
    """Построить индекс из (name, context, is_method) или готовых записей."""

    def _make(*entries):
        functions = [
            entry if isinstance(entry, AnnotatedFunction) else make_entry(*entry)
            for entry in entries
        ]
        return AnnotationIndex.build(functions)

    return _make


@pytest.fixture
def check_source(parser):
    """Найти двойной контекст в исходнике по заданному индексу."""

    def _check(source: str, index: AnnotationIndex, file_path: str = "test.rs"):
        return CallSiteMatcher(index, parser).check_source(source, file_path)

    return _check


@pytest.fixture
def context_argument(parser):
    """Узел первого аргумента `.context(...)` / `.with_context(...)` в выражении."""

    def _argument(expression: str):
        root = parser.parse(f"fn main() {{ {expression}; }}")
        assert root is not None
        for node in walk(root):
            if node.type == "arguments" and node.parent.type == "call_expression":
                function = node.parent.child_by_field_name("function")
                if function.type == "field_expression":
                    field = function.child_by_field_name("field")
                    if field.text.decode() in ("context", "with_context"):
                        return node.named_children[0] if node.named_children else None
        raise AssertionError(f"no context call in {expression!r}")

    return _argument


# =============================================================================
# WORKSPACE FIXTURES
# =============================================================================

@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    """Минимальный крейт с двойным контекстом и функцией без #[context]."""
    src = tmp_path / "src"
    src.mkdir()

    (src / "config.rs").write_text(
        """
use anyhow::Result;
use fn_error_context::context;

#[context("Loading config")]
pub fn load_config() -> Result<()> {
    Ok(())
}

pub fn helper() -> Result<()> {
    Ok(())
}
""",
        encoding="utf-8",
    )

    (src / "main.rs").write_text(
        """
use anyhow::{Context, Result};

mod config;

fn main() -> Result<()> {
    config::load_config().context("loading config")?;
    Ok(())
}
""",
        encoding="utf-8",
    )

    return tmp_path
