"""
Tests for collecting #[context]-annotated functions into the index.
"""

from context_lint.services.lint.annotation_index import AnnotationIndexBuilder
from context_lint.services.lint.ast_parser import RustParser
from context_lint.services.lint.config import LintConfig
from context_lint.services.lint.models import AnnotationIndex

from conftest import make_entry


class TestCollectAnnotated:
    """Сбор аннотированных объявлений из одного файла."""

    def test_simple_context(self, collect):
        """Короткая форма #[context] на свободной функции."""
        results = collect(
            """
use fn_error_context::context;

#[context("Loading config")]
fn load_config() -> Result<()> {
    Ok(())
}
"""
        )
        assert len(results) == 1
        assert results[0].name == "load_config"
        assert results[0].context_template == "Loading config"
        assert results[0].file == "test.rs"
        assert results[0].line == 5
        assert not results[0].is_method

    def test_fully_qualified(self, collect):
        """Форма fn_error_context::context."""
        results = collect(
            """
#[fn_error_context::context("Deleting entry")]
fn delete_entry() -> Result<()> {
    Ok(())
}
"""
        )
        assert len(results) == 1
        assert results[0].name == "delete_entry"
        assert results[0].context_template == "Deleting entry"

    def test_other_two_segment_path_ignored(self, collect):
        """Атрибут другого крейта с именем context не учитывается."""
        results = collect(
            """
#[other_crate::context("Nope")]
fn nope() -> Result<()> {
    Ok(())
}
"""
        )
        assert results == []

    def test_format_placeholders_kept(self, collect):
        """Шаблон с плейсхолдерами сохраняется как есть."""
        results = collect(
            """
#[context("Opening {target} with writable mount")]
fn open_dir_remount_rw(target: &str) -> Result<()> {
    Ok(())
}
"""
        )
        assert results[0].context_template == "Opening {target} with writable mount"

    def test_positional_format_args(self, collect):
        """Аргументы после строки не влияют на шаблон."""
        results = collect(
            """
#[fn_error_context::context("Deleting {}", entry.name)]
fn delete(entry: &Entry) -> Result<()> {
    Ok(())
}
"""
        )
        assert len(results) == 1
        assert results[0].context_template == "Deleting {}"

    def test_move_before_string(self, collect):
        """`move` перед строкой пропускается."""
        results = collect(
            """
#[context(move, "Fetching {url}")]
async fn fetch(url: String) -> Result<()> {
    Ok(())
}
"""
        )
        assert results[0].context_template == "Fetching {url}"

    def test_method(self, collect):
        """Метод impl-блока с &mut self."""
        results = collect(
            """
struct Foo;
impl Foo {
    #[context("Preparing import")]
    async fn prepare(&mut self) -> Result<()> {
        Ok(())
    }
}
"""
        )
        assert len(results) == 1
        assert results[0].name == "prepare"
        assert results[0].is_method

    def test_associated_function_is_not_method(self, collect):
        """Функция impl-блока без self - не метод."""
        results = collect(
            """
impl Foo {
    #[context("Creating foo")]
    fn create_foo(path: &Path) -> Result<Self> {
        todo!()
    }
}
"""
        )
        assert len(results) == 1
        assert not results[0].is_method

    def test_trait_default_method(self, collect):
        """Метод трейта с реализацией по умолчанию."""
        results = collect(
            """
trait Store {
    #[context("Syncing store")]
    fn sync_store(&self) -> Result<()> {
        Ok(())
    }

    fn required(&self) -> Result<()>;
}
"""
        )
        assert [r.name for r in results] == ["sync_store"]
        assert results[0].is_method

    def test_attribute_among_others(self, collect):
        """#[context] среди других атрибутов и doc-комментариев."""
        results = collect(
            """
/// Loads things.
#[inline]
#[context("Loading things")]
// trailing comment
#[allow(dead_code)]
pub(crate) fn load_things() -> Result<()> {
    Ok(())
}
"""
        )
        assert len(results) == 1
        assert results[0].context_template == "Loading things"

    def test_only_first_context_attribute_counts(self, collect):
        """При нескольких #[context] учитывается первый."""
        results = collect(
            """
#[context("First")]
#[context("Second")]
fn twice() -> Result<()> {
    Ok(())
}
"""
        )
        assert len(results) == 1
        assert results[0].context_template == "First"

    def test_no_context(self, collect):
        """Функция без атрибута не попадает в индекс."""
        results = collect(
            """
fn no_annotation() -> Result<()> {
    Ok(())
}
"""
        )
        assert results == []

    def test_attribute_of_previous_item_not_attached(self, collect):
        """Атрибут предыдущего объявления не переносится на следующее."""
        results = collect(
            """
#[context("Loading a")]
fn a() -> Result<()> {
    Ok(())
}

fn b() -> Result<()> {
    Ok(())
}
"""
        )
        assert [r.name for r in results] == ["a"]

    def test_unparsable_file_contributes_nothing(self, collect):
        """Файл с синтаксической ошибкой даёт пустой результат."""
        results = collect(
            """
#[context("Broken")]
fn broken( -> Result<()> {
"""
        )
        assert results == []


class TestAnnotationIndex:
    """Индекс: имя -> все объявления с этим именем."""

    def test_entries_with_same_name_kept(self):
        """Одинаковые имена не схлопываются."""
        index = AnnotationIndex.build(
            [
                make_entry("open", "Opening a", file="src/a.rs"),
                make_entry("open", "Opening b", file="src/b.rs"),
                make_entry("close", "Closing"),
            ]
        )
        assert [e.file for e in index.get("open")] == ["src/a.rs", "src/b.rs"]
        assert len(index) == 3
        assert "close" in index
        assert index.get("missing") == ()

    def test_build_from_trees(self):
        """Индекс строится по всем файлам, нераспарсенные пропускаются."""
        parser = RustParser(LintConfig())
        trees = {
            "src/a.rs": parser.parse('#[context("A")]\nfn load_a() -> Result<()> { Ok(()) }\n'),
            "src/b.rs": parser.parse('#[context("B")]\nfn load_b() -> Result<()> { Ok(()) }\n'),
            "src/broken.rs": None,
        }
        index = AnnotationIndexBuilder(parser).build(trees)

        assert len(index) == 2
        assert index.get("load_a")[0].file == "src/a.rs"
        assert index.get("load_b")[0].context_template == "B"
        assert index.get("load_b")[0].line == 2
