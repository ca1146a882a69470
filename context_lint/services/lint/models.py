"""Модели данных линтера."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator


@dataclass
class FunctionDeclaration:
    """Объявление функции или метода в исходном файле."""

    name: str
    file: str
    line: int
    is_method: bool  # есть ли receiver `self`
    visibility: str  # "pub", "pub(crate)", ..., "private"
    has_context_attribute: bool
    context_template: str | None  # строка из #[context("...")], если есть
    return_type: Any = None  # узел tree-sitter с типом результата
    attributes: list[Any] = field(default_factory=list)

    @property
    def is_pub(self) -> bool:
        return self.visibility == "pub"


@dataclass
class AnnotatedFunction:
    """Функция с атрибутом #[context("...")]."""

    name: str
    file: str
    line: int
    context_template: str
    is_method: bool


class AnnotationIndex:
    """
    Индекс аннотированных функций: имя -> все функции с этим именем.

    Строится один раз до проверки вызовов и больше не меняется.
    """

    def __init__(self, entries: dict[str, tuple[AnnotatedFunction, ...]]):
        self._entries = dict(entries)

    @classmethod
    def build(cls, functions: Iterable[AnnotatedFunction]) -> "AnnotationIndex":
        """Сгруппировать функции по имени, сохраняя порядок."""
        grouped: dict[str, list[AnnotatedFunction]] = {}
        for func in functions:
            grouped.setdefault(func.name, []).append(func)
        return cls({name: tuple(funcs) for name, funcs in grouped.items()})

    def get(self, name: str) -> tuple[AnnotatedFunction, ...]:
        return self._entries.get(name, ())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return sum(len(funcs) for funcs in self._entries.values())

    def __iter__(self) -> Iterator[AnnotatedFunction]:
        for funcs in self._entries.values():
            yield from funcs


@dataclass(frozen=True)
class FreeFunctionCallee:
    """Вызов свободной функции: `foo()` или `module::foo()`."""

    name: str
    path_segments: tuple[str, ...]


@dataclass(frozen=True)
class MethodCallee:
    """Вызов метода: `receiver.foo()`."""

    name: str


Callee = FreeFunctionCallee | MethodCallee


class ContextCombinator(str, Enum):
    """Комбинатор контекста на стороне вызывающего."""

    CONTEXT = "context"  # eager: .context(value)
    WITH_CONTEXT = "with_context"  # lazy: .with_context(|| value)

    @property
    def display(self) -> str:
        return f".{self.value}()"


@dataclass
class DoubleContext:
    """Найденный двойной контекст."""

    call_file: str
    call_line: int  # строка .context() / .with_context()
    function_name: str
    inner_context: str  # из #[context] на определении
    outer_context: str | None  # из аргумента комбинатора
    def_file: str
    def_line: int
    combinator: ContextCombinator

    @property
    def is_with_context(self) -> bool:
        return self.combinator is ContextCombinator.WITH_CONTEXT


@dataclass
class UnattributedFunction:
    """Функция, возвращающая anyhow::Result без #[context]."""

    file: str
    line: int
    name: str
    is_method: bool
    is_pub: bool


@dataclass
class LintResult:
    """Результат полного прогона линтера."""

    double_context: list[DoubleContext] = field(default_factory=list)
    unattributed: list[UnattributedFunction] = field(default_factory=list)
    annotated: list[AnnotatedFunction] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def has_findings(self) -> bool:
        return bool(self.double_context or self.unattributed)
