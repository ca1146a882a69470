"""
Проход 2: поиск вызовов аннотированных функций, обёрнутых в `.context()`.

Сопоставление вызова с объявлением эвристическое: без разрешения имён
и типов, только по имени функции, квалифицирующим сегментам пути и
форме вызова (функция или метод). Точность важнее полноты.
"""

import logging
from typing import Mapping

from context_lint.constants import (
    COMMON_FUNCTION_NAMES,
    CONTEXT_METHOD,
    RELATIVE_PATH_SEGMENTS,
    WITH_CONTEXT_METHOD,
)
from .ast_parser import RustParser
from .context_extractor import extract_context
from .models import (
    AnnotatedFunction,
    AnnotationIndex,
    Callee,
    ContextCombinator,
    DoubleContext,
    FreeFunctionCallee,
    MethodCallee,
)
from .syntax import first_named_child, line_of, node_text, path_segments, walk

logger = logging.getLogger(__name__)

COMBINATOR_METHODS = {
    CONTEXT_METHOD: ContextCombinator.CONTEXT,
    WITH_CONTEXT_METHOD: ContextCombinator.WITH_CONTEXT,
}

# Обёртки, прозрачные для поиска вызова: `x.await`, `(x)`, `x?`
TRANSPARENT_WRAPPERS = frozenset(
    {"await_expression", "parenthesized_expression", "try_expression"}
)


class CallSiteMatcher:
    """Поиск двойного контекста по готовому индексу."""

    def __init__(self, index: AnnotationIndex, parser: RustParser):
        self.index = index
        self.parser = parser

    def check_trees(self, trees: Mapping[str, object]) -> list[DoubleContext]:
        """
        Проверить все распарсенные файлы.

        Args:
            trees: словарь {file_path: корневой узел или None}
        """
        logger.info("[Matcher] Checking call sites...")

        results: list[DoubleContext] = []
        for file_path, root in trees.items():
            if root is None:
                continue
            results.extend(self.check_tree(root, file_path))

        logger.info(f"[Matcher] Found {len(results)} double-context call sites")
        return results

    def check_source(self, source: bytes | str, file_path: str) -> list[DoubleContext]:
        """Проверить исходник одного файла."""
        root = self.parser.parse(source, file_path)
        if root is None:
            return []
        return self.check_tree(root, file_path)

    def check_tree(self, root, file_path: str) -> list[DoubleContext]:
        results = []

        # Обходим все узлы, включая вложенные вызовы внутри аргументов
        for node in walk(root):
            if node.type == "call_expression":
                results.extend(self._check_context_call(node, file_path))

        return results

    def _check_context_call(self, call, file_path: str) -> list[DoubleContext]:
        """Проверить вызов, если это `.context()` или `.with_context()`."""
        target = _method_call_target(call)
        if target is None:
            return []

        receiver, method_node = target
        combinator = COMBINATOR_METHODS.get(node_text(method_node))
        if combinator is None:
            return []

        callee = find_callee(receiver)
        if callee is None:
            return []

        candidates = self.index.get(callee.name)
        if not candidates:
            return []

        arguments = call.child_by_field_name("arguments")
        outer_context = extract_context(
            first_named_child(arguments) if arguments is not None else None
        )

        return [
            DoubleContext(
                call_file=file_path,
                call_line=line_of(method_node),
                function_name=callee.name,
                inner_context=annotated.context_template,
                outer_context=outer_context,
                def_file=annotated.file,
                def_line=annotated.line,
                combinator=combinator,
            )
            for annotated in candidates
            if is_plausible_match(callee, annotated)
        ]


def _method_call_target(call):
    """
    Для вызова метода `receiver.method(...)` вернуть (receiver, узел имени).

    В tree-sitter вызов метода - это `call_expression`, у которого
    функция - `field_expression` (возможно, в обёртке turbofish).
    """
    function = call.child_by_field_name("function")
    if function is not None and function.type == "generic_function":
        function = function.child_by_field_name("function")

    if function is None or function.type != "field_expression":
        return None

    receiver = function.child_by_field_name("value")
    field = function.child_by_field_name("field")
    if receiver is None or field is None or field.type != "field_identifier":
        return None

    return receiver, field


def find_callee(expr) -> Callee | None:
    """
    Найти вызов в цепочке receiver'а, сняв `.await`, скобки и `?`.

    Разбирается только один уровень вызова: у метода его собственный
    receiver дальше не исследуется.
    """
    if expr is None:
        return None

    if expr.type in TRANSPARENT_WRAPPERS:
        return find_callee(first_named_child(expr))

    if expr.type == "call_expression":
        return _callee_from_function(expr.child_by_field_name("function"))

    return None


def _callee_from_function(function) -> Callee | None:
    """Описание вызываемого по узлу `function` у `call_expression`."""
    if function is None:
        return None

    # `foo::<T>(...)`, `x.foo::<T>(...)`
    if function.type == "generic_function":
        return _callee_from_function(function.child_by_field_name("function"))

    if function.type == "field_expression":
        field = function.child_by_field_name("field")
        if field is None or field.type != "field_identifier":
            return None
        return MethodCallee(name=node_text(field))

    if function.type in ("identifier", "scoped_identifier"):
        segments = path_segments(function)
        if not segments:
            return None
        return FreeFunctionCallee(name=segments[-1], path_segments=tuple(segments))

    return None


def is_plausible_match(callee: Callee, annotated: AnnotatedFunction) -> bool:
    """
    Может ли вызов относиться к данному аннотированному объявлению.

    Метод сопоставляется только с методами, свободная функция - только
    с функциями без `self`. Общие имена (`new`, `open`, ...) принимаются
    только при совпадении квалифицирующего сегмента пути с путём файла
    определения; остальные имена - по имени.
    """
    if isinstance(callee, MethodCallee):
        return annotated.is_method

    if annotated.is_method:
        return False

    if callee.name in COMMON_FUNCTION_NAMES:
        return path_qualifier_matches(callee.path_segments, annotated.file)

    return True


def path_qualifier_matches(segments: tuple[str, ...], def_file: str) -> bool:
    """
    Встречается ли квалифицирующий сегмент пути в пути файла определения.

    `podstorage::open` и `src/podstorage.rs` -> True.
    `crate`, `self` и `super` не учитываются.
    """
    qualifying = [
        segment
        for segment in segments[:-1]
        if segment not in RELATIVE_PATH_SEGMENTS
    ]
    def_path = def_file.lower()
    return any(segment.lower() in def_path for segment in qualifying)
