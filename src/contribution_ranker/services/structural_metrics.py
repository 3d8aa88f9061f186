"""Structural metrics extraction (cyclomatic count and nesting per function)."""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from typing import Sequence

from contribution_ranker.domain.entities import FileNode, FunctionMetrics, SourceFile
from contribution_ranker.services.file_filter import infer_language

_PYTHON_LANGUAGES = frozenset({"python"})
_MODULE = "<module>"

# ── Python (ast) ────────────────────────────────────────────────────────────


class _BodyVisitor(ast.NodeVisitor):
    """Measure one function body without descending into nested definitions."""

    def __init__(self) -> None:
        self.complexity = 1
        self.depth = 0
        self.max_depth = 0

    def _enter(self) -> None:
        self.depth += 1
        self.max_depth = max(self.max_depth, self.depth)

    def _leave(self) -> None:
        self.depth -= 1

    def _nested(self, node: ast.AST) -> None:
        self._enter()
        self.generic_visit(node)
        self._leave()

    # Nested definitions are measured on their own.
    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        return None

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        return None

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        return None

    def visit_If(self, node: ast.If) -> None:
        self.complexity += 1
        self._enter()
        self.visit(node.test)
        for stmt in node.body:
            self.visit(stmt)
        self._leave()
        orelse = node.orelse
        if len(orelse) == 1 and isinstance(orelse[0], ast.If):
            # elif: same depth as the if it belongs to
            self.visit_If(orelse[0])
        elif orelse:
            self._enter()
            for stmt in orelse:
                self.visit(stmt)
            self._leave()

    def visit_For(self, node: ast.For) -> None:
        self.complexity += 1
        self._nested(node)

    visit_AsyncFor = visit_For  # type: ignore[assignment]

    def visit_While(self, node: ast.While) -> None:
        self.complexity += 1
        self._nested(node)

    def visit_Try(self, node: ast.Try) -> None:
        self._nested(node)

    visit_TryStar = visit_Try  # type: ignore[assignment]

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        self.complexity += 1
        self.generic_visit(node)

    def visit_With(self, node: ast.With) -> None:
        self._nested(node)

    visit_AsyncWith = visit_With  # type: ignore[assignment]

    def visit_Match(self, node: ast.Match) -> None:
        self._nested(node)

    def visit_match_case(self, node: ast.match_case) -> None:
        self.complexity += 1
        self.generic_visit(node)

    def visit_IfExp(self, node: ast.IfExp) -> None:
        self.complexity += 1
        self.generic_visit(node)

    def visit_BoolOp(self, node: ast.BoolOp) -> None:
        self.complexity += len(node.values) - 1
        self.generic_visit(node)

    def visit_comprehension(self, node: ast.comprehension) -> None:
        self.complexity += 1 + len(node.ifs)
        self.generic_visit(node)


def _measure(name: str, body: Sequence[ast.stmt]) -> FunctionMetrics:
    visitor = _BodyVisitor()
    for stmt in body:
        visitor.visit(stmt)
    return FunctionMetrics(
        name=name, cyclomatic=visitor.complexity, nesting_depth=visitor.max_depth
    )


def _python_functions(source: str) -> list[FunctionMetrics]:
    tree = ast.parse(source)
    functions: list[FunctionMetrics] = []

    module_body = [
        stmt
        for stmt in tree.body
        if not isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef))
    ]
    if module_body:
        functions.append(_measure(_MODULE, module_body))

    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            functions.append(_measure(node.name, node.body))
    return functions


# ── Brace languages (heuristic) ─────────────────────────────────────────────

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_STRING_RE = re.compile(r""""(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|`(?:\\.|[^`\\])*`""")
_LINE_COMMENT_RE = re.compile(r"//.*$")
_DECISION_RE = re.compile(r"\b(?:if|for|foreach|while|case|catch|elif|elsif|unless|until)\b")
_BOOL_OP_RE = re.compile(r"&&|\|\|")
_CONTROL_WORDS = frozenset(
    {"if", "for", "foreach", "while", "switch", "catch", "return", "else", "new", "throw"}
)

_FUNC_KEYWORD_RE = re.compile(
    r"^\s*(?:(?:export|default|public|private|protected|internal|static|async|final|"
    r"override|virtual|inline|pub(?:\([\w:]+\))?|extern|unsafe|const)\s+)*"
    r"(?:func|fun|function|fn|def|sub)\b"
)
_ARROW_RE = re.compile(r"=\s*(?:async\s*)?(?:\([^)]*\)|\w+)\s*=>\s*\{")
_C_SIGNATURE_RE = re.compile(
    r"^\s*(?:[\w<>\[\],.*&:?]+\s+)+\**(?P<name>\w+)\s*\([^;{}]*\)\s*"
    r"(?:const\s*)?(?:throws\s+[\w.,\s]+)?\s*\{?\s*$"
)


def _strip_noise(content: str) -> list[str]:
    """Drop block comments (keeping line count), strings and line comments."""
    without_blocks = _BLOCK_COMMENT_RE.sub(lambda m: "\n" * m.group(0).count("\n"), content)
    lines: list[str] = []
    for line in without_blocks.splitlines():
        line = _STRING_RE.sub('""', line)
        line = _LINE_COMMENT_RE.sub("", line)
        lines.append(line)
    return lines


def _starts_function(line: str) -> bool:
    if _FUNC_KEYWORD_RE.match(line) or _ARROW_RE.search(line):
        return True
    match = _C_SIGNATURE_RE.match(line)
    if not match:
        return False
    first_word = line.strip().split("(", 1)[0].split()
    return bool(first_word) and first_word[0] not in _CONTROL_WORDS and match["name"] not in _CONTROL_WORDS


_NAME_CALL_RE = re.compile(r"(\w+)\s*\(")
_NAME_ASSIGN_RE = re.compile(r"(\w+)\s*=")
_SIGNATURE_WORDS = frozenset({"func", "fun", "function", "fn", "def", "sub", "async"})


def _function_name(line: str, line_no: int) -> str:
    for word in _NAME_CALL_RE.findall(line):
        if word not in _SIGNATURE_WORDS:
            return word
    assigned = _NAME_ASSIGN_RE.search(line)
    return assigned.group(1) if assigned else f"<anonymous:{line_no}>"


@dataclass
class _Unit:
    name: str
    open_depth: int
    complexity: int = 1
    max_nesting: int = 0


def _brace_functions(content: str) -> list[FunctionMetrics]:
    module = _Unit(name=_MODULE, open_depth=0)
    stack: list[_Unit] = []
    finished: list[_Unit] = []
    depth = 0
    pending: str | None = None

    for line_no, line in enumerate(_strip_noise(content), start=1):
        if pending is not None and not line.lstrip().startswith("{"):
            # a signature only carries over to an Allman-style brace line
            pending = None
        if _starts_function(line):
            pending = _function_name(line, line_no)

        current = stack[-1] if stack else module
        current.complexity += len(_DECISION_RE.findall(line)) + len(_BOOL_OP_RE.findall(line))

        for char in line:
            if char == "{":
                depth += 1
                if pending is not None:
                    stack.append(_Unit(name=pending, open_depth=depth))
                    pending = None
                elif stack:
                    top = stack[-1]
                    top.max_nesting = max(top.max_nesting, depth - top.open_depth)
            elif char == "}":
                if stack and stack[-1].open_depth == depth:
                    finished.append(stack.pop())
                depth = max(depth - 1, 0)
            elif char == ";" and pending is not None:
                pending = None

    finished.extend(stack)
    functions = [
        FunctionMetrics(name=u.name, cyclomatic=u.complexity, nesting_depth=u.max_nesting)
        for u in finished
    ]
    if module.complexity > 1 or not functions:
        functions.insert(0, FunctionMetrics(name=_MODULE, cyclomatic=module.complexity, nesting_depth=0))
    return functions


# ── Lines of code ───────────────────────────────────────────────────────────


def count_lines_of_code(content: str, language: str) -> int:
    """Non-blank lines that are not pure comments."""
    comment_prefixes: tuple[str, ...] = ("#",) if language in _PYTHON_LANGUAGES else ("//", "*", "/*", "#")
    return sum(
        1
        for line in content.splitlines()
        if line.strip() and not line.strip().startswith(comment_prefixes)
    )


# ── Public API ──────────────────────────────────────────────────────────────


def extract_metrics(source: SourceFile) -> FileNode:
    """Build a :class:`FileNode` with per-function metrics from raw content.

    Python files are measured on their ``ast``; anything else (and Python
    that fails to parse) goes through the brace/keyword heuristic.
    """
    language = (source.language or infer_language(source.path)).strip().lower()

    functions: list[FunctionMetrics]
    if language in _PYTHON_LANGUAGES:
        try:
            functions = _python_functions(source.content)
        except (SyntaxError, ValueError):
            functions = _brace_functions(source.content)
    else:
        functions = _brace_functions(source.content)

    return FileNode(
        path=source.path,
        language=language,
        lines_of_code=count_lines_of_code(source.content, language),
        cyclomatic=max((f.cyclomatic for f in functions), default=0),
        nesting_depth=max((f.nesting_depth for f in functions), default=0),
        last_modified=source.last_modified,
        recent_commit=source.recent_commit,
        open_issue=source.open_issue,
        functions=tuple(functions),
    )
