"""File classification: decide which files take part in ranking."""

from __future__ import annotations

import re

from contribution_ranker.domain.entities import FileCategory

CONFIG_NAMES: frozenset[str] = frozenset(
    {
        "pyproject.toml", "setup.py", "setup.cfg", "conftest.py",
        "package.json", "tsconfig.json", "webpack.config.js", "vite.config.ts",
        "babel.config.js", "jest.config.js", "rollup.config.js",
        "requirements.txt", "requirements.in",
        "pipfile", "cargo.toml", "go.mod", "go.sum",
        "gemfile", "build.gradle", "pom.xml",
        "makefile", "cmakelists.txt", "justfile",
        "dockerfile", "docker-compose.yml", "docker-compose.yaml",
        ".env.example",
        "tox.ini", ".flake8", "ruff.toml", ".prettierrc", ".eslintrc.js",
    }
)

CONFIG_EXTENSIONS: frozenset[str] = frozenset(
    {".toml", ".ini", ".cfg", ".yaml", ".yml", ".json", ".lock", ".properties"}
)

TEST_INDICATORS: tuple[str, ...] = (
    "tests/", "test/", "spec/", "__tests__/", "testdata/", "fixtures/",
)

_TEST_NAME_RE = re.compile(
    r"(^test_.*|.*_test\.[a-z]+$|.*\.test\.[a-z]+$|.*\.spec\.[a-z]+$|.*Test\.java$|.*Tests?\.cs$)"
)

GENERATED_SUFFIXES: tuple[str, ...] = (
    "_pb2.py", "_pb2_grpc.py", ".pb.go", ".pb.cc", ".pb.h",
    ".generated.ts", ".generated.cs", ".g.dart", ".designer.cs",
    ".min.js", ".min.css", ".bundle.js",
)

GENERATED_DIRS: frozenset[str] = frozenset(
    {"generated", "gen", "dist", "build", "node_modules", "vendor", "migrations"}
)

DOCS_INDICATORS: tuple[str, ...] = (
    "docs/", "doc/", "documentation/",
)

DOCS_EXTENSIONS: frozenset[str] = frozenset({".md", ".rst", ".txt", ".adoc"})

_EXCLUDED: frozenset[FileCategory] = frozenset(
    {FileCategory.TEST, FileCategory.CONFIG, FileCategory.GENERATED, FileCategory.DOCS}
)


def _filename(path: str) -> str:
    return path.rsplit("/", maxsplit=1)[-1]


def _extension(path: str) -> str:
    name = _filename(path)
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


def classify(path: str) -> FileCategory:
    """Assign a :class:`FileCategory` based on file name / path heuristics."""
    name = _filename(path)
    name_lower = name.lower()
    path_lower = "/" + path.lower().lstrip("/")

    if any(name_lower.endswith(suffix) for suffix in GENERATED_SUFFIXES):
        return FileCategory.GENERATED
    if any(part in GENERATED_DIRS for part in path_lower.split("/")[:-1]):
        return FileCategory.GENERATED
    if name_lower in CONFIG_NAMES or _extension(path) in CONFIG_EXTENSIONS:
        return FileCategory.CONFIG
    if _TEST_NAME_RE.match(name) or any("/" + ind in path_lower for ind in TEST_INDICATORS):
        return FileCategory.TEST
    if _extension(path) in DOCS_EXTENSIONS or any(
        "/" + ind in path_lower for ind in DOCS_INDICATORS
    ):
        return FileCategory.DOCS

    return FileCategory.SOURCE


def is_rankable(category: FileCategory) -> bool:
    """Only plain source files are scored and ranked."""
    return category not in _EXCLUDED


# ── Language inference ──────────────────────────────────────────────────────

_LANGUAGE_MAP: dict[str, str] = {
    ".py": "python",
    ".pyw": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".java": "java",
    ".kt": "kotlin",
    ".cs": "c#",
    ".c": "c",
    ".h": "c",
    ".cpp": "c++",
    ".cc": "c++",
    ".hpp": "c++",
    ".swift": "swift",
    ".php": "php",
    ".scala": "scala",
    ".sh": "shell",
    ".bash": "shell",
}


def infer_language(path: str) -> str:
    """Lower-case language tag from the file extension, ``"unknown"`` otherwise."""
    return _LANGUAGE_MAP.get(_extension(path), "unknown")
