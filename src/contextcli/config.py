from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, computed_field

from contextcli.ignore import IgnoreSet

CONFIG_FILE_NAMES = (".contextcli.json", ".contextcli.yaml", ".contextcli.yml")
CURRENT_SCHEMA_VERSION = 1


class FileType(StrEnum):
    """Categorization of included files, used to pick a code fence language."""

    CSHARP = auto()
    JAVASCRIPT = auto()
    TYPESCRIPT = auto()
    PYTHON = auto()
    JAVA = auto()
    GO = auto()
    RUST = auto()
    PHP = auto()
    RUBY = auto()
    HTML = auto()
    CSS = auto()
    SCSS = auto()
    JSON = auto()
    YAML = auto()
    XML = auto()
    BASH = auto()
    BATCH = auto()
    POWERSHELL = auto()
    SQL = auto()
    MARKDOWN = auto()
    OTHER = auto()


EXT2LANG: dict[str, FileType] = {
    ".bat": FileType.BATCH,
    ".cs": FileType.CSHARP,
    ".css": FileType.CSS,
    ".go": FileType.GO,
    ".html": FileType.HTML,
    ".java": FileType.JAVA,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".md": FileType.MARKDOWN,
    ".php": FileType.PHP,
    ".ps1": FileType.POWERSHELL,
    ".py": FileType.PYTHON,
    ".rb": FileType.RUBY,
    ".rs": FileType.RUST,
    ".scss": FileType.SCSS,
    ".sh": FileType.BASH,
    ".sql": FileType.SQL,
    ".ts": FileType.TYPESCRIPT,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.CSHARP: "csharp",
    FileType.JAVASCRIPT: "javascript",
    FileType.TYPESCRIPT: "typescript",
    FileType.PYTHON: "python",
    FileType.JAVA: "java",
    FileType.GO: "go",
    FileType.RUST: "rust",
    FileType.PHP: "php",
    FileType.RUBY: "ruby",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.SCSS: "scss",
    FileType.JSON: "json",
    FileType.YAML: "yaml",
    FileType.XML: "xml",
    FileType.BASH: "bash",
    FileType.BATCH: "batch",
    FileType.POWERSHELL: "powershell",
    FileType.SQL: "sql",
    FileType.MARKDOWN: "markdown",
    FileType.OTHER: "",
}

# Extensions that are never sniffed for binary content.
TEXT_EXTENSIONS = frozenset({
    ".txt",
    ".md",
    ".json",
    ".xml",
    ".yaml",
    ".yml",
    ".csv",
    ".html",
    ".css",
    ".js",
    ".ts",
    ".py",
    ".rb",
    ".php",
    ".pl",
    ".sh",
    ".bat",
    ".ps1",
    ".sql",
    ".java",
    ".cs",
    ".go",
    ".rs",
    ".c",
    ".cpp",
    ".h",
    ".hpp",
    ".csproj",
    ".sln",
    ".props",
    ".targets",
    ".gitignore",
    ".gitattributes",
})

DEFAULT_EXTENSIONS = [
    ".cs",
    ".js",
    ".ts",
    ".py",
    ".java",
    ".go",
    ".rs",
    ".php",
    ".rb",
    ".html",
    ".css",
    ".scss",
    ".json",
    ".yaml",
    ".yml",
    ".xml",
    ".sh",
    ".bat",
    ".ps1",
    ".sql",
    ".md",
    ".txt",
    ".csproj",
    ".sln",
    ".props",
    ".targets",
    "requirements.txt",
    "Dockerfile",
    ".env.example",
    "pyproject.toml",
    "package.json",
]

DEFAULT_IGNORE_PATTERNS = [
    "**/bin/**",
    "**/obj/**",
    "**/node_modules/**",
    "**/.git/**",
    "**/.svn/**",
    "**/.hg/**",
    "**/.vs/**",
    "**/.vscode/**",
    "**/*.log",
    "**/*.dll",
    "**/*.exe",
    "**/*.so",
    "**/*.dylib",
    "**/*.pyc",
    "**/*.cache",
    "**/__pycache__/**",
    ".env",
]

DEFAULT_MAX_FILE_SIZE_KB = 1024


def file_extension(name: str) -> str:
    """Return the extension of a file name, dot included.

    Unlike ``Path.suffix``, a leading-dot name such as ``.gitignore`` is its own
    extension. A trailing dot yields no extension.

    Args:
        name (str): the file name (not a path)

    Returns:
        str: the extension, e.g. ".py", or "" when the name has none
    """
    idx = name.rfind(".")
    if idx == -1 or idx == len(name) - 1:
        return ""
    return name[idx:]


def guess_file_type(path: Path) -> FileType:
    """Guess a file's type from its extension.

    Args:
        path (Path): The file path to guess the type for.

    Returns:
        FileType: The guessed file type, or FileType.OTHER if unknown.
    """
    return EXT2LANG.get(file_extension(path.name).lower(), FileType.OTHER)


def guess_language(file_type: FileType) -> str:
    """Get the code fence language for a given file type, or "" if none."""
    return _FENCE_LANGUAGE.get(file_type, "")


class FileRecord(BaseModel):
    """Metadata for a file that survived every scan filter.

    Attributes:
        path: Absolute path to the file on disk.
        rel: Path relative to the scan root, with POSIX separators.
        size: File size in bytes.
        mtime: POSIX mtime (float seconds since epoch).
        file_type: Categorized file type.
        language: Code fence language (may be empty).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to the scan root")
    size: int = Field(..., ge=0, description="File size in bytes")
    mtime: float = Field(..., description="POSIX modification time (seconds)")

    @computed_field
    @property
    def file_type(self) -> FileType:
        """Categorize the file type based on its extension."""
        return guess_file_type(self.path)

    @computed_field
    @property
    def language(self) -> str:
        """Get the code fence language based on the file type."""
        return guess_language(self.file_type)


class ScanConfig(BaseModel):
    """Immutable snapshot of the effective settings for one scan.

    ``None`` is the unbounded sentinel for both ``max_depth`` and
    ``max_file_size_bytes``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    extensions: frozenset[str] = Field(default_factory=frozenset, description="Lower-cased allow-list")
    max_depth: int | None = Field(default=None, ge=0, description="Maximum directory depth")
    max_file_size_bytes: int | None = Field(default=None, ge=0, description="Maximum file size in bytes")
    ignore_set: InstanceOf[IgnoreSet] = Field(default_factory=IgnoreSet, description="Merged ignore matchers")

    def is_ignored(self, rel: str, *, is_dir: bool) -> bool:
        """Tell whether a root-relative path is excluded by the ignore patterns."""
        return self.ignore_set.should_ignore(rel, is_dir=is_dir)


class ScanResult(BaseModel):
    """Tree lines and included files produced by one scan.

    The scanner only appends to both lists.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    included_files: list[FileRecord] = Field(default_factory=list)
    tree_lines: list[str] = Field(default_factory=list)

    @property
    def tree_text(self) -> str:
        """Return the tree, one newline-terminated line per entry."""
        return "".join(f"{line}\n" for line in self.tree_lines)
