import os
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from contextcli import scanner
from contextcli.config import ScanConfig, ScanResult
from contextcli.exceptions import DirectoryAccessError
from contextcli.ignore import IgnoreSet
from contextcli.scanner import scan, scan_directory, tree_prefix


def _write(root: Path, rel: str, content: str | bytes = "x") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def _rels(result: ScanResult) -> list[str]:
    return [rec.rel for rec in result.included_files]


@pytest.mark.unit
def test_tree_prefix() -> None:
    assert tree_prefix(()) == ""
    assert tree_prefix((False, True)) == "│       "
    assert tree_prefix((True, False)) == "    │   "


@pytest.mark.unit
def test_scan_lists_tree_and_included_files(tmp_path: Path) -> None:
    _write(tmp_path, "a.txt", "hello")
    _write(tmp_path, "sub/b.md", "world")

    result = scan(tmp_path, allowed_extensions={".txt", ".md"})

    assert _rels(result) == ["a.txt", "sub/b.md"]
    assert result.tree_lines == ["├── a.txt", "└── sub/", "    └── b.md"]
    assert result.tree_text == "├── a.txt\n└── sub/\n    └── b.md\n"
    assert all(rec.path.is_absolute() for rec in result.included_files)


@pytest.mark.unit
def test_files_come_before_directories_in_code_point_order(tmp_path: Path) -> None:
    for rel in ("b.txt", "a.txt", "A.txt", "z/1.txt", "c/2.txt", "c/0.txt", "c/d/3.txt"):
        _write(tmp_path, rel)

    result = scan(tmp_path, allowed_extensions={".txt"})

    assert _rels(result) == ["A.txt", "a.txt", "b.txt", "c/0.txt", "c/2.txt", "c/d/3.txt", "z/1.txt"]
    assert result.tree_lines == [
        "├── A.txt",
        "├── a.txt",
        "├── b.txt",
        "├── c/",
        "│   ├── 0.txt",
        "│   ├── 2.txt",
        "│   └── d/",
        "│       └── 3.txt",
        "└── z/",
        "    └── 1.txt",
    ]


@pytest.mark.unit
def test_directories_never_appear_in_included_files(tmp_path: Path) -> None:
    _write(tmp_path, "pkg.py/inner.py")
    _write(tmp_path, "top.py")

    result = scan(tmp_path, allowed_extensions={".py"})

    assert _rels(result) == ["top.py", "pkg.py/inner.py"]
    assert all(rec.path.is_file() for rec in result.included_files)


@pytest.mark.unit
def test_ignored_files_leave_no_trace(tmp_path: Path) -> None:
    _write(tmp_path, "app.log")
    _write(tmp_path, "app.txt")
    ignore_set = IgnoreSet.from_patterns(["**/*.log"])

    result = scan(tmp_path, allowed_extensions={".log", ".txt"}, ignore_set=ignore_set)

    assert _rels(result) == ["app.txt"]
    assert not any("app.log" in line for line in result.tree_lines)


@pytest.mark.unit
def test_extension_filter_excludes_files(tmp_path: Path) -> None:
    _write(tmp_path, "app.log")
    _write(tmp_path, "app.txt")

    result = scan(tmp_path, allowed_extensions={".txt"})

    assert _rels(result) == ["app.txt"]


@pytest.mark.unit
def test_bare_file_names_are_allowed(tmp_path: Path) -> None:
    _write(tmp_path, "Dockerfile", "FROM python")
    _write(tmp_path, "Makefile", "all:")

    result = scan(tmp_path, allowed_extensions={"Dockerfile"})

    assert _rels(result) == ["Dockerfile"]


@pytest.mark.unit
def test_ignored_directory_is_pruned(tmp_path: Path) -> None:
    _write(tmp_path, "node_modules/pkg/index.js")
    _write(tmp_path, "src/index.js")
    ignore_set = IgnoreSet.from_patterns(["**/node_modules/**"])

    result = scan(tmp_path, allowed_extensions={".js"}, ignore_set=ignore_set)

    assert _rels(result) == ["src/index.js"]
    assert result.tree_lines == ["└── src/", "    └── index.js"]


@pytest.mark.unit
def test_ignore_patterns_match_paths_relative_to_root(tmp_path: Path) -> None:
    _write(tmp_path, "build/out.txt")
    _write(tmp_path, "src/build/keep.txt")
    ignore_set = IgnoreSet.from_patterns(["build/"])

    result = scan(tmp_path, allowed_extensions={".txt"}, ignore_set=ignore_set)

    assert _rels(result) == ["src/build/keep.txt"]


@pytest.mark.unit
def test_size_limit_is_inclusive(tmp_path: Path) -> None:
    _write(tmp_path, "exact.txt", "0123456789")
    _write(tmp_path, "over.txt", "0123456789a")

    limited = scan(tmp_path, allowed_extensions={".txt"}, max_file_size_bytes=10)
    unlimited = scan(tmp_path, allowed_extensions={".txt"})

    assert _rels(limited) == ["exact.txt"]
    assert _rels(unlimited) == ["exact.txt", "over.txt"]


@pytest.mark.unit
def test_binary_files_are_skipped(tmp_path: Path) -> None:
    _write(tmp_path, "blob.dat", b"head\x00tail")
    _write(tmp_path, "text.dat", b"just text")

    result = scan(tmp_path, allowed_extensions={".dat"})

    assert _rels(result) == ["text.dat"]


@pytest.mark.unit
def test_depth_zero_lists_nothing(tmp_path: Path) -> None:
    _write(tmp_path, "a.txt")

    result = scan(tmp_path, max_depth=0, allowed_extensions={".txt"})

    assert result.tree_lines == []
    assert result.included_files == []


@pytest.mark.unit
def test_depth_limits_recursion(tmp_path: Path) -> None:
    _write(tmp_path, "a.txt")
    _write(tmp_path, "sub/b.txt")
    _write(tmp_path, "sub/deeper/c.txt")

    one = scan(tmp_path, max_depth=1, allowed_extensions={".txt"})
    two = scan(tmp_path, max_depth=2, allowed_extensions={".txt"})

    assert one.tree_lines == ["├── a.txt", "└── sub/"]
    assert _rels(one) == ["a.txt"]
    assert _rels(two) == ["a.txt", "sub/b.txt"]
    assert "    └── deeper/" in two.tree_lines
    assert not any("c.txt" in line for line in two.tree_lines)


@pytest.mark.unit
def test_last_entry_is_decided_before_filtering(tmp_path: Path) -> None:
    _write(tmp_path, "a.txt")
    _write(tmp_path, "z.bin", b"\x00")

    result = scan(tmp_path, allowed_extensions={".txt"})

    assert result.tree_lines == ["├── a.txt"]


@pytest.mark.unit
def test_symlinks_are_not_followed(tmp_path: Path) -> None:
    target = _write(tmp_path, "a.txt")
    _write(tmp_path, "sub/b.txt")
    try:
        os.symlink(target, tmp_path / "link.txt")
        os.symlink(tmp_path / "sub", tmp_path / "linked", target_is_directory=True)
    except OSError:
        pytest.skip("symlinks are not supported here")

    result = scan(tmp_path, allowed_extensions={".txt"})

    assert _rels(result) == ["a.txt", "sub/b.txt"]
    assert not any("link" in line for line in result.tree_lines)


@pytest.mark.unit
def test_inaccessible_subdirectory_gets_warning_line(tmp_path: Path, mocker: MockerFixture) -> None:
    _write(tmp_path, "a.txt")
    _write(tmp_path, "locked/secret.txt")
    _write(tmp_path, "open/b.txt")
    original = scanner._list_entries

    def fake_list_entries(directory: Path) -> list[os.DirEntry[str]]:
        if directory.name == "locked":
            raise PermissionError(13, "Permission denied", str(directory))
        return original(directory)

    mocker.patch.object(scanner, "_list_entries", side_effect=fake_list_entries)
    log = mocker.Mock()

    result = scan(tmp_path, allowed_extensions={".txt"}, log=log)

    assert result.tree_lines == [
        "├── a.txt",
        "├── locked/",
        "│   └── [!] Cannot access: locked/ (PermissionError)",
        "└── open/",
        "    └── b.txt",
    ]
    assert _rels(result) == ["a.txt", "open/b.txt"]
    log.warning.assert_called_once()


@pytest.mark.unit
def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(DirectoryAccessError) as exc_info:
        scan(tmp_path / "missing", allowed_extensions={".txt"})

    assert exc_info.value.path == (tmp_path / "missing").absolute()


@pytest.mark.unit
def test_scan_directory_appends_to_existing_result(tmp_path: Path) -> None:
    _write(tmp_path, "a.txt")
    result = ScanResult(tree_lines=["existing"])

    returned = scan_directory(tmp_path, ScanConfig(extensions=frozenset({".txt"})), result=result)

    assert returned is result
    assert result.tree_lines == ["existing", "└── a.txt"]
