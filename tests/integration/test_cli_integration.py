import json
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from contextcli import cli, output


def _write(root: Path, rel: str, content: str = "x") -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.integration
def test_config_cli_and_gitignore_patterns_combine(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (repo / ".contextcli.json").write_text(
        json.dumps({"extensions": [".py", ".md"], "ignorePatterns": ["docs/**"]}),
        encoding="utf-8",
    )
    _write(repo, ".gitignore", "generated/\n")
    _write(repo, "app.py", "print('app')")
    _write(repo, "docs/guide.md", "# Guide")
    _write(repo, "generated/out.py", "x = 1")
    _write(repo, "scratch/tmp.py", "y = 2")
    _write(repo, "src/lib.py", "z = 3")

    assert cli.main(["--stdout", "-i", "scratch/"]) == 0

    out = capsys.readouterr().out
    assert "## ./app.py" in out
    assert "## ./src/lib.py" in out
    for excluded in ("docs", "generated", "scratch"):
        assert excluded not in out


@pytest.mark.integration
def test_no_ignore_brings_back_gitignored_files(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, ".gitignore", "*.md\n")
    _write(repo, "README.md", "# Demo")

    cli.main(["--stdout"])
    assert "README.md" not in capsys.readouterr().out

    cli.main(["--stdout", "--no-ignore"])
    assert "## ./README.md" in capsys.readouterr().out


@pytest.mark.integration
def test_depth_size_and_no_content_flags(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "small.py", "a = 1")
    _write(repo, "big.py", "#" * 3000)
    _write(repo, "pkg/deep.py", "b = 2")

    assert cli.main(["--stdout", "--depth", "1", "--max-size", "2", "--no-content"]) == 0

    out = capsys.readouterr().out
    assert out == "# Project Files Structure\n\n├── small.py\n└── pkg/\n\n"


@pytest.mark.integration
def test_clipboard_failure_prints_document(repo: Path, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "app.py", "print('app')")
    mocker.patch.object(output.pyperclip, "copy", side_effect=output.pyperclip.PyperclipException("headless"))

    assert cli.main([]) == 0

    assert "## ./app.py" in capsys.readouterr().out


@pytest.mark.integration
def test_config_commands_drive_the_scan(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(repo, "App.vue", "<template/>")

    assert cli.main(["config", "init"]) == 0
    assert cli.main(["config", "add-extension", ".vue"]) == 0
    capsys.readouterr()

    cli.main(["--stdout"])

    assert "## ./App.vue" in capsys.readouterr().out
