from pathlib import Path

import pytest

from simplicity_ls import __version__
from simplicity_ls.__main__ import _discover_workspace_root, build_parser, main
from simplicity_ls.config import CONFIG_FILENAME


def _run(argv) -> int:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_analyze_clean_file(tmp_path: Path, sample_source, capsys):
    path = tmp_path / "clean.simf"
    path.write_text(sample_source)

    assert _run(["--analyze", str(path)]) == 0
    assert capsys.readouterr().out.strip() == f"{path}: no issues found"


def test_analyze_reports_first_error(tmp_path: Path, capsys):
    path = tmp_path / "broken.simf"
    path.write_text("fn main() {\n    let x = ;\n}\n")

    assert _run(["--analyze", str(path)]) == 1
    out = capsys.readouterr().out.splitlines()
    assert out[0] == f"{path}:2:13: error [simplicity-ls] Expected expression, found `;`"
    assert out[1] == "      let x = ;"
    assert out[2].endswith("^")


def test_analyze_uses_configured_source(tmp_path: Path, capsys):
    (tmp_path / CONFIG_FILENAME).write_text('{"diagnostics": {"source": "simc"}}')
    nested = tmp_path / "src"
    nested.mkdir()
    path = nested / "prog.simf"
    path.write_text("fn helper() {}\n")

    assert _run(["--analyze", str(path)]) == 1
    assert "error [simc] Program must contain a `main` function" in capsys.readouterr().out


def test_analyze_missing_file(tmp_path: Path, capsys):
    assert _run(["--analyze", str(tmp_path / "nope.simf")]) == 2
    assert "File not found" in capsys.readouterr().err


def test_analyze_rejects_tcp(tmp_path: Path):
    assert _run(["--analyze", str(tmp_path / "x.simf"), "--tcp"]) == 2


def test_discover_workspace_root(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text("{}")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert _discover_workspace_root(nested / "file.simf") == tmp_path


def test_version_flag(capsys):
    assert _run(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"simplicity-ls {__version__}"


@pytest.mark.parametrize(("value", "expected"), [("debug", "DEBUG"), ("Info", "INFO")])
def test_log_level_is_case_insensitive(value, expected):
    assert build_parser().parse_args(["--log-level", value]).log_level == expected


def test_unknown_log_level_is_rejected():
    assert _run(["--log-level", "chatty"]) == 2


def test_analyze_path_is_parsed_as_path(tmp_path: Path):
    args = build_parser().parse_args(["--analyze", str(tmp_path / "a.simf")])
    assert args.analyze == tmp_path / "a.simf"
    assert not args.tcp
