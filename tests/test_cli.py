import json
import logging

import pytest

from cli import EXIT_INVALID_INPUT, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, main, parse_args


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch):
    for name in ("MAX_INPUT_BYTES", "TEXT_ENCODING", "CSV_DELIMITER", "LOG_LEVEL"):
        monkeypatch.delenv(f"DATASHAPE_{name}", raising=False)
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def people_file(tmp_path, people_csv: bytes):
    path = tmp_path / "people.csv"
    path.write_bytes(people_csv)
    return path


def test_parse_args_ingest() -> None:
    args = parse_args(["ingest", "data.csv", "--sort", '{"field": "a"}', "-v"])
    assert args.command == "ingest"
    assert args.file == "data.csv"
    assert args.sort == '{"field": "a"}'
    assert args.filter is None
    assert args.verbose is True


def test_ingest_prints_json(people_file, capsys) -> None:
    assert main(["ingest", str(people_file)]) == EXIT_SUCCESS
    data = json.loads(capsys.readouterr().out)
    assert [row["name"] for row in data] == ["Bob", "alice", "Cy"]
    assert data[0]["joined"] == "2024-01-05T00:00:00.000Z"


def test_ingest_with_filter_and_sort(people_file, capsys) -> None:
    code = main(
        [
            "ingest",
            str(people_file),
            "--filter",
            '{"field": "email", "operator": "contains", "value": "EXAMPLE"}',
            "--sort",
            '{"field": "name", "direction": "desc"}',
        ]
    )
    assert code == EXIT_SUCCESS
    assert [row["name"] for row in json.loads(capsys.readouterr().out)] == ["Cy", "Bob", "alice"]


def test_ingest_writes_output_file(people_file, tmp_path, capsys) -> None:
    output = tmp_path / "out" / "people.json"
    assert main(["ingest", str(people_file), "--output", str(output)]) == EXIT_SUCCESS
    assert len(json.loads(output.read_text(encoding="utf-8"))) == 3
    assert capsys.readouterr().out == ""


def test_existing_output_needs_overwrite(people_file, tmp_path, capsys) -> None:
    output = tmp_path / "people.json"
    output.write_text("[]", encoding="utf-8")

    assert main(["ingest", str(people_file), "--output", str(output)]) == EXIT_RUNTIME_ERROR
    assert "already exists" in capsys.readouterr().err

    assert main(["ingest", str(people_file), "--output", str(output), "--overwrite"]) == EXIT_SUCCESS
    assert len(json.loads(output.read_text(encoding="utf-8"))) == 3


def test_unsupported_format_reports_json_error(tmp_path, capsys) -> None:
    path = tmp_path / "slides.pdf"
    path.write_bytes(b"%PDF-1.4")

    assert main(["ingest", str(path)]) == EXIT_INVALID_INPUT
    err = capsys.readouterr().err
    assert '"error": "Unsupported file format: .pdf (slides.pdf)"' in err


def test_csv_errors_include_details(tmp_path, capsys) -> None:
    path = tmp_path / "bad.csv"
    path.write_bytes(b"a,b\n1,2,3\n")

    assert main(["ingest", str(path)]) == EXIT_INVALID_INPUT
    assert "TooManyFields" in capsys.readouterr().err


def test_missing_input_file(tmp_path, capsys) -> None:
    assert main(["ingest", str(tmp_path / "missing.csv")]) == EXIT_INVALID_INPUT
    assert "not found" in capsys.readouterr().err


def test_invalid_query(people_file, capsys) -> None:
    assert main(["ingest", str(people_file), "--filter", "{oops"]) == EXIT_INVALID_INPUT
    assert "Invalid query" in capsys.readouterr().err


def test_invalid_settings_file(people_file, tmp_path, capsys) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("max_input_bytes: -1\n", encoding="utf-8")

    assert main(["ingest", str(people_file), "--config", str(config)]) == EXIT_INVALID_INPUT
    assert "Invalid settings" in capsys.readouterr().err


def test_size_limit_from_settings_file(people_file, tmp_path, capsys) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("max_input_bytes: 10\n", encoding="utf-8")

    assert main(["ingest", str(people_file), "--config", str(config)]) == EXIT_INVALID_INPUT
    assert "exceeds limit of 10 bytes" in capsys.readouterr().err


def test_semicolon_delimiter_from_environment(tmp_path, monkeypatch, capsys) -> None:
    path = tmp_path / "data.csv"
    path.write_bytes(b"a;b\n1;x\n")
    monkeypatch.setenv("DATASHAPE_CSV_DELIMITER", ";")

    assert main(["ingest", str(path)]) == EXIT_SUCCESS
    assert json.loads(capsys.readouterr().out) == [{"a": 1, "b": "x"}]


def test_formats_lists_extensions(capsys) -> None:
    assert main(["formats"]) == EXIT_SUCCESS
    assert capsys.readouterr().out.split() == [
        ".csv", ".htm", ".html", ".json", ".txt", ".xls", ".xlsx", ".xml",
    ]


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        parse_args(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == "datashape 1.0.0"
