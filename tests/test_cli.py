import io
import json
import os
import subprocess
import sys
import textwrap
import time
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from wordfreq.cli import (
    EXIT_OK,
    EXIT_PARTIAL,
    apply_overrides,
    build_parser,
    main,
    run_cli,
)
from wordfreq.counting.aggregator import AggregationResult
from wordfreq.extraction.sources import LiteralSource, LocalSource, RemoteSource


@pytest.fixture(autouse=True)
def quiet_app():
    """Skip logging setup and .env loading for CLI runs."""
    with patch("wordfreq.cli.initialize_app") as mock_init, patch(
        "wordfreq.core.config.loader.load_dotenv"
    ):
        yield mock_init


@pytest.fixture
def console_buffer():
    return io.StringIO()


@pytest.fixture
def console(console_buffer):
    return Console(file=console_buffer, width=200, color_system=None)


def count_lines(out: str):
    return {line for line in out.splitlines() if ": " in line}


def test_string_source(capsys, console):
    status = run_cli(["-s", "cat dog cat"], console=console)

    out = capsys.readouterr().out
    assert status == EXIT_OK
    assert {"cat: 2", "dog: 1"} <= count_lines(out)


def test_string_and_files_are_aggregated(capsys, console, tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("dog dog", encoding="utf-8")
    second.write_text("cat, bird!", encoding="utf-8")

    status = run_cli(
        ["-s", "cat dog cat", "-f", f"{first} {second}"], console=console
    )

    out = capsys.readouterr().out
    assert status == EXIT_OK
    assert {"cat: 3", "dog: 3", "bird: 1"} <= count_lines(out)


def test_missing_file_is_reported_and_others_printed(
    capsys, console, console_buffer, tmp_path
):
    missing = str(tmp_path / "missing.txt")

    status = run_cli(["-s", "still here", "-f", missing], console=console)

    out = capsys.readouterr().out
    assert status == EXIT_PARTIAL
    assert {"still: 1", "here: 1"} <= count_lines(out)
    assert missing in console_buffer.getvalue()


def test_no_sources_is_usage_error(capsys, quiet_app):
    with patch("wordfreq.cli.aggregate_sources") as mock_aggregate:
        with pytest.raises(SystemExit) as excinfo:
            run_cli([])

    assert excinfo.value.code == 2
    assert "at least 1" in capsys.readouterr().err
    mock_aggregate.assert_not_called()
    quiet_app.assert_not_called()


def test_blank_arguments_are_no_sources():
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-s", "", "-u", "   "])
    assert excinfo.value.code == 2


def test_urls_are_split_on_whitespace(console):
    result = AggregationResult(counts={})
    with patch("wordfreq.cli.aggregate_sources", return_value=result) as mock_aggregate:
        run_cli(["-u", "http://a.example/  http://b.example/"], console=console)

    sources = mock_aggregate.call_args[0][0]
    assert sources == [RemoteSource("http://a.example/"), RemoteSource("http://b.example/")]


def test_json_export(console, tmp_path):
    output_file = tmp_path / "result.json"

    run_cli(["-s", "a b a", "--json", str(output_file)], console=console)

    with open(output_file, encoding="utf-8") as f:
        data = json.load(f)
    assert data["counts"] == {"a": 2, "b": 1}
    assert data["sources"][0]["kind"] == "literal"


def test_overrides_are_applied(console):
    result = AggregationResult(counts={})
    with patch("wordfreq.cli.aggregate_sources", return_value=result) as mock_aggregate:
        run_cli(
            ["-f", "x.txt", "--max-workers", "2", "--timeout", "3", "--deadline", "9"],
            console=console,
        )

    assert mock_aggregate.call_args[0][0] == [LocalSource("x.txt")]
    settings = mock_aggregate.call_args[0][1]
    assert settings.aggregation.max_workers == 2
    assert settings.aggregation.deadline_seconds == 9
    assert settings.http.timeout_seconds == 3


@pytest.mark.parametrize(
    "flag,value", [("--max-workers", "0"), ("--timeout", "0"), ("--deadline", "-1")]
)
def test_invalid_overrides_are_usage_errors(flag, value):
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-s", "text", flag, value])
    assert excinfo.value.code == 2


def test_apply_overrides_leaves_settings_untouched(app_settings):
    args = build_parser().parse_args(["-s", "x", "--max-workers", "7"])

    updated = apply_overrides(app_settings, args)

    assert updated.aggregation.max_workers == 7
    assert app_settings.aggregation.max_workers == 4
    assert updated.http is app_settings.http


def test_literal_source_passed_through(console):
    result = AggregationResult(counts={"x": 1})
    with patch("wordfreq.cli.aggregate_sources", return_value=result) as mock_aggregate:
        status = run_cli(["-s", "x"], console=console)

    assert status == EXIT_OK
    assert mock_aggregate.call_args[0][0] == [LiteralSource("x")]


def test_malformed_environment_is_usage_error(capsys, monkeypatch):
    monkeypatch.setenv("WORDFREQ_MAX_WORKERS", "many")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["-s", "text"])

    assert excinfo.value.code == 2
    assert "WORDFREQ_MAX_WORKERS" in capsys.readouterr().err


def test_main_exits_normally_without_stalled_workers(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["wordfreq", "-s", "x"])
    with patch("wordfreq.cli.run_cli", return_value=EXIT_OK), patch(
        "wordfreq.cli.stalled_workers", return_value=[]
    ), patch("wordfreq.cli.os._exit") as mock_exit:
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == EXIT_OK
    mock_exit.assert_not_called()


def test_main_exits_immediately_with_stalled_workers(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["wordfreq", "-s", "x", "--deadline", "1"])
    with patch("wordfreq.cli.run_cli", return_value=EXIT_PARTIAL), patch(
        "wordfreq.cli.stalled_workers", return_value=[object()]
    ), patch("wordfreq.cli.os._exit") as mock_exit, patch(
        "wordfreq.cli.logging.shutdown"
    ):
        with pytest.raises(SystemExit):
            main()

    mock_exit.assert_called_once_with(EXIT_PARTIAL)


SLOW_SOURCE_SCRIPT = textwrap.dedent(
    """
    import sys
    import time

    from wordfreq import cli
    from wordfreq.extraction.extractors import LiteralTextExtractor

    def slow_extract(self):
        time.sleep(30)
        return self.source.text

    LiteralTextExtractor.extract = slow_extract
    sys.argv = ["wordfreq", "-s", "stuck", "-f", sys.argv[1], "--deadline", "0.5"]
    cli.main()
    """
)


@pytest.mark.concurrency
def test_deadline_bounds_process_lifetime(tmp_path):
    quick = tmp_path / "quick.txt"
    quick.write_text("quick words", encoding="utf-8")
    project_root = Path(__file__).resolve().parents[1]
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(project_root), env.get("PYTHONPATH")])
    )

    started = time.monotonic()
    completed = subprocess.run(
        [sys.executable, "-c", SLOW_SOURCE_SCRIPT, str(quick)],
        cwd=str(tmp_path),
        env=env,
        capture_output=True,
        text=True,
        timeout=25,
    )
    elapsed = time.monotonic() - started

    assert completed.returncode == EXIT_PARTIAL
    assert {"quick: 1", "words: 1"} <= count_lines(completed.stdout)
    assert elapsed < 15
