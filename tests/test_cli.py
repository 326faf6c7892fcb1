from __future__ import annotations

import threading

import pytest
from watchfiles import Change

from typescript_scaffolder.cli.commands.watch import SampleFilesFilter, regenerate, watch_interfaces
from typescript_scaffolder.cli.main import COMMANDS, build_parser, main


def minimal_args(command: str) -> list[str]:
    return {
        "interfaces": ["interfaces", "-i", "in", "-o", "out"],
        "apiclient-file": ["apiclient-file", "-c", "c.json", "-i", "in", "-o", "out"],
        "apiclient-dir": ["apiclient-dir", "-c", "cfg", "-i", "in", "-o", "out"],
        "apiclient-registry": ["apiclient-registry", "-a", "api"],
        "webhooks": ["webhooks", "-c", "cfg", "-i", "in", "-o", "out"],
        "webhook-app": ["webhook-app", "-c", "cfg", "-i", "in", "-o", "out"],
        "envloader": ["envloader", "-e", ".env", "-o", "out", "-f", "env.ts"],
        "json-schemas": ["json-schemas", "-i", "in", "-o", "out"],
        "watch": ["watch", "-i", "in", "-o", "out"],
    }[command]


def test_every_command_is_registered():
    parser = build_parser()
    for command in COMMANDS:
        assert parser.parse_args(minimal_args(command)).command == command


def test_missing_command_exits():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_envloader_command_writes_the_loader(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=3000\nHOST=localhost\n", encoding="utf-8")
    code = main(["envloader", "-e", str(env_file), "-o", str(tmp_path / "out"), "-f", "env.ts"])
    assert code == 0
    assert "export class EnvConfig {" in (tmp_path / "out" / "env.ts").read_text(encoding="utf-8")


def test_interfaces_command(tmp_path):
    (tmp_path / "samples").mkdir()
    (tmp_path / "samples" / "user.json").write_text('{"id": 1}', encoding="utf-8")
    assert main(["interfaces", "-i", str(tmp_path / "samples"), "-o", str(tmp_path / "out")]) == 0
    assert (tmp_path / "out" / "user.ts").is_file()


def test_failures_are_reported_on_stderr(tmp_path, capsys):
    bad_env = tmp_path / "settings.txt"
    bad_env.write_text("A=1\n", encoding="utf-8")
    code = main(["envloader", "-e", str(bad_env), "-o", str(tmp_path), "-f", "env.ts"])
    assert code == 1
    assert capsys.readouterr().err.startswith("ts-scaffolder: Expected an .env* file")


def test_registry_command_fails_without_api_files(tmp_path):
    assert main(["apiclient-registry", "-a", str(tmp_path)]) == 1


def test_sample_files_filter(tmp_path):
    sample_filter = SampleFilesFilter(tmp_path)
    assert sample_filter(Change.modified, str(tmp_path.resolve() / "user.json"))
    assert not sample_filter(Change.modified, str(tmp_path.resolve() / "notes.txt"))
    assert not sample_filter(Change.added, str(tmp_path.resolve() / "node_modules" / "pkg.json"))
    assert not sample_filter(Change.added, "/elsewhere/user.json")


def test_regenerate_logs_failures(tmp_path, logger):
    assert not regenerate(tmp_path / "missing", tmp_path / "out", ".json", logger)
    assert any(message.startswith("Generation failed:") for message in logger.messages("error"))


def test_watch_requires_an_input_directory(tmp_path):
    assert watch_interfaces(tmp_path / "missing", tmp_path / "out") == 2


def test_watch_returns_after_stop(tmp_path):
    (tmp_path / "samples").mkdir()
    (tmp_path / "samples" / "user.json").write_text('{"id": 1}', encoding="utf-8")
    stop_event = threading.Event()
    stop_event.set()
    assert watch_interfaces(tmp_path / "samples", tmp_path / "out", debounce_ms=10, stop_event=stop_event) == 0
    assert (tmp_path / "out" / "user.ts").is_file()
