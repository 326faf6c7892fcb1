from __future__ import annotations

import asyncio

import pytest

from typescript_scaffolder.errors import InvalidJsonInputError
from typescript_scaffolder.generators.interfaces import generate_interfaces_from_path


def test_samples_are_mirrored_as_interface_files(tmp_path, logger):
    samples = tmp_path / "samples"
    (samples / "service-a").mkdir(parents=True)
    (samples / "service-a" / "user-profile.json").write_text('{"id": "u", "tags": ["a"]}', encoding="utf-8")
    (samples / "order_log.json").write_text('[{"total": 1.5}]', encoding="utf-8")
    (samples / "notes.txt").write_text("ignored", encoding="utf-8")

    written = asyncio.run(generate_interfaces_from_path(samples, tmp_path / "out"))

    assert sorted(written) == sorted([tmp_path / "out" / "order_log.ts", tmp_path / "out" / "service-a" / "user-profile.ts"])
    profile = (tmp_path / "out" / "service-a" / "user-profile.ts").read_text(encoding="utf-8")
    assert profile.startswith("export interface UserProfile {")
    order_log = (tmp_path / "out" / "order_log.ts").read_text(encoding="utf-8")
    assert order_log.startswith("export type OrderLog = OrderLogItem[];")
    assert "Interface generation completed: 2 of 2 file(s) written." in logger.messages("info")


def test_invalid_sample_aborts_the_run(tmp_path, logger):
    samples = tmp_path / "samples"
    samples.mkdir()
    (samples / "broken.json").write_text("{ nope", encoding="utf-8")

    with pytest.raises(InvalidJsonInputError):
        asyncio.run(generate_interfaces_from_path(samples, tmp_path / "out"))
    assert logger.messages("error")


def test_missing_sample_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        asyncio.run(generate_interfaces_from_path(tmp_path / "nope", tmp_path / "out"))
