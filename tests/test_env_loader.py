from __future__ import annotations

import asyncio

import pytest

from typescript_scaffolder.errors import EnvFileError
from typescript_scaffolder.generators.env_loader import generate_env_loader, parse_env_file


def write_env(directory, content, name=".env"):
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


def test_generates_typed_class_and_key_enum(tmp_path, logger):
    env_file = write_env(
        tmp_path,
        "# service settings\n"
        "PORT=3000\n"
        "DEBUG_MODE=true\n"
        'API_URL="https://example.com/?a=b"\n'
        "\n"
        "EMPTY=\n",
    )
    output = asyncio.run(generate_env_loader(env_file, tmp_path / "generated", "env.ts"))
    assert output == tmp_path / "generated" / "env.ts"
    assert output.read_text(encoding="utf-8") == (
        "export class EnvConfig {\n"
        '    static readonly PORT: number = Number(process.env.PORT ?? "3000");\n'
        '    static readonly DEBUG_MODE: boolean = (process.env.DEBUG_MODE ?? "true") === "true";\n'
        '    static readonly API_URL: string = process.env.API_URL ?? "https://example.com/?a=b";\n'
        '    static readonly EMPTY: string = process.env.EMPTY ?? "";\n'
        "}\n"
        "\n"
        "export enum EnvKeys {\n"
        '    PORT = "PORT",\n'
        '    DEBUG_MODE = "DEBUG_MODE",\n'
        '    API_URL = "API_URL",\n'
        '    EMPTY = "EMPTY",\n'
        "}\n"
    )
    assert "Empty value detected for env key: EMPTY" in logger.messages("warn")


def test_custom_class_and_enum_names(tmp_path):
    env_file = write_env(tmp_path, "A=1\nB=x\n", ".env.local")
    content = asyncio.run(generate_env_loader(env_file, tmp_path, "config.ts", "Settings", "SettingKeys")).read_text(encoding="utf-8")
    assert content.startswith("export class Settings {\n")
    assert "export enum SettingKeys {\n" in content


def test_few_variables_are_flagged(tmp_path, logger):
    parse_env_file(write_env(tmp_path, "ONLY=1\n"))
    assert "Only 1 environment variables found." in logger.messages("warn")


def test_wrong_file_name_is_rejected(tmp_path):
    with pytest.raises(EnvFileError, match="Expected an .env"):
        parse_env_file(write_env(tmp_path, "A=1\n", "config.txt"))


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(EnvFileError, match="does not exist"):
        parse_env_file(tmp_path / ".env.production")


@pytest.mark.parametrize("content", ["lower_case=1\nB=2\n", "A=1\nA=2\n", "9START=1\nB=2\n"])
def test_malformed_entries_are_rejected(tmp_path, content):
    with pytest.raises(EnvFileError):
        parse_env_file(write_env(tmp_path, content))
