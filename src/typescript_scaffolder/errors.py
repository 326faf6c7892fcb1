"""Exception types raised by the scaffolder."""
from __future__ import annotations


class ScaffolderError(RuntimeError):
    """Base class for every error raised on purpose by the scaffolder."""


class InvalidJsonInputError(ScaffolderError, ValueError):
    """Raised when a JSON sample cannot be parsed."""

    def __init__(self, raw_json: str, parser_message: str) -> None:
        preview = raw_json[:120]
        if len(raw_json) > 120:
            preview += "..."
        super().__init__(
            "Invalid JSON input\n"
            f"  preview: {preview}\n"
            f"  parser: {parser_message}"
        )
        self.preview = preview
        self.parser_message = parser_message


class DuplicatePropertyError(ScaffolderError):
    """Raised when an emitted interface ends up with the same property twice."""

    def __init__(self, interface_name: str, property_names: list[str]) -> None:
        super().__init__(
            f"Duplicate properties in interface {interface_name!r} after unprefixing: "
            + ", ".join(property_names)
        )
        self.interface_name = interface_name
        self.property_names = property_names


class SourceParseError(ScaffolderError):
    """Raised when an existing TypeScript file cannot be scanned safely."""


class SchemaResolutionError(ScaffolderError):
    """Raised when no interface directory holds every schema a config needs."""


class EnvFileError(ScaffolderError, ValueError):
    """Raised for malformed .env inputs."""


class RegistryLookupError(ScaffolderError, LookupError):
    """Raised when a service/function pair is missing from an API registry."""
