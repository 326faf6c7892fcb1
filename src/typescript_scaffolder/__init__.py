"""Scaffold TypeScript sources (interfaces, API clients, webhooks, env loaders) from JSON."""
from __future__ import annotations

from .errors import (
    DuplicatePropertyError,
    EnvFileError,
    InvalidJsonInputError,
    RegistryLookupError,
    SchemaResolutionError,
    ScaffolderError,
    SourceParseError,
)
from .generators.api_client import (
    generate_api_client_from_file,
    generate_api_client_function,
    generate_api_clients_from_path,
)
from .generators.api_registry import generate_api_registry, get_api_function
from .generators.auth_helper import generate_auth_helper_for_api_file
from .generators.env_loader import generate_env_loader
from .generators.error_handler import generate_error_handler_for_api_file
from .generators.interfaces import generate_interfaces_from_file, generate_interfaces_from_path
from .generators.json_schemas import generate_json_schemas_from_path
from .generators.retry_helper import generate_retry_helper_for_api_file
from .generators.webhooks import (
    generate_incoming_webhook_handler,
    generate_webhook_fixture,
    generate_webhook_route,
    generate_webhook_routes_from_file,
    generate_webhook_routes_from_path,
)
from .inference import find_duplicate_keys, infer_interface, infer_interface_from_path, prefix_duplicate_keys
from .interface_parser import convert_to_json_schema, extract_interfaces_from_file, extract_interfaces_from_source
from .logger import Logger, get_default_logger, set_default_logger
from .retry import RetryOptions, request_with_retry
from .source_file import TypeScriptSourceFile
from .validators import (
    assert_enum_value,
    assert_in_range,
    assert_no_duplicate_keys,
    assert_required_fields,
    assert_structure,
)

__version__ = "0.1.0"
