from __future__ import annotations

import pytest

from typescript_scaffolder.errors import SchemaResolutionError
from typescript_scaffolder.generators.client_constructors import (
    assert_directory_containing_all_schemas,
    build_import_map_and_registry_entries,
    collect_required_schemas,
    compute_typescript_import_path_without_extension,
    construct_url_path,
    determine_has_body,
    ensure_relative_typescript_import_path,
    find_directory_containing_all_schemas,
    generate_client_action,
    generate_inline_auth_header,
    sanitize_import_variable,
)
from typescript_scaffolder.models import Endpoint, EndpointAuthCredentials


def make_endpoint(method: str, path: str, **extra) -> Endpoint:
    return Endpoint(method=method, path=path, object_name="user", response_schema="User", **extra)


def test_client_action_names():
    assert generate_client_action(make_endpoint("GET", "/users/:id", path_params=["id"])).function_name == "GET_user"
    assert generate_client_action(make_endpoint("GET", "/users")).function_name == "GET_ALL_user"
    action = generate_client_action(make_endpoint("POST", "/users"))
    assert action.function_name == "POST_user"
    assert action.file_name == "user_api"


def test_url_path_parameters_become_template_expressions():
    endpoint = make_endpoint("GET", "/users/:id/posts/{postId}")
    assert construct_url_path(endpoint) == "/users/${id}/posts/${postId}"


def test_body_methods():
    assert determine_has_body("post")
    assert determine_has_body("PATCH")
    assert not determine_has_body("GET")
    assert not determine_has_body("DELETE")


def test_import_paths_are_relative_without_extension(tmp_path):
    out_file = tmp_path / "out" / "api" / "user_api.ts"
    assert compute_typescript_import_path_without_extension(out_file, tmp_path / "out" / "interfaces" / "User.ts") == "../interfaces/User"
    assert compute_typescript_import_path_without_extension(out_file, tmp_path / "out" / "api" / "User.ts") == "./User"
    assert ensure_relative_typescript_import_path("api.types") == "./api.types"
    assert ensure_relative_typescript_import_path("../api.types") == "../api.types"


def test_inline_auth_header():
    basic = EndpointAuthCredentials(username="user", password="pass")
    assert generate_inline_auth_header("basic", basic) == '{"Authorization": "Basic dXNlcjpwYXNz"}'
    api_key = EndpointAuthCredentials(api_key_name="x-api-key", api_key_value="k")
    assert generate_inline_auth_header("apikey", api_key) == '{ "x-api-key": "k" }'
    assert generate_inline_auth_header("none") == "{}"


def test_required_schemas_include_request_bodies():
    endpoints = [make_endpoint("GET", "/users"), make_endpoint("POST", "/users", request_schema="NewUser")]
    assert collect_required_schemas(endpoints) == {"User", "NewUser"}


def test_schema_directory_resolution(tmp_path, logger):
    service_a = tmp_path / "service-a"
    service_b = tmp_path / "service-b"
    service_a.mkdir()
    service_b.mkdir()
    (service_a / "User.ts").write_text("", encoding="utf-8")
    (service_a / "Order.ts").write_text("", encoding="utf-8")
    (service_b / "User.ts").write_text("", encoding="utf-8")
    name_to_dirs = {
        "User": {str(service_a), str(service_b)},
        "Order": {str(service_a)},
    }

    assert find_directory_containing_all_schemas({"User", "Order"}, name_to_dirs, "cfg.json") == str(service_a)
    assert find_directory_containing_all_schemas({"User", "Invoice"}, name_to_dirs, "cfg.json") is None
    assert logger.messages("warn")

    with pytest.raises(SchemaResolutionError):
        assert_directory_containing_all_schemas({"Invoice"}, name_to_dirs, "cfg.json")


def test_registry_entries_and_imports():
    imports, entries = build_import_map_and_registry_entries(
        {
            "source-alpha": ["/root/api/source-alpha/User_api.ts"],
            "source-beta": ["/root/api/source-beta/Token_api.ts", "/root/api/source-beta/User_api.ts"],
        }
    )
    assert imports == [
        "import * as User_api from './source-alpha/User_api';",
        "import * as Token_api from './source-beta/Token_api';",
        "import * as User_api2 from './source-beta/User_api';",
    ]
    assert entries == [
        "  'source-alpha': {\n    ...User_api\n  }",
        "  'source-beta': {\n    ...Token_api,\n    ...User_api2\n  }",
    ]


def test_root_level_files_register_under_dot():
    imports, entries = build_import_map_and_registry_entries({"": ["user_api.ts"]})
    assert imports == ["import * as user_api from './user_api';"]
    assert entries == ["  '.': {\n    ...user_api\n  }"]


def test_sanitize_import_variable():
    assert sanitize_import_variable("user-api.v2") == "user_api_v2"
    assert sanitize_import_variable("2fa_api") == "_2fa_api"
