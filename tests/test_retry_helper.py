from __future__ import annotations

import asyncio

from typescript_scaffolder.generators.retry_helper import (
    generate_retry_helper_for_api_file,
    group_response_type_imports,
)
from typescript_scaffolder.models import EndpointMeta
from typescript_scaffolder.retry import RETRY_HELPER_IMPL_SOURCE


TYPES_MODULE = "typescript-scaffolder"


def user_endpoints() -> list[EndpointMeta]:
    return [
        EndpointMeta("GET_user", "User", "../interfaces/User"),
        EndpointMeta("GET_ALL_user", "User", "../interfaces/User"),
    ]


def generate(output_dir, endpoints, overwrite=True):
    return asyncio.run(
        generate_retry_helper_for_api_file(output_dir, "user_api", endpoints, overwrite, types_module=TYPES_MODULE)
    )


def test_writes_imports_impl_and_sorted_wrappers(tmp_path):
    path = generate(tmp_path, user_endpoints())
    assert path == tmp_path / "user_api.requestWithRetry.ts"

    content = path.read_text(encoding="utf-8")
    assert content.startswith(
        'import type { AxiosResponse } from "axios";\n'
        'import type { RetryOptions } from "typescript-scaffolder";\n'
        'import type { User } from "../interfaces/User";\n'
        "\n"
    )
    assert RETRY_HELPER_IMPL_SOURCE.rstrip("\n") in content
    assert content.index("requestWithRetry_GET_ALL_user(") < content.index("requestWithRetry_GET_user(")
    assert content.endswith("}\n")


def test_rerun_is_byte_identical(tmp_path):
    first = generate(tmp_path, user_endpoints()).read_text(encoding="utf-8")
    second = generate(tmp_path, list(reversed(user_endpoints()))).read_text(encoding="utf-8")
    assert first == second


def test_merge_mode_inserts_new_wrappers_in_order(tmp_path):
    generate(tmp_path, user_endpoints())
    delete = EndpointMeta("DELETE_user", "User", "../interfaces/User")
    merged = generate(tmp_path, [delete], overwrite=False).read_text(encoding="utf-8")

    rebuilt_dir = tmp_path / "rebuilt"
    rebuilt = generate(rebuilt_dir, [*user_endpoints(), delete]).read_text(encoding="utf-8")
    assert merged == rebuilt
    assert merged.count("export async function requestWithRetryImpl") == 1


def test_merge_mode_keeps_existing_wrappers(tmp_path):
    generate(tmp_path, user_endpoints())
    order = EndpointMeta("GET_order", "Order", "../interfaces/Order")
    content = generate(tmp_path, [order], overwrite=False).read_text(encoding="utf-8")
    assert "requestWithRetry_GET_user(" in content
    assert "requestWithRetry_GET_order(" in content
    assert 'import type { Order } from "../interfaces/Order";' in content


def test_no_endpoints_writes_nothing(tmp_path, logger):
    assert generate(tmp_path, []) is None
    assert not (tmp_path / "user_api.requestWithRetry.ts").exists()
    assert "No endpoints provided for user_api.requestWithRetry.ts - nothing to write." in logger.messages("warn")


def test_response_type_imports_are_grouped_by_module():
    grouped = group_response_type_imports(
        [
            EndpointMeta("GET_user", "User", "../interfaces/User"),
            EndpointMeta("GET_summary", "UserSummary", "../interfaces/User"),
            EndpointMeta("GET_order", "Order", "../interfaces/Order"),
            EndpointMeta("GET_user_again", "User", "../interfaces/User"),
        ]
    )
    assert grouped == {
        "../interfaces/Order": ["Order"],
        "../interfaces/User": ["User", "UserSummary"],
    }
