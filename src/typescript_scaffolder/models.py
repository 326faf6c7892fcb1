"""Config-file models (validated with pydantic) and transient generation records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


Method = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
AuthType = Literal["basic", "apikey", "none"]


# ============================================================
# Endpoint client configs
# ============================================================

class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EndpointAuthCredentials(_ConfigModel):
    auth_header_name: Optional[str] = Field(default=None, alias="authHeaderName")
    username: Optional[str] = None
    password: Optional[str] = None
    api_key_name: Optional[str] = Field(default=None, alias="apiKeyName")
    api_key_value: Optional[str] = Field(default=None, alias="apiKeyValue")


class RetryConfig(_ConfigModel):
    """Retry settings threaded from a client config into generated call sites."""
    enabled: bool = False
    max_attempts: int = Field(default=3, alias="maxAttempts")
    initial_delay_ms: int = Field(default=250, alias="initialDelayMs")
    multiplier: float = 2.0


class Endpoint(_ConfigModel):
    method: Method
    path: str
    object_name: str = Field(alias="objectName")
    response_schema: str = Field(alias="responseSchema")
    request_schema: Optional[str] = Field(default=None, alias="requestSchema")
    operation_name: Optional[str] = Field(default=None, alias="operationName")
    path_params: list[str] = Field(default_factory=list, alias="pathParams")
    query_params: list[str] = Field(default_factory=list, alias="queryParams")
    headers: dict[str, str] = Field(default_factory=dict)


class EndpointAuthConfig(_ConfigModel):
    auth_type: AuthType = Field(default="none", alias="authType")
    credentials: Optional[EndpointAuthCredentials] = None
    retry: Optional[RetryConfig] = None


class EndpointClientConfigFile(EndpointAuthConfig):
    base_url: str = Field(alias="baseUrl")
    endpoints: list[Endpoint]


# ============================================================
# Webhook configs
# ============================================================

class _BaseWebhook(_ConfigModel):
    name: str
    request_schema: str = Field(alias="requestSchema")
    response_schema: Optional[str] = Field(default=None, alias="responseSchema")
    headers: dict[str, str] = Field(default_factory=dict)
    secret_verification_key: Optional[str] = Field(default=None, alias="secretVerificationKey")


class IncomingWebhook(_BaseWebhook):
    direction: Literal["incoming"] = "incoming"
    path: str
    handler_name: str = Field(alias="handlerName")
    test_headers: dict[str, str] = Field(default_factory=dict, alias="testHeaders")


class OutgoingWebhook(_BaseWebhook):
    direction: Literal["outgoing"] = "outgoing"
    target_url: str = Field(alias="targetUrl")


Webhook = Annotated[Union[IncomingWebhook, OutgoingWebhook], Field(discriminator="direction")]


class WebhookConfigFile(_ConfigModel):
    webhooks: list[Webhook]


# ============================================================
# Transient records
# ============================================================

@dataclass(frozen=True)
class EndpointMeta:
    """One generated client function, as seen by its companion helper files."""
    function_name: str         # "GET_user"
    response_type: str         # "User"
    response_module: str       # "../interfaces/User"
    endpoint: Endpoint | None = None


@dataclass(frozen=True)
class ParsedProperty:
    name: str
    type: str                  # string | number | boolean | array | union | enum | <reference-name>
    optional: bool
    js_doc: str | None = None
    union_types: list[str | int | float] | None = None
    element_type: str | None = None
    enum_values: list[str | int | float] | None = None


@dataclass(frozen=True)
class ParsedInterface:
    name: str
    properties: list[ParsedProperty] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
