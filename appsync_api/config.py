"""
Settings types for the AppSync API stack.

Settings are plain dataclasses so they can be built in Python by another
CDK app, or read from a JSON settings document by `load_settings`.

Example settings document:
    {
        "name": "orders-api",
        "schema_file": "../schema/schema.graphql",
        "authentication_types": ["API_KEY", "AWS_IAM"],
        "functions": {
            "fetch_order": {
                "name": "FetchOrder",
                "datasource_name": "orders",
                "request_mapping_template": "...",
                "response_mapping_template": "$util.toJson($ctx.result)"
            }
        },
        "pipeline_resolvers": {
            "get_order": {
                "type_name": "Query",
                "field_name": "getOrder",
                "functions": ["fetch_order"]
            }
        }
    }
"""

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from .errors import AppError, ErrorCode
from .validation import (
    DEFAULT_ACTIONS,
    FIELD_LOG_LEVELS,
    OPERATION_TYPES,
    validate_authentication,
    validate_choice,
)

DEFAULT_FUNCTION_VERSION = "2018-05-29"

T = TypeVar("T")


@dataclass
class OpenIdConnectConfig:
    """OpenID Connect provider settings."""

    issuer: str
    client_id: Optional[str] = None
    auth_ttl: Optional[int] = None
    iat_ttl: Optional[int] = None


@dataclass
class UserPoolConfig:
    """Cognito User Pool settings.

    default_action only applies to the primary authentication block.
    """

    user_pool_id: str
    aws_region: Optional[str] = None
    app_id_client_regex: Optional[str] = None
    default_action: str = "ALLOW"

    def __post_init__(self) -> None:
        validate_choice(self.default_action, DEFAULT_ACTIONS, "user_pool_config.default_action")


@dataclass
class LambdaAuthorizerConfig:
    """Lambda authorizer settings."""

    authorizer_uri: str
    authorizer_result_ttl_in_seconds: Optional[int] = None
    identity_validation_expression: Optional[str] = None


@dataclass
class FunctionSpec:
    """An AppSync function bound to a data source."""

    name: str
    datasource_name: str
    request_mapping_template: str = ""
    response_mapping_template: str = ""
    description: Optional[str] = None
    function_version: str = DEFAULT_FUNCTION_VERSION


@dataclass
class UnitResolverSpec:
    """A resolver invoking one data source directly."""

    type_name: str
    field_name: str
    datasource_name: str
    request_mapping_template: str = ""
    response_mapping_template: str = ""

    def __post_init__(self) -> None:
        validate_choice(self.type_name, OPERATION_TYPES, "type_name")


@dataclass
class PipelineResolverSpec:
    """A resolver running an ordered chain of functions.

    functions holds logical function keys, not AppSync function IDs.
    """

    type_name: str
    field_name: str
    functions: List[str] = field(default_factory=list)
    request_mapping_template: str = ""
    response_mapping_template: str = ""

    def __post_init__(self) -> None:
        validate_choice(self.type_name, OPERATION_TYPES, "type_name")


@dataclass
class AppSyncSettings:
    """Everything needed to declare the API, its logging, functions and resolvers."""

    name: str
    schema: str
    authentication_types: List[str] = field(default_factory=lambda: ["API_KEY"])
    tags: Dict[str, str] = field(default_factory=dict)
    openid_connect_config: Optional[OpenIdConnectConfig] = None
    user_pool_config: Optional[UserPoolConfig] = None
    lambda_authorizer_config: Optional[LambdaAuthorizerConfig] = None
    field_log_level: str = "ERROR"
    exclude_verbose_content: bool = True
    xray_enabled: bool = False
    create_api_key: bool = False
    api_key_expires: Optional[int] = None
    functions: Dict[str, FunctionSpec] = field(default_factory=dict)
    unit_resolvers: Dict[str, UnitResolverSpec] = field(default_factory=dict)
    pipeline_resolvers: Dict[str, PipelineResolverSpec] = field(default_factory=dict)
    none_datasources: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_choice(self.field_log_level, FIELD_LOG_LEVELS, "field_log_level")
        validate_authentication(self)


def _build(cls: Type[T], data: Any, context: str) -> T:
    """Build a settings dataclass from a mapping, rejecting unknown keys."""
    if not isinstance(data, Mapping):
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"{context} must be an object",
            {"setting": context},
        )

    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"Unknown keys in {context}",
            {"setting": context, "unknownKeys": unknown},
        )

    required = [
        f.name
        for f in dataclasses.fields(cls)
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
    ]
    missing = [name for name in required if data.get(name) in (None, "")]
    if missing:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"Missing required keys in {context}",
            {"setting": context, "missingKeys": missing},
        )

    return cls(**data)


def _build_optional(cls: Type[T], data: Any, context: str) -> Optional[T]:
    # An empty object counts as "not configured"
    if not data:
        return None
    return _build(cls, data, context)


def _build_map(cls: Type[T], data: Any, context: str) -> Dict[str, T]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"{context} must be an object keyed by logical name",
            {"setting": context},
        )
    return {key: _build(cls, spec, f"{context}.{key}") for key, spec in data.items()}


def settings_from_dict(data: Mapping[str, Any], base_dir: Optional[Path] = None) -> AppSyncSettings:
    """
    Build AppSyncSettings from a parsed settings document.

    Args:
        data: Parsed settings mapping
        base_dir: Directory used to resolve a relative schema_file

    Returns:
        Typed, validated settings

    Raises:
        AppError: If the document is malformed or fails validation
    """
    if not isinstance(data, Mapping):
        raise AppError(ErrorCode.INVALID_INPUT, "settings must be an object", {"setting": "settings"})
    data = dict(data)

    schema_file = data.pop("schema_file", None)
    if schema_file and data.get("schema"):
        raise AppError(
            ErrorCode.INVALID_INPUT,
            "Set either schema or schema_file, not both",
            {"setting": "schema_file", "schemaFile": str(schema_file)},
        )
    if schema_file:
        schema_path = Path(schema_file)
        if not schema_path.is_absolute() and base_dir is not None:
            schema_path = base_dir / schema_path
        if not schema_path.exists():
            raise AppError(
                ErrorCode.SETTINGS_NOT_FOUND,
                "Schema file not found",
                {"schemaFile": str(schema_path)},
            )
        data["schema"] = schema_path.read_text()

    data["openid_connect_config"] = _build_optional(
        OpenIdConnectConfig, data.get("openid_connect_config"), "openid_connect_config"
    )
    data["user_pool_config"] = _build_optional(UserPoolConfig, data.get("user_pool_config"), "user_pool_config")
    data["lambda_authorizer_config"] = _build_optional(
        LambdaAuthorizerConfig, data.get("lambda_authorizer_config"), "lambda_authorizer_config"
    )
    data["functions"] = _build_map(FunctionSpec, data.get("functions"), "functions")
    data["unit_resolvers"] = _build_map(UnitResolverSpec, data.get("unit_resolvers"), "unit_resolvers")
    data["pipeline_resolvers"] = _build_map(
        PipelineResolverSpec, data.get("pipeline_resolvers"), "pipeline_resolvers"
    )

    return _build(AppSyncSettings, data, "settings")


def load_settings(path: Path) -> AppSyncSettings:
    """
    Read a JSON settings document.

    Args:
        path: Path to the settings file

    Returns:
        Typed, validated settings

    Raises:
        AppError: If the file is missing, not valid JSON, or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise AppError(
            ErrorCode.SETTINGS_NOT_FOUND,
            "Settings file not found",
            {"settingsFile": str(path)},
        )

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            "Settings file is not valid JSON",
            {"settingsFile": str(path), "error": str(e)},
        ) from e

    return settings_from_dict(data, base_dir=path.parent)
