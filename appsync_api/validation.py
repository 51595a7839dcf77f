"""
Settings validation utilities.

Validates authentication settings, mapping templates and pipeline wiring.
"""

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .errors import AppError, ErrorCode

if TYPE_CHECKING:
    from .config import AppSyncSettings

API_KEY = "API_KEY"
AWS_IAM = "AWS_IAM"
AMAZON_COGNITO_USER_POOLS = "AMAZON_COGNITO_USER_POOLS"
OPENID_CONNECT = "OPENID_CONNECT"
AWS_LAMBDA = "AWS_LAMBDA"

AUTHENTICATION_TYPES = (
    API_KEY,
    AWS_IAM,
    AMAZON_COGNITO_USER_POOLS,
    OPENID_CONNECT,
    AWS_LAMBDA,
)

# Authentication type -> settings attribute that must be present for it
AUTH_CONFIG_ATTRIBUTES = {
    OPENID_CONNECT: "openid_connect_config",
    AMAZON_COGNITO_USER_POOLS: "user_pool_config",
    AWS_LAMBDA: "lambda_authorizer_config",
}

OPERATION_TYPES = ("Query", "Mutation", "Subscription")
FIELD_LOG_LEVELS = ("ALL", "ERROR", "NONE")
DEFAULT_ACTIONS = ("ALLOW", "DENY")

# AppSync rejects empty mapping templates
EMPTY_TEMPLATE_PLACEHOLDER = " "


def normalize_template(template: str | None) -> str:
    """
    Return a mapping template AppSync will accept.

    Args:
        template: Mapping template text, possibly empty

    Returns:
        The template unchanged, or a single space when it is empty
    """
    if not template:
        return EMPTY_TEMPLATE_PLACEHOLDER
    return template


def validate_authentication(settings: "AppSyncSettings") -> None:
    """
    Validate the authentication type list against the auth settings objects.

    Requirements:
    - At least one authentication type
    - Every type is a known AppSync authentication type
    - OPENID_CONNECT, AMAZON_COGNITO_USER_POOLS and AWS_LAMBDA each need
      their settings object

    Raises:
        AppError: If any requirement is not met
    """
    auth_types = list(settings.authentication_types)
    if not auth_types:
        raise AppError(
            ErrorCode.INVALID_AUTH_TYPE,
            "At least one authentication type is required",
        )

    unknown = [auth_type for auth_type in auth_types if auth_type not in AUTHENTICATION_TYPES]
    if unknown:
        raise AppError(
            ErrorCode.INVALID_AUTH_TYPE,
            "Unknown authentication type",
            {"authenticationTypes": unknown, "allowed": list(AUTHENTICATION_TYPES)},
        )

    for auth_type in auth_types:
        attribute = AUTH_CONFIG_ATTRIBUTES.get(auth_type)
        if attribute and not getattr(settings, attribute):
            raise AppError(
                ErrorCode.MISSING_AUTH_CONFIG,
                f"{auth_type} authentication requires {attribute}",
                {"authenticationType": auth_type, "setting": attribute},
            )


def validate_choice(value: str, allowed: Iterable[str], setting: str) -> str:
    """Ensure value is one of the allowed choices."""
    allowed = tuple(allowed)
    if value not in allowed:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"{setting} must be one of {', '.join(allowed)}",
            {"setting": setting, "value": value},
        )
    return value


def validate_pipeline_functions(
    resolver_key: str,
    function_keys: Iterable[str],
    known_functions: Mapping[str, Any],
) -> None:
    """
    Ensure every function a pipeline resolver references has been declared.

    Raises:
        AppError: If a function key is not in known_functions
    """
    missing = [key for key in function_keys if key not in known_functions]
    if missing:
        raise AppError(
            ErrorCode.FUNCTION_NOT_FOUND,
            "Pipeline resolver references undeclared functions",
            {"resolver": resolver_key, "missingFunctions": missing},
        )


def validate_logical_keys(keys: Iterable[str], setting: str) -> None:
    """
    Ensure logical keys can be used verbatim as construct IDs.

    Raises:
        AppError: If a key is empty or contains a path separator
    """
    invalid = [key for key in keys if not key or "/" in key]
    if invalid:
        raise AppError(
            ErrorCode.INVALID_INPUT,
            f"{setting} keys must be non-empty and must not contain '/'",
            {"setting": setting, "invalidKeys": invalid},
        )


def validate_unique_fields(resolvers: Iterable[tuple[str, Any]]) -> None:
    """
    Ensure no two resolvers attach to the same type and field.

    Args:
        resolvers: (resolver key, resolver settings) pairs across all kinds

    Raises:
        AppError: If a type and field pair is resolved twice
    """
    seen: dict[tuple[str, str], str] = {}
    for key, spec in resolvers:
        field = (spec.type_name, spec.field_name)
        if field in seen:
            raise AppError(
                ErrorCode.INVALID_INPUT,
                "Field already has a resolver",
                {"field": f"{field[0]}.{field[1]}", "resolvers": [seen[field], key]},
            )
        seen[field] = key
