"""AppSync API, schema, authorization and log group creation."""

from typing import Any, Callable, Optional

from aws_cdk import CfnTag
from aws_cdk import aws_appsync as appsync
from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs
from constructs import Construct

from ..config import AppSyncSettings, LambdaAuthorizerConfig, OpenIdConnectConfig, UserPoolConfig
from ..logging import get_logger
from ..validation import AMAZON_COGNITO_USER_POOLS, AWS_LAMBDA, OPENID_CONNECT

logger = get_logger(__name__)

# AppSync writes to this log group on first request; it is never declared here
LOG_GROUP_PREFIX = "/aws/appsync/apis/"


def _openid_connect_config(config: OpenIdConnectConfig) -> appsync.CfnGraphQLApi.OpenIDConnectConfigProperty:
    return appsync.CfnGraphQLApi.OpenIDConnectConfigProperty(
        issuer=config.issuer,
        client_id=config.client_id,
        auth_ttl=config.auth_ttl,
        iat_ttl=config.iat_ttl,
    )


def _user_pool_config(config: UserPoolConfig) -> appsync.CfnGraphQLApi.UserPoolConfigProperty:
    return appsync.CfnGraphQLApi.UserPoolConfigProperty(
        user_pool_id=config.user_pool_id,
        aws_region=config.aws_region,
        app_id_client_regex=config.app_id_client_regex,
        default_action=config.default_action,
    )


def _cognito_user_pool_config(config: UserPoolConfig) -> appsync.CfnGraphQLApi.CognitoUserPoolConfigProperty:
    # Additional providers have no default action
    return appsync.CfnGraphQLApi.CognitoUserPoolConfigProperty(
        user_pool_id=config.user_pool_id,
        aws_region=config.aws_region,
        app_id_client_regex=config.app_id_client_regex,
    )


def _lambda_authorizer_config(config: LambdaAuthorizerConfig) -> appsync.CfnGraphQLApi.LambdaAuthorizerConfigProperty:
    return appsync.CfnGraphQLApi.LambdaAuthorizerConfigProperty(
        authorizer_uri=config.authorizer_uri,
        authorizer_result_ttl_in_seconds=config.authorizer_result_ttl_in_seconds,
        identity_validation_expression=config.identity_validation_expression,
    )


def build_primary_auth(settings: AppSyncSettings) -> dict[str, Any]:
    """
    Build the primary authorization block from the first authentication type.

    Only the first type may populate the primary block. At most one of the
    OpenID, Cognito or Lambda sub-configurations is set, selected by that type.

    Args:
        settings: Validated AppSync settings

    Returns:
        Keyword arguments for CfnGraphQLApi
    """
    auth_type = settings.authentication_types[0]

    primary: dict[str, Any] = {
        "authentication_type": auth_type,
        "open_id_connect_config": None,
        "user_pool_config": None,
        "lambda_authorizer_config": None,
    }
    if auth_type == OPENID_CONNECT:
        primary["open_id_connect_config"] = _openid_connect_config(settings.openid_connect_config)
    elif auth_type == AMAZON_COGNITO_USER_POOLS:
        primary["user_pool_config"] = _user_pool_config(settings.user_pool_config)
    elif auth_type == AWS_LAMBDA:
        primary["lambda_authorizer_config"] = _lambda_authorizer_config(settings.lambda_authorizer_config)

    return primary


def build_additional_providers(
    settings: AppSyncSettings,
) -> list[appsync.CfnGraphQLApi.AdditionalAuthenticationProviderProperty]:
    """
    Build one additional provider block per authentication type after the first.

    Each block picks its own sub-configuration from its own type.

    Args:
        settings: Validated AppSync settings

    Returns:
        Additional provider blocks, in authentication type order
    """
    providers = []
    for auth_type in settings.authentication_types[1:]:
        providers.append(
            appsync.CfnGraphQLApi.AdditionalAuthenticationProviderProperty(
                authentication_type=auth_type,
                open_id_connect_config=(
                    _openid_connect_config(settings.openid_connect_config) if auth_type == OPENID_CONNECT else None
                ),
                user_pool_config=(
                    _cognito_user_pool_config(settings.user_pool_config)
                    if auth_type == AMAZON_COGNITO_USER_POOLS
                    else None
                ),
                lambda_authorizer_config=(
                    _lambda_authorizer_config(settings.lambda_authorizer_config) if auth_type == AWS_LAMBDA else None
                ),
            )
        )
    return providers


def create_appsync_api(
    scope: Construct,
    settings: AppSyncSettings,
    resource_name: Callable[[str], str],
    logging_role: iam.IRole,
) -> tuple[appsync.CfnGraphQLApi, appsync.CfnGraphQLSchema]:
    """
    Create the AppSync GraphQL API and its schema.

    Args:
        scope: CDK construct scope
        settings: Validated AppSync settings
        resource_name: Function to generate resource names
        logging_role: Role AppSync assumes to write CloudWatch logs

    Returns:
        Tuple of (api, schema)
    """
    api_name = resource_name(settings.name)
    logger.info(
        "Creating AppSync API",
        api_name=api_name,
        authentication_types=settings.authentication_types,
        field_log_level=settings.field_log_level,
    )

    additional_providers = build_additional_providers(settings)

    api = appsync.CfnGraphQLApi(
        scope,
        "GraphQLApi",
        name=api_name,
        **build_primary_auth(settings),
        additional_authentication_providers=additional_providers or None,
        log_config=appsync.CfnGraphQLApi.LogConfigProperty(
            cloud_watch_logs_role_arn=logging_role.role_arn,
            field_log_level=settings.field_log_level,
            exclude_verbose_content=settings.exclude_verbose_content,
        ),
        xray_enabled=settings.xray_enabled,
        tags=[CfnTag(key=key, value=value) for key, value in sorted(settings.tags.items())] or None,
    )

    schema = appsync.CfnGraphQLSchema(
        scope,
        "GraphQLSchema",
        api_id=api.attr_api_id,
        definition=settings.schema,
    )

    return api, schema


def lookup_api_log_group(scope: Construct, api: appsync.CfnGraphQLApi) -> logs.ILogGroup:
    """Reference the CloudWatch log group AppSync writes for this API."""
    return logs.LogGroup.from_log_group_name(
        scope,
        "ApiLogGroup",
        f"{LOG_GROUP_PREFIX}{api.attr_api_id}",
    )


def create_api_key(
    scope: Construct,
    api: appsync.CfnGraphQLApi,
    expires: Optional[int] = None,
) -> appsync.CfnApiKey:
    """
    Create an API key for API_KEY authorization.

    Args:
        scope: CDK construct scope
        api: The AppSync GraphQL API
        expires: Expiry as epoch seconds; AppSync defaults to seven days

    Returns:
        The created API key
    """
    logger.info("Creating AppSync API key", expires=expires)

    return appsync.CfnApiKey(
        scope,
        "ApiKey",
        api_id=api.attr_api_id,
        expires=expires,
    )
