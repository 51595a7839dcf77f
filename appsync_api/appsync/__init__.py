"""
AppSync GraphQL API module.

This module orchestrates the creation of the complete AppSync GraphQL API
infrastructure. The implementation is split across multiple modules:

- api.py: API, schema, authorization blocks, API key and log group lookup
- datasources.py: NONE data source creation
- functions.py: AppSync function definitions
- resolver_builder.py: Unit and pipeline resolver construction
- resolvers.py: Resolver wiring from settings

Creation order follows references: logging role and policy, API and schema,
functions, then unit and pipeline resolvers.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from aws_cdk import aws_appsync as appsync
from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs
from constructs import Construct, IDependable

from ..config import AppSyncSettings
from ..iam_roles import create_appsync_logging_role
from ..logging import get_logger
from ..validation import API_KEY
from .api import create_api_key, create_appsync_api, lookup_api_log_group
from .datasources import create_none_datasources
from .functions import create_appsync_functions
from .resolvers import create_resolvers

logger = get_logger(__name__)

DataSources = Union[
    Sequence[IDependable],
    Callable[[appsync.CfnGraphQLApi], Sequence[IDependable]],
]


@dataclass
class AppSyncResources:
    """Container for all AppSync resources created by setup_appsync."""

    logging_role: iam.Role
    logging_policy: iam.Policy
    api: appsync.CfnGraphQLApi
    schema: appsync.CfnGraphQLSchema
    functions: dict[str, appsync.CfnFunctionConfiguration]
    unit_resolvers: dict[str, appsync.CfnResolver]
    pipeline_resolvers: dict[str, appsync.CfnResolver]
    log_group: logs.ILogGroup
    api_key: Optional[appsync.CfnApiKey]


def setup_appsync(
    scope: Construct,
    settings: AppSyncSettings,
    resource_name: Callable[[str], str],
    datasources: Optional[DataSources] = None,
) -> AppSyncResources:
    """
    Set up the complete AppSync GraphQL API infrastructure.

    This is the main entry point for creating all AppSync resources.

    Args:
        scope: CDK construct scope
        settings: Validated AppSync settings
        resource_name: Function to generate resource names
        datasources: Data source constructs functions and resolvers must be
            created after, or a callable that receives the API and returns
            them (for data sources that need the API ID)

    Returns:
        AppSyncResources containing all created resources
    """
    logging_role, logging_policy = create_appsync_logging_role(scope, resource_name, settings.name)

    api, schema = create_appsync_api(scope, settings, resource_name, logging_role)
    # Logging must be allowed before AppSync first assumes the role
    api.node.add_dependency(logging_policy)

    log_group = lookup_api_log_group(scope, api)

    if callable(datasources):
        datasources = datasources(api)
    datasources = list(datasources or [])

    api_key = None
    if settings.create_api_key:
        if API_KEY in settings.authentication_types:
            api_key = create_api_key(scope, api, settings.api_key_expires)
        else:
            logger.warning(
                "create_api_key ignored: API_KEY is not an authentication type",
                authentication_types=settings.authentication_types,
            )

    functions = create_appsync_functions(scope, api, settings.functions, datasources)

    unit_resolvers, pipeline_resolvers = create_resolvers(
        scope=scope,
        api=api,
        schema=schema,
        functions=functions,
        unit_resolvers=settings.unit_resolvers,
        pipeline_resolvers=settings.pipeline_resolvers,
        datasources=datasources,
    )

    return AppSyncResources(
        logging_role=logging_role,
        logging_policy=logging_policy,
        api=api,
        schema=schema,
        functions=functions,
        unit_resolvers=unit_resolvers,
        pipeline_resolvers=pipeline_resolvers,
        log_group=log_group,
        api_key=api_key,
    )


__all__ = ["setup_appsync", "AppSyncResources", "create_none_datasources"]
