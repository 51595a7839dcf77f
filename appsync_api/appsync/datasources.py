"""AppSync data source creation."""

from typing import Iterable

from aws_cdk import aws_appsync as appsync
from constructs import Construct

from ..logging import get_logger

logger = get_logger(__name__)


def create_none_datasources(
    scope: Construct,
    api: appsync.CfnGraphQLApi,
    names: Iterable[str],
) -> dict[str, appsync.CfnDataSource]:
    """
    Create NONE data sources for resolvers that never leave AppSync.

    Args:
        scope: CDK construct scope
        api: The AppSync GraphQL API
        names: AppSync data source names

    Returns:
        Dictionary of datasource name to data source
    """
    datasources: dict[str, appsync.CfnDataSource] = {}

    for name in names:
        logger.info("Creating NONE data source", datasource_name=name)
        datasources[name] = appsync.CfnDataSource(
            scope,
            f"{name}NoneDataSource",
            api_id=api.attr_api_id,
            name=name,
            type="NONE",
        )

    return datasources
