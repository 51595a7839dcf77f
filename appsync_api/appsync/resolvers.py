"""Unit and pipeline resolver wiring for the AppSync GraphQL API."""

from itertools import chain
from typing import Mapping, Sequence

from aws_cdk import aws_appsync as appsync
from constructs import Construct, IDependable

from ..config import PipelineResolverSpec, UnitResolverSpec
from ..validation import validate_unique_fields
from .resolver_builder import ResolverBuilder


def create_resolvers(
    scope: Construct,
    api: appsync.CfnGraphQLApi,
    schema: appsync.CfnGraphQLSchema,
    functions: Mapping[str, appsync.CfnFunctionConfiguration],
    unit_resolvers: Mapping[str, UnitResolverSpec],
    pipeline_resolvers: Mapping[str, PipelineResolverSpec],
    datasources: Sequence[IDependable] = (),
) -> tuple[dict[str, appsync.CfnResolver], dict[str, appsync.CfnResolver]]:
    """
    Create all AppSync resolvers for the GraphQL API.

    Resolvers are created under a "Resolvers" child construct.

    Args:
        scope: CDK construct scope
        api: AppSync GraphQL API
        schema: The API schema
        functions: Created AppSync functions keyed by logical name
        unit_resolvers: Unit resolver settings keyed by logical name
        pipeline_resolvers: Pipeline resolver settings keyed by logical name
        datasources: Constructs every resolver must be created after

    Returns:
        Tuple of (unit resolvers, pipeline resolvers), keyed like their settings

    Raises:
        AppError: If two resolvers target the same field
    """
    validate_unique_fields(chain(unit_resolvers.items(), pipeline_resolvers.items()))

    if not unit_resolvers and not pipeline_resolvers:
        return {}, {}

    builder = ResolverBuilder(api, schema, functions, datasources, Construct(scope, "Resolvers"))

    created_unit = {key: builder.create_unit_resolver(key, spec) for key, spec in unit_resolvers.items()}
    created_pipeline = {key: builder.create_pipeline_resolver(key, spec) for key, spec in pipeline_resolvers.items()}

    return created_unit, created_pipeline
