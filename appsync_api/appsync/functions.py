"""
AppSync functions module.

Projects the function settings map onto AppSync function configurations,
one per logical key.
"""

from typing import Mapping, Sequence

from aws_cdk import aws_appsync as appsync
from constructs import Construct, IDependable

from ..config import FunctionSpec
from ..logging import get_logger
from ..validation import normalize_template, validate_logical_keys

logger = get_logger(__name__)


def create_appsync_functions(
    scope: Construct,
    api: appsync.CfnGraphQLApi,
    functions: Mapping[str, FunctionSpec],
    datasources: Sequence[IDependable] = (),
) -> dict[str, appsync.CfnFunctionConfiguration]:
    """
    Create all AppSync functions for pipeline resolvers.

    Functions live under a "Functions" child construct with their logical
    key as construct ID, so distinct keys always get distinct logical IDs.

    Args:
        scope: CDK construct scope
        api: The AppSync GraphQL API
        functions: Function settings keyed by logical name
        datasources: Constructs every function must be created after

    Returns:
        Dictionary of logical name to AppSync function

    Raises:
        AppError: If a logical key cannot be used as a construct ID
    """
    validate_logical_keys(functions, "functions")

    created: dict[str, appsync.CfnFunctionConfiguration] = {}
    if not functions:
        return created

    functions_scope = Construct(scope, "Functions")

    for key, spec in functions.items():
        logger.info(
            "Creating AppSync function",
            function_key=key,
            function_name=spec.name,
            datasource_name=spec.datasource_name,
        )

        function = appsync.CfnFunctionConfiguration(
            functions_scope,
            key,
            api_id=api.attr_api_id,
            name=spec.name,
            description=spec.description,
            data_source_name=spec.datasource_name,
            function_version=spec.function_version,
            request_mapping_template=normalize_template(spec.request_mapping_template),
            response_mapping_template=normalize_template(spec.response_mapping_template),
        )
        if datasources:
            function.node.add_dependency(*datasources)

        created[key] = function

    return created
