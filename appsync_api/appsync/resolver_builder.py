"""
Builder pattern for AppSync resolvers.

Simplifies creation of unit and pipeline resolvers and keeps their
dependencies consistent: every resolver is created after the schema and
after every caller-supplied data source.
"""

from typing import Mapping, Optional, Sequence

from aws_cdk import aws_appsync as appsync
from constructs import Construct, IDependable

from ..config import PipelineResolverSpec, UnitResolverSpec
from ..logging import get_logger
from ..validation import normalize_template, validate_pipeline_functions

logger = get_logger(__name__)

UNIT = "UNIT"
PIPELINE = "PIPELINE"


class ResolverBuilder:
    """
    Builder for AppSync resolvers.

    Example:
        builder = ResolverBuilder(api, schema, functions, datasources, scope)

        builder.create_unit_resolver(
            "get_post",
            UnitResolverSpec(type_name="Query", field_name="getPost", datasource_name="posts"),
        )

        builder.create_pipeline_resolver(
            "create_post",
            PipelineResolverSpec(
                type_name="Mutation",
                field_name="createPost",
                functions=["check_author", "put_post"],
            ),
        )
    """

    def __init__(
        self,
        api: appsync.CfnGraphQLApi,
        schema: appsync.CfnGraphQLSchema,
        functions: Mapping[str, appsync.CfnFunctionConfiguration],
        datasources: Sequence[IDependable],
        scope: Construct,
    ):
        """
        Initialize the resolver builder.

        Args:
            api: AppSync GraphQL API
            schema: Schema the resolved fields are declared in
            functions: Created AppSync functions keyed by logical name
            datasources: Constructs every resolver must be created after
            scope: CDK construct scope for creating resources
        """
        self.api = api
        self.schema = schema
        self.functions = functions
        self.datasources = datasources
        self.scope = scope

    def _resolver_id(self, type_name: str, field_name: str, id_suffix: Optional[str]) -> str:
        # GraphQL names never contain ".", so the ID is unique per field
        return id_suffix or f"{type_name}.{field_name}"

    def _add_dependencies(self, resolver: appsync.CfnResolver) -> None:
        resolver.node.add_dependency(self.schema)
        if self.datasources:
            resolver.node.add_dependency(*self.datasources)

    def create_unit_resolver(
        self,
        key: str,
        spec: UnitResolverSpec,
        id_suffix: Optional[str] = None,
    ) -> appsync.CfnResolver:
        """
        Create a unit resolver bound directly to a data source.

        Args:
            key: Logical resolver key from settings
            spec: Resolver settings
            id_suffix: Optional custom CDK construct ID

        Returns:
            The created resolver
        """
        logger.info(
            "Creating unit resolver",
            resolver_key=key,
            type_name=spec.type_name,
            field_name=spec.field_name,
            datasource_name=spec.datasource_name,
        )

        resolver = appsync.CfnResolver(
            self.scope,
            self._resolver_id(spec.type_name, spec.field_name, id_suffix),
            api_id=self.api.attr_api_id,
            type_name=spec.type_name,
            field_name=spec.field_name,
            kind=UNIT,
            data_source_name=spec.datasource_name,
            request_mapping_template=normalize_template(spec.request_mapping_template),
            response_mapping_template=normalize_template(spec.response_mapping_template),
        )
        self._add_dependencies(resolver)
        return resolver

    def create_pipeline_resolver(
        self,
        key: str,
        spec: PipelineResolverSpec,
        id_suffix: Optional[str] = None,
    ) -> appsync.CfnResolver:
        """
        Create a pipeline resolver running functions in the given order.

        The logical function keys are replaced by the FunctionId of the
        created functions, so CloudFormation creates those functions first.

        Args:
            key: Logical resolver key from settings
            spec: Resolver settings
            id_suffix: Optional custom CDK construct ID

        Returns:
            The created resolver

        Raises:
            AppError: If a function key has no created function
        """
        validate_pipeline_functions(key, spec.functions, self.functions)

        logger.info(
            "Creating pipeline resolver",
            resolver_key=key,
            type_name=spec.type_name,
            field_name=spec.field_name,
            functions=spec.functions,
        )

        resolver = appsync.CfnResolver(
            self.scope,
            self._resolver_id(spec.type_name, spec.field_name, id_suffix),
            api_id=self.api.attr_api_id,
            type_name=spec.type_name,
            field_name=spec.field_name,
            kind=PIPELINE,
            pipeline_config=appsync.CfnResolver.PipelineConfigProperty(
                functions=[self.functions[function_key].attr_function_id for function_key in spec.functions],
            ),
            request_mapping_template=normalize_template(spec.request_mapping_template),
            response_mapping_template=normalize_template(spec.response_mapping_template),
        )
        self._add_dependencies(resolver)
        return resolver
