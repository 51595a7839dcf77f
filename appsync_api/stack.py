"""CDK stack deploying the AppSync GraphQL API described by a settings object."""

from typing import Optional, Sequence

from aws_cdk import CfnOutput, Stack
from aws_cdk import aws_appsync as appsync
from constructs import Construct

from .appsync import AppSyncResources, create_none_datasources, setup_appsync
from .config import AppSyncSettings
from .helpers import get_region_abbrev, make_resource_namer


class AppSyncStack(Stack):
    """
    AppSync GraphQL API stack

    Creates:
    - CloudWatch logging role and policy for AppSync
    - AppSync GraphQL API and schema
    - NONE data sources declared in settings
    - AppSync functions, unit resolvers and pipeline resolvers
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: AppSyncSettings,
        env_name: str = "dev",
        region_abbrev: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = env_name
        self.settings = settings
        self.region_abbrev = region_abbrev or get_region_abbrev()

        # Helper for consistent resource naming: {name}-{region}-{env}
        self.resource_name = make_resource_namer(self.region_abbrev, env_name)

        self.datasources: dict[str, appsync.CfnDataSource] = {}

        def datasource_factory(api: appsync.CfnGraphQLApi) -> Sequence[appsync.CfnDataSource]:
            self.datasources = create_none_datasources(self, api, settings.none_datasources)
            return list(self.datasources.values())

        self.appsync: AppSyncResources = setup_appsync(
            self,
            settings,
            self.resource_name,
            datasources=datasource_factory,
        )

        # ====================================================================
        # Outputs
        # ====================================================================

        api = self.appsync.api
        CfnOutput(self, "GraphQLApiId", value=api.attr_api_id)
        CfnOutput(self, "GraphQLApiUrl", value=api.attr_graph_ql_url)
        CfnOutput(self, "GraphQLApiArn", value=api.attr_arn)
        CfnOutput(self, "LoggingRoleArn", value=self.appsync.logging_role.role_arn)
        CfnOutput(self, "LogGroupName", value=self.appsync.log_group.log_group_name)
        if self.appsync.api_key is not None:
            CfnOutput(
                self,
                "GraphQLApiKey",
                value=self.appsync.api_key.attr_api_key,
                description="AppSync API key for API_KEY authorization",
            )
