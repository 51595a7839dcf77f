"""Tests for setup_appsync orchestration and resolver wiring."""

import pytest
from aws_cdk import assertions
from aws_cdk import aws_appsync as appsync

from appsync_api.appsync import AppSyncResources, create_none_datasources, setup_appsync
from appsync_api.appsync.resolvers import create_resolvers
from appsync_api.config import PipelineResolverSpec, UnitResolverSpec
from appsync_api.errors import AppError, ErrorCode

FUNCTIONS = {
    "fetch_post": {
        "name": "FetchPost",
        "datasource_name": "local",
        "request_mapping_template": "fetch",
        "response_mapping_template": "",
    },
    "check_author": {
        "name": "CheckAuthor",
        "datasource_name": "local",
        "request_mapping_template": "check",
        "response_mapping_template": "$util.toJson($ctx.result)",
    },
}

UNIT_RESOLVERS = {
    "get_post": {
        "type_name": "Query",
        "field_name": "getPost",
        "datasource_name": "local",
        "request_mapping_template": "",
        "response_mapping_template": "$util.toJson($ctx.result)",
    }
}

PIPELINE_RESOLVERS = {
    "create_post": {
        "type_name": "Mutation",
        "field_name": "createPost",
        "functions": ["check_author", "fetch_post"],
    }
}


@pytest.fixture
def settings(make_settings):
    return make_settings(
        authentication_types=["API_KEY", "AWS_IAM"],
        functions=FUNCTIONS,
        unit_resolvers=UNIT_RESOLVERS,
        pipeline_resolvers=PIPELINE_RESOLVERS,
    )


class TestSetupAppSync:
    """Tests for setup_appsync function."""

    def test_returns_all_handles(self, stack, rn, settings):
        resources = setup_appsync(stack, settings, rn)

        assert isinstance(resources, AppSyncResources)
        assert list(resources.functions) == ["fetch_post", "check_author"]
        assert list(resources.unit_resolvers) == ["get_post"]
        assert list(resources.pipeline_resolvers) == ["create_post"]
        assert resources.api_key is None
        assert resources.log_group is not None

    def test_resource_counts(self, stack, rn, settings):
        setup_appsync(stack, settings, rn)

        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::IAM::Role", 1)
        template.resource_count_is("AWS::IAM::Policy", 1)
        template.resource_count_is("AWS::AppSync::GraphQLApi", 1)
        template.resource_count_is("AWS::AppSync::GraphQLSchema", 1)
        template.resource_count_is("AWS::AppSync::FunctionConfiguration", 2)
        template.resource_count_is("AWS::AppSync::Resolver", 2)
        template.resource_count_is("AWS::AppSync::ApiKey", 0)

    def test_pipeline_references_function_ids_in_order(self, stack, rn, settings):
        resources = setup_appsync(stack, settings, rn)

        check_id = stack.get_logical_id(resources.functions["check_author"])
        fetch_id = stack.get_logical_id(resources.functions["fetch_post"])

        assertions.Template.from_stack(stack).has_resource_properties(
            "AWS::AppSync::Resolver",
            {
                "Kind": "PIPELINE",
                "TypeName": "Mutation",
                "FieldName": "createPost",
                "PipelineConfig": {
                    "Functions": [
                        {"Fn::GetAtt": [check_id, "FunctionId"]},
                        {"Fn::GetAtt": [fetch_id, "FunctionId"]},
                    ]
                },
                "RequestMappingTemplate": " ",
                "ResponseMappingTemplate": " ",
            },
        )

    def test_unit_resolver_properties(self, stack, rn, settings):
        setup_appsync(stack, settings, rn)

        assertions.Template.from_stack(stack).has_resource_properties(
            "AWS::AppSync::Resolver",
            {
                "Kind": "UNIT",
                "TypeName": "Query",
                "FieldName": "getPost",
                "DataSourceName": "local",
                "RequestMappingTemplate": " ",
                "ResponseMappingTemplate": "$util.toJson($ctx.result)",
                "PipelineConfig": assertions.Match.absent(),
            },
        )

    def test_function_templates_normalized(self, stack, rn, settings):
        setup_appsync(stack, settings, rn)

        assertions.Template.from_stack(stack).has_resource_properties(
            "AWS::AppSync::FunctionConfiguration",
            {"Name": "FetchPost", "RequestMappingTemplate": "fetch", "ResponseMappingTemplate": " "},
        )

    def test_resolvers_depend_on_schema(self, stack, rn, settings):
        resources = setup_appsync(stack, settings, rn)

        schema_id = stack.get_logical_id(resources.schema)
        resolvers = assertions.Template.from_stack(stack).find_resources("AWS::AppSync::Resolver")
        for resolver in resolvers.values():
            assert schema_id in resolver["DependsOn"]

    def test_api_depends_on_logging_policy(self, stack, rn, settings):
        resources = setup_appsync(stack, settings, rn)

        policy_id = stack.get_logical_id(resources.logging_policy.node.default_child)
        (api,) = assertions.Template.from_stack(stack).find_resources("AWS::AppSync::GraphQLApi").values()
        assert policy_id in api["DependsOn"]

    def test_api_log_config_uses_logging_role(self, stack, rn, settings):
        resources = setup_appsync(stack, settings, rn)

        role_id = stack.get_logical_id(resources.logging_role.node.default_child)
        assertions.Template.from_stack(stack).has_resource_properties(
            "AWS::AppSync::GraphQLApi",
            {"LogConfig": {"CloudWatchLogsRoleArn": {"Fn::GetAtt": [role_id, "Arn"]}, "FieldLogLevel": "ERROR"}},
        )

    def test_datasource_factory_receives_api(self, stack, rn, settings):
        received = []

        def factory(api):
            received.append(api)
            return list(create_none_datasources(stack, api, ["local"]).values())

        resources = setup_appsync(stack, settings, rn, datasources=factory)

        assert received == [resources.api]
        datasource_id = stack.get_logical_id(stack.node.find_child("localNoneDataSource"))
        template = assertions.Template.from_stack(stack)
        for resource_type in ("AWS::AppSync::FunctionConfiguration", "AWS::AppSync::Resolver"):
            for resource in template.find_resources(resource_type).values():
                assert datasource_id in resource["DependsOn"]

    def test_api_key_created_when_requested(self, stack, rn, make_settings):
        resources = setup_appsync(stack, make_settings(create_api_key=True), rn)

        assert resources.api_key is not None
        assertions.Template.from_stack(stack).resource_count_is("AWS::AppSync::ApiKey", 1)

    def test_api_key_skipped_without_api_key_auth(self, stack, rn, make_settings):
        resources = setup_appsync(stack, make_settings(authentication_types=["AWS_IAM"], create_api_key=True), rn)

        assert resources.api_key is None
        assertions.Template.from_stack(stack).resource_count_is("AWS::AppSync::ApiKey", 0)

    def test_unknown_pipeline_function_fails_synth(self, stack, rn, make_settings):
        settings = make_settings(
            pipeline_resolvers={
                "create_post": {"type_name": "Mutation", "field_name": "createPost", "functions": ["missing"]}
            }
        )

        with pytest.raises(AppError) as exc_info:
            setup_appsync(stack, settings, rn)

        assert exc_info.value.error_code == ErrorCode.FUNCTION_NOT_FOUND


class TestCreateResolvers:
    """Tests for create_resolvers function."""

    def _api_and_schema(self, stack):
        api = appsync.CfnGraphQLApi(stack, "Api", name="posts-api", authentication_type="API_KEY")
        schema = appsync.CfnGraphQLSchema(
            stack, "Schema", api_id=api.attr_api_id, definition="type Query { get_post: String getPost: String }"
        )
        return api, schema

    def test_empty_maps_create_nothing(self, stack):
        api, schema = self._api_and_schema(stack)

        unit, pipeline = create_resolvers(stack, api, schema, {}, {}, {})

        assert unit == {}
        assert pipeline == {}
        assertions.Template.from_stack(stack).resource_count_is("AWS::AppSync::Resolver", 0)

    def test_fields_differing_only_in_case_and_underscores(self, stack):
        api, schema = self._api_and_schema(stack)
        unit_resolvers = {
            "get_post_snake": UnitResolverSpec(type_name="Query", field_name="get_post", datasource_name="local"),
            "get_post_camel": UnitResolverSpec(type_name="Query", field_name="getPost", datasource_name="local"),
        }

        unit, _ = create_resolvers(stack, api, schema, {}, unit_resolvers, {})

        assert stack.get_logical_id(unit["get_post_snake"]) != stack.get_logical_id(unit["get_post_camel"])
        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::AppSync::Resolver", 2)
        template.has_resource_properties("AWS::AppSync::Resolver", {"FieldName": "get_post"})
        template.has_resource_properties("AWS::AppSync::Resolver", {"FieldName": "getPost"})

    def test_second_resolver_for_same_field_rejected(self, stack):
        api, schema = self._api_and_schema(stack)
        unit_resolvers = {
            "get_post": UnitResolverSpec(type_name="Query", field_name="getPost", datasource_name="local"),
        }
        pipeline_resolvers = {
            "get_post_pipeline": PipelineResolverSpec(type_name="Query", field_name="getPost", functions=[]),
        }

        with pytest.raises(AppError) as exc_info:
            create_resolvers(stack, api, schema, {}, unit_resolvers, pipeline_resolvers)

        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT
        assert exc_info.value.details == {"field": "Query.getPost", "resolvers": ["get_post", "get_post_pipeline"]}
        assertions.Template.from_stack(stack).resource_count_is("AWS::AppSync::Resolver", 0)


class TestCreateNoneDatasources:
    """Tests for create_none_datasources function."""

    def test_none_datasources(self, stack):
        api = appsync.CfnGraphQLApi(stack, "Api", name="posts-api", authentication_type="API_KEY")

        created = create_none_datasources(stack, api, ["local", "echo"])

        assert list(created) == ["local", "echo"]
        template = assertions.Template.from_stack(stack)
        template.resource_count_is("AWS::AppSync::DataSource", 2)
        template.has_resource_properties(
            "AWS::AppSync::DataSource",
            {"Name": "echo", "Type": "NONE", "ApiId": {"Fn::GetAtt": [stack.get_logical_id(api), "ApiId"]}},
        )
