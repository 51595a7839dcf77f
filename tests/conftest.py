"""
Shared fixtures for AppSync stack tests.

Provides a fresh CDK stack, a resource namer and a settings factory.
"""

from typing import Any, Callable

import pytest
from aws_cdk import App, Environment, Stack

from appsync_api.config import AppSyncSettings, settings_from_dict

SCHEMA = """
type Post {
    id: ID!
    title: String
}

type Query {
    getPost(id: ID!): Post
}

type Mutation {
    createPost(title: String!): Post
}
"""


@pytest.fixture
def stack() -> Stack:
    """Create a test stack pinned to an account and region."""
    app = App()
    return Stack(app, "TestStack", env=Environment(account="123456789012", region="us-east-1"))


@pytest.fixture
def rn() -> Callable[[str], str]:
    """Create a resource naming function."""

    def _rn(name: str) -> str:
        return f"{name}-ue1-test"

    return _rn


@pytest.fixture
def make_settings() -> Callable[..., AppSyncSettings]:
    """Build settings from keyword overrides on top of a minimal document."""

    def _make(**overrides: Any) -> AppSyncSettings:
        data: dict[str, Any] = {
            "name": "posts-api",
            "schema": SCHEMA,
            "authentication_types": ["API_KEY"],
        }
        data.update(overrides)
        return settings_from_dict(data)

    return _make
