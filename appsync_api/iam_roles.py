"""
IAM roles and policies for the AppSync API stack.

Creates:
- CloudWatch Logs role assumed by AppSync
- Inline logging policy attached to that role
"""

from typing import Callable, Tuple

from aws_cdk import Stack
from aws_cdk import aws_iam as iam
from constructs import Construct

from .logging import get_logger

logger = get_logger(__name__)

LOGGING_ACTIONS = [
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
]


def create_appsync_logging_role(
    stack: Construct,
    rn: Callable[[str], str],
    api_name: str,
) -> Tuple[iam.Role, iam.Policy]:
    """Create the role AppSync assumes to write CloudWatch logs.

    Args:
        stack: CDK Construct (usually the Stack instance)
        rn: helper function to create resource names
        api_name: Base name of the GraphQL API

    Returns:
        Tuple of (logging_role, logging_policy)
    """
    role_name = rn(f"{api_name}-appsync-logs")
    logger.info("Creating AppSync logging role", role_name=role_name)

    logging_role = iam.Role(
        stack,
        "AppSyncLoggingRole",
        role_name=role_name,
        assumed_by=iam.ServicePrincipal("appsync.amazonaws.com"),
    )

    # Scoped to the stack's own account and region
    current = Stack.of(stack)
    logging_policy = iam.Policy(
        stack,
        "AppSyncLoggingPolicy",
        policy_name=rn(f"{api_name}-appsync-logs"),
        statements=[
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=LOGGING_ACTIONS,
                resources=[f"arn:{current.partition}:logs:{current.region}:{current.account}:*"],
            )
        ],
        roles=[logging_role],
    )

    return logging_role, logging_policy
