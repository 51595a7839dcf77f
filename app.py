#!/usr/bin/env python3
import os
import subprocess
import sys
from pathlib import Path

import aws_cdk as cdk

from appsync_api.config import load_settings
from appsync_api.errors import AppError, handle_error
from appsync_api.helpers import get_region, get_region_abbrev, get_settings_path, load_env_file
from appsync_api.logging import get_logger
from appsync_api.stack import AppSyncStack

logger = get_logger("app")

# Load environment variables from .env file if it exists
load_env_file(Path(__file__).parent / ".env")

app = cdk.App()

# Get environment from context or environment variable (dev/prod)
env_name = app.node.try_get_context("environment") or os.getenv("ENVIRONMENT", "dev")

# Get region and its abbreviation for stack naming
region = get_region()
region_abbrev = get_region_abbrev(region)

# Get AWS account ID - optional, the stack is environment agnostic without it
account = os.getenv("AWS_ACCOUNT_ID") or os.getenv("CDK_DEFAULT_ACCOUNT")
if not account:
    # Try to get from AWS CLI if not in environment
    try:
        account = subprocess.check_output(
            ["aws", "sts", "get-caller-identity", "--query", "Account", "--output", "text"],
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        account = None

env = cdk.Environment(
    account=account,
    region=region,
)

settings_path = get_settings_path(app, base_dir=Path(__file__).parent)
try:
    settings = load_settings(settings_path)
except AppError as e:
    logger.error("Invalid AppSync settings", settings_file=str(settings_path), error=handle_error(e))
    sys.exit(1)

stack = AppSyncStack(
    app,
    f"AppSyncStack-{settings.name}-{region_abbrev}-{env_name}",
    stack_name=f"{settings.name}-{region_abbrev}-{env_name}",
    settings=settings,
    env_name=env_name,
    region_abbrev=region_abbrev,
    env=env,
    description=f"AppSync GraphQL API {settings.name} ({region_abbrev}-{env_name})",
)

app.synth()
