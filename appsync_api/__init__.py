"""AppSync GraphQL API infrastructure for the AWS CDK."""

from .appsync import AppSyncResources, setup_appsync
from .config import AppSyncSettings, load_settings, settings_from_dict
from .errors import AppError, ErrorCode

__all__ = [
    "AppError",
    "AppSyncResources",
    "AppSyncSettings",
    "ErrorCode",
    "load_settings",
    "settings_from_dict",
    "setup_appsync",
]
