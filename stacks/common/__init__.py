"""
Common CDK stack components and utilities.

This module provides the pieces every stack of the estate is built from:
- Deployment identity (application name and stage) for names and tags
- A base stack bound to configuration and the parameter contract store
- Reusable mixins for IAM roles, security groups and Cognito
- Custom exceptions and input validators
"""

# Import exceptions
from .exceptions import (
    StackConfigurationError,
    ResourceCreationError,
    ValidationError,
    MissingContractError,
    DeploymentOrderError
)

# Import validators
from .validators import (
    ConfigValidator,
    AWSResourceValidator
)

# Import constants
from .constants import *

# Import deployment identity
from .environment import (
    ApplicationEnvironment,
    DeploymentStage,
    SpringProfile,
    sanitize_name
)

# Import base classes
from .base import BaseStack, application_environment_from_config, retention_from_days

# Import mixins
from .mixins import (
    IAMPolicyMixin,
    SecurityGroupMixin,
    CognitoMixin,
    CognitoConfiguration,
    CognitoResources
)

__all__ = [
    # Base classes
    "BaseStack",
    "application_environment_from_config",
    "retention_from_days",

    # Deployment identity
    "ApplicationEnvironment",
    "DeploymentStage",
    "SpringProfile",
    "sanitize_name",

    # Mixins
    "IAMPolicyMixin",
    "SecurityGroupMixin",
    "CognitoMixin",
    "CognitoConfiguration",
    "CognitoResources",

    # Exceptions
    "StackConfigurationError",
    "ResourceCreationError",
    "ValidationError",
    "MissingContractError",
    "DeploymentOrderError",

    # Validators
    "ConfigValidator",
    "AWSResourceValidator",

    # Constants (imported from constants module)
]
