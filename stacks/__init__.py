"""
CDK stack modules of the finance-log estate.

Every stack is deployed on its own and exchanges values with the others
only through SSM parameters:
- ``network``: VPC, ECS cluster and load balancer shared by a stage
- ``platform``: database, Cognito user pool and uploads bucket of an application
- ``registry``: the image repository of an application
- ``service``: the Fargate service running the backend
- ``frontend``, ``domain``, ``bastion``: edge, DNS and operator access
- ``orchestrator`` and ``topology``: which stack reads what, and in which
  order they are deployed
"""

# Common components first, every stack module builds on them
from .common import (
    BaseStack,
    IAMPolicyMixin,
    SecurityGroupMixin,
    CognitoMixin,
    CognitoConfiguration,
    CognitoResources,
    StackConfigurationError,
    ResourceCreationError,
    ValidationError,
    MissingContractError,
    DeploymentOrderError,
    ConfigValidator,
    AWSResourceValidator
)

from .network import NetworkStack
from .platform import CognitoStack, DatabaseStack, StorageStack
from .registry import RepositoryStack
from .service import ServiceStack
from .frontend import FrontendStack
from .domain import BackendDomainStack, CertificateStack, FrontendDomainStack
from .bastion import BastionStack
from .orchestrator import DeploymentPlan, StackNode
from .topology import build_deployment_plan

__all__ = [
    # Stack classes
    "NetworkStack",
    "CognitoStack",
    "DatabaseStack",
    "StorageStack",
    "RepositoryStack",
    "ServiceStack",
    "FrontendStack",
    "BackendDomainStack",
    "CertificateStack",
    "FrontendDomainStack",
    "BastionStack",

    # Orchestration
    "DeploymentPlan",
    "StackNode",
    "build_deployment_plan",

    # Base classes
    "BaseStack",

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
    "AWSResourceValidator"
]
