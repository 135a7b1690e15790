"""Mixin classes for CDK stacks and constructs."""

from .iam import IAMPolicyMixin
from .security import SecurityGroupMixin
from .cognito import CognitoMixin, CognitoConfiguration, CognitoResources

__all__ = [
    "IAMPolicyMixin",
    "SecurityGroupMixin",
    "CognitoMixin",
    "CognitoConfiguration",
    "CognitoResources"
]
