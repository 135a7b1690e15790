"""Backend service deployment."""

from .construct import (
    ExternalImage,
    RegistryImage,
    SecretReference,
    ServiceConstruct,
    ServiceInputParameters
)
from .environment_variables import build_environment_variables, build_secret_references
from .stack import ServiceStack

__all__ = [
    "ExternalImage",
    "RegistryImage",
    "SecretReference",
    "ServiceConstruct",
    "ServiceInputParameters",
    "build_environment_variables",
    "build_secret_references",
    "ServiceStack",
]
