"""Per-application platform services: database, user pool and upload storage."""

from .database import DatabaseConstruct, DatabaseInputParameters, DatabaseStack
from .cognito import CognitoStack
from .storage import StorageConstruct, StorageInputParameters, StorageStack

__all__ = [
    "DatabaseConstruct",
    "DatabaseInputParameters",
    "DatabaseStack",
    "CognitoStack",
    "StorageConstruct",
    "StorageInputParameters",
    "StorageStack",
]
