"""Image repository of an application."""

from .construct import (
    PushedImage,
    RepositoryConstruct,
    RepositoryInputParameters,
    select_expired_images
)
from .stack import RepositoryStack

__all__ = [
    "PushedImage",
    "RepositoryConstruct",
    "RepositoryInputParameters",
    "RepositoryStack",
    "select_expired_images",
]
