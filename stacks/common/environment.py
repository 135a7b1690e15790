"""
Deployment identity shared by every stack.

An ``ApplicationEnvironment`` is the pair (application name, deployment
stage). It is the only source of resource names and of the two tags every
stack carries, so two stages of the same application, or two applications
in the same stage, never collide.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aws_cdk as cdk
from constructs import IConstruct

from .exceptions import StackConfigurationError, ValidationError
from .validators import ConfigValidator

logger = logging.getLogger(__name__)

_DISALLOWED_NAME_CHARACTERS = re.compile(r"[^a-zA-Z0-9-]")


def sanitize_name(value: str) -> str:
    """Strip every character that is not a letter, digit or hyphen."""
    return _DISALLOWED_NAME_CHARACTERS.sub("", value)


class DeploymentStage(Enum):
    """Stages an application can be deployed to."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"

    @classmethod
    def from_name(cls, name: str) -> "DeploymentStage":
        ConfigValidator.require_non_empty(name, "DeploymentStage")
        for stage in cls:
            if stage.value == name.strip().lower():
                return stage
        raise StackConfigurationError(
            f"Unknown deployment stage: {name}",
            config_key="DeploymentStage"
        )


class SpringProfile(Enum):
    """Spring profile activated inside the service container."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"

    @classmethod
    def from_name(cls, name: str) -> "SpringProfile":
        ConfigValidator.require_non_empty(name, "SpringProfile")
        for profile in cls:
            if profile.value == name.strip().lower():
                return profile
        raise StackConfigurationError(
            f"Unknown spring profile: {name}",
            config_key="SpringProfile"
        )


@dataclass(frozen=True)
class ApplicationEnvironment:
    """
    Naming and tagging identity of one application in one stage.

    Attributes:
        application_name: Name of the application, e.g. ``finance-log``
        deployment_stage: Stage the application is deployed to

    Raises:
        StackConfigurationError: If the application name is blank
    """

    application_name: str
    deployment_stage: DeploymentStage

    def __post_init__(self):
        ConfigValidator.require_non_empty(self.application_name, "ApplicationName")
        if not isinstance(self.deployment_stage, DeploymentStage):
            raise StackConfigurationError(
                f"Deployment stage must be a DeploymentStage, got {self.deployment_stage!r}",
                config_key="DeploymentStage"
            )

    @property
    def stage_name(self) -> str:
        return self.deployment_stage.value

    def __str__(self) -> str:
        return sanitize_name(f"{self.stage_name}-{self.application_name}")

    def prefix(self, suffix: str, limit: Optional[int] = None) -> str:
        """
        Build a resource name unique to this application and stage.

        Args:
            suffix: Resource-specific part of the name
            limit: Hard length ceiling of the target resource type. Longer
                names keep their last ``limit`` characters.

        Returns:
            The sanitized ``{stage}-{app}-{suffix}`` name

        Raises:
            ValidationError: If ``limit`` is smaller than one
        """
        if limit is not None and limit < 1:
            raise ValidationError(
                f"Name length limit must be at least 1, got {limit}",
                parameter_name="limit",
                provided_value=str(limit)
            )
        name = sanitize_name(f"{self}-{suffix}")
        if limit is None or len(name) <= limit:
            return name

        truncated = name[-limit:]
        logger.debug(f"Truncated name '{name}' to '{truncated}' (limit {limit})")
        return truncated

    def tag(self, construct: IConstruct) -> None:
        """Tag a construct and everything below it with stage and application."""
        cdk.Tags.of(construct).add("deployment", self.stage_name)
        cdk.Tags.of(construct).add("application", self.application_name)
