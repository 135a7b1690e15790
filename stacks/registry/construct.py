"""
ECR repository the backend image is pushed to.

The repository is shared by every stage of an application, so it is named
after the application only and deployed once.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

from aws_cdk import (
    aws_ecr as ecr,
    aws_iam as iam,
    RemovalPolicy
)
from constructs import Construct

from stacks.common.constants import DEFAULT_MAX_IMAGE_COUNT
from stacks.common.exceptions import ValidationError
from stacks.common.validators import ConfigValidator


@dataclass(frozen=True)
class PushedImage:
    """An image in the repository, as far as the lifecycle rule is concerned."""

    digest: str
    pushed_at: datetime


def select_expired_images(images: Iterable[PushedImage], max_image_count: int) -> List[PushedImage]:
    """
    Images the ``imageCountMoreThan`` lifecycle rule expires.

    ECR keeps the ``max_image_count`` most recently pushed images and
    expires the rest, oldest first.

    Args:
        images: Images currently in the repository, in any order
        max_image_count: Number of images the rule keeps

    Returns:
        The expired images, oldest first
    """
    if max_image_count < 1:
        raise ValidationError(
            f"Max image count must be at least 1, got {max_image_count}",
            parameter_name="max_image_count",
            provided_value=str(max_image_count)
        )

    ordered = sorted(images, key=lambda image: (image.pushed_at, image.digest))
    excess = len(ordered) - max_image_count
    return ordered[:excess] if excess > 0 else []


@dataclass(frozen=True)
class RepositoryInputParameters:
    repository_name: str
    account_id: str
    max_image_count: int = DEFAULT_MAX_IMAGE_COUNT
    retain_registry_on_delete: bool = False

    def __post_init__(self):
        ConfigValidator.require_non_empty(self.repository_name, "RepositoryName")
        ConfigValidator.require_non_empty(self.account_id, "AccountId")
        if self.max_image_count < 1:
            raise ValidationError(
                f"Max image count must be at least 1, got {self.max_image_count}",
                parameter_name="max_image_count",
                provided_value=str(self.max_image_count)
            )


class RepositoryConstruct(Construct):
    """Repository with a count-based lifecycle rule, pushable and pullable by one account."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 input_parameters: RepositoryInputParameters) -> None:
        super().__init__(scope, construct_id)
        params = input_parameters

        self.repository = ecr.Repository(
            self,
            "EcrRepository",
            repository_name=params.repository_name,
            removal_policy=RemovalPolicy.RETAIN if params.retain_registry_on_delete else RemovalPolicy.DESTROY,
            lifecycle_rules=[
                ecr.LifecycleRule(
                    rule_priority=1,
                    description=f"Limit to {params.max_image_count} images",
                    max_image_count=params.max_image_count
                )
            ]
        )

        self.repository.grant_pull_push(iam.AccountPrincipal(params.account_id))
