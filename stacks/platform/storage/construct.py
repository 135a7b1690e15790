"""User uploads bucket of one application."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from aws_cdk import (
    aws_s3 as s3,
    RemovalPolicy
)
from constructs import Construct

from stacks.common.constants import DEFAULT_UPLOAD_CORS_ORIGINS
from stacks.common.environment import ApplicationEnvironment
from stacks.common.exceptions import ValidationError
from stacks.contracts import ParameterContractStore, StorageOutputParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageInputParameters:
    """
    Attributes:
        cors_origins: Origins allowed to upload with presigned URLs
        public_read: Serve uploaded objects at their public S3 URL
    """

    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_UPLOAD_CORS_ORIGINS))
    public_read: bool = True

    def __post_init__(self):
        if not self.cors_origins:
            raise ValidationError(
                "At least one CORS origin is required for browser uploads",
                parameter_name="cors_origins",
                provided_value=str(self.cors_origins)
            )


class StorageConstruct(Construct):
    """
    Bucket the browser uploads profile pictures to through presigned URLs.

    Publishes the bucket name as the ``s3`` parameter family.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 store: ParameterContractStore,
                 input_parameters: Optional[StorageInputParameters] = None) -> None:
        super().__init__(scope, construct_id)
        params = input_parameters or StorageInputParameters()

        if params.public_read:
            block_public_access = s3.BlockPublicAccess(
                block_public_acls=False,
                block_public_policy=False,
                ignore_public_acls=False,
                restrict_public_buckets=False
            )
        else:
            block_public_access = s3.BlockPublicAccess.BLOCK_ALL

        self.bucket = s3.Bucket(
            self,
            "UserUploadsBucket",
            bucket_name=env.prefix("user-uploads"),
            block_public_access=block_public_access,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            encryption=s3.BucketEncryption.S3_MANAGED,
            cors=[
                s3.CorsRule(
                    allowed_origins=list(params.cors_origins),
                    allowed_methods=[
                        s3.HttpMethods.PUT,
                        s3.HttpMethods.POST,
                        s3.HttpMethods.GET
                    ],
                    allowed_headers=["*"],
                    exposed_headers=["ETag"]
                )
            ]
        )

        if params.public_read:
            logger.info(f"Objects of {env.prefix('user-uploads')} are publicly readable")
            self.bucket.grant_public_access()

        self.output_parameters = StorageOutputParameters(bucket_name=self.bucket.bucket_name)
        self.output_parameters.publish(store, env)
