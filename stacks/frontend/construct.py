"""
Static frontend hosting.

The single-page app is served from a private bucket through CloudFront.
The bucket is only reachable through the distribution's origin access
control. Unknown paths fall back to ``index.html`` so client-side routing
keeps working on reload.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from aws_cdk import (
    aws_certificatemanager as acm,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as cloudfront_origins,
    aws_s3 as s3,
    Duration,
    RemovalPolicy
)
from constructs import Construct

from stacks.common.constants import FRONTEND_DEFAULT_ROOT_OBJECT
from stacks.common.exceptions import ValidationError
from stacks.common.environment import ApplicationEnvironment
from stacks.common.validators import AWSResourceValidator, ConfigValidator
from stacks.contracts import FrontendOutputParameters, ParameterContractStore

logger = logging.getLogger(__name__)

# Status codes S3 answers with for keys that do not exist
SPA_FALLBACK_STATUS_CODES = (403, 404)


@dataclass(frozen=True)
class FrontendInputParameters:
    """
    Inputs of the frontend construct.

    Attributes:
        domain_name: Custom domain the distribution answers on
        certificate_arn: ACM certificate in us-east-1 covering the domain
    """

    domain_name: Optional[str] = None
    certificate_arn: Optional[str] = None

    def __post_init__(self):
        if (self.domain_name is None) != (self.certificate_arn is None):
            raise ValidationError(
                "A custom frontend domain needs both a domain name and a certificate",
                parameter_name="FrontendCertificateArn",
                provided_value=self.certificate_arn
            )
        if self.domain_name is not None:
            ConfigValidator.require_non_empty(self.domain_name, "AppDomain")
            AWSResourceValidator.validate_arn(self.certificate_arn, service="acm")


class FrontendConstruct(Construct):
    """Bucket and CloudFront distribution of the web frontend."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 store: ParameterContractStore,
                 input_parameters: Optional[FrontendInputParameters] = None) -> None:
        super().__init__(scope, construct_id)
        self.env = env
        self.input_parameters = input_parameters or FrontendInputParameters()

        self.bucket = s3.Bucket(
            self,
            "FrontendBucket",
            bucket_name=env.prefix("frontend-assets"),
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            object_ownership=s3.ObjectOwnership.BUCKET_OWNER_ENFORCED,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True
        )

        self.distribution = self._create_distribution()

        self.output_parameters = FrontendOutputParameters(
            cloudfront_distribution_id=self.distribution.distribution_id,
            cloudfront_domain_name=self.distribution.distribution_domain_name
        )
        self.output_parameters.publish(store, env)

        env.tag(self)

    def _create_distribution(self) -> cloudfront.Distribution:
        domain_names = None
        certificate = None
        if self.input_parameters.domain_name is not None:
            logger.info(f"Serving frontend of {self.env} on {self.input_parameters.domain_name}")
            domain_names = [self.input_parameters.domain_name]
            certificate = acm.Certificate.from_certificate_arn(
                self, "FrontendCertificate", self.input_parameters.certificate_arn
            )

        error_responses = [
            cloudfront.ErrorResponse(
                http_status=status,
                response_http_status=200,
                response_page_path=f"/{FRONTEND_DEFAULT_ROOT_OBJECT}",
                ttl=Duration.seconds(0)
            )
            for status in SPA_FALLBACK_STATUS_CODES
        ]

        return cloudfront.Distribution(
            self,
            "FrontendDistribution",
            default_behavior=cloudfront.BehaviorOptions(
                origin=cloudfront_origins.S3BucketOrigin.with_origin_access_control(self.bucket),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                compress=True,
                cache_policy=cloudfront.CachePolicy.CACHING_OPTIMIZED
            ),
            domain_names=domain_names,
            certificate=certificate,
            minimum_protocol_version=cloudfront.SecurityPolicyProtocol.TLS_V1_2_2021,
            default_root_object=FRONTEND_DEFAULT_ROOT_OBJECT,
            error_responses=error_responses,
            comment=f"Frontend of {self.env}"
        )
