from aws_cdk import (
    aws_cloudfront as cloudfront,
    aws_route53 as route53,
    aws_route53_targets as route53_targets
)
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.contracts import FrontendOutputParameters
from .hosted_zone import resolve_hosted_zone


class FrontendDomainStack(BaseStack):
    """
    Points ``AppDomain`` at the frontend distribution.

    Reads the ``frontend`` family, so it is deployed to us-east-1 next to
    the frontend stack.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        domain_name = self.get_required_config('AppDomain')
        hosted_zone = resolve_hosted_zone(self)
        frontend = FrontendOutputParameters.load(self.contract_store, self.application_environment)

        distribution = cloudfront.Distribution.from_distribution_attributes(
            self,
            "Distribution",
            distribution_id=frontend.cloudfront_distribution_id,
            domain_name=frontend.cloudfront_domain_name
        )

        self.record = route53.ARecord(
            self,
            "CdnARecord",
            zone=hosted_zone,
            record_name=domain_name,
            target=route53.RecordTarget.from_alias(route53_targets.CloudFrontTarget(distribution))
        )
