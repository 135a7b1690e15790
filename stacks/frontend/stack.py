from aws_cdk import CfnOutput
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from .construct import FrontendConstruct, FrontendInputParameters


class FrontendStack(BaseStack):
    """
    Deploys the ``frontend`` parameter family of an application.

    Must be deployed to us-east-1 because CloudFront only accepts
    certificates from there.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        input_parameters = FrontendInputParameters(
            domain_name=self.get_optional_config('AppDomain') or None,
            certificate_arn=self.get_optional_config('FrontendCertificateArn') or None
        )

        self.frontend = FrontendConstruct(
            self,
            "Frontend",
            env=self.application_environment,
            store=self.contract_store,
            input_parameters=input_parameters
        )

        env = self.application_environment
        CfnOutput(
            self, "CloudFrontDomainName",
            value=self.frontend.distribution.distribution_domain_name,
            description="Domain name of the frontend distribution",
            export_name=env.prefix("frontend-cloudfront-domain")
        )
        CfnOutput(
            self, "CloudFrontDistributionId",
            value=self.frontend.distribution.distribution_id,
            description="ID of the frontend distribution, used to invalidate the cache",
            export_name=env.prefix("frontend-cloudfront-id")
        )
