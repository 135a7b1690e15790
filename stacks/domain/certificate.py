import logging

from aws_cdk import (
    aws_certificatemanager as acm,
    CfnOutput
)
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from .hosted_zone import resolve_hosted_zone

logger = logging.getLogger(__name__)


class CertificateStack(BaseStack):
    """
    Issues a DNS-validated certificate for a domain of the hosted zone.

    The ARN is exported so it can be copied into ``SslCertificateArn`` or
    ``FrontendCertificateArn`` of the stage's configuration.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 domain_name_key: str = 'ApiDomain',
                 export_name: str = "sslCertificateArn",
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        domain_name = self.get_required_config(domain_name_key)
        hosted_zone = resolve_hosted_zone(self)

        logger.info(f"Requesting certificate for {domain_name}")
        self.certificate = acm.Certificate(
            self,
            "WebCertificate",
            domain_name=domain_name,
            validation=acm.CertificateValidation.from_dns(hosted_zone)
        )

        CfnOutput(
            self, "SslCertificateArn",
            value=self.certificate.certificate_arn,
            export_name=export_name
        )
