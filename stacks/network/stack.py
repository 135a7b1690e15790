from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from .construct import NetworkConstruct, NetworkInputParameters


class NetworkStack(BaseStack):
    """Deploys the ``network`` parameter family of a stage."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        input_parameters = NetworkInputParameters(
            ssl_certificate_arn=self.get_optional_config('SslCertificateArn') or None
        )

        self.network = NetworkConstruct(
            self,
            "Network",
            env=self.application_environment,
            store=self.contract_store,
            input_parameters=input_parameters
        )
