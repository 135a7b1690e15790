from aws_cdk import CfnOutput
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.contracts import DatabaseOutputParameters, NetworkOutputParameters
from .construct import BastionConstruct, BastionInputParameters


class BastionStack(BaseStack):
    """Temporary SSH access to the database of an application."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        env = self.application_environment
        input_parameters = BastionInputParameters(
            key_name=self.get_required_config('BastionKeyName'),
            allowed_ssh_cidr=self.get_optional_config('BastionAllowedSshCidr', "0.0.0.0/0")
        )

        self.bastion = BastionConstruct(
            self,
            "Bastion",
            env=env,
            input_parameters=input_parameters,
            network=NetworkOutputParameters.load(self.contract_store, env),
            database=DatabaseOutputParameters.load(self.contract_store, env)
        )

        CfnOutput(
            self, "BastionHostPublicIp",
            value=self.bastion.instance.attr_public_ip,
            description="Public IP to SSH into"
        )
