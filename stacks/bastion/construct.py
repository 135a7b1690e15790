"""
SSH jump host into the isolated subnets.

The bastion sits in a public subnet and is the only way to reach the
database from outside the VPC. It is meant to be deployed while it is
needed and destroyed afterwards.
"""

import logging
from dataclasses import dataclass

from aws_cdk import (
    aws_ec2 as ec2,
    aws_ssm as ssm,
    Fn
)
from constructs import Construct

from stacks.common.constants import (
    BASTION_AMI_PARAMETER,
    BASTION_INSTANCE_TYPE,
    BASTION_SSH_PORT,
    DATABASE_PORT
)
from stacks.common.environment import ApplicationEnvironment
from stacks.common.mixins import SecurityGroupMixin
from stacks.common.validators import ConfigValidator
from stacks.contracts import DatabaseOutputParameters, NetworkOutputParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BastionInputParameters:
    """
    Attributes:
        key_name: EC2 key pair allowed to log in
        allowed_ssh_cidr: Address range SSH is open to
        instance_type: EC2 instance type of the host
    """

    key_name: str
    allowed_ssh_cidr: str = "0.0.0.0/0"
    instance_type: str = BASTION_INSTANCE_TYPE

    def __post_init__(self):
        ConfigValidator.require_non_empty(self.key_name, "BastionKeyName")
        ConfigValidator.validate_cidr_block(self.allowed_ssh_cidr)


class BastionConstruct(Construct, SecurityGroupMixin):
    """Bastion host with SSH access to the application's database."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 input_parameters: BastionInputParameters,
                 network: NetworkOutputParameters,
                 database: DatabaseOutputParameters) -> None:
        super().__init__(scope, construct_id)

        self.security_group = self.create_security_group(
            "BastionHostSecurityGroup",
            vpc_id=network.vpc_id,
            description="SecurityGroup containing the BastionHost",
            group_name=env.prefix("bastion-host-sg")
        )
        self.add_ingress_rule_with_validation(
            "BastionHostSecurityGroupIngress",
            group_id=self.security_group.attr_group_id,
            cidr_ip=input_parameters.allowed_ssh_cidr,
            port=BASTION_SSH_PORT
        )
        self.add_ingress_rule_with_validation(
            "DatabaseSecurityGroupIngress",
            group_id=database.security_group_id,
            source_security_group_id=self.security_group.attr_group_id,
            port=DATABASE_PORT
        )

        self.instance = ec2.CfnInstance(
            self,
            "BastionHost",
            instance_type=input_parameters.instance_type,
            image_id=ssm.StringParameter.value_for_string_parameter(self, BASTION_AMI_PARAMETER),
            key_name=input_parameters.key_name,
            network_interfaces=[
                ec2.CfnInstance.NetworkInterfaceProperty(
                    device_index="0",
                    associate_public_ip_address=True,
                    subnet_id=Fn.select(0, network.public_subnet_ids),
                    group_set=[self.security_group.attr_group_id]
                )
            ]
        )
        logger.info(f"Declared bastion host for {env} using key pair {input_parameters.key_name}")

        env.tag(self)
