"""
MySQL database of one application.

The instance lives in the isolated subnets of the shared network. Its
credentials are generated into a Secrets Manager secret that is attached
to the instance, so the secret always holds the live endpoint as well.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from aws_cdk import (
    aws_rds as rds,
    aws_secretsmanager as secretsmanager,
    CfnDeletionPolicy,
    RemovalPolicy
)
from constructs import Construct

from stacks.common.constants import (
    DATABASE_ENGINE,
    DATABASE_PASSWORD_EXCLUDED_CHARACTERS,
    DATABASE_PASSWORD_LENGTH,
    DEFAULT_DATABASE_INSTANCE_CLASS,
    DEFAULT_DATABASE_STORAGE_GB,
    DEFAULT_MYSQL_VERSION
)
from stacks.common.environment import ApplicationEnvironment
from stacks.common.exceptions import ValidationError
from stacks.common.mixins import SecurityGroupMixin
from stacks.common.validators import ConfigValidator
from stacks.contracts import (
    DatabaseOutputParameters,
    NetworkOutputParameters,
    ParameterContractStore
)

logger = logging.getLogger(__name__)

# RDS identifiers are limited to 63 characters
DB_INSTANCE_IDENTIFIER_MAX_LENGTH = 63
MINIMUM_STORAGE_GB = 20


def sanitize_database_identifier(value: str) -> str:
    """
    Turn a resource name into a MySQL database or user name.

    Only letters, digits and underscores survive, and a name that does not
    start with a letter gets its first character replaced by ``a``.
    """
    value = re.sub(r"[^a-zA-Z0-9_]", "", value)
    return re.sub(r"^[^a-zA-Z]", "a", value)


@dataclass(frozen=True)
class DatabaseInputParameters:
    storage_in_gb: int = DEFAULT_DATABASE_STORAGE_GB
    instance_class: str = DEFAULT_DATABASE_INSTANCE_CLASS
    engine_version: str = DEFAULT_MYSQL_VERSION

    def __post_init__(self):
        if self.storage_in_gb < MINIMUM_STORAGE_GB:
            raise ValidationError(
                f"Allocated storage must be at least {MINIMUM_STORAGE_GB} GB, got {self.storage_in_gb}",
                parameter_name="storage_in_gb",
                provided_value=str(self.storage_in_gb)
            )
        ConfigValidator.require_non_empty(self.instance_class, "DatabaseInstanceClass")
        ConfigValidator.require_non_empty(self.engine_version, "DatabaseEngineVersion")


class DatabaseConstruct(Construct, SecurityGroupMixin):
    """
    MySQL instance, its credentials secret and security group.

    The security group has no ingress rules of its own. Consumers such as
    the backend service and the bastion host add rules for themselves.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 store: ParameterContractStore,
                 network: NetworkOutputParameters,
                 input_parameters: Optional[DatabaseInputParameters] = None) -> None:
        super().__init__(scope, construct_id)
        self.env = env
        self.input_parameters = input_parameters or DatabaseInputParameters()

        self.security_group = self.create_security_group(
            "DatabaseSecurityGroup",
            vpc_id=network.vpc_id,
            description="Security Group for MySQL Database",
            group_name=env.prefix("db-sg")
        )
        self.secret = self._create_secret()
        subnet_group = self._create_subnet_group(network)
        self.instance = self._create_instance(subnet_group)
        self.instance.add_dependency(subnet_group)

        secretsmanager.CfnSecretTargetAttachment(
            self,
            "SecretTargetAttachment",
            secret_id=self.secret.secret_arn,
            target_id=self.instance.ref,
            target_type="AWS::RDS::DBInstance"
        )

        self.output_parameters = DatabaseOutputParameters(
            endpoint_address=self.instance.attr_endpoint_address,
            endpoint_port=self.instance.attr_endpoint_port,
            database_name=self.instance.db_name,
            secret_arn=self.secret.secret_arn,
            security_group_id=self.security_group.attr_group_id,
            instance_id=self.instance.db_instance_identifier
        )
        self.output_parameters.publish(store, env)
        logger.info(f"Declared MySQL {self.input_parameters.engine_version} instance for {env}")

    def _create_secret(self) -> secretsmanager.Secret:
        username = sanitize_database_identifier(self.env.prefix("dbUser"))
        return secretsmanager.Secret(
            self,
            "DatabaseSecret",
            secret_name=self.env.prefix("db-secret"),
            description="Credentials to the RDS instance",
            removal_policy=RemovalPolicy.DESTROY,
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({"username": username}),
                generate_string_key="password",
                password_length=DATABASE_PASSWORD_LENGTH,
                exclude_characters=DATABASE_PASSWORD_EXCLUDED_CHARACTERS
            )
        )

    def _create_subnet_group(self, network: NetworkOutputParameters) -> rds.CfnDBSubnetGroup:
        return rds.CfnDBSubnetGroup(
            self,
            "DatabaseSubnetGroup",
            db_subnet_group_description="Subnet Group for the DB Instance",
            db_subnet_group_name=self.env.prefix("db-subnet-group"),
            subnet_ids=network.isolated_subnet_ids
        )

    def _create_instance(self, subnet_group: rds.CfnDBSubnetGroup) -> rds.CfnDBInstance:
        params = self.input_parameters
        instance = rds.CfnDBInstance(
            self,
            "MySQLInstance",
            db_instance_identifier=self.env.prefix("database", limit=DB_INSTANCE_IDENTIFIER_MAX_LENGTH),
            allocated_storage=str(params.storage_in_gb),
            vpc_security_groups=[self.security_group.attr_group_id],
            db_subnet_group_name=subnet_group.db_subnet_group_name,
            db_instance_class=params.instance_class,
            publicly_accessible=False,
            engine=DATABASE_ENGINE,
            engine_version=params.engine_version,
            db_name=sanitize_database_identifier(self.env.prefix("database")),
            deletion_protection=False,
            delete_automated_backups=True,
            master_username=self.secret.secret_value_from_json("username").unsafe_unwrap(),
            master_user_password=self.secret.secret_value_from_json("password").unsafe_unwrap()
        )
        instance.cfn_options.deletion_policy = CfnDeletionPolicy.DELETE
        return instance
