"""
Typed output bundles, one per parameter family.

A bundle is everything one producing stack publishes. The producer builds
it from its resources and calls ``publish``. A consumer calls ``load`` and
gets the same shape back, with CloudFormation tokens in place of values
when the store is backed by CDK.
"""

from dataclasses import dataclass
from typing import List, Optional

from aws_cdk import aws_ssm as ssm

from stacks.common.environment import ApplicationEnvironment
from .keys import (
    CognitoOutputs,
    DatabaseOutputs,
    FrontendOutputs,
    NetworkOutputs,
    ParameterFamily,
    StorageOutputs,
)
from .store import ParameterContractStore


@dataclass(frozen=True)
class NetworkOutputParameters:
    """Shared network, load balancer and cluster of one stage."""

    vpc_id: str
    http_listener_arn: str
    https_listener_arn: Optional[str]
    load_balancer_security_group_id: str
    ecs_cluster_name: str
    isolated_subnet_ids: List[str]
    public_subnet_ids: List[str]
    availability_zones: List[str]
    load_balancer_arn: str
    load_balancer_dns_name: str
    load_balancer_canonical_hosted_zone_id: str

    def publish(self, store: ParameterContractStore, env: ApplicationEnvironment) -> None:
        family = ParameterFamily.NETWORK
        store.publish(family, env, NetworkOutputs.VPC_ID, self.vpc_id)
        store.publish(family, env, NetworkOutputs.HTTP_LISTENER_ARN, self.http_listener_arn)
        store.publish_optional(family, env, NetworkOutputs.HTTPS_LISTENER_ARN, self.https_listener_arn)
        store.publish(family, env, NetworkOutputs.LOAD_BALANCER_SECURITY_GROUP_ID,
                      self.load_balancer_security_group_id)
        store.publish(family, env, NetworkOutputs.ECS_CLUSTER_NAME, self.ecs_cluster_name)
        store.publish_list(family, env, NetworkOutputs.ISOLATED_SUBNETS, self.isolated_subnet_ids)
        store.publish_list(family, env, NetworkOutputs.PUBLIC_SUBNETS, self.public_subnet_ids)
        store.publish_list(family, env, NetworkOutputs.AVAILABILITY_ZONES, self.availability_zones)
        store.publish(family, env, NetworkOutputs.LOAD_BALANCER_ARN, self.load_balancer_arn)
        store.publish(family, env, NetworkOutputs.LOAD_BALANCER_DNS_NAME, self.load_balancer_dns_name)
        store.publish(family, env, NetworkOutputs.LOAD_BALANCER_HOSTED_ZONE_ID,
                      self.load_balancer_canonical_hosted_zone_id)

    @classmethod
    def load(cls, store: ParameterContractStore,
             env: ApplicationEnvironment) -> "NetworkOutputParameters":
        family = ParameterFamily.NETWORK
        return cls(
            vpc_id=store.load(family, env, NetworkOutputs.VPC_ID),
            http_listener_arn=store.load(family, env, NetworkOutputs.HTTP_LISTENER_ARN),
            https_listener_arn=store.load_optional(family, env, NetworkOutputs.HTTPS_LISTENER_ARN),
            load_balancer_security_group_id=store.load(
                family, env, NetworkOutputs.LOAD_BALANCER_SECURITY_GROUP_ID
            ),
            ecs_cluster_name=store.load(family, env, NetworkOutputs.ECS_CLUSTER_NAME),
            isolated_subnet_ids=store.load_list(
                family, env, NetworkOutputs.ISOLATED_SUBNETS, ssm.ParameterValueType.AWS_EC2_SUBNET_ID
            ),
            public_subnet_ids=store.load_list(
                family, env, NetworkOutputs.PUBLIC_SUBNETS, ssm.ParameterValueType.AWS_EC2_SUBNET_ID
            ),
            availability_zones=store.load_list(
                family, env, NetworkOutputs.AVAILABILITY_ZONES,
                ssm.ParameterValueType.AWS_EC2_AVAILABILITYZONE_NAME
            ),
            load_balancer_arn=store.load(family, env, NetworkOutputs.LOAD_BALANCER_ARN),
            load_balancer_dns_name=store.load(family, env, NetworkOutputs.LOAD_BALANCER_DNS_NAME),
            load_balancer_canonical_hosted_zone_id=store.load(
                family, env, NetworkOutputs.LOAD_BALANCER_HOSTED_ZONE_ID
            ),
        )


@dataclass(frozen=True)
class DatabaseOutputParameters:
    endpoint_address: str
    endpoint_port: str
    database_name: str
    secret_arn: str
    security_group_id: str
    instance_id: str

    def publish(self, store: ParameterContractStore, env: ApplicationEnvironment) -> None:
        family = ParameterFamily.DATABASE
        store.publish(family, env, DatabaseOutputs.ENDPOINT_ADDRESS, self.endpoint_address)
        store.publish(family, env, DatabaseOutputs.ENDPOINT_PORT, self.endpoint_port)
        store.publish(family, env, DatabaseOutputs.DATABASE_NAME, self.database_name)
        store.publish(family, env, DatabaseOutputs.SECURITY_GROUP_ID, self.security_group_id)
        store.publish(family, env, DatabaseOutputs.SECRET_ARN, self.secret_arn)
        store.publish(family, env, DatabaseOutputs.INSTANCE_ID, self.instance_id)

    @classmethod
    def load(cls, store: ParameterContractStore,
             env: ApplicationEnvironment) -> "DatabaseOutputParameters":
        family = ParameterFamily.DATABASE
        return cls(
            endpoint_address=store.load(family, env, DatabaseOutputs.ENDPOINT_ADDRESS),
            endpoint_port=store.load(family, env, DatabaseOutputs.ENDPOINT_PORT),
            database_name=store.load(family, env, DatabaseOutputs.DATABASE_NAME),
            secret_arn=store.load(family, env, DatabaseOutputs.SECRET_ARN),
            security_group_id=store.load(family, env, DatabaseOutputs.SECURITY_GROUP_ID),
            instance_id=store.load(family, env, DatabaseOutputs.INSTANCE_ID),
        )


@dataclass(frozen=True)
class CognitoOutputParameters:
    user_pool_id: str
    user_pool_client_id: str
    user_pool_client_secret: str
    logout_url: str
    provider_url: str

    def publish(self, store: ParameterContractStore, env: ApplicationEnvironment) -> None:
        family = ParameterFamily.COGNITO
        store.publish(family, env, CognitoOutputs.USER_POOL_ID, self.user_pool_id)
        store.publish(family, env, CognitoOutputs.USER_POOL_CLIENT_ID, self.user_pool_client_id)
        store.publish(family, env, CognitoOutputs.USER_POOL_CLIENT_SECRET, self.user_pool_client_secret)
        store.publish(family, env, CognitoOutputs.LOGOUT_URL, self.logout_url)
        store.publish(family, env, CognitoOutputs.PROVIDER_URL, self.provider_url)

    @classmethod
    def load(cls, store: ParameterContractStore,
             env: ApplicationEnvironment) -> "CognitoOutputParameters":
        family = ParameterFamily.COGNITO
        return cls(
            user_pool_id=store.load(family, env, CognitoOutputs.USER_POOL_ID),
            user_pool_client_id=store.load(family, env, CognitoOutputs.USER_POOL_CLIENT_ID),
            user_pool_client_secret=store.load(family, env, CognitoOutputs.USER_POOL_CLIENT_SECRET),
            logout_url=store.load(family, env, CognitoOutputs.LOGOUT_URL),
            provider_url=store.load(family, env, CognitoOutputs.PROVIDER_URL),
        )


@dataclass(frozen=True)
class FrontendOutputParameters:
    cloudfront_distribution_id: str
    cloudfront_domain_name: str

    def publish(self, store: ParameterContractStore, env: ApplicationEnvironment) -> None:
        family = ParameterFamily.FRONTEND
        store.publish(family, env, FrontendOutputs.CLOUDFRONT_DISTRIBUTION_ID,
                      self.cloudfront_distribution_id)
        store.publish(family, env, FrontendOutputs.CLOUDFRONT_DOMAIN_NAME,
                      self.cloudfront_domain_name)

    @classmethod
    def load(cls, store: ParameterContractStore,
             env: ApplicationEnvironment) -> "FrontendOutputParameters":
        family = ParameterFamily.FRONTEND
        return cls(
            cloudfront_distribution_id=store.load(family, env, FrontendOutputs.CLOUDFRONT_DISTRIBUTION_ID),
            cloudfront_domain_name=store.load(family, env, FrontendOutputs.CLOUDFRONT_DOMAIN_NAME),
        )


@dataclass(frozen=True)
class StorageOutputParameters:
    bucket_name: str

    def publish(self, store: ParameterContractStore, env: ApplicationEnvironment) -> None:
        store.publish(ParameterFamily.STORAGE, env, StorageOutputs.BUCKET_NAME, self.bucket_name)

    @classmethod
    def load(cls, store: ParameterContractStore,
             env: ApplicationEnvironment) -> "StorageOutputParameters":
        return cls(bucket_name=store.load(ParameterFamily.STORAGE, env, StorageOutputs.BUCKET_NAME))
