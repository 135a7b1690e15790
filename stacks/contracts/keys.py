"""
Parameter families and the keys each family publishes.

Key strings are part of the contract between a producing stack and every
stack that consumes it. Renaming one is a breaking change: consumers keep
looking for the old name until they are redeployed.
"""

from enum import Enum


class ParameterFamily(Enum):
    """Namespaces of published parameters, one per producing stack."""

    NETWORK = "network"
    DATABASE = "database"
    COGNITO = "cognito"
    FRONTEND = "frontend"
    STORAGE = "s3"
    # Ordering only: consumers address the repository by its configured name
    REGISTRY = "registry"


# Families that historically folded the application name into their keys
APPLICATION_SCOPED_FAMILIES = frozenset({
    ParameterFamily.DATABASE,
    ParameterFamily.COGNITO,
    ParameterFamily.STORAGE,
})


class NetworkOutputs:
    VPC_ID = "vpcId"
    HTTP_LISTENER_ARN = "httpListenerArn"
    HTTPS_LISTENER_ARN = "httpsListenerArn"
    LOAD_BALANCER_SECURITY_GROUP_ID = "loadBalancerSecurityGroupId"
    ECS_CLUSTER_NAME = "ecsClusterName"
    ISOLATED_SUBNETS = "isolatedSubnetIds"
    PUBLIC_SUBNETS = "publicSubnetIds"
    AVAILABILITY_ZONES = "availabilityZones"
    LOAD_BALANCER_ARN = "loadBalancerArn"
    LOAD_BALANCER_DNS_NAME = "loadBalancerDnsName"
    LOAD_BALANCER_HOSTED_ZONE_ID = "loadBalancerCanonicalHostedZoneId"


class DatabaseOutputs:
    ENDPOINT_ADDRESS = "endpointAddress"
    ENDPOINT_PORT = "endpointPort"
    DATABASE_NAME = "databaseName"
    SECURITY_GROUP_ID = "securityGroupId"
    SECRET_ARN = "secretArn"
    INSTANCE_ID = "instanceId"


class CognitoOutputs:
    USER_POOL_ID = "userPoolId"
    USER_POOL_CLIENT_ID = "userPoolClientId"
    USER_POOL_CLIENT_SECRET = "userPoolClientSecret"
    LOGOUT_URL = "logoutUrl"
    PROVIDER_URL = "providerUrl"


class FrontendOutputs:
    CLOUDFRONT_DISTRIBUTION_ID = "cloudFrontDistributionId"
    CLOUDFRONT_DOMAIN_NAME = "cloudFrontDomainName"


class StorageOutputs:
    BUCKET_NAME = "bucketName"


# One key per family whose presence proves the producer was deployed
PROBE_KEYS = {
    ParameterFamily.NETWORK: NetworkOutputs.VPC_ID,
    ParameterFamily.DATABASE: DatabaseOutputs.SECRET_ARN,
    ParameterFamily.COGNITO: CognitoOutputs.USER_POOL_CLIENT_ID,
    ParameterFamily.FRONTEND: FrontendOutputs.CLOUDFRONT_DISTRIBUTION_ID,
    ParameterFamily.STORAGE: StorageOutputs.BUCKET_NAME,
}
