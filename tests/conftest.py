"""Shared fixtures for stack and construct tests."""

from unittest.mock import Mock

import pytest

from helper.config import Config
from stacks.common.environment import ApplicationEnvironment, DeploymentStage
from stacks.common.exceptions import StackConfigurationError
from stacks.contracts import (
    CognitoOutputParameters,
    DatabaseOutputParameters,
    InMemoryParameterBackend,
    NetworkOutputParameters,
    ParameterContractStore,
    StorageOutputParameters
)

BASE_CONFIG = {
    'ApplicationName': 'finance-log',
    'DeploymentStage': 'dev',
    'RepositoryName': 'finance-log',
    'ImageTag': '1.0.0',
    'LoginPageDomainPrefix': 'dev-finance-log',
    'ApiUrl': 'https://api.example.com',
    'AppUrl': 'https://app.example.com',
    'RegionName': 'eu-central-1',
}


def make_config(**overrides) -> Mock:
    """Mock ``Config`` backed by a plain dictionary, failing like the real one on unknown keys."""
    config = Mock(spec=Config)
    config._environment = "test"
    config.data = {**BASE_CONFIG, **overrides}

    def get(key):
        return config.data[key]

    def require(key):
        value = config.data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise StackConfigurationError(f"Configuration value '{key}' must not be empty", config_key=key)
        return value

    config.get.side_effect = get
    config.require.side_effect = require
    config.get_stack_selection.side_effect = lambda: config.data.get('Stacks')
    return config


@pytest.fixture
def mock_config():
    return make_config()


@pytest.fixture
def dev_env():
    return ApplicationEnvironment("finance-log", DeploymentStage.DEV)


@pytest.fixture
def memory_store():
    return ParameterContractStore(InMemoryParameterBackend())


@pytest.fixture
def network_bundle():
    return NetworkOutputParameters(
        vpc_id="vpc-0123456789abcdef0",
        http_listener_arn=(
            "arn:aws:elasticloadbalancing:eu-central-1:123456789012:"
            "listener/app/dev-lb/50dc6c495c0c9188/f2f7dc8efc522ab2"
        ),
        https_listener_arn=None,
        load_balancer_security_group_id="sg-0aaaaaaaaaaaaaaaa",
        ecs_cluster_name="dev-ecs-cluster",
        isolated_subnet_ids=["subnet-0aaaaaaaaaaaaaaa1", "subnet-0aaaaaaaaaaaaaaa2"],
        public_subnet_ids=["subnet-0bbbbbbbbbbbbbbb1", "subnet-0bbbbbbbbbbbbbbb2"],
        availability_zones=["eu-central-1a", "eu-central-1b"],
        load_balancer_arn=(
            "arn:aws:elasticloadbalancing:eu-central-1:123456789012:"
            "loadbalancer/app/dev-lb/50dc6c495c0c9188"
        ),
        load_balancer_dns_name="dev-lb-123456.eu-central-1.elb.amazonaws.com",
        load_balancer_canonical_hosted_zone_id="Z215JYRZR1TBD5"
    )


@pytest.fixture
def database_bundle():
    return DatabaseOutputParameters(
        endpoint_address="dev-finance-log-database.abc.eu-central-1.rds.amazonaws.com",
        endpoint_port="3306",
        database_name="devfinancelogdatabase",
        secret_arn="arn:aws:secretsmanager:eu-central-1:123456789012:secret:dev-finance-log-db-secret-AbCdEf",
        security_group_id="sg-0ccccccccccccccccc",
        instance_id="dev-finance-log-database"
    )


@pytest.fixture
def cognito_bundle():
    return CognitoOutputParameters(
        user_pool_id="eu-central-1_AbCdEfGhI",
        user_pool_client_id="1example23456789",
        user_pool_client_secret="client-secret",
        logout_url="https://dev-finance-log.auth.eu-central-1.amazoncognito.com/logout",
        provider_url="https://cognito-idp.eu-central-1.amazonaws.com/eu-central-1_AbCdEfGhI"
    )


@pytest.fixture
def storage_bundle():
    return StorageOutputParameters(bucket_name="dev-finance-log-user-uploads")


@pytest.fixture
def config_factory():
    """Build a mock configuration with some keys overridden."""
    return make_config
