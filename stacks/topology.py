"""
The stacks of the estate and the parameter families they exchange.

Canonical deployment order is network, then the platform stacks, then the
service, then domains and the bastion. That order is not written down here:
it follows from the ``reads`` and ``produces`` of each node.
"""

import aws_cdk as cdk

from helper.config import Config
from stacks.bastion import BastionStack
from stacks.common.base import application_environment_from_config
from stacks.common.constants import FRONTEND_REGION
from stacks.contracts import ParameterFamily
from stacks.domain import BackendDomainStack, CertificateStack, FrontendDomainStack
from stacks.frontend import FrontendStack
from stacks.network import NetworkStack
from stacks.orchestrator import DeploymentPlan, StackNode
from stacks.platform import CognitoStack, DatabaseStack, StorageStack
from stacks.registry import RepositoryStack
from stacks.service import ServiceStack

NETWORK = ParameterFamily.NETWORK
DATABASE = ParameterFamily.DATABASE
COGNITO = ParameterFamily.COGNITO
FRONTEND = ParameterFamily.FRONTEND
STORAGE = ParameterFamily.STORAGE
REGISTRY = ParameterFamily.REGISTRY


def _environment(config: Config, region: str) -> cdk.Environment:
    return cdk.Environment(account=config.data.get('AccountId'), region=region)


def _service_reads(config: Config) -> frozenset:
    reads = {NETWORK, DATABASE, COGNITO}
    if config.data.get('EnableUserUploads', True):
        reads.add(STORAGE)
    if not config.data.get('ImageUrl'):
        reads.add(REGISTRY)
    return frozenset(reads)


def build_deployment_plan(config: Config) -> DeploymentPlan:
    """
    Register every stack of one application and stage.

    Args:
        config: Loaded configuration of the target environment

    Returns:
        The plan, ready to be ordered or synthesized

    Raises:
        StackConfigurationError: If ``RegionName`` is missing or blank
    """
    env = application_environment_from_config(config)
    application_name = env.application_name
    backend_env = _environment(config, config.require('RegionName'))
    frontend_env = _environment(config, FRONTEND_REGION)

    plan = DeploymentPlan()
    plan.add(StackNode(
        name="network",
        factory=lambda scope: NetworkStack(
            scope, "NetworkStack", config=config, env=backend_env,
            stack_name=f"{env.stage_name}-network-stack"
        ),
        produces=frozenset({NETWORK})
    ))
    plan.add(StackNode(
        name="repository",
        factory=lambda scope: RepositoryStack(
            scope, "RepositoryStack", config=config, env=backend_env,
            stack_name=f"{application_name}-repository-stack"
        ),
        produces=frozenset({REGISTRY})
    ))
    plan.add(StackNode(
        name="database",
        factory=lambda scope: DatabaseStack(
            scope, "DatabaseStack", config=config, env=backend_env,
            stack_name=env.prefix("database-stack")
        ),
        reads=frozenset({NETWORK}),
        produces=frozenset({DATABASE})
    ))
    plan.add(StackNode(
        name="cognito",
        factory=lambda scope: CognitoStack(
            scope, "CognitoStack", config=config, env=backend_env,
            stack_name=env.prefix("cognito-stack")
        ),
        produces=frozenset({COGNITO})
    ))
    plan.add(StackNode(
        name="storage",
        factory=lambda scope: StorageStack(
            scope, "StorageStack", config=config, env=backend_env,
            stack_name=env.prefix("storage-stack")
        ),
        produces=frozenset({STORAGE})
    ))
    plan.add(StackNode(
        name="service",
        factory=lambda scope: ServiceStack(
            scope, "ServiceStack", config=config, env=backend_env,
            stack_name=env.prefix("service-stack")
        ),
        reads=_service_reads(config)
    ))
    plan.add(StackNode(
        name="frontend",
        factory=lambda scope: FrontendStack(
            scope, "FrontendStack", config=config, env=frontend_env,
            stack_name=env.prefix("frontend-stack")
        ),
        produces=frozenset({FRONTEND}),
        region=FRONTEND_REGION
    ))
    plan.add(StackNode(
        name="certificate",
        factory=lambda scope: CertificateStack(
            scope, "CertificateStack", config=config, env=backend_env,
            stack_name=env.prefix("certificate-stack")
        )
    ))
    plan.add(StackNode(
        name="frontend-certificate",
        factory=lambda scope: CertificateStack(
            scope, "FrontendCertificateStack", config=config, env=frontend_env,
            stack_name=env.prefix("frontend-certificate-stack"),
            domain_name_key='AppDomain',
            export_name="frontendSslCertificateArn"
        ),
        region=FRONTEND_REGION
    ))
    plan.add(StackNode(
        name="backend-domain",
        factory=lambda scope: BackendDomainStack(
            scope, "BackendDomainStack", config=config, env=backend_env,
            stack_name=env.prefix("backend-domain-stack")
        ),
        reads=frozenset({NETWORK})
    ))
    plan.add(StackNode(
        name="frontend-domain",
        factory=lambda scope: FrontendDomainStack(
            scope, "FrontendDomainStack", config=config, env=frontend_env,
            stack_name=env.prefix("frontend-domain-stack")
        ),
        reads=frozenset({FRONTEND}),
        region=FRONTEND_REGION
    ))
    plan.add(StackNode(
        name="bastion",
        factory=lambda scope: BastionStack(
            scope, "BastionStack", config=config, env=backend_env,
            stack_name=env.prefix("bastion-stack")
        ),
        reads=frozenset({NETWORK, DATABASE})
    ))
    return plan
