"""
Tests for the deployment plan and the stack topology of the estate.
"""

import pytest
import aws_cdk as cdk

from stacks.common.exceptions import DeploymentOrderError, MissingContractError, StackConfigurationError
from stacks.contracts import (
    FrontendOutputParameters,
    InMemoryParameterBackend,
    ParameterContractStore,
    ParameterFamily
)
from stacks.orchestrator import DeploymentPlan, StackNode
from stacks.topology import build_deployment_plan

NETWORK = ParameterFamily.NETWORK
DATABASE = ParameterFamily.DATABASE
FRONTEND = ParameterFamily.FRONTEND
REGISTRY = ParameterFamily.REGISTRY


def node(name, reads=(), produces=(), region=None) -> StackNode:
    return StackNode(
        name=name,
        factory=lambda scope: cdk.Stack(scope, f"{name}-stack"),
        reads=frozenset(reads),
        produces=frozenset(produces),
        region=region
    )


def names(nodes):
    return [n.name for n in nodes]


@pytest.fixture
def plan():
    """Consumers registered before their producers."""
    return (
        DeploymentPlan()
        .add(node("service", reads=[NETWORK, DATABASE]))
        .add(node("database", reads=[NETWORK], produces=[DATABASE]))
        .add(node("network", produces=[NETWORK]))
    )


class TestDeploymentOrder:
    """Test ordering of registered stacks."""

    def test_producers_before_consumers(self, plan):
        assert names(plan.order()) == ["network", "database", "service"]

    def test_independent_stacks_keep_registration_order(self):
        plan = DeploymentPlan().add(node("c")).add(node("a")).add(node("b"))

        assert names(plan.order()) == ["c", "a", "b"]

    def test_earliest_registered_ready_stack_goes_next(self):
        plan = (
            DeploymentPlan()
            .add(node("network", produces=[NETWORK]))
            .add(node("database", reads=[NETWORK], produces=[DATABASE]))
            .add(node("cognito"))
            .add(node("bastion", reads=[NETWORK, DATABASE]))
        )

        assert names(plan.order()) == ["network", "database", "cognito", "bastion"]

    def test_selection_keeps_relative_order(self, plan):
        assert names(plan.order(["service", "network"])) == ["network", "service"]

    def test_order_is_stable_across_calls(self, plan):
        assert names(plan.order()) == names(plan.order())

    def test_unknown_selection_rejected(self, plan):
        with pytest.raises(DeploymentOrderError) as excinfo:
            plan.order(["network", "frontend"])
        assert excinfo.value.stack_names == ["frontend"]

    def test_cycle_rejected(self):
        plan = (
            DeploymentPlan()
            .add(node("a", reads=[DATABASE], produces=[NETWORK]))
            .add(node("b", reads=[NETWORK], produces=[DATABASE]))
        )

        with pytest.raises(DeploymentOrderError) as excinfo:
            plan.order()
        assert {"a", "b"} <= set(excinfo.value.stack_names)
        assert "cycle" in str(excinfo.value)

    def test_family_without_producer_rejected(self):
        plan = DeploymentPlan().add(node("service", reads=[DATABASE]))

        with pytest.raises(DeploymentOrderError) as excinfo:
            plan.order()
        assert excinfo.value.stack_names == ["service"]
        assert "database" in str(excinfo.value)

    def test_second_producer_rejected(self, plan):
        with pytest.raises(DeploymentOrderError) as excinfo:
            plan.add(node("other-network", produces=[NETWORK]))
        assert excinfo.value.stack_names == ["network", "other-network"]

    def test_duplicate_name_rejected(self, plan):
        with pytest.raises(DeploymentOrderError):
            plan.add(node("network"))

    def test_producer_of(self, plan):
        assert plan.producer_of(DATABASE) == "database"


class TestContractVerification:
    """Test checks of a selection against parameters already published."""

    def test_external_reads(self, plan):
        assert plan.external_reads(["service"]) == {DATABASE: "database", NETWORK: "network"}
        assert plan.external_reads(["database", "service"]) == {NETWORK: "network"}
        assert plan.external_reads() == {}

    def test_missing_producer_named(self, plan, memory_store, dev_env, network_bundle):
        network_bundle.publish(memory_store, dev_env)

        with pytest.raises(MissingContractError) as excinfo:
            plan.verify_contracts(memory_store, dev_env, ["service"])
        assert excinfo.value.parameter_name == "dev-database-secretArn"
        assert "Deploy 'database'" in str(excinfo.value)

    def test_published_producers_pass(self, plan, memory_store, dev_env, network_bundle, database_bundle):
        network_bundle.publish(memory_store, dev_env)
        database_bundle.publish(memory_store, dev_env)

        plan.verify_contracts(memory_store, dev_env, ["service"])

    def test_ordering_only_family_not_probed(self, memory_store, dev_env):
        plan = (
            DeploymentPlan()
            .add(node("repository", produces=[REGISTRY]))
            .add(node("service", reads=[REGISTRY]))
        )

        plan.verify_contracts(memory_store, dev_env, ["service"])

    def test_regional_producer_probed_in_its_region(self, memory_store, dev_env):
        plan = (
            DeploymentPlan()
            .add(node("frontend", produces=[FRONTEND], region="us-east-1"))
            .add(node("frontend-domain", reads=[FRONTEND], region="us-east-1"))
        )
        regional_store = ParameterContractStore(InMemoryParameterBackend())
        FrontendOutputParameters(
            cloudfront_distribution_id="E2EXAMPLE",
            cloudfront_domain_name="d111111abcdef8.cloudfront.net"
        ).publish(regional_store, dev_env)

        with pytest.raises(MissingContractError):
            plan.verify_contracts(memory_store, dev_env, ["frontend-domain"])
        plan.verify_contracts(
            memory_store, dev_env, ["frontend-domain"], regional_stores={"us-east-1": regional_store}
        )


class TestSynthesize:
    """Test building the stacks of a plan."""

    def test_consumers_depend_on_producers_built_together(self, plan):
        app = cdk.App()

        stacks = plan.synthesize(app)

        assert list(stacks) == ["network", "database", "service"]
        assert stacks["network"] in stacks["database"].dependencies
        assert set(stacks["service"].dependencies) == {stacks["network"], stacks["database"]}

    def test_selected_stack_built_alone(self, plan):
        app = cdk.App()

        stacks = plan.synthesize(app, ["service"])

        assert list(stacks) == ["service"]
        assert stacks["service"].dependencies == []


class TestTopology:
    """Test the stacks registered for one application and stage."""

    def test_canonical_order(self, config_factory):
        plan = build_deployment_plan(config_factory())

        assert names(plan.order()) == [
            "network",
            "repository",
            "database",
            "cognito",
            "storage",
            "service",
            "frontend",
            "certificate",
            "frontend-certificate",
            "backend-domain",
            "frontend-domain",
            "bastion",
        ]

    def test_service_reads(self, config_factory):
        plan = build_deployment_plan(config_factory())

        assert plan.external_reads(["service"]) == {
            ParameterFamily.COGNITO: "cognito",
            DATABASE: "database",
            NETWORK: "network",
            REGISTRY: "repository",
            ParameterFamily.STORAGE: "storage",
        }

    def test_external_image_and_no_uploads_drop_producers(self, config_factory):
        config = config_factory(ImageUrl="nginx:1.27", EnableUserUploads=False)
        plan = build_deployment_plan(config)

        assert set(plan.external_reads(["service"])) == {NETWORK, DATABASE, ParameterFamily.COGNITO}

    def test_frontend_stacks_pinned_to_us_east_1(self, config_factory):
        plan = build_deployment_plan(config_factory())
        regions = {n.name: n.region for n in plan.nodes}

        assert regions["frontend"] == "us-east-1"
        assert regions["frontend-certificate"] == "us-east-1"
        assert regions["frontend-domain"] == "us-east-1"
        assert regions["service"] is None

    def test_platform_selection_synthesizes(self, config_factory):
        plan = build_deployment_plan(config_factory())
        app = cdk.App()

        stacks = plan.synthesize(app, ["network", "database"])

        assert stacks["database"].stack_name == "dev-finance-log-database-stack"
        assert stacks["network"].stack_name == "dev-network-stack"
        assert stacks["network"] in stacks["database"].dependencies

    @pytest.mark.parametrize("region", [None, "", "  "])
    def test_missing_or_blank_region_rejected(self, config_factory, region):
        with pytest.raises(StackConfigurationError) as excinfo:
            build_deployment_plan(config_factory(RegionName=region))
        assert excinfo.value.config_key == "RegionName"

    def test_backend_stacks_in_configured_region(self, config_factory):
        plan = build_deployment_plan(config_factory(RegionName="eu-west-1"))
        app = cdk.App()

        stacks = plan.synthesize(app, ["network"])

        assert stacks["network"].region == "eu-west-1"
