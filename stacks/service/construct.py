"""
Service deployment construct.

Attaches one containerized workload to the shared network of a stage:
a target group and listener rules on the shared load balancer, a log
group, execution and task roles, a Fargate task definition, a security
group and the ECS service itself. Everything the construct knows about
the network comes from the loaded ``NetworkOutputParameters``.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecr as ecr,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    aws_logs as logs,
    CfnCondition,
    RemovalPolicy,
    Stack
)
from constructs import Construct

from stacks.common.base import retention_from_days
from stacks.common.constants import (
    AWS_LOGS_DATETIME_FORMAT,
    DEFAULT_CONTAINER_PORT,
    DEFAULT_CONTAINER_PROTOCOL,
    DEFAULT_CPU,
    DEFAULT_DEREGISTRATION_DELAY,
    DEFAULT_DESIRED_COUNT,
    DEFAULT_HEALTH_CHECK_GRACE_PERIOD,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DEFAULT_HEALTH_CHECK_PATH,
    DEFAULT_HEALTH_CHECK_TIMEOUT,
    DEFAULT_HEALTHY_THRESHOLD_COUNT,
    DEFAULT_HTTP_LISTENER_PRIORITY,
    DEFAULT_HTTPS_LISTENER_PRIORITY,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_MAXIMUM_PERCENT,
    DEFAULT_MEMORY,
    DEFAULT_MINIMUM_HEALTHY_PERCENT,
    DEFAULT_STICKINESS_COOKIE_DURATION,
    DEFAULT_UNHEALTHY_THRESHOLD_COUNT
)
from stacks.common.environment import ApplicationEnvironment
from stacks.common.exceptions import (
    MissingContractError,
    ResourceCreationError,
    StackConfigurationError,
    ValidationError
)
from stacks.common.mixins import IAMPolicyMixin, SecurityGroupMixin
from stacks.common.validators import ConfigValidator
from stacks.contracts import NetworkOutputParameters, is_present_condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalImage:
    """Image pulled from a public or third-party registry, e.g. ``nginx:1.27``."""

    image_url: str

    def __post_init__(self):
        ConfigValidator.require_non_empty(self.image_url, "image_url")


@dataclass(frozen=True)
class RegistryImage:
    """Image pushed to an ECR repository of the same account."""

    repository_name: str
    tag: str

    def __post_init__(self):
        ConfigValidator.require_non_empty(self.repository_name, "RepositoryName")
        ConfigValidator.require_non_empty(self.tag, "ImageTag")


ImageSource = Union[ExternalImage, RegistryImage]


@dataclass(frozen=True)
class SecretReference:
    """One JSON key of a Secrets Manager secret, injected into the container at start."""

    secret_arn: str
    json_key: str

    @property
    def value_from(self) -> str:
        return f"{self.secret_arn}:{self.json_key}::"


@dataclass(frozen=True)
class ServiceInputParameters:
    """
    Inputs of the service construct.

    Only the image source is required. Every other field has the default
    a Spring Boot service behind the shared load balancer needs.
    """

    image_source: ImageSource
    environment_variables: Dict[str, str] = field(default_factory=dict)
    secrets: Dict[str, SecretReference] = field(default_factory=dict)
    downstream_security_group_ids: List[str] = field(default_factory=list)
    task_role_statements: List[iam.PolicyStatement] = field(default_factory=list)

    # Container
    container_port: int = DEFAULT_CONTAINER_PORT
    container_protocol: str = DEFAULT_CONTAINER_PROTOCOL
    cpu: int = DEFAULT_CPU
    memory: int = DEFAULT_MEMORY
    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    awslogs_datetime_format: str = AWS_LOGS_DATETIME_FORMAT

    # Target group health check
    health_check_path: str = DEFAULT_HEALTH_CHECK_PATH
    health_check_port: Optional[int] = None
    health_check_protocol: Optional[str] = None
    health_check_interval_seconds: int = DEFAULT_HEALTH_CHECK_INTERVAL
    health_check_timeout_seconds: int = DEFAULT_HEALTH_CHECK_TIMEOUT
    healthy_threshold_count: int = DEFAULT_HEALTHY_THRESHOLD_COUNT
    unhealthy_threshold_count: int = DEFAULT_UNHEALTHY_THRESHOLD_COUNT
    deregistration_delay_seconds: int = DEFAULT_DEREGISTRATION_DELAY
    sticky_sessions_enabled: bool = False
    stickiness_cookie_duration_seconds: int = DEFAULT_STICKINESS_COOKIE_DURATION

    # Listener rules
    http_listener_priority: int = DEFAULT_HTTP_LISTENER_PRIORITY
    https_listener_priority: int = DEFAULT_HTTPS_LISTENER_PRIORITY

    # Rollout
    desired_count: int = DEFAULT_DESIRED_COUNT
    maximum_percent: int = DEFAULT_MAXIMUM_PERCENT
    minimum_healthy_percent: int = DEFAULT_MINIMUM_HEALTHY_PERCENT
    health_check_grace_period_seconds: int = DEFAULT_HEALTH_CHECK_GRACE_PERIOD

    def __post_init__(self):
        if not isinstance(self.image_source, (ExternalImage, RegistryImage)):
            raise ValidationError(
                "Image source must be an ExternalImage or a RegistryImage",
                parameter_name="image_source",
                provided_value=repr(self.image_source)
            )

        ConfigValidator.validate_port_range(self.container_port)
        if self.health_check_port is not None:
            ConfigValidator.validate_port_range(self.health_check_port)
        ConfigValidator.validate_environment_vars(self.environment_variables)
        ConfigValidator.validate_rolling_update_bounds(
            self.minimum_healthy_percent,
            self.maximum_percent
        )

        if self.desired_count < 0:
            raise ValidationError(
                f"Desired count must not be negative, got {self.desired_count}",
                parameter_name="desired_count",
                provided_value=str(self.desired_count)
            )

        overlap = set(self.environment_variables) & set(self.secrets)
        if overlap:
            raise ValidationError(
                f"Variables defined both as plain value and as secret: {sorted(overlap)}",
                parameter_name="secrets",
                provided_value=", ".join(sorted(overlap))
            )

        retention_from_days(self.log_retention_days)

    @property
    def effective_health_check_port(self) -> int:
        return self.health_check_port if self.health_check_port is not None else self.container_port

    @property
    def effective_health_check_protocol(self) -> str:
        return self.health_check_protocol or self.container_protocol

    def deployment_task_bounds(self) -> Tuple[int, int]:
        """
        Running task envelope during a rolling deployment.

        ECS rounds the lower bound up and the upper bound down.

        Returns:
            (minimum healthy tasks, maximum running tasks)
        """
        minimum = math.ceil(self.desired_count * self.minimum_healthy_percent / 100)
        maximum = math.floor(self.desired_count * self.maximum_percent / 100)
        return minimum, maximum


class ServiceConstruct(Construct, IAMPolicyMixin, SecurityGroupMixin):
    """
    One Fargate service registered with the shared load balancer.

    The HTTP listener rule is always created. An HTTPS listener rule is
    created only when the network bundle carries an HTTPS listener. The
    rule is additionally guarded by the ``HttpsListenerCondition`` so it
    is skipped at deployment when the stored listener turns out absent.

    The execution role pulls the image and writes logs. When container
    secrets are configured it is also allowed to read exactly those
    secrets (``GetSecretValue`` and ``DescribeSecret``), because ECS resolves them
    with the execution role before the container starts.

    Raises:
        ResourceCreationError: If a resource cannot be declared
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 input_parameters: ServiceInputParameters,
                 network: NetworkOutputParameters) -> None:
        super().__init__(scope, construct_id)
        self.env = env
        self.input_parameters = input_parameters
        self.network = network

        try:
            self.target_group = self._create_target_group()
            self.listener_rules = self._create_listener_rules()
            self.log_group = self._create_log_group()
            self.execution_role = self.create_task_execution_role(env)
            self.task_role = self.create_task_role(env, input_parameters.task_role_statements)
            image = self._resolve_image()
            self._grant_secret_access()
            self.task_definition = self._create_task_definition(image)
            self.security_group = self._create_security_group()
            self.service = self._create_service()
        except (StackConfigurationError, ValidationError, MissingContractError):
            raise
        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create service {env.prefix('service')}: {str(e)}",
                resource_type="AWS::ECS::Service"
            ) from e

        # The HTTPS rule may be skipped by its condition, so only the HTTP rule is a dependency
        self.service.add_dependency(self.target_group)
        self.service.add_dependency(self.listener_rules[0])

        env.tag(self)

    @property
    def container_name(self) -> str:
        return self.env.prefix("container")

    def _create_target_group(self) -> elbv2.CfnTargetGroup:
        params = self.input_parameters
        return elbv2.CfnTargetGroup(
            self,
            "TargetGroup",
            vpc_id=self.network.vpc_id,
            port=params.container_port,
            protocol=params.container_protocol,
            target_type="ip",
            health_check_path=params.health_check_path,
            health_check_port=str(params.effective_health_check_port),
            health_check_protocol=params.effective_health_check_protocol,
            health_check_interval_seconds=params.health_check_interval_seconds,
            health_check_timeout_seconds=params.health_check_timeout_seconds,
            healthy_threshold_count=params.healthy_threshold_count,
            unhealthy_threshold_count=params.unhealthy_threshold_count,
            target_group_attributes=self._target_group_attributes()
        )

    def _target_group_attributes(self) -> List[elbv2.CfnTargetGroup.TargetGroupAttributeProperty]:
        params = self.input_parameters
        attributes = {
            "deregistration_delay.timeout_seconds": str(params.deregistration_delay_seconds)
        }
        if params.sticky_sessions_enabled:
            attributes.update({
                "stickiness.enabled": "true",
                "stickiness.type": "lb_cookie",
                "stickiness.lb_cookie.duration_seconds": str(params.stickiness_cookie_duration_seconds)
            })

        return [
            elbv2.CfnTargetGroup.TargetGroupAttributeProperty(key=key, value=value)
            for key, value in attributes.items()
        ]

    def _create_listener_rules(self) -> List[elbv2.CfnListenerRule]:
        params = self.input_parameters
        actions = [
            elbv2.CfnListenerRule.ActionProperty(
                type="forward",
                target_group_arn=self.target_group.ref
            )
        ]
        conditions = [
            elbv2.CfnListenerRule.RuleConditionProperty(
                field="path-pattern",
                values=["*"]
            )
        ]

        http_rule = elbv2.CfnListenerRule(
            self,
            "HttpListenerRule",
            listener_arn=self.network.http_listener_arn,
            priority=params.http_listener_priority,
            actions=actions,
            conditions=conditions
        )
        rules = [http_rule]

        https_listener_arn = self.network.https_listener_arn
        if https_listener_arn is None:
            logger.info(f"No HTTPS listener in stage {self.env.stage_name}, skipping HTTPS rule")
            return rules

        https_rule = elbv2.CfnListenerRule(
            self,
            "HttpsListenerRule",
            listener_arn=https_listener_arn,
            priority=params.https_listener_priority,
            actions=actions,
            conditions=conditions
        )
        https_rule.cfn_options.condition = CfnCondition(
            self,
            "HttpsListenerCondition",
            expression=is_present_condition(https_listener_arn)
        )
        rules.append(https_rule)
        return rules

    def _create_log_group(self) -> logs.LogGroup:
        return logs.LogGroup(
            self,
            "EcsLogGroup",
            log_group_name=self.env.prefix("log-group"),
            retention=retention_from_days(self.input_parameters.log_retention_days),
            removal_policy=RemovalPolicy.DESTROY
        )

    def _resolve_image(self) -> str:
        source = self.input_parameters.image_source
        if isinstance(source, RegistryImage):
            repository = ecr.Repository.from_repository_name(
                self,
                "EcrRepository",
                source.repository_name
            )
            repository.grant_pull(self.execution_role)
            return repository.repository_uri_for_tag(source.tag)
        return source.image_url

    def _grant_secret_access(self) -> None:
        secret_arns = sorted({ref.secret_arn for ref in self.input_parameters.secrets.values()})
        self.add_secrets_manager_permissions(self.execution_role, secret_arns)

    def _create_task_definition(self, image: str) -> ecs.CfnTaskDefinition:
        params = self.input_parameters
        container = ecs.CfnTaskDefinition.ContainerDefinitionProperty(
            name=self.container_name,
            image=image,
            cpu=params.cpu,
            memory=params.memory,
            port_mappings=[
                ecs.CfnTaskDefinition.PortMappingProperty(container_port=params.container_port)
            ],
            environment=[
                ecs.CfnTaskDefinition.KeyValuePairProperty(name=name, value=value)
                for name, value in params.environment_variables.items()
            ],
            secrets=[
                ecs.CfnTaskDefinition.SecretProperty(name=name, value_from=ref.value_from)
                for name, ref in params.secrets.items()
            ] or None,
            log_configuration=ecs.CfnTaskDefinition.LogConfigurationProperty(
                log_driver="awslogs",
                options={
                    "awslogs-group": self.log_group.log_group_name,
                    "awslogs-region": Stack.of(self).region,
                    "awslogs-stream-prefix": self.env.prefix("stream"),
                    "awslogs-datetime-format": params.awslogs_datetime_format
                }
            )
        )

        return ecs.CfnTaskDefinition(
            self,
            "TaskDefinition",
            network_mode="awsvpc",
            requires_compatibilities=["FARGATE"],
            cpu=str(params.cpu),
            memory=str(params.memory),
            execution_role_arn=self.execution_role.role_arn,
            task_role_arn=self.task_role.role_arn,
            container_definitions=[container]
        )

    def _create_security_group(self) -> ec2.CfnSecurityGroup:
        security_group = self.create_security_group(
            "EcsSecurityGroup",
            vpc_id=self.network.vpc_id,
            description="SecurityGroup for ECS tasks"
        )
        self.add_ingress_rule_with_validation(
            "EcsIngressSelf",
            group_id=security_group.attr_group_id,
            source_security_group_id=security_group.attr_group_id
        )
        self.add_ingress_rule_with_validation(
            "EcsIngressFromAlb",
            group_id=security_group.attr_group_id,
            source_security_group_id=self.network.load_balancer_security_group_id
        )

        for index, group_id in enumerate(self.input_parameters.downstream_security_group_ids, start=1):
            self.add_ingress_rule_with_validation(
                f"EcsSecurityGroupIngress{index}",
                group_id=group_id,
                source_security_group_id=security_group.attr_group_id
            )

        return security_group

    def _create_service(self) -> ecs.CfnService:
        params = self.input_parameters
        return ecs.CfnService(
            self,
            "EcsService",
            cluster=self.network.ecs_cluster_name,
            launch_type="FARGATE",
            desired_count=params.desired_count,
            task_definition=self.task_definition.ref,
            health_check_grace_period_seconds=params.health_check_grace_period_seconds,
            deployment_configuration=ecs.CfnService.DeploymentConfigurationProperty(
                maximum_percent=params.maximum_percent,
                minimum_healthy_percent=params.minimum_healthy_percent,
                deployment_circuit_breaker=ecs.CfnService.DeploymentCircuitBreakerProperty(
                    enable=True,
                    rollback=True
                )
            ),
            network_configuration=ecs.CfnService.NetworkConfigurationProperty(
                awsvpc_configuration=ecs.CfnService.AwsVpcConfigurationProperty(
                    assign_public_ip="DISABLED",
                    subnets=self.network.isolated_subnet_ids,
                    security_groups=[self.security_group.attr_group_id]
                )
            ),
            load_balancers=[
                ecs.CfnService.LoadBalancerProperty(
                    container_name=self.container_name,
                    container_port=params.container_port,
                    target_group_arn=self.target_group.ref
                )
            ]
        )
