"""
Shared network of one deployment stage.

The network construct is deployed once per stage, before anything else.
It owns the VPC, the ECS cluster every service runs in and the public load
balancer every service attaches a listener rule to, and publishes their
identifiers as the ``network`` parameter family.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    Duration,
    Tags
)
from constructs import Construct

from stacks.common.constants import (
    DEFAULT_MAX_AZS,
    DEFAULT_NAT_GATEWAYS,
    HTTP_PORT,
    HTTP_TO_HTTPS_REDIRECT_PRIORITY,
    HTTPS_PORT,
    ISOLATED_SUBNET_NAME,
    NO_OP_HEALTH_CHECK_INTERVAL,
    NO_OP_HEALTH_CHECK_TIMEOUT,
    NO_OP_HEALTHY_THRESHOLD_COUNT,
    NO_OP_TARGET_GROUP_PORT
)
from stacks.common.environment import ApplicationEnvironment
from stacks.common.mixins import SecurityGroupMixin
from stacks.common.validators import AWSResourceValidator
from stacks.contracts import NetworkOutputParameters, ParameterContractStore

logger = logging.getLogger(__name__)

# Interface endpoints ECS Fargate needs to run without internet access
INTERFACE_ENDPOINT_SERVICES = {
    "EcrEndpoint": ec2.InterfaceVpcEndpointAwsService.ECR,
    "EcrDockerEndpoint": ec2.InterfaceVpcEndpointAwsService.ECR_DOCKER,
    "CloudWatchLogsEndpoint": ec2.InterfaceVpcEndpointAwsService.CLOUDWATCH_LOGS,
    "StsEndpoint": ec2.InterfaceVpcEndpointAwsService.STS,
}


@dataclass(frozen=True)
class NetworkInputParameters:
    """
    Optional inputs of the network construct.

    Attributes:
        ssl_certificate_arn: ACM certificate for the load balancer. When
            given, an HTTPS listener is created and HTTP is redirected to it.
    """

    ssl_certificate_arn: Optional[str] = None

    def __post_init__(self):
        if self.ssl_certificate_arn is not None:
            AWSResourceValidator.validate_arn(self.ssl_certificate_arn, service="acm")


class NetworkConstruct(Construct, SecurityGroupMixin):
    """
    VPC, ECS cluster and public load balancer of one stage.

    Resources are named after the stage only, so every application deployed
    to the stage shares them.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 env: ApplicationEnvironment,
                 store: ParameterContractStore,
                 input_parameters: Optional[NetworkInputParameters] = None) -> None:
        super().__init__(scope, construct_id)
        self.env = env
        self.input_parameters = input_parameters or NetworkInputParameters()

        self.vpc = self._create_vpc()
        self._create_gateway_endpoint()
        self._create_interface_endpoints()
        self.ecs_cluster = self._create_ecs_cluster()
        self._create_load_balancer()

        self.output_parameters = self._build_output_parameters()
        self.output_parameters.publish(store, env)

        Tags.of(self).add("environment", env.stage_name)

    def _stage_prefix(self, name: str) -> str:
        return f"{self.env.stage_name}-{name}"

    def _create_vpc(self) -> ec2.Vpc:
        """Public subnets for the load balancer, isolated subnets for everything else."""
        return ec2.Vpc(
            self,
            "Vpc",
            vpc_name=self._stage_prefix("vpc"),
            nat_gateways=DEFAULT_NAT_GATEWAYS,
            max_azs=DEFAULT_MAX_AZS,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    subnet_type=ec2.SubnetType.PUBLIC,
                    name=self._stage_prefix("public-subnet")
                ),
                ec2.SubnetConfiguration(
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    name=ISOLATED_SUBNET_NAME
                ),
            ]
        )

    def _create_gateway_endpoint(self) -> None:
        self.vpc.add_gateway_endpoint(
            "S3Endpoint",
            service=ec2.GatewayVpcEndpointAwsService.S3,
            subnets=[ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_ISOLATED)]
        )

    def _create_interface_endpoints(self) -> None:
        """ECR, CloudWatch Logs and STS reachable from the isolated subnets."""
        endpoint_security_group = ec2.SecurityGroup(
            self,
            "VpcEndpointSecurityGroup",
            vpc=self.vpc,
            description="Security group for VPC interface endpoints",
            allow_all_outbound=True
        )
        endpoint_security_group.add_ingress_rule(
            peer=ec2.Peer.ipv4(self.vpc.vpc_cidr_block),
            connection=ec2.Port.tcp(HTTPS_PORT),
            description="Allow HTTPS from VPC CIDR"
        )

        for endpoint_id, service in INTERFACE_ENDPOINT_SERVICES.items():
            self.vpc.add_interface_endpoint(
                endpoint_id,
                service=service,
                subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_ISOLATED),
                security_groups=[endpoint_security_group],
                private_dns_enabled=True,
                open=False
            )

    def _create_ecs_cluster(self) -> ecs.Cluster:
        return ecs.Cluster(
            self,
            "EcsCluster",
            vpc=self.vpc,
            cluster_name=self._stage_prefix("ecs-cluster")
        )

    def _create_load_balancer(self) -> None:
        self.load_balancer_security_group = ec2.SecurityGroup(
            self,
            "LoadBalancerSecurityGroup",
            security_group_name=self._stage_prefix("lb-sg"),
            description="Public Access to the Load Balancer",
            vpc=self.vpc
        )
        self.add_ingress_rule_with_validation(
            "LoadBalancerSecurityGroupIngress",
            group_id=self.load_balancer_security_group.security_group_id,
            cidr_ip="0.0.0.0/0"
        )

        self.load_balancer = elbv2.ApplicationLoadBalancer(
            self,
            "LoadBalancer",
            load_balancer_name=self._stage_prefix("lb"),
            vpc=self.vpc,
            internet_facing=True,
            security_group=self.load_balancer_security_group
        )

        # Placeholder so the listeners exist before any service registers a rule
        no_op_target_group = elbv2.ApplicationTargetGroup(
            self,
            "NoOpTargetGroup",
            vpc=self.vpc,
            port=NO_OP_TARGET_GROUP_PORT,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.IP,
            target_group_name=self._stage_prefix("no-op-targetGroup"),
            deregistration_delay=Duration.seconds(5),
            health_check=elbv2.HealthCheck(
                interval=Duration.seconds(NO_OP_HEALTH_CHECK_INTERVAL),
                timeout=Duration.seconds(NO_OP_HEALTH_CHECK_TIMEOUT),
                healthy_threshold_count=NO_OP_HEALTHY_THRESHOLD_COUNT
            )
        )

        self.http_listener = self.load_balancer.add_listener(
            "HttpListener",
            port=HTTP_PORT,
            protocol=elbv2.ApplicationProtocol.HTTP,
            open=True,
            default_target_groups=[no_op_target_group]
        )

        self.https_listener: Optional[elbv2.ApplicationListener] = None
        certificate_arn = self.input_parameters.ssl_certificate_arn
        if certificate_arn is None:
            logger.info(f"No certificate for stage {self.env.stage_name}, exposing HTTP only")
            return

        logger.info(f"Creating HTTPS listener for stage {self.env.stage_name}")
        self.https_listener = self.load_balancer.add_listener(
            "HttpsListener",
            port=HTTPS_PORT,
            protocol=elbv2.ApplicationProtocol.HTTPS,
            certificates=[elbv2.ListenerCertificate.from_arn(certificate_arn)],
            open=True,
            default_target_groups=[no_op_target_group]
        )

        elbv2.ApplicationListenerRule(
            self,
            "HttpToHttpsRedirectRule",
            listener=self.http_listener,
            priority=HTTP_TO_HTTPS_REDIRECT_PRIORITY,
            conditions=[elbv2.ListenerCondition.path_patterns(["*"])],
            action=elbv2.ListenerAction.redirect(
                protocol="HTTPS",
                port=str(HTTPS_PORT),
                permanent=True
            )
        )

    @staticmethod
    def _subnet_ids(subnets: List[ec2.ISubnet]) -> List[str]:
        return [subnet.subnet_id for subnet in subnets]

    def _build_output_parameters(self) -> NetworkOutputParameters:
        return NetworkOutputParameters(
            vpc_id=self.vpc.vpc_id,
            http_listener_arn=self.http_listener.listener_arn,
            https_listener_arn=self.https_listener.listener_arn if self.https_listener else None,
            load_balancer_security_group_id=self.load_balancer_security_group.security_group_id,
            ecs_cluster_name=self.ecs_cluster.cluster_name,
            isolated_subnet_ids=self._subnet_ids(self.vpc.isolated_subnets),
            public_subnet_ids=self._subnet_ids(self.vpc.public_subnets),
            availability_zones=list(self.vpc.availability_zones),
            load_balancer_arn=self.load_balancer.load_balancer_arn,
            load_balancer_dns_name=self.load_balancer.load_balancer_dns_name,
            load_balancer_canonical_hosted_zone_id=self.load_balancer.load_balancer_canonical_hosted_zone_id
        )
