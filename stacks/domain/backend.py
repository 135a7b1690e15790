from aws_cdk import (
    aws_elasticloadbalancingv2 as elbv2,
    aws_route53 as route53,
    aws_route53_targets as route53_targets
)
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.contracts import NetworkOutputParameters
from .hosted_zone import resolve_hosted_zone


class BackendDomainStack(BaseStack):
    """Points ``ApiDomain`` at the stage's load balancer."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        domain_name = self.get_required_config('ApiDomain')
        hosted_zone = resolve_hosted_zone(self)
        network = NetworkOutputParameters.load(self.contract_store, self.application_environment)

        load_balancer = elbv2.ApplicationLoadBalancer.from_application_load_balancer_attributes(
            self,
            "LoadBalancer",
            load_balancer_arn=network.load_balancer_arn,
            security_group_id=network.load_balancer_security_group_id,
            load_balancer_dns_name=network.load_balancer_dns_name,
            load_balancer_canonical_hosted_zone_id=network.load_balancer_canonical_hosted_zone_id
        )

        self.record = route53.ARecord(
            self,
            "AlbARecord",
            zone=hosted_zone,
            record_name=domain_name,
            target=route53.RecordTarget.from_alias(route53_targets.LoadBalancerTarget(load_balancer))
        )
