"""Hosted zone resolution shared by the domain stacks."""

from aws_cdk import aws_route53 as route53

from stacks.common.base import BaseStack


def resolve_hosted_zone(stack: BaseStack, construct_id: str = "HostedZone") -> route53.IHostedZone:
    """
    Find the hosted zone the stack's records go into.

    With ``HostedZoneId`` configured the zone is referenced directly.
    Otherwise it is looked up by ``HostedZoneDomain``, which needs a
    concrete account and region on the stack.
    """
    domain = stack.get_required_config('HostedZoneDomain')
    zone_id = stack.get_optional_config('HostedZoneId')
    if zone_id:
        return route53.HostedZone.from_hosted_zone_attributes(
            stack, construct_id, hosted_zone_id=zone_id, zone_name=domain
        )
    return route53.HostedZone.from_lookup(stack, construct_id, domain_name=domain)
