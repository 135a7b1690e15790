"""Security group mixin for CDK constructs."""

from typing import Optional

from aws_cdk import aws_ec2 as ec2

from ..validators import ConfigValidator


class SecurityGroupMixin:
    """
    Mixin class providing security group functionality.

    The security groups of this estate are referenced by id across stacks,
    so rules are declared as standalone ``CfnSecurityGroupIngress``
    resources. A rule can then target a group owned by another stack.
    """

    def create_security_group(self,
                              construct_id: str,
                              vpc_id: str,
                              description: str,
                              group_name: Optional[str] = None) -> ec2.CfnSecurityGroup:
        """
        Create a security group in a VPC known only by id.

        Args:
            construct_id: Logical id of the security group
            vpc_id: Id of the VPC
            description: Security group description
            group_name: Optional physical name

        Returns:
            The created security group
        """
        if group_name is not None:
            ConfigValidator.validate_resource_name(group_name, max_length=255)

        return ec2.CfnSecurityGroup(
            self,
            construct_id,
            vpc_id=vpc_id,
            group_description=description,
            group_name=group_name
        )

    def add_ingress_rule_with_validation(self,
                                         construct_id: str,
                                         group_id: str,
                                         source_security_group_id: Optional[str] = None,
                                         cidr_ip: Optional[str] = None,
                                         port: Optional[int] = None,
                                         protocol: str = "tcp") -> ec2.CfnSecurityGroupIngress:
        """
        Add an ingress rule to a security group with validation.

        Exactly one of ``source_security_group_id`` and ``cidr_ip`` must be
        given. Without a port the rule allows every protocol.

        Args:
            construct_id: Logical id of the rule
            group_id: Security group receiving the rule
            source_security_group_id: Security group allowed in
            cidr_ip: Address range allowed in
            port: Port to allow
            protocol: Protocol (tcp/udp), used only with a port

        Returns:
            The created ingress rule

        Raises:
            ValueError: If the source is missing or ambiguous, or the
                protocol is unsupported
        """
        if (source_security_group_id is None) == (cidr_ip is None):
            raise ValueError("Exactly one of source_security_group_id and cidr_ip is required")

        if cidr_ip is not None:
            ConfigValidator.validate_cidr_block(cidr_ip)

        if port is None:
            ip_protocol = "-1"
        else:
            ConfigValidator.validate_port_range(port)
            if protocol.lower() not in ("tcp", "udp"):
                raise ValueError(f"Unsupported protocol: {protocol}")
            ip_protocol = protocol.lower()

        return ec2.CfnSecurityGroupIngress(
            self,
            construct_id,
            group_id=group_id,
            source_security_group_id=source_security_group_id,
            cidr_ip=cidr_ip,
            ip_protocol=ip_protocol,
            from_port=port,
            to_port=port
        )
