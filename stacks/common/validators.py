"""Validation utilities for CDK stacks."""

import re
from typing import Any, Dict, Optional

from aws_cdk import Token

from .exceptions import StackConfigurationError, ValidationError


class ConfigValidator:
    """Utility class for validating configuration parameters."""

    @staticmethod
    def require_non_empty(value: Any, name: str) -> str:
        """
        Ensure a required input is present and not blank.

        Args:
            value: The value to check
            name: Name of the input, reported in the error

        Returns:
            The value, unchanged

        Raises:
            StackConfigurationError: If the value is None, not a string or blank
        """
        if value is None or not isinstance(value, str) or not value.strip():
            raise StackConfigurationError(
                f"Required input '{name}' must not be empty",
                config_key=name
            )
        return value

    @staticmethod
    def validate_port_range(port: int) -> None:
        """
        Validate that port number is within valid range.

        Args:
            port: Port number to validate

        Raises:
            ValidationError: If port is outside valid range
        """
        if not 1 <= port <= 65535:
            raise ValidationError(
                f"Port must be between 1 and 65535, got {port}",
                parameter_name="port",
                provided_value=str(port)
            )

    @staticmethod
    def validate_cidr_block(cidr: str) -> None:
        """
        Validate CIDR block format.

        Args:
            cidr: CIDR block to validate

        Raises:
            ValidationError: If CIDR format is invalid
        """
        cidr_pattern = re.compile(
            r'^([0-9]{1,3}\.){3}[0-9]{1,3}(/([0-9]|[1-2][0-9]|3[0-2]))?$'
        )
        if not cidr_pattern.match(cidr):
            raise ValidationError(
                f"Invalid CIDR block format: {cidr}",
                parameter_name="cidr",
                provided_value=cidr
            )

    @staticmethod
    def validate_resource_name(name: str, max_length: int = 63) -> None:
        """
        Validate AWS resource name format.

        Args:
            name: Resource name to validate
            max_length: Maximum allowed length

        Raises:
            ValidationError: If name format is invalid
        """
        # CloudFormation references are resolved at deploy time
        if isinstance(name, str) and Token.is_unresolved(name):
            return

        if not name:
            raise ValidationError(
                "Resource name cannot be empty",
                parameter_name="name",
                provided_value=name
            )

        if len(name) > max_length:
            raise ValidationError(
                f"Resource name too long (max {max_length}): {name}",
                parameter_name="name",
                provided_value=name
            )

        if not re.match(r'^[a-zA-Z0-9-_]+$', name):
            raise ValidationError(
                f"Invalid resource name format: {name}. "
                f"Only alphanumeric characters, hyphens, and underscores allowed",
                parameter_name="name",
                provided_value=name
            )

    @staticmethod
    def validate_environment_vars(env_vars: Optional[Dict[str, str]]) -> None:
        """
        Validate environment variables dictionary.

        Args:
            env_vars: Environment variables to validate

        Raises:
            ValidationError: If environment variables are invalid
        """
        if env_vars is None:
            return

        if not isinstance(env_vars, dict):
            raise ValidationError(
                "Environment variables must be a dictionary",
                parameter_name="environment_vars",
                provided_value=str(type(env_vars))
            )

        for key, value in env_vars.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValidationError(
                    f"Environment variable key and value must be strings: {key}={value}",
                    parameter_name="environment_vars",
                    provided_value=f"{key}={value}"
                )

    @staticmethod
    def validate_rolling_update_bounds(minimum_healthy_percent: int,
                                       maximum_percent: int) -> None:
        """
        Validate the rolling update envelope of an ECS service.

        The service must keep between ``minimum_healthy_percent`` and
        ``maximum_percent`` of its desired count running during a deployment,
        so ``0 <= minimum_healthy_percent <= 100 <= maximum_percent``.

        Raises:
            ValidationError: If the bounds are outside that envelope
        """
        if not 0 <= minimum_healthy_percent <= 100:
            raise ValidationError(
                f"Minimum healthy percent must be between 0 and 100, got {minimum_healthy_percent}",
                parameter_name="minimum_healthy_instances_percent",
                provided_value=str(minimum_healthy_percent)
            )

        if maximum_percent < 100:
            raise ValidationError(
                f"Maximum percent must be at least 100, got {maximum_percent}",
                parameter_name="maximum_instances_percent",
                provided_value=str(maximum_percent)
            )


class AWSResourceValidator:
    """Utility class for validating AWS resource parameters."""

    @staticmethod
    def validate_arn(arn: str, service: Optional[str] = None) -> None:
        """
        Validate AWS ARN format.

        Args:
            arn: ARN to validate
            service: Expected AWS service (optional)

        Raises:
            ValidationError: If ARN format is invalid
        """
        if Token.is_unresolved(arn):
            return

        arn_pattern = re.compile(
            r'^arn:aws[a-zA-Z0-9-]*:[a-zA-Z0-9-]+:'
            r'[a-zA-Z0-9-]*:[0-9]*:[a-zA-Z0-9-/._:]+$'
        )

        if not arn_pattern.match(arn):
            raise ValidationError(
                f"Invalid ARN format: {arn}",
                parameter_name="arn",
                provided_value=arn
            )

        if service and not arn.split(':')[2] == service:
            raise ValidationError(
                f"Expected {service} service ARN, got {arn.split(':')[2]}",
                parameter_name="arn",
                provided_value=arn
            )
