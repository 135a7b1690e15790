"""Custom exceptions for CDK stacks."""

from typing import List, Optional


class StackConfigurationError(Exception):
    """
    Exception raised when stack configuration is invalid or incomplete.

    Attributes:
        message: Human-readable error description
        config_key: The configuration key that caused the error
    """

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            config_key: The configuration key that caused the error
        """
        self.message = message
        self.config_key = config_key
        super().__init__(self.message)


class ResourceCreationError(Exception):
    """
    Exception raised when declaring an AWS resource fails.

    Attributes:
        message: Human-readable error description
        resource_type: The AWS resource type that failed to create
    """

    def __init__(self, message: str, resource_type: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            resource_type: The AWS resource type that failed to create
        """
        self.message = message
        self.resource_type = resource_type
        super().__init__(self.message)


class ValidationError(Exception):
    """
    Exception raised when parameter validation fails.

    Attributes:
        message: Human-readable error description
        parameter_name: The parameter that failed validation
        provided_value: The value that was provided
    """

    def __init__(
        self,
        message: str,
        parameter_name: Optional[str] = None,
        provided_value: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            parameter_name: The parameter that failed validation
            provided_value: The value that was provided
        """
        self.message = message
        self.parameter_name = parameter_name
        self.provided_value = provided_value
        super().__init__(self.message)


class MissingContractError(Exception):
    """
    Exception raised when a consumer loads a parameter nobody published.

    This happens when the producing stack was never deployed, or was
    deployed for a different stage or application.

    Attributes:
        message: Human-readable error description
        parameter_name: Full name of the missing parameter
    """

    def __init__(self, message: str, parameter_name: Optional[str] = None) -> None:
        self.message = message
        self.parameter_name = parameter_name
        super().__init__(self.message)


class DeploymentOrderError(Exception):
    """
    Exception raised when the stack dependency graph cannot be ordered.

    Attributes:
        message: Human-readable error description
        stack_names: The stacks involved (cycle members, or the consumer
            whose producer is missing)
    """

    def __init__(self, message: str, stack_names: Optional[List[str]] = None) -> None:
        self.message = message
        self.stack_names = stack_names or []
        super().__init__(self.message)
