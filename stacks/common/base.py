"""
Base classes and common patterns for CDK stacks.

Every stack of the estate is built from the same configuration object and
derives its names from the same ``ApplicationEnvironment``. Stacks exchange
values only through the parameter contract store created here.
"""

import logging
from typing import Any

from aws_cdk import (
    aws_logs as logs,
    Stack
)
from constructs import Construct

from helper.config import Config
from stacks.contracts.store import CdkParameterBackend, ParameterContractStore
from .environment import ApplicationEnvironment, DeploymentStage
from .exceptions import StackConfigurationError

logger = logging.getLogger(__name__)

# Map retention days to CDK enum values
RETENTION_MAPPING = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    120: logs.RetentionDays.FOUR_MONTHS,
    150: logs.RetentionDays.FIVE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
    400: logs.RetentionDays.THIRTEEN_MONTHS,
    545: logs.RetentionDays.EIGHTEEN_MONTHS,
    731: logs.RetentionDays.TWO_YEARS,
    1827: logs.RetentionDays.FIVE_YEARS,
    3653: logs.RetentionDays.TEN_YEARS
}


def retention_from_days(retention_days: int) -> logs.RetentionDays:
    """
    Convert a number of days to the matching ``RetentionDays`` value.

    Raises:
        StackConfigurationError: If CloudWatch Logs has no such retention
    """
    if retention_days not in RETENTION_MAPPING:
        raise StackConfigurationError(
            f"Unsupported log retention of {retention_days} days. "
            f"Supported values: {sorted(RETENTION_MAPPING)}",
            config_key="LogRetentionDays"
        )
    return RETENTION_MAPPING[retention_days]


def application_environment_from_config(config: Config) -> ApplicationEnvironment:
    """
    Build the deployment identity from configuration.

    Raises:
        StackConfigurationError: If the application name or stage is blank
            or the stage is unknown
    """
    application_name = config.require('ApplicationName')
    stage = DeploymentStage.from_name(config.require('DeploymentStage'))
    return ApplicationEnvironment(application_name, stage)


class BaseStack(Stack):
    """
    Base stack class with common functionality and validation.

    This class provides:
    - Configuration validation
    - The application environment used for names and tags
    - A parameter contract store bound to this stack
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        """
        Initialize the base stack.

        Args:
            scope: CDK scope
            construct_id: Unique identifier for this construct
            config: Configuration object
            **kwargs: Additional keyword arguments for Stack

        Raises:
            StackConfigurationError: If configuration is invalid
        """
        super().__init__(scope, construct_id, **kwargs)
        self.config = config
        self._validate_config()

        self.application_environment = application_environment_from_config(config)
        self.contract_store = ParameterContractStore(
            CdkParameterBackend(self),
            legacy_names=bool(self.get_optional_config('LegacyParameterNames', False))
        )
        logger.debug(f"Initialized stack {construct_id} for {self.application_environment}")

    def _validate_config(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            StackConfigurationError: If configuration is invalid
        """
        if not isinstance(self.config, Config):
            raise StackConfigurationError(
                "Configuration must be a Config instance",
                config_key="config"
            )

    def get_required_config(self, key: str) -> Any:
        """
        Get a required configuration value with validation.

        Args:
            key: Configuration key to retrieve

        Returns:
            The configuration value

        Raises:
            StackConfigurationError: If key is missing or blank
        """
        try:
            value = self.config.get(key)
        except KeyError:
            value = None

        if value is None or (isinstance(value, str) and not value.strip()):
            raise StackConfigurationError(
                f"Required configuration key '{key}' is missing",
                config_key=key
            )
        return value

    def get_optional_config(self, key: str, default_value: Any = None) -> Any:
        """
        Get an optional configuration value.

        Args:
            key: Configuration key to retrieve
            default_value: Default value if key is not found

        Returns:
            The configuration value or default
        """
        try:
            value = self.config.get(key)
        except KeyError:
            return default_value
        return default_value if value is None else value
