import logging
import re
from typing import Any, Dict, List, Optional

import yaml
from yaml.loader import SafeLoader

logger = logging.getLogger(__name__)

# CDK context variables accepted on the command line and the configuration
# keys they override, e.g. ``cdk deploy -c imageTag=1.4.2``
CONTEXT_OVERRIDES = {
    'applicationName': 'ApplicationName',
    'environmentName': 'DeploymentStage',
    'accountId': 'AccountId',
    'region': 'RegionName',
    'springProfile': 'SpringProfile',
    'sslCertificateArnBackend': 'SslCertificateArn',
    'sslCertificateArnFrontend': 'FrontendCertificateArn',
    'repositoryName': 'RepositoryName',
    'imageTag': 'ImageTag',
    'keyName': 'BastionKeyName',
    'localPublicIp': 'BastionAllowedSshCidr',
    'apiDomain': 'ApiDomain',
    'appDomain': 'AppDomain',
    'hostedZoneDomain': 'HostedZoneDomain',
    'apiUrl': 'ApiUrl',
    'appUrl': 'AppUrl',
    'loginPageDomainPrefix': 'LoginPageDomainPrefix',
    'stacks': 'Stacks',
}


class ApplicationNameValidationError(Exception):
    """Raised when ApplicationName validation fails."""
    pass


class Config:

    _environment = 'dev'
    data = {}

    def __init__(self, environment, overrides: Optional[Dict[str, Any]] = None) -> None:
        self._environment = environment
        self.load()
        self.apply_overrides(overrides or {})
        self._validate_application_name()

    def load(self) -> dict:
        with open(f'config/{self._environment}.yaml', encoding='utf-8') as f:
            self.data = yaml.load(f, Loader=SafeLoader) or {}
        return self.data

    def get(self, key):
        return self.data[key]

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """
        Override configuration keys with CDK context values.

        Args:
            overrides: Context variable names (see ``CONTEXT_OVERRIDES``)
                mapped to their values. Empty values are ignored.
        """
        for context_name, value in overrides.items():
            key = CONTEXT_OVERRIDES.get(context_name, context_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if key == 'Stacks' and isinstance(value, str):
                value = [name.strip() for name in value.split(',') if name.strip()]
            logger.info(f"Configuration key '{key}' overridden from context '{context_name}'")
            self.data[key] = value

    def require(self, key: str) -> str:
        """
        Get a configuration value that must be a non-blank string.

        Raises:
            StackConfigurationError: If the key is missing or blank
        """
        from stacks.common.exceptions import StackConfigurationError

        value = self.data.get(key)
        if value is None or not isinstance(value, str) or not value.strip():
            raise StackConfigurationError(
                f"Configuration value '{key}' must not be empty",
                config_key=key
            )
        return value

    @property
    def environment(self) -> str:
        return self._environment

    def get_stack_selection(self) -> Optional[List[str]]:
        """Names of the stacks to synthesize, or None for every configured stack."""
        return self.data.get('Stacks')

    def _validate_application_name(self) -> None:
        """
        Validate ApplicationName against the naming rules of the resources it prefixes.

        The name ends up in CloudFormation stack names, the ECR repository
        name, the Cognito user pool and every ``{stage}-{app}-...`` resource.

        Raises:
            ApplicationNameValidationError: If ApplicationName doesn't meet requirements
        """
        application_name = self.data.get('ApplicationName')

        if not application_name:
            raise ApplicationNameValidationError("ApplicationName is required in configuration")

        if not isinstance(application_name, str):
            raise ApplicationNameValidationError("ApplicationName must be a string")

        application_name = application_name.strip()

        if not application_name:
            raise ApplicationNameValidationError("ApplicationName cannot be empty or whitespace only")

        # ECR repository and CloudFormation stack names
        MAX_LENGTH = 32
        MIN_LENGTH = 3

        if len(application_name) > MAX_LENGTH:
            raise ApplicationNameValidationError(
                f"ApplicationName must be {MAX_LENGTH} characters or less. "
                f"Current length: {len(application_name)}"
            )

        if len(application_name) < MIN_LENGTH:
            raise ApplicationNameValidationError(
                f"ApplicationName must be at least {MIN_LENGTH} characters long. "
                f"Current length: {len(application_name)}"
            )

        # Lowercase for ECR and S3, leading letter for CloudFormation
        if not re.match(r'^[a-z]([a-z0-9-]*[a-z0-9])?$', application_name):
            raise ApplicationNameValidationError(
                f"ApplicationName '{application_name}' contains invalid characters. "
                f"Must use only lowercase letters (a-z), numbers (0-9), and hyphens (-). "
                f"Must start with a letter and end with a letter or number"
            )

        if '--' in application_name:
            raise ApplicationNameValidationError(
                f"ApplicationName '{application_name}' contains consecutive hyphens"
            )
