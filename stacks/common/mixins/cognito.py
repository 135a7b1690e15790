"""
Cognito authentication mixin for CDK stacks.

This module provides reusable Cognito functionality including:
- User pool creation and configuration
- User pool client management for the authorization code flow
- Hosted login domain configuration
"""

from dataclasses import dataclass, field
from typing import List

from aws_cdk import (
    aws_cognito as cognito,
    Duration,
    RemovalPolicy
)
from constructs import Construct

from ..constants import (
    COGNITO_CALLBACK_PATH,
    DEFAULT_COGNITO_PASSWORD_MIN_LENGTH,
    DEFAULT_COGNITO_TEMP_PASSWORD_VALIDITY_DAYS
)
from ..exceptions import ResourceCreationError, ValidationError
from ..validators import ConfigValidator

LOCAL_DEVELOPMENT_URL = "http://localhost:8080"


@dataclass(frozen=True)
class CognitoConfiguration:
    """
    Configuration class for Cognito resources.

    This class encapsulates all configurable options for Cognito
    to provide type safety and clear documentation.
    """
    # User Pool Configuration
    user_pool_name: str
    client_name: str
    api_url: str
    login_page_domain_prefix: str

    # Sign-in Configuration
    sign_in_case_sensitive: bool = True

    # Password Policy Configuration
    min_password_length: int = DEFAULT_COGNITO_PASSWORD_MIN_LENGTH
    temp_password_validity_days: int = DEFAULT_COGNITO_TEMP_PASSWORD_VALIDITY_DAYS

    # OAuth Configuration
    include_local_development_urls: bool = True
    oauth_scopes: List[cognito.OAuthScope] = field(default_factory=lambda: [
        cognito.OAuthScope.EMAIL,
        cognito.OAuthScope.OPENID,
        cognito.OAuthScope.PROFILE
    ])

    # Cleanup Configuration
    removal_policy: RemovalPolicy = RemovalPolicy.DESTROY

    def __post_init__(self):
        """Validate configuration after initialization."""
        ConfigValidator.require_non_empty(self.api_url, "ApiUrl")
        ConfigValidator.require_non_empty(self.login_page_domain_prefix, "LoginPageDomainPrefix")

        if self.min_password_length < 6 or self.min_password_length > 99:
            raise ValidationError(
                "Password length must be between 6 and 99 characters",
                parameter_name="min_password_length",
                provided_value=str(self.min_password_length)
            )

        ConfigValidator.validate_resource_name(self.user_pool_name, max_length=128)
        ConfigValidator.validate_resource_name(self.client_name, max_length=128)

    @property
    def callback_urls(self) -> List[str]:
        urls = [f"{self.api_url}{COGNITO_CALLBACK_PATH}"]
        if self.include_local_development_urls:
            urls.append(f"{LOCAL_DEVELOPMENT_URL}{COGNITO_CALLBACK_PATH}")
        return urls

    @property
    def logout_urls(self) -> List[str]:
        urls = [self.api_url]
        if self.include_local_development_urls:
            urls.append(LOCAL_DEVELOPMENT_URL)
        return urls


@dataclass
class CognitoResources:
    """
    Container for created Cognito resources.

    This class provides a structured way to return and access
    all created Cognito resources.
    """
    user_pool: cognito.UserPool
    user_pool_client: cognito.UserPoolClient
    user_pool_domain: cognito.UserPoolDomain

    @property
    def user_pool_id(self) -> str:
        """Get the User Pool ID."""
        return self.user_pool.user_pool_id

    @property
    def client_id(self) -> str:
        """Get the User Pool Client ID."""
        return self.user_pool_client.user_pool_client_id

    @property
    def provider_url(self) -> str:
        """Get the OpenID Connect issuer URL of the User Pool."""
        return self.user_pool.user_pool_provider_url

    @property
    def client_secret(self) -> str:
        """Get the User Pool Client secret as a deploy-time token."""
        return self.user_pool_client.user_pool_client_secret.unsafe_unwrap()


class CognitoMixin:
    """
    Mixin class providing Cognito authentication functionality.

    This mixin can be added to any CDK stack that needs Cognito
    authentication capabilities.
    """

    def create_cognito_authentication(
        self,
        scope: Construct,
        config: CognitoConfiguration
    ) -> CognitoResources:
        """
        Create a user pool, its confidential client and hosted login domain.

        Args:
            scope: CDK construct scope
            config: Cognito configuration

        Returns:
            CognitoResources containing all created resources

        Raises:
            ResourceCreationError: If resource creation fails
        """
        user_pool = self._create_user_pool(scope, config)
        user_pool_client = self._create_user_pool_client(scope, user_pool, config)
        user_pool_domain = self._create_user_pool_domain(scope, user_pool, config)

        return CognitoResources(
            user_pool=user_pool,
            user_pool_client=user_pool_client,
            user_pool_domain=user_pool_domain
        )

    @staticmethod
    def logout_url(login_page_domain_prefix: str, region: str) -> str:
        """Logout endpoint of the hosted login page."""
        return f"https://{login_page_domain_prefix}.auth.{region}.amazoncognito.com/logout"

    def _create_user_pool(
        self,
        scope: Construct,
        config: CognitoConfiguration
    ) -> cognito.UserPool:
        """Create and configure the Cognito User Pool."""
        try:
            return cognito.UserPool(
                scope,
                "UserPool",
                user_pool_name=config.user_pool_name,
                self_sign_up_enabled=True,
                account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
                auto_verify=cognito.AutoVerifiedAttrs(email=True),
                sign_in_aliases=cognito.SignInAliases(email=True),
                sign_in_case_sensitive=config.sign_in_case_sensitive,
                email=cognito.UserPoolEmail.with_cognito(),
                standard_attributes=cognito.StandardAttributes(
                    email=cognito.StandardAttribute(required=True, mutable=False),
                    given_name=cognito.StandardAttribute(required=True, mutable=True),
                    family_name=cognito.StandardAttribute(required=True, mutable=True)
                ),
                mfa=cognito.Mfa.OFF,
                password_policy=cognito.PasswordPolicy(
                    min_length=config.min_password_length,
                    require_lowercase=True,
                    require_uppercase=True,
                    require_digits=True,
                    require_symbols=True,
                    temp_password_validity=Duration.days(config.temp_password_validity_days)
                ),
                removal_policy=config.removal_policy
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool: {str(e)}",
                resource_type="UserPool"
            ) from e

    def _create_user_pool_client(
        self,
        scope: Construct,
        user_pool: cognito.UserPool,
        config: CognitoConfiguration
    ) -> cognito.UserPoolClient:
        """Create the Cognito User Pool Client."""
        try:
            return cognito.UserPoolClient(
                scope,
                "UserPoolClient",
                user_pool=user_pool,
                user_pool_client_name=config.client_name,
                generate_secret=True,
                o_auth=cognito.OAuthSettings(
                    flows=cognito.OAuthFlows(
                        authorization_code_grant=True,
                        implicit_code_grant=False,
                        client_credentials=False
                    ),
                    scopes=config.oauth_scopes,
                    callback_urls=config.callback_urls,
                    logout_urls=config.logout_urls
                ),
                supported_identity_providers=[
                    cognito.UserPoolClientIdentityProvider.COGNITO
                ]
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool Client: {str(e)}",
                resource_type="UserPoolClient"
            ) from e

    def _create_user_pool_domain(
        self,
        scope: Construct,
        user_pool: cognito.UserPool,
        config: CognitoConfiguration
    ) -> cognito.UserPoolDomain:
        """Create the hosted login domain."""
        try:
            return cognito.UserPoolDomain(
                scope,
                "UserPoolDomain",
                user_pool=user_pool,
                cognito_domain=cognito.CognitoDomainOptions(
                    domain_prefix=config.login_page_domain_prefix
                )
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool Domain: {str(e)}",
                resource_type="UserPoolDomain"
            ) from e
