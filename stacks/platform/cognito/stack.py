import logging

from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.mixins import CognitoConfiguration, CognitoMixin
from stacks.contracts import CognitoOutputParameters

logger = logging.getLogger(__name__)


class CognitoStack(BaseStack, CognitoMixin):
    """
    User pool of one application.

    Users sign up themselves with email, given name and family name and
    log in through the hosted login page. The backend is a confidential
    client using the authorization code grant. Publishes the ``cognito``
    parameter family.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)
        env = self.application_environment

        login_page_domain_prefix = self.get_required_config('LoginPageDomainPrefix')
        sign_in_case_sensitive = bool(self.get_optional_config('CognitoSignInCaseSensitive', True))
        logger.info(f"User pool sign-in case sensitive: {sign_in_case_sensitive}")

        cognito_config = CognitoConfiguration(
            user_pool_name=f"{env.application_name}-user-pool",
            client_name=f"{env.application_name}-user-pool-client",
            api_url=self.get_required_config('ApiUrl'),
            login_page_domain_prefix=login_page_domain_prefix,
            sign_in_case_sensitive=sign_in_case_sensitive,
            include_local_development_urls=bool(
                self.get_optional_config('CognitoLocalDevelopmentUrls', True)
            )
        )

        self.cognito_resources = self.create_cognito_authentication(self, cognito_config)

        self.output_parameters = CognitoOutputParameters(
            user_pool_id=self.cognito_resources.user_pool_id,
            user_pool_client_id=self.cognito_resources.client_id,
            user_pool_client_secret=self.cognito_resources.client_secret,
            logout_url=self.logout_url(login_page_domain_prefix, self.region),
            provider_url=self.cognito_resources.provider_url
        )
        self.output_parameters.publish(self.contract_store, env)
