from aws_cdk import CfnOutput
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.constants import DEFAULT_MAX_IMAGE_COUNT
from .construct import RepositoryConstruct, RepositoryInputParameters


class RepositoryStack(BaseStack):
    """Deploys the image repository of an application."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        input_parameters = RepositoryInputParameters(
            repository_name=self.get_optional_config(
                'RepositoryName', self.application_environment.application_name
            ),
            account_id=str(self.get_optional_config('AccountId', self.account)),
            max_image_count=self.get_optional_config('MaxImageCount', DEFAULT_MAX_IMAGE_COUNT),
            retain_registry_on_delete=bool(self.get_optional_config('RetainRegistryOnDelete', False))
        )

        self.repository = RepositoryConstruct(self, "Repository", input_parameters)

        CfnOutput(
            self, "RepositoryUri",
            value=self.repository.repository.repository_uri,
            description="URI to push the backend image to"
        )
