import logging

from aws_cdk import aws_s3 as s3
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.constants import (
    DEFAULT_CPU,
    DEFAULT_DESIRED_COUNT,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_MEMORY
)
from stacks.common.environment import SpringProfile
from stacks.common.mixins import IAMPolicyMixin
from stacks.contracts import (
    CognitoOutputParameters,
    DatabaseOutputParameters,
    NetworkOutputParameters,
    StorageOutputParameters
)
from .construct import (
    ExternalImage,
    ImageSource,
    RegistryImage,
    ServiceConstruct,
    ServiceInputParameters
)
from .environment_variables import build_environment_variables, build_secret_references

logger = logging.getLogger(__name__)


class ServiceStack(BaseStack):
    """
    Deploys the backend service of one application.

    Consumes the ``network``, ``database`` and ``cognito`` families, and
    the ``s3`` family when user uploads are enabled.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)
        env = self.application_environment

        network = NetworkOutputParameters.load(self.contract_store, env)
        database = DatabaseOutputParameters.load(self.contract_store, env)
        cognito = CognitoOutputParameters.load(self.contract_store, env)

        storage = None
        task_role_statements = []
        if self.get_optional_config('EnableUserUploads', True):
            storage = StorageOutputParameters.load(self.contract_store, env)
            uploads_bucket = s3.Bucket.from_bucket_name(self, "UserUploadsBucket", storage.bucket_name)
            task_role_statements.append(
                IAMPolicyMixin.s3_object_read_write_statement(uploads_bucket.bucket_arn)
            )

        spring_profile = SpringProfile.from_name(
            self.get_optional_config('SpringProfile', env.stage_name)
        )

        input_parameters = ServiceInputParameters(
            image_source=self._image_source(),
            environment_variables=build_environment_variables(
                spring_profile,
                database,
                cognito,
                app_url=self.get_required_config('AppUrl'),
                storage=storage
            ),
            secrets=build_secret_references(database),
            downstream_security_group_ids=[database.security_group_id],
            task_role_statements=task_role_statements,
            cpu=self.get_optional_config('Cpu', DEFAULT_CPU),
            memory=self.get_optional_config('Memory', DEFAULT_MEMORY),
            desired_count=self.get_optional_config('DesiredCount', DEFAULT_DESIRED_COUNT),
            log_retention_days=self.get_optional_config('LogRetentionDays', DEFAULT_LOG_RETENTION_DAYS),
            sticky_sessions_enabled=self.get_optional_config('StickySessionsEnabled', False)
        )

        self.service = ServiceConstruct(
            self,
            "Service",
            env=env,
            input_parameters=input_parameters,
            network=network
        )

    def _image_source(self) -> ImageSource:
        image_url = self.get_optional_config('ImageUrl')
        if image_url:
            logger.info(f"Deploying external image {image_url}")
            return ExternalImage(image_url)

        return RegistryImage(
            repository_name=self.get_required_config('RepositoryName'),
            tag=str(self.get_required_config('ImageTag'))
        )
