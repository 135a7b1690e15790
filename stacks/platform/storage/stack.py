from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.constants import DEFAULT_UPLOAD_CORS_ORIGINS
from .construct import StorageConstruct, StorageInputParameters


class StorageStack(BaseStack):
    """Deploys the ``s3`` parameter family of an application."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        input_parameters = StorageInputParameters(
            cors_origins=list(self.get_optional_config('UploadCorsOrigins', DEFAULT_UPLOAD_CORS_ORIGINS)),
            public_read=bool(self.get_optional_config('UploadsPublicRead', True))
        )

        self.storage = StorageConstruct(
            self,
            "Storage",
            env=self.application_environment,
            store=self.contract_store,
            input_parameters=input_parameters
        )
