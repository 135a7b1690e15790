from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.constants import (
    DEFAULT_DATABASE_INSTANCE_CLASS,
    DEFAULT_DATABASE_STORAGE_GB,
    DEFAULT_MYSQL_VERSION
)
from stacks.contracts import NetworkOutputParameters
from .construct import DatabaseConstruct, DatabaseInputParameters


class DatabaseStack(BaseStack):
    """Deploys the ``database`` parameter family of an application."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        input_parameters = DatabaseInputParameters(
            storage_in_gb=self.get_optional_config('DatabaseStorageInGb', DEFAULT_DATABASE_STORAGE_GB),
            instance_class=self.get_optional_config('DatabaseInstanceClass', DEFAULT_DATABASE_INSTANCE_CLASS),
            engine_version=str(self.get_optional_config('DatabaseEngineVersion', DEFAULT_MYSQL_VERSION))
        )

        self.database = DatabaseConstruct(
            self,
            "Database",
            env=self.application_environment,
            store=self.contract_store,
            network=NetworkOutputParameters.load(self.contract_store, self.application_environment),
            input_parameters=input_parameters
        )
