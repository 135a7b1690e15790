"""Container environment of the Spring Boot backend."""

from typing import Dict, Optional

from stacks.common.environment import SpringProfile
from stacks.common.validators import ConfigValidator
from stacks.contracts import (
    CognitoOutputParameters,
    DatabaseOutputParameters,
    StorageOutputParameters
)
from .construct import SecretReference


def build_environment_variables(spring_profile: SpringProfile,
                                database: DatabaseOutputParameters,
                                cognito: CognitoOutputParameters,
                                app_url: str,
                                storage: Optional[StorageOutputParameters] = None) -> Dict[str, str]:
    """
    Plain environment variables of the backend container.

    Args:
        spring_profile: Profile activated in the container
        database: Loaded database bundle
        cognito: Loaded Cognito bundle
        app_url: Public URL of the frontend
        storage: Loaded storage bundle, when uploads are wired in

    Returns:
        Variable names mapped to values, in a stable order
    """
    ConfigValidator.require_non_empty(app_url, "AppUrl")

    variables = {
        "SPRING_PROFILES_ACTIVE": spring_profile.value,
        "SPRING_DATASOURCE_URL": (
            f"jdbc:mysql://{database.endpoint_address}:{database.endpoint_port}/{database.database_name}"
        ),
        "COGNITO_CLIENT_ID": cognito.user_pool_client_id,
        "COGNITO_CLIENT_SECRET": cognito.user_pool_client_secret,
        "COGNITO_PROVIDER_URL": cognito.provider_url,
        "APP_URL": app_url,
    }
    if storage is not None:
        variables["S3_BUCKET_NAME"] = storage.bucket_name
    return variables


def build_secret_references(database: DatabaseOutputParameters) -> Dict[str, SecretReference]:
    """Datasource credentials, read from the database secret when a task starts."""
    return {
        "SPRING_DATASOURCE_USERNAME": SecretReference(database.secret_arn, "username"),
        "SPRING_DATASOURCE_PASSWORD": SecretReference(database.secret_arn, "password"),
    }
