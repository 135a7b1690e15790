"""
Parameter contract store.

Stacks never reference each other directly. A producing stack publishes
its outputs as SSM parameters under a deterministic name and a consuming
stack rebuilds the same name to load them. This module owns the naming
scheme, the encoding of optional values and the backends that actually
read and write the parameters.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

import boto3
from aws_cdk import aws_ssm as ssm, Fn, ICfnRuleConditionExpression
from botocore.exceptions import ClientError
from constructs import Construct

from stacks.common.constants import NULL_SENTINEL
from stacks.common.environment import ApplicationEnvironment, sanitize_name
from stacks.common.exceptions import MissingContractError, ValidationError
from .keys import APPLICATION_SCOPED_FAMILIES, ParameterFamily

logger = logging.getLogger(__name__)


def encode_optional(value: Optional[str]) -> str:
    """Encode an optional value for a store that only holds strings."""
    return NULL_SENTINEL if value is None else value


def decode_optional(value: str) -> Optional[str]:
    """Reverse ``encode_optional``: the sentinel literal means absent."""
    return None if value == NULL_SENTINEL else value


def is_present_condition(value: str) -> ICfnRuleConditionExpression:
    """
    CloudFormation condition that holds when an optional loaded as a token
    resolves to a real value at deployment.
    """
    return Fn.condition_not(Fn.condition_equals(value, NULL_SENTINEL))


class ParameterBackend(ABC):
    """Storage used by ``ParameterContractStore``."""

    @abstractmethod
    def put(self, name: str, value: str, construct_id: str) -> None:
        """Write a string parameter, overwriting any previous value."""

    @abstractmethod
    def put_list(self, name: str, values: List[str], construct_id: str) -> None:
        """Write a string-list parameter, overwriting any previous value."""

    @abstractmethod
    def get(self, name: str) -> str:
        """Read a string parameter."""

    @abstractmethod
    def get_list(self, name: str,
                 value_type: ssm.ParameterValueType = ssm.ParameterValueType.STRING) -> List[str]:
        """Read a string-list parameter."""


class CdkParameterBackend(ParameterBackend):
    """
    Declares parameters in a CDK scope.

    Writes become ``AWS::SSM::Parameter`` resources of the producing stack.
    Reads become CloudFormation parameters resolved when the consuming stack
    is deployed, so a missing producer fails that deployment rather than
    synthesis.
    """

    def __init__(self, scope: Construct) -> None:
        self.scope = scope

    def put(self, name: str, value: str, construct_id: str) -> None:
        ssm.StringParameter(
            self.scope,
            construct_id,
            parameter_name=name,
            string_value=value
        )

    def put_list(self, name: str, values: List[str], construct_id: str) -> None:
        ssm.StringListParameter(
            self.scope,
            construct_id,
            parameter_name=name,
            string_list_value=values
        )

    def get(self, name: str) -> str:
        return ssm.StringParameter.value_for_string_parameter(self.scope, name)

    def get_list(self, name: str,
                 value_type: ssm.ParameterValueType = ssm.ParameterValueType.STRING) -> List[str]:
        return ssm.StringListParameter.value_for_typed_list_parameter(self.scope, name, value_type)


class LiveParameterBackend(ParameterBackend):
    """
    Reads and writes parameters in an AWS account through the SSM API.

    Used before synthesis to check that the producers of every family a
    deployment needs have already published their outputs.
    """

    def __init__(self, region_name: Optional[str] = None, client=None) -> None:
        self.region_name = region_name
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('ssm', region_name=self.region_name)
        return self._client

    def put(self, name: str, value: str, construct_id: str) -> None:
        self.client.put_parameter(Name=name, Value=value, Type='String', Overwrite=True)

    def put_list(self, name: str, values: List[str], construct_id: str) -> None:
        self.client.put_parameter(Name=name, Value=",".join(values), Type='StringList', Overwrite=True)

    def get(self, name: str) -> str:
        try:
            response = self.client.get_parameter(Name=name)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ParameterNotFound':
                raise MissingContractError(
                    f"Parameter '{name}' does not exist. Deploy the stack that publishes it first.",
                    parameter_name=name
                ) from e
            raise
        return response['Parameter']['Value']

    def get_list(self, name: str,
                 value_type: ssm.ParameterValueType = ssm.ParameterValueType.STRING) -> List[str]:
        return self.get(name).split(",")


class InMemoryParameterBackend(ParameterBackend):
    """Dictionary backed store for plan checks and tests."""

    def __init__(self) -> None:
        self.parameters: Dict[str, Union[str, List[str]]] = {}

    def put(self, name: str, value: str, construct_id: str) -> None:
        self.parameters[name] = value

    def put_list(self, name: str, values: List[str], construct_id: str) -> None:
        self.parameters[name] = list(values)

    def _lookup(self, name: str) -> Union[str, List[str]]:
        if name not in self.parameters:
            raise MissingContractError(
                f"Parameter '{name}' does not exist. Deploy the stack that publishes it first.",
                parameter_name=name
            )
        return self.parameters[name]

    def get(self, name: str) -> str:
        value = self._lookup(name)
        if isinstance(value, list):
            raise ValidationError(
                f"Parameter '{name}' holds a list, not a string",
                parameter_name=name,
                provided_value=",".join(value)
            )
        return value

    def get_list(self, name: str,
                 value_type: ssm.ParameterValueType = ssm.ParameterValueType.STRING) -> List[str]:
        value = self._lookup(name)
        if not isinstance(value, list):
            raise ValidationError(
                f"Parameter '{name}' holds a string, not a list",
                parameter_name=name,
                provided_value=value
            )
        return list(value)


class ParameterContractStore:
    """
    Publishes and loads the outputs of one stack for use by another.

    Parameter names are ``{stage}-{family}-{key}``. With ``legacy_names``
    the database, cognito and storage families use the older
    ``{stage}-{app}-{family}-{key}`` names instead, so estates deployed
    before the naming scheme was unified keep resolving.

    Args:
        backend: Where parameters are written to and read from
        legacy_names: Use the application-scoped names for the families
            that historically had them
    """

    def __init__(self, backend: ParameterBackend, legacy_names: bool = False) -> None:
        self.backend = backend
        self.legacy_names = legacy_names
        self._warned_families = set()

    def parameter_name(self, family: ParameterFamily,
                       env: ApplicationEnvironment, key: str) -> str:
        if self.legacy_names and family in APPLICATION_SCOPED_FAMILIES:
            if family not in self._warned_families:
                logger.warning(
                    f"Using legacy application-scoped parameter names for family '{family.value}'"
                )
                self._warned_families.add(family)
            return env.prefix(f"{family.value}-{key}")
        return sanitize_name(f"{env.stage_name}-{family.value}-{key}")

    def publish(self, family: ParameterFamily, env: ApplicationEnvironment,
                key: str, value: str) -> None:
        """
        Publish a required string value.

        Raises:
            ValidationError: If the value is the reserved sentinel literal
        """
        if value == NULL_SENTINEL:
            raise ValidationError(
                f"'{NULL_SENTINEL}' is reserved for absent values, use publish_optional",
                parameter_name=key,
                provided_value=value
            )
        name = self.parameter_name(family, env, key)
        logger.debug(f"Publishing parameter {name}")
        self.backend.put(name, value, key)

    def publish_optional(self, family: ParameterFamily, env: ApplicationEnvironment,
                         key: str, value: Optional[str]) -> None:
        name = self.parameter_name(family, env, key)
        logger.debug(f"Publishing optional parameter {name} (present={value is not None})")
        self.backend.put(name, encode_optional(value), key)

    def publish_list(self, family: ParameterFamily, env: ApplicationEnvironment,
                     key: str, values: List[str]) -> None:
        name = self.parameter_name(family, env, key)
        logger.debug(f"Publishing list parameter {name}")
        self.backend.put_list(name, values, key)

    def load(self, family: ParameterFamily, env: ApplicationEnvironment, key: str) -> str:
        """
        Load a value published by another stack.

        Raises:
            MissingContractError: If the backend knows the parameter is missing
        """
        name = self.parameter_name(family, env, key)
        logger.debug(f"Loading parameter {name}")
        return self.backend.get(name)

    def load_optional(self, family: ParameterFamily, env: ApplicationEnvironment,
                      key: str) -> Optional[str]:
        return decode_optional(self.load(family, env, key))

    def load_list(self, family: ParameterFamily, env: ApplicationEnvironment, key: str,
                  value_type: ssm.ParameterValueType = ssm.ParameterValueType.STRING) -> List[str]:
        name = self.parameter_name(family, env, key)
        logger.debug(f"Loading list parameter {name}")
        return self.backend.get_list(name, value_type)

    def exists(self, family: ParameterFamily, env: ApplicationEnvironment, key: str) -> bool:
        """Whether the parameter can be loaded. CDK backends defer this to deployment."""
        try:
            self.load(family, env, key)
        except MissingContractError:
            return False
        return True
