"""
Tests for the per-application platform stacks: database, user pool and upload storage.
"""

import json

import pytest
import aws_cdk as cdk
from aws_cdk.assertions import Match, Template

from stacks.common.exceptions import StackConfigurationError, ValidationError
from stacks.contracts import CdkParameterBackend, ParameterContractStore
from stacks.platform import (
    CognitoStack,
    DatabaseConstruct,
    DatabaseInputParameters,
    DatabaseStack,
    StorageConstruct,
    StorageInputParameters,
    StorageStack
)
from stacks.platform.database import sanitize_database_identifier


def parameter_names(template: Template) -> set:
    return {
        resource["Properties"]["Name"]
        for resource in template.find_resources("AWS::SSM::Parameter").values()
    }


class TestDatabaseConstruct:
    """Test the MySQL instance, its secret and security group."""

    @pytest.fixture
    def template(self, dev_env, network_bundle):
        app = cdk.App()
        stack = cdk.Stack(app, "DatabaseTestStack")
        DatabaseConstruct(
            stack,
            "Database",
            env=dev_env,
            store=ParameterContractStore(CdkParameterBackend(stack)),
            network=network_bundle
        )
        return Template.from_stack(stack)

    def test_security_group_without_ingress(self, template, network_bundle):
        template.has_resource_properties("AWS::EC2::SecurityGroup", {
            "GroupName": "dev-finance-log-db-sg",
            "VpcId": network_bundle.vpc_id
        })
        template.resource_count_is("AWS::EC2::SecurityGroupIngress", 0)

    def test_generated_credentials(self, template):
        template.has_resource_properties("AWS::SecretsManager::Secret", {
            "Name": "dev-finance-log-db-secret",
            "GenerateSecretString": {
                "SecretStringTemplate": json.dumps({"username": "devfinancelogdbUser"}),
                "GenerateStringKey": "password",
                "PasswordLength": 32,
                "ExcludeCharacters": "@/\\\" "
            }
        })
        template.has_resource_properties("AWS::SecretsManager::SecretTargetAttachment", {
            "TargetType": "AWS::RDS::DBInstance"
        })

    def test_instance_in_isolated_subnets(self, template, network_bundle):
        template.has_resource_properties("AWS::RDS::DBSubnetGroup", {
            "DBSubnetGroupName": "dev-finance-log-db-subnet-group",
            "SubnetIds": network_bundle.isolated_subnet_ids
        })
        template.has_resource_properties("AWS::RDS::DBInstance", {
            "DBInstanceIdentifier": "dev-finance-log-database",
            "DBName": "devfinancelogdatabase",
            "Engine": "mysql",
            "EngineVersion": "8.0.44",
            "DBInstanceClass": "db.t3.micro",
            "AllocatedStorage": "20",
            "PubliclyAccessible": False,
            "DeletionProtection": False
        })

    def test_instance_deleted_with_stack(self, template):
        template.has_resource("AWS::RDS::DBInstance", {"DeletionPolicy": "Delete"})

    def test_outputs_published(self, template):
        assert parameter_names(template) == {
            "dev-database-endpointAddress",
            "dev-database-endpointPort",
            "dev-database-databaseName",
            "dev-database-secretArn",
            "dev-database-securityGroupId",
            "dev-database-instanceId",
        }
        template.has_resource_properties("AWS::SSM::Parameter", {
            "Name": "dev-database-databaseName",
            "Value": "devfinancelogdatabase"
        })


class TestDatabaseInputParameters:
    """Test input validation and identifier sanitization."""

    def test_storage_below_minimum_rejected(self):
        with pytest.raises(ValidationError):
            DatabaseInputParameters(storage_in_gb=10)

    def test_blank_instance_class_rejected(self):
        with pytest.raises(StackConfigurationError):
            DatabaseInputParameters(instance_class="")

    @pytest.mark.parametrize("value, expected", [
        ("dev-finance-log-database", "devfinancelogdatabase"),
        ("1abc-def", "aabcdef"),
        ("prod-app_2", "prodapp_2"),
    ])
    def test_sanitize_database_identifier(self, value, expected):
        assert sanitize_database_identifier(value) == expected


class TestDatabaseStack:
    """Test the database stack consuming the network family."""

    def test_stack_loads_network_and_publishes_database(self, config_factory):
        app = cdk.App()
        stack = DatabaseStack(app, "DatabaseStack", config=config_factory(DatabaseStorageInGb=30))
        template = Template.from_stack(stack)

        defaults = {p.get("Default") for p in template.to_json()["Parameters"].values()}
        assert {"dev-network-vpcId", "dev-network-isolatedSubnetIds"} <= defaults
        assert "dev-database-secretArn" in parameter_names(template)
        template.has_resource_properties("AWS::RDS::DBInstance", {"AllocatedStorage": "30"})


class TestCognitoStack:
    """Test the user pool, its confidential client and hosted login domain."""

    @pytest.fixture
    def template(self, config_factory):
        app = cdk.App()
        stack = CognitoStack(
            app,
            "CognitoStack",
            config=config_factory(),
            env=cdk.Environment(account="123456789012", region="eu-central-1")
        )
        return Template.from_stack(stack)

    def test_user_pool(self, template):
        template.has_resource_properties("AWS::Cognito::UserPool", {
            "UserPoolName": "finance-log-user-pool",
            "UsernameAttributes": ["email"],
            "AutoVerifiedAttributes": ["email"],
            "MfaConfiguration": "OFF",
            "UsernameConfiguration": {"CaseSensitive": True},
            "Policies": {
                "PasswordPolicy": Match.object_like({
                    "MinimumLength": 7,
                    "RequireSymbols": True,
                    "TemporaryPasswordValidityDays": 1
                })
            }
        })

    @pytest.mark.parametrize("attribute, mutable", [
        ("email", False),
        ("given_name", True),
        ("family_name", True),
    ])
    def test_required_attributes(self, template, attribute, mutable):
        template.has_resource_properties("AWS::Cognito::UserPool", {
            "Schema": Match.array_with([
                {"Name": attribute, "Required": True, "Mutable": mutable}
            ])
        })

    def test_confidential_client_with_authorization_code_grant(self, template):
        template.has_resource_properties("AWS::Cognito::UserPoolClient", {
            "ClientName": "finance-log-user-pool-client",
            "GenerateSecret": True,
            "AllowedOAuthFlows": ["code"],
            "AllowedOAuthScopes": ["email", "openid", "profile"],
            "CallbackURLs": [
                "https://api.example.com/login/oauth2/code/cognito",
                "http://localhost:8080/login/oauth2/code/cognito"
            ],
            "LogoutURLs": ["https://api.example.com", "http://localhost:8080"],
            "SupportedIdentityProviders": ["COGNITO"]
        })

    def test_hosted_login_domain(self, template):
        template.has_resource_properties("AWS::Cognito::UserPoolDomain", {
            "Domain": "dev-finance-log"
        })

    def test_outputs_published(self, template):
        assert parameter_names(template) == {
            "dev-cognito-userPoolId",
            "dev-cognito-userPoolClientId",
            "dev-cognito-userPoolClientSecret",
            "dev-cognito-logoutUrl",
            "dev-cognito-providerUrl",
        }
        template.has_resource_properties("AWS::SSM::Parameter", {
            "Name": "dev-cognito-logoutUrl",
            "Value": "https://dev-finance-log.auth.eu-central-1.amazoncognito.com/logout"
        })

    def test_local_development_urls_can_be_dropped(self, config_factory):
        app = cdk.App()
        stack = CognitoStack(app, "CognitoStack", config=config_factory(CognitoLocalDevelopmentUrls=False))

        Template.from_stack(stack).has_resource_properties("AWS::Cognito::UserPoolClient", {
            "CallbackURLs": ["https://api.example.com/login/oauth2/code/cognito"],
            "LogoutURLs": ["https://api.example.com"]
        })

    def test_blank_login_prefix_rejected(self, config_factory):
        with pytest.raises(StackConfigurationError) as excinfo:
            CognitoStack(cdk.App(), "CognitoStack", config=config_factory(LoginPageDomainPrefix=" "))
        assert excinfo.value.config_key == "LoginPageDomainPrefix"


class TestStorageConstruct:
    """Test the user uploads bucket."""

    def synthesize(self, dev_env, input_parameters=None) -> Template:
        app = cdk.App()
        stack = cdk.Stack(app, "StorageTestStack")
        StorageConstruct(
            stack,
            "Storage",
            env=dev_env,
            store=ParameterContractStore(CdkParameterBackend(stack)),
            input_parameters=input_parameters
        )
        return Template.from_stack(stack)

    def test_bucket_with_upload_cors(self, dev_env):
        template = self.synthesize(dev_env)

        template.has_resource_properties("AWS::S3::Bucket", {
            "BucketName": "dev-finance-log-user-uploads",
            "CorsConfiguration": {
                "CorsRules": [{
                    "AllowedOrigins": ["http://localhost:5173"],
                    "AllowedMethods": ["PUT", "POST", "GET"],
                    "AllowedHeaders": ["*"],
                    "ExposedHeaders": ["ETag"]
                }]
            }
        })
        template.has_resource_properties("AWS::SSM::Parameter", {
            "Name": "dev-s3-bucketName",
            "Value": {"Ref": Match.string_like_regexp("UserUploadsBucket")}
        })

    def test_public_read_by_default(self, dev_env):
        template = self.synthesize(dev_env)

        template.has_resource_properties("AWS::S3::Bucket", {
            "PublicAccessBlockConfiguration": {
                "BlockPublicAcls": False,
                "BlockPublicPolicy": False,
                "IgnorePublicAcls": False,
                "RestrictPublicBuckets": False
            }
        })
        template.has_resource_properties("AWS::S3::BucketPolicy", {
            "PolicyDocument": {
                "Statement": Match.array_with([Match.object_like({
                    "Action": "s3:GetObject",
                    "Effect": "Allow",
                    "Principal": {"AWS": "*"}
                })])
            }
        })

    def test_private_bucket_blocks_public_access(self, dev_env):
        template = self.synthesize(dev_env, StorageInputParameters(public_read=False))

        template.has_resource_properties("AWS::S3::Bucket", {
            "PublicAccessBlockConfiguration": {
                "BlockPublicAcls": True,
                "BlockPublicPolicy": True,
                "IgnorePublicAcls": True,
                "RestrictPublicBuckets": True
            }
        })
        policies = template.find_resources("AWS::S3::BucketPolicy")
        statements = [
            statement
            for policy in policies.values()
            for statement in policy["Properties"]["PolicyDocument"]["Statement"]
        ]
        assert not any(statement.get("Principal") == {"AWS": "*"} for statement in statements)

    def test_empty_cors_origins_rejected(self):
        with pytest.raises(ValidationError):
            StorageInputParameters(cors_origins=[])

    def test_stack_reads_cors_origins(self, config_factory):
        app = cdk.App()
        stack = StorageStack(
            app,
            "StorageStack",
            config=config_factory(UploadCorsOrigins=["https://app.example.com"])
        )

        Template.from_stack(stack).has_resource_properties("AWS::S3::Bucket", {
            "CorsConfiguration": {
                "CorsRules": [Match.object_like({"AllowedOrigins": ["https://app.example.com"]})]
            }
        })
