"""
Tests for the edge of an application: frontend hosting, domains and the bastion host.
"""

import pytest
import aws_cdk as cdk
from aws_cdk.assertions import Match, Template

from stacks.bastion import BastionConstruct, BastionInputParameters, BastionStack
from stacks.common.constants import BASTION_AMI_PARAMETER
from stacks.common.exceptions import StackConfigurationError, ValidationError
from stacks.contracts import CdkParameterBackend, ParameterContractStore
from stacks.domain import BackendDomainStack, CertificateStack, FrontendDomainStack
from stacks.frontend import FrontendConstruct, FrontendInputParameters, FrontendStack

FRONTEND_CERTIFICATE_ARN = (
    "arn:aws:acm:us-east-1:123456789012:certificate/0a1b2c3d-4e5f-6789-abcd-ef0123456789"
)

DOMAIN_CONFIG = {
    'HostedZoneDomain': 'example.com',
    'HostedZoneId': 'Z0123456789ABCDEFGHIJ',
    'ApiDomain': 'api.example.com',
    'AppDomain': 'app.example.com',
}


def synthesize_frontend(dev_env, input_parameters=None) -> Template:
    app = cdk.App()
    stack = cdk.Stack(app, "FrontendTestStack")
    FrontendConstruct(
        stack,
        "Frontend",
        env=dev_env,
        store=ParameterContractStore(CdkParameterBackend(stack)),
        input_parameters=input_parameters
    )
    return Template.from_stack(stack)


class TestFrontendConstruct:
    """Test the private bucket and its distribution."""

    @pytest.fixture
    def template(self, dev_env):
        return synthesize_frontend(dev_env)

    def test_private_bucket(self, template):
        template.has_resource_properties("AWS::S3::Bucket", {
            "BucketName": "dev-finance-log-frontend-assets",
            "PublicAccessBlockConfiguration": {
                "BlockPublicAcls": True,
                "BlockPublicPolicy": True,
                "IgnorePublicAcls": True,
                "RestrictPublicBuckets": True
            },
            "OwnershipControls": {"Rules": [{"ObjectOwnership": "BucketOwnerEnforced"}]}
        })

    def test_bucket_reached_through_origin_access_control(self, template):
        template.resource_count_is("AWS::CloudFront::OriginAccessControl", 1)
        template.has_resource_properties("AWS::S3::BucketPolicy", {
            "PolicyDocument": {
                "Statement": Match.array_with([Match.object_like({
                    "Action": "s3:GetObject",
                    "Principal": {"Service": "cloudfront.amazonaws.com"}
                })])
            }
        })

    def test_distribution_serves_single_page_app(self, template):
        template.has_resource_properties("AWS::CloudFront::Distribution", {
            "DistributionConfig": Match.object_like({
                "DefaultRootObject": "index.html",
                "Comment": "Frontend of dev-finance-log",
                "DefaultCacheBehavior": Match.object_like({
                    "ViewerProtocolPolicy": "redirect-to-https",
                    "Compress": True
                }),
                "CustomErrorResponses": [
                    {"ErrorCode": 403, "ResponseCode": 200, "ResponsePagePath": "/index.html",
                     "ErrorCachingMinTTL": 0},
                    {"ErrorCode": 404, "ResponseCode": 200, "ResponsePagePath": "/index.html",
                     "ErrorCachingMinTTL": 0}
                ]
            })
        })

    def test_default_domain_without_custom_domain(self, template):
        distribution = next(iter(template.find_resources("AWS::CloudFront::Distribution").values()))

        assert "Aliases" not in distribution["Properties"]["DistributionConfig"]

    def test_outputs_published(self, template):
        names = {
            resource["Properties"]["Name"]
            for resource in template.find_resources("AWS::SSM::Parameter").values()
        }
        assert names == {"dev-frontend-cloudFrontDistributionId", "dev-frontend-cloudFrontDomainName"}

    def test_custom_domain_with_certificate(self, dev_env):
        template = synthesize_frontend(dev_env, FrontendInputParameters(
            domain_name="app.example.com",
            certificate_arn=FRONTEND_CERTIFICATE_ARN
        ))

        template.has_resource_properties("AWS::CloudFront::Distribution", {
            "DistributionConfig": Match.object_like({
                "Aliases": ["app.example.com"],
                "ViewerCertificate": {
                    "AcmCertificateArn": FRONTEND_CERTIFICATE_ARN,
                    "MinimumProtocolVersion": "TLSv1.2_2021",
                    "SslSupportMethod": "sni-only"
                }
            })
        })


class TestFrontendInputParameters:
    """Test that a custom domain comes with a certificate."""

    def test_domain_without_certificate_rejected(self):
        with pytest.raises(ValidationError):
            FrontendInputParameters(domain_name="app.example.com")

    def test_certificate_without_domain_rejected(self):
        with pytest.raises(ValidationError):
            FrontendInputParameters(certificate_arn=FRONTEND_CERTIFICATE_ARN)

    def test_non_acm_certificate_rejected(self):
        with pytest.raises(ValidationError):
            FrontendInputParameters(
                domain_name="app.example.com",
                certificate_arn="arn:aws:iam::123456789012:server-certificate/app"
            )


class TestFrontendStack:
    """Test the exported outputs of the frontend stack."""

    def test_outputs_exported(self, config_factory):
        app = cdk.App()
        stack = FrontendStack(app, "FrontendStack", config=config_factory())
        template = Template.from_stack(stack)

        template.has_output("CloudFrontDomainName", {
            "Export": {"Name": "dev-finance-log-frontend-cloudfront-domain"}
        })
        template.has_output("CloudFrontDistributionId", {
            "Export": {"Name": "dev-finance-log-frontend-cloudfront-id"}
        })

    def test_blank_domain_means_default_domain(self, config_factory):
        app = cdk.App()
        stack = FrontendStack(app, "FrontendStack", config=config_factory(AppDomain="", FrontendCertificateArn=""))

        distribution = next(iter(
            Template.from_stack(stack).find_resources("AWS::CloudFront::Distribution").values()
        ))
        assert "Aliases" not in distribution["Properties"]["DistributionConfig"]


class TestCertificateStack:
    """Test DNS-validated certificates."""

    def test_api_certificate(self, config_factory):
        app = cdk.App()
        stack = CertificateStack(app, "CertificateStack", config=config_factory(**DOMAIN_CONFIG))
        template = Template.from_stack(stack)

        template.has_resource_properties("AWS::CertificateManager::Certificate", {
            "DomainName": "api.example.com",
            "ValidationMethod": "DNS",
            "DomainValidationOptions": [{
                "DomainName": "api.example.com",
                "HostedZoneId": "Z0123456789ABCDEFGHIJ"
            }]
        })
        template.has_output("SslCertificateArn", {"Export": {"Name": "sslCertificateArn"}})

    def test_frontend_certificate(self, config_factory):
        app = cdk.App()
        stack = CertificateStack(
            app,
            "FrontendCertificateStack",
            config=config_factory(**DOMAIN_CONFIG),
            domain_name_key='AppDomain',
            export_name="frontendSslCertificateArn"
        )
        template = Template.from_stack(stack)

        template.has_resource_properties("AWS::CertificateManager::Certificate", {
            "DomainName": "app.example.com"
        })
        template.has_output("SslCertificateArn", {"Export": {"Name": "frontendSslCertificateArn"}})

    def test_missing_domain_rejected(self, config_factory):
        config = config_factory(HostedZoneDomain='example.com', HostedZoneId='Z0123456789ABCDEFGHIJ')

        with pytest.raises(StackConfigurationError) as excinfo:
            CertificateStack(cdk.App(), "CertificateStack", config=config)
        assert excinfo.value.config_key == "ApiDomain"

    def test_missing_hosted_zone_rejected(self, config_factory):
        with pytest.raises(StackConfigurationError) as excinfo:
            CertificateStack(cdk.App(), "CertificateStack", config=config_factory(ApiDomain='api.example.com'))
        assert excinfo.value.config_key == "HostedZoneDomain"


class TestDomainRecords:
    """Test the alias records of the public domains."""

    def test_api_domain_points_at_load_balancer(self, config_factory):
        app = cdk.App()
        stack = BackendDomainStack(app, "BackendDomainStack", config=config_factory(**DOMAIN_CONFIG))
        template = Template.from_stack(stack)

        template.has_resource_properties("AWS::Route53::RecordSet", {
            "Name": "api.example.com.",
            "Type": "A",
            "HostedZoneId": "Z0123456789ABCDEFGHIJ",
            "AliasTarget": Match.object_like({"DNSName": Match.any_value()})
        })
        defaults = {p.get("Default") for p in template.to_json()["Parameters"].values()}
        assert {"dev-network-loadBalancerDnsName", "dev-network-loadBalancerCanonicalHostedZoneId"} <= defaults

    def test_app_domain_points_at_distribution(self, config_factory):
        app = cdk.App()
        stack = FrontendDomainStack(app, "FrontendDomainStack", config=config_factory(**DOMAIN_CONFIG))
        template = Template.from_stack(stack)

        template.has_resource_properties("AWS::Route53::RecordSet", {
            "Name": "app.example.com.",
            "Type": "A",
            "AliasTarget": Match.object_like({"DNSName": Match.any_value()})
        })
        defaults = {p.get("Default") for p in template.to_json()["Parameters"].values()}
        assert "dev-frontend-cloudFrontDomainName" in defaults


class TestBastionConstruct:
    """Test the jump host into the isolated subnets."""

    @pytest.fixture
    def template(self, dev_env, network_bundle, database_bundle):
        app = cdk.App()
        stack = cdk.Stack(app, "BastionTestStack")
        BastionConstruct(
            stack,
            "Bastion",
            env=dev_env,
            input_parameters=BastionInputParameters(key_name="finance-log-bastion", allowed_ssh_cidr="203.0.113.0/24"),
            network=network_bundle,
            database=database_bundle
        )
        return Template.from_stack(stack)

    def test_ssh_open_to_allowed_range(self, template):
        template.has_resource_properties("AWS::EC2::SecurityGroup", {
            "GroupName": "dev-finance-log-bastion-host-sg",
            "GroupDescription": "SecurityGroup containing the BastionHost"
        })
        template.has_resource_properties("AWS::EC2::SecurityGroupIngress", {
            "CidrIp": "203.0.113.0/24",
            "IpProtocol": "tcp",
            "FromPort": 22,
            "ToPort": 22
        })

    def test_database_reachable_from_bastion(self, template, database_bundle):
        template.has_resource_properties("AWS::EC2::SecurityGroupIngress", {
            "GroupId": database_bundle.security_group_id,
            "SourceSecurityGroupId": {"Fn::GetAtt": [Match.string_like_regexp("BastionHostSecurityGroup"), "GroupId"]},
            "IpProtocol": "tcp",
            "FromPort": 3306,
            "ToPort": 3306
        })

    def test_instance_in_first_public_subnet(self, template, network_bundle):
        instances = template.find_resources("AWS::EC2::Instance")
        (instance,) = instances.values()
        properties = instance["Properties"]

        assert properties["InstanceType"] == "t3.nano"
        assert properties["KeyName"] == "finance-log-bastion"
        (interface,) = properties["NetworkInterfaces"]
        assert interface["DeviceIndex"] == "0"
        assert interface["AssociatePublicIpAddress"] is True
        assert interface["SubnetId"] in (
            network_bundle.public_subnet_ids[0],
            {"Fn::Select": [0, network_bundle.public_subnet_ids]}
        )

    def test_latest_amazon_linux_image(self, template):
        parameters = template.to_json()["Parameters"]

        assert any(p.get("Default") == BASTION_AMI_PARAMETER for p in parameters.values())

    @pytest.mark.parametrize("key_name, cidr, error", [
        ("", "0.0.0.0/0", StackConfigurationError),
        ("finance-log-bastion", "not-a-cidr", ValidationError),
    ])
    def test_invalid_inputs_rejected(self, key_name, cidr, error):
        with pytest.raises(error):
            BastionInputParameters(key_name=key_name, allowed_ssh_cidr=cidr)


class TestBastionStack:
    """Test the bastion stack consuming the network and database families."""

    def test_public_ip_output(self, config_factory):
        app = cdk.App()
        stack = BastionStack(app, "BastionStack", config=config_factory(BastionKeyName="finance-log-bastion"))
        template = Template.from_stack(stack)

        template.has_output("BastionHostPublicIp", {})
        defaults = {p.get("Default") for p in template.to_json()["Parameters"].values()}
        assert {"dev-network-publicSubnetIds", "dev-database-securityGroupId"} <= defaults

    def test_key_pair_required(self, config_factory):
        with pytest.raises(StackConfigurationError) as excinfo:
            BastionStack(cdk.App(), "BastionStack", config=config_factory())
        assert excinfo.value.config_key == "BastionKeyName"
