#!/usr/bin/env python3

import logging

import aws_cdk as cdk
import boto3
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from helper import config
from stacks.common.base import application_environment_from_config
from stacks.common.constants import FRONTEND_REGION
from stacks.contracts import LiveParameterBackend, ParameterContractStore
from stacks.topology import build_deployment_plan

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("app")

# Findings accepted for every stack of a given kind
NAG_SUPPRESSIONS = {
    "network": [
        {"id": "AwsSolutions-VPC7", "reason": "VPC flow logs are not collected for this estate"},
        {"id": "AwsSolutions-ELB2", "reason": "Load balancer access logs are not collected for this estate"},
        {"id": "AwsSolutions-EC23", "reason": "The public load balancer accepts traffic from the internet"},
        {"id": "CdkNagValidationFailure", "reason": "Security group rules use intrinsic functions which cannot be validated at synth time"}
    ],
    "database": [
        {"id": "AwsSolutions-RDS2", "reason": "Storage encryption is left to the instance class default"},
        {"id": "AwsSolutions-RDS3", "reason": "Single-AZ MySQL instance, multi-AZ is not needed for this estate"},
        {"id": "AwsSolutions-RDS10", "reason": "Deletion protection is off so stages can be torn down"},
        {"id": "AwsSolutions-RDS11", "reason": "MySQL listens on its default port inside isolated subnets"},
        {"id": "AwsSolutions-SMG4", "reason": "Secret rotation disabled, the backend reads credentials at task start"}
    ],
    "cognito": [
        {"id": "AwsSolutions-COG2", "reason": "MFA disabled, users sign in with email and password only"},
        {"id": "AwsSolutions-COG3", "reason": "Advanced security mode requires the Plus feature plan"}
    ],
    "storage": [
        {"id": "AwsSolutions-S1", "reason": "User uploads bucket does not need server access logs"},
        {"id": "AwsSolutions-S2", "reason": "Uploaded files are served publicly when public read is enabled"},
        {"id": "AwsSolutions-S10", "reason": "Bucket policy allows public reads of uploaded files"},
        {"id": "AwsSolutions-IAM4", "reason": "Auto-delete custom resource uses the AWS managed Lambda execution role"}
    ],
    "service": [
        {"id": "AwsSolutions-IAM5", "reason": "ecr:GetAuthorizationToken does not support resource-level permissions", "appliesTo": ["Resource::*"]},
        {"id": "AwsSolutions-IAM5", "reason": "Task role reads and writes any object of the uploads bucket"},
        {"id": "AwsSolutions-ECS2", "reason": "Environment variables contain non-sensitive configuration values only"},
        {"id": "CdkNagValidationFailure", "reason": "Security group rules use intrinsic functions which cannot be validated at synth time"}
    ],
    "frontend": [
        {"id": "AwsSolutions-S1", "reason": "Frontend assets bucket does not need server access logs"},
        {"id": "AwsSolutions-CFR1", "reason": "The frontend is available worldwide"},
        {"id": "AwsSolutions-CFR2", "reason": "The frontend only serves static assets, no WAF is attached"},
        {"id": "AwsSolutions-CFR3", "reason": "CloudFront access logs are not collected for this estate"},
        {"id": "AwsSolutions-CFR4", "reason": "Without a custom domain the default CloudFront certificate is used"},
        {"id": "AwsSolutions-IAM4", "reason": "Auto-delete custom resource uses the AWS managed Lambda execution role"}
    ],
    "bastion": [
        {"id": "AwsSolutions-EC26", "reason": "The bastion host stores no data on its root volume"},
        {"id": "AwsSolutions-EC28", "reason": "Detailed monitoring is not needed for a temporary bastion host"},
        {"id": "AwsSolutions-EC29", "reason": "The bastion host is meant to be destroyed after use"},
        {"id": "CdkNagValidationFailure", "reason": "Security group rules use intrinsic functions which cannot be validated at synth time"}
    ],
}


def context_overrides(app: cdk.App) -> dict:
    """Every known context variable set on the command line."""
    overrides = {}
    for context_name in config.CONTEXT_OVERRIDES:
        value = app.node.try_get_context(context_name)
        if value is not None:
            overrides[context_name] = value
    return overrides


def resolve_account(conf: config.Config, region: str) -> None:
    """Fill in ``AccountId`` from the caller identity when it is not configured."""
    if conf.data.get('AccountId'):
        return
    sts = boto3.client('sts', region_name=region)
    conf.data['AccountId'] = sts.get_caller_identity()['Account']
    logger.info(f"Using account {conf.data['AccountId']} of the current credentials")


app = cdk.App()

environment_name = app.node.try_get_context('environmentName') or 'dev'
conf = config.Config(environment_name, overrides=context_overrides(app))
logger.info(f"Synthesizing environment '{environment_name}'")

region = conf.require('RegionName')
resolve_account(conf, region)

plan = build_deployment_plan(conf)
selected = conf.get_stack_selection()
logger.info(f"Selected stacks: {', '.join(selected) if selected else 'all'}")

# Probe the parameters of producers outside the selection before synthesizing
if conf.data.get('VerifyContracts', False):
    legacy_names = bool(conf.data.get('LegacyParameterNames', False))
    plan.verify_contracts(
        ParameterContractStore(
            LiveParameterBackend(region_name=region),
            legacy_names=legacy_names
        ),
        application_environment_from_config(conf),
        selected,
        regional_stores={
            FRONTEND_REGION: ParameterContractStore(
                LiveParameterBackend(region_name=FRONTEND_REGION),
                legacy_names=legacy_names
            )
        }
    )

stacks = plan.synthesize(app, selected)

for name, stack in stacks.items():
    if name in NAG_SUPPRESSIONS:
        NagSuppressions.add_stack_suppressions(stack, NAG_SUPPRESSIONS[name])

if conf.data.get('EnableCdkNag', False):
    cdk.Aspects.of(app).add(AwsSolutionsChecks())

app.synth()
