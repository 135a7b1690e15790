"""IAM policy mixin for CDK constructs."""

from typing import List, Optional

from aws_cdk import aws_iam as iam

from ..environment import ApplicationEnvironment

ECS_TASKS_PRINCIPAL = "ecs-tasks.amazonaws.com"


class IAMPolicyMixin:
    """
    Mixin class providing the IAM roles of an ECS task.

    A task gets two roles. The execution role is assumed by the ECS agent
    to pull the image and write logs. The task role is assumed by the
    application itself and only carries the statements the caller passes in.
    """

    def create_task_execution_role(self, env: ApplicationEnvironment) -> iam.Role:
        """
        Create the ECS task execution role.

        Args:
            env: Application environment used to name the inline policy

        Returns:
            The created IAM role
        """
        return iam.Role(
            self,
            "EcsTaskExecutionRole",
            assumed_by=iam.ServicePrincipal(ECS_TASKS_PRINCIPAL),
            inline_policies={
                env.prefix("ecs-taskExecutionRolePolicy"): iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            resources=["*"],
                            actions=[
                                "ecr:GetAuthorizationToken",
                                "ecr:BatchCheckLayerAvailability",
                                "ecr:GetDownloadUrlForLayer",
                                "ecr:BatchGetImage",
                                "logs:CreateLogStream",
                                "logs:PutLogEvents"
                            ]
                        )
                    ]
                )
            }
        )

    def create_task_role(self,
                         env: ApplicationEnvironment,
                         statements: Optional[List[iam.PolicyStatement]] = None) -> iam.Role:
        """
        Create the ECS task role.

        Args:
            env: Application environment used to name the inline policy
            statements: Grants for the running application. The role has no
                permissions at all when this is empty.

        Returns:
            The created IAM role
        """
        inline_policies = None
        if statements:
            inline_policies = {
                env.prefix("ecsTaskRolePolicy"): iam.PolicyDocument(statements=list(statements))
            }

        return iam.Role(
            self,
            "EcsTaskRole",
            assumed_by=iam.ServicePrincipal(ECS_TASKS_PRINCIPAL),
            inline_policies=inline_policies
        )

    def add_secrets_manager_permissions(self, role: iam.Role,
                                        secret_arns: List[str]) -> None:
        """
        Add AWS Secrets Manager permissions to a role for retrieving injected secrets.

        Args:
            role: The IAM role to add permissions to
            secret_arns: Secrets the role may read
        """
        if not secret_arns:
            return

        role.add_to_policy(iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            resources=list(secret_arns),
            actions=[
                "secretsmanager:GetSecretValue",
                "secretsmanager:DescribeSecret"
            ]
        ))

    @staticmethod
    def s3_object_read_write_statement(bucket_arn: str) -> iam.PolicyStatement:
        """
        Statement allowing objects of one bucket to be read, written and deleted.

        Args:
            bucket_arn: ARN of the bucket

        Returns:
            The policy statement
        """
        return iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            resources=[f"{bucket_arn}/*"],
            actions=[
                "s3:GetObject",
                "s3:PutObject",
                "s3:DeleteObject"
            ]
        )
