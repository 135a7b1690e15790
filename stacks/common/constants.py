"""
Constants used across CDK stacks.
"""

# Parameter contracts
NULL_SENTINEL = "null"  # Stored in place of an absent optional value

# VPC Configuration
DEFAULT_MAX_AZS = 2
DEFAULT_NAT_GATEWAYS = 0
ISOLATED_SUBNET_NAME = "isolated-subnet"

# Load Balancer
HTTP_PORT = 80
HTTPS_PORT = 443
NO_OP_TARGET_GROUP_PORT = 8080
NO_OP_HEALTH_CHECK_INTERVAL = 10
NO_OP_HEALTH_CHECK_TIMEOUT = 5
NO_OP_HEALTHY_THRESHOLD_COUNT = 2
HTTP_TO_HTTPS_REDIRECT_PRIORITY = 1

# Service Configuration
DEFAULT_CPU = 256
DEFAULT_MEMORY = 512
DEFAULT_DESIRED_COUNT = 2
DEFAULT_CONTAINER_PORT = 8080
DEFAULT_CONTAINER_PROTOCOL = "HTTP"
DEFAULT_HEALTH_CHECK_PATH = "/actuator/health"
DEFAULT_HTTP_LISTENER_PRIORITY = 2
DEFAULT_HTTPS_LISTENER_PRIORITY = 1

# ECS Deployment Configuration
DEFAULT_MINIMUM_HEALTHY_PERCENT = 50
DEFAULT_MAXIMUM_PERCENT = 200
DEFAULT_HEALTH_CHECK_GRACE_PERIOD = 120  # Seconds before failing health checks count

# Health Check Configuration for Target Groups
DEFAULT_HEALTHY_THRESHOLD_COUNT = 2
DEFAULT_UNHEALTHY_THRESHOLD_COUNT = 3
DEFAULT_HEALTH_CHECK_INTERVAL = 30
DEFAULT_HEALTH_CHECK_TIMEOUT = 5
DEFAULT_DEREGISTRATION_DELAY = 5

# Session stickiness
DEFAULT_STICKINESS_COOKIE_DURATION = 3600

# Logging
DEFAULT_LOG_RETENTION_DAYS = 3
AWS_LOGS_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"

# Database
DEFAULT_DATABASE_STORAGE_GB = 20
DEFAULT_DATABASE_INSTANCE_CLASS = "db.t3.micro"
DEFAULT_MYSQL_VERSION = "8.0.44"
DATABASE_ENGINE = "mysql"
DATABASE_PORT = 3306
DATABASE_PASSWORD_LENGTH = 32
DATABASE_PASSWORD_EXCLUDED_CHARACTERS = "@/\\\" "

# Bastion
BASTION_INSTANCE_TYPE = "t3.nano"
BASTION_SSH_PORT = 22
BASTION_AMI_PARAMETER = "/aws/service/ami-amazon-linux-latest/al2023-ami-kernel-default-x86_64"

# Registry
DEFAULT_MAX_IMAGE_COUNT = 10

# Cognito Configuration
DEFAULT_COGNITO_PASSWORD_MIN_LENGTH = 7
DEFAULT_COGNITO_TEMP_PASSWORD_VALIDITY_DAYS = 1
COGNITO_CALLBACK_PATH = "/login/oauth2/code/cognito"

# CloudFront / frontend
FRONTEND_REGION = "us-east-1"  # CloudFront certificates must live here
FRONTEND_DEFAULT_ROOT_OBJECT = "index.html"

# Storage
DEFAULT_UPLOAD_CORS_ORIGINS = ["http://localhost:5173"]
