"""
Compressor Stack - single-object S3 -> 7z -> S3 pipeline

This stack creates:
- Container-image Lambda function bundling the 7-Zip binary
- IAM permissions for reading, writing and deleting objects in the configured buckets
- SQS queue for completion/failure notifications (optional)
"""

from aws_cdk import (
    Stack,
    Duration,
    Size,
    CfnOutput,
    aws_lambda as lambda_,
    aws_iam as iam,
    aws_sqs as sqs,
    aws_logs as logs,
)
from constructs import Construct
import json

from config.constants import (
    DEFAULT_EPHEMERAL_STORAGE_MB,
    DEFAULT_MEMORY_MB,
    DEFAULT_TIMEOUT_MINUTES,
    SEVEN_ZIP_DOWNLOAD_URL,
    SEVEN_ZIP_PATH,
)


class CompressorStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Load configuration
        config = self._load_config()

        # Optional queue receiving one message per invocation result
        self.notification_queue = None
        if config["notification"]["create_queue"]:
            self.notification_queue = sqs.Queue(
                self,
                "NotificationQueue",
                retention_period=Duration.days(4),
            )

        lambda_role = self._create_lambda_role(config)
        self.compressor_lambda = self._create_compressor_lambda(lambda_role, config)

        CfnOutput(self, "CompressorFunctionName", value=self.compressor_lambda.function_name)
        if self.notification_queue is not None:
            CfnOutput(self, "NotificationQueueUrl", value=self.notification_queue.queue_url)

    def _load_config(self) -> dict:
        """Load configuration from context or use defaults"""
        env = self.node.try_get_context("environment") or "dev"
        config_path = f"config/{env}.json"

        try:
            with open(config_path, "r") as f:
                return json.load(f)
        except FileNotFoundError:
            # Return default config
            return {
                "buckets": {
                    # Buckets the function may read from, write to and delete from
                    "source_buckets": ["*"],
                    "target_buckets": ["*"],
                },
                "lambda": {
                    "memory_mb": DEFAULT_MEMORY_MB,
                    "ephemeral_storage_mb": DEFAULT_EPHEMERAL_STORAGE_MB,
                    "timeout_minutes": DEFAULT_TIMEOUT_MINUTES,
                    "seven_zip_threads": "",
                },
                "notification": {
                    "create_queue": True,
                    "required": True,
                },
                "raise_on_failure": True,
            }

    def _bucket_resources(self, bucket_names: list) -> list:
        resources = []
        for name in bucket_names:
            resources.append(f"arn:aws:s3:::{name}")
            resources.append(f"arn:aws:s3:::{name}/*")
        return resources

    def _create_lambda_role(self, config: dict) -> iam.Role:
        """Create IAM role with permissions for S3 and SQS"""
        role = iam.Role(
            self,
            "CompressorLambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ],
        )

        # Source objects: read, and delete when deleteOriginal is set
        role.add_to_policy(
            iam.PolicyStatement(
                actions=["s3:GetObject", "s3:DeleteObject"],
                resources=self._bucket_resources(config["buckets"]["source_buckets"]),
            )
        )

        # Archive destination
        role.add_to_policy(
            iam.PolicyStatement(
                actions=["s3:PutObject"],
                resources=self._bucket_resources(config["buckets"]["target_buckets"]),
            )
        )

        # Callers may name any queue (and region) per request
        role.add_to_policy(
            iam.PolicyStatement(
                actions=["sqs:SendMessage"],
                resources=["*"],
            )
        )

        return role

    def _create_compressor_lambda(
        self, role: iam.Role, config: dict
    ) -> lambda_.Function:
        """Create the compressor Lambda from the container image"""
        lambda_config = config["lambda"]

        return lambda_.DockerImageFunction(
            self,
            "CompressorFunction",
            code=lambda_.DockerImageCode.from_image_asset(
                "lambda/compressor",
                build_args={"SEVEN_ZIP_DOWNLOAD_URL": SEVEN_ZIP_DOWNLOAD_URL},
            ),
            architecture=lambda_.Architecture.X86_64,
            role=role,
            timeout=Duration.minutes(lambda_config["timeout_minutes"]),
            memory_size=lambda_config["memory_mb"],
            ephemeral_storage_size=Size.mebibytes(lambda_config["ephemeral_storage_mb"]),
            log_retention=logs.RetentionDays.THREE_DAYS,  # Auto-delete logs after 3 days
            environment={
                "DEFAULT_S3_REGION": self.region,
                "DEFAULT_SQS_REGION": self.region,
                "SEVEN_ZIP_PATH": SEVEN_ZIP_PATH,
                "SEVEN_ZIP_THREADS": str(lambda_config.get("seven_zip_threads", "")),
                "NOTIFICATION_REQUIRED": str(config["notification"]["required"]).lower(),
                "RAISE_ON_FAILURE": str(config.get("raise_on_failure", True)).lower(),
            },
        )
