"""
Items API Construct.

A construct that fronts a DynamoDB table with a Lambda function behind an
API Gateway REST proxy, following the Lambda handler cookbook pattern.
"""

from typing import Any

from aws_cdk import Duration, RemovalPolicy
from aws_cdk import aws_apigateway as apigw
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_logs as logs
from aws_cdk.aws_lambda_python_alpha import PythonLayerVersion
from cdk_nag import NagSuppressions
from constructs import Construct

from cdk import constants


class ItemsApiConstruct(Construct):
    """
    A construct that creates one items API variant.

    Features:
    - DynamoDB table with the variant's key schema and optional query index
    - Lambda function sharing the common dependencies layer
    - REST API proxying every method and path to the function
    - CloudWatch log groups with retention
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        stage: str,
        api_name: str,
        table_name: str,
        handler: str,
        layer: PythonLayerVersion,
        partition_key: str,
        sort_key: str | None = None,
        query_index_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, id, **kwargs)

        self.stage = stage
        self.api_name = api_name
        self.layer = layer

        self.table = self._create_table(table_name, partition_key, sort_key, query_index_name)
        self.lambda_role = self._create_lambda_role()
        self.function = self.add_function("Api", handler, f"Serves the {api_name} routes")
        self.table.grant_read_write_data(self.function)
        self.rest_api = self._create_rest_api()

        self._add_nag_suppressions()

    def _create_table(
        self,
        table_name: str,
        partition_key: str,
        sort_key: str | None,
        query_index_name: str | None,
    ) -> dynamodb.Table:
        """Create the DynamoDB table."""
        table = dynamodb.Table(
            self,
            "Table",
            table_name=f"{table_name}-{self.stage}",
            partition_key=dynamodb.Attribute(name=partition_key, type=dynamodb.AttributeType.STRING),
            sort_key=dynamodb.Attribute(name=sort_key, type=dynamodb.AttributeType.STRING) if sort_key else None,
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=RemovalPolicy.DESTROY if self.stage == "dev" else RemovalPolicy.RETAIN,
            point_in_time_recovery=True,
        )

        if query_index_name:
            # GET /query?gsi=<name> reads <name>pk / <name>sk
            table.add_global_secondary_index(
                index_name=query_index_name,
                partition_key=dynamodb.Attribute(name=f"{query_index_name}pk", type=dynamodb.AttributeType.STRING),
                sort_key=dynamodb.Attribute(name=f"{query_index_name}sk", type=dynamodb.AttributeType.STRING),
                projection_type=dynamodb.ProjectionType.ALL,
            )

        return table

    def _create_lambda_role(self) -> iam.Role:
        """Create IAM role for Lambda functions."""
        role = iam.Role(
            self,
            "LambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(f"service-role/{constants.LAMBDA_BASIC_EXECUTION_ROLE}")
            ],
        )

        # Add X-Ray tracing permissions
        role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "xray:PutTraceSegments",
                    "xray:PutTelemetryRecords",
                ],
                resources=["*"],
            )
        )

        return role

    def add_function(self, function_id: str, handler: str, description: str) -> lambda_.Function:
        """Create a Lambda function bound to this construct's table."""
        log_group = logs.LogGroup(
            self,
            f"{function_id}LogGroup",
            retention=logs.RetentionDays.ONE_WEEK if self.stage == "dev" else logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        return lambda_.Function(
            self,
            function_id,
            function_name=f"{self.api_name}-{function_id.lower()}-{self.stage}",
            runtime=lambda_.Runtime.PYTHON_3_13,
            architecture=lambda_.Architecture.X86_64,
            handler=handler,
            code=lambda_.Code.from_asset(constants.SERVICE_BUILD_FOLDER),
            timeout=Duration.seconds(constants.LAMBDA_TIMEOUT),
            memory_size=constants.LAMBDA_MEMORY_SIZE,
            layers=[self.layer],
            role=self.lambda_role,
            log_group=log_group,
            environment={
                constants.TABLE_NAME_ENV_VAR: self.table.table_name,
                constants.ENVIRONMENT_ENV_VAR: "development" if self.stage == "dev" else "production",
                constants.POWERTOOLS_SERVICE_NAME: self.api_name,
                constants.POWERTOOLS_METRICS_NAMESPACE: constants.METRICS_NAMESPACE,
                constants.POWERTOOLS_LOG_LEVEL: "DEBUG" if self.stage == "dev" else "INFO",
            },
            tracing=lambda_.Tracing.ACTIVE,
            logging_format=lambda_.LoggingFormat.JSON,
            description=description,
        )

    def _create_rest_api(self) -> apigw.LambdaRestApi:
        """Create a REST API that proxies every request to the function."""
        return apigw.LambdaRestApi(
            self,
            "RestApi",
            rest_api_name=f"{self.api_name}-{self.stage}",
            handler=self.function,
            proxy=True,
            deploy_options=apigw.StageOptions(
                stage_name=self.stage,
                tracing_enabled=True,
                metrics_enabled=True,
            ),
        )

    def _add_nag_suppressions(self) -> None:
        """Add cdk-nag suppressions for expected security findings."""
        NagSuppressions.add_resource_suppressions(
            self.lambda_role,
            suppressions=[
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "Using AWS managed policy for Lambda basic execution role.",
                },
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "X-Ray tracing requires wildcard permissions.",
                },
            ],
            apply_to_children=True,
        )

        NagSuppressions.add_resource_suppressions(
            self.function,
            suppressions=[
                {
                    "id": "AwsSolutions-L1",
                    "reason": "Using Python 3.13 which is the latest supported runtime.",
                },
            ],
        )

        NagSuppressions.add_resource_suppressions(
            self.rest_api,
            suppressions=[
                {"id": "AwsSolutions-APIG1", "reason": "Access logs are covered by the function's structured logs."},
                {"id": "AwsSolutions-APIG2", "reason": "Request bodies are validated by the Lambda handler."},
                {"id": "AwsSolutions-APIG3", "reason": "WAF is managed outside this stack."},
                {"id": "AwsSolutions-APIG4", "reason": "The API is public; authorization is out of scope."},
                {"id": "AwsSolutions-APIG6", "reason": "Execution logging is covered by the function's logs."},
                {"id": "AwsSolutions-COG4", "reason": "The API is public; authorization is out of scope."},
            ],
            apply_to_children=True,
        )
