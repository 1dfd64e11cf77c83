from typing import Any

from aws_cdk import CfnOutput, RemovalPolicy, Stack
from aws_cdk import aws_lambda as lambda_
from aws_cdk.aws_lambda_python_alpha import PythonLayerVersion
from cdk_nag import NagSuppressions
from constructs import Construct

from cdk import constants
from cdk.items_api_construct import ItemsApiConstruct


class AppStack(Stack):
    """
    Main application stack with the advanced and basic items APIs and the
    connectivity check function.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        stage: str,
        table_name: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, id, **kwargs)

        # Lambda layer with shared dependencies
        self.layer = PythonLayerVersion(
            self,
            "CommonLayer",
            entry=constants.LAYER_BUILD_FOLDER,
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_13],
            compatible_architectures=[lambda_.Architecture.X86_64],
            removal_policy=RemovalPolicy.DESTROY,
            description="Common layer with aws-lambda-powertools, pydantic and shared dependencies",
        )

        self.advanced_api = ItemsApiConstruct(
            self,
            "AdvancedApi",
            stage=stage,
            api_name="advanced-serverless-api",
            table_name=f"{table_name}-advanced",
            handler=constants.ADVANCED_HANDLER,
            layer=self.layer,
            partition_key="pk",
            sort_key="sk",
            query_index_name=constants.QUERY_INDEX_NAME,
        )

        self.basic_api = ItemsApiConstruct(
            self,
            "BasicApi",
            stage=stage,
            api_name="basic-serverless-api",
            table_name=f"{table_name}-basic",
            handler=constants.BASIC_HANDLER,
            layer=self.layer,
            partition_key="id",
        )

        # The connectivity check probes the advanced table
        self.connectivity_function = self.advanced_api.add_function(
            "Connectivity",
            constants.CONNECTIVITY_HANDLER,
            "Checks DynamoDB connectivity of a deployment",
        )
        self.advanced_api.table.grant(self.connectivity_function, "dynamodb:DescribeTable")
        NagSuppressions.add_resource_suppressions(
            self.connectivity_function,
            suppressions=[
                {
                    "id": "AwsSolutions-L1",
                    "reason": "Using Python 3.13 which is the latest supported runtime.",
                },
            ],
        )

        # Outputs
        CfnOutput(
            self,
            "AdvancedTableName",
            value=self.advanced_api.table.table_name,
            description="Advanced API DynamoDB table name",
        )

        CfnOutput(
            self,
            "AdvancedApiUrl",
            value=self.advanced_api.rest_api.url,
            description="Advanced items API endpoint",
        )

        CfnOutput(
            self,
            "BasicApiUrl",
            value=self.basic_api.rest_api.url,
            description="Basic items API endpoint",
        )

        CfnOutput(
            self,
            "ConnectivityFunctionArn",
            value=self.connectivity_function.function_arn,
            description="Connectivity check Lambda function ARN",
        )
