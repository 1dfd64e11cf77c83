import json
import os
from dataclasses import dataclass

import pytest

# Set environment variables before any imports to disable AWS Lambda Powertools features
# This must be done before importing any service modules that use Tracer/Metrics
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "test")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "test")


def pytest_configure(config):
    """
    Pytest hook that runs before test collection.
    Ensures environment variables are set before any service modules are imported.
    """
    os.environ["POWERTOOLS_TRACE_DISABLED"] = "true"
    os.environ["POWERTOOLS_METRICS_NAMESPACE"] = "test"
    os.environ["POWERTOOLS_SERVICE_NAME"] = "test"


@dataclass
class FakeLambdaContext:
    function_name: str = "items-api-test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-west-2:123456789012:function:items-api-test"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"
    log_group_name: str = "/aws/lambda/items-api-test"
    log_stream_name: str = "2024/01/01/[$LATEST]items-api-test"
    tenant_id: str | None = None

    def get_remaining_time_in_millis(self) -> int:
        return 30000


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


@pytest.fixture
def api_event():
    """Factory for API Gateway REST proxy events."""

    def _event(method: str, path: str, body=None, query: dict | None = None) -> dict:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return {
            "httpMethod": method,
            "path": path,
            "body": body,
            "isBase64Encoded": False,
            "queryStringParameters": query,
            "requestContext": {"requestId": "req-123"},
        }

    return _event
