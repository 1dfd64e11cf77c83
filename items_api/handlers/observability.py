from typing import Any

from aws_lambda_powertools import Metrics
from aws_lambda_powertools.metrics import MetricUnit


def record_response(metrics: Metrics, response: dict[str, Any]) -> None:
    """Count the response by status class."""
    status_code = response["statusCode"]
    if status_code >= 500:
        name = "ServerErrors"
    elif status_code >= 400:
        name = "ClientErrors"
    else:
        name = "SuccessfulRequests"
    metrics.add_metric(name=name, unit=MetricUnit.Count, value=1)
