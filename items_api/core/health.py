from aws_lambda_powertools import Logger

from items_api.config import ApiConfig
from items_api.dal.interface import IItemStore
from items_api.models.item import utc_timestamp
from items_api.models.requests import HealthReport

logger = Logger()


def build_health_report(store: IItemStore, config: ApiConfig) -> HealthReport:
    """
    Describe the service and check the table.

    A failed check degrades the report instead of failing the request.
    """
    report = HealthReport(
        timestamp=utc_timestamp(),
        service=config.service_name,
        environment=config.environment,
        region=config.region,
        table_name=config.table_name,
    )

    try:
        store.describe()
    except Exception as e:
        logger.warning("DynamoDB connectivity check failed", extra={"error": str(e)})
        report.status = "degraded"
        report.dynamodb = "error"
        report.dynamodb_error = str(e)

    return report
