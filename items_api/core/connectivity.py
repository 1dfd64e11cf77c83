"""
Deployment smoke-test routes: a health report and a table connectivity check.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent

from items_api.config import ApiConfig
from items_api.core.health import build_health_report
from items_api.core.responses import build_response
from items_api.core.router import Router
from items_api.dal.interface import IItemStore

logger = Logger()


class ConnectivityApi:
    def __init__(self, store: IItemStore, config: ApiConfig) -> None:
        self.store = store
        self.config = config

    def register(self, router: Router) -> Router:
        router.get("/health", self.health)
        router.get("/test", self.test_connection)
        return router

    def health(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        report = build_health_report(self.store, self.config)
        return build_response(HTTPStatus.OK, report.model_dump(by_alias=True, exclude_none=True))

    def test_connection(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        try:
            self.store.describe()
        except Exception as e:
            logger.exception("DynamoDB connection failed", extra={"table_name": self.config.table_name})
            return build_response(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "DynamoDB connection failed", "message": str(e)},
            )

        return build_response(
            HTTPStatus.OK,
            {"message": "DynamoDB connection successful", "tableName": self.config.table_name},
        )


def build_connectivity_router(store: IItemStore, config: ApiConfig) -> Router:
    return ConnectivityApi(store, config).register(Router(config))
