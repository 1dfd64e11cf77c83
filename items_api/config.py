"""
Runtime configuration for the items API Lambda functions.
"""

import os
from dataclasses import dataclass

from items_api.models.item import KeySchema

DEFAULT_REGION = "us-west-2"
DEFAULT_ENVIRONMENT = "development"

# DynamoDB BatchWriteItem accepts at most 25 put requests per call
BATCH_WRITE_LIMIT = 25


class ConfigurationError(Exception):
    """Raised when the Lambda environment is missing required settings."""


@dataclass(frozen=True)
class ApiVariant:
    """Per-variant behaviour of the CRUD API."""

    service_name: str
    key_schema: KeySchema
    default_table_name: str | None = None
    optimistic_locking: bool = False
    scan_limit: int | None = None
    supports_query: bool = False
    supports_batch: bool = False


ADVANCED = ApiVariant(
    service_name="advanced-serverless-api",
    key_schema=KeySchema(partition_key="pk", sort_key="sk"),
    optimistic_locking=True,
    scan_limit=50,
    supports_query=True,
    supports_batch=True,
)

BASIC = ApiVariant(
    service_name="basic-serverless-api",
    key_schema=KeySchema(partition_key="id"),
    default_table_name="basic-serverless-table",
)

CONNECTIVITY_SERVICE_NAME = "test-serverless-api"
CONNECTIVITY_DEFAULT_TABLE_NAME = "test-serverless-table"


@dataclass(frozen=True)
class ApiConfig:
    table_name: str
    region: str = DEFAULT_REGION
    environment: str = DEFAULT_ENVIRONMENT
    service_name: str = "serverless-api"

    @property
    def expose_error_details(self) -> bool:
        """Raw exception text is only returned to callers in development."""
        return self.environment == DEFAULT_ENVIRONMENT

    @classmethod
    def from_env(cls, service_name: str, default_table_name: str | None = None) -> "ApiConfig":
        """
        Build the configuration from the Lambda environment.

        Args:
            service_name: Name reported by the health endpoint
            default_table_name: Table used when TABLE_NAME is unset

        Returns:
            Resolved configuration

        Raises:
            ConfigurationError: If no table name can be resolved
        """
        table_name = os.environ.get("TABLE_NAME") or default_table_name
        if not table_name:
            raise ConfigurationError("TABLE_NAME environment variable is not set")

        return cls(
            table_name=table_name,
            region=os.environ.get("AWS_REGION", DEFAULT_REGION),
            environment=os.environ.get("ENVIRONMENT", DEFAULT_ENVIRONMENT),
            service_name=service_name,
        )

    @classmethod
    def without_table(cls, service_name: str) -> "ApiConfig":
        """Configuration used to answer requests while TABLE_NAME is missing."""
        return cls(
            table_name="",
            region=os.environ.get("AWS_REGION", DEFAULT_REGION),
            environment=os.environ.get("ENVIRONMENT", DEFAULT_ENVIRONMENT),
            service_name=service_name,
        )
