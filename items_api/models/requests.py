from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

RangeOperator = Literal["=", "<", "<=", ">", ">=", "begins_with"]


class BatchWriteRequest(BaseModel):
    items: list[Any] = Field(..., min_length=1, description="Items to create, validated one by one")


class IndexQueryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gsi: str = Field(..., min_length=1, description="Secondary index name")
    pk: str = Field(..., min_length=1, description="Partition value on the index")
    sk: str | None = Field(default=None, description="Sort value on the index")
    sk_condition: RangeOperator | None = Field(default=None, alias="skCondition")
    last_key: str | None = Field(default=None, alias="lastKey")


class HealthReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["healthy", "degraded"] = "healthy"
    timestamp: str
    service: str
    environment: str
    region: str
    table_name: str = Field(..., alias="tableName")
    dynamodb: Literal["connected", "error"] = "connected"
    dynamodb_error: str | None = Field(default=None, alias="dynamodbError")
