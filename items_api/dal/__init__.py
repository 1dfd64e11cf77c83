"""
Data access layer for the items API.
"""

from items_api.dal.dynamodb import DynamoDBHandler
from items_api.dal.in_memory import InMemoryItemStore
from items_api.dal.interface import ConditionFailedError, IItemStore, ItemPage, RangeCondition

__all__ = ["ConditionFailedError", "DynamoDBHandler", "IItemStore", "InMemoryItemStore", "ItemPage", "RangeCondition"]
