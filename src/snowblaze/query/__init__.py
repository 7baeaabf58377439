"""
Query construction and compilation APIs.
"""

from .builder import QueryBuilder, QueryState
from .compiler import QueryCompiler
from .expressions import Q
from .snowflake import SnowflakeQueryCompiler
from .statement import CompiledQuery, QueryResponse, Raw, row_value

__all__ = [
    "CompiledQuery",
    "Q",
    "QueryBuilder",
    "QueryCompiler",
    "QueryResponse",
    "QueryState",
    "Raw",
    "SnowflakeQueryCompiler",
    "row_value",
]
