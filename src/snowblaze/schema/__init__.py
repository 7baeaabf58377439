"""
Schema building and DDL compilation.
"""

from .builder import ColumnInfo, SchemaBuilder, SchemaCompiler
from .columns import ColumnBuilder, ColumnCompiler, SchemaError
from .snowflake import (
    SnowflakeColumnBuilder,
    SnowflakeColumnCompiler,
    SnowflakeSchemaCompiler,
    SnowflakeTableCompiler,
)
from .table import TableBuilder, TableCompiler

__all__ = [
    "ColumnBuilder",
    "ColumnCompiler",
    "ColumnInfo",
    "SchemaBuilder",
    "SchemaCompiler",
    "SchemaError",
    "SnowflakeColumnBuilder",
    "SnowflakeColumnCompiler",
    "SnowflakeSchemaCompiler",
    "SnowflakeTableCompiler",
    "TableBuilder",
    "TableCompiler",
]
