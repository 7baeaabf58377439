"""
Snowflake column, table, and schema compilers.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..dialects.base import split_identifier, unquote
from .builder import SchemaCompiler
from .columns import ColumnBuilder, ColumnCompiler, SchemaError
from .table import TableCompiler


def _identity(value: str) -> str:
    return value


class SnowflakeColumnBuilder(ColumnBuilder):
    # Snowflake rejects nullable primary key columns.
    def primary(self, constraint_name: Optional[str] = None) -> "SnowflakeColumnBuilder":
        self.not_nullable()
        super().primary(constraint_name)
        return self

    def index(self, index_name: Optional[str] = None) -> "SnowflakeColumnBuilder":
        self.table.adapter.logger.warning("Snowflake does not support the creation of indexes.")
        return self


class SnowflakeColumnCompiler(ColumnCompiler):
    """
    Snowflake type names. There is no native enum, set, or blob family, so
    those fall back to string types.
    """

    TYPES = {
        **ColumnCompiler.TYPES,
        "increments": "integer identity(1,1) primary key not null",
        "big_increments": "bigint identity(1,1) primary key not null",
        "medium_integer": "int",
        "tiny_integer": "smallint",
        "text": "varchar(max)",
        "medium_text": "varchar(max)",
        "long_text": "varchar(max)",
        "json": "variant",
        "jsonb": "variant",
        "blob": "binary",
        "tiny_blob": "varchar(256)",
        "medium_blob": "varchar(16777218)",
        "long_blob": "varchar(max)",
        "varbinary": "varchar(max)",
    }

    def type_floating(self, precision: int | None = None, scale: int | None = None) -> str:
        if precision is None:
            return "real"
        return super().type_floating(precision, scale)

    def type_double(self, precision: int | None = None, scale: int | None = None) -> str:
        if precision is None:
            return "double precision"
        return super().type_double(precision, scale)

    def type_decimal(self, precision: int | None = None, scale: int | None = None) -> str:
        if precision is None:
            return "decimal"
        return super().type_decimal(precision, scale)

    def type_bit(self, length: int | None = None) -> str:
        return f"char({length})" if length else "char(1)"

    def type_binary(self, length: int | None = None) -> str:
        return "varchar(max)"

    def type_datetime(self, use_tz: bool = True, precision: int | None = None) -> str:
        return self._timestamp(use_tz, precision)

    def type_timestamp(self, use_tz: bool = True, precision: int | None = None) -> str:
        return self._timestamp(use_tz, precision)

    def type_enum(self, values: tuple[str, ...] = ()) -> str:
        if values:
            self.logger.warning(
                "Snowflake does not support enum types; allowed values for %s are not enforced.",
                self.column.name,
            )
        return "varchar(255)"

    def type_set(self, values: tuple[str, ...] = ()) -> str:
        return "varchar"

    def modifier_unsigned(self, enabled: bool) -> str:
        if enabled:
            self.logger.warning("Snowflake does not support unsigned columns; ignoring for %s.", self.column.name)
        return ""

    def modifier_comment(self, text: str | None) -> str:
        self.table_compiler.push_additional(
            f"comment on column {self.table_compiler.table_name()}.{self.wrapped_name()} is "
            f"{self.quote_literal(text) if text else 'NULL'}"
        )
        return ""

    @staticmethod
    def _timestamp(use_tz: bool, precision: int | None) -> str:
        name = "timestamp_tz" if use_tz else "timestamp"
        return f"{name}({precision})" if precision is not None else name


class SnowflakeTableCompiler(TableCompiler):
    def create_query(self, columns: List[str], if_not_exists: bool) -> None:
        create_statement = "create table if not exists " if if_not_exists else "create table "
        sql = f"{create_statement}{self.table_name()} ({', '.join(columns)})"
        if "inherits" in self.builder.single:
            sql += f" like ({self.wrap(self.builder.single['inherits'])})"
        self.push_query(sql)
        if "comment" in self.builder.single:
            self.comment(self.builder.single["comment"])

    def alter_column(self, column: ColumnBuilder) -> None:
        compiler = self.adapter.column_compiler(self, column)
        name = compiler.wrapped_name()
        prefix = f"alter table {self.table_name()} alter column {name}"
        self.push_query(f"{prefix} set data type {compiler.get_type()}")
        nullable = column.modifiers.get("nullable")
        if nullable is True:
            self.push_query(f"{prefix} drop not null")
        elif nullable is False:
            self.push_query(f"{prefix} set not null")
        if "default" in column.modifiers:
            self.logger.warning("Snowflake cannot change the default of existing column %s.", column.name)
        if "comment" in column.modifiers:
            compiler.modifier_comment(column.modifiers["comment"])

    def comment(self, text: str | None) -> None:
        self.push_query(f"comment on table {self.table_name()} is {self._literal(text)}")

    def primary(self, columns: List[str], constraint_name: Optional[str] = None) -> None:
        added = {column.name: column for column in self.builder.columns if column.method == "add"}
        # Columns outside this batch are assumed to exist already.
        for name in columns:
            column = added.get(name)
            if column is not None and not column.is_not_nullable:
                message = "Snowflake does not allow primary keys to contain nullable columns."
                if self.adapter.strict_primary_keys:
                    raise SchemaError(f"{message} Column '{name}' must be not_nullable().")
                self.logger.warning(message)
                return
        super().primary(columns, constraint_name)

    def drop_primary(self, constraint_name: Optional[str] = None) -> None:
        self.push_query(f"alter table {self.table_name()} drop primary key")

    def index(self, columns: List[str], index_name: Optional[str] = None, index_type: Optional[str] = None) -> None:
        self.logger.warning("Snowflake does not support the creation of indexes.")

    def drop_index(self, columns: List[str], index_name: Optional[str] = None) -> None:
        self.logger.warning("Snowflake does not support the deletion of indexes.")

    def drop_column(self, columns: List[str]) -> None:
        self.push_query(f"alter table {self.table_name()} drop column {self.columnize(columns)}")


class SnowflakeSchemaCompiler(SchemaCompiler):
    """
    Catalog lookups go through ``information_schema`` with names folded the
    same way identifiers are wrapped.
    """

    def rename_table(self, old_name: str, new_name: str) -> None:
        self.push_query(f"alter table {self.wrap(old_name)} rename to {self.wrap(new_name)}")

    def has_table(self, table_name: str) -> None:
        schema, table = self._split(table_name)
        sql, bindings = self._catalog_query("tables", table, schema)
        self.push_query(sql, bindings, output=lambda response: len(response.rows) > 0)

    def has_column(self, table_name: str, column_name: str) -> None:
        schema, table = self._split(table_name)
        sql, bindings = self._catalog_query("columns", table, schema, column=self._catalog_name(column_name))
        self.push_query(sql, bindings, output=lambda response: len(response.rows) > 0)

    def column_info(self, table_name: str, column_name: Optional[str]) -> None:
        schema, table = self._split(table_name)
        sql, bindings = self._catalog_query("columns", table, schema)
        column = self._catalog_name(column_name) if column_name is not None else None
        self.push_query(sql, bindings, output=self.column_info_output(column))

    def _catalog_query(
        self,
        view: str,
        table: str,
        schema: Optional[str],
        *,
        column: Optional[str] = None,
    ) -> tuple[str, List[Any]]:
        sql = f"select * from information_schema.{view} where table_name = ?"
        bindings: List[Any] = [table]
        if column is not None:
            sql += " and column_name = ?"
            bindings.append(column)
        if schema:
            sql += " and table_schema = ?"
            bindings.append(schema)
        else:
            sql += " and table_schema = current_schema()"
        return sql, bindings

    def _split(self, table_name: str) -> tuple[Optional[str], str]:
        atoms = split_identifier(table_name)
        table = self._catalog_name(atoms[-1])
        schema = self._catalog_name(atoms[-2]) if len(atoms) > 1 else None
        return schema, table

    def _catalog_name(self, name: str) -> str:
        return unquote(self.adapter.custom_wrap_identifier(name, _identity, self.context))
