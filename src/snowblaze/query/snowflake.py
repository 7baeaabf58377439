"""
Snowflake query compiler.
"""

from __future__ import annotations

from .compiler import QueryCompiler
from .statement import CompiledQuery


class SnowflakeQueryCompiler(QueryCompiler):
    """
    The Snowflake driver runs one statement per execute call, so writes always
    compile to a single ``CompiledQuery``. Row locks are dropped with a warning.
    """

    def insert(self) -> str | CompiledQuery:
        sql = super().insert()
        if sql == "":
            return sql
        if not self.bindings and sql.endswith(" default values"):
            self.logger.warning("insert of an empty row is not supported by snowflake dialect")
            return ""
        self._slight_return()
        return CompiledQuery(sql=sql, bindings=tuple(self.bindings))

    def update(self) -> CompiledQuery:
        sql = super().update()
        self._slight_return()
        return CompiledQuery(sql=sql, bindings=tuple(self.bindings))

    def delete(self) -> CompiledQuery:
        sql = super().delete()
        self._slight_return()
        return CompiledQuery(sql=sql, bindings=tuple(self.bindings))

    def truncate(self) -> str:
        return f"truncate {self.table_name()}"

    def for_update(self) -> str:
        self.logger.warning("table lock is not supported by snowflake dialect")
        return ""

    def for_share(self) -> str:
        self.logger.warning("lock for share is not supported by snowflake dialect")
        return ""

    def _slight_return(self) -> None:
        if self.state.returning:
            self.logger.warning("returning is not supported by snowflake dialect")
