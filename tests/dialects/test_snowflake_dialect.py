from snowblaze.dialects import BaseDialect, SnowflakeDialect, split_identifier, unquote


def test_snowflake_dialect_folds_unquoted_identifiers():
    dialect = SnowflakeDialect()
    assert dialect.wrap_identifier("users") == '"USERS"'
    assert dialect.format_table("analytics.users") == '"ANALYTICS"."USERS"'
    assert dialect.wrap("users.email as mail") == '"USERS"."EMAIL" as "MAIL"'


def test_snowflake_dialect_preserves_quoted_identifiers():
    dialect = SnowflakeDialect()
    assert dialect.wrap_identifier('"mixedCase"') == '"mixedCase"'
    assert dialect.format_table('analytics."Events.v2"') == '"ANALYTICS"."Events.v2"'


def test_snowflake_dialect_passes_star_through():
    dialect = SnowflakeDialect()
    assert dialect.columnize(["*"]) == "*"
    assert dialect.wrap("users.*") == '"USERS".*'


def test_snowflake_dialect_without_folding():
    dialect = SnowflakeDialect(fold_identifiers=False)
    assert dialect.wrap_identifier("users") == '"users"'


def test_wrap_identifier_hook_takes_over():
    calls = []

    def hook(value, orig_impl, context):
        calls.append((value, context))
        return orig_impl(f"{context}_{value}")

    dialect = SnowflakeDialect(wrap_identifier=hook)
    assert dialect.wrap_identifier("users", "tenant") == '"tenant_users"'
    assert calls == [("users", "tenant")]


def test_custom_wrap_identifier_uses_given_implementation():
    dialect = SnowflakeDialect()
    assert dialect.custom_wrap_identifier("name", lambda value: f"[{value}]") == "[NAME]"
    assert dialect.custom_wrap_identifier('"name"', lambda value: f"[{value}]") == '["name"]'


def test_snowflake_dialect_capabilities():
    dialect = SnowflakeDialect()
    assert dialect.name == "snowflake"
    assert dialect.parameter_placeholder() == "?"
    assert dialect.capabilities.supports_returning is False


def test_base_dialect_escapes_and_limits():
    dialect = BaseDialect()
    assert dialect.quote_identifier('table"name') == '"table""name"'
    assert dialect.wrap_identifier("users") == '"users"'
    assert dialect.limit_clause(10, None) == "limit 10"
    assert dialect.limit_clause(None, 5) == "offset 5"
    assert dialect.limit_clause(10, 5) == "limit 10 offset 5"


def test_identifier_helpers():
    assert split_identifier('db."a.b".c') == ["db", '"a.b"', "c"]
    assert unquote('"say ""hi"""') == 'say "hi"'
    assert unquote("plain") == "plain"
