import pytest

from src.mz_engine.identifiers import (
    ObjectIdentity,
    format_name,
    qualified_name,
    quote_identifier,
    quote_literal,
    quote_literal_list,
    require_keyword,
    require_type_name,
)

# ---------- quoting ----------


def test_quote_identifier_wraps_and_doubles_embedded_quotes():
    assert quote_identifier("orders") == '"orders"'
    assert quote_identifier('we"ird') == '"we""ird"'
    # single quotes are untouched inside identifiers
    assert quote_identifier("it's") == '"it\'s"'


def test_quote_literal_wraps_and_doubles_embedded_quotes():
    assert quote_literal("abc") == "'abc'"
    assert quote_literal("it's") == "'it''s'"
    assert quote_literal('say "hi"') == "'say \"hi\"'"


def test_qualified_name_quotes_each_part():
    assert qualified_name("a", "b", "c") == '"a"."b"."c"'
    assert qualified_name("only") == '"only"'
    assert qualified_name("my.db", "x") == '"my.db"."x"'


@pytest.mark.parametrize("parts", [(), ("a", ""), ("a", None)])
def test_qualified_name_rejects_missing_parts(parts):
    with pytest.raises(ValueError):
        qualified_name(*parts)


def test_quote_literal_list_and_format_name():
    assert quote_literal_list(["use1-az1", "use1-az2"]) == "'use1-az1', 'use1-az2'"
    assert quote_literal_list([]) == ""
    assert format_name("materialize", "public", "t") == "materialize.public.t"


# ---------- keywords ----------


@pytest.mark.parametrize("value", ["AVRO", "JSON", "UPSERT", "DEBEZIUM", "TPCH", "KEY VALUE"])
def test_require_keyword_accepts_keyword_phrases(value):
    assert require_keyword(value, what="format") == value


@pytest.mark.parametrize("value", ["", "AVRO;", "JSON --", "TEXT)", " UPSERT", "A  B", "1ST"])
def test_require_keyword_rejects_anything_else(value):
    with pytest.raises(ValueError, match="Invalid format"):
        require_keyword(value, what="format")


@pytest.mark.parametrize(
    "value", ["int", "text", "numeric(10, 2)", "varchar(20)", "text[]", "double precision"]
)
def test_require_type_name_accepts_sql_types(value):
    assert require_type_name(value) == value


@pytest.mark.parametrize("value", ["int; DROP TABLE t", "text,", "(int)", ""])
def test_require_type_name_rejects_injection(value):
    with pytest.raises(ValueError, match="Invalid column type"):
        require_type_name(value)


# ---------- identity ----------


def test_object_identity_is_opaque_value():
    identity = ObjectIdentity("u1")
    assert str(identity) == "u1"
    assert identity == ObjectIdentity("u1")
    assert identity != "u1"
    assert hash(identity) == hash(ObjectIdentity("u1"))


def test_object_identity_rejects_empty():
    with pytest.raises(ValueError):
        ObjectIdentity("")
