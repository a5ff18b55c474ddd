import pytest

from ddlhooks.core import nodes as n
from ddlhooks.core.adapters.sourcetext import SourceTextExpressions
from ddlhooks.core.deparse import (
    NOT_AVAILABLE,
    DeparseResult,
    deparse,
    identify_target,
    quote_identifier,
    quote_literal,
    type_name_to_text,
)
from ddlhooks.core.errors import DeparseError
from ddlhooks.core.nodes import AlterTableType as AT
from ddlhooks.core.nodes import ConstraintType as CT
from ddlhooks.core.nodes import ObjectKind

SRC = SourceTextExpressions()


def _int(name="int4"):
    return n.TypeName(names=("pg_catalog", name))


# --- identifiers and types ---------------------------------------------------


@pytest.mark.parametrize(
    ("ident", "expected"),
    [
        ("orders", "orders"),
        ("_tmp$1", "_tmp$1"),
        ("Orders", '"Orders"'),
        ("my table", '"my table"'),
        ('a"b', '"a""b"'),
        ("table", '"table"'),
        ("select", '"select"'),
        ("xmlelement", '"xmlelement"'),
        ("xmlserialize", '"xmlserialize"'),
        ("1abc", '"1abc"'),
    ],
)
def test_quote_identifier(ident, expected):
    assert quote_identifier(ident) == expected


def test_quote_literal_doubles_quotes():
    assert quote_literal("it's") == "'it''s'"
    assert quote_literal(42) == "'42'"


def test_type_name_rendering():
    assert type_name_to_text(_int()) == "integer"
    assert type_name_to_text(n.TypeName(("pg_catalog", "int4"), array_bounds=(-1,))) == "integer[]"
    assert type_name_to_text(n.TypeName.of("numeric", 10, 2)) == "numeric(10,2)"
    assert type_name_to_text(n.TypeName(("pg_catalog", "varchar"), typmods=(30,))) == (
        "character varying(30)"
    )
    assert type_name_to_text(n.TypeName(("text",), setof=True)) == "SETOF text"
    assert type_name_to_text(n.TypeName(("t", "c"), pct_type=True)) == "t.c%TYPE"
    assert type_name_to_text(n.TypeName(("s", "money2"), array_bounds=(3, -1))) == "s.money2[3][]"


# --- DROP ----------------------------------------------------------------------


def test_drop_tables_reports_last_object():
    # known limitation: only the last target is reported for multi-object drops
    node = n.DropStmt(ObjectKind.TABLE, (("t1",), ("t2",)), missing_ok=True)

    result = deparse(node)

    assert result == DeparseResult("DROP TABLE t1, t2 IF EXISTS RESTRICT;", None, "t2")


def test_drop_qualifies_relations_with_search_path():
    node = n.DropStmt(ObjectKind.VIEW, (("v",),), cascade=True)

    result = deparse(node, search_path=("app", "public"))

    assert result.text == "DROP VIEW app.v CASCADE;"
    assert result.schema_name == "app"
    assert result.object_name == "v"


def test_drop_function_lists_argument_types():
    node = n.DropStmt(
        ObjectKind.FUNCTION,
        (("s", "f"),),
        arguments=((_int(), n.TypeName.of("text")),),
    )

    result = deparse(node)

    assert result.text == "DROP FUNCTION s.f(integer,text) RESTRICT;"
    assert (result.schema_name, result.object_name) == ("s", "f")


def test_drop_type_and_collation():
    assert deparse(n.DropStmt(ObjectKind.TYPE, (("s", "mood"),))).text == "DROP TYPE s.mood RESTRICT;"

    collation = deparse(n.DropStmt(ObjectKind.COLLATION, (("german",),)), search_path=("public",))
    assert collation.text == "DROP COLLATION public.german RESTRICT;"
    assert collation.schema_name == "public"


def test_drop_schema_quotes_names():
    result = deparse(n.DropStmt(ObjectKind.SCHEMA, (("Reports",),)))

    assert result.text == 'DROP SCHEMA "Reports" RESTRICT;'
    assert result.schema_name is None
    assert result.object_name == "Reports"


def test_drop_of_unsupported_kind_is_not_available():
    assert deparse(n.DropStmt(ObjectKind.DATABASE, (("db",),))) is NOT_AVAILABLE


def test_drop_with_empty_name_fails():
    with pytest.raises(DeparseError):
        deparse(n.DropStmt(ObjectKind.TABLE, ((),)))


# --- simple CREATE statements ----------------------------------------------------


def test_create_extension():
    node = n.CreateExtensionStmt(
        "hstore",
        if_not_exists=True,
        options=(n.DefElem("schema", "ext"), n.DefElem("new_version", "1.1")),
    )

    result = deparse(node, search_path=("public",))

    assert result.text == "CREATE EXTENSION IF NOT EXISTS hstore SCHEMA ext VERSION '1.1';"
    assert result.schema_name is None
    assert result.object_name == "hstore"


def test_create_extension_from_version():
    node = n.CreateExtensionStmt("ltree", options=(n.DefElem("old_version", "unpackaged"),))

    assert deparse(node).text == "CREATE EXTENSION ltree FROM 'unpackaged';"


def test_create_view():
    node = n.ViewStmt(view=n.RangeVar("v"), query="SELECT 1")

    result = deparse(node, expressions=SRC)

    assert result == DeparseResult("CREATE VIEW v AS SELECT 1;", None, "v")


def test_create_or_replace_view_strips_trailing_semicolon():
    node = n.ViewStmt(view=n.RangeVar("v"), query="select *\n  from t;", replace=True)

    result = deparse(node, expressions=SRC, search_path=("app",))

    assert result.text == "CREATE OR REPLACE VIEW app.v AS select * from t;"
    assert result.schema_name == "app"


def test_view_without_expression_support_fails():
    with pytest.raises(DeparseError, match="query deparsing is not available"):
        deparse(n.ViewStmt(view=n.RangeVar("v"), query="SELECT 1"))


def test_create_schema():
    node = n.CreateSchemaStmt("reports", authid="bob", if_not_exists=True)

    result = deparse(node)

    assert result.text == "CREATE SCHEMA IF NOT EXISTS reports AUTHORIZATION bob;"
    assert result.object_name == "reports"


def test_create_conversion():
    node = n.CreateConversionStmt(
        ("myconv",), "LATIN1", "UTF8", ("iso8859_1_to_utf8",), default=True
    )

    result = deparse(node, search_path=("public",))

    assert result.text == (
        "CREATE DEFAULT CONVERSION public.myconv FOR 'LATIN1' TO 'UTF8' FROM iso8859_1_to_utf8;"
    )
    assert (result.schema_name, result.object_name) == ("public", "myconv")


def test_define_aggregate():
    node = n.DefineStmt(
        ObjectKind.AGGREGATE,
        ("s", "mysum"),
        (
            n.DefElem("sfunc", "int4pl"),
            n.DefElem("stype", _int()),
            n.DefElem("initcond", 0),
            n.DefElem("hashes"),
        ),
    )

    result = deparse(node)

    assert result.text == (
        "CREATE AGGREGATE s.mysum (sfunc='int4pl', stype=integer, initcond=0, hashes);"
    )
    assert (result.schema_name, result.object_name) == ("s", "mysum")


def test_define_operator_references():
    node = n.DefineStmt(
        ObjectKind.OPERATOR,
        ("===",),
        (n.DefElem("commutator", ("===",)), n.DefElem("hashes", True)),
    )

    result = deparse(node)

    assert result.text == 'CREATE OPERATOR "===" (commutator=OPERATOR(===), hashes=true);'


# --- sequences ---------------------------------------------------------------------


def test_create_temporary_sequence():
    node = n.CreateSeqStmt(
        n.RangeVar("seq", persistence=n.Persistence.TEMP),
        (
            n.DefElem("increment", 2),
            n.DefElem("start", 10),
            n.DefElem("maxvalue", None),
            n.DefElem("cycle", True),
            n.DefElem("owned_by", ("t", "id")),
        ),
    )

    result = deparse(node)

    assert result.text == (
        "CREATE TEMPORARY SEQUENCE seq INCREMENT BY 2 START WITH 10 NO MAXVALUE CYCLE OWNED BY t.id;"
    )


def test_alter_sequence():
    node = n.AlterSeqStmt(
        n.RangeVar("seq", schemaname="s"),
        (n.DefElem("restart"), n.DefElem("cache", 20), n.DefElem("owned_by", "none")),
        missing_ok=True,
    )

    result = deparse(node)

    assert result.text == "ALTER SEQUENCE IF EXISTS s.seq RESTART CACHE 20 OWNED BY NONE;"
    assert (result.schema_name, result.object_name) == ("s", "seq")


def test_sequence_owned_by_without_column_fails():
    node = n.AlterSeqStmt(n.RangeVar("seq"), (n.DefElem("owned_by", ("t",)),))

    with pytest.raises(DeparseError):
        deparse(node)


# --- CREATE INDEX ----------------------------------------------------------------


def test_create_index_full():
    node = n.IndexStmt(
        n.RangeVar("t"),
        "t_idx",
        index_params=(
            n.IndexElem("a"),
            n.IndexElem(expr="lower(b)", ordering=n.SortOrder.DESC, nulls_ordering=n.NullsOrder.LAST),
        ),
        options=(n.DefElem("fillfactor", 70),),
        tablespace="fast",
        where_clause="a > 0",
        unique=True,
        concurrent=True,
    )

    result = deparse(node, expressions=SRC, search_path=("public",))

    assert result.text == (
        "CREATE UNIQUE INDEX CONCURRENTLY t_idx ON public.t USING btree "
        "(a, (lower(b)) DESC NULLS LAST) WITH (fillfactor=70) TABLESPACE fast WHERE (a > 0);"
    )
    assert (result.schema_name, result.object_name) == ("public", "t_idx")


def test_anonymous_index_reports_its_table():
    node = n.IndexStmt(n.RangeVar("t"), index_params=(n.IndexElem("a", opclass=("text_pattern_ops",)),))

    result = deparse(node)

    assert result.text == "CREATE INDEX ON t USING btree (a text_pattern_ops);"
    assert result.object_name == "t"


# --- CREATE FUNCTION -------------------------------------------------------------


def _fn_opts(**options):
    return tuple(n.DefElem(name, value) for name, value in options.items())


def test_create_function_with_defaults_and_attributes():
    node = n.CreateFunctionStmt(
        ("add",),
        parameters=(
            n.FunctionParameter(_int(), "a"),
            n.FunctionParameter(_int(), "b", defexpr="1"),
        ),
        return_type=_int(),
        options=_fn_opts(
            language="plpgsql",
            volatility="immutable",
            strict=True,
            **{"as": "BEGIN RETURN a + b; END"},
        ),
        replace=True,
    )

    result = deparse(node, expressions=SRC, search_path=("app",))

    assert result == DeparseResult(
        "CREATE OR REPLACE FUNCTION app.add(IN a integer, IN b integer DEFAULT 1) "
        "RETURNS integer LANGUAGE plpgsql IMMUTABLE NOT LEAKPROOF "
        "RETURNS NULL ON NULL INPUT COST 100 AS $add$BEGIN RETURN a + b; END$add$;",
        "app",
        "add",
    )


def test_create_function_returns_table():
    ids = n.TypeName(("pg_catalog", "int4"), array_bounds=(-1,))
    node = n.CreateFunctionStmt(
        ("s", "pairs"),
        parameters=(
            n.FunctionParameter(ids, "ids", mode=n.FunctionParameterMode.VARIADIC),
            n.FunctionParameter(_int(), "id", mode=n.FunctionParameterMode.TABLE),
            n.FunctionParameter(n.TypeName.of("text"), "label", mode=n.FunctionParameterMode.TABLE),
        ),
        options=_fn_opts(language="SQL", volatility="stable", rows=10, **{"as": "SELECT 1, 'x'"}),
    )

    result = deparse(node)

    assert result.text == (
        "CREATE FUNCTION s.pairs(VARIADIC ids integer[]) "
        "RETURNS TABLE (id integer, label text) LANGUAGE sql STABLE NOT LEAKPROOF "
        "CALLED ON NULL INPUT COST 100 ROWS 10 AS $pairs$SELECT 1, 'x'$pairs$;"
    )
    assert (result.schema_name, result.object_name) == ("s", "pairs")


def test_create_c_function_with_link_symbol():
    node = n.CreateFunctionStmt(
        ("f",),
        return_type=n.TypeName(("text",), setof=True),
        options=_fn_opts(
            language="C", security=True, leakproof=True, **{"as": ("$libdir/ext", "ext_fn")}
        ),
    )

    assert deparse(node) == DeparseResult(
        "CREATE FUNCTION f() RETURNS SETOF text LANGUAGE c VOLATILE LEAKPROOF "
        "CALLED ON NULL INPUT SECURITY DEFINER COST 1 ROWS 1000 "
        "AS '$libdir/ext', 'ext_fn';",
        None,
        "f",
    )


def test_create_function_with_out_parameters_omits_returns():
    node = n.CreateFunctionStmt(
        ("f",),
        parameters=(
            n.FunctionParameter(_int(), "a"),
            n.FunctionParameter(_int(), "b", mode=n.FunctionParameterMode.OUT),
        ),
        options=_fn_opts(language="sql", **{"as": "SELECT a"}),
    )

    assert deparse(node).text.startswith(
        "CREATE FUNCTION f(IN a integer, OUT b integer) LANGUAGE sql VOLATILE"
    )


def test_create_function_body_tag_avoids_collisions():
    node = n.CreateFunctionStmt(
        ("Weird name",),
        return_type=n.TypeName.of("text"),
        options=_fn_opts(language="sql", **{"as": "SELECT '$body$'"}),
    )

    result = deparse(node)

    assert result.text.startswith('CREATE FUNCTION "Weird name"() RETURNS text')
    assert result.text.endswith("AS $body_$SELECT '$body$'$body_$;")


@pytest.mark.parametrize(
    "options",
    [
        {"as": "SELECT 1"},
        {"language": "sql"},
        {"language": "sql", "volatility": "sometimes", "as": "SELECT 1"},
    ],
)
def test_create_function_with_missing_or_bad_options_fails(options):
    node = n.CreateFunctionStmt(("f",), options=_fn_opts(**options))

    with pytest.raises(DeparseError):
        deparse(node)


def test_create_function_default_needs_expressions():
    node = n.CreateFunctionStmt(
        ("f",),
        parameters=(n.FunctionParameter(_int(), "a", defexpr="1"),),
        options=_fn_opts(language="sql", **{"as": "SELECT a"}),
    )

    with pytest.raises(DeparseError, match="expression deparsing"):
        deparse(node)


# --- CREATE TABLE ----------------------------------------------------------------


def test_create_table_minimal():
    node = n.CreateStmt(
        relation=n.RangeVar("t"),
        table_elts=(
            n.ColumnDef("id", n.TypeName.of("integer"), constraints=(n.Constraint(CT.NOT_NULL),)),
        ),
    )

    result = deparse(node)

    assert result == DeparseResult("CREATE TABLE t (id integer NOT NULL);", None, "t")


def test_create_table_with_constraints():
    node = n.CreateStmt(
        relation=n.RangeVar("orders", schemaname="shop"),
        table_elts=(
            n.ColumnDef("id", _int("int8"), constraints=(n.Constraint(CT.PRIMARY),)),
            n.ColumnDef(
                "note",
                n.TypeName(("pg_catalog", "varchar"), typmods=(200,)),
                raw_default="'none'",
            ),
            n.ColumnDef("customer", n.TypeName.of("integer"), is_not_null=True),
            n.Constraint(
                CT.FOREIGN,
                conname="fk_customer",
                pktable=n.RangeVar("customers", schemaname="shop"),
                fk_attrs=("customer",),
                pk_attrs=("id",),
                fk_del_action=n.KeyAction.CASCADE,
            ),
        ),
        tablespacename="fast",
        if_not_exists=True,
    )

    result = deparse(node, expressions=SRC, search_path=("public",))

    assert result.text == (
        "CREATE TABLE IF NOT EXISTS shop.orders ("
        "id bigint PRIMARY KEY, "
        "note character varying(200) DEFAULT 'none', "
        "customer integer NOT NULL, "
        "CONSTRAINT fk_customer FOREIGN KEY (customer) REFERENCES shop.customers (id) "
        "MATCH SIMPLE ON UPDATE NO ACTION ON DELETE CASCADE"
        ") TABLESPACE fast;"
    )
    assert (result.schema_name, result.object_name) == ("shop", "orders")


def test_create_table_table_constraints():
    node = n.CreateStmt(
        relation=n.RangeVar("t"),
        table_elts=(n.ColumnDef("a", n.TypeName.of("text")), n.ColumnDef("b", n.TypeName.of("text"))),
        constraints=(
            n.Constraint(CT.UNIQUE, keys=("a", "b"), deferrable=True, initdeferred=True),
            n.Constraint(CT.PRIMARY, conname="t_pk", indexname="t_pk_idx"),
            n.Constraint(CT.CHECK, conname="a_set", raw_expr="a <> ''"),
        ),
    )

    result = deparse(node, expressions=SRC)

    assert result.text == (
        "CREATE TABLE t (a text, b text, "
        "UNIQUE (a, b) DEFERRABLE INITIALLY DEFERRED, "
        "CONSTRAINT t_pk PRIMARY KEY USING INDEX t_pk_idx, "
        "CONSTRAINT a_set CHECK (a <> ''));"
    )


def test_create_temporary_table_lives_in_pg_temp():
    node = n.CreateStmt(
        relation=n.RangeVar("scratch", persistence=n.Persistence.TEMP),
        table_elts=(n.ColumnDef("v", n.TypeName.of("text")),),
        oncommit=n.OnCommit.DROP,
    )

    result = deparse(node, search_path=("public",))

    assert result.text == "CREATE TEMPORARY TABLE pg_temp.scratch (v text) ON COMMIT DROP;"
    assert result.schema_name == "pg_temp"


def test_create_unlogged_table_with_options():
    node = n.CreateStmt(
        relation=n.RangeVar("log", persistence=n.Persistence.UNLOGGED),
        table_elts=(n.ColumnDef("line", n.TypeName.of("text")),),
        options=(n.DefElem("fillfactor", 70), n.DefElem("autovacuum_enabled", False)),
    )

    result = deparse(node)

    assert result.text == (
        "CREATE UNLOGGED TABLE log (line text) WITH (fillfactor=70, autovacuum_enabled=false);"
    )


def test_create_table_like_and_inherits():
    everything = n.CreateStmt(
        relation=n.RangeVar("copy"),
        table_elts=(n.TableLikeClause(n.RangeVar("orig"), frozenset(n.LikeOption)),),
        inh_relations=(n.RangeVar("parent"),),
    )
    some = n.CreateStmt(
        relation=n.RangeVar("copy"),
        table_elts=(
            n.TableLikeClause(
                n.RangeVar("orig"), frozenset({n.LikeOption.INDEXES, n.LikeOption.DEFAULTS})
            ),
        ),
    )

    assert deparse(everything).text == "CREATE TABLE copy (LIKE orig INCLUDING ALL) INHERITS (parent);"
    assert deparse(some).text == (
        "CREATE TABLE copy (LIKE orig INCLUDING DEFAULTS INCLUDING INDEXES);"
    )


def test_create_typed_table():
    node = n.CreateStmt(
        relation=n.RangeVar("emp"),
        table_elts=(
            n.ColumnDef("name", n.TypeName.of("text"), constraints=(n.Constraint(CT.NOT_NULL),)),
            n.ColumnDef("age", n.TypeName.of("integer")),
        ),
        of_typename=n.TypeName.of("person"),
    )

    assert deparse(node).text == "CREATE TABLE emp OF person (name WITH OPTIONS NOT NULL);"


def test_create_table_quotes_identifiers():
    node = n.CreateStmt(
        relation=n.RangeVar("Mixed"),
        table_elts=(n.ColumnDef("select", n.TypeName.of("text")),),
    )

    assert deparse(node).text == 'CREATE TABLE "Mixed" ("select" text);'


def test_create_table_check_needs_expression_support():
    node = n.CreateStmt(
        relation=n.RangeVar("t"),
        table_elts=(
            n.ColumnDef(
                "a",
                n.TypeName.of("integer"),
                constraints=(n.Constraint(CT.CHECK, raw_expr="a > 0"),),
            ),
        ),
    )

    with pytest.raises(DeparseError, match="expression deparsing is not available"):
        deparse(node)
    assert deparse(node, expressions=SRC).text == "CREATE TABLE t (a integer CHECK (a > 0));"


# --- ALTER TABLE ---------------------------------------------------------------


def test_alter_table_sub_actions():
    node = n.AlterTableStmt(
        n.RangeVar("t"),
        cmds=(
            n.AlterTableCmd(AT.ADD_COLUMN, definition=n.ColumnDef("c", n.TypeName.of("text"))),
            n.AlterTableCmd(AT.COLUMN_DEFAULT, name="c", definition="'x'"),
            n.AlterTableCmd(AT.SET_NOT_NULL, name="c"),
            n.AlterTableCmd(AT.DROP_COLUMN, name="old", missing_ok=True, cascade=True),
            n.AlterTableCmd(
                AT.ALTER_COLUMN_TYPE,
                name="n",
                definition=n.ColumnDef("n", _int("int8"), raw_default="n::bigint"),
            ),
            n.AlterTableCmd(AT.CHANGE_OWNER, name="bob"),
        ),
    )

    result = deparse(node, expressions=SRC)

    assert result.text == (
        "ALTER TABLE t ADD COLUMN c text, ALTER c SET DEFAULT 'x', ALTER c SET NOT NULL, "
        "DROP IF EXISTS old CASCADE, ALTER n TYPE bigint USING n::bigint, OWNER TO bob;"
    )
    assert result.object_name == "t"


def test_alter_table_column_settings():
    node = n.AlterTableStmt(
        n.RangeVar("t", schemaname="s"),
        cmds=(
            n.AlterTableCmd(AT.COLUMN_DEFAULT, name="c"),
            n.AlterTableCmd(AT.DROP_NOT_NULL, name="c"),
            n.AlterTableCmd(AT.SET_STATISTICS, name="c", definition=100),
            n.AlterTableCmd(AT.SET_STORAGE, name="c", definition="external"),
            n.AlterTableCmd(AT.SET_OPTIONS, name="c", definition=(n.DefElem("n_distinct", 5),)),
            n.AlterTableCmd(AT.RESET_OPTIONS, name="c", definition=(n.DefElem("n_distinct"),)),
            n.AlterTableCmd(AT.DROP_CONSTRAINT, name="c_check"),
        ),
    )

    result = deparse(node)

    assert result.text == (
        "ALTER TABLE s.t ALTER c DROP DEFAULT, ALTER c DROP NOT NULL, "
        "ALTER c SET STATISTICS 100, ALTER c SET STORAGE EXTERNAL, "
        "ALTER COLUMN c SET (n_distinct=5), ALTER COLUMN c RESET (n_distinct), "
        "DROP CONSTRAINT c_check;"
    )
    assert result.schema_name == "s"


def test_alter_table_keyword_actions():
    node = n.AlterTableStmt(
        n.RangeVar("t"),
        cmds=(
            n.AlterTableCmd(AT.DROP_OIDS),
            n.AlterTableCmd(AT.ENABLE_REPLICA_TRIGGER, name="trg"),
            n.AlterTableCmd(AT.ADD_INHERIT, definition=n.RangeVar("parent")),
            n.AlterTableCmd(AT.ADD_OF, definition=n.TypeName.of("person")),
        ),
    )

    assert deparse(node).text == (
        "ALTER TABLE t SET WITHOUT OIDS, ENABLE REPLICA TRIGGER trg, INHERIT parent, OF person;"
    )


def test_alter_table_skips_sub_actions_without_rendering():
    node = n.AlterTableStmt(
        n.RangeVar("t"),
        cmds=(
            n.AlterTableCmd(AT.ADD_CONSTRAINT, definition=n.Constraint(CT.CHECK, raw_expr="a > 0")),
            n.AlterTableCmd(AT.SET_REL_OPTIONS, definition=(n.DefElem("fillfactor", 50),)),
            n.AlterTableCmd(AT.SET_NOT_NULL, name="a"),
        ),
    )

    assert deparse(node).text == "ALTER TABLE t ALTER a SET NOT NULL;"


def test_alter_other_relation_kinds():
    index = n.AlterTableStmt(
        n.RangeVar("i"), cmds=(n.AlterTableCmd(AT.SET_TABLESPACE, name="fast"),), relkind=ObjectKind.INDEX
    )
    foreign = n.AlterTableStmt(
        n.RangeVar("ft"), cmds=(n.AlterTableCmd(AT.CHANGE_OWNER, name="bob"),), relkind=ObjectKind.FOREIGN_TABLE
    )

    assert deparse(index).text == "ALTER INDEX i SET TABLESPACE fast;"
    assert deparse(foreign).text == "ALTER FOREIGN TABLE ft OWNER TO bob;"


def test_add_column_without_definition_fails():
    node = n.AlterTableStmt(n.RangeVar("t"), cmds=(n.AlterTableCmd(AT.ADD_COLUMN),))

    with pytest.raises(DeparseError):
        deparse(node)


# --- shapes without a renderer ---------------------------------------------------


def test_statement_without_renderer_is_not_available():
    node = n.RenameStmt(ObjectKind.TABLE, "new", relation=n.RangeVar("old"))

    assert deparse(node) is NOT_AVAILABLE
    assert not NOT_AVAILABLE


def test_identify_target_reads_names_from_the_node():
    assert identify_target(n.RenameStmt(ObjectKind.TABLE, "x", relation=n.RangeVar("t", "s"))) == (
        "s",
        "t",
    )
    assert identify_target(n.CreateTrigStmt("trg", n.RangeVar("t")), ("public",)) == (
        "public",
        "trg",
    )
    assert identify_target(n.CreateFunctionStmt(("s", "f"))) == ("s", "f")
    assert identify_target(n.CreateExtensionStmt("hstore")) == (None, "hstore")
    assert identify_target(n.DropStmt(ObjectKind.INDEX, (("a",), ("s", "b")))) == ("s", "b")
    assert identify_target(n.VacuumStmt()) == (None, None)
