"""Command deparser.

Turns a structured command node back into canonical command text, and
reports the schema and object name the command touches. Rendering is a
pure function of the node, the active search path (used to qualify
relation names written without a schema) and an ExpressionDeparser that
renders the opaque expressions and queries embedded in some statements.

Shapes without a renderer produce the NOT_AVAILABLE marker. Sub-actions
without a renderer silently contribute nothing to the output.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import singledispatch
from typing import Any, Iterable, Protocol, Sequence

from ddlhooks.core import nodes as n
from ddlhooks.core.classifier import classify_or_none
from ddlhooks.core.errors import DeparseError
from ddlhooks.core.nodes import AlterTableType as AT
from ddlhooks.core.nodes import ConstraintType as CT
from ddlhooks.core.nodes import ObjectKind

logger = logging.getLogger(__name__)


class ExpressionDeparser(Protocol):
    """Renders the expressions and queries a statement node carries."""

    def expr_to_text(self, expr: Any) -> str:
        ...

    def query_to_text(self, query: Any) -> str:
        ...


@dataclass(frozen=True)
class DeparseResult:
    text: str
    schema_name: str | None
    object_name: str


class _Marker(Enum):
    NOT_AVAILABLE = "not available"

    def __bool__(self) -> bool:
        return False


NOT_AVAILABLE = _Marker.NOT_AVAILABLE


# --- identifiers -------------------------------------------------------------

_SAFE_IDENT = re.compile(r"^[a-z_][a-z0-9_$]*$")

# Keywords quote_identifier() refuses to leave bare: reserved, column-name
# and type/function-name keywords.
_KEYWORDS = frozenset(
    """
    all analyse analyze and any array as asc asymmetric authorization between
    bigint binary bit boolean both case cast char character check coalesce
    collate collation column concurrently constraint create cross
    current_catalog current_date current_role current_schema current_time
    current_timestamp current_user dec decimal default deferrable desc
    distinct do else end except exists extract false fetch float for foreign
    freeze from full grant greatest group having ilike in initially inner
    inout int integer intersect interval into is isnull join lateral leading
    least left like limit localtime localtimestamp national natural nchar
    none not notnull null nullif numeric offset on only or order out outer
    over overlaps overlay placing position precision primary real references
    returning right row select session_user setof similar smallint some
    substring symmetric table then time timestamp to trailing treat trim true
    union unique user using values varchar variadic verbose when where window
    with xmlattributes xmlconcat xmlelement xmlexists xmlforest xmlparse xmlpi
    xmlroot xmlserialize
    """.split()
)


def quote_identifier(ident: str) -> str:
    """Double-quote an identifier unless it is lower case, safe and not a keyword."""
    if _SAFE_IDENT.match(ident) and ident not in _KEYWORDS:
        return ident
    return '"' + ident.replace('"', '""') + '"'


def quote_literal(value: Any) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def _dotted(names: Iterable[str]) -> str:
    return ".".join(quote_identifier(name) for name in names)


# --- rendering context -------------------------------------------------------


@dataclass(frozen=True)
class _Context:
    expressions: ExpressionDeparser | None
    search_path: tuple[str, ...]

    def default_schema(self) -> str | None:
        return self.search_path[0] if self.search_path else None

    def expr(self, expr: Any) -> str:
        if self.expressions is None:
            raise DeparseError("expression deparsing is not available")
        return self.expressions.expr_to_text(expr)

    def query(self, query: Any) -> str:
        if self.expressions is None:
            raise DeparseError("query deparsing is not available")
        return self.expressions.query_to_text(query)


def range_var_namespace(rel: n.RangeVar, search_path: Sequence[str] = ()) -> str | None:
    """Schema of a relation: the explicit one, or the first search path entry."""
    if rel.schemaname:
        return rel.schemaname
    return search_path[0] if search_path else None


def range_var_to_text(rel: n.RangeVar, search_path: Sequence[str] = ()) -> str:
    parts = []
    if rel.catalogname:
        parts.append(rel.catalogname)
    schema = range_var_namespace(rel, search_path)
    if schema:
        parts.append(schema)
    parts.append(rel.relname)
    return _dotted(parts)


# Internal names of built-in types and their SQL spelling.
_BUILTIN_TYPES = {
    "bool": "boolean",
    "bpchar": "character",
    "float4": "real",
    "float8": "double precision",
    "int2": "smallint",
    "int4": "integer",
    "int8": "bigint",
    "interval": "interval",
    "numeric": "numeric",
    "time": "time without time zone",
    "timestamp": "timestamp without time zone",
    "timestamptz": "timestamp with time zone",
    "timetz": "time with time zone",
    "varchar": "character varying",
}


def type_name_to_text(type_name: n.TypeName) -> str:
    """Render a type reference: SETOF prefix, typmods, %TYPE and array bounds."""
    names = type_name.names
    if len(names) == 2 and names[0] == "pg_catalog" and names[1] in _BUILTIN_TYPES:
        text = _BUILTIN_TYPES[names[1]]
    else:
        text = ".".join(names)

    if type_name.pct_type:
        text += "%TYPE"
    if type_name.typmods:
        text += "(" + ",".join(str(mod) for mod in type_name.typmods) + ")"
    for bound in type_name.array_bounds:
        text += "[]" if bound < 0 else f"[{bound}]"
    if type_name.setof:
        text = "SETOF " + text
    return text


def _qualified_name(
    names: Sequence[str], ctx: _Context
) -> tuple[str | None, str]:
    """Split a dotted name, defaulting the schema to the creation namespace."""
    if len(names) > 1:
        return names[-2], names[-1]
    return ctx.default_schema(), names[-1]


def _schema_dot_name(schema: str | None, name: str) -> str:
    return _dotted([schema, name]) if schema else quote_identifier(name)


def _result(text: str, schema: str | None, name: str) -> DeparseResult:
    return DeparseResult(text=text, schema_name=schema, object_name=name)


# --- entry point -------------------------------------------------------------


def deparse(
    node: n.Node,
    *,
    expressions: ExpressionDeparser | None = None,
    search_path: Sequence[str] = (),
) -> DeparseResult | _Marker:
    """
    Rebuild the canonical text of a command node.

    Args:
        node: Statement to render.
        expressions: Capability used for embedded expressions and queries.
        search_path: Active schema search path; its first entry qualifies
                     relation names written without a schema.

    Returns:
        A DeparseResult, or NOT_AVAILABLE for shapes with no renderer.

    Raises:
        DeparseError: If the node needs `expressions` and none was given,
            or if the node is malformed.
    """
    ctx = _Context(expressions=expressions, search_path=tuple(search_path))
    result = _render(node, ctx)
    if result is NOT_AVAILABLE:
        logger.debug("no deparse support for %s", type(node).__name__)
    return result


@singledispatch
def _render(node: n.Node, ctx: _Context) -> DeparseResult | _Marker:
    return NOT_AVAILABLE


def deparsable_shapes() -> list[type[n.Node]]:
    """Return the statement classes with a dedicated renderer."""
    return [cls for cls in _render.registry if cls is not object and cls is not n.Node]


# --- DROP --------------------------------------------------------------------


@_render.register(n.DropStmt)
def _drop(node: n.DropStmt, ctx: _Context) -> DeparseResult | _Marker:
    kind = classify_or_none(node)
    if kind is None:
        return NOT_AVAILABLE

    names: list[str] = []
    schema: str | None = None
    objname = ""

    for index, obj in enumerate(node.objects):
        if not obj:
            raise DeparseError("DROP target with an empty name")
        kind_of = node.remove_type

        if kind_of in n.RELATION_KINDS:
            rel = n.RangeVar.from_names(obj)
            names.append(range_var_to_text(rel, ctx.search_path))
            schema, objname = range_var_namespace(rel, ctx.search_path), rel.relname

        elif kind_of in (ObjectKind.TYPE, ObjectKind.DOMAIN):
            type_name = n.TypeName(names=tuple(obj))
            names.append(type_name_to_text(type_name))
            schema, objname = type_name.qualified()

        elif kind_of in (ObjectKind.COLLATION, ObjectKind.CONVERSION):
            schema, objname = _qualified_name(obj, ctx)
            names.append(_schema_dot_name(schema, objname))

        elif kind_of in (ObjectKind.FUNCTION, ObjectKind.AGGREGATE):
            args = node.arguments[index] if index < len(node.arguments) else ()
            argtypes = ",".join(type_name_to_text(arg) for arg in args)
            names.append(f"{_dotted(obj)}({argtypes})")
            schema, objname = _qualified_name(obj, ctx)

        else:
            names.append(_dotted(obj))
            schema = obj[-2] if len(obj) > 1 else None
            objname = obj[-1]

    # only the last target is reported
    text = "{} {}{} {};".format(
        kind.tag,
        ", ".join(names),
        " IF EXISTS" if node.missing_ok else "",
        "CASCADE" if node.cascade else "RESTRICT",
    )
    return _result(text, schema, objname)


# --- CREATE EXTENSION / VIEW / SCHEMA / CONVERSION ---------------------------


@_render.register(n.CreateExtensionStmt)
def _create_extension(node: n.CreateExtensionStmt, ctx: _Context) -> DeparseResult:
    options = {opt.defname: opt.arg for opt in node.options}
    parts = ["CREATE EXTENSION"]
    if node.if_not_exists:
        parts.append("IF NOT EXISTS")
    parts.append(quote_identifier(node.extname))
    if options.get("schema"):
        parts.append(f"SCHEMA {quote_identifier(options['schema'])}")
    if options.get("new_version"):
        parts.append(f"VERSION {quote_literal(options['new_version'])}")
    if options.get("old_version"):
        parts.append(f"FROM {quote_literal(options['old_version'])}")
    return _result(" ".join(parts) + ";", None, node.extname)


@_render.register(n.ViewStmt)
def _view(node: n.ViewStmt, ctx: _Context) -> DeparseResult:
    text = "CREATE {}VIEW {} AS {};".format(
        "OR REPLACE " if node.replace else "",
        range_var_to_text(node.view, ctx.search_path),
        ctx.query(node.query).strip().rstrip(";"),
    )
    return _result(
        text, range_var_namespace(node.view, ctx.search_path), node.view.relname
    )


@_render.register(n.CreateSchemaStmt)
def _create_schema(node: n.CreateSchemaStmt, ctx: _Context) -> DeparseResult:
    parts = ["CREATE SCHEMA"]
    if node.if_not_exists:
        parts.append("IF NOT EXISTS")
    parts.append(quote_identifier(node.schemaname))
    if node.authid:
        parts.append(f"AUTHORIZATION {quote_identifier(node.authid)}")
    return _result(" ".join(parts) + ";", None, node.schemaname)


@_render.register(n.CreateConversionStmt)
def _create_conversion(node: n.CreateConversionStmt, ctx: _Context) -> DeparseResult:
    schema, name = _qualified_name(node.conversion_name, ctx)
    text = "CREATE {}CONVERSION {} FOR {} TO {} FROM {};".format(
        "DEFAULT " if node.default else "",
        _schema_dot_name(schema, name),
        quote_literal(node.for_encoding_name),
        quote_literal(node.to_encoding_name),
        _dotted(node.func_name),
    )
    return _result(text, schema, name)


# --- CREATE AGGREGATE / OPERATOR / TYPE / ... --------------------------------


def _def_arg(arg: Any) -> str:
    if isinstance(arg, n.TypeName):
        return type_name_to_text(arg)
    if isinstance(arg, bool):
        return "true" if arg else "false"
    if isinstance(arg, (int, float)):
        return str(arg)
    if isinstance(arg, (tuple, list)):
        return f"OPERATOR({'.'.join(str(part) for part in arg)})"
    return quote_literal(arg)


@_render.register(n.DefineStmt)
def _define(node: n.DefineStmt, ctx: _Context) -> DeparseResult | _Marker:
    kind = classify_or_none(node)
    if kind is None:
        return NOT_AVAILABLE

    schema, name = _qualified_name(node.defnames, ctx)
    text = f"{kind.tag} {_schema_dot_name(schema, name)}"
    if node.definition:
        defs = []
        for defel in node.definition:
            if defel.arg is None:
                defs.append(defel.defname)
            else:
                defs.append(f"{defel.defname}={_def_arg(defel.arg)}")
        text += " (" + ", ".join(defs) + ")"
    return _result(text + ";", schema, name)


# --- sequences -----------------------------------------------------------------


def _persistence(rel: n.RangeVar) -> list[str]:
    if rel.persistence is n.Persistence.TEMP:
        return ["TEMPORARY"]
    if rel.persistence is n.Persistence.UNLOGGED:
        return ["UNLOGGED"]
    return []


def _owned_by(arg: Any, ctx: _Context) -> str:
    names = tuple(arg) if isinstance(arg, (tuple, list)) else tuple(str(arg).split("."))
    if len(names) == 1 and names[0].lower() == "none":
        return "OWNED BY NONE"
    if len(names) < 2:
        raise DeparseError(f"invalid OWNED BY target: {arg!r}")
    rel = n.RangeVar.from_names(names[:-1])
    return f"OWNED BY {range_var_to_text(rel, ctx.search_path)}.{quote_identifier(names[-1])}"


def _seq_options(options: Iterable[n.DefElem], ctx: _Context) -> list[str]:
    parts: list[str] = []
    for opt in options:
        name, arg = opt.defname, opt.arg
        if name == "cache":
            parts.append(f"CACHE {int(arg)}")
        elif name == "cycle":
            parts.append("CYCLE" if arg else "NO CYCLE")
        elif name == "increment":
            parts.append(f"INCREMENT BY {int(arg)}")
        elif name in ("maxvalue", "minvalue"):
            keyword = name.upper()
            parts.append(f"{keyword} {int(arg)}" if arg is not None else f"NO {keyword}")
        elif name == "owned_by":
            parts.append(_owned_by(arg, ctx))
        elif name == "start":
            parts.append(f"START WITH {int(arg)}")
        elif name == "restart":
            parts.append(f"RESTART WITH {int(arg)}" if arg is not None else "RESTART")
        else:
            logger.debug("sequence option %s has no rendering", name)
    return parts


@_render.register(n.CreateSeqStmt)
def _create_sequence(node: n.CreateSeqStmt, ctx: _Context) -> DeparseResult:
    parts = ["CREATE", *_persistence(node.sequence), "SEQUENCE"]
    parts.append(range_var_to_text(node.sequence, ctx.search_path))
    parts.extend(_seq_options(node.options, ctx))
    return _result(
        " ".join(parts) + ";",
        range_var_namespace(node.sequence, ctx.search_path),
        node.sequence.relname,
    )


@_render.register(n.AlterSeqStmt)
def _alter_sequence(node: n.AlterSeqStmt, ctx: _Context) -> DeparseResult:
    parts = ["ALTER SEQUENCE"]
    if node.missing_ok:
        parts.append("IF EXISTS")
    parts.append(range_var_to_text(node.sequence, ctx.search_path))
    parts.extend(_seq_options(node.options, ctx))
    return _result(
        " ".join(parts) + ";",
        range_var_namespace(node.sequence, ctx.search_path),
        node.sequence.relname,
    )


# --- CREATE INDEX --------------------------------------------------------------


def _rel_options(options: Iterable[n.DefElem], null_is_true: bool) -> str:
    rendered = []
    for opt in options:
        if opt.arg is not None:
            value = opt.arg
            if isinstance(value, bool):
                value = "true" if value else "false"
            rendered.append(f"{opt.defname}={value}")
        elif null_is_true:
            rendered.append(f"{opt.defname}=true")
        else:
            rendered.append(opt.defname)
    return ", ".join(rendered)


def _index_elem(elem: n.IndexElem, ctx: _Context) -> str:
    if elem.name:
        text = quote_identifier(elem.name)
    elif elem.expr is not None:
        text = f"({ctx.expr(elem.expr)})"
    else:
        raise DeparseError("index element without a column or expression")
    if elem.collation:
        text += f" COLLATE {_dotted(elem.collation)}"
    if elem.opclass:
        text += f" {_dotted(elem.opclass)}"
    if elem.ordering is not n.SortOrder.DEFAULT:
        text += f" {elem.ordering.value}"
    if elem.nulls_ordering is not n.NullsOrder.DEFAULT:
        text += f" NULLS {elem.nulls_ordering.value}"
    return text


@_render.register(n.IndexStmt)
def _create_index(node: n.IndexStmt, ctx: _Context) -> DeparseResult:
    parts = ["CREATE UNIQUE INDEX" if node.unique else "CREATE INDEX"]
    if node.concurrent:
        parts.append("CONCURRENTLY")
    if node.idxname:
        parts.append(quote_identifier(node.idxname))
    parts.append(f"ON {range_var_to_text(node.relation, ctx.search_path)}")
    parts.append(f"USING {node.access_method}")
    parts.append("(" + ", ".join(_index_elem(e, ctx) for e in node.index_params) + ")")
    if node.options:
        parts.append(f"WITH ({_rel_options(node.options, True)})")
    if node.tablespace:
        parts.append(f"TABLESPACE {quote_identifier(node.tablespace)}")
    if node.where_clause is not None:
        parts.append(f"WHERE ({ctx.expr(node.where_clause)})")
    # the engine picks the name of anonymous indexes, report the table then
    return _result(
        " ".join(parts) + ";",
        range_var_namespace(node.relation, ctx.search_path),
        node.idxname or node.relation.relname,
    )


# --- CREATE FUNCTION -----------------------------------------------------------

_VOLATILITY = {"immutable": "IMMUTABLE", "stable": "STABLE", "volatile": "VOLATILE"}
_DOLLAR_TAG = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _func_arg(param: n.FunctionParameter, ctx: _Context) -> str:
    parts = [param.mode.value]
    if param.name:
        parts.append(quote_identifier(param.name))
    parts.append(type_name_to_text(param.arg_type))
    if param.defexpr is not None:
        parts.append(f"DEFAULT {ctx.expr(param.defexpr)}")
    return " ".join(parts)


def _float_text(value: Any) -> str:
    return format(float(value), "g")


def _dollar_quote(body: str, name: str) -> str:
    tag = name if _DOLLAR_TAG.match(name) else "body"
    while f"${tag}$" in body:
        tag += "_"
    return f"${tag}${body}${tag}$"


def _function_body(arg: Any, name: str) -> str:
    if isinstance(arg, (tuple, list)):
        if len(arg) == 2:
            # object file and link symbol of a C function
            return ", ".join(quote_literal(part) for part in arg)
        if len(arg) != 1:
            raise DeparseError("only one AS item needed for this function")
        arg = arg[0]
    return _dollar_quote(str(arg), name)


@_render.register(n.CreateFunctionStmt)
def _create_function(node: n.CreateFunctionStmt, ctx: _Context) -> DeparseResult:
    schema, name = _qualified_name(node.funcname, ctx)
    options = {opt.defname: opt.arg for opt in node.options}
    language = options.get("language")
    if not language:
        raise DeparseError("no language specified")
    if options.get("as") is None:
        raise DeparseError("no function body specified")
    language = str(language).lower()

    args = [p for p in node.parameters if p.mode is not n.FunctionParameterMode.TABLE]
    columns = [p for p in node.parameters if p.mode is n.FunctionParameterMode.TABLE]

    parts = [
        "CREATE OR REPLACE FUNCTION" if node.replace else "CREATE FUNCTION",
        _schema_dot_name(schema, name)
        + "("
        + ", ".join(_func_arg(p, ctx) for p in args)
        + ")",
    ]

    returns_set = bool(columns)
    if columns:
        if not all(p.name for p in columns):
            raise DeparseError("RETURNS TABLE column without a name")
        table = ", ".join(
            f"{quote_identifier(p.name)} {type_name_to_text(p.arg_type)}" for p in columns
        )
        parts.append(f"RETURNS TABLE ({table})")
    elif node.return_type is not None:
        returns_set = node.return_type.setof
        parts.append(f"RETURNS {type_name_to_text(node.return_type)}")

    parts.append(f"LANGUAGE {quote_identifier(language)}")
    if options.get("window"):
        parts.append("WINDOW")

    volatility = str(options.get("volatility") or "volatile").lower()
    if volatility not in _VOLATILITY:
        raise DeparseError(f"invalid volatility {volatility!r}")
    parts.append(_VOLATILITY[volatility])
    parts.append("LEAKPROOF" if options.get("leakproof") else "NOT LEAKPROOF")
    parts.append(
        "RETURNS NULL ON NULL INPUT" if options.get("strict") else "CALLED ON NULL INPUT"
    )
    if options.get("security"):
        parts.append("SECURITY DEFINER")

    # engine defaults: cost 1 for C and internal functions, 100 otherwise
    cost = options.get("cost")
    if cost is None:
        cost = 1 if language in ("c", "internal") else 100
    parts.append(f"COST {_float_text(cost)}")
    if returns_set:
        parts.append(f"ROWS {_float_text(options.get('rows') or 1000)}")

    if options.get("set"):
        logger.debug("function option SET has no rendering")

    parts.append(f"AS {_function_body(options['as'], name)}")
    return _result(" ".join(parts) + ";", schema, name)


# --- CREATE TABLE --------------------------------------------------------------


def _column_list(names: Sequence[str]) -> str:
    return "(" + ", ".join(quote_identifier(name) for name in names) + ")"


def _deferrability(con: n.Constraint) -> list[str]:
    parts = []
    if con.deferrable:
        parts.append("DEFERRABLE")
    if con.initdeferred:
        parts.append("INITIALLY DEFERRED")
    return parts


def _column_constraint(con: n.Constraint, ctx: _Context) -> list[str]:
    parts = []
    if con.conname:
        parts.append(f"CONSTRAINT {quote_identifier(con.conname)}")

    ct = con.contype
    if ct in (CT.NOT_NULL, CT.NULL):
        parts.append(ct.value)
    elif ct is CT.UNIQUE:
        parts.append("UNIQUE")
        if con.indexspace:
            parts.append(f"USING INDEX TABLESPACE {quote_identifier(con.indexspace)}")
    elif ct is CT.PRIMARY:
        parts.append("PRIMARY KEY")
        if con.keys:
            parts.append(_column_list(con.keys))
        if con.indexspace:
            parts.append(f"USING INDEX TABLESPACE {quote_identifier(con.indexspace)}")
    elif ct is CT.CHECK:
        parts.append(f"CHECK ({ctx.expr(con.raw_expr)})")
    elif ct is CT.DEFAULT:
        if con.raw_expr is not None:
            parts.append(f"DEFAULT {ctx.expr(con.raw_expr)}")
    elif ct is CT.EXCLUSION:
        parts.append("EXCLUDE")
        if con.access_method:
            parts.append(f"USING {con.access_method}")
    elif ct is CT.FOREIGN:
        if con.pktable is None:
            raise DeparseError("REFERENCES constraint without a referenced table")
        parts.append(f"REFERENCES {range_var_to_text(con.pktable, ctx.search_path)}")
    else:
        # ATTR_* markers follow the constraint they qualify
        parts.append(ct.value)

    if ct not in (CT.NOT_NULL, CT.NULL, CT.DEFAULT):
        parts.extend(_deferrability(con))
    return parts


def _table_constraint(con: n.Constraint, ctx: _Context) -> str:
    parts = []
    if con.conname:
        parts.append(f"CONSTRAINT {quote_identifier(con.conname)}")

    ct = con.contype
    if ct is CT.CHECK:
        parts.append(f"CHECK ({ctx.expr(con.raw_expr)})")
    elif ct in (CT.UNIQUE, CT.PRIMARY):
        parts.append(ct.value)
        if con.keys:
            parts.append(_column_list(con.keys))
            if con.options:
                parts.append(f"WITH ({_rel_options(con.options, True)})")
            if con.indexspace:
                parts.append(
                    f"USING INDEX TABLESPACE {quote_identifier(con.indexspace)}"
                )
        elif con.indexname:
            parts.append(f"USING INDEX {quote_identifier(con.indexname)}")
    elif ct is CT.EXCLUSION:
        parts.append("EXCLUDE")
        if con.access_method:
            parts.append(f"USING {con.access_method}")
    elif ct is CT.FOREIGN:
        if con.pktable is None:
            raise DeparseError("FOREIGN KEY constraint without a referenced table")
        parts.append(f"FOREIGN KEY {_column_list(con.fk_attrs)}")
        parts.append(f"REFERENCES {range_var_to_text(con.pktable, ctx.search_path)}")
        if con.pk_attrs:
            parts.append(_column_list(con.pk_attrs))
        parts.append(f"MATCH {con.fk_matchtype.value}")
        parts.append(f"ON UPDATE {con.fk_upd_action.value}")
        parts.append(f"ON DELETE {con.fk_del_action.value}")
    else:
        return " ".join(_column_constraint(con, ctx))

    parts.extend(_deferrability(con))
    if ct is CT.FOREIGN and con.skip_validation:
        parts.append("NOT VALID")
    return " ".join(parts)


def _column_def(col: n.ColumnDef, ctx: _Context) -> str:
    parts = [quote_identifier(col.colname), type_name_to_text(col.type_name)]
    explicit = {con.contype for con in col.constraints}
    if col.is_not_null and CT.NOT_NULL not in explicit:
        parts.append("NOT NULL")
    if col.raw_default is not None and CT.DEFAULT not in explicit:
        parts.append(f"DEFAULT {ctx.expr(col.raw_default)}")
    for con in col.constraints:
        parts.extend(_column_constraint(con, ctx))
    return " ".join(parts)


def _like_clause(like: n.TableLikeClause, ctx: _Context) -> str:
    text = f"LIKE {range_var_to_text(like.relation, ctx.search_path)}"
    if like.options and like.options == frozenset(n.LikeOption):
        return text + " INCLUDING ALL"
    for option in n.LikeOption:
        if option in like.options:
            text += f" INCLUDING {option.value}"
    return text


def _table_element(elt: Any, ctx: _Context) -> str:
    if isinstance(elt, n.ColumnDef):
        return _column_def(elt, ctx)
    if isinstance(elt, n.TableLikeClause):
        return _like_clause(elt, ctx)
    if isinstance(elt, n.Constraint):
        return _table_constraint(elt, ctx)
    raise DeparseError(f"unexpected table element {type(elt).__name__}")


def _typed_table_elements(node: n.CreateStmt, ctx: _Context) -> list[str]:
    elements = []
    for elt in (*node.table_elts, *node.constraints):
        if isinstance(elt, n.ColumnDef):
            if elt.constraints:
                options = " ".join(
                    part for con in elt.constraints for part in _column_constraint(con, ctx)
                )
                elements.append(f"{quote_identifier(elt.colname)} WITH OPTIONS {options}")
        elif isinstance(elt, n.Constraint):
            elements.append(_table_constraint(elt, ctx))
    return elements


@_render.register(n.CreateStmt)
def _create_table(node: n.CreateStmt, ctx: _Context) -> DeparseResult:
    rel = node.relation
    parts = ["CREATE", *_persistence(rel), "TABLE"]
    if node.if_not_exists:
        parts.append("IF NOT EXISTS")

    if rel.persistence is n.Persistence.TEMP:
        schema = "pg_temp"
        parts.append(f"pg_temp.{quote_identifier(rel.relname)}")
    else:
        schema = range_var_namespace(rel, ctx.search_path)
        parts.append(range_var_to_text(rel, ctx.search_path))

    if node.of_typename is not None:
        parts.append(f"OF {type_name_to_text(node.of_typename)}")
        elements = _typed_table_elements(node, ctx)
        if elements:
            parts.append("(" + ", ".join(elements) + ")")
    else:
        elements = [_table_element(e, ctx) for e in (*node.table_elts, *node.constraints)]
        parts.append("(" + ", ".join(elements) + ")")
        if node.inh_relations:
            parents = ", ".join(
                range_var_to_text(parent, ctx.search_path) for parent in node.inh_relations
            )
            parts.append(f"INHERITS ({parents})")

    if node.options:
        parts.append(f"WITH ({_rel_options(node.options, True)})")
    if node.oncommit is not n.OnCommit.NOOP:
        parts.append(f"ON COMMIT {node.oncommit.value}")
    if node.tablespacename:
        parts.append(f"TABLESPACE {quote_identifier(node.tablespacename)}")

    return _result(" ".join(parts) + ";", schema, rel.relname)


# --- ALTER TABLE -------------------------------------------------------------

_RELKIND_KEYWORDS = {
    ObjectKind.TABLE: "TABLE",
    ObjectKind.INDEX: "INDEX",
    ObjectKind.SEQUENCE: "SEQUENCE",
    ObjectKind.VIEW: "VIEW",
    ObjectKind.FOREIGN_TABLE: "FOREIGN TABLE",
}

# Sub-actions rendered as "<keyword> <name>".
_NAMED_ACTIONS = frozenset(
    {
        AT.VALIDATE_CONSTRAINT,
        AT.CHANGE_OWNER,
        AT.CLUSTER_ON,
        AT.SET_TABLESPACE,
        AT.ENABLE_TRIGGER,
        AT.ENABLE_ALWAYS_TRIGGER,
        AT.ENABLE_REPLICA_TRIGGER,
        AT.DISABLE_TRIGGER,
        AT.ENABLE_RULE,
        AT.ENABLE_ALWAYS_RULE,
        AT.ENABLE_REPLICA_RULE,
        AT.DISABLE_RULE,
    }
)

# Sub-actions rendered as their keyword alone.
_BARE_ACTIONS = frozenset(
    {
        AT.DROP_CLUSTER,
        AT.ADD_OIDS,
        AT.DROP_OIDS,
        AT.ENABLE_TRIGGER_ALL,
        AT.DISABLE_TRIGGER_ALL,
        AT.ENABLE_TRIGGER_USER,
        AT.DISABLE_TRIGGER_USER,
        AT.DROP_OF,
    }
)


def _column_type(definition: Any) -> n.TypeName:
    if isinstance(definition, n.ColumnDef):
        return definition.type_name
    if isinstance(definition, n.TypeName):
        return definition
    raise DeparseError(f"expected a column definition, got {type(definition).__name__}")


def _alter_table_cmd(cmd: n.AlterTableCmd, ctx: _Context) -> str | None:
    sub = cmd.subtype
    name = quote_identifier(cmd.name) if cmd.name else ""

    if sub in _NAMED_ACTIONS:
        return f"{sub.value} {name}"
    if sub in _BARE_ACTIONS:
        return sub.value

    if sub is AT.ADD_COLUMN:
        if not isinstance(cmd.definition, n.ColumnDef):
            raise DeparseError("ADD COLUMN without a column definition")
        return f"ADD COLUMN {_column_def(cmd.definition, ctx)}"
    if sub is AT.COLUMN_DEFAULT:
        if cmd.definition is None:
            return f"ALTER {name} DROP DEFAULT"
        return f"ALTER {name} SET DEFAULT {ctx.expr(cmd.definition)}"
    if sub is AT.DROP_NOT_NULL:
        return f"ALTER {name} DROP NOT NULL"
    if sub is AT.SET_NOT_NULL:
        return f"ALTER {name} SET NOT NULL"
    if sub is AT.SET_STATISTICS:
        return f"ALTER {name} SET STATISTICS {int(cmd.definition)}"
    if sub is AT.SET_STORAGE:
        return f"ALTER {name} SET STORAGE {str(cmd.definition).upper()}"
    if sub is AT.SET_OPTIONS:
        return f"ALTER COLUMN {name} SET ({_rel_options(cmd.definition or (), True)})"
    if sub is AT.RESET_OPTIONS:
        return f"ALTER COLUMN {name} RESET ({_rel_options(cmd.definition or (), False)})"
    if sub is AT.DROP_COLUMN:
        return "DROP{} {}{}".format(
            " IF EXISTS" if cmd.missing_ok else "", name, " CASCADE" if cmd.cascade else ""
        )
    if sub is AT.DROP_CONSTRAINT:
        return "DROP CONSTRAINT{} {}{}".format(
            " IF EXISTS" if cmd.missing_ok else "", name, " CASCADE" if cmd.cascade else ""
        )
    if sub is AT.ALTER_COLUMN_TYPE:
        text = f"ALTER {name} TYPE {type_name_to_text(_column_type(cmd.definition))}"
        using = getattr(cmd.definition, "raw_default", None)
        if using is not None:
            text += f" USING {ctx.expr(using)}"
        return text
    if sub in (AT.ADD_INHERIT, AT.DROP_INHERIT):
        if not isinstance(cmd.definition, n.RangeVar):
            raise DeparseError(f"{sub.value} without a parent relation")
        return f"{sub.value} {range_var_to_text(cmd.definition, ctx.search_path)}"
    if sub is AT.ADD_OF:
        return f"OF {type_name_to_text(_column_type(cmd.definition))}"

    # ADD INDEX, ADD CONSTRAINT, rel-options and generic options
    logger.debug("ALTER TABLE sub-action %s has no rendering", sub.value)
    return None


@_render.register(n.AlterTableStmt)
def _alter_table(node: n.AlterTableStmt, ctx: _Context) -> DeparseResult | _Marker:
    keyword = _RELKIND_KEYWORDS.get(node.relkind)
    if keyword is None:
        return NOT_AVAILABLE

    fragments = [
        fragment
        for fragment in (_alter_table_cmd(cmd, ctx) for cmd in node.cmds)
        if fragment
    ]
    text = f"ALTER {keyword} {range_var_to_text(node.relation, ctx.search_path)}"
    if fragments:
        text += " " + ", ".join(fragments)
    return _result(
        text + ";",
        range_var_namespace(node.relation, ctx.search_path),
        node.relation.relname,
    )


# --- target identification -----------------------------------------------------

_NAME_FIELDS = (
    "trigname",
    "rulename",
    "idxname",
    "extname",
    "plname",
    "fdwname",
    "servername",
    "schemaname",
)
_UNQUALIFIED_FIELDS = frozenset({"extname", "plname", "fdwname", "servername", "schemaname"})
_RANGE_VAR_FIELDS = ("relation", "view", "sequence", "into", "typevar")
_DOTTED_FIELDS = (
    "funcname",
    "defnames",
    "domainname",
    "type_name",
    "conversion_name",
    "opclassname",
    "opfamilyname",
    "dictname",
    "cfgname",
    "object",
)


def identify_target(
    node: n.Node, search_path: Sequence[str] = ()
) -> tuple[str | None, str | None]:
    """
    Best effort (schema, object) pair a command touches, read from the node.

    Used when no text could be produced so that callbacks still get the
    names of the target.
    """
    if isinstance(node, n.DropStmt) and node.objects:
        obj = node.objects[-1]
        if node.remove_type in n.RELATION_KINDS:
            rel = n.RangeVar.from_names(obj)
            return range_var_namespace(rel, search_path), rel.relname
        return (obj[-2] if len(obj) > 1 else None), obj[-1]

    schema_hint: str | None = None
    for attr in _RANGE_VAR_FIELDS:
        rel = getattr(node, attr, None)
        if isinstance(rel, n.RangeVar):
            schema_hint = range_var_namespace(rel, search_path)
            break

    for attr in _NAME_FIELDS:
        value = getattr(node, attr, None)
        if isinstance(value, str) and value:
            if attr in _UNQUALIFIED_FIELDS:
                return None, value
            return schema_hint, value

    for attr in _RANGE_VAR_FIELDS:
        rel = getattr(node, attr, None)
        if isinstance(rel, n.RangeVar):
            return range_var_namespace(rel, search_path), rel.relname

    for attr in _DOTTED_FIELDS:
        value = getattr(node, attr, None)
        if isinstance(value, n.TypeName):
            value = value.names
        if isinstance(value, tuple) and value and all(isinstance(v, str) for v in value):
            return (value[-2] if len(value) > 1 else None), value[-1]

    return None, None
