"""Structured representation of administrative commands.

These models mirror the shape of parsed utility statements closely enough
for classification and deparsing. They are produced by an external parser
(or decoded from JSON by the CLI), are immutable, and never persisted.

Expressions and queries embedded in statements are opaque to this module:
they are handed as-is to an ExpressionDeparser when text is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Expr = Any


class ObjectKind(str, Enum):
    """Kind of database object a polymorphic statement applies to."""

    AGGREGATE = "AGGREGATE"
    CAST = "CAST"
    COLLATION = "COLLATION"
    COLUMN = "COLUMN"
    CONSTRAINT = "CONSTRAINT"
    CONVERSION = "CONVERSION"
    DATABASE = "DATABASE"
    DOMAIN = "DOMAIN"
    EVENT_TRIGGER = "EVENT TRIGGER"
    EXTENSION = "EXTENSION"
    FOREIGN_DATA_WRAPPER = "FOREIGN DATA WRAPPER"
    FOREIGN_SERVER = "SERVER"
    FOREIGN_TABLE = "FOREIGN TABLE"
    FUNCTION = "FUNCTION"
    INDEX = "INDEX"
    LANGUAGE = "LANGUAGE"
    OPCLASS = "OPERATOR CLASS"
    OPERATOR = "OPERATOR"
    OPFAMILY = "OPERATOR FAMILY"
    ROLE = "ROLE"
    RULE = "RULE"
    SCHEMA = "SCHEMA"
    SEQUENCE = "SEQUENCE"
    TABLE = "TABLE"
    TABLESPACE = "TABLESPACE"
    TRIGGER = "TRIGGER"
    TSCONFIGURATION = "TEXT SEARCH CONFIGURATION"
    TSDICTIONARY = "TEXT SEARCH DICTIONARY"
    TSPARSER = "TEXT SEARCH PARSER"
    TSTEMPLATE = "TEXT SEARCH TEMPLATE"
    TYPE = "TYPE"
    USER_MAPPING = "USER MAPPING"
    VIEW = "VIEW"


RELATION_KINDS = frozenset(
    {
        ObjectKind.TABLE,
        ObjectKind.VIEW,
        ObjectKind.INDEX,
        ObjectKind.SEQUENCE,
        ObjectKind.FOREIGN_TABLE,
    }
)


class Persistence(str, Enum):
    PERMANENT = "p"
    UNLOGGED = "u"
    TEMP = "t"


@dataclass(frozen=True)
class RangeVar:
    """A possibly qualified relation name."""

    relname: str
    schemaname: str | None = None
    catalogname: str | None = None
    persistence: Persistence = Persistence.PERMANENT

    @classmethod
    def from_names(cls, names: tuple[str, ...] | list[str]) -> RangeVar:
        """Build a RangeVar from a 1 to 3 part dotted name list."""
        names = tuple(names)
        if len(names) == 1:
            return cls(relname=names[0])
        if len(names) == 2:
            return cls(relname=names[1], schemaname=names[0])
        if len(names) == 3:
            return cls(relname=names[2], schemaname=names[1], catalogname=names[0])
        raise ValueError(f"improper relation name (too many dotted names): {names}")


@dataclass(frozen=True)
class TypeName:
    """
    A type reference as written in a statement.

    Attributes:
        names: Dotted name parts, e.g. ("pg_catalog", "int4") or ("integer",).
        typmods: Type modifiers such as (300,) for varchar(300).
        array_bounds: One entry per array dimension; -1 for unspecified.
        setof: True for SETOF return types.
        pct_type: True for %TYPE references.
    """

    names: tuple[str, ...]
    typmods: tuple[Any, ...] = ()
    array_bounds: tuple[int, ...] = ()
    setof: bool = False
    pct_type: bool = False

    @classmethod
    def of(cls, name: str, *typmods: Any) -> TypeName:
        return cls(names=tuple(name.split(".")), typmods=tuple(typmods))

    def qualified(self) -> tuple[str | None, str]:
        """Split the dotted name into (schema, type name)."""
        if len(self.names) == 1:
            return None, self.names[0]
        return self.names[-2], self.names[-1]


@dataclass(frozen=True)
class DefElem:
    """A generic `name [= value]` option."""

    defname: str
    arg: Any = None


class ConstraintType(str, Enum):
    NULL = "NULL"
    NOT_NULL = "NOT NULL"
    DEFAULT = "DEFAULT"
    CHECK = "CHECK"
    PRIMARY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    EXCLUSION = "EXCLUDE"
    FOREIGN = "FOREIGN KEY"
    ATTR_DEFERRABLE = "DEFERRABLE"
    ATTR_NOT_DEFERRABLE = "NOT DEFERRABLE"
    ATTR_DEFERRED = "INITIALLY DEFERRED"
    ATTR_IMMEDIATE = "INITIALLY IMMEDIATE"


class MatchType(str, Enum):
    SIMPLE = "SIMPLE"
    FULL = "FULL"
    PARTIAL = "PARTIAL"


class KeyAction(str, Enum):
    NO_ACTION = "NO ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"


@dataclass(frozen=True)
class Constraint:
    """A column or table constraint."""

    contype: ConstraintType
    conname: str | None = None
    deferrable: bool = False
    initdeferred: bool = False
    raw_expr: Expr = None
    keys: tuple[str, ...] = ()
    options: tuple[DefElem, ...] = ()
    indexname: str | None = None
    indexspace: str | None = None
    access_method: str | None = None
    pktable: RangeVar | None = None
    fk_attrs: tuple[str, ...] = ()
    pk_attrs: tuple[str, ...] = ()
    fk_matchtype: MatchType = MatchType.SIMPLE
    fk_upd_action: KeyAction = KeyAction.NO_ACTION
    fk_del_action: KeyAction = KeyAction.NO_ACTION
    skip_validation: bool = False


@dataclass(frozen=True)
class ColumnDef:
    colname: str
    type_name: TypeName
    constraints: tuple[Constraint, ...] = ()
    is_not_null: bool = False
    raw_default: Expr = None


class LikeOption(str, Enum):
    DEFAULTS = "DEFAULTS"
    CONSTRAINTS = "CONSTRAINTS"
    INDEXES = "INDEXES"
    STORAGE = "STORAGE"
    COMMENTS = "COMMENTS"


@dataclass(frozen=True)
class TableLikeClause:
    relation: RangeVar
    options: frozenset[LikeOption] = frozenset()


class OnCommit(str, Enum):
    NOOP = "NOOP"
    PRESERVE_ROWS = "PRESERVE ROWS"
    DELETE_ROWS = "DELETE ROWS"
    DROP = "DROP"


class AlterTableType(str, Enum):
    """Sub-action kinds of ALTER TABLE and friends."""

    ADD_COLUMN = "ADD COLUMN"
    COLUMN_DEFAULT = "COLUMN DEFAULT"
    DROP_NOT_NULL = "DROP NOT NULL"
    SET_NOT_NULL = "SET NOT NULL"
    SET_STATISTICS = "SET STATISTICS"
    SET_OPTIONS = "SET OPTIONS"
    RESET_OPTIONS = "RESET OPTIONS"
    SET_STORAGE = "SET STORAGE"
    DROP_COLUMN = "DROP COLUMN"
    ADD_INDEX = "ADD INDEX"
    ADD_CONSTRAINT = "ADD CONSTRAINT"
    VALIDATE_CONSTRAINT = "VALIDATE CONSTRAINT"
    DROP_CONSTRAINT = "DROP CONSTRAINT"
    ALTER_COLUMN_TYPE = "ALTER COLUMN TYPE"
    ALTER_COLUMN_GENERIC_OPTIONS = "ALTER COLUMN GENERIC OPTIONS"
    CHANGE_OWNER = "OWNER TO"
    CLUSTER_ON = "CLUSTER ON"
    DROP_CLUSTER = "SET WITHOUT CLUSTER"
    ADD_OIDS = "SET WITH OIDS"
    DROP_OIDS = "SET WITHOUT OIDS"
    SET_TABLESPACE = "SET TABLESPACE"
    SET_REL_OPTIONS = "SET REL OPTIONS"
    RESET_REL_OPTIONS = "RESET REL OPTIONS"
    ENABLE_TRIGGER = "ENABLE TRIGGER"
    ENABLE_ALWAYS_TRIGGER = "ENABLE ALWAYS TRIGGER"
    ENABLE_REPLICA_TRIGGER = "ENABLE REPLICA TRIGGER"
    DISABLE_TRIGGER = "DISABLE TRIGGER"
    ENABLE_TRIGGER_ALL = "ENABLE TRIGGER ALL"
    DISABLE_TRIGGER_ALL = "DISABLE TRIGGER ALL"
    ENABLE_TRIGGER_USER = "ENABLE TRIGGER USER"
    DISABLE_TRIGGER_USER = "DISABLE TRIGGER USER"
    ENABLE_RULE = "ENABLE RULE"
    ENABLE_ALWAYS_RULE = "ENABLE ALWAYS RULE"
    ENABLE_REPLICA_RULE = "ENABLE REPLICA RULE"
    DISABLE_RULE = "DISABLE RULE"
    ADD_INHERIT = "INHERIT"
    DROP_INHERIT = "NO INHERIT"
    ADD_OF = "OF"
    DROP_OF = "NOT OF"
    GENERIC_OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class AlterTableCmd:
    """
    One ALTER TABLE sub-action.

    `name` is the column, constraint, trigger, rule, owner or tablespace the
    action targets. `definition` carries the action payload: a ColumnDef,
    Constraint, RangeVar, expression, option list or scalar depending on
    the subtype.
    """

    subtype: AlterTableType
    name: str | None = None
    definition: Any = None
    missing_ok: bool = False
    cascade: bool = False


class SortOrder(str, Enum):
    DEFAULT = "DEFAULT"
    ASC = "ASC"
    DESC = "DESC"


class NullsOrder(str, Enum):
    DEFAULT = "DEFAULT"
    FIRST = "FIRST"
    LAST = "LAST"


@dataclass(frozen=True)
class IndexElem:
    name: str | None = None
    expr: Expr = None
    collation: tuple[str, ...] = ()
    opclass: tuple[str, ...] = ()
    ordering: SortOrder = SortOrder.DEFAULT
    nulls_ordering: NullsOrder = NullsOrder.DEFAULT


class FunctionParameterMode(str, Enum):
    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"
    VARIADIC = "VARIADIC"
    TABLE = "TABLE"


@dataclass(frozen=True)
class FunctionParameter:
    """One argument of CREATE FUNCTION; TABLE parameters form RETURNS TABLE."""

    arg_type: TypeName
    name: str | None = None
    mode: FunctionParameterMode = FunctionParameterMode.IN
    defexpr: Expr = None


class Node:
    """Marker base class for all statement nodes."""


# --- statements with deparse support -------------------------------------


@dataclass(frozen=True)
class DropStmt(Node):
    """
    DROP of one or more objects of the same kind.

    `objects` holds one dotted name per target; `arguments` holds one
    argument type list per target for functions and aggregates.
    """

    remove_type: ObjectKind
    objects: tuple[tuple[str, ...], ...]
    arguments: tuple[tuple[TypeName, ...], ...] = ()
    missing_ok: bool = False
    cascade: bool = False


@dataclass(frozen=True)
class CreateStmt(Node):
    """CREATE TABLE."""

    relation: RangeVar
    table_elts: tuple[ColumnDef | Constraint | TableLikeClause, ...] = ()
    constraints: tuple[Constraint, ...] = ()
    inh_relations: tuple[RangeVar, ...] = ()
    of_typename: TypeName | None = None
    options: tuple[DefElem, ...] = ()
    oncommit: OnCommit = OnCommit.NOOP
    tablespacename: str | None = None
    if_not_exists: bool = False


@dataclass(frozen=True)
class AlterTableStmt(Node):
    """ALTER TABLE / INDEX / SEQUENCE / VIEW / FOREIGN TABLE."""

    relation: RangeVar
    cmds: tuple[AlterTableCmd, ...] = ()
    relkind: ObjectKind = ObjectKind.TABLE
    missing_ok: bool = False


@dataclass(frozen=True)
class ViewStmt(Node):
    view: RangeVar
    query: Expr
    replace: bool = False


@dataclass(frozen=True)
class CreateExtensionStmt(Node):
    extname: str
    if_not_exists: bool = False
    options: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class CreateSeqStmt(Node):
    sequence: RangeVar
    options: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class AlterSeqStmt(Node):
    sequence: RangeVar
    options: tuple[DefElem, ...] = ()
    missing_ok: bool = False


@dataclass(frozen=True)
class IndexStmt(Node):
    relation: RangeVar
    idxname: str | None = None
    access_method: str = "btree"
    index_params: tuple[IndexElem, ...] = ()
    options: tuple[DefElem, ...] = ()
    tablespace: str | None = None
    where_clause: Expr = None
    unique: bool = False
    concurrent: bool = False


@dataclass(frozen=True)
class CreateSchemaStmt(Node):
    schemaname: str
    authid: str | None = None
    if_not_exists: bool = False


@dataclass(frozen=True)
class CreateConversionStmt(Node):
    conversion_name: tuple[str, ...]
    for_encoding_name: str
    to_encoding_name: str
    func_name: tuple[str, ...]
    default: bool = False


@dataclass(frozen=True)
class DefineStmt(Node):
    """CREATE AGGREGATE / OPERATOR / TYPE / COLLATION / TEXT SEARCH ..."""

    kind: ObjectKind
    defnames: tuple[str, ...]
    definition: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class CreateFunctionStmt(Node):
    """
    CREATE FUNCTION.

    `options` carries the function attributes as written: as, language,
    window, volatility, strict, security, leakproof, cost, rows and set.
    A missing `return_type` means the result comes from OUT parameters.
    """

    funcname: tuple[str, ...]
    parameters: tuple[FunctionParameter, ...] = ()
    return_type: TypeName | None = None
    options: tuple[DefElem, ...] = ()
    replace: bool = False


# --- polymorphic statements classified through their object kind ---------


@dataclass(frozen=True)
class RenameStmt(Node):
    rename_type: ObjectKind
    newname: str
    relation: RangeVar | None = None
    object: tuple[str, ...] = ()
    subname: str | None = None
    missing_ok: bool = False


@dataclass(frozen=True)
class AlterObjectSchemaStmt(Node):
    object_type: ObjectKind
    newschema: str
    relation: RangeVar | None = None
    object: tuple[str, ...] = ()
    missing_ok: bool = False


@dataclass(frozen=True)
class AlterOwnerStmt(Node):
    object_type: ObjectKind
    newowner: str
    relation: RangeVar | None = None
    object: tuple[str, ...] = ()


# --- single-kind statements ------------------------------------------------


@dataclass(frozen=True)
class CreateTableAsStmt(Node):
    into: RangeVar
    query: Expr = None
    is_select_into: bool = False


@dataclass(frozen=True)
class AlterFunctionStmt(Node):
    funcname: tuple[str, ...]
    actions: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class CreateTrigStmt(Node):
    trigname: str
    relation: RangeVar


@dataclass(frozen=True)
class RuleStmt(Node):
    rulename: str
    relation: RangeVar
    replace: bool = False


@dataclass(frozen=True)
class CreateDomainStmt(Node):
    domainname: tuple[str, ...]
    type_name: TypeName


@dataclass(frozen=True)
class AlterDomainStmt(Node):
    type_name: tuple[str, ...]
    subtype: str = ""


@dataclass(frozen=True)
class CompositeTypeStmt(Node):
    typevar: RangeVar
    coldeflist: tuple[ColumnDef, ...] = ()


@dataclass(frozen=True)
class CreateEnumStmt(Node):
    type_name: tuple[str, ...]
    vals: tuple[str, ...] = ()


@dataclass(frozen=True)
class AlterEnumStmt(Node):
    type_name: tuple[str, ...]
    newval: str = ""


@dataclass(frozen=True)
class CreateCastStmt(Node):
    sourcetype: TypeName
    targettype: TypeName


@dataclass(frozen=True)
class CreateOpClassStmt(Node):
    opclassname: tuple[str, ...]
    amname: str


@dataclass(frozen=True)
class CreateOpFamilyStmt(Node):
    opfamilyname: tuple[str, ...]
    amname: str


@dataclass(frozen=True)
class AlterOpFamilyStmt(Node):
    opfamilyname: tuple[str, ...]
    amname: str


@dataclass(frozen=True)
class CreatePLangStmt(Node):
    plname: str
    replace: bool = False


@dataclass(frozen=True)
class CreateFdwStmt(Node):
    fdwname: str


@dataclass(frozen=True)
class AlterFdwStmt(Node):
    fdwname: str


@dataclass(frozen=True)
class CreateForeignServerStmt(Node):
    servername: str


@dataclass(frozen=True)
class AlterForeignServerStmt(Node):
    servername: str


@dataclass(frozen=True)
class CreateForeignTableStmt(Node):
    relation: RangeVar
    servername: str


@dataclass(frozen=True)
class CreateUserMappingStmt(Node):
    username: str
    servername: str


@dataclass(frozen=True)
class AlterUserMappingStmt(Node):
    username: str
    servername: str


@dataclass(frozen=True)
class DropUserMappingStmt(Node):
    username: str
    servername: str
    missing_ok: bool = False


@dataclass(frozen=True)
class AlterExtensionStmt(Node):
    extname: str
    options: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class AlterExtensionContentsStmt(Node):
    extname: str
    action: int = 1
    objtype: ObjectKind = ObjectKind.FUNCTION
    objname: tuple[str, ...] = ()


@dataclass(frozen=True)
class AlterTSDictionaryStmt(Node):
    dictname: tuple[str, ...]
    options: tuple[DefElem, ...] = ()


@dataclass(frozen=True)
class AlterTSConfigurationStmt(Node):
    cfgname: tuple[str, ...]


@dataclass(frozen=True)
class ClusterStmt(Node):
    relation: RangeVar | None = None
    indexname: str | None = None


@dataclass(frozen=True)
class VacuumStmt(Node):
    relation: RangeVar | None = None
    va_cols: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReindexStmt(Node):
    kind: ObjectKind
    relation: RangeVar | None = None
    name: str | None = None


@dataclass(frozen=True)
class LoadStmt(Node):
    filename: str


# --- statements that never fire event triggers ----------------------------


@dataclass(frozen=True)
class CreateEventTrigStmt(Node):
    trigname: str
    eventname: str
    funcname: tuple[str, ...]
    whenclause: tuple[str, ...] = ()


@dataclass(frozen=True)
class GrantStmt(Node):
    is_grant: bool
    objtype: ObjectKind
    objects: tuple[tuple[str, ...], ...] = ()
    privileges: tuple[str, ...] = ()
    grantees: tuple[str, ...] = ()


def node_classes() -> dict[str, type[Node]]:
    """Return every statement class keyed by its class name."""
    return {cls.__name__: cls for cls in _all_subclasses(Node)}


def _all_subclasses(cls: type) -> list[type]:
    out: list[type] = []
    for sub in cls.__subclasses__():
        out.append(sub)
        out.extend(_all_subclasses(sub))
    return out
