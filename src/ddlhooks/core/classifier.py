"""Command classification.

Maps a statement node, plus the object kind for polymorphic statements, to
the CommandKind used to look up event triggers. The mapping is a pair of
static tables: one keyed by node class alone for statements that can only
ever mean one command, and one keyed by (node class, object kind) for the
generic DROP / RENAME / SET SCHEMA / OWNER TO / DEFINE / ALTER statements.
"""

from __future__ import annotations

from ddlhooks.core import nodes as n
from ddlhooks.core.errors import UnsupportedCommandError
from ddlhooks.core.nodes import ObjectKind as O
from ddlhooks.core.taxonomy import CommandKind as K

_SINGLE_KIND: dict[type[n.Node], K] = {
    n.CreateStmt: K.CREATE_TABLE,
    n.ViewStmt: K.CREATE_VIEW,
    n.CreateExtensionStmt: K.CREATE_EXTENSION,
    n.CreateSeqStmt: K.CREATE_SEQUENCE,
    n.AlterSeqStmt: K.ALTER_SEQUENCE,
    n.IndexStmt: K.CREATE_INDEX,
    n.CreateSchemaStmt: K.CREATE_SCHEMA,
    n.CreateConversionStmt: K.CREATE_CONVERSION,
    n.CreateFunctionStmt: K.CREATE_FUNCTION,
    n.AlterFunctionStmt: K.ALTER_FUNCTION,
    n.CreateTrigStmt: K.CREATE_TRIGGER,
    n.RuleStmt: K.CREATE_RULE,
    n.CreateDomainStmt: K.CREATE_DOMAIN,
    n.AlterDomainStmt: K.ALTER_DOMAIN,
    n.CompositeTypeStmt: K.CREATE_TYPE,
    n.CreateEnumStmt: K.CREATE_TYPE,
    n.AlterEnumStmt: K.ALTER_TYPE,
    n.CreateCastStmt: K.CREATE_CAST,
    n.CreateOpClassStmt: K.CREATE_OPERATOR_CLASS,
    n.CreateOpFamilyStmt: K.CREATE_OPERATOR_FAMILY,
    n.AlterOpFamilyStmt: K.ALTER_OPERATOR_FAMILY,
    n.CreatePLangStmt: K.CREATE_LANGUAGE,
    n.CreateFdwStmt: K.CREATE_FOREIGN_DATA_WRAPPER,
    n.AlterFdwStmt: K.ALTER_FOREIGN_DATA_WRAPPER,
    n.CreateForeignServerStmt: K.CREATE_SERVER,
    n.AlterForeignServerStmt: K.ALTER_SERVER,
    n.CreateForeignTableStmt: K.CREATE_FOREIGN_TABLE,
    n.CreateUserMappingStmt: K.CREATE_USER_MAPPING,
    n.AlterUserMappingStmt: K.ALTER_USER_MAPPING,
    n.DropUserMappingStmt: K.DROP_USER_MAPPING,
    n.AlterExtensionStmt: K.ALTER_EXTENSION,
    n.AlterExtensionContentsStmt: K.ALTER_EXTENSION,
    n.AlterTSDictionaryStmt: K.ALTER_TEXT_SEARCH_DICTIONARY,
    n.AlterTSConfigurationStmt: K.ALTER_TEXT_SEARCH_CONFIGURATION,
    n.ClusterStmt: K.CLUSTER,
    n.VacuumStmt: K.VACUUM,
    n.ReindexStmt: K.REINDEX,
    n.LoadStmt: K.LOAD,
}

_DROP = {
    O.AGGREGATE: K.DROP_AGGREGATE,
    O.CAST: K.DROP_CAST,
    O.COLLATION: K.DROP_COLLATION,
    O.CONVERSION: K.DROP_CONVERSION,
    O.DOMAIN: K.DROP_DOMAIN,
    O.EXTENSION: K.DROP_EXTENSION,
    O.FOREIGN_DATA_WRAPPER: K.DROP_FOREIGN_DATA_WRAPPER,
    O.FOREIGN_SERVER: K.DROP_SERVER,
    O.FOREIGN_TABLE: K.DROP_FOREIGN_TABLE,
    O.FUNCTION: K.DROP_FUNCTION,
    O.INDEX: K.DROP_INDEX,
    O.LANGUAGE: K.DROP_LANGUAGE,
    O.OPERATOR: K.DROP_OPERATOR,
    O.OPCLASS: K.DROP_OPERATOR_CLASS,
    O.OPFAMILY: K.DROP_OPERATOR_FAMILY,
    O.RULE: K.DROP_RULE,
    O.SCHEMA: K.DROP_SCHEMA,
    O.SEQUENCE: K.DROP_SEQUENCE,
    O.TABLE: K.DROP_TABLE,
    O.TSPARSER: K.DROP_TEXT_SEARCH_PARSER,
    O.TSCONFIGURATION: K.DROP_TEXT_SEARCH_CONFIGURATION,
    O.TSDICTIONARY: K.DROP_TEXT_SEARCH_DICTIONARY,
    O.TSTEMPLATE: K.DROP_TEXT_SEARCH_TEMPLATE,
    O.TRIGGER: K.DROP_TRIGGER,
    O.TYPE: K.DROP_TYPE,
    O.VIEW: K.DROP_VIEW,
}

# RENAME, SET SCHEMA and OWNER TO all report the ALTER <kind> tag.
_ALTER = {
    O.AGGREGATE: K.ALTER_AGGREGATE,
    O.COLLATION: K.ALTER_COLLATION,
    O.CONVERSION: K.ALTER_CONVERSION,
    O.DOMAIN: K.ALTER_DOMAIN,
    O.EXTENSION: K.ALTER_EXTENSION,
    O.FOREIGN_DATA_WRAPPER: K.ALTER_FOREIGN_DATA_WRAPPER,
    O.FOREIGN_SERVER: K.ALTER_SERVER,
    O.FOREIGN_TABLE: K.ALTER_FOREIGN_TABLE,
    O.FUNCTION: K.ALTER_FUNCTION,
    O.INDEX: K.ALTER_INDEX,
    O.LANGUAGE: K.ALTER_LANGUAGE,
    O.OPERATOR: K.ALTER_OPERATOR,
    O.OPCLASS: K.ALTER_OPERATOR_CLASS,
    O.OPFAMILY: K.ALTER_OPERATOR_FAMILY,
    O.RULE: K.ALTER_RULE,
    O.SCHEMA: K.ALTER_SCHEMA,
    O.SEQUENCE: K.ALTER_SEQUENCE,
    O.TABLE: K.ALTER_TABLE,
    O.COLUMN: K.ALTER_TABLE,
    O.CONSTRAINT: K.ALTER_TABLE,
    O.TSPARSER: K.ALTER_TEXT_SEARCH_PARSER,
    O.TSCONFIGURATION: K.ALTER_TEXT_SEARCH_CONFIGURATION,
    O.TSDICTIONARY: K.ALTER_TEXT_SEARCH_DICTIONARY,
    O.TSTEMPLATE: K.ALTER_TEXT_SEARCH_TEMPLATE,
    O.TRIGGER: K.ALTER_TRIGGER,
    O.TYPE: K.ALTER_TYPE,
    O.VIEW: K.ALTER_VIEW,
}

_ALTER_RELATION = {
    O.TABLE: K.ALTER_TABLE,
    O.INDEX: K.ALTER_INDEX,
    O.SEQUENCE: K.ALTER_SEQUENCE,
    O.VIEW: K.ALTER_VIEW,
    O.FOREIGN_TABLE: K.ALTER_FOREIGN_TABLE,
}

_DEFINE = {
    O.AGGREGATE: K.CREATE_AGGREGATE,
    O.COLLATION: K.CREATE_COLLATION,
    O.OPERATOR: K.CREATE_OPERATOR,
    O.TYPE: K.CREATE_TYPE,
    O.TSPARSER: K.CREATE_TEXT_SEARCH_PARSER,
    O.TSCONFIGURATION: K.CREATE_TEXT_SEARCH_CONFIGURATION,
    O.TSDICTIONARY: K.CREATE_TEXT_SEARCH_DICTIONARY,
    O.TSTEMPLATE: K.CREATE_TEXT_SEARCH_TEMPLATE,
}

_POLYMORPHIC: dict[type[n.Node], tuple[str, dict[n.ObjectKind, K]]] = {
    n.DropStmt: ("remove_type", _DROP),
    n.RenameStmt: ("rename_type", _ALTER),
    n.AlterObjectSchemaStmt: ("object_type", _ALTER),
    n.AlterOwnerStmt: ("object_type", _ALTER),
    n.AlterTableStmt: ("relkind", _ALTER_RELATION),
    n.DefineStmt: ("kind", _DEFINE),
}


def classify(node: n.Node, sub_kind: n.ObjectKind | None = None) -> K:
    """
    Return the CommandKind of a statement node.

    For polymorphic statements, `sub_kind` names the kind of object being
    dropped, renamed, moved, re-owned or defined. When omitted it is read
    from the node itself.

    Raises:
        UnsupportedCommandError: If the statement carries no event trigger
            support. Callers treat this as "fire nothing".
    """
    node_type = type(node)

    if node_type is n.CreateTableAsStmt:
        return K.SELECT_INTO if node.is_select_into else K.CREATE_TABLE_AS

    kind = _SINGLE_KIND.get(node_type)
    if kind is not None:
        return kind

    entry = _POLYMORPHIC.get(node_type)
    if entry is None:
        raise UnsupportedCommandError(
            f"{node_type.__name__} does not support event triggers"
        )

    attr, table = entry
    if sub_kind is None:
        sub_kind = getattr(node, attr)
    kind = table.get(sub_kind)
    if kind is None:
        raise UnsupportedCommandError(
            f"{node_type.__name__} on {sub_kind.value} does not support event triggers"
        )
    return kind


def classify_or_none(node: n.Node, sub_kind: n.ObjectKind | None = None) -> K | None:
    """Return the CommandKind of a node, or None when it has no trigger support."""
    try:
        return classify(node, sub_kind)
    except UnsupportedCommandError:
        return None


def classifiable_shapes() -> list[tuple[type[n.Node], n.ObjectKind | None]]:
    """
    Enumerate every (node class, object kind) pair the classifier maps.

    Single-kind statements are listed with an object kind of None.
    """
    shapes: list[tuple[type[n.Node], n.ObjectKind | None]] = [
        (node_type, None) for node_type in _SINGLE_KIND
    ]
    shapes.append((n.CreateTableAsStmt, None))
    for node_type, (_, table) in _POLYMORPHIC.items():
        shapes.extend((node_type, sub_kind) for sub_kind in table)
    return shapes
