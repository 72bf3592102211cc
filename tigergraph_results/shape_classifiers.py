# Copyright 2024-present Kensho Technologies, LLC.
"""Constructors of ResultAccessor objects, one per recognized shape of query output.

Every classifier is a pure function of the metadata it is given. Classifiers for query output
never raise on odd input: whatever they cannot decompose degrades to the unknown shape, which
reads every row as a single JSON string column.
"""
import logging
from typing import AbstractSet, Any, Hashable, List, Optional, Tuple
import warnings

from funcy import first, ldistinct

from .accumulator_types import get_accumulator_type_tag
from .extraction_directive import ExtractionDirective
from .field_paths import FieldPath, FieldPathEntry, FieldPathTable
from .result_accessor import ResultAccessor, ResultShape
from .tabular_schema import TabularSchema
from .type_mapper import ColumnType, map_tigergraph_type


logger = logging.getLogger(__name__)

VERTEX_ID_COLUMN_NAME = "v_id"
VERTEX_ATTRIBUTES_KEY = "attributes"
EDGE_FIXED_COLUMNS_DDL = "from_type STRING, from_id STRING, to_type STRING, to_id STRING"
MAP_ACCUM_KEY_COLUMN_NAME = "key"
MAP_ACCUM_VALUE_COLUMN_NAME = "value"
UNKNOWN_SHAPE_COLUMN_NAME = "results"


class _AccessorBuilder(object):
    """Accumulates aligned (column, field path) pairs for one ResultAccessor.

    Columns of the optional fixed schema come first, each read from the top-level member of the
    same name. Added columns follow them.
    """

    def __init__(self, fixed_schema: Optional[TabularSchema] = None) -> None:
        self._fixed_schema = fixed_schema if fixed_schema is not None else TabularSchema(())
        self._columns: List[Tuple[str, ColumnType]] = []
        self._entries: List[FieldPathEntry] = [
            FieldPathEntry(column.name, FieldPath.from_keys(column.name), False)
            for column in self._fixed_schema
        ]

    def add(
        self, name: str, column_type: ColumnType, path: FieldPath, recursive: bool = False
    ) -> "_AccessorBuilder":
        self._columns.append((name, column_type))
        self._entries.append(FieldPathEntry(name, path, recursive))
        return self

    def has_column(self, name: str) -> bool:
        return any(entry.name == name for entry in self._entries)

    def build(
        self, shape: ResultShape, extraction: Optional[ExtractionDirective]
    ) -> ResultAccessor:
        # The schema is built first so that duplicate names surface as InvalidSchemaError.
        schema = self._fixed_schema.merge(TabularSchema.from_pairs(self._columns))
        return ResultAccessor(shape, schema, FieldPathTable.from_entries(self._entries), extraction)


def _get_path(node: Any, *keys: str) -> Any:
    """Return the node at the given keys, or None if any step is missing."""
    current = node
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _get_type_name(node: Any) -> Optional[str]:
    """Return the type name declared by a metadata node, if it is a textual one."""
    return node if isinstance(node, str) else None


def _add_graph_schema_attributes(
    builder: _AccessorBuilder,
    meta: Any,
    element_name: Any,
    column_prune: Optional[AbstractSet[str]],
) -> None:
    """Add one column per named attribute in the graph schema metadata, honoring the prune set."""
    attributes = _get_path(meta, "Attributes")
    if not isinstance(attributes, list):
        return

    for attribute in attributes:
        attribute_name = _get_path(attribute, "AttributeName")
        if not attribute_name or not isinstance(attribute_name, str):
            warnings.warn(
                "Ignoring attribute {} of {} with no name.".format(attribute, element_name)
            )
            continue
        if column_prune is not None and attribute_name not in column_prune:
            continue
        attribute_type = _get_type_name(_get_path(attribute, "AttributeType", "Name"))
        builder.add(
            attribute_name,
            map_tigergraph_type(attribute_type),
            FieldPath.from_keys(VERTEX_ATTRIBUTES_KEY, attribute_name),
        )


def from_external_schema(
    schema: TabularSchema, extraction: Optional[ExtractionDirective] = None
) -> ResultAccessor:
    """Read the columns of a caller-supplied schema by name.

    Each column is looked up at the top level of the row first, and anywhere in the row
    (depth-first) if it is not there, since the nesting of query output rarely matches the
    column names exactly.
    """
    builder = _AccessorBuilder()
    for column in schema:
        builder.add(column.name, column.column_type, FieldPath.from_keys(column.name), True)
    logger.debug("Using the external schema %s.", schema.names)
    return builder.build(ResultShape.EXTERNAL, extraction)


def from_vertex_metadata(
    meta: Any, column_prune: Optional[AbstractSet[str]] = None
) -> ResultAccessor:
    """Build the accessor for rows of one vertex type from its graph schema metadata.

    Args:
        meta: the vertex type's schema metadata, of the form
              {"Config": {...}, "Attributes": [...], "PrimaryId": {...}, "Name": "person"},
              where each attribute is {"AttributeName": ..., "AttributeType": {"Name": ...}}.
        column_prune: optional set of attribute names to keep. All attributes are kept if None.

    Returns:
        ResultAccessor with columns v_id | attribute 1 | ... | attribute n
    """
    builder = _AccessorBuilder()
    primary_id_type = _get_type_name(_get_path(meta, "PrimaryId", "AttributeType", "Name"))
    builder.add(
        VERTEX_ID_COLUMN_NAME,
        map_tigergraph_type(primary_id_type),
        FieldPath.from_keys(VERTEX_ID_COLUMN_NAME),
    )
    _add_graph_schema_attributes(builder, meta, _get_path(meta, "Name"), column_prune)
    return builder.build(ResultShape.VERTEX, None)


def from_edge_metadata(
    meta: Any, column_prune: Optional[AbstractSet[str]] = None
) -> ResultAccessor:
    """Build the accessor for rows of one edge type from its graph schema metadata.

    Args:
        meta: the edge type's schema metadata, of the form
              {"IsDirected": false, "ToVertexTypeName": "company", "Config": {},
               "Attributes": [...], "FromVertexTypeName": "person", "Name": "worksFor"}.
        column_prune: optional set of attribute names to keep. All attributes are kept if None.

    Returns:
        ResultAccessor with columns from_type | from_id | to_type | to_id | attribute 1 | ...
    """
    builder = _AccessorBuilder(TabularSchema.from_ddl(EDGE_FIXED_COLUMNS_DDL))
    _add_graph_schema_attributes(builder, meta, _get_path(meta, "Name"), column_prune)
    return builder.build(ResultShape.EDGE, None)


def from_vertex_set_query_metadata(
    meta: Any, extraction: Optional[ExtractionDirective]
) -> ResultAccessor:
    """Build the accessor for a printed vertex expression set.

    The metadata is one vertex-shaped object, e.g.
    {"v_id": "INT", "v_type": "STRING", "attributes": {"age": "INT", "name": "STRING"}}.
    The attributes are lifted to the top level, after the other fields.
    """
    if not isinstance(meta, dict):
        return from_unknown_metadata(extraction)

    builder = _AccessorBuilder()
    attributes = {}
    for key, type_node in meta.items():
        if key == VERTEX_ATTRIBUTES_KEY:
            attributes = type_node if isinstance(type_node, dict) else {}
            continue
        if key == VERTEX_ID_COLUMN_NAME:
            # The output metadata misreports the v_id type; ids are always read as strings.
            column_type = ColumnType.STRING
        else:
            column_type = map_tigergraph_type(_get_type_name(type_node))
        builder.add(key, column_type, FieldPath.from_keys(key))

    for attribute_name, attribute_type in attributes.items():
        if builder.has_column(attribute_name):
            # An attribute shadowing a top-level field leaves no unambiguous column layout.
            return from_unknown_metadata(extraction)
        builder.add(
            attribute_name,
            map_tigergraph_type(_get_type_name(attribute_type)),
            FieldPath.from_keys(VERTEX_ATTRIBUTES_KEY, attribute_name),
        )
    return builder.build(ResultShape.VERTEX_SET, extraction)


def from_map_accum_query_metadata(
    type_signature: str, extraction: Optional[ExtractionDirective]
) -> ResultAccessor:
    """Read a printed MapAccum as key/value rows, both kept as strings.

    Map values may be arbitrarily nested accumulators, so they are not typed any further.
    """
    logger.debug("Reading %s as key/value rows.", type_signature)
    builder = _AccessorBuilder()
    builder.add(
        MAP_ACCUM_KEY_COLUMN_NAME,
        ColumnType.STRING,
        FieldPath.from_keys(MAP_ACCUM_KEY_COLUMN_NAME),
    )
    builder.add(
        MAP_ACCUM_VALUE_COLUMN_NAME,
        ColumnType.STRING,
        FieldPath.from_keys(MAP_ACCUM_VALUE_COLUMN_NAME),
    )
    return builder.build(ResultShape.MAP_ACCUM, extraction)


def from_non_map_accum_query_metadata(
    type_signature: str, extraction: Optional[ExtractionDirective]
) -> ResultAccessor:
    """Read any other printed accumulator.

    There is no structural decomposition of these accumulators yet, so they are always read
    with the unknown shape.
    """
    logger.debug(
        "No column layout for accumulator type %s (%s).",
        get_accumulator_type_tag(type_signature),
        type_signature,
    )
    return from_unknown_metadata(extraction)


def _freeze_json(node: Any) -> Hashable:
    """Return a hashable form of a JSON node that ignores the order of object members."""
    if isinstance(node, dict):
        return frozenset((key, _freeze_json(value)) for key, value in node.items())
    elif isinstance(node, list):
        return tuple(_freeze_json(element) for element in node)
    else:
        # Tag scalars with their type, so that e.g. true and 1 are not considered equal.
        return (type(node).__name__, node)


def from_print_query_metadata(
    meta: Any, extraction: Optional[ExtractionDirective]
) -> ResultAccessor:
    """Build the accessor for printed objects, if and only if they all share one shape.

    E.g. [{"a": "string", "b": "int"}, {"b": "int", "a": "string"}] is read as columns a | b,
    whereas [{"a": "string", "b": "int"}, {"c": "string", "d": "int"}] has no common shape
    and is read with the unknown shape.
    """
    if not isinstance(meta, list):
        return from_unknown_metadata(extraction)

    distinct_shapes = ldistinct(meta, key=_freeze_json)
    if len(distinct_shapes) != 1:
        # Different rows have different shapes, so they cannot share one set of columns.
        return from_unknown_metadata(extraction)

    unique_shape = first(distinct_shapes)
    if not isinstance(unique_shape, dict) or not unique_shape:
        return from_unknown_metadata(extraction)

    builder = _AccessorBuilder()
    for key, type_node in unique_shape.items():
        builder.add(key, map_tigergraph_type(_get_type_name(type_node)), FieldPath.from_keys(key))
    return builder.build(ResultShape.PRINT, extraction)


def from_unknown_metadata(extraction: Optional[ExtractionDirective] = None) -> ResultAccessor:
    """Read every row as a whole, in a single JSON string column named "results".

    E.g. rows {"a": 123} and {"b": 456, "c": 789} become
    |           results |
    |         {"a":123} |
    | {"b":456,"c":789} |
    """
    logger.warning(
        "Failed to infer schema, use default schema 'results STRING'. You can set a custom "
        "schema manually based on the output JSON keys."
    )
    builder = _AccessorBuilder()
    builder.add(UNKNOWN_SHAPE_COLUMN_NAME, ColumnType.STRING, FieldPath.from_keys())
    return builder.build(ResultShape.UNKNOWN, extraction)
