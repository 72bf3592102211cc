# Copyright 2024-present Kensho Technologies, LLC.
"""Entry points that pick the right shape classifier for a query's output metadata."""
import logging
from typing import Any, Optional, Union

from .accumulator_types import AccumulatorKind, get_accumulator_kind
from .extraction_directive import ExtractionDirective, parse_extraction_directive
from .field_paths import MISSING
from .result_accessor import ResultAccessor
from .shape_classifiers import (
    VERTEX_ATTRIBUTES_KEY,
    VERTEX_ID_COLUMN_NAME,
    from_external_schema,
    from_map_accum_query_metadata,
    from_non_map_accum_query_metadata,
    from_print_query_metadata,
    from_unknown_metadata,
    from_vertex_set_query_metadata,
)
from .tabular_schema import TabularSchema


logger = logging.getLogger(__name__)


def _get_extraction_target(metadata: Any, extraction: ExtractionDirective) -> Any:
    """Return metadata[row_number][object_key], or MISSING if it does not exist."""
    if not isinstance(metadata, list) or extraction.row_number >= len(metadata):
        return MISSING
    statement = metadata[extraction.row_number]
    if not isinstance(statement, dict):
        return MISSING
    return statement.get(extraction.object_key, MISSING)


def _get_sole_printed_object_key(metadata: Any) -> Optional[str]:
    """Return the key of the only object printed by the only PRINT statement, if there is one."""
    if isinstance(metadata, list) and len(metadata) == 1:
        statement = metadata[0]
        if isinstance(statement, dict) and len(statement) == 1:
            return next(iter(statement))
    return None


def _is_vertex_metadata(node: Any) -> bool:
    return (
        isinstance(node, dict) and VERTEX_ID_COLUMN_NAME in node and VERTEX_ATTRIBUTES_KEY in node
    )


def _classify_printed_object(
    object_meta: Any, extraction: ExtractionDirective
) -> Optional[ResultAccessor]:
    """Dispatch the output metadata of one printed object to its shape classifier, if any."""
    if isinstance(object_meta, str):
        # Printed accumulators report their type signature instead of their fields.
        accumulator_kind = get_accumulator_kind(object_meta)
        if accumulator_kind == AccumulatorKind.MAP:
            return from_map_accum_query_metadata(object_meta, extraction)
        elif accumulator_kind == AccumulatorKind.NON_MAP:
            return from_non_map_accum_query_metadata(object_meta, extraction)
    elif isinstance(object_meta, list):
        # A typed vertex set reports a single vertex-shaped element.
        if len(object_meta) == 1 and _is_vertex_metadata(object_meta[0]):
            return from_vertex_set_query_metadata(object_meta[0], extraction)
        return from_print_query_metadata(object_meta, extraction)

    logger.debug("No shape classifier for printed object %s: %s", extraction, object_meta)
    return None


def resolve_query_result_schema(
    metadata: Any, results_extract: Optional[str] = None
) -> ResultAccessor:
    """Infer the output table of a query from its output metadata.

    The shapes are recognized as follows:
        1) multi-print query: each PRINT statement is a row;
        2) vertex expression set: each vertex is a row;
        3) MapAccum: each entry is a row, with a key column and a value column;
        4) other accumulators: not decomposed yet, read as the unknown shape;
        5) unknown or ambiguous shape: each row is read whole, as one JSON string column.

    Only the metadata is inspected, never the result rows, so the cost of inference does not
    depend on the size of the results.

    Args:
        metadata: the query's output metadata, a list with one entry per PRINT statement, each
                  entry mapping the printed expressions to their types.
        results_extract: optional "<row number>:<object key>" string, pinning inference (and row
                         splitting) to one printed object of multi-print output.

    Returns:
        ResultAccessor describing the output table and how to read each of its columns

    Raises:
        InvalidArgumentError: if results_extract is malformed. No other input raises.
    """
    explicit_extraction = parse_extraction_directive(results_extract)

    if explicit_extraction is not None:
        object_meta = _get_extraction_target(metadata, explicit_extraction)
        if object_meta is MISSING:
            logger.warning(
                "The printed object %s does not appear in the query output metadata.",
                explicit_extraction,
            )
            return from_unknown_metadata(explicit_extraction)
        accessor = _classify_printed_object(object_meta, explicit_extraction)
        if accessor is None:
            return from_unknown_metadata(explicit_extraction)
        return accessor

    sole_object_key = _get_sole_printed_object_key(metadata)
    if sole_object_key is not None:
        # Only one PRINT statement printing only one object: read that object's content.
        implicit_extraction = ExtractionDirective(0, sole_object_key)
        accessor = _classify_printed_object(metadata[0][sole_object_key], implicit_extraction)
        if accessor is not None:
            return accessor

    # Each PRINT statement is a row, provided they all print objects of the same shape.
    return from_print_query_metadata(metadata, None)


def resolve_external_schema(
    schema: Union[TabularSchema, str], results_extract: Optional[str] = None
) -> ResultAccessor:
    """Read query output with a caller-supplied schema, given either as TabularSchema or DDL.

    Raises:
        InvalidArgumentError: if results_extract is malformed.
        InvalidSchemaError: if the DDL cannot be parsed.
    """
    extraction = parse_extraction_directive(results_extract)
    if isinstance(schema, str):
        schema = TabularSchema.from_ddl(schema)
    return from_external_schema(schema, extraction)
