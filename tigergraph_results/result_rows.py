# Copyright 2024-present Kensho Technologies, LLC.
import logging
from typing import Any, Iterator

from .result_accessor import ResultAccessor, ResultShape
from .shape_classifiers import MAP_ACCUM_KEY_COLUMN_NAME, MAP_ACCUM_VALUE_COLUMN_NAME


logger = logging.getLogger(__name__)


def iter_result_rows(results: Any, accessor: ResultAccessor) -> Iterator[Any]:
    """Split the "results" list of a query response into the rows described by the accessor.

    Without an extraction directive, every element of the results (every PRINT statement,
    vertex or edge) is one row. With a directive, the printed object results[N][key] is split
    instead: a list yields one row per element, a MapAccum yields one key/value row per entry,
    and anything else is a single row.

    Args:
        results: the "results" list of the query response.
        accessor: the ResultAccessor inferred for the query.

    Yields:
        JSON rows, ready to be passed to the accessor's extract method
    """
    if not isinstance(results, list):
        logger.warning("Expected a list of query results, got %s. No rows read.", type(results))
        return

    extraction = accessor.extraction
    if extraction is None:
        yield from results
        return

    statement = results[extraction.row_number] if extraction.row_number < len(results) else None
    if not isinstance(statement, dict) or extraction.object_key not in statement:
        logger.warning(
            "The printed object %s is not in the query results. No rows read.", extraction
        )
        return

    printed_object = statement[extraction.object_key]
    if isinstance(printed_object, list):
        yield from printed_object
    elif isinstance(printed_object, dict) and accessor.shape == ResultShape.MAP_ACCUM:
        for key, value in printed_object.items():
            yield {MAP_ACCUM_KEY_COLUMN_NAME: key, MAP_ACCUM_VALUE_COLUMN_NAME: value}
    else:
        yield printed_object
