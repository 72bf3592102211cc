# Copyright 2024-present Kensho Technologies, LLC.
class TigerGraphResultsError(Exception):
    """Generic error when turning TigerGraph query results into tabular rows."""


class InvalidArgumentError(TigerGraphResultsError):
    """Exception raised when a user-supplied read argument is malformed.

    For example:
    - the results extraction directive is not of the form "<row number>:<object key>";
    - the row number of the extraction directive is not a non-negative integer;
    - a read option could not be converted to its declared type.

    The error only affects the query being configured; nothing about other reads is changed.
    """


class InvalidSchemaError(TigerGraphResultsError):
    """Exception raised when a user-supplied tabular schema cannot be used.

    Possible reasons include:
        - two columns share the same name;
        - a DDL column definition names a type that has no tabular counterpart;
        - a DDL column definition is missing its name or its type.
    """


class ValueCoercionError(TigerGraphResultsError):
    """Exception raised when an extracted JSON value does not fit its column type."""
