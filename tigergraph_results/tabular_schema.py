# Copyright 2024-present Kensho Technologies, LLC.
from dataclasses import dataclass
import re
from typing import Iterator, List, Sequence, Tuple

import sqlalchemy

from .exceptions import InvalidSchemaError
from .type_mapper import DECIMAL_PRECISION, DECIMAL_SCALE, ColumnType


# DDL type word (lower-case) -> column type. Used to parse user-supplied schemas.
DDL_TYPE_TO_COLUMN_TYPE = {
    "string": ColumnType.STRING,
    "decimal": ColumnType.DECIMAL,
    "int": ColumnType.DECIMAL,
    "bigint": ColumnType.DECIMAL,
    "float": ColumnType.FLOAT32,
    "real": ColumnType.FLOAT32,
    "double": ColumnType.FLOAT64,
    "boolean": ColumnType.BOOLEAN,
    "bool": ColumnType.BOOLEAN,
    "binary": ColumnType.BINARY,
}

_DDL_COLUMN_RE = re.compile(
    r"^\s*(?P<name>`[^`]+`|\S+)\s+(?P<type>[A-Za-z_]+)\s*"
    r"(?:\(\s*(?P<precision>\d+)\s*,\s*(?P<scale>\d+)\s*\))?\s*$"
)
_DDL_COLUMN_SEPARATOR_RE = re.compile(r",(?![^()]*\))")


def _parse_ddl_column(definition: str, ddl: str) -> "ColumnSpec":
    """Parse one "<name> <type>" column definition out of a DDL string."""
    match = _DDL_COLUMN_RE.match(definition)
    if match is None:
        raise InvalidSchemaError(f'Malformed column definition "{definition.strip()}" in {ddl}')

    name = match.group("name").strip("`")
    type_word = match.group("type").lower()
    column_type = DDL_TYPE_TO_COLUMN_TYPE.get(type_word)
    if column_type is None:
        raise InvalidSchemaError(
            f'Unsupported type "{match.group("type")}" for column "{name}" in {ddl}'
        )

    if match.group("precision") is not None:
        precision_and_scale = (int(match.group("precision")), int(match.group("scale")))
        if column_type != ColumnType.DECIMAL or precision_and_scale != (
            DECIMAL_PRECISION,
            DECIMAL_SCALE,
        ):
            raise InvalidSchemaError(
                f'Unsupported type parameters {precision_and_scale} for column "{name}" in '
                f"{ddl}, only DECIMAL({DECIMAL_PRECISION},{DECIMAL_SCALE}) is supported"
            )

    return ColumnSpec(name, column_type)


@dataclass(frozen=True)
class ColumnSpec:
    """One named, typed column of the output table."""

    name: str
    column_type: ColumnType

    def to_sqlalchemy_column(self) -> sqlalchemy.Column:
        return sqlalchemy.Column(self.name, self.column_type.to_sqlalchemy_type(), nullable=True)


@dataclass(frozen=True)
class TabularSchema:
    """Ordered list of uniquely-named columns presented to the host table engine."""

    columns: Tuple[ColumnSpec, ...]

    def __post_init__(self) -> None:
        """Validate fields."""
        seen_names = set()
        for column in self.columns:
            if column.name in seen_names:
                raise InvalidSchemaError(
                    f'Duplicate column name "{column.name}" in tabular schema: {self.names}'
                )
            seen_names.add(column.name)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[str, ColumnType]]) -> "TabularSchema":
        """Build a schema from (column name, column type) pairs."""
        return cls(tuple(ColumnSpec(name, column_type) for name, column_type in pairs))

    @classmethod
    def from_ddl(cls, ddl: str) -> "TabularSchema":
        """Parse a compact DDL string, e.g. "from_type STRING, from_id STRING, weight DOUBLE".

        Column names may be quoted with backticks. DECIMAL only accepts the (38,0) parameters,
        since that is the only decimal the output table uses.
        """
        columns: List[ColumnSpec] = []
        # Commas inside a decimal's "(p,s)" do not separate columns.
        for definition in _DDL_COLUMN_SEPARATOR_RE.split(ddl):
            if not definition.strip():
                continue
            columns.append(_parse_ddl_column(definition, ddl))
        return cls(tuple(columns))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def merge(self, other: "TabularSchema") -> "TabularSchema":
        """Return a new schema holding this schema's columns followed by the other's."""
        return TabularSchema(self.columns + other.columns)

    def to_sqlalchemy_columns(self) -> List[sqlalchemy.Column]:
        return [column.to_sqlalchemy_column() for column in self.columns]

    def to_sqlalchemy_table(
        self, table_name: str, metadata: sqlalchemy.MetaData
    ) -> sqlalchemy.Table:
        """Declare a SQLAlchemy Table with this schema's columns, in order."""
        return sqlalchemy.Table(table_name, metadata, *self.to_sqlalchemy_columns())

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)
