# Copyright 2024-present Kensho Technologies, LLC.
from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidArgumentError


EXTRACTION_DIRECTIVE_SEPARATOR = ":"


@dataclass(frozen=True)
class ExtractionDirective:
    """Pins schema inference and row splitting to results[row_number][object_key].

    Multi-statement query output is a list with one entry per PRINT statement, each entry being
    an object keyed by the printed expressions. The directive picks one printed object out of it.
    """

    row_number: int
    object_key: str

    def __post_init__(self) -> None:
        """Validate fields."""
        if self.row_number < 0:
            raise AssertionError(f"Expected a non-negative row number, got {self.row_number}")

    def __str__(self) -> str:
        return f"{self.row_number}{EXTRACTION_DIRECTIVE_SEPARATOR}{self.object_key}"


def parse_extraction_directive(directive_string: Optional[str]) -> Optional[ExtractionDirective]:
    """Parse a "<row number>:<object key>" string into an ExtractionDirective.

    Args:
        directive_string: the raw directive, as supplied in the read options. None or the empty
                          string means that no directive was given.

    Returns:
        the parsed ExtractionDirective, or None if no directive was given

    Raises:
        InvalidArgumentError: if there is not exactly one separator, if the row number is not
                              a non-negative integer, or if the object key is empty. The
                              message echoes the offending string.
    """
    if not directive_string:
        return None

    if directive_string.count(EXTRACTION_DIRECTIVE_SEPARATOR) != 1:
        raise InvalidArgumentError(
            "The row number and object key should be separated by colon, got "
            "{}".format(directive_string)
        )

    row_part, _, object_key = directive_string.partition(EXTRACTION_DIRECTIVE_SEPARATOR)
    stripped_row_part = row_part.strip()
    if not stripped_row_part.isdecimal():
        raise InvalidArgumentError(
            "Failed to parse row number from {}".format(directive_string)
        )
    if not object_key:
        raise InvalidArgumentError(
            "Missing object key after the colon, got {}".format(directive_string)
        )

    return ExtractionDirective(int(stripped_row_part), object_key)
