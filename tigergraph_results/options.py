# Copyright 2024-present Kensho Technologies, LLC.
"""Read options consumed by schema inference, taken from the connector's string option map.

Options for other layers (transport, authentication, loading) may share the same map and are
ignored here.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from .exceptions import InvalidArgumentError
from .extraction_directive import parse_extraction_directive


QUERY_RESULTS_EXTRACT = "query.results.extract"

# Option name -> validator. A validator raises InvalidArgumentError on a malformed value.
OPTION_VALIDATORS: Dict[str, Callable[[str], object]] = {
    QUERY_RESULTS_EXTRACT: parse_extraction_directive,
}


@dataclass(frozen=True)
class ReadOptions:
    """The validated read options of one query."""

    results_extract: Optional[str] = None

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, str]]) -> "ReadOptions":
        """Validate the known options of the map, reporting all problems at once.

        Raises:
            InvalidArgumentError: if any known option is malformed. The message lists every
                                  offending option with its value.
        """
        options = options or {}
        errors: List[str] = []
        for option_name, validator in OPTION_VALIDATORS.items():
            if option_name not in options:
                continue
            value = options[option_name]
            try:
                validator(value)
            except InvalidArgumentError as e:
                errors.append(f"Option({option_name}) with value {value!r}: {e}")

        if errors:
            raise InvalidArgumentError("Invalid input options: " + ". ".join(errors))

        return cls(results_extract=options.get(QUERY_RESULTS_EXTRACT) or None)
