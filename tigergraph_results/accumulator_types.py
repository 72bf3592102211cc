# Copyright 2024-present Kensho Technologies, LLC.
"""Accumulator type signatures, as reported in the output metadata of GSQL queries.

Printing an accumulator reports its declared type, e.g. "SumAccum<INT>" or
"MapAccum<VERTEX, ListAccum<VERTEX>>", in place of a field -> type object.
"""
from enum import Enum, unique
from typing import Optional


MAP_ACCUM_TYPE_TAG = "MapAccum"

NON_MAP_ACCUM_TYPE_TAGS = (
    "SumAccum",
    "MinAccum",
    "MaxAccum",
    "AvgAccum",
    "PercentileContAccum",
    "AndAccum",
    "OrAccum",
    "BitwiseAndAccum",
    "BitwiseOrAccum",
    "ListAccum",
    "SetAccum",
    "BagAccum",
    "ArrayAccum",
    "HeapAccum",
    "GroupByAccum",
)


@unique
class AccumulatorKind(Enum):
    MAP = "map"
    NON_MAP = "non_map"


def get_accumulator_type_tag(type_signature: str) -> Optional[str]:
    """Return the accumulator type tag the signature starts with, or None if there is none."""
    for type_tag in NON_MAP_ACCUM_TYPE_TAGS:
        if type_signature.startswith(type_tag):
            return type_tag
    if type_signature.startswith(MAP_ACCUM_TYPE_TAG):
        return MAP_ACCUM_TYPE_TAG
    return None


def get_accumulator_kind(type_signature: str) -> Optional[AccumulatorKind]:
    """Classify an accumulator type signature by prefix, or return None if it is not one."""
    type_tag = get_accumulator_type_tag(type_signature)
    if type_tag is None:
        return None
    elif type_tag == MAP_ACCUM_TYPE_TAG:
        return AccumulatorKind.MAP
    else:
        return AccumulatorKind.NON_MAP
