# Copyright 2024-present Kensho Technologies, LLC.
import unittest

from ..exceptions import InvalidSchemaError
from ..extraction_directive import ExtractionDirective
from ..field_paths import FieldPath, FieldPathEntry
from ..result_accessor import ResultShape
from ..shape_classifiers import (
    EDGE_FIXED_COLUMNS_DDL,
    from_edge_metadata,
    from_external_schema,
    from_map_accum_query_metadata,
    from_non_map_accum_query_metadata,
    from_print_query_metadata,
    from_unknown_metadata,
    from_vertex_metadata,
    from_vertex_set_query_metadata,
)
from ..tabular_schema import TabularSchema
from ..type_mapper import ColumnType


PERSON_VERTEX_META = {
    "Config": {"STATS": "OUTDEGREE_BY_EDGETYPE"},
    "Attributes": [
        {"AttributeName": "age", "AttributeType": {"Name": "INT"}},
        {"AttributeName": "name", "AttributeType": {"Name": "STRING"}},
        {"AttributeName": "score", "AttributeType": {"Name": "DOUBLE"}},
    ],
    "PrimaryId": {"AttributeType": {"Name": "STRING"}, "AttributeName": "id"},
    "Name": "person",
}

WORKS_FOR_EDGE_META = {
    "IsDirected": False,
    "ToVertexTypeName": "company",
    "Config": {},
    "Attributes": [
        {"AttributeName": "since", "AttributeType": {"Name": "DATETIME"}},
        {"AttributeName": "weight", "AttributeType": {"Name": "FLOAT"}},
    ],
    "FromVertexTypeName": "person",
    "Name": "worksFor",
}


def _entry(name: str, pointer: str, recursive: bool = False) -> FieldPathEntry:
    return FieldPathEntry(name, FieldPath.parse(pointer), recursive)


class GraphSchemaClassifierTests(unittest.TestCase):
    def test_vertex_metadata(self) -> None:
        meta = {
            "PrimaryId": {"AttributeType": {"Name": "INT"}},
            "Attributes": [{"AttributeName": "age", "AttributeType": {"Name": "INT"}}],
        }
        accessor = from_vertex_metadata(meta)

        self.assertEqual(ResultShape.VERTEX, accessor.shape)
        self.assertEqual(
            TabularSchema.from_pairs([("v_id", ColumnType.DECIMAL), ("age", ColumnType.DECIMAL)]),
            accessor.schema,
        )
        self.assertEqual(
            (_entry("v_id", "/v_id"), _entry("age", "/attributes/age")),
            accessor.field_paths.entries,
        )
        self.assertIsNone(accessor.extraction)

    def test_vertex_metadata_with_column_prune(self) -> None:
        accessor = from_vertex_metadata(PERSON_VERTEX_META, column_prune={"score", "unknown"})
        self.assertEqual(("v_id", "score"), accessor.schema.names)
        self.assertEqual(
            [ColumnType.STRING, ColumnType.FLOAT64],
            [column.column_type for column in accessor.schema],
        )

    def test_vertex_primary_id_defaults_to_string(self) -> None:
        accessor = from_vertex_metadata({"Name": "person"})
        self.assertEqual(TabularSchema.from_pairs([("v_id", ColumnType.STRING)]), accessor.schema)

    def test_nameless_attributes_are_skipped(self) -> None:
        meta = {
            "Attributes": [
                {"AttributeType": {"Name": "INT"}},
                {"AttributeName": "", "AttributeType": {"Name": "INT"}},
                {"AttributeName": "age"},
            ],
            "Name": "person",
        }
        with self.assertWarns(UserWarning):
            accessor = from_vertex_metadata(meta)
        self.assertEqual(("v_id", "age"), accessor.schema.names)
        self.assertEqual(ColumnType.STRING, accessor.schema.columns[1].column_type)

    def test_edge_metadata(self) -> None:
        accessor = from_edge_metadata(WORKS_FOR_EDGE_META)

        self.assertEqual(ResultShape.EDGE, accessor.shape)
        self.assertEqual(
            TabularSchema.from_pairs(
                [
                    ("from_type", ColumnType.STRING),
                    ("from_id", ColumnType.STRING),
                    ("to_type", ColumnType.STRING),
                    ("to_id", ColumnType.STRING),
                    ("since", ColumnType.STRING),
                    ("weight", ColumnType.FLOAT32),
                ]
            ),
            accessor.schema,
        )
        self.assertEqual(
            (
                _entry("from_type", "/from_type"),
                _entry("from_id", "/from_id"),
                _entry("to_type", "/to_type"),
                _entry("to_id", "/to_id"),
                _entry("since", "/attributes/since"),
                _entry("weight", "/attributes/weight"),
            ),
            accessor.field_paths.entries,
        )

    def test_edge_metadata_with_column_prune(self) -> None:
        accessor = from_edge_metadata(WORKS_FOR_EDGE_META, column_prune={"weight"})
        self.assertEqual(
            ("from_type", "from_id", "to_type", "to_id", "weight"), accessor.schema.names
        )

        accessor = from_edge_metadata(WORKS_FOR_EDGE_META, column_prune=set())
        self.assertEqual(("from_type", "from_id", "to_type", "to_id"), accessor.schema.names)

    def test_edge_columns_follow_fixed_columns(self) -> None:
        attribute_schema = TabularSchema.from_pairs([("weight", ColumnType.FLOAT32)])
        accessor = from_edge_metadata(WORKS_FOR_EDGE_META, column_prune={"weight"})
        self.assertEqual(
            TabularSchema.from_ddl(EDGE_FIXED_COLUMNS_DDL).merge(attribute_schema), accessor.schema
        )

    def test_attributes_colliding_with_fixed_columns(self) -> None:
        colliding_attributes = {
            "Attributes": [{"AttributeName": "from_id", "AttributeType": {"Name": "STRING"}}]
        }
        with self.assertRaises(InvalidSchemaError):
            from_edge_metadata(colliding_attributes)

        colliding_attributes["Attributes"][0]["AttributeName"] = "v_id"
        with self.assertRaises(InvalidSchemaError):
            from_vertex_metadata(colliding_attributes)


class ExternalSchemaClassifierTests(unittest.TestCase):
    def test_external_schema_columns_are_recursive(self) -> None:
        schema = TabularSchema.from_ddl("name STRING, total DECIMAL")
        extraction = ExtractionDirective(1, "@@result")
        accessor = from_external_schema(schema, extraction)

        self.assertEqual(ResultShape.EXTERNAL, accessor.shape)
        self.assertEqual(schema, accessor.schema)
        self.assertEqual(
            (_entry("name", "/name", True), _entry("total", "/total", True)),
            accessor.field_paths.entries,
        )
        self.assertEqual(extraction, accessor.extraction)


class QueryOutputClassifierTests(unittest.TestCase):
    def test_vertex_set_forces_v_id_to_string(self) -> None:
        meta = {
            "v_id": "INT",
            "v_type": "STRING",
            "attributes": {"age": "INT", "name": "STRING", "active": "BOOL"},
        }
        extraction = ExtractionDirective(0, "people")
        accessor = from_vertex_set_query_metadata(meta, extraction)

        self.assertEqual(ResultShape.VERTEX_SET, accessor.shape)
        self.assertEqual(
            TabularSchema.from_pairs(
                [
                    ("v_id", ColumnType.STRING),
                    ("v_type", ColumnType.STRING),
                    ("age", ColumnType.DECIMAL),
                    ("name", ColumnType.STRING),
                    ("active", ColumnType.BOOLEAN),
                ]
            ),
            accessor.schema,
        )
        self.assertEqual(
            (
                _entry("v_id", "/v_id"),
                _entry("v_type", "/v_type"),
                _entry("age", "/attributes/age"),
                _entry("name", "/attributes/name"),
                _entry("active", "/attributes/active"),
            ),
            accessor.field_paths.entries,
        )
        self.assertEqual(extraction, accessor.extraction)

    def test_vertex_set_with_shadowing_attribute_degrades(self) -> None:
        meta = {"v_id": "STRING", "v_type": "STRING", "attributes": {"v_type": "STRING"}}
        with self.assertLogs("tigergraph_results.shape_classifiers", level="WARNING"):
            accessor = from_vertex_set_query_metadata(meta, None)
        self.assertEqual(ResultShape.UNKNOWN, accessor.shape)

    def test_map_accum(self) -> None:
        key_value_schema = TabularSchema.from_pairs(
            [("key", ColumnType.STRING), ("value", ColumnType.STRING)]
        )
        for type_signature in (
            "MapAccum<VERTEX, ListAccum<VERTEX>>",
            "MapAccum<STRING, INT>",
            "MapAccum<INT, MapAccum<STRING, SumAccum<DOUBLE>>>",
        ):
            accessor = from_map_accum_query_metadata(type_signature, ExtractionDirective(0, "@@m"))
            self.assertEqual(ResultShape.MAP_ACCUM, accessor.shape)
            self.assertEqual(key_value_schema, accessor.schema)
            self.assertEqual(
                (_entry("key", "/key"), _entry("value", "/value")), accessor.field_paths.entries
            )

    def test_non_map_accum_degrades_to_unknown(self) -> None:
        extraction = ExtractionDirective(0, "@@total")
        with self.assertLogs("tigergraph_results.shape_classifiers", level="WARNING"):
            accessor = from_non_map_accum_query_metadata("SumAccum<INT>", extraction)
        self.assertEqual(ResultShape.UNKNOWN, accessor.shape)
        self.assertEqual(extraction, accessor.extraction)

    def test_uniform_print_output_ignores_field_order(self) -> None:
        meta = [{"a": "string", "b": "int"}, {"b": "int", "a": "string"}]
        accessor = from_print_query_metadata(meta, None)

        self.assertEqual(ResultShape.PRINT, accessor.shape)
        self.assertEqual(
            TabularSchema.from_pairs([("a", ColumnType.STRING), ("b", ColumnType.DECIMAL)]),
            accessor.schema,
        )
        self.assertEqual((_entry("a", "/a"), _entry("b", "/b")), accessor.field_paths.entries)

    def test_nested_field_types_default_to_string(self) -> None:
        meta = [{"a": {"nested": "int"}, "b": None}]
        accessor = from_print_query_metadata(meta, None)
        self.assertEqual(
            TabularSchema.from_pairs([("a", ColumnType.STRING), ("b", ColumnType.STRING)]),
            accessor.schema,
        )

    def test_heterogeneous_print_output_degrades(self) -> None:
        heterogeneous_metas = (
            [{"a": "string", "b": "int"}, {"c": "string", "d": "int"}],
            [{"a": "string"}, {"a": "int"}],
            [{"a": True}, {"a": 1}],
            [],
            ["int"],
            [{}],
            {"a": "string"},
            None,
        )
        for meta in heterogeneous_metas:
            with self.assertLogs("tigergraph_results.shape_classifiers", level="WARNING"):
                accessor = from_print_query_metadata(meta, None)
            self.assertEqual(ResultShape.UNKNOWN, accessor.shape)

    def test_unknown(self) -> None:
        with self.assertLogs("tigergraph_results.shape_classifiers", level="WARNING") as logs:
            accessor = from_unknown_metadata()
        self.assertIn("results STRING", logs.output[0])

        self.assertEqual(ResultShape.UNKNOWN, accessor.shape)
        self.assertEqual(
            TabularSchema.from_pairs([("results", ColumnType.STRING)]), accessor.schema
        )
        self.assertEqual((_entry("results", ""),), accessor.field_paths.entries)
        self.assertIsNone(accessor.extraction)
