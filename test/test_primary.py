"""Tests for the record, params, query, procedure and subscription validators."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from lexicheck.dispatcher import check_data, check_schema, new_context
from lexicheck.errors import DataValidationError, InvalidSchemaError
from lexicheck.lexicon import build_catalog

RECORD_OBJECT = {
    "type": "object",
    "required": ["text"],
    "properties": {"text": {"type": "string"}},
}


def make_context():
    catalog = build_catalog([{
        "lexicon": 1,
        "id": "com.example.rpc",
        "defs": {
            "main": {"type": "object", "properties": {"ok": {"type": "boolean"}}},
            "event": {"type": "object", "properties": {"seq": {"type": "integer"}}},
        },
    }])
    return new_context(catalog, "com.example.rpc")


class TestRecordType(unittest.TestCase):
    """Test the record type."""

    def test_key_types(self):
        """tid, any, nsid and literal keys are the only accepted key types."""
        for key in ("tid", "any", "nsid", "literal:self"):
            check_schema({"type": "record", "key": key, "record": RECORD_OBJECT}, new_context())
        for key in ("literal:", "uuid", "", 3):
            with self.assertRaises(InvalidSchemaError, msg=key):
                check_schema({"type": "record", "key": key, "record": RECORD_OBJECT}, new_context())

    def test_record_must_be_an_object(self):
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "record", "key": "tid", "record": {"type": "string"}}, new_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "record", "key": "tid"}, new_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "record", "record": RECORD_OBJECT}, new_context())

    def test_record_object_is_checked(self):
        record = {"type": "object", "required": ["missing"], "properties": {}}
        with self.assertRaises(InvalidSchemaError) as cm:
            check_schema({"type": "record", "key": "tid", "record": record}, new_context(path="defs.main"))
        self.assertIn("defs.main.record", str(cm.exception))

    def test_data(self):
        """Record data is checked against the wrapped object schema."""
        schema = {"type": "record", "key": "tid", "record": RECORD_OBJECT}
        check_data({"text": "hello"}, schema, new_context())
        with self.assertRaises(DataValidationError):
            check_data({}, schema, new_context())


class TestParamsType(unittest.TestCase):
    """Test the params type."""

    def test_property_types(self):
        check_schema({
            "type": "params",
            "required": ["q"],
            "properties": {
                "q": {"type": "string"},
                "limit": {"type": "integer", "minimum": 1},
                "flag": {"type": "boolean"},
                "extra": {"type": "unknown"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        }, new_context())
        for prop in ({"type": "object"}, {"type": "bytes"},
                     {"type": "array", "items": {"type": "object"}}, {"type": "ref", "ref": "#x"}):
            with self.assertRaises(InvalidSchemaError, msg=str(prop)):
                check_schema({"type": "params", "properties": {"p": prop}}, new_context())

    def test_required_must_be_declared(self):
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "params", "required": ["q"], "properties": {}}, new_context())

    def test_data(self):
        schema = {
            "type": "params",
            "required": ["q"],
            "properties": {"q": {"type": "string"}, "limit": {"type": "integer", "maximum": 10}},
        }
        check_data({"q": "search", "unlisted": 1}, schema, new_context())
        with self.assertRaises(DataValidationError) as cm:
            check_data({}, schema, new_context())
        self.assertIn("required parameter 'q' is missing", str(cm.exception))
        with self.assertRaises(DataValidationError):
            check_data({"q": "s", "limit": 11}, schema, new_context())
        with self.assertRaises(DataValidationError):
            check_data({"q": None}, schema, new_context())


class TestRpcTypes(unittest.TestCase):
    """Test query, procedure and subscription."""

    def test_query_schema(self):
        check_schema({
            "type": "query",
            "parameters": {"type": "params", "properties": {"limit": {"type": "integer"}}},
            "output": {"encoding": "application/json", "schema": {"type": "ref", "ref": "#main"}},
            "errors": [{"name": "NotFound", "description": "No such thing"}],
        }, make_context())

    def test_query_schema_errors(self):
        bad_nodes = [
            {"type": "query", "input": {"encoding": "application/json"}},
            {"type": "query", "parameters": {"type": "object"}},
            {"type": "query", "output": {"schema": {"type": "object"}}},
            {"type": "query", "output": {"encoding": "application/json", "schema": {"type": "string"}}},
            {"type": "query", "errors": [{"description": "nameless"}]},
            {"type": "query", "errors": {"name": "NotAList"}},
        ]
        for node in bad_nodes:
            with self.assertRaises(InvalidSchemaError, msg=str(node)):
                check_schema(node, make_context())

    def test_procedure_schema(self):
        check_schema({
            "type": "procedure",
            "input": {"encoding": "application/json", "schema": {"type": "object", "properties": {}}},
            "output": {"encoding": "*/*"},
        }, make_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "procedure", "message": {"schema": {"type": "union", "refs": []}}}, make_context())

    def test_subscription_schema(self):
        check_schema({
            "type": "subscription",
            "parameters": {"type": "params", "properties": {"cursor": {"type": "integer"}}},
            "message": {"schema": {"type": "union", "refs": ["#event"]}},
        }, make_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "subscription", "message": {"schema": {"type": "object"}}}, make_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "subscription", "message": {}}, make_context())
        with self.assertRaises(InvalidSchemaError):
            check_schema({"type": "subscription", "output": {"encoding": "application/json"}}, make_context())

    def test_query_data(self):
        """Query data is checked against its parameters."""
        schema = {"type": "query", "parameters": {"type": "params", "required": ["uri"],
                                                  "properties": {"uri": {"type": "string"}}}}
        check_data({"uri": "at://alice.bsky.social"}, schema, make_context())
        with self.assertRaises(DataValidationError):
            check_data({}, schema, make_context())
        check_data({"anything": True}, {"type": "query"}, make_context())

    def test_procedure_data(self):
        """Procedure data is checked against its input body schema."""
        schema = {
            "type": "procedure",
            "input": {"encoding": "application/json",
                      "schema": {"type": "object", "required": ["text"], "properties": {"text": {"type": "string"}}}},
        }
        check_data({"text": "hi"}, schema, make_context())
        with self.assertRaises(DataValidationError):
            check_data({"text": 1}, schema, make_context())
        check_data("raw", {"type": "procedure", "input": {"encoding": "*/*"}}, make_context())

    def test_subscription_data(self):
        schema = {"type": "subscription",
                  "parameters": {"type": "params", "properties": {"cursor": {"type": "integer"}}}}
        check_data({"cursor": 5}, schema, make_context())
        with self.assertRaises(DataValidationError):
            check_data({"cursor": "5"}, schema, make_context())


if __name__ == '__main__':
    unittest.main()
