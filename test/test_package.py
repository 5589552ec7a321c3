"""Tests for the package-level lazy exports."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

import lexicheck
from lexicheck import errors, validator


class TestPackageExports(unittest.TestCase):

    def test_exported_names_resolve_to_module_objects(self):
        """Package attributes are the same objects as in their modules."""
        self.assertIs(lexicheck.validate, validator.validate)
        self.assertIs(lexicheck.validate_record, validator.validate_record)
        self.assertIs(lexicheck.InvalidSchemaError, errors.InvalidSchemaError)
        self.assertIs(lexicheck.LexiconNotFoundError, errors.LexiconNotFoundError)

    def test_from_import(self):
        from lexicheck import DataValidationError, is_valid_nsid, validate_string_format
        self.assertTrue(issubclass(DataValidationError, lexicheck.LexiconError))
        self.assertTrue(is_valid_nsid("com.example.post"))
        self.assertIsNone(validate_string_format("com.example.post", "nsid"))

    def test_validate_through_package(self):
        documents = [{"lexicon": 1, "id": "com.example.a", "defs": {"main": {"type": "string"}}}]
        self.assertEqual(lexicheck.validate(documents), {})

    def test_submodules_and_unknown_names(self):
        """Unexported names fall back to submodules; anything else is an AttributeError."""
        self.assertIs(lexicheck.formats, sys.modules['lexicheck.formats'])
        with self.assertRaises(AttributeError):
            lexicheck.no_such_name
        self.assertIn('validate', dir(lexicheck))
        self.assertIn('validate_record', lexicheck.__all__)


if __name__ == '__main__':
    unittest.main()
