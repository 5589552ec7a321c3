"""Command implementations for the lexicheck CLI.

Loads lexicon and record files from disk, runs the validators and prints one
status line per file followed by a summary.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from lexicheck.errors import InvalidSchemaError, LexiconError
from lexicheck.lexicon import parse_lexicon
from lexicheck.validator import validate, validate_record

logger = logging.getLogger(__name__)

PASS_MARK = '✓'
FAIL_MARK = '✗'


def find_json_files(path: str) -> List[str]:
    """Returns ``path`` itself if it is a file, else all ``*.json`` files below it, sorted."""
    if os.path.isfile(path):
        return [path]
    if not os.path.isdir(path):
        raise FileNotFoundError(f"No such file or directory: {path}")
    found = []
    for root, _, files in os.walk(path):
        for name in files:
            if name.endswith('.json'):
                found.append(os.path.join(root, name))
    return sorted(found)


def load_json_file(file_path: str) -> Tuple[Optional[Any], Optional[str]]:
    """Loads a JSON file, returning ``(value, None)`` or ``(None, error)``."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f), None
    except json.JSONDecodeError as e:
        return None, f"invalid JSON: {e}"
    except UnicodeDecodeError as e:
        return None, f"invalid UTF-8: {e}"


def _print_result(file_path: str, errors: List[str]) -> None:
    if not errors:
        print(f"{PASS_MARK} {file_path}")
        return
    print(f"{FAIL_MARK} {file_path}")
    for error in errors:
        print(f"    {error}")


def check_files(path: str) -> Dict[str, List[str]]:
    """Validates lexicon files together and returns error lines per file."""
    files = find_json_files(path)
    logger.debug("Checking %d lexicon files under %s", len(files), path)
    file_errors: Dict[str, List[str]] = {}
    documents: Dict[str, Any] = {}
    for file_path in files:
        document, error = load_json_file(file_path)
        if error:
            file_errors[file_path] = [error]
        else:
            documents[file_path] = document

    errors = validate(documents.values())
    for file_path, document in documents.items():
        if isinstance(document, dict) and isinstance(document.get('id'), str):
            file_errors[file_path] = errors.get(document['id'], [])
            continue
        try:
            parse_lexicon(document)
            file_errors[file_path] = []
        except InvalidSchemaError as e:
            file_errors[file_path] = [e.message]
    return {file_path: file_errors[file_path] for file_path in files}


def check(path: str) -> None:
    """Checks a lexicon file or a directory of lexicon files.

    Args:
        path: Lexicon JSON file or directory
    """
    results = check_files(path)
    if not results:
        print(f"No JSON files found in {path}")
        return
    valid_count = 0
    for file_path, errors in results.items():
        _print_result(file_path, errors)
        if not errors:
            valid_count += 1
    print(f"\nCheck summary: {valid_count}/{len(results)} lexicon files valid")
    if valid_count < len(results):
        sys.exit(1)


def load_lexicons(path: str) -> List[Any]:
    documents = []
    for file_path in find_json_files(path):
        document, error = load_json_file(file_path)
        if error:
            raise ValueError(f"{file_path}: {error}")
        documents.append(document)
    return documents


def validate_record_file(record_file: str, documents: List[Any], collection: Optional[str] = None) -> List[str]:
    """Validates one record file and returns its error lines."""
    record, error = load_json_file(record_file)
    if error:
        return [error]
    type_id = collection
    if type_id is None and isinstance(record, dict):
        type_id = record.get('$type')
    if not isinstance(type_id, str) or not type_id:
        return ["record has no $type and no collection was given"]
    try:
        validate_record(documents, type_id, record)
    except LexiconError as e:
        return [str(e)]
    return []


def validate_records(input: List[str], lexicons: str, collection: Optional[str] = None,
                     quiet: bool = False) -> None:
    """Validates record files against lexicons.

    Args:
        input: Record JSON files
        lexicons: Lexicon JSON file or directory
        collection: Lexicon id to validate against, defaults to each record's $type
        quiet: Suppress output, only set the exit code
    """
    documents = load_lexicons(lexicons)
    valid_count = 0
    for record_file in input:
        errors = validate_record_file(record_file, documents, collection)
        if not errors:
            valid_count += 1
        if not quiet:
            _print_result(record_file, errors)
    if not quiet:
        print(f"\nValidation summary: {valid_count}/{len(input)} records valid")
    if valid_count < len(input):
        sys.exit(1)
