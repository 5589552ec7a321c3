"""Top-level lexicon validation API.

This module ties the catalog, the context and the dispatchers together:

- :func:`validate` checks that lexicon documents are well formed
- :func:`validate_record` checks a record value against a lexicon's main
  record definition
"""

import logging
from typing import Any, Dict, Iterable, List

from lexicheck.context import MAX_VALIDATION_DEPTH
from lexicheck.dispatcher import new_context
from lexicheck.errors import InvalidSchemaError, LexiconError, LexiconNotFoundError
from lexicheck.formats import is_valid_nsid, validate_string_format
from lexicheck.lexicon import LexiconDocument, build_catalog, document_key, parse_lexicon
from lexicheck.primary import check_record_data

logger = logging.getLogger(__name__)

__all__ = ['validate', 'validate_record', 'is_valid_nsid', 'validate_string_format']


def validate(documents: Iterable[Any], max_depth: int = MAX_VALIDATION_DEPTH) -> Dict[str, List[str]]:
    """Validates lexicon schema documents.

    All documents are validated together, so references between them
    resolve. Every definition of every document is checked, and each failing
    definition contributes one message of the form ``<id>#<def>: <detail>``.

    Args:
        documents: Parsed lexicon JSON documents
        max_depth: Maximum schema nesting depth

    Returns:
        Error messages grouped by lexicon id; empty if all documents are valid
    """
    errors: Dict[str, List[str]] = {}
    catalog: Dict[str, LexiconDocument] = {}
    for document in documents:
        try:
            lexicon = parse_lexicon(document)
        except InvalidSchemaError as e:
            errors.setdefault(document_key(document), []).append(e.message)
            continue
        if lexicon.id in catalog:
            logger.warning("Duplicate lexicon id %s", lexicon.id)
            errors.setdefault(lexicon.id, []).append(f"{lexicon.id}: duplicate lexicon id")
            continue
        catalog[lexicon.id] = lexicon

    for lexicon in catalog.values():
        ctx = new_context(catalog, lexicon.id, max_depth=max_depth)
        for name, definition in lexicon.defs.items():
            logger.debug("Checking %s#%s", lexicon.id, name)
            try:
                ctx.with_path(f"defs.{name}").validate_schema(definition)
            except LexiconError as e:
                errors.setdefault(lexicon.id, []).append(f"{lexicon.id}#{name}: {e.message}")
    return errors


def validate_record(documents: Iterable[Any], type_id: str, record: Any,
                    max_depth: int = MAX_VALIDATION_DEPTH) -> None:
    """Validates a record against the main definition of a lexicon.

    Args:
        documents: Parsed lexicon JSON documents the record may refer to
        type_id: NSID of the record's lexicon (its collection)
        record: The record value
        max_depth: Maximum data nesting depth

    Raises:
        LexiconNotFoundError: If no document has the id ``type_id``
        InvalidSchemaError: If the lexicon has no main record definition, or
            the documents or any definition the record reaches are malformed
        DataValidationError: If the record does not conform
    """
    catalog = build_catalog(documents)
    lexicon = catalog.get(type_id)
    if lexicon is None:
        raise LexiconNotFoundError(type_id)
    main = lexicon.defs.get('main')
    if main is None:
        raise InvalidSchemaError(f"{type_id}: lexicon has no main definition")
    if main.get('type') != 'record' or not isinstance(main.get('record'), dict):
        raise InvalidSchemaError(f"{type_id}#main: not a record definition")
    ctx = new_context(catalog, type_id, max_depth=max_depth)
    ctx.check_definition(type_id, 'main', main)
    logger.debug("Validating record against %s", type_id)
    check_record_data(record, main, ctx)
