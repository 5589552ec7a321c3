"""Lexicon documents and the catalog they are collected into."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from lexicheck.constraints import is_integer
from lexicheck.errors import InvalidSchemaError
from lexicheck.formats import is_valid_nsid

logger = logging.getLogger(__name__)

LEXICON_VERSION = 1


@dataclass(frozen=True)
class LexiconDocument:
    """A parsed lexicon: its NSID and its named definitions."""
    id: str
    defs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    description: Optional[str] = None
    revision: Optional[int] = None


def document_key(document: Any) -> str:
    """Best-effort id of a raw document, used to group parse errors."""
    if isinstance(document, dict) and isinstance(document.get('id'), str):
        return document['id']
    return 'unknown'


def parse_lexicon(document: Any) -> LexiconDocument:
    """Parses a JSON value into a LexiconDocument.

    Only the document envelope is checked here: ``id`` must be a valid NSID
    and ``defs`` an object of objects. The definitions themselves are
    checked by the schema dispatcher.

    Raises:
        InvalidSchemaError: If the envelope is malformed
    """
    if not isinstance(document, dict):
        raise InvalidSchemaError("lexicon document must be a JSON object")
    lexicon_id = document.get('id')
    if not isinstance(lexicon_id, str):
        raise InvalidSchemaError("lexicon document is missing required field 'id'")
    if not is_valid_nsid(lexicon_id):
        raise InvalidSchemaError(f"lexicon id '{lexicon_id}' is not a valid NSID")
    if 'lexicon' in document:
        version = document['lexicon']
        if not is_integer(version) or version != LEXICON_VERSION:
            raise InvalidSchemaError(f"{lexicon_id}: unsupported lexicon version {version!r}")
    description = document.get('description')
    if description is not None and not isinstance(description, str):
        raise InvalidSchemaError(f"{lexicon_id}: description must be a string")
    revision = document.get('revision')
    if revision is not None and not is_integer(revision):
        raise InvalidSchemaError(f"{lexicon_id}: revision must be an integer")
    if 'defs' not in document:
        raise InvalidSchemaError(f"{lexicon_id}: missing required field 'defs'")
    defs = document['defs']
    if not isinstance(defs, dict):
        raise InvalidSchemaError(f"{lexicon_id}: defs must be an object")
    for name, definition in defs.items():
        if not name:
            raise InvalidSchemaError(f"{lexicon_id}: definition names cannot be empty")
        if not isinstance(definition, dict):
            raise InvalidSchemaError(f"{lexicon_id}#{name}: definition must be an object")
    return LexiconDocument(id=lexicon_id, defs=dict(defs), description=description, revision=revision)


def build_catalog(documents: Iterable[Any]) -> Dict[str, LexiconDocument]:
    """Parses documents into a catalog keyed by lexicon id.

    Raises:
        InvalidSchemaError: If a document is malformed or an id occurs twice
    """
    catalog: Dict[str, LexiconDocument] = {}
    for document in documents:
        lexicon = parse_lexicon(document)
        if lexicon.id in catalog:
            logger.warning("Duplicate lexicon id %s", lexicon.id)
            raise InvalidSchemaError(f"{lexicon.id}: duplicate lexicon id")
        catalog[lexicon.id] = lexicon
    logger.debug("Built catalog with %d lexicons", len(catalog))
    return catalog
