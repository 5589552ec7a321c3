"""Validation context and reference resolution.

A :class:`ValidationContext` is an immutable value threaded through the
recursive descent. Descending into a property, array item or reference
returns a new context, so sibling branches never observe each other's path or
in-progress reference set.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from lexicheck.constraints import at
from lexicheck.errors import InvalidSchemaError
from lexicheck.formats import is_valid_nsid
from lexicheck.lexicon import LexiconDocument

# Maximum nesting depth for both schema and data traversal.
MAX_VALIDATION_DEPTH = 128

SchemaNode = Dict[str, Any]
SchemaValidator = Callable[[SchemaNode, 'ValidationContext'], None]
DataValidator = Callable[[Any, SchemaNode, 'ValidationContext'], None]


def check_reference_syntax(reference: Any, path: str = '') -> None:
    """Checks the syntax of a reference string without resolving it.

    Accepted forms are ``#name`` (local), ``nsid`` (main definition of another
    document) and ``nsid#name``.

    Raises:
        InvalidSchemaError: If the reference is malformed
    """
    if not isinstance(reference, str) or not reference:
        raise InvalidSchemaError(at(path, "reference must be a non-empty string"))
    if reference.count('#') > 1:
        raise InvalidSchemaError(at(path, f"invalid reference '{reference}': more than one '#'"))
    if reference.startswith('#'):
        if len(reference) == 1:
            raise InvalidSchemaError(at(path, f"invalid reference '{reference}': empty definition name"))
        return
    if '#' in reference:
        document_id, name = reference.split('#')
        if not document_id or not name:
            raise InvalidSchemaError(
                at(path, f"invalid reference '{reference}': both lexicon id and definition name are required"))
        return
    if not is_valid_nsid(reference):
        raise InvalidSchemaError(at(path, f"invalid reference '{reference}': not a valid NSID"))


def parse_reference(reference: Any, current_document_id: Optional[str], path: str = '') -> Tuple[str, str]:
    """Splits a reference into ``(document_id, definition_name)``.

    Local references are bound to ``current_document_id``; references without
    a fragment point at the ``main`` definition.
    """
    check_reference_syntax(reference, path)
    if reference.startswith('#'):
        if current_document_id is None:
            raise InvalidSchemaError(
                at(path, f"cannot resolve local reference '{reference}' without a current lexicon"))
        return current_document_id, reference[1:]
    if '#' in reference:
        document_id, name = reference.split('#')
        return document_id, name
    return reference, 'main'


def ref_matches_type(reference: str, type_name: str) -> bool:
    """Tells whether a union ref entry accepts a data ``$type`` value."""
    if reference == type_name:
        return True
    if reference.startswith('#'):
        name = reference[1:]
        return type_name == name or type_name.endswith(f"#{name}")
    if '#' not in reference:
        return type_name == f"{reference}#main"
    if reference.endswith('#main'):
        return type_name == reference[:-len('#main')]
    return False


@dataclass(frozen=True)
class ValidationContext:
    """State carried through one validation call.

    Attributes:
        catalog: Lexicon documents by id, read-only during traversal
        path: Dotted location used in error messages
        current_document_id: Lexicon against which local references resolve
        references: Fully qualified references currently being followed
        schema_validator: Re-entrant schema dispatcher
        data_validator: Re-entrant data dispatcher
        depth: Current nesting depth
        max_depth: Nesting depth at which traversal is aborted
    """
    catalog: Mapping[str, LexiconDocument] = field(default_factory=dict)
    path: str = ''
    current_document_id: Optional[str] = None
    references: FrozenSet[str] = frozenset()
    schema_validator: Optional[SchemaValidator] = None
    data_validator: Optional[DataValidator] = None
    depth: int = 0
    max_depth: int = MAX_VALIDATION_DEPTH

    def with_path(self, segment: str) -> 'ValidationContext':
        path = f"{self.path}.{segment}" if self.path else segment
        return replace(self, path=path, depth=self.depth + 1)

    def with_index(self, index: int) -> 'ValidationContext':
        return replace(self, path=f"{self.path}[{index}]", depth=self.depth + 1)

    def with_current_document(self, document_id: str) -> 'ValidationContext':
        return replace(self, current_document_id=document_id)

    def with_reference(self, reference: str) -> 'ValidationContext':
        return replace(self, references=self.references | {reference})

    def has_reference(self, reference: str) -> bool:
        return reference in self.references

    def qualify(self, reference: str) -> str:
        """Returns the ``document#name`` form of a reference."""
        document_id, name = parse_reference(reference, self.current_document_id, self.path)
        return f"{document_id}#{name}"

    def lookup(self, document_id: str, name: str) -> Optional[SchemaNode]:
        document = self.catalog.get(document_id)
        if document is None:
            return None
        return document.defs.get(name)

    def resolve(self, reference: str) -> Optional[SchemaNode]:
        """Resolves a reference against the catalog.

        Returns:
            The target schema node, or None if the lexicon or the definition
            does not exist

        Raises:
            InvalidSchemaError: If the reference is malformed
        """
        document_id, name = parse_reference(reference, self.current_document_id, self.path)
        return self.lookup(document_id, name)

    def check_definition(self, document_id: str, name: str, node: SchemaNode) -> None:
        """Checks the shape of a top-level definition.

        The check runs at ``defs.<name>`` inside ``document_id`` regardless of
        where this context currently points.

        Raises:
            InvalidSchemaError: With the message prefixed by ``<document_id>#<name>: ``
        """
        definition_ctx = replace(self, path=f"defs.{name}", current_document_id=document_id,
                                 references=frozenset(), depth=1)
        try:
            definition_ctx.validate_schema(node)
        except InvalidSchemaError as e:
            raise InvalidSchemaError(f"{document_id}#{name}: {e.message}") from e

    def validate_schema(self, node: SchemaNode) -> None:
        self.schema_validator(node, self)

    def validate_data(self, value: Any, node: SchemaNode) -> None:
        self.data_validator(value, node, self)
