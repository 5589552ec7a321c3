"""Routes schema nodes to their per-type validators.

Two parallel dispatchers exist, one checking the shape of a schema node and
one checking a data value against a node. Both are stored on the validation
context by :func:`new_context` so the composite validators can re-enter them
without importing this module.
"""

from typing import Any, Dict, Mapping, Optional

from lexicheck import composites, primary, primitives
from lexicheck.constraints import at
from lexicheck.context import MAX_VALIDATION_DEPTH, DataValidator, SchemaValidator, ValidationContext
from lexicheck.errors import DataValidationError, InvalidSchemaError
from lexicheck.lexicon import LexiconDocument

SCHEMA_VALIDATORS: Dict[str, SchemaValidator] = {
    'string': primitives.check_string_schema,
    'integer': primitives.check_integer_schema,
    'boolean': primitives.check_boolean_schema,
    'bytes': primitives.check_bytes_schema,
    'blob': primitives.check_blob_schema,
    'cid-link': primitives.check_cid_link_schema,
    'null': primitives.check_null_schema,
    'token': primitives.check_token_schema,
    'unknown': primitives.check_unknown_schema,
    'object': composites.check_object_schema,
    'array': composites.check_array_schema,
    'union': composites.check_union_schema,
    'ref': composites.check_ref_schema,
    'record': primary.check_record_schema,
    'query': primary.check_query_schema,
    'procedure': primary.check_procedure_schema,
    'subscription': primary.check_subscription_schema,
    'params': primary.check_params_schema,
}

DATA_VALIDATORS: Dict[str, DataValidator] = {
    'string': primitives.check_string_data,
    'integer': primitives.check_integer_data,
    'boolean': primitives.check_boolean_data,
    'bytes': primitives.check_bytes_data,
    'blob': primitives.check_blob_data,
    'cid-link': primitives.check_cid_link_data,
    'null': primitives.check_null_data,
    'token': primitives.check_token_data,
    'unknown': primitives.check_unknown_data,
    'object': composites.check_object_data,
    'array': composites.check_array_data,
    'union': composites.check_union_data,
    'ref': composites.check_ref_data,
    'record': primary.check_record_data,
    'query': primary.check_query_data,
    'procedure': primary.check_procedure_data,
    'subscription': primary.check_subscription_data,
    'params': primary.check_params_data,
}


def _schema_type(node: Any, path: str) -> str:
    if not isinstance(node, dict):
        raise InvalidSchemaError(at(path, "schema must be an object"))
    if 'type' not in node:
        raise InvalidSchemaError(at(path, "missing required field 'type'"))
    schema_type = node['type']
    if not isinstance(schema_type, str):
        raise InvalidSchemaError(at(path, "type must be a string"))
    return schema_type


def check_schema(node: Any, ctx: ValidationContext) -> None:
    """Checks the shape of a schema node.

    Raises:
        InvalidSchemaError: If the node or anything nested in it is malformed
    """
    if ctx.depth > ctx.max_depth:
        raise InvalidSchemaError(at(ctx.path, f"maximum nesting depth {ctx.max_depth} exceeded"))
    schema_type = _schema_type(node, ctx.path)
    validator = SCHEMA_VALIDATORS.get(schema_type)
    if validator is None:
        raise InvalidSchemaError(at(ctx.path, f"unknown type '{schema_type}'"))
    validator(node, ctx)


def check_data(value: Any, node: Any, ctx: ValidationContext) -> None:
    """Checks a data value against a schema node.

    Raises:
        DataValidationError: If the value does not conform
        InvalidSchemaError: If the schema node has no known type
    """
    if ctx.depth > ctx.max_depth:
        raise DataValidationError(at(ctx.path, f"maximum nesting depth {ctx.max_depth} exceeded"))
    schema_type = _schema_type(node, ctx.path)
    validator = DATA_VALIDATORS.get(schema_type)
    if validator is None:
        raise InvalidSchemaError(at(ctx.path, f"unknown type '{schema_type}'"))
    validator(value, node, ctx)


def new_context(catalog: Optional[Mapping[str, LexiconDocument]] = None,
                current_document_id: Optional[str] = None,
                path: str = '',
                max_depth: int = MAX_VALIDATION_DEPTH) -> ValidationContext:
    """Creates a root context wired to the dispatchers of this module."""
    return ValidationContext(
        catalog=catalog if catalog is not None else {},
        path=path,
        current_document_id=current_document_id,
        schema_validator=check_schema,
        data_validator=check_data,
        max_depth=max_depth,
    )
