"""Validators for the composite lexicon types: object, array, union and ref.

These are the recursive validators. They never call the dispatcher directly;
nested nodes are handed back through ``ctx.validate_schema`` and
``ctx.validate_data``.
"""

from typing import Any, Dict

from lexicheck.constraints import (
    at,
    check_allowed_fields,
    check_data_length,
    check_description,
    check_field_type,
    check_length_constraints,
    check_required_fields,
    check_string_list,
    json_type_name,
    schema_list,
    schema_mapping,
)
from lexicheck.context import ValidationContext, check_reference_syntax, parse_reference, ref_matches_type
from lexicheck.errors import DataValidationError, InvalidSchemaError

OBJECT_FIELDS = {'type', 'description', 'properties', 'required', 'nullable'}
ARRAY_FIELDS = {'type', 'description', 'items', 'minLength', 'maxLength'}
UNION_FIELDS = {'type', 'description', 'refs', 'closed'}
REF_FIELDS = {'type', 'description', 'ref'}


def _check_declared_names(node: Dict[str, Any], key: str, properties: Dict[str, Any], path: str) -> None:
    for name in check_string_list(node, key, path) or []:
        if name not in properties:
            raise InvalidSchemaError(at(path, f"{key} field '{name}' is not defined in properties"))


def _follow_reference(reference: str, value: Any, ctx: ValidationContext) -> None:
    """Validates a value against the definition a reference points to.

    The cycle guard is checked before resolving. The target definition is
    schema checked before any data is checked against it, and it is validated
    in the context of its own lexicon so its local references resolve there.
    """
    path = ctx.path
    if reference.startswith('#') and ctx.current_document_id is None:
        raise DataValidationError(
            at(path, f"cannot resolve local reference '{reference}' without a current lexicon"))
    document_id, name = parse_reference(reference, ctx.current_document_id, path)
    key = f"{document_id}#{name}"
    if ctx.has_reference(key):
        raise DataValidationError(at(path, f"circular reference detected: {key}"))
    target = ctx.lookup(document_id, name)
    if target is None:
        raise DataValidationError(at(path, f"reference '{reference}' could not be resolved"))
    ctx.check_definition(document_id, name, target)
    ref_ctx = ctx.with_reference(key).with_current_document(document_id)
    ref_ctx.validate_data(value, target)


# object

def check_object_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Checks an object schema and every property schema nested in it.

    Args:
        node: The object schema
        ctx: The validation context positioned at the object
    """
    path = ctx.path
    check_allowed_fields(node, OBJECT_FIELDS, path)
    check_description(node, path)
    properties = node.get('properties', {})
    if not isinstance(properties, dict):
        raise InvalidSchemaError(at(path, "properties must be an object"))
    _check_declared_names(node, 'required', properties, path)
    _check_declared_names(node, 'nullable', properties, path)
    for name, prop in properties.items():
        prop_ctx = ctx.with_path(f"properties.{name}")
        if not name:
            raise InvalidSchemaError(at(path, "property names cannot be empty"))
        check_field_type(prop, prop_ctx.path)
        prop_ctx.validate_schema(prop)


def check_object_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Checks a data object against an object schema.

    Required fields must be present with any value. Fields that are not
    declared in ``properties`` are accepted without checks.
    """
    path = ctx.path
    if not isinstance(value, dict):
        raise DataValidationError(at(path, f"expected object, got {json_type_name(value)}"))
    for name in schema_list(node, 'required', path):
        if name not in value:
            raise DataValidationError(at(path, f"required field '{name}' is missing"))
    nullable = schema_list(node, 'nullable', path)
    for name, prop in schema_mapping(node, 'properties', path).items():
        if name not in value:
            continue
        field_ctx = ctx.with_path(name)
        field_value = value[name]
        if field_value is None:
            if name in nullable:
                continue
            raise DataValidationError(at(field_ctx.path, "cannot be null"))
        field_ctx.validate_data(field_value, prop)


# array

def check_array_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, ARRAY_FIELDS, path)
    check_required_fields(node, ('items',), path)
    check_description(node, path)
    check_length_constraints(node, path)
    items_ctx = ctx.with_path('items')
    check_field_type(node['items'], items_ctx.path)
    items_ctx.validate_schema(node['items'])


def check_array_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    if not isinstance(value, list):
        raise DataValidationError(at(ctx.path, f"expected array, got {json_type_name(value)}"))
    if 'items' not in node:
        raise InvalidSchemaError(at(ctx.path, "missing required field 'items'"))
    check_data_length(len(value), node, ctx.path, 'array')
    items = node['items']
    for i, item in enumerate(value):
        ctx.with_index(i).validate_data(item, items)


# union

def check_union_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Checks a union schema.

    Every ref must be syntactically valid. When the context knows the current
    lexicon, every ref must also resolve against the catalog.
    """
    path = ctx.path
    check_allowed_fields(node, UNION_FIELDS, path)
    check_required_fields(node, ('refs',), path)
    check_description(node, path)
    refs = node['refs']
    if not isinstance(refs, list):
        raise InvalidSchemaError(at(path, "refs must be an array"))
    closed = node.get('closed', False)
    if not isinstance(closed, bool):
        raise InvalidSchemaError(at(path, "closed must be a boolean"))
    if closed and not refs:
        raise InvalidSchemaError(at(path, "closed union must have at least one ref"))
    for i, reference in enumerate(refs):
        check_reference_syntax(reference, f"{path}.refs[{i}]")
    if ctx.current_document_id is None:
        return
    for reference in refs:
        if ctx.resolve(reference) is None:
            raise InvalidSchemaError(at(path, f"union ref '{reference}' could not be resolved"))


def check_union_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    if not isinstance(value, dict):
        raise DataValidationError(at(path, f"union value must be an object, got {json_type_name(value)}"))
    type_name = value.get('$type')
    if not isinstance(type_name, str) or not type_name:
        raise DataValidationError(at(path, "union value is missing required field '$type'"))
    refs = schema_list(node, 'refs', path)
    for reference in refs:
        if not isinstance(reference, str):
            raise InvalidSchemaError(at(path, "refs must be an array of strings"))
    match = next((r for r in refs if ref_matches_type(r, type_name)), None)
    if match is None:
        if not refs:
            raise DataValidationError(at(path, f"union has no refs, cannot accept $type '{type_name}'"))
        if node.get('closed', False):
            raise DataValidationError(
                at(path, f"$type '{type_name}' is not one of the closed union refs {refs}"))
        return
    if ctx.catalog:
        _follow_reference(match, value, ctx)


# ref

def check_ref_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, REF_FIELDS, path)
    check_required_fields(node, ('ref',), path)
    check_description(node, path)
    reference = node['ref']
    check_reference_syntax(reference, path)
    if ctx.current_document_id is None:
        return
    if ctx.resolve(reference) is None:
        raise InvalidSchemaError(at(path, f"reference '{reference}' could not be resolved"))


def check_ref_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    reference = node.get('ref')
    if not isinstance(reference, str):
        raise InvalidSchemaError(at(ctx.path, "ref must be a string"))
    _follow_reference(reference, value, ctx)
