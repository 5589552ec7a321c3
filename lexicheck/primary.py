"""Validators for the primary lexicon types.

``record`` wraps an object schema; ``query``, ``procedure`` and
``subscription`` describe RPC endpoints built from a ``params`` schema and
body wrappers. These types are only valid as top-level definitions.
"""

from typing import Any, Dict

from lexicheck.composites import check_object_data, check_object_schema
from lexicheck.constraints import (
    at,
    check_allowed_fields,
    check_description,
    check_required_fields,
    check_string_list,
    json_type_name,
    schema_list,
    schema_mapping,
)
from lexicheck.context import ValidationContext
from lexicheck.errors import DataValidationError, InvalidSchemaError

RECORD_FIELDS = {'type', 'description', 'key', 'record'}
PARAMS_FIELDS = {'type', 'description', 'properties', 'required'}
QUERY_FIELDS = {'type', 'description', 'parameters', 'output', 'errors'}
PROCEDURE_FIELDS = {'type', 'description', 'parameters', 'input', 'output', 'errors'}
SUBSCRIPTION_FIELDS = {'type', 'description', 'parameters', 'message', 'errors'}
BODY_FIELDS = {'description', 'encoding', 'schema'}
MESSAGE_FIELDS = {'description', 'schema'}

RECORD_KEY_TYPES = {'tid', 'any', 'nsid'}
LITERAL_KEY_PREFIX = 'literal:'
PARAM_TYPES = {'boolean', 'integer', 'string', 'unknown'}
BODY_SCHEMA_TYPES = {'object', 'ref', 'union'}


def is_valid_record_key_type(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    if key in RECORD_KEY_TYPES:
        return True
    return key.startswith(LITERAL_KEY_PREFIX) and len(key) > len(LITERAL_KEY_PREFIX)


# record

def check_record_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, RECORD_FIELDS, path)
    check_required_fields(node, ('key', 'record'), path)
    check_description(node, path)
    if not is_valid_record_key_type(node['key']):
        raise InvalidSchemaError(
            at(path, f"invalid record key type {node['key']!r}, expected tid, any, nsid or literal:<value>"))
    record = node['record']
    record_ctx = ctx.with_path('record')
    if not isinstance(record, dict) or record.get('type') != 'object':
        raise InvalidSchemaError(at(record_ctx.path, "record must be an object schema"))
    check_object_schema(record, record_ctx)


def check_record_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    record = node.get('record')
    if not isinstance(record, dict):
        raise InvalidSchemaError(at(ctx.path, "record must be an object schema"))
    check_object_data(value, record, ctx)


# params

def check_params_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Checks a params schema.

    Properties are restricted to boolean, integer, string and unknown, or
    arrays of those.
    """
    path = ctx.path
    check_allowed_fields(node, PARAMS_FIELDS, path)
    check_description(node, path)
    properties = node.get('properties', {})
    if not isinstance(properties, dict):
        raise InvalidSchemaError(at(path, "properties must be an object"))
    for name in check_string_list(node, 'required', path) or []:
        if name not in properties:
            raise InvalidSchemaError(at(path, f"required field '{name}' is not defined in properties"))
    for name, prop in properties.items():
        if not name:
            raise InvalidSchemaError(at(path, "parameter names cannot be empty"))
        prop_ctx = ctx.with_path(f"properties.{name}")
        if not isinstance(prop, dict):
            raise InvalidSchemaError(at(prop_ctx.path, "parameter schema must be an object"))
        prop_type = prop.get('type')
        if prop_type == 'array':
            items = prop.get('items')
            item_type = items.get('type') if isinstance(items, dict) else None
            if item_type not in PARAM_TYPES:
                raise InvalidSchemaError(
                    at(prop_ctx.path, f"array parameter items cannot be of type {item_type!r}"))
        elif prop_type not in PARAM_TYPES:
            raise InvalidSchemaError(at(prop_ctx.path, f"parameter cannot be of type {prop_type!r}"))
        prop_ctx.validate_schema(prop)


def check_params_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    if not isinstance(value, dict):
        raise DataValidationError(at(path, f"parameters must be an object, got {json_type_name(value)}"))
    for name in schema_list(node, 'required', path):
        if name not in value:
            raise DataValidationError(at(path, f"required parameter '{name}' is missing"))
    for name, prop in schema_mapping(node, 'properties', path).items():
        if name not in value:
            continue
        param_ctx = ctx.with_path(name)
        if value[name] is None:
            raise DataValidationError(at(param_ctx.path, "cannot be null"))
        param_ctx.validate_data(value[name], prop)


# body wrappers and shared RPC fields

def _check_body(body: Any, ctx: ValidationContext) -> None:
    path = ctx.path
    if not isinstance(body, dict):
        raise InvalidSchemaError(at(path, "must be an object"))
    check_allowed_fields(body, BODY_FIELDS, path)
    check_required_fields(body, ('encoding',), path)
    check_description(body, path)
    if not isinstance(body['encoding'], str) or not body['encoding']:
        raise InvalidSchemaError(at(path, "encoding must be a non-empty string"))
    if 'schema' in body:
        schema_ctx = ctx.with_path('schema')
        schema = body['schema']
        if not isinstance(schema, dict) or schema.get('type') not in BODY_SCHEMA_TYPES:
            raise InvalidSchemaError(at(schema_ctx.path, "body schema must be of type object, ref or union"))
        schema_ctx.validate_schema(schema)


def _check_message(message: Any, ctx: ValidationContext) -> None:
    path = ctx.path
    if not isinstance(message, dict):
        raise InvalidSchemaError(at(path, "must be an object"))
    check_allowed_fields(message, MESSAGE_FIELDS, path)
    check_required_fields(message, ('schema',), path)
    check_description(message, path)
    schema_ctx = ctx.with_path('schema')
    schema = message['schema']
    if not isinstance(schema, dict) or schema.get('type') != 'union':
        raise InvalidSchemaError(at(schema_ctx.path, "message schema must be a union"))
    schema_ctx.validate_schema(schema)


def _check_errors(errors: Any, ctx: ValidationContext) -> None:
    if not isinstance(errors, list):
        raise InvalidSchemaError(at(ctx.path, "errors must be an array"))
    for i, error in enumerate(errors):
        error_ctx = ctx.with_index(i)
        if not isinstance(error, dict) or not isinstance(error.get('name'), str) or not error['name']:
            raise InvalidSchemaError(at(error_ctx.path, "error must be an object with a non-empty name"))


def _check_parameters(parameters: Any, ctx: ValidationContext) -> None:
    if not isinstance(parameters, dict) or parameters.get('type') != 'params':
        raise InvalidSchemaError(at(ctx.path, "parameters must be a params schema"))
    check_params_schema(parameters, ctx)


def _check_rpc(node: Dict[str, Any], ctx: ValidationContext, allowed: set) -> None:
    check_allowed_fields(node, allowed, ctx.path)
    check_description(node, ctx.path)
    if 'parameters' in node:
        _check_parameters(node['parameters'], ctx.with_path('parameters'))
    for key in ('input', 'output'):
        if key in node:
            _check_body(node[key], ctx.with_path(key))
    if 'message' in node:
        _check_message(node['message'], ctx.with_path('message'))
    if 'errors' in node:
        _check_errors(node['errors'], ctx.with_path('errors'))


# query, procedure, subscription

def check_query_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    _check_rpc(node, ctx, QUERY_FIELDS)


def check_procedure_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    _check_rpc(node, ctx, PROCEDURE_FIELDS)


def check_subscription_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    _check_rpc(node, ctx, SUBSCRIPTION_FIELDS)


def check_query_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Validates query parameters; a query without parameters accepts anything."""
    if 'parameters' in node:
        check_params_data(value, node['parameters'], ctx)


def check_procedure_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Validates a procedure input body against ``input.schema``."""
    body = node.get('input')
    if not isinstance(body, dict) or 'schema' not in body:
        return
    ctx.validate_data(value, body['schema'])


def check_subscription_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    if 'parameters' in node:
        check_params_data(value, node['parameters'], ctx)
