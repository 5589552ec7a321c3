"""Validators for the primitive lexicon types.

Covers string, integer, boolean, bytes, blob, cid-link, null, token and
unknown. Each type has a ``check_<type>_schema(node, ctx)`` function that
checks the schema node itself and a ``check_<type>_data(value, node, ctx)``
function that checks a data value against it.
"""

import base64
import binascii
from typing import Any, Dict, List

import regex

from lexicheck.constraints import (
    at,
    check_allowed_fields,
    check_const_default_exclusive,
    check_data_enum,
    check_data_length,
    check_description,
    check_enum_values,
    check_length_constraints,
    check_range_constraints,
    check_string_list,
    is_integer,
    json_type_name,
)
from lexicheck.context import ValidationContext
from lexicheck.errors import DataValidationError, InvalidSchemaError
from lexicheck.formats import STRING_FORMATS, is_valid_cid, is_valid_raw_cid

BASE_FIELDS = {'type', 'description'}
STRING_FIELDS = BASE_FIELDS | {
    'format', 'minLength', 'maxLength', 'minGraphemes', 'maxGraphemes',
    'knownValues', 'enum', 'const', 'default',
}
INTEGER_FIELDS = BASE_FIELDS | {'minimum', 'maximum', 'enum', 'const', 'default'}
BOOLEAN_FIELDS = BASE_FIELDS | {'const', 'default'}
BYTES_FIELDS = BASE_FIELDS | {'minLength', 'maxLength'}
BLOB_FIELDS = BASE_FIELDS | {'accept', 'maxSize'}
BLOB_DATA_FIELDS = ('$type', 'ref', 'mimeType', 'size')

GRAPHEME_PATTERN = regex.compile(r'\X')


def count_graphemes(value: str) -> int:
    """Counts extended grapheme clusters, so an emoji with modifiers is one."""
    return len(GRAPHEME_PATTERN.findall(value))


def _expect(value: Any, expected: type, type_name: str, path: str) -> None:
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise DataValidationError(at(path, f"expected {type_name}, got {json_type_name(value)}"))


# string

def _check_string_value(value: str, node: Dict[str, Any], path: str) -> None:
    check_data_length(len(value.encode('utf-8')), node, path, 'string')
    if 'minGraphemes' in node or 'maxGraphemes' in node:
        check_data_length(count_graphemes(value), node, path, 'grapheme',
                          'minGraphemes', 'maxGraphemes')
    fmt = node.get('format')
    if fmt is not None:
        predicate = STRING_FORMATS.get(fmt)
        if predicate is None:
            raise InvalidSchemaError(at(path, f"unknown string format {fmt!r}"))
        if not predicate(value):
            raise DataValidationError(at(path, f"string {value!r} is not a valid {fmt}"))
    check_data_enum(value, node, path)


def check_string_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, STRING_FIELDS, path)
    check_description(node, path)
    check_length_constraints(node, path)
    check_length_constraints(node, path, 'minGraphemes', 'maxGraphemes')
    if 'format' in node:
        fmt = node['format']
        if not isinstance(fmt, str) or fmt not in STRING_FORMATS:
            raise InvalidSchemaError(at(path, f"unknown string format {fmt!r}"))
    check_enum_values(node, path, lambda v: isinstance(v, str), 'string')
    check_string_list(node, 'knownValues', path)
    check_const_default_exclusive(node, path)
    for key in ('const', 'default'):
        if key not in node:
            continue
        if not isinstance(node[key], str):
            raise InvalidSchemaError(at(path, f"{key} must be a string"))
        try:
            _check_string_value(node[key], node, path)
        except DataValidationError as e:
            raise InvalidSchemaError(at(path, f"{key} value does not satisfy the schema ({e.message})")) from e


def check_string_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    _expect(value, str, 'string', ctx.path)
    if 'const' in node and value != node['const']:
        raise DataValidationError(at(ctx.path, f"must be constant value {node['const']!r}"))
    _check_string_value(value, node, ctx.path)


# integer

def _check_integer_value(value: int, node: Dict[str, Any], path: str) -> None:
    minimum = node.get('minimum')
    maximum = node.get('maximum')
    if minimum is not None and value < minimum:
        raise DataValidationError(at(path, f"value {value} is less than minimum {minimum}"))
    if maximum is not None and value > maximum:
        raise DataValidationError(at(path, f"value {value} exceeds maximum {maximum}"))
    check_data_enum(value, node, path)


def check_integer_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, INTEGER_FIELDS, path)
    check_description(node, path)
    check_range_constraints(node, path)
    check_enum_values(node, path, is_integer, 'integer')
    check_const_default_exclusive(node, path)
    for key in ('const', 'default'):
        if key not in node:
            continue
        if not is_integer(node[key]):
            raise InvalidSchemaError(at(path, f"{key} must be an integer"))
        try:
            _check_integer_value(node[key], node, path)
        except DataValidationError as e:
            raise InvalidSchemaError(at(path, f"{key} value does not satisfy the schema ({e.message})")) from e


def check_integer_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    _expect(value, int, 'integer', ctx.path)
    # const wins over range and enum errors
    if 'const' in node and value != node['const']:
        raise DataValidationError(at(ctx.path, f"must be constant value {node['const']}"))
    _check_integer_value(value, node, ctx.path)


# boolean

def check_boolean_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, BOOLEAN_FIELDS, path)
    check_description(node, path)
    check_const_default_exclusive(node, path)
    for key in ('const', 'default'):
        if key in node and not isinstance(node[key], bool):
            raise InvalidSchemaError(at(path, f"{key} must be a boolean"))


def check_boolean_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    _expect(value, bool, 'boolean', ctx.path)
    if 'const' in node and value != node['const']:
        raise DataValidationError(at(ctx.path, f"must be constant value {str(node['const']).lower()}"))


# null

def check_null_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    check_allowed_fields(node, BASE_FIELDS, ctx.path)
    check_description(node, ctx.path)


def check_null_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    if value is not None:
        raise DataValidationError(at(ctx.path, f"expected null, got {json_type_name(value)}"))


# bytes

def decode_base64(text: str) -> bytes:
    """Decodes standard base64, with or without trailing padding.

    Raises:
        binascii.Error: If the text is not valid base64
    """
    return base64.b64decode(text + '=' * (-len(text) % 4), validate=True)


def check_bytes_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    check_allowed_fields(node, BYTES_FIELDS, ctx.path)
    check_description(node, ctx.path)
    check_length_constraints(node, ctx.path)


def check_bytes_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    """Bytes are encoded as ``{"$bytes": "<base64>"}`` and nothing else.

    Length bounds apply to the decoded byte length.
    """
    path = ctx.path
    if not isinstance(value, dict) or set(value.keys()) != {'$bytes'}:
        raise DataValidationError(at(path, "bytes must be an object with a single '$bytes' field"))
    encoded = value['$bytes']
    if not isinstance(encoded, str):
        raise DataValidationError(at(path, "$bytes must be a base64 string"))
    try:
        decoded = decode_base64(encoded)
    except (binascii.Error, ValueError) as e:
        raise DataValidationError(at(path, "$bytes is not valid base64")) from e
    check_data_length(len(decoded), node, path, 'bytes')


# blob

def is_valid_mime_pattern(pattern: str) -> bool:
    """``type/subtype``, ``type/*`` or ``*/*``; a wildcard must fill a whole segment."""
    if pattern == '*/*':
        return True
    parts = pattern.split('/')
    if len(parts) != 2:
        return False
    major, minor = parts
    if not major or not minor or '*' in major:
        return False
    return '*' not in minor or minor == '*'


def mime_type_accepted(mime_type: str, accept: List[str]) -> bool:
    for pattern in accept:
        if pattern == '*/*' or pattern == mime_type:
            return True
        if pattern.endswith('/*') and mime_type.startswith(pattern[:-1]):
            return True
    return False


def check_blob_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    check_allowed_fields(node, BLOB_FIELDS, path)
    check_description(node, path)
    accept = check_string_list(node, 'accept', path)
    for pattern in accept or []:
        if not is_valid_mime_pattern(pattern):
            raise InvalidSchemaError(at(path, f"invalid accept pattern '{pattern}'"))
    if 'maxSize' in node:
        max_size = node['maxSize']
        if not is_integer(max_size) or max_size <= 0:
            raise InvalidSchemaError(at(path, "maxSize must be a positive integer"))


def check_blob_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    path = ctx.path
    if not isinstance(value, dict):
        raise DataValidationError(at(path, f"expected blob object, got {json_type_name(value)}"))
    for key in BLOB_DATA_FIELDS:
        if key not in value:
            raise DataValidationError(at(path, f"blob is missing required field '{key}'"))
    for key in value.keys():
        if key not in BLOB_DATA_FIELDS:
            raise DataValidationError(at(path, f"blob has unexpected field '{key}'"))
    if value['$type'] != 'blob':
        raise DataValidationError(at(path, "blob $type must be 'blob'"))
    ref = value['ref']
    if not isinstance(ref, dict) or set(ref.keys()) != {'$link'}:
        raise DataValidationError(at(path, "blob ref must be an object with a single '$link' field"))
    if not isinstance(ref['$link'], str) or not is_valid_raw_cid(ref['$link']):
        raise DataValidationError(at(path, f"blob ref {ref['$link']!r} is not a valid raw CID"))
    mime_type = value['mimeType']
    if not isinstance(mime_type, str) or not mime_type:
        raise DataValidationError(at(path, "blob mimeType must be a non-empty string"))
    size = value['size']
    if not is_integer(size) or size < 0:
        raise DataValidationError(at(path, "blob size must be a non-negative integer"))
    accept = node.get('accept')
    if accept is not None and not mime_type_accepted(mime_type, accept):
        raise DataValidationError(at(path, f"blob mimeType '{mime_type}' is not accepted, expected one of {accept}"))
    max_size = node.get('maxSize')
    if max_size is not None and size > max_size:
        raise DataValidationError(at(path, f"blob size {size} exceeds maxSize {max_size}"))


# cid-link

def check_cid_link_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    check_allowed_fields(node, BASE_FIELDS, ctx.path)
    check_description(node, ctx.path)


def check_cid_link_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    if not isinstance(value, dict) or set(value.keys()) != {'$link'}:
        raise DataValidationError(at(ctx.path, "cid-link must be an object with a single '$link' field"))
    link = value['$link']
    if not isinstance(link, str) or not is_valid_cid(link):
        raise DataValidationError(at(ctx.path, f"{link!r} is not a valid CID"))


# token

def check_token_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    check_allowed_fields(node, BASE_FIELDS, ctx.path)
    check_description(node, ctx.path)


def check_token_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    # Which token names are acceptable is decided by the caller.
    if not isinstance(value, str) or not value:
        raise DataValidationError(at(ctx.path, "token must be a non-empty string"))


# unknown

def check_unknown_schema(node: Dict[str, Any], ctx: ValidationContext) -> None:
    check_allowed_fields(node, BASE_FIELDS, ctx.path)
    check_description(node, ctx.path)


def check_unknown_data(value: Any, node: Dict[str, Any], ctx: ValidationContext) -> None:
    if not isinstance(value, dict):
        raise DataValidationError(at(ctx.path, f"unknown must be an object, got {json_type_name(value)}"))
    if '$bytes' in value:
        raise DataValidationError(at(ctx.path, "unknown cannot be a bytes object"))
    if value.get('$type') == 'blob':
        raise DataValidationError(at(ctx.path, "unknown cannot be a blob object"))
