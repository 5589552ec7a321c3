"""Small constraint helpers shared by the per-type validators.

Schema-time helpers raise :class:`InvalidSchemaError`, data-time helpers raise
:class:`DataValidationError`. None of them recurse.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from lexicheck.errors import DataValidationError, InvalidSchemaError


def at(path: str, message: str) -> str:
    """Prefixes a message with its location, omitting an empty path."""
    path = path.lstrip('.')
    if path:
        return f"{path}: {message}"
    return message


def is_integer(value: Any) -> bool:
    """JSON integers only; booleans are not integers here."""
    return isinstance(value, int) and not isinstance(value, bool)


def json_type_name(value: Any) -> str:
    """Returns the JSON type name of a parsed value for error messages."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, int):
        return 'integer'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__


def check_allowed_fields(node: Dict[str, Any], allowed: Iterable[str], path: str) -> None:
    """Rejects any field of a schema node that is not in its allow-list."""
    allowed = set(allowed)
    for key in node.keys():
        if key not in allowed:
            raise InvalidSchemaError(at(path, f"unexpected field '{key}'"))


def check_required_fields(node: Dict[str, Any], required: Iterable[str], path: str) -> None:
    for key in required:
        if key not in node:
            raise InvalidSchemaError(at(path, f"missing required field '{key}'"))


def check_description(node: Dict[str, Any], path: str) -> None:
    if 'description' in node and not isinstance(node['description'], str):
        raise InvalidSchemaError(at(path, "description must be a string"))


def check_non_negative_integer(node: Dict[str, Any], key: str, path: str) -> Optional[int]:
    """Returns the value of an optional non-negative integer field."""
    if key not in node:
        return None
    value = node[key]
    if not is_integer(value):
        raise InvalidSchemaError(at(path, f"{key} must be an integer"))
    if value < 0:
        raise InvalidSchemaError(at(path, f"{key} must be non-negative, got {value}"))
    return value


def check_length_constraints(node: Dict[str, Any], path: str,
                             min_key: str = 'minLength', max_key: str = 'maxLength') -> None:
    """Validates a pair of length bounds: both >= 0 and min <= max."""
    minimum = check_non_negative_integer(node, min_key, path)
    maximum = check_non_negative_integer(node, max_key, path)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidSchemaError(
            at(path, f"{min_key} ({minimum}) cannot be greater than {max_key} ({maximum})"))


def check_range_constraints(node: Dict[str, Any], path: str) -> None:
    """Validates integer minimum/maximum: both integers and min <= max."""
    for key in ('minimum', 'maximum'):
        if key in node and not is_integer(node[key]):
            raise InvalidSchemaError(at(path, f"{key} must be an integer"))
    minimum = node.get('minimum')
    maximum = node.get('maximum')
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidSchemaError(
            at(path, f"minimum ({minimum}) cannot be greater than maximum ({maximum})"))


def check_const_default_exclusive(node: Dict[str, Any], path: str) -> None:
    if 'const' in node and 'default' in node:
        raise InvalidSchemaError(at(path, "cannot have both 'const' and 'default'"))


def check_enum_values(node: Dict[str, Any], path: str,
                      predicate: Callable[[Any], bool], type_name: str) -> Optional[List[Any]]:
    """Validates that an optional enum is an array of values of one JSON type."""
    if 'enum' not in node:
        return None
    values = node['enum']
    if not isinstance(values, list):
        raise InvalidSchemaError(at(path, "enum must be an array"))
    for i, value in enumerate(values):
        if not predicate(value):
            raise InvalidSchemaError(at(path, f"enum[{i}] must be a {type_name}"))
    return values


def check_string_list(node: Dict[str, Any], key: str, path: str) -> Optional[List[str]]:
    if key not in node:
        return None
    values = node[key]
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise InvalidSchemaError(at(path, f"{key} must be an array of strings"))
    return values


def check_data_length(length: int, node: Dict[str, Any], path: str, unit: str,
                      min_key: str = 'minLength', max_key: str = 'maxLength') -> None:
    """Checks a measured data length against the bounds declared in a schema."""
    minimum = node.get(min_key)
    maximum = node.get(max_key)
    if minimum is not None and length < minimum:
        raise DataValidationError(
            at(path, f"{unit} length {length} is less than {min_key} {minimum}"))
    if maximum is not None and length > maximum:
        raise DataValidationError(
            at(path, f"{unit} length {length} exceeds {max_key} {maximum}"))


def check_data_enum(value: Any, node: Dict[str, Any], path: str) -> None:
    values = node.get('enum')
    if values is not None and value not in values:
        raise DataValidationError(at(path, f"value {value!r} is not one of the allowed values {values}"))


# Types that may only appear as top-level lexicon definitions.
PRIMARY_TYPES = frozenset({'record', 'query', 'procedure', 'subscription', 'params'})


def check_field_type(node: Any, path: str) -> None:
    """Rejects primary types nested inside objects, arrays or records."""
    if isinstance(node, dict) and node.get('type') in PRIMARY_TYPES:
        raise InvalidSchemaError(
            at(path, f"type '{node['type']}' is only allowed as a top-level definition"))


def schema_list(node: Dict[str, Any], key: str, path: str) -> List[Any]:
    """Reads an optional array field of a schema node while checking data."""
    values = node.get(key, [])
    if not isinstance(values, list):
        raise InvalidSchemaError(at(path, f"{key} must be an array"))
    return values


def schema_mapping(node: Dict[str, Any], key: str, path: str) -> Dict[str, Any]:
    """Reads an optional object field of a schema node while checking data."""
    values = node.get(key, {})
    if not isinstance(values, dict):
        raise InvalidSchemaError(at(path, f"{key} must be an object"))
    return values
