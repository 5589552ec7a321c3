"""String format predicates for lexicon ``string`` fields.

Each predicate takes a string and returns a bool; none of them depend on the
validation context. The syntax rules follow the AT Protocol identifier and
data model definitions.
"""

import base64
import binascii
import datetime
import re
from typing import Callable, Dict, Optional, Tuple

DATETIME_PATTERN = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d{1,20})?(Z|[+-]\d{2}:\d{2})$'
)
URI_PATTERN = re.compile(r'^[a-z][a-z0-9.+-]{0,80}:[!-~]+$')
DID_PATTERN = re.compile(r'^did:[a-z]+:[a-zA-Z0-9._:%-]*[a-zA-Z0-9._-]$')
HANDLE_PATTERN = re.compile(
    r'^([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+'
    r'[a-zA-Z]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$'
)
NSID_PATTERN = re.compile(
    r'^[a-zA-Z]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?'
    r'(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+'
    r'\.[a-zA-Z][a-zA-Z0-9]{0,62}$'
)
LANGUAGE_PATTERN = re.compile(
    r'^('
    r'([a-zA-Z]{2,3}(-[a-zA-Z]{3}){0,3}|[a-zA-Z]{4,8})'
    r'(-[a-zA-Z]{4})?'
    r'(-([a-zA-Z]{2}|[0-9]{3}))?'
    r'(-([a-zA-Z0-9]{5,8}|[0-9][a-zA-Z0-9]{3}))*'
    r'(-[0-9a-wy-zA-WY-Z](-[a-zA-Z0-9]{2,8})+)*'
    r'(-x(-[a-zA-Z0-9]{1,8})+)?'
    r'|x(-[a-zA-Z0-9]{1,8})+'
    r'|i-[a-zA-Z]{1,8}'
    r')$'
)
TID_PATTERN = re.compile(r'^[234567abcdefghij][234567abcdefghijklmnopqrstuvwxyz]{12}$')
RECORD_KEY_PATTERN = re.compile(r'^[a-zA-Z0-9_~.:-]{1,512}$')
BASE32_PATTERN = re.compile(r'^[a-z2-7]+$')
CID_PATTERN = re.compile(r'^[a-zA-Z0-9+=]{8,256}$')

MAX_DATETIME_LENGTH = 64
MAX_URI_LENGTH = 8192
MAX_DID_LENGTH = 2048
MAX_HANDLE_LENGTH = 253
MAX_NSID_LENGTH = 317
MAX_CID_LENGTH = 256

# multicodec / multihash codes
CODEC_RAW = 0x55
HASH_SHA256 = 0x12


def is_valid_datetime(value: str) -> bool:
    """RFC 3339 datetime with mandatory timezone; ``-00:00`` is rejected."""
    if len(value) > MAX_DATETIME_LENGTH:
        return False
    match = DATETIME_PATTERN.match(value)
    if not match:
        return False
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    offset = match.group(8)
    if offset == '-00:00':
        return False
    if offset != 'Z' and (int(offset[1:3]) > 23 or int(offset[4:6]) > 59):
        return False
    try:
        datetime.datetime(year, month, day, hour, minute, second)
    except ValueError:
        return False
    return True


def is_valid_uri(value: str) -> bool:
    return len(value) <= MAX_URI_LENGTH and URI_PATTERN.match(value) is not None


def is_valid_did(value: str) -> bool:
    return len(value) <= MAX_DID_LENGTH and DID_PATTERN.match(value) is not None


def is_valid_handle(value: str) -> bool:
    return len(value) <= MAX_HANDLE_LENGTH and HANDLE_PATTERN.match(value) is not None


def is_valid_at_identifier(value: str) -> bool:
    if value.startswith('did:'):
        return is_valid_did(value)
    return is_valid_handle(value)


def is_valid_nsid(value: str) -> bool:
    """Reverse-domain authority plus a name segment, at least three segments."""
    if not isinstance(value, str) or len(value) > MAX_NSID_LENGTH:
        return False
    if NSID_PATTERN.match(value) is None:
        return False
    authority = value.rsplit('.', 1)[0]
    return len(authority) <= MAX_HANDLE_LENGTH


def is_valid_record_key(value: str) -> bool:
    if value in ('.', '..'):
        return False
    return RECORD_KEY_PATTERN.match(value) is not None


def is_valid_tid(value: str) -> bool:
    return TID_PATTERN.match(value) is not None


def is_valid_language(value: str) -> bool:
    return LANGUAGE_PATTERN.match(value) is not None


def is_valid_at_uri(value: str) -> bool:
    """``at://<authority>[/<collection>[/<record-key>]]``"""
    if len(value) > MAX_URI_LENGTH or not value.startswith('at://'):
        return False
    parts = value[len('at://'):].split('/')
    if len(parts) > 3:
        return False
    if not is_valid_at_identifier(parts[0]):
        return False
    if len(parts) >= 2 and not is_valid_nsid(parts[1]):
        return False
    if len(parts) == 3 and not is_valid_record_key(parts[2]):
        return False
    return True


def _read_varint(data: bytes, offset: int) -> Optional[Tuple[int, int]]:
    value = 0
    shift = 0
    while offset < len(data):
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7
        if shift > 63:
            return None
    return None


def decode_cid(value: str) -> Optional[Tuple[int, int, bytes]]:
    """Decodes a base32 CIDv1 string into ``(codec, hash_code, digest)``.

    Returns None for anything that is not a well formed CIDv1.
    """
    if not isinstance(value, str) or len(value) < 8 or len(value) > MAX_CID_LENGTH:
        return None
    if value[0] != 'b':
        return None
    body = value[1:]
    if BASE32_PATTERN.match(body) is None:
        return None
    try:
        data = base64.b32decode(body.upper() + '=' * (-len(body) % 8))
    except (binascii.Error, ValueError):
        return None
    fields = []
    offset = 0
    for _ in range(4):
        result = _read_varint(data, offset)
        if result is None:
            return None
        number, offset = result
        fields.append(number)
    version, codec, hash_code, digest_length = fields
    if version != 1:
        return None
    digest = data[offset:]
    if len(digest) != digest_length:
        return None
    return codec, hash_code, digest


def is_valid_cid(value: str) -> bool:
    """Loose CID syntax: multibase characters and length only.

    CIDv0 strings starting with ``Qmb`` are rejected.
    """
    if CID_PATTERN.match(value) is None:
        return False
    return not value.startswith('Qmb')


def is_valid_raw_cid(value: str) -> bool:
    """A CIDv1 with the raw codec and a sha-256 digest, as used by blob refs."""
    decoded = decode_cid(value)
    if decoded is None:
        return False
    codec, hash_code, digest = decoded
    return codec == CODEC_RAW and hash_code == HASH_SHA256 and len(digest) == 32


# Format names a lexicon ``string`` schema may declare.
STRING_FORMATS: Dict[str, Callable[[str], bool]] = {
    'datetime': is_valid_datetime,
    'uri': is_valid_uri,
    'at-uri': is_valid_at_uri,
    'did': is_valid_did,
    'handle': is_valid_handle,
    'at-identifier': is_valid_at_identifier,
    'nsid': is_valid_nsid,
    'cid': is_valid_cid,
    'language': is_valid_language,
    'tid': is_valid_tid,
    'record-key': is_valid_record_key,
}

FORMAT_VALIDATORS: Dict[str, Callable[[str], bool]] = dict(STRING_FORMATS, **{'raw-cid': is_valid_raw_cid})


def validate_string_format(value: str, fmt: str) -> Optional[str]:
    """Checks a string against a named format.

    Args:
        value: The string to check
        fmt: The format name, e.g. 'datetime' or 'nsid'

    Returns:
        None if the value is valid, otherwise an error message
    """
    predicate = FORMAT_VALIDATORS.get(fmt)
    if predicate is None:
        return f"unknown string format '{fmt}'"
    if not isinstance(value, str) or not predicate(value):
        return f"invalid {fmt} format: {value!r}"
    return None
