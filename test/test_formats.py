"""Tests for the string format predicates."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from lexicheck.formats import (
    is_valid_at_identifier,
    is_valid_at_uri,
    is_valid_cid,
    is_valid_datetime,
    is_valid_did,
    is_valid_handle,
    is_valid_language,
    is_valid_nsid,
    is_valid_raw_cid,
    is_valid_record_key,
    is_valid_tid,
    is_valid_uri,
    validate_string_format,
)

RAW_CID = "bafkreigh2akiscaildcqabsyg3dfr6chu3fgpregiymsck7e7aqa4s52zy"
DAG_CBOR_CID = "bafyreidfayvfuwqa7qlnopdjiqrxzs6blmoeu4rujcjtnci5beludirz2a"
CIDV0 = "QmbWqxBEKC3P8tqsKc98xmWNzrzDtRLMiMPL8wBuTGsMnR"


class TestIdentifierFormats(unittest.TestCase):
    """Test NSID, DID, handle and related identifiers."""

    def test_nsid(self):
        """Test NSID syntax."""
        self.assertTrue(is_valid_nsid("com.example.post"))
        self.assertTrue(is_valid_nsid("app.bsky.feed.post"))
        self.assertTrue(is_valid_nsid("com.example.getPost"))

        self.assertFalse(is_valid_nsid("com.example"))
        self.assertFalse(is_valid_nsid("com.example.foo-bar"))
        self.assertFalse(is_valid_nsid("com.example.3post"))
        self.assertFalse(is_valid_nsid("1com.example.post"))
        self.assertFalse(is_valid_nsid("com..example.post"))
        self.assertFalse(is_valid_nsid(""))

    def test_did(self):
        """Test DID syntax."""
        self.assertTrue(is_valid_did("did:plc:z72i7hdynmk6r22z27h6tvur"))
        self.assertTrue(is_valid_did("did:web:example.com"))

        self.assertFalse(is_valid_did("did:PLC:abc"))
        self.assertFalse(is_valid_did("did:plc:"))
        self.assertFalse(is_valid_did("plc:abc"))
        self.assertFalse(is_valid_did("did:plc:abc:"))

    def test_handle(self):
        """Test handle syntax."""
        self.assertTrue(is_valid_handle("alice.bsky.social"))
        self.assertTrue(is_valid_handle("example.com"))

        self.assertFalse(is_valid_handle("alice"))
        self.assertFalse(is_valid_handle("-bad.com"))
        self.assertFalse(is_valid_handle("a..b"))
        self.assertFalse(is_valid_handle("example.123"))

    def test_at_identifier(self):
        """Either a DID or a handle."""
        self.assertTrue(is_valid_at_identifier("alice.bsky.social"))
        self.assertTrue(is_valid_at_identifier("did:plc:z72i7hdynmk6r22z27h6tvur"))
        self.assertFalse(is_valid_at_identifier("did:"))
        self.assertFalse(is_valid_at_identifier("alice"))

    def test_tid(self):
        """Test TID syntax."""
        self.assertTrue(is_valid_tid("3jzfcijpj2z2a"))
        self.assertFalse(is_valid_tid("3jzfcijpj2z2"))
        self.assertFalse(is_valid_tid("kjzfcijpj2z2a"))
        self.assertFalse(is_valid_tid("3JZFCIJPJ2Z2A"))

    def test_record_key(self):
        """Test record key syntax."""
        for key in ("self", "3jzfcijpj2z2a", "example.com", "~1.2-3_", "literal:self"):
            self.assertTrue(is_valid_record_key(key), key)
        for key in (".", "..", "has space", "", "a/b"):
            self.assertFalse(is_valid_record_key(key), key)

    def test_language(self):
        """Test BCP-47 language tags."""
        for tag in ("en", "en-US", "pt-BR", "zh-Hant", "i-klingon"):
            self.assertTrue(is_valid_language(tag), tag)
        for tag in ("", "e", "en_US", "123"):
            self.assertFalse(is_valid_language(tag), tag)


class TestUriAndDatetimeFormats(unittest.TestCase):
    """Test URI, AT-URI and datetime formats."""

    def test_datetime(self):
        """Test RFC 3339 datetimes."""
        self.assertTrue(is_valid_datetime("1985-04-12T23:20:50.123Z"))
        self.assertTrue(is_valid_datetime("1996-12-19T16:39:57-08:00"))
        self.assertTrue(is_valid_datetime("2024-05-01T12:30:00Z"))

        self.assertFalse(is_valid_datetime("1985-04-12"))
        self.assertFalse(is_valid_datetime("1985-04-12T23:20:50"))
        self.assertFalse(is_valid_datetime("1985-02-30T00:00:00Z"))
        self.assertFalse(is_valid_datetime("1985-04-12T23:20:50-00:00"))
        self.assertFalse(is_valid_datetime("1985-04-12 23:20:50Z"))

    def test_uri(self):
        """Test generic URIs."""
        self.assertTrue(is_valid_uri("https://example.com/article"))
        self.assertTrue(is_valid_uri("mailto:alice@example.com"))
        self.assertFalse(is_valid_uri("no scheme"))
        self.assertFalse(is_valid_uri("https://exa mple.com"))
        self.assertFalse(is_valid_uri("https:"))

    def test_at_uri(self):
        """Test AT-URIs."""
        self.assertTrue(is_valid_at_uri("at://did:plc:z72i7hdynmk6r22z27h6tvur/app.bsky.feed.post/3jzfcijpj2z2a"))
        self.assertTrue(is_valid_at_uri("at://alice.bsky.social"))
        self.assertTrue(is_valid_at_uri("at://alice.bsky.social/app.bsky.feed.post"))

        self.assertFalse(is_valid_at_uri("https://example.com"))
        self.assertFalse(is_valid_at_uri("at://alice.bsky.social/notnsid"))
        self.assertFalse(is_valid_at_uri("at://alice.bsky.social/app.bsky.feed.post/3jz/extra"))
        self.assertFalse(is_valid_at_uri("at://"))


class TestCidFormats(unittest.TestCase):
    """Test CID and raw CID formats."""

    def test_cid(self):
        """CID syntax is checked by charset and length; Qmb CIDv0 strings are rejected."""
        self.assertTrue(is_valid_cid(RAW_CID))
        self.assertTrue(is_valid_cid(DAG_CBOR_CID))
        self.assertTrue(is_valid_cid("QmZTR5bcpQD7cFgTorqxZDYaew1Wqgfbd2ud9QqGPAkK2V"))
        self.assertTrue(is_valid_cid("zb2rhe5P4gXftAwvA4eXQ5HJwsER2owDyS9sKaQRRVQPn93bA"))
        self.assertFalse(is_valid_cid(CIDV0))
        self.assertFalse(is_valid_cid("bafkrei"))
        self.assertFalse(is_valid_cid("not a cid at all"))
        self.assertFalse(is_valid_cid("bafy/reid"))
        self.assertFalse(is_valid_cid("b" * 257))

    def test_raw_cid(self):
        """Only a decodable CIDv1 with the raw codec and a sha-256 digest is a raw CID."""
        self.assertTrue(is_valid_raw_cid(RAW_CID))
        self.assertFalse(is_valid_raw_cid(DAG_CBOR_CID))
        self.assertFalse(is_valid_raw_cid(CIDV0))
        self.assertFalse(is_valid_raw_cid("QmZTR5bcpQD7cFgTorqxZDYaew1Wqgfbd2ud9QqGPAkK2V"))
        self.assertFalse(is_valid_raw_cid(RAW_CID[:-4]))


class TestValidateStringFormat(unittest.TestCase):
    """Test the validate_string_format wrapper."""

    def test_valid_values(self):
        """Valid values produce no error."""
        self.assertIsNone(validate_string_format("com.example.post", "nsid"))
        self.assertIsNone(validate_string_format(RAW_CID, "raw-cid"))
        self.assertIsNone(validate_string_format("2024-05-01T12:30:00Z", "datetime"))

    def test_invalid_values(self):
        """Invalid values produce a message naming the format."""
        error = validate_string_format("not-a-handle", "handle")
        self.assertIsNotNone(error)
        self.assertIn("handle", error)

    def test_unknown_format(self):
        """Unknown format names produce a message instead of raising."""
        error = validate_string_format("anything", "email")
        self.assertIn("unknown string format", error)


if __name__ == '__main__':
    unittest.main()
