# tests/test_share_codec.py

"""
Unit tests for shareable links.
"""

import base64
import json
import zlib
from unittest.mock import MagicMock

import pytest

from readme_pro.exceptions import CorruptShareLinkError
from readme_pro.session import WizardSession
from readme_pro.share_codec import (
    FRAGMENT_MARKER,
    MAX_PAYLOAD_BYTES,
    build_share_url,
    consume_share_url,
    decode,
    encode,
    extract_token,
)


class TestEncodeDecode:
    """Test cases for token encoding."""

    def test_round_trip_without_secrets(self, sample_form):
        token = encode(sample_form)

        decoded = decode(token)

        expected = {k: v for k, v in sample_form.items() if k not in ("apiKey", "apiProvider")}
        assert decoded == expected

    def test_round_trip_exact(self):
        state = {"projectName": "Demo Project", "description": "..."}
        assert decode(encode(state)) == state

    def test_token_is_url_safe(self, sample_form):
        token = encode(dict(sample_form, description="??>>~~ ünïcödé ~~<<??" * 20))

        assert "+" not in token
        assert "/" not in token
        assert "=" not in token

    def test_key_order_does_not_change_token(self):
        assert encode({"a": 1, "b": 2}) == encode({"b": 2, "a": 1})

    def test_unicode_survives(self):
        state = {"projectName": "Café ☕", "tone": "技术"}
        assert decode(encode(state)) == state

    def test_decodes_standard_alphabet_with_padding(self):
        """Tokens created by the web app use standard base64."""
        state = {"projectName": "Legacy share", "includeAPI": True}
        raw = zlib.compress(json.dumps(state).encode("utf-8"))
        token = base64.b64encode(raw).decode("ascii")

        assert decode(token) == state

    @pytest.mark.parametrize("token", [
        "",
        "not-valid-base64!!",
        "!!!not-base64!!!",
        base64.b64encode(b"not deflated").decode("ascii"),
        base64.b64encode(zlib.compress(b"{not json")).decode("ascii"),
        base64.b64encode(zlib.compress(b"[1, 2]")).decode("ascii"),
    ])
    def test_corrupt_token_raises(self, token):
        with pytest.raises(CorruptShareLinkError) as exc_info:
            decode(token)
        assert str(exc_info.value) == CorruptShareLinkError.DEFAULT_MESSAGE

    def test_deeply_nested_payload_raises(self):
        raw = zlib.compress(b"[" * 100000 + b"]" * 100000, 9)
        token = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

        with pytest.raises(CorruptShareLinkError):
            decode(token)

    def test_oversized_payload_raises(self):
        raw = zlib.compress(b" " * (MAX_PAYLOAD_BYTES + 1) + b"{}", 9)

        with pytest.raises(CorruptShareLinkError):
            decode(base64.urlsafe_b64encode(raw).decode("ascii"))

    def test_truncated_payload_raises(self):
        raw = zlib.compress(json.dumps({"projectName": "Demo"}).encode("utf-8"))

        with pytest.raises(CorruptShareLinkError):
            decode(base64.urlsafe_b64encode(raw[:-4]).decode("ascii"))

    def test_nested_link_reported_by_session(self, storage):
        raw = zlib.compress(b"[" * 100000 + b"]" * 100000, 9)
        url = "https://readme.example/" + FRAGMENT_MARKER + base64.urlsafe_b64encode(raw).decode("ascii")
        session = WizardSession(storage, MagicMock(), autosave_delay=60)

        assert session.start(url) == url
        assert session.last_error == CorruptShareLinkError.DEFAULT_MESSAGE


class TestShareUrls:
    """Test cases for share URL handling."""

    def test_build_replaces_existing_fragment(self):
        url = build_share_url("https://readme.example/app#old", {"projectName": "X"})

        assert url.startswith("https://readme.example/app" + FRAGMENT_MARKER)
        assert "#old" not in url

    def test_extract_token(self):
        assert extract_token("https://x.example/#data=abc") == "abc"
        assert extract_token("https://x.example/#other") is None
        assert extract_token("https://x.example/") is None

    def test_consume_cleans_url(self, sample_form):
        url = build_share_url("https://readme.example/", sample_form)

        state, cleaned = consume_share_url(url)

        assert cleaned == "https://readme.example/"
        assert state["projectName"] == "Demo Project"
        assert "apiKey" not in state

    def test_consume_without_token(self):
        assert consume_share_url("https://readme.example/") == (None, "https://readme.example/")

    def test_consume_corrupt_token_raises(self):
        with pytest.raises(CorruptShareLinkError):
            consume_share_url("https://readme.example/#data=%%%")
