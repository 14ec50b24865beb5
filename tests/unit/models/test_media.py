"""Unit tests for MediaRef and payload helpers."""

import pytest

from docreel.models.media import (
    EMPTY_MEDIA,
    MediaRef,
    decode_payload,
    encode_payload,
    split_data_url,
    url_scheme,
)


class TestMediaRef:
    """Tests for MediaRef normalization."""

    def test_data_url_becomes_payload(self, video_payload):
        """Test data: URLs are moved into the payload slot."""
        ref = MediaRef(url=f"data:video/mp4;base64,{video_payload}")

        assert ref.url is None
        assert ref.payload == video_payload
        assert ref.mime_type == "video/mp4"

    def test_existing_payload_wins_over_data_url(self, video_payload):
        """Test an explicit payload is not overwritten."""
        ref = MediaRef(url="data:video/mp4;base64,AAAA", payload=video_payload)
        assert ref.payload == video_payload

    def test_blob_url_becomes_handle(self):
        """Test blob: URLs are moved into the handle slot."""
        ref = MediaRef(url="blob:docreel/1234")

        assert ref.url is None
        assert ref.handle == "blob:docreel/1234"

    def test_blank_values_are_none(self):
        """Test blank strings count as absent."""
        ref = MediaRef(url="  ", payload="", handle="")
        assert ref.is_empty

    def test_scheme(self):
        """Test scheme of the URL representation."""
        assert MediaRef(url="HTTPS://cdn.example.com/a.mp4").scheme == "https"
        assert EMPTY_MEDIA.scheme == ""

    def test_without_handle(self):
        """Test handle removal keeps other fields."""
        ref = MediaRef(url="https://x/a.mp4", handle="blob:docreel/1")
        stripped = ref.without_handle()

        assert stripped.handle is None
        assert stripped.url == "https://x/a.mp4"

    def test_from_bytes_round_trip(self):
        """Test bytes survive from_bytes/to_bytes."""
        ref = MediaRef.from_bytes(b"clip", "video/mp4")
        assert ref.to_bytes() == b"clip"

    def test_frozen(self):
        """Test MediaRef is immutable."""
        with pytest.raises(ValueError):
            EMPTY_MEDIA.url = "https://x"


class TestPayloadHelpers:
    """Tests for payload helpers."""

    def test_decode_rejects_garbage(self):
        """Test invalid base64 raises ValueError."""
        with pytest.raises(ValueError):
            decode_payload("not base64!!")

    def test_decode_rejects_empty(self):
        """Test empty payload raises ValueError."""
        with pytest.raises(ValueError):
            decode_payload("")

    def test_encode(self):
        """Test encoding to ASCII base64."""
        assert encode_payload(b"hi") == "aGk="

    def test_split_data_url(self):
        """Test data URL parsing."""
        assert split_data_url("data:audio/mpeg;base64,AAAA") == ("audio/mpeg", "AAAA")
        assert split_data_url("data:;base64,AAAA") == (None, "AAAA")

    def test_url_scheme(self):
        """Test scheme extraction."""
        assert url_scheme(None) == ""
        assert url_scheme("blob:abc") == "blob"
