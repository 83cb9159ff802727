"""Tests for player link error classes."""

import uuid

from playerlink.core.errors import (
    InvalidUsernameError,
    MalformedIdentityError,
    PlayerLinkError,
    StorageError,
)


class TestStorageError:
    """Tests for StorageError."""

    def test_message_names_operation_and_key(self):
        key = uuid.UUID(int=7)
        error = StorageError("link_player", key)
        assert error.code == "STORAGE_ERROR"
        assert error.operation == "link_player"
        assert error.key == key
        assert "link_player" in error.message
        assert str(key) in error.message

    def test_message_without_key(self):
        error = StorageError("clean_expired_requests")
        assert error.message == "Storage failure during clean_expired_requests"

    def test_is_player_link_error(self):
        try:
            raise StorageError("get_link")
        except PlayerLinkError as exc:
            assert exc.code == "STORAGE_ERROR"


class TestOtherErrors:
    """Tests for MalformedIdentityError and InvalidUsernameError."""

    def test_malformed_identity_code(self):
        error = MalformedIdentityError("bad bytes")
        assert error.code == "MALFORMED_IDENTITY"
        assert str(error) == "bad bytes"

    def test_invalid_username_reports_field_and_length(self):
        error = InvalidUsernameError("primary_username", "x" * 17, 16)
        assert error.code == "INVALID_USERNAME"
        assert error.field == "primary_username"
        assert "17" in error.message
