"""Unit tests for HandleRegistry."""

import pytest

from docreel.services.media.handles import HANDLE_PREFIX


class TestHandleRegistry:
    """Tests for handle lifecycle."""

    def test_create_and_get(self, handles):
        """Test registered bytes are retrievable."""
        handle = handles.create(b"clip", "video/mp4")

        assert handle.startswith(HANDLE_PREFIX)
        assert handle in handles
        assert handles.get(handle) == b"clip"
        assert handles.mime_type(handle) == "video/mp4"
        assert len(handles) == 1

    def test_handles_are_unique(self, handles):
        """Test every create yields a new handle."""
        assert handles.create(b"a") != handles.create(b"a")

    def test_revoke(self, handles):
        """Test revocation without consumers is immediate."""
        handle = handles.create(b"clip")

        assert handles.revoke(handle) is True
        assert handles.get(handle) is None
        assert handles.revoke(handle) is False

    def test_revoke_deferred_while_borrowed(self, handles):
        """Test a handle in use survives revocation until released."""
        handle = handles.create(b"clip")

        with handles.borrow(handle, "player") as data:
            assert handles.revoke(handle) is False
            assert data == b"clip"
            assert handles.get(handle) == b"clip"
            assert handles.consumers(handle) == frozenset({"player"})

        assert handle not in handles

    def test_acquire_after_revoke_requested(self, handles):
        """Test new consumers cannot pick up a handle pending revocation."""
        handle = handles.create(b"clip")
        handles.acquire(handle, "player")
        handles.revoke(handle)

        with pytest.raises(KeyError):
            handles.acquire(handle, "exporter")

        handles.release(handle, "player")
        assert handle not in handles

    def test_acquire_unknown(self, handles):
        """Test unknown handles cannot be acquired."""
        with pytest.raises(KeyError):
            handles.acquire("blob:docreel/missing", "player")

    def test_release_unknown_is_noop(self, handles):
        """Test releasing an unknown handle does nothing."""
        handles.release("blob:docreel/missing", "player")

    def test_clear_keeps_borrowed(self, handles):
        """Test clear drops idle handles only."""
        idle = handles.create(b"a")
        busy = handles.create(b"b")
        handles.acquire(busy, "player")

        handles.clear()

        assert idle not in handles
        assert handles.get(busy) == b"b"

    def test_hold_defers_revocation(self, handles):
        """Test held handles outlive a revoke until the block exits."""
        kept = handles.create(b"a")
        gone = handles.create(b"b")
        handles.revoke(gone)

        with handles.hold([kept, kept, gone], "codec") as held:
            assert held == frozenset({kept})
            assert handles.revoke(kept) is False
            assert handles.get(kept) == b"a"

        assert kept not in handles
