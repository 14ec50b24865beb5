"""Segment edit overlay."""

from docreel.services.editing.overlay import EditOverlay, merge_edits

__all__ = ["EditOverlay", "merge_edits"]
