"""Approval state machine over segment channels and the background score."""

from docreel.services.approval.service import (
    AudioMedia,
    ScoreMedia,
    SegmentApprovalService,
    VisualMedia,
)

__all__ = [
    "AudioMedia",
    "ScoreMedia",
    "SegmentApprovalService",
    "VisualMedia",
]
