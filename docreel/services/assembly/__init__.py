"""Assembly: eligibility, request building and render coordination."""

from docreel.services.assembly.builder import AssemblyRequestBuilder
from docreel.services.assembly.coordinator import AssemblyCoordinator
from docreel.services.assembly.eligibility import (
    EligibleSegment,
    Exclusion,
    collect_eligible,
    eligibility_fingerprint,
    eligible_segment_ids,
)
from docreel.services.assembly.scheduler import AutoAssemblyScheduler

__all__ = [
    "AssemblyCoordinator",
    "AssemblyRequestBuilder",
    "AutoAssemblyScheduler",
    "EligibleSegment",
    "Exclusion",
    "collect_eligible",
    "eligibility_fingerprint",
    "eligible_segment_ids",
]
