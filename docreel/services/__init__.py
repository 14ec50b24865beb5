"""Services layer for DocReel.

Services implement the editing workflow over an immutable Script snapshot.
Organized by feature:
- media: Source resolution and transient handles
- approval: Per-channel approval state machine
- editing: Pending/committed edit overlay
- assembly: Eligibility, request building, render coordination, auto-assembly
- persistence: Durable encode/decode
- export: Artifact approval and delivery
"""
