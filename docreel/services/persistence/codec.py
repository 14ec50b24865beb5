"""Persistence codec: the save/load boundary of a Script.

encode() produces a DurableScript that contains no transient handles:
- a handle without a payload is replaced by its bytes, inline-encoded
- fetchable URLs pass through unchanged
- anything else is dropped and logged
- a preview artifact is never persisted

decode() rebuilds a Script and gives every payload-only reference a fresh
transient handle for local playback. A malformed payload drops only that
field; the rest of the script still loads, with one warning per affected
segment.
"""

import asyncio
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from docreel.core.exceptions import CodecError
from docreel.core.logging import get_logger, short_id
from docreel.models.artifact import AssembledArtifact
from docreel.models.durable import FORMAT_VERSION, DurableScript
from docreel.models.media import EMPTY_MEDIA, MediaRef, decode_payload, encode_payload
from docreel.models.script import Script
from docreel.models.segment import Segment
from docreel.models.status import ChannelStatus
from docreel.services.media.handles import HandleRegistry
from docreel.services.media.resolver import MediaSourceResolver
from docreel.services.session import iter_handles

logger = get_logger(__name__)

SCRIPT_SCOPE = "script"

_VISUAL_SLOTS = ("video", "image", "thumbnail")


@dataclass
class DecodeResult:
    """Decoded script plus the warnings raised while decoding.

    Attributes:
        script: Decoded script
        warnings: One message per affected segment (or the script itself)
    """

    script: Script
    warnings: list[str] = field(default_factory=list)


class _DropLog:
    """Collects dropped fields grouped by owning segment."""

    def __init__(self, event: str) -> None:
        self.event = event
        self.fields: dict[str, list[str]] = defaultdict(list)

    def drop(self, scope: str, field_name: str, reason: str) -> None:
        self.fields[scope].append(field_name)
        logger.warning(
            "codec_field_dropped",
            phase=self.event,
            scope=short_id(scope),
            field=field_name,
            reason=reason,
        )

    def warnings(self) -> list[str]:
        return [
            f"{scope}: dropped {', '.join(names)}" for scope, names in self.fields.items()
        ]


class PersistenceCodec:
    """Encode and decode Scripts for storage.

    Example:
        >>> codec = PersistenceCodec(handles, resolver)
        >>> durable = await codec.encode(script)
        >>> result = await codec.decode(durable)
        >>> result.script.segments[0].visual.approved
        True
    """

    def __init__(
        self,
        handles: HandleRegistry,
        resolver: MediaSourceResolver | None = None,
    ) -> None:
        """Initialize PersistenceCodec.

        Args:
            handles: Registry holding transient handle bytes
            resolver: Media source resolver (fetchability and approval checks)
        """
        self.handles = handles
        self.resolver = resolver or MediaSourceResolver()

    # =========================================================================
    # Encode
    # =========================================================================

    async def encode(self, script: Script) -> DurableScript:
        """Replace transient handles with durable payloads.

        Every handle the snapshot references is held for the whole encode,
        so a session update that replaces media meanwhile defers revocation
        until the bytes have been read.

        Args:
            script: Script snapshot

        Returns:
            Handle-free storage document
        """
        consumer = f"codec:{uuid.uuid4().hex[:8]}"
        with self.handles.hold(iter_handles(script), consumer):
            return await self._encode_script(script)

    async def _encode_script(self, script: Script) -> DurableScript:
        drops = _DropLog("encode")
        segments = []
        for segment in script.segments:
            segments.append(await self._encode_segment(segment, drops))

        score = script.background_score
        if score is not None:
            media = await self._encode_ref(score.media, SCRIPT_SCOPE, "background_score", drops)
            score = score.model_copy(update={"media": media})

        artifact = await self._encode_artifact(script.artifact, drops)

        durable = script.model_copy(
            update={
                "segments": tuple(segments),
                "background_score": score,
                "artifact": artifact,
            }
        )
        document = durable.model_dump(mode="json")
        logger.info(
            "Script encoded",
            script_id=script.id,
            segment_count=len(segments),
            dropped=sum(len(v) for v in drops.fields.values()),
        )
        return DurableScript(title=script.title, script=document)

    async def _encode_segment(self, segment: Segment, drops: _DropLog) -> Segment:
        visual = segment.visual
        update: dict[str, MediaRef] = {}
        for slot in _VISUAL_SLOTS:
            update[slot] = await self._encode_ref(
                getattr(visual, slot), segment.id, f"visual.{slot}", drops
            )
        segment = segment.model_copy(update={"visual": visual.model_copy(update=update)})
        if segment.audio is not None:
            media = await self._encode_ref(segment.audio.media, segment.id, "audio", drops)
            segment = segment.model_copy(
                update={"audio": segment.audio.model_copy(update={"media": media})}
            )
        return segment

    async def _encode_ref(
        self,
        ref: MediaRef,
        scope: str,
        field_name: str,
        drops: _DropLog,
    ) -> MediaRef:
        if ref.is_empty:
            return ref
        payload = ref.payload
        if not payload and ref.handle:
            data = self.handles.get(ref.handle)
            if data is None:
                drops.drop(scope, field_name, "handle_revoked")
            else:
                payload = await asyncio.to_thread(encode_payload, data)
        url = ref.url if self.resolver.is_fetchable(ref.url) else None
        if ref.url and url is None:
            drops.drop(scope, f"{field_name}.url", "not_fetchable")
        mime_type = ref.mime_type or (self.handles.mime_type(ref.handle) if ref.handle else None)
        if not payload and not url:
            return EMPTY_MEDIA
        return MediaRef(url=url, payload=payload, mime_type=mime_type)

    async def _encode_artifact(
        self,
        artifact: AssembledArtifact | None,
        drops: _DropLog,
    ) -> AssembledArtifact | None:
        if artifact is None or artifact.is_preview:
            return None
        payload = artifact.payload
        if not payload and artifact.handle:
            data = self.handles.get(artifact.handle)
            if data is not None:
                payload = await asyncio.to_thread(encode_payload, data)
        if not payload:
            drops.drop(SCRIPT_SCOPE, "artifact", "not_durable")
            return None
        return artifact.model_copy(update={"payload": payload, "handle": None})

    # =========================================================================
    # Decode
    # =========================================================================

    async def decode(self, durable: DurableScript) -> DecodeResult:
        """Rebuild a Script and materialize handles for inline payloads.

        Args:
            durable: Storage document

        Returns:
            DecodeResult with the script and per-segment warnings

        Raises:
            CodecError: If the document cannot be turned into a Script at all
        """
        if durable.format_version > FORMAT_VERSION:
            raise CodecError(
                f"Unsupported script format version {durable.format_version}",
                field="format_version",
            )
        raw = durable.script
        legacy_approved = _legacy_approvals(raw)
        try:
            script = Script.model_validate(raw)
        except PydanticValidationError as e:
            raise CodecError(f"Invalid script document: {e.error_count()} errors") from e

        drops = _DropLog("decode")
        segments = []
        for segment in script.segments:
            segment = await self._decode_segment(segment, drops)
            legacy = legacy_approved.get(segment.id, set())
            segment = self._reconcile_approvals(segment, legacy, drops)
            segments.append(segment)

        score = script.background_score
        if score is not None:
            media = await self._decode_ref(score.media, SCRIPT_SCOPE, "background_score", drops)
            score = score.model_copy(update={"media": media})
            if score.approved and self.resolver.resolve_score(score) is None:
                drops.drop(SCRIPT_SCOPE, "background_score.approved", "unresolvable")
                score = score.model_copy(update={"status": ChannelStatus.COMPLETED})

        artifact = await self._decode_artifact(script.artifact, drops)

        decoded = script.model_copy(
            update={
                "segments": tuple(segments),
                "background_score": score,
                "artifact": artifact,
            }
        )
        warnings = drops.warnings()
        logger.info(
            "Script decoded",
            script_id=decoded.id,
            segment_count=len(segments),
            warnings=len(warnings),
        )
        return DecodeResult(script=decoded, warnings=warnings)

    async def decode_json(self, raw: str | bytes) -> DecodeResult:
        """Decode a JSON document."""
        return await self.decode(DurableScript.from_json(raw))

    async def _decode_segment(self, segment: Segment, drops: _DropLog) -> Segment:
        visual = segment.visual
        update: dict[str, MediaRef] = {}
        for slot in _VISUAL_SLOTS:
            update[slot] = await self._decode_ref(
                getattr(visual, slot), segment.id, f"visual.{slot}", drops
            )
        segment = segment.model_copy(update={"visual": visual.model_copy(update=update)})
        if segment.audio is not None:
            media = await self._decode_ref(segment.audio.media, segment.id, "audio", drops)
            segment = segment.model_copy(
                update={"audio": segment.audio.model_copy(update={"media": media})}
            )
        return segment

    async def _decode_ref(
        self,
        ref: MediaRef,
        scope: str,
        field_name: str,
        drops: _DropLog,
    ) -> MediaRef:
        # Stored handles belong to a previous run
        ref = ref.without_handle()
        if not ref.payload:
            return ref
        try:
            data = await asyncio.to_thread(decode_payload, ref.payload)
        except ValueError:
            drops.drop(scope, field_name, "malformed_payload")
            return ref.model_copy(update={"payload": None})
        handle = self.handles.create(data, ref.mime_type)
        return ref.model_copy(update={"handle": handle})

    async def _decode_artifact(
        self,
        artifact: AssembledArtifact | None,
        drops: _DropLog,
    ) -> AssembledArtifact | None:
        if artifact is None:
            return None
        if artifact.is_preview or not artifact.payload:
            drops.drop(SCRIPT_SCOPE, "artifact", "not_durable")
            return None
        try:
            data = await asyncio.to_thread(decode_payload, artifact.payload)
        except ValueError:
            drops.drop(SCRIPT_SCOPE, "artifact", "malformed_payload")
            return None
        handle = self.handles.create(data, "video/mp4")
        return artifact.model_copy(update={"handle": handle})

    def _reconcile_approvals(
        self,
        segment: Segment,
        legacy: set[str],
        drops: _DropLog,
    ) -> Segment:
        """Promote legacy approval flags and keep approvals resolvable."""
        visual = segment.visual
        visual_ok = self.resolver.can_resolve_visual(visual)
        if "visual" in legacy and not visual.approved and visual_ok:
            visual = visual.model_copy(update={"status": ChannelStatus.APPROVED})
        elif visual.approved and not visual_ok:
            drops.drop(segment.id, "visual.approved", "unresolvable")
            visual = visual.model_copy(update={"status": ChannelStatus.COMPLETED})

        audio = segment.audio
        if audio is not None:
            audio_ok = self.resolver.resolve_audio(audio) is not None
            if "audio" in legacy and not audio.approved and audio_ok:
                audio = audio.model_copy(update={"status": ChannelStatus.APPROVED})
            elif audio.approved and not audio_ok:
                drops.drop(segment.id, "audio.approved", "unresolvable")
                audio = audio.model_copy(update={"status": ChannelStatus.COMPLETED})

        return segment.model_copy(update={"visual": visual, "audio": audio})


def _legacy_approvals(raw: dict[str, Any]) -> dict[str, set[str]]:
    """Find channels carrying a legacy ``approved: true`` flag."""
    found: dict[str, set[str]] = {}
    for seg in raw.get("segments") or []:
        if not isinstance(seg, dict) or not isinstance(seg.get("id"), str):
            continue
        channels = {
            name
            for name in ("visual", "audio")
            if isinstance(seg.get(name), dict) and seg[name].get("approved") is True
        }
        if channels:
            found[seg["id"]] = channels
    return found


__all__ = ["DecodeResult", "PersistenceCodec"]
