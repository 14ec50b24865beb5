"""Save/load boundary between Scripts and storage documents."""

from docreel.services.persistence.codec import DecodeResult, PersistenceCodec

__all__ = ["DecodeResult", "PersistenceCodec"]
