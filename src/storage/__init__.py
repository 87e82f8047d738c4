"""
Storage module.

Provides the saved-match snapshot codec and the single-slot store
it is written to.
"""
from .codec import Snapshot, SnapshotDecodeError, decode_snapshot, encode_snapshot
from .save_slot import SAVE_FILE_ENV, SaveSlot, default_save_path

__all__ = [
    "Snapshot",
    "SnapshotDecodeError",
    "decode_snapshot",
    "encode_snapshot",
    "SAVE_FILE_ENV",
    "SaveSlot",
    "default_save_path",
]
