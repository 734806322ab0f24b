"""Position records and the historical position store."""

from chester.core.data.database import PositionDatabase
from chester.core.data.records import (
    PositionRecord,
    PositionRecordError,
    decode_position,
    encode_position,
    position_from_bytes,
    position_to_bytes,
)

__all__ = [
    "PositionDatabase",
    "PositionRecord",
    "PositionRecordError",
    "decode_position",
    "encode_position",
    "position_from_bytes",
    "position_to_bytes",
]
