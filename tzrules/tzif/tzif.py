"""Library for reading TZif files.

A TZif file is the compiled form of the IANA time zone database used by
most operating systems and by the tzdata python package. It contains the
complete history of offset changes for a single zone along with a footer
TZ string describing the rules in effect after the last transition.

See rfc8536 for the TZif file format. Version 1 files only contain a
32-bit data block. Version 2+ files contain a 32-bit block, which is
skipped, followed by a 64-bit block and the footer.
"""

from __future__ import annotations

import enum
import io
import logging
import struct
from dataclasses import dataclass

from .model import LeapSecond, LocalTimeType, TimezoneInfo, TransitionRecord
from .tz_rule import parse_tz_rule

__all__ = [
    "read_tzif",
]

_LOGGER = logging.getLogger(__name__)

# Records specifying the local time type
_LOCAL_TIME_TYPE_STRUCT_FORMAT = "".join(
    [
        ">",  # Use standard size of packed value bytes
        "l",  # utoff (4 bytes): Number of seconds to add to UTC to determine local time
        "?",  # dst (1 byte): Indicates the time is DST (1) or standard (0)
        "B",  # idx (1 byte): Offset index into the time zone designation octets
    ]
)
_LOCAL_TIME_RECORD_SIZE = 6


class _TZifVersion(enum.Enum):
    """Defines the sizes of time values for each version of the data block."""

    V1 = (4, "l")  # 32-bit in v1
    V2 = (8, "q")  # 64-bit in v2+

    def __init__(self, time_size: int, time_format: str):
        self.time_size = time_size
        self.time_format = time_format


@dataclass
class _Header:
    """TZif header information."""

    SIZE = 44  # Total size of the header to read
    STRUCT_FORMAT = "".join(
        [
            ">",  # Use standard size of packed value bytes
            "4s",  # magic (4 bytes)
            "c",  # version (1 byte)
            "15x",  # unused
            "6l",  # isutccnt, isstdcnt, leapcnt, timecnt, typecnt, charcnt
        ]
    )
    MAGIC = b"TZif"
    VERSION_1 = b"\x00"

    version: bytes
    isutccnt: int
    isstdcnt: int
    leapcnt: int
    timecnt: int
    typecnt: int
    charcnt: int

    @classmethod
    def read(cls, buf: io.BytesIO) -> _Header:
        """Read and validate the header from the buffer."""
        content = buf.read(cls.SIZE)
        if len(content) != cls.SIZE:
            raise ValueError("zoneinfo file header was truncated")
        (magic, *fields) = struct.unpack(cls.STRUCT_FORMAT, content)
        if magic != cls.MAGIC:
            raise ValueError("zoneinfo file did not contain magic header")
        header = cls(*fields)
        if header.isutccnt not in (0, header.typecnt):
            raise ValueError(
                f"UTC/local indicators in datablock mismatched ({header.isutccnt}, {header.typecnt})"
            )
        if header.isstdcnt not in (0, header.typecnt):
            raise ValueError(
                f"standard/wall indicators in datablock mismatched ({header.isstdcnt}, {header.typecnt})"
            )
        return header

    def validate_counts(self) -> None:
        """Verify the block has the local time records required to interpret it."""
        if self.typecnt == 0:
            raise ValueError("Local time records in block is zero")
        if self.charcnt == 0:
            raise ValueError("Total number of octets is zero")


def _unpack(buf: io.BytesIO, fmt: str) -> tuple:
    """Read exactly enough bytes from the buffer for the struct format."""
    size = struct.calcsize(fmt)
    content = buf.read(size)
    if len(content) != size:
        raise ValueError("zoneinfo file data block was truncated")
    return struct.unpack(fmt, content)


def _read_datablock(
    header: _Header, version: _TZifVersion, buf: io.BytesIO
) -> TimezoneInfo:
    """Read the transitions and local time types in a data block."""
    # Transition times in ascending order, then the index of the local time type for each
    transition_times = _unpack(buf, f">{header.timecnt}{version.time_format}")
    transition_types = _unpack(buf, f">{header.timecnt}B")

    raw_types = [
        _unpack(buf, _LOCAL_TIME_TYPE_STRUCT_FORMAT) for _ in range(header.typecnt)
    ]

    # An array of NUL-terminated time zone designation strings
    designations = buf.read(header.charcnt)

    def designation(idx: int) -> str:
        """Find the null terminated string starting at the specified index."""
        end = designations.find(b"\x00", idx)
        if end < 0:
            end = len(designations)
        return designations[idx:end].decode("UTF-8")

    local_time_types = [
        LocalTimeType(utoff, dst, designation(idx)) for (utoff, dst, idx) in raw_types
    ]

    leap_seconds = [
        LeapSecond._make(_unpack(buf, f">{version.time_format}l"))
        for _ in range(header.leapcnt)
    ]

    # Standard/wall and UTC/local indicators apply to the local time types
    isstd: tuple[bool, ...] = _unpack(buf, f">{header.isstdcnt}?")
    isut: tuple[bool, ...] = _unpack(buf, f">{header.isutccnt}?")

    transitions: list[TransitionRecord] = []
    for transition_time, type_index in zip(transition_times, transition_types):
        if type_index >= len(local_time_types):
            raise ValueError(
                f"transition_type out of bounds {type_index} >= {len(local_time_types)}"
            )
        is_std = isstd[type_index] if isstd else False
        is_ut = isut[type_index] if isut else False
        if is_ut and not is_std:
            raise ValueError("isutccnt was True but isstdcnt was False")
        transitions.append(
            TransitionRecord(
                transition_time, local_time_types[type_index], is_std, is_ut
            )
        )

    return TimezoneInfo(
        transitions,
        leap_seconds,
        initial_type=local_time_types[0] if local_time_types else None,
    )


def read_tzif(content: bytes) -> TimezoneInfo:
    """Read the TZif file and parse and return the timezone records."""
    buf = io.BytesIO(content)

    header = _Header.read(buf)
    if header.version == _Header.VERSION_1:
        header.validate_counts()
    result = _read_datablock(header, _TZifVersion.V1, buf)
    if header.version == _Header.VERSION_1:
        _LOGGER.debug("Read version 1 TZif with %d transitions", header.timecnt)
        return result

    # V2+ header and block replaces the v1 block
    header = _Header.read(buf)
    header.validate_counts()
    result = _read_datablock(header, _TZifVersion.V2, buf)

    # V2+ footer is a TZ string enclosed in newlines
    parts = buf.read().decode("UTF-8").split("\n")
    if len(parts) != 3:
        raise ValueError("Failed to read TZ footer")
    if parts[1]:
        result.rule = parse_tz_rule(parts[1])
    _LOGGER.debug("Read TZif with %d transitions", header.timecnt)
    return result
