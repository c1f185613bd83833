"""Decoding of the ``[End]Step<step>_<image>_<speed>_B<bucket>_1.png`` names."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Optional

FILENAME_RE = re.compile(
    r"(?:End)?Step(\d+)_(\d+)_(\d+)_B(\d+)_1\.png", re.IGNORECASE | re.ASCII
)


@dataclass(frozen=True)
class FilenameInfo:
    """Identifiers encoded in an analyzable image filename."""

    step: int
    image_no: int
    speed: int
    bucket: int


def decode_filename(name: str) -> Optional[FilenameInfo]:
    """Decode ``name`` or return ``None`` when it does not follow the pattern.

    The whole name has to match; a non-matching name is a filtering outcome,
    not an error.
    """

    match = FILENAME_RE.fullmatch(name)
    if match is None:
        return None
    step, image_no, speed, bucket = (int(g) for g in match.groups())
    return FilenameInfo(step=step, image_no=image_no, speed=speed, bucket=bucket)


def is_analyzable(name: str) -> bool:
    return decode_filename(name) is not None


__all__ = ["FILENAME_RE", "FilenameInfo", "decode_filename", "is_analyzable"]
