"""GDI track table models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from cue2gdi.models.cuesheet import RAW_SECTOR_SIZE

AUDIO_TYPE_FLAG = 0
DATA_TYPE_FLAG = 4


@dataclass(frozen=True)
class GdiEntry:
    """One row of a GDI table."""

    track_number: int
    start_lba: int
    type_flag: Literal[0, 4]
    filename: str
    sector_size: int = RAW_SECTOR_SIZE
    gap: int = 0  # Reserved, always written as 0

    def to_line(self) -> str:
        return (
            f"{self.track_number} {self.start_lba} {self.type_flag} "
            f"{self.sector_size} {self.filename} {self.gap}"
        )

    def __str__(self) -> str:
        return self.to_line()


@dataclass(frozen=True)
class TrackExtraction:
    """Where a track's payload comes from and where it goes."""

    track_number: int
    source_path: Path
    output_path: Path
    source_length: int
    byte_offset: int  # 0 for a full copy
    sector_amount: int
    full_copy: bool

    @property
    def expected_length(self) -> int:
        """Number of bytes the output file will hold."""
        return self.source_length - self.byte_offset


@dataclass
class GdiLayout:
    """A computed disc layout: the GDI rows plus the per-track copy plan."""

    entries: list[GdiEntry] = field(default_factory=list)
    extractions: list[TrackExtraction] = field(default_factory=list)

    @property
    def track_count(self) -> int:
        return len(self.entries)

    def render(self) -> str:
        """Render the GDI table text (header line, then one row per track)."""
        lines = [str(self.track_count)]
        lines.extend(entry.to_line() for entry in self.entries)
        return "".join(f"{line}\n" for line in lines)

    def entry(self, track_number: int) -> GdiEntry:
        """Return the row for a track number.

        Raises:
            KeyError: If the layout has no such track
        """
        for entry in self.entries:
            if entry.track_number == track_number:
                return entry
        raise KeyError(track_number)
