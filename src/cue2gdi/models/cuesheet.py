"""CUE sheet data models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

FRAMES_PER_SECOND = 75
SECONDS_PER_MINUTE = 60
RAW_SECTOR_SIZE = 2352

HIGH_DENSITY_MARKER = "HIGH-DENSITY AREA"


class TrackDataType(Enum):
    """Track modes a CUE sheet can declare."""

    AUDIO = "AUDIO"
    CDG = "CDG"
    MODE1_2048 = "MODE1/2048"
    MODE1_2352 = "MODE1/2352"
    MODE2_2336 = "MODE2/2336"
    MODE2_2352 = "MODE2/2352"
    CDI_2336 = "CDI/2336"
    CDI_2352 = "CDI/2352"

    @classmethod
    def from_cue(cls, value: str) -> "TrackDataType":
        """Look up a track mode by its CUE spelling (case-insensitive).

        Raises:
            ValueError: If the mode is unknown
        """
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Unknown track type: {value}") from None

    @property
    def is_audio(self) -> bool:
        return self is TrackDataType.AUDIO

    @property
    def native_sector_size(self) -> int:
        """Sector size implied by the mode as written in the sheet."""
        if self is TrackDataType.AUDIO:
            return RAW_SECTOR_SIZE
        if self is TrackDataType.CDG:
            return 2448
        return int(self.value.split("/")[1])


def frames_from_msf(minutes: int, seconds: int, frames: int) -> int:
    """Convert an MM:SS:FF timecode to an absolute frame count."""
    return frames + seconds * FRAMES_PER_SECOND + minutes * SECONDS_PER_MINUTE * FRAMES_PER_SECOND


def parse_msf(text: str) -> tuple[int, int, int]:
    """Parse an ``MM:SS:FF`` timecode.

    Raises:
        ValueError: If the text is not a valid timecode. Out-of-range seconds
            or frames are rejected rather than carried over.
    """
    parts = text.strip().split(":")
    if len(parts) != 3 or not all(part.isascii() and part.isdigit() for part in parts):
        raise ValueError(f"Invalid timecode: {text!r}")

    minutes, seconds, frames = (int(part) for part in parts)
    _check_msf(minutes, seconds, frames)
    return minutes, seconds, frames


def _check_msf(minutes: int, seconds: int, frames: int) -> None:
    if minutes < 0:
        raise ValueError(f"Timecode minutes must not be negative: {minutes}")
    if not 0 <= seconds < SECONDS_PER_MINUTE:
        raise ValueError(f"Timecode seconds out of range: {seconds}")
    if not 0 <= frames < FRAMES_PER_SECOND:
        raise ValueError(f"Timecode frames out of range: {frames}")


@dataclass(frozen=True)
class Index:
    """An INDEX point of a track (0 = pregap start, 1 = track start)."""

    number: int
    minutes: int
    seconds: int
    frames: int

    def __post_init__(self) -> None:
        if not 0 <= self.number <= 99:
            raise ValueError(f"Index number out of range: {self.number}")
        _check_msf(self.minutes, self.seconds, self.frames)

    @classmethod
    def parse(cls, number: int, timecode: str) -> "Index":
        """Build an index from its number and ``MM:SS:FF`` text."""
        return cls(number, *parse_msf(timecode))

    @property
    def total_frames(self) -> int:
        """Absolute frame position within the track's data file."""
        return frames_from_msf(self.minutes, self.seconds, self.frames)

    def __str__(self) -> str:
        return f"INDEX {self.number:02d} {self.minutes:02d}:{self.seconds:02d}:{self.frames:02d}"


@dataclass(frozen=True)
class CueFile:
    """A binary data file referenced by a FILE directive."""

    filename: str
    file_type: str = "BINARY"

    def __str__(self) -> str:
        return f'FILE "{self.filename}" {self.file_type}'


@dataclass(frozen=True)
class Track:
    """A TRACK of the sheet together with its indices and comments."""

    number: int
    data_type: TrackDataType
    data_file: CueFile
    indices: tuple[Index, ...]
    comments: tuple[str, ...] = ()
    high_density_area_start: bool = False
    title: Optional[str] = None
    performer: Optional[str] = None
    songwriter: Optional[str] = None
    isrc: Optional[str] = None
    flags: tuple[str, ...] = ()
    pregap_frames: Optional[int] = None
    postgap_frames: Optional[int] = None

    def __post_init__(self) -> None:
        if not 1 <= self.number <= 99:
            raise ValueError(f"Track number out of range: {self.number}")
        if not self.indices:
            raise ValueError(f"Track {self.number} has no INDEX")

        numbers = [index.number for index in self.indices]
        if any(later <= earlier for earlier, later in zip(numbers, numbers[1:])):
            raise ValueError(f"Track {self.number} index numbers are not increasing")

        positions = [index.total_frames for index in self.indices]
        if any(later < earlier for earlier, later in zip(positions, positions[1:])):
            raise ValueError(f"Track {self.number} index timecodes go backwards")

        if len(self.indices) > 1 and self.index(1) is None:
            raise ValueError(f"Track {self.number} has several indices but no INDEX 01")

    def index(self, number: int) -> Optional[Index]:
        """Return the index with the given number, if present."""
        return next((index for index in self.indices if index.number == number), None)

    @property
    def has_pregap_in_file(self) -> bool:
        """Whether the track's data file starts with pregap sectors."""
        return len(self.indices) > 1

    def __str__(self) -> str:
        marker = " [HIGH-DENSITY AREA]" if self.high_density_area_start else ""
        return f"Track {self.number:02d}: {self.data_type.value} ({self.data_file.filename}){marker}"


@dataclass(frozen=True)
class CueSheet:
    """An immutable, fully parsed CUE sheet."""

    files: tuple[CueFile, ...]
    tracks: tuple[Track, ...]
    comments: tuple[str, ...] = ()
    title: Optional[str] = None
    performer: Optional[str] = None
    songwriter: Optional[str] = None
    catalog: Optional[str] = None
    cdtext_file: Optional[str] = None
    source: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        numbers = [track.number for track in self.tracks]
        if any(later <= earlier for earlier, later in zip(numbers, numbers[1:])):
            raise ValueError("Track numbers must be strictly increasing")

    def track(self, number: int) -> Optional[Track]:
        return next((track for track in self.tracks if track.number == number), None)

    def tracks_for_file(self, filename: str) -> list[Track]:
        return [track for track in self.tracks if track.data_file.filename == filename]

    def __str__(self) -> str:
        name = self.source.name if self.source else "<cue sheet>"
        return f"{name} ({len(self.tracks)} tracks, {len(self.files)} files)"
