"""Shared pytest fixtures for cue2gdi tests."""

from pathlib import Path

import pytest

from cue2gdi.config import Config
from cue2gdi.models.cuesheet import CueFile, CueSheet, Index, Track, TrackDataType

SECTOR = 2352


def write_sectors(path: Path, sectors: int, extra_bytes: int = 0, sparse: bool = False) -> Path:
    """Create a data file of ``sectors`` raw sectors.

    Each sector is filled with its own number (mod 256) so copies can be
    checked for the right offset. Sparse files are only sized, not filled.
    """
    size = sectors * SECTOR + extra_bytes
    if sparse:
        with open(path, "wb") as f:
            f.truncate(size)
        return path

    with open(path, "wb") as f:
        for sector in range(sectors):
            f.write(bytes([sector % 256]) * SECTOR)
        f.write(b"\xff" * extra_bytes)
    return path


def make_track(
    number: int,
    filename: str,
    data_type: TrackDataType = TrackDataType.MODE1_2352,
    indices: tuple[str, ...] = ("00:00:00",),
    high_density_area_start: bool = False,
) -> Track:
    """Build a Track; one timecode means INDEX 01, two mean INDEX 00 + INDEX 01."""
    if len(indices) == 1:
        parsed = (Index.parse(1, indices[0]),)
    else:
        parsed = tuple(Index.parse(n, tc) for n, tc in enumerate(indices))
    comments = ("HIGH-DENSITY AREA",) if high_density_area_start else ()
    return Track(
        number=number,
        data_type=data_type,
        data_file=CueFile(filename),
        indices=parsed,
        comments=comments,
        high_density_area_start=high_density_area_start,
    )


def make_sheet(*tracks: Track) -> CueSheet:
    files = []
    for track in tracks:
        if track.data_file not in files:
            files.append(track.data_file)
    return CueSheet(files=tuple(files), tracks=tuple(tracks))


@pytest.fixture
def default_config():
    """Create a default configuration for testing."""
    return Config()


@pytest.fixture
def two_track_disc(tmp_path):
    """The audio + data disc from the round-trip scenario.

    Track 1 is AUDIO with a single index; track 2 is MODE1 with a 150-frame
    pregap. Both data files hold 1000 sectors.
    """
    write_sectors(tmp_path / "Track 1.bin", 1000)
    write_sectors(tmp_path / "Track 2.bin", 1000)
    cue_path = tmp_path / "disc.cue"
    cue_path.write_text(
        'FILE "Track 1.bin" BINARY\n'
        "  TRACK 01 AUDIO\n"
        "    INDEX 01 00:00:00\n"
        'FILE "Track 2.bin" BINARY\n'
        "  TRACK 02 MODE1/2352\n"
        "    INDEX 00 00:00:00\n"
        "    INDEX 01 00:02:00\n"
    )
    return cue_path


@pytest.fixture
def dreamcast_cue_text():
    """A Redump-style Dreamcast cue sheet with both density areas."""
    return (
        "REM SINGLE-DENSITY AREA\n"
        'FILE "Game (Track 1).bin" BINARY\n'
        "  TRACK 01 MODE1/2352\n"
        "    INDEX 01 00:00:00\n"
        'FILE "Game (Track 2).bin" BINARY\n'
        "  TRACK 02 AUDIO\n"
        "    INDEX 00 00:00:00\n"
        "    INDEX 01 00:02:00\n"
        "REM HIGH-DENSITY AREA\n"
        'FILE "Game (Track 3).bin" BINARY\n'
        "  TRACK 03 MODE1/2352\n"
        "    INDEX 01 00:00:00\n"
    )


@pytest.fixture
def dreamcast_disc(tmp_path, dreamcast_cue_text):
    """Dreamcast disc directory: 600 + 1000 + 2000 sector tracks."""
    write_sectors(tmp_path / "Game (Track 1).bin", 600)
    write_sectors(tmp_path / "Game (Track 2).bin", 1000)
    write_sectors(tmp_path / "Game (Track 3).bin", 2000)
    cue_path = tmp_path / "Game.cue"
    cue_path.write_text(dreamcast_cue_text)
    return cue_path


@pytest.fixture
def sector_writer():
    """Factory fixture wrapping ``write_sectors``."""
    return write_sectors


@pytest.fixture
def track_factory():
    return make_track


@pytest.fixture
def sheet_factory():
    return make_sheet
