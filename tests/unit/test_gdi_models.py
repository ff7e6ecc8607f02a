"""Unit tests for GDI and result models."""

from pathlib import Path

import pytest

from cue2gdi.models.gdi import GdiEntry, GdiLayout, TrackExtraction
from cue2gdi.models.result import ConversionResult


class TestGdiEntry:
    def test_line_format(self):
        """Test GDI line formatting."""
        entry = GdiEntry(track_number=3, start_lba=45000, type_flag=4, filename="track3.bin")

        assert entry.to_line() == "3 45000 4 2352 track3.bin 0"
        assert str(entry) == entry.to_line()


class TestGdiLayout:
    """Test table rendering."""

    def test_render(self):
        """Test rendering a full table."""
        layout = GdiLayout(
            entries=[
                GdiEntry(1, 0, 0, "track1.raw"),
                GdiEntry(2, 150, 4, "track2.bin"),
            ]
        )

        assert layout.render() == "2\n1 0 0 2352 track1.raw 0\n2 150 4 2352 track2.bin 0\n"

    def test_entry_lookup(self):
        """Test entry lookup by track number."""
        layout = GdiLayout(entries=[GdiEntry(1, 0, 4, "track1.bin")])

        assert layout.entry(1).filename == "track1.bin"
        with pytest.raises(KeyError):
            layout.entry(2)

    def test_expected_length(self):
        """Test the expected output length of an extraction."""
        extraction = TrackExtraction(
            track_number=2,
            source_path=Path("a.bin"),
            output_path=Path("track2.bin"),
            source_length=2352000,
            byte_offset=150 * 2352,
            sector_amount=850,
            full_copy=False,
        )

        assert extraction.expected_length == 2000400


class TestConversionResult:
    """Test result display."""

    def test_success(self):
        """Test display of a successful result."""
        layout = GdiLayout(entries=[GdiEntry(1, 0, 4, "track1.bin")])
        result = ConversionResult(status="success", cue_path=Path("/discs/game.cue"), layout=layout)

        assert result.ok
        assert str(result) == "✓ game.cue: 1 tracks written"

    def test_dry_run(self):
        """Test display of a dry-run result."""
        result = ConversionResult(status="dry_run", cue_path=Path("game.cue"), layout=GdiLayout())

        assert result.ok
        assert "dry run" in str(result)

    def test_failed(self):
        """Test display of a failed result."""
        result = ConversionResult(
            status="failed",
            cue_path=Path("game.cue"),
            error="Data file for track 1 not found",
            error_type="SourceTrackFileMissing",
        )

        assert not result.ok
        assert str(result) == "✗ game.cue: Failed (SourceTrackFileMissing: Data file for track 1 not found)"
