"""Conversion result model."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from cue2gdi.models.gdi import GdiLayout


@dataclass
class ConversionResult:
    """Result of converting a single disc."""

    status: Literal["success", "dry_run", "failed", "error"]
    cue_path: Path
    layout: Optional[GdiLayout] = None
    error: Optional[str] = None  # Error message if failed
    error_type: Optional[str] = None  # Exception class name if failed
    duration_ms: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status in ("success", "dry_run")

    def __str__(self) -> str:
        """Human-readable representation."""
        tracks = self.layout.track_count if self.layout else 0
        if self.status == "success":
            return f"✓ {self.cue_path.name}: {tracks} tracks written"
        elif self.status == "dry_run":
            return f"⊙ {self.cue_path.name}: Would write {tracks} tracks (dry run)"
        else:
            return f"✗ {self.cue_path.name}: Failed ({self.error_type}: {self.error})"
