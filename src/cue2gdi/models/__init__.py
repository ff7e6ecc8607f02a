"""Data models for CUE sheets and GDI layouts."""

from cue2gdi.models.cuesheet import CueFile, CueSheet, Index, Track, TrackDataType
from cue2gdi.models.gdi import GdiEntry, GdiLayout, TrackExtraction
from cue2gdi.models.result import ConversionResult

__all__ = [
    "ConversionResult",
    "CueFile",
    "CueSheet",
    "GdiEntry",
    "GdiLayout",
    "Index",
    "Track",
    "TrackDataType",
    "TrackExtraction",
]
