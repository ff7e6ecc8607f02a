"""cue2gdi - CUE sheet to GD-ROM GDI layout transcoder."""

__version__ = "0.1.0"
