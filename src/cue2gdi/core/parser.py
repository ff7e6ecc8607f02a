"""CUE sheet parser."""

import re
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Optional

from cue2gdi.errors import MalformedCueSheet
from cue2gdi.models.cuesheet import (
    HIGH_DENSITY_MARKER,
    CueFile,
    CueSheet,
    Index,
    Track,
    TrackDataType,
    frames_from_msf,
    parse_msf,
)
from cue2gdi.utils.logger import get_logger

logger = get_logger(__name__)

# A quoted argument (quotes stripped) or a bare word
_TOKEN_PATTERN = re.compile(r'"([^"]*)"?|(\S+)')


def tokenize(line: str) -> list[str]:
    """Split a CUE line into arguments, honouring double quotes."""
    return [quoted if bare == "" else bare for quoted, bare in _TOKEN_PATTERN.findall(line)]


def _is_number(token: str) -> bool:
    # str.isdigit() alone also accepts digits such as "²" that int() rejects
    return token.isascii() and token.isdigit()


def is_high_density_marker(comment: str) -> bool:
    return comment.strip().upper() == HIGH_DENSITY_MARKER


@dataclass
class _TrackDraft:
    """Mutable track state collected while its lines are read."""

    number: int
    data_type: TrackDataType
    data_file: CueFile
    line_number: int
    indices: list[Index] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    title: Optional[str] = None
    performer: Optional[str] = None
    songwriter: Optional[str] = None
    isrc: Optional[str] = None
    flags: list[str] = field(default_factory=list)
    pregap_frames: Optional[int] = None
    postgap_frames: Optional[int] = None

    def freeze(self) -> Track:
        return Track(
            number=self.number,
            data_type=self.data_type,
            data_file=self.data_file,
            indices=tuple(self.indices),
            comments=tuple(self.comments),
            high_density_area_start=any(is_high_density_marker(c) for c in self.comments),
            title=self.title,
            performer=self.performer,
            songwriter=self.songwriter,
            isrc=self.isrc,
            flags=tuple(self.flags),
            pregap_frames=self.pregap_frames,
            postgap_frames=self.postgap_frames,
        )


class _ParseState:
    """State of one parse run."""

    def __init__(self, source: Optional[Path]):
        self.source = source
        self.line_number: Optional[int] = 0
        self.files: list[CueFile] = []
        self.tracks: list[_TrackDraft] = []
        self.comments: list[str] = []
        self.pending_comments: list[str] = []
        self.disc_fields: dict[str, str] = {}
        self.current_file: Optional[CueFile] = None
        self.current_track: Optional[_TrackDraft] = None

    def error(self, message: str) -> MalformedCueSheet:
        return MalformedCueSheet(message, path=self.source, line_number=self.line_number)


class CueSheetParser:
    """Parse CUE sheet text into an immutable CueSheet.

    Comments (REM lines) are attached as follows: before the first FILE they
    belong to the disc; inside a track header (after TRACK, before its first
    INDEX) they belong to that track; anywhere else they are held for the next
    TRACK. A ``REM HIGH-DENSITY AREA`` line placed between two tracks thus
    flags the track that follows it.
    """

    def __init__(self):
        self._directives: dict[str, Callable[[_ParseState, list[str], str], None]] = {
            "REM": self._parse_rem,
            "FILE": self._parse_file,
            "TRACK": self._parse_track,
            "INDEX": self._parse_index,
            "PREGAP": self._parse_pregap,
            "POSTGAP": self._parse_postgap,
            "TITLE": partial(self._parse_cdtext, "TITLE"),
            "PERFORMER": partial(self._parse_cdtext, "PERFORMER"),
            "SONGWRITER": partial(self._parse_cdtext, "SONGWRITER"),
            "CATALOG": self._parse_catalog,
            "CDTEXTFILE": self._parse_cdtextfile,
            "ISRC": self._parse_isrc,
            "FLAGS": self._parse_flags,
        }

    def parse(self, path: Path) -> CueSheet:
        """Parse a CUE file.

        Args:
            path: Path to the .cue file

        Returns:
            Parsed CueSheet

        Raises:
            MalformedCueSheet: If the file cannot be read or is invalid
        """
        path = Path(path)
        logger.debug("Parsing cue sheet", file=str(path))

        try:
            text = path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            raise MalformedCueSheet(f"Cannot read cue sheet: {e.strerror or e}", path=path) from e

        return self.parse_text(text, source=path)

    def parse_text(self, text: str, source: Optional[Path] = None) -> CueSheet:
        """Parse CUE sheet text.

        Args:
            text: Contents of a CUE sheet
            source: Path the text was read from, used in error messages

        Returns:
            Parsed CueSheet

        Raises:
            MalformedCueSheet: If the text is not a valid CUE sheet
        """
        state = _ParseState(source)

        for state.line_number, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not line:
                continue

            keyword, *remainder = line.split(None, 1)
            keyword = keyword.upper()
            rest = remainder[0] if remainder else ""
            handler = self._directives.get(keyword)
            if handler is None:
                logger.warning(
                    "Ignoring unknown cue directive",
                    file=str(source) if source else None,
                    line=state.line_number,
                    directive=keyword,
                )
                continue

            handler(state, tokenize(rest), rest.strip())

        state.line_number = None
        return self._finish(state)

    def _finish(self, state: _ParseState) -> CueSheet:
        if not state.tracks:
            raise state.error("Cue sheet declares no tracks")

        tracks = []
        for draft in state.tracks:
            try:
                tracks.append(draft.freeze())
            except ValueError as e:
                raise MalformedCueSheet(
                    str(e), path=state.source, line_number=draft.line_number
                ) from e

        try:
            sheet = CueSheet(
                files=tuple(state.files),
                tracks=tuple(tracks),
                comments=tuple(state.comments + state.pending_comments),
                title=state.disc_fields.get("TITLE"),
                performer=state.disc_fields.get("PERFORMER"),
                songwriter=state.disc_fields.get("SONGWRITER"),
                catalog=state.disc_fields.get("CATALOG"),
                cdtext_file=state.disc_fields.get("CDTEXTFILE"),
                source=state.source,
            )
        except ValueError as e:
            raise MalformedCueSheet(str(e), path=state.source) from e

        logger.info(
            "Cue sheet parsed",
            file=str(state.source) if state.source else None,
            track_count=len(sheet.tracks),
            file_count=len(sheet.files),
            high_density_tracks=[t.number for t in sheet.tracks if t.high_density_area_start],
        )
        return sheet

    def _parse_rem(self, state: _ParseState, args: list[str], rest: str) -> None:
        comment = rest
        if state.current_file is None:
            state.comments.append(comment)
        elif state.current_track is not None and not state.current_track.indices:
            state.current_track.comments.append(comment)
        else:
            state.pending_comments.append(comment)

    def _parse_file(self, state: _ParseState, args: list[str], rest: str) -> None:
        if not args:
            raise state.error("FILE directive without a filename")

        state.current_file = CueFile(args[0], args[1].upper() if len(args) > 1 else "BINARY")
        state.files.append(state.current_file)
        state.current_track = None

    def _parse_track(self, state: _ParseState, args: list[str], rest: str) -> None:
        if state.current_file is None:
            raise state.error("TRACK directive before any FILE")
        if len(args) < 2:
            raise state.error("TRACK directive without a track type")
        if not _is_number(args[0]):
            raise state.error(f"Invalid track number: {args[0]}")

        try:
            data_type = TrackDataType.from_cue(args[1])
        except ValueError as e:
            raise state.error(str(e)) from e

        track = _TrackDraft(
            number=int(args[0]),
            data_type=data_type,
            data_file=state.current_file,
            line_number=state.line_number,
            comments=state.pending_comments,
        )
        state.pending_comments = []
        state.tracks.append(track)
        state.current_track = track

    def _require_track(self, state: _ParseState, directive: str) -> _TrackDraft:
        if state.current_track is None:
            raise state.error(f"{directive} directive outside a track")
        return state.current_track

    def _parse_index(self, state: _ParseState, args: list[str], rest: str) -> None:
        track = self._require_track(state, "INDEX")
        if len(args) < 2 or not _is_number(args[0]):
            raise state.error(f"Invalid INDEX directive: {rest}")

        try:
            track.indices.append(Index.parse(int(args[0]), args[1]))
        except ValueError as e:
            raise state.error(str(e)) from e

    def _parse_gap(self, state: _ParseState, args: list[str], directive: str) -> int:
        self._require_track(state, directive)
        if not args:
            raise state.error(f"{directive} directive without a length")
        try:
            return frames_from_msf(*parse_msf(args[0]))
        except ValueError as e:
            raise state.error(str(e)) from e

    def _parse_pregap(self, state: _ParseState, args: list[str], rest: str) -> None:
        frames = self._parse_gap(state, args, "PREGAP")
        state.current_track.pregap_frames = frames

    def _parse_postgap(self, state: _ParseState, args: list[str], rest: str) -> None:
        frames = self._parse_gap(state, args, "POSTGAP")
        state.current_track.postgap_frames = frames

    def _parse_cdtext(
        self, keyword: str, state: _ParseState, args: list[str], rest: str
    ) -> None:
        value = args[0] if args else ""
        if state.current_track is not None:
            setattr(state.current_track, keyword.lower(), value)
        else:
            state.disc_fields[keyword] = value

    def _parse_catalog(self, state: _ParseState, args: list[str], rest: str) -> None:
        if args:
            state.disc_fields["CATALOG"] = args[0]

    def _parse_cdtextfile(self, state: _ParseState, args: list[str], rest: str) -> None:
        if args:
            state.disc_fields["CDTEXTFILE"] = args[0]

    def _parse_isrc(self, state: _ParseState, args: list[str], rest: str) -> None:
        track = self._require_track(state, "ISRC")
        if args:
            track.isrc = args[0]

    def _parse_flags(self, state: _ParseState, args: list[str], rest: str) -> None:
        track = self._require_track(state, "FLAGS")
        track.flags.extend(flag.upper() for flag in args)


def parse_cue_sheet(path: Path) -> CueSheet:
    """Parse a CUE file with a default parser."""
    return CueSheetParser().parse(path)
