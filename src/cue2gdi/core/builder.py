"""GD-ROM layout builder: per-track extraction and GDI table emission."""

from pathlib import Path
from typing import Optional

from cue2gdi.config import ConversionConfig
from cue2gdi.errors import (
    MalformedCueSheet,
    OutputWriteFailure,
    SourceTrackFileMissing,
    TruncatedTrackData,
)
from cue2gdi.models.cuesheet import RAW_SECTOR_SIZE, CueSheet, Track
from cue2gdi.models.gdi import (
    AUDIO_TYPE_FLAG,
    DATA_TYPE_FLAG,
    GdiEntry,
    GdiLayout,
    TrackExtraction,
)
from cue2gdi.utils.fileops import copy_from_offset, write_text_atomic
from cue2gdi.utils.logger import get_logger

logger = get_logger(__name__)


def output_track_filename(track: Track) -> str:
    """Name of the extracted file for a track (``trackN.raw`` or ``trackN.bin``)."""
    extension = "raw" if track.data_type.is_audio else "bin"
    return f"track{track.number}.{extension}"


class GdiLayoutBuilder:
    """Compute a GD-ROM layout from a cue sheet and write its files.

    Tracks are walked in ascending number order with a running sector cursor:

    * a track with a single index is copied whole;
    * a track with several indices is copied from its second index on (INDEX 01
      after an INDEX 00 pregap), and the skipped sectors still advance the
      cursor before the track's start LBA is recorded;
    * a track that starts the high-density area never starts below
      ``high_density_area_lba``.
    """

    def __init__(self, config: Optional[ConversionConfig] = None):
        """Initialize the builder.

        Args:
            config: Conversion configuration (defaults when omitted)
        """
        self.config = config or ConversionConfig()

    def plan(self, working_directory: Path, cue_sheet: CueSheet) -> GdiLayout:
        """Compute the layout without writing anything.

        Only the sizes of the source files are read.

        Args:
            working_directory: Directory holding the sheet's data files
            cue_sheet: Parsed cue sheet

        Returns:
            GdiLayout with one entry and one extraction per track

        Raises:
            MalformedCueSheet: If the sheet has no tracks
            SourceTrackFileMissing: If a data file cannot be found
            TruncatedTrackData: If a pregap offset lies beyond a data file's end
            OutputWriteFailure: If an output would overwrite a source data file
        """
        working_directory = Path(working_directory)
        if not cue_sheet.tracks:
            raise MalformedCueSheet("Cue sheet has no tracks", path=cue_sheet.source)

        self._warn_shared_files(cue_sheet)

        source_paths = {
            (working_directory / cue_file.filename).resolve() for cue_file in cue_sheet.files
        }
        layout = GdiLayout()
        current_sector = 0

        for track in sorted(cue_sheet.tracks, key=lambda t: t.number):
            source_path = working_directory / track.data_file.filename
            source_length = self._source_length(source_path, track)

            if (
                track.high_density_area_start
                and current_sector < self.config.high_density_area_lba
            ):
                logger.debug(
                    "Pinning high-density area start",
                    track=track.number,
                    from_sector=current_sector,
                    to_sector=self.config.high_density_area_lba,
                )
                current_sector = self.config.high_density_area_lba

            full_copy = not track.has_pregap_in_file
            if full_copy:
                byte_offset = 0
            else:
                # Second index by position; any later index is ignored
                track_start = track.indices[1]
                gap_offset = track_start.total_frames
                byte_offset = gap_offset * RAW_SECTOR_SIZE
                if byte_offset > source_length:
                    raise TruncatedTrackData(
                        f"Track {track.number} INDEX {track_start.number:02d} lies at byte "
                        f"{byte_offset}, beyond the end of its {source_length}-byte data file",
                        path=source_path,
                    )
                current_sector += gap_offset

            sector_amount = (source_length - byte_offset) // RAW_SECTOR_SIZE
            output_name = output_track_filename(track)
            output_path = working_directory / output_name

            if output_path.resolve() in source_paths and not (
                full_copy and output_path.resolve() == source_path.resolve()
            ):
                raise OutputWriteFailure(
                    f"Output for track {track.number} would overwrite a source data file",
                    path=output_path,
                )

            layout.entries.append(
                GdiEntry(
                    track_number=track.number,
                    start_lba=current_sector,
                    type_flag=AUDIO_TYPE_FLAG if track.data_type.is_audio else DATA_TYPE_FLAG,
                    filename=output_name,
                )
            )
            layout.extractions.append(
                TrackExtraction(
                    track_number=track.number,
                    source_path=source_path,
                    output_path=output_path,
                    source_length=source_length,
                    byte_offset=byte_offset,
                    sector_amount=sector_amount,
                    full_copy=full_copy,
                )
            )

            current_sector += sector_amount

        logger.debug(
            "Layout planned",
            working_directory=str(working_directory),
            track_count=layout.track_count,
            end_sector=current_sector,
        )
        return layout

    def build(self, working_directory: Path, cue_sheet: CueSheet) -> GdiLayout:
        """Extract every track and write the GDI table.

        The table is written last; a failure part-way leaves the track files
        written so far and no table.

        Args:
            working_directory: Directory holding the sheet's data files
            cue_sheet: Parsed cue sheet

        Returns:
            The layout that was written

        Raises:
            MalformedCueSheet: If the sheet has no tracks
            SourceTrackFileMissing: If a data file cannot be opened
            TruncatedTrackData: If a data file is shorter than planned
            OutputWriteFailure: If an output cannot be written or already exists
        """
        working_directory = Path(working_directory)
        layout = self.plan(working_directory, cue_sheet)
        gdi_path = working_directory / self.config.gdi_filename

        if not self.config.overwrite:
            self._check_outputs_absent(layout, gdi_path)

        for extraction in layout.extractions:
            self._extract(extraction)

        try:
            write_text_atomic(gdi_path, layout.render())
        except OSError as e:
            raise OutputWriteFailure(f"Cannot write GDI table: {e.strerror or e}", path=gdi_path) from e

        logger.info(
            "GDI layout written",
            gdi=str(gdi_path),
            track_count=layout.track_count,
        )
        return layout

    def _source_length(self, source_path: Path, track: Track) -> int:
        try:
            if not source_path.is_file():
                raise FileNotFoundError(source_path)
            length = source_path.stat().st_size
        except OSError as e:
            raise SourceTrackFileMissing(
                f"Data file for track {track.number} not found", path=source_path
            ) from e

        if length % RAW_SECTOR_SIZE:
            logger.warning(
                "Data file length is not a whole number of sectors",
                file=str(source_path),
                track=track.number,
                length=length,
            )
        if track.data_type.native_sector_size != RAW_SECTOR_SIZE:
            logger.warning(
                "Track mode is not raw, treating sectors as 2352 bytes",
                track=track.number,
                mode=track.data_type.value,
            )
        return length

    def _warn_shared_files(self, cue_sheet: CueSheet) -> None:
        for cue_file in cue_sheet.files:
            tracks = cue_sheet.tracks_for_file(cue_file.filename)
            if len(tracks) > 1:
                logger.warning(
                    "Data file backs several tracks, each track copies the whole file",
                    file=cue_file.filename,
                    tracks=[t.number for t in tracks],
                )

    def _check_outputs_absent(self, layout: GdiLayout, gdi_path: Path) -> None:
        if gdi_path.exists():
            raise OutputWriteFailure("GDI table already exists", path=gdi_path)

        for extraction in layout.extractions:
            in_place = extraction.full_copy and _same_file(
                extraction.output_path, extraction.source_path
            )
            if extraction.output_path.exists() and not in_place:
                raise OutputWriteFailure("Track file already exists", path=extraction.output_path)

    def _extract(self, extraction: TrackExtraction) -> None:
        """Copy one track's payload; handles are released before returning."""
        if extraction.full_copy and _same_file(extraction.output_path, extraction.source_path):
            logger.debug(
                "Track data already in place",
                track=extraction.track_number,
                file=str(extraction.output_path),
            )
            return

        try:
            source = open(extraction.source_path, "rb")
        except OSError as e:
            raise SourceTrackFileMissing(
                f"Cannot open data file for track {extraction.track_number}: {e.strerror or e}",
                path=extraction.source_path,
            ) from e

        with source:
            try:
                written = copy_from_offset(
                    source, extraction.output_path, extraction.byte_offset
                )
            except OSError as e:
                raise OutputWriteFailure(
                    f"Cannot write track {extraction.track_number}: {e.strerror or e}",
                    path=extraction.output_path,
                ) from e

        if written != extraction.expected_length:
            raise TruncatedTrackData(
                f"Track {extraction.track_number} copied {written} bytes, "
                f"expected {extraction.expected_length}",
                path=extraction.source_path,
            )

        logger.info(
            "Track extracted",
            track=extraction.track_number,
            source=extraction.source_path.name,
            output=extraction.output_path.name,
            byte_offset=extraction.byte_offset,
            sectors=extraction.sector_amount,
            full_copy=extraction.full_copy,
        )


def _same_file(first: Path, second: Path) -> bool:
    return first.resolve() == second.resolve()
