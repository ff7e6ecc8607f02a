"""Single-disc conversion pipeline."""

import time
from pathlib import Path

from cue2gdi.config import Config
from cue2gdi.core.builder import GdiLayoutBuilder
from cue2gdi.core.parser import CueSheetParser
from cue2gdi.errors import ConversionError
from cue2gdi.models.result import ConversionResult
from cue2gdi.utils.logger import get_logger

logger = get_logger(__name__)


class ConversionPipeline:
    """Orchestrates parsing and layout building for one disc."""

    def __init__(self, config: Config):
        """Initialize the pipeline with configuration.

        Args:
            config: Application configuration
        """
        self.config = config
        self.parser = CueSheetParser()
        self.builder = GdiLayoutBuilder(config.conversion)

    def process(self, cue_path: Path) -> ConversionResult:
        """Convert one disc described by a CUE file.

        The CUE file's directory is the working directory: data files are
        read from it and outputs are written to it.

        Pipeline steps:
        1. Parse the cue sheet
        2. Plan the layout (dry run) or extract tracks and write the table
        3. Report the outcome

        A disc that fails never raises; the failure is reported in the result
        so the caller can move on to the next disc.

        Args:
            cue_path: Path to the .cue file

        Returns:
            ConversionResult with status and details
        """
        start_time = time.time()
        cue_path = Path(cue_path)
        working_directory = cue_path.parent

        logger.info("Converting disc", cue=str(cue_path))

        try:
            cue_sheet = self.parser.parse(cue_path)

            if self.config.execution.dry_run:
                layout = self.builder.plan(working_directory, cue_sheet)
                status = "dry_run"
                logger.info(
                    "DRY RUN: Would write GDI layout",
                    cue=str(cue_path),
                    track_count=layout.track_count,
                )
            else:
                layout = self.builder.build(working_directory, cue_sheet)
                status = "success"

        except ConversionError as e:
            logger.error(
                "Disc conversion failed",
                cue=str(cue_path),
                error_type=type(e).__name__,
                error=str(e),
            )
            return ConversionResult(
                status="failed",
                cue_path=cue_path,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(start_time),
            )
        except Exception as e:
            logger.exception("Pipeline error", cue=str(cue_path), error=str(e))
            return ConversionResult(
                status="error",
                cue_path=cue_path,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(start_time),
            )

        duration_ms = _elapsed_ms(start_time)
        logger.info(
            "Disc converted",
            cue=str(cue_path),
            status=status,
            track_count=layout.track_count,
            duration_ms=duration_ms,
        )
        return ConversionResult(
            status=status, cue_path=cue_path, layout=layout, duration_ms=duration_ms
        )


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)
