"""Batch conversion of several discs."""

from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from threading import Lock
from typing import Callable, Optional, Sequence

from cue2gdi.config import Config
from cue2gdi.core.pipeline import ConversionPipeline
from cue2gdi.models.result import ConversionResult
from cue2gdi.utils.logger import get_logger

logger = get_logger(__name__)

ResultCallback = Callable[[int, int, ConversionResult], None]


class BatchConverter:
    """Convert a list of discs, continuing past discs that fail.

    Discs are grouped by working directory. Each group runs sequentially on a
    single worker, since every disc in a directory writes the same table file;
    distinct directories may run in parallel.
    """

    def __init__(self, config: Config, pipeline: Optional[ConversionPipeline] = None):
        """Initialize the batch converter.

        Args:
            config: Application configuration
            pipeline: Pipeline to run each disc through (built from config if omitted)
        """
        self.config = config
        self.pipeline = pipeline or ConversionPipeline(config)
        self._lock = Lock()
        self._finished = 0

    def run(
        self, cue_paths: Sequence[Path], on_result: Optional[ResultCallback] = None
    ) -> list[ConversionResult]:
        """Convert every disc.

        Args:
            cue_paths: CUE files to convert
            on_result: Called with (finished_count, total, result) as each disc ends

        Returns:
            Results in the same order as ``cue_paths``
        """
        cue_paths = [Path(p) for p in cue_paths]
        total = len(cue_paths)
        results: list[Optional[ConversionResult]] = [None] * total
        self._finished = 0

        groups: dict[Path, list[int]] = defaultdict(list)
        for position, cue_path in enumerate(cue_paths):
            groups[cue_path.parent.resolve()].append(position)

        worker_count = min(self.config.processing.worker_count, len(groups)) or 1

        logger.info(
            "Starting batch conversion",
            disc_count=total,
            directory_count=len(groups),
            workers=worker_count,
        )

        def run_group(positions: list[int]) -> None:
            for position in positions:
                result = self.pipeline.process(cue_paths[position])
                results[position] = result
                self._report(result, total, on_result)

        if worker_count == 1:
            for positions in groups.values():
                run_group(positions)
        else:
            with ThreadPoolExecutor(max_workers=worker_count) as executor:
                futures = [executor.submit(run_group, positions) for positions in groups.values()]
                for future in as_completed(futures):
                    future.result()

        failed = sum(1 for r in results if r is not None and not r.ok)
        logger.info("Batch conversion finished", disc_count=total, failed=failed)
        return [r for r in results if r is not None]

    def _report(
        self, result: ConversionResult, total: int, on_result: Optional[ResultCallback]
    ) -> None:
        with self._lock:
            self._finished += 1
            if on_result is not None:
                on_result(self._finished, total, result)
