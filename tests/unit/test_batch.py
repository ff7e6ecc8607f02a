"""Unit tests for batch conversion."""

import threading
from unittest.mock import Mock

import pytest

from cue2gdi.config import Config, ProcessingConfig
from cue2gdi.core.batch import BatchConverter
from cue2gdi.models.result import ConversionResult


def _make_disc(directory, sector_writer, sectors=10):
    directory.mkdir()
    sector_writer(directory / "a.bin", sectors)
    cue_path = directory / "disc.cue"
    cue_path.write_text('FILE "a.bin" BINARY\nTRACK 01 MODE1/2352\nINDEX 01 00:00:00\n')
    return cue_path


class TestBatchConverter:
    """Test BatchConverter.run."""

    @pytest.mark.parametrize("workers", [1, 3])
    def test_converts_every_disc(self, tmp_path, sector_writer, workers):
        """Test that every disc in the batch is converted, in input order."""
        cue_paths = [_make_disc(tmp_path / f"disc{i}", sector_writer, 10 + i) for i in range(3)]
        config = Config(processing=ProcessingConfig(worker_count=workers))

        results = BatchConverter(config).run(cue_paths)

        assert [r.cue_path for r in results] == cue_paths
        assert all(r.status == "success" for r in results)
        for i, cue_path in enumerate(cue_paths):
            assert (cue_path.parent / "track1.bin").stat().st_size == (10 + i) * 2352

    def test_failed_disc_does_not_stop_batch(self, tmp_path, sector_writer):
        """Test that one failing disc leaves the rest of the batch running."""
        good = _make_disc(tmp_path / "good", sector_writer)
        bad = _make_disc(tmp_path / "bad", sector_writer)
        (bad.parent / "a.bin").unlink()
        other = _make_disc(tmp_path / "other", sector_writer)

        results = BatchConverter(Config()).run([bad, good, other])

        assert [r.status for r in results] == ["failed", "success", "success"]
        assert results[0].error_type == "SourceTrackFileMissing"

    def test_progress_callback(self, tmp_path, sector_writer):
        """Test that the callback sees a running count per finished disc."""
        cue_paths = [_make_disc(tmp_path / f"disc{i}", sector_writer) for i in range(2)]
        calls = []

        BatchConverter(Config()).run(
            cue_paths, on_result=lambda done, total, result: calls.append((done, total, result.status))
        )

        assert calls == [(1, 2, "success"), (2, 2, "success")]

    def test_same_directory_discs_run_on_one_worker(self, tmp_path):
        """Test that discs sharing a directory are converted by the same worker."""
        (tmp_path / "shared").mkdir()
        first = tmp_path / "shared" / "a.cue"
        second = tmp_path / "shared" / "b.cue"
        third = tmp_path / "c.cue"
        seen = {}

        def process(cue_path):
            seen[cue_path.name] = threading.get_ident()
            return ConversionResult(status="success", cue_path=cue_path)

        pipeline = Mock()
        pipeline.process.side_effect = process
        config = Config(processing=ProcessingConfig(worker_count=4))

        results = BatchConverter(config, pipeline=pipeline).run([first, third, second])

        assert [r.cue_path for r in results] == [first, third, second]
        assert seen["a.cue"] == seen["b.cue"]

    def test_empty_batch(self):
        """Test that an empty batch returns no results."""
        assert BatchConverter(Config()).run([]) == []
