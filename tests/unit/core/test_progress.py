"""Tests for the rich progress callback."""

from io import StringIO

from rich.console import Console
from rich.progress import Progress, TextColumn

from native_embedder.core.progress import RichProgressCallback, progress_context


class TestRichProgressCallback:
    """Tests for RichProgressCallback."""

    def test_batch_field_tracks_item_description(self) -> None:
        """Test the batch column shows the latest batch description."""
        progress = Progress(
            TextColumn("{task.fields[batch]}"),
            console=Console(file=StringIO()),
        )
        callback = RichProgressCallback(progress)

        callback.on_start(3, "Embedding")
        callback.on_progress(1, "batch of 25")

        task = progress.tasks[0]
        assert task.completed == 1
        assert task.total == 3
        assert task.fields["batch"] == "batch of 25"

    def test_complete_removes_task(self) -> None:
        """Test the task is hidden once embedding finishes."""
        progress = Progress(console=Console(file=StringIO()))
        callback = RichProgressCallback(progress)

        callback.on_start(1, "Embedding")
        callback.on_complete()

        assert progress.tasks == []


class TestProgressContext:
    """Tests for progress_context."""

    def test_quiet_mode_yields_none(self) -> None:
        """Test no callback is created in quiet mode."""
        with progress_context(quiet_mode=True) as progress:
            assert progress is None
