"""Tests for site progress tracking."""

from unittest.mock import MagicMock, patch

import pytest

from ngsread.core.progress import site_progress


@pytest.mark.tier0
class TestSiteProgress:
    """Tests that the progress bar is driven and finalized correctly."""

    def test_disabled_counts_without_bar(self):
        with patch("ngsread.core.progress.progressbar") as mock_pb:
            with site_progress(3, enabled=False) as progress:
                progress.advance()
                progress.advance()

            mock_pb.ProgressBar.assert_not_called()
            assert progress.sites_done == 2

    def test_bar_updated_per_site(self):
        with patch("ngsread.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            with site_progress(3, desc="test") as progress:
                for _ in range(3):
                    progress.advance()

            assert [c.args[0] for c in mock_bar.update.call_args_list] == [1, 2, 3]
            mock_bar.finish.assert_called_once()

    def test_finish_called_on_exception(self):
        """bar.finish() is called when the loader raises mid-file."""
        with patch("ngsread.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            with pytest.raises(RuntimeError, match="boom"):
                with site_progress(5, desc="test") as progress:
                    progress.advance()
                    raise RuntimeError("boom")

            mock_bar.finish.assert_called_once()
