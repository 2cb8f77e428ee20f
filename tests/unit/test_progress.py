from __future__ import annotations

from unittest.mock import Mock, patch

from campaign_import.services.progress import SubmitProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    """Test that is_tty_enabled returns sys.stdout.isatty()."""
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestSubmitProgress:
    """Test cases for SubmitProgress class."""

    def test_tty_disabled_tracks_percent_without_bar(self):
        listener = Mock()
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=False), \
             patch('campaign_import.services.progress.tqdm') as mock_tqdm:
            progress = SubmitProgress(listener=listener)
            progress.advance_to(10)
            progress.complete()

        mock_tqdm.assert_not_called()
        assert progress.pbar is None
        assert progress.percent == 100
        assert [c.args[0] for c in listener.call_args_list] == [10, 100]

    def test_tty_enabled_creates_bar_lazily(self):
        mock_pbar = Mock()
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=True), \
             patch('campaign_import.services.progress.tqdm', return_value=mock_pbar) as mock_tqdm:
            progress = SubmitProgress(description="Uploading wards")
            mock_tqdm.assert_not_called()

            progress.advance_to(10)
            mock_tqdm.assert_called_once_with(
                total=100,
                desc="Uploading wards",
                unit="%",
                leave=False,
                ncols=80,
                ascii=True,
            )
            mock_pbar.update.assert_called_once_with(10)

            progress.complete()
            mock_pbar.update.assert_called_with(90)
            mock_pbar.close.assert_called_once()
            assert progress.pbar is None

    def test_advance_never_goes_backwards(self):
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=False):
            progress = SubmitProgress()
            progress.advance_to(50)
            progress.advance_to(20)
            assert progress.percent == 50
            progress.advance_to(250)
            assert progress.percent == 100

    def test_advance_pages_maps_to_write_window(self):
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=False):
            progress = SubmitProgress()
            progress.advance_to(10)
            progress.advance_pages(500, 1000)
            assert progress.percent == 50
            progress.advance_pages(1000, 1000)
            assert progress.percent == 90
            progress.advance_pages(5, 0)
            assert progress.percent == 90

    def test_reset_reports_zero(self):
        listener = Mock()
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=False):
            progress = SubmitProgress(listener=listener)
            progress.advance_to(40)
            progress.reset()
        assert progress.percent == 0
        listener.assert_called_with(0)

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('campaign_import.services.progress.is_tty_enabled', return_value=True), \
             patch('campaign_import.services.progress.tqdm', return_value=mock_pbar):
            with SubmitProgress() as progress:
                progress.advance_to(30)
        mock_pbar.close.assert_called_once()
