"""Tests for reply utility functions: truncate, format_track_line and format_status."""

from __future__ import annotations

from conftest import make_track
from discord_jukebox.application.services.models import StatusSnapshot
from discord_jukebox.domain.music.value_objects import LoopMode, PlayerState
from discord_jukebox.utils.reply import format_status, format_track_line, truncate

# =============================================================================
# truncate
# =============================================================================


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("hello") == "hello"

    def test_exact_length_unchanged(self):
        assert truncate("x" * 90) == "x" * 90

    def test_long_text_ellipsis(self):
        result = truncate("abcdefghij", 5)

        assert result == "abcd…"
        assert len(result) == 5


# =============================================================================
# format_track_line
# =============================================================================


class TestFormatTrackLine:
    def test_queue_line(self):
        line = format_track_line(3, make_track("Song A", duration=3725))

        assert line == "`3.` Song A [1:02:05]"

    def test_search_line_has_author(self):
        line = format_track_line(1, make_track("Song B", duration=None), with_author=True)

        assert line == "`1.` Song B [Unknown] by Test Artist"


# =============================================================================
# format_status
# =============================================================================


class TestFormatStatus:
    def test_not_connected(self):
        assert format_status(StatusSnapshot.disconnected()) == "Not connected to a voice channel."

    def test_playing_with_queue(self):
        status = StatusSnapshot(
            connected=True,
            player_state=PlayerState.PLAYING,
            now_playing=make_track("Now", duration=65),
            queue=[make_track("Next"), make_track("Later", duration=59)],
            loop_mode=LoopMode.QUEUE,
            volume=80,
            sfx_volume=50,
        )

        assert format_status(status).splitlines() == [
            "**State:** playing | **Loop:** queue | **Volume:** 80% | **SFX:** 50%",
            "**Now playing:** Now [1:05]",
            "`1.` Next [3:00]",
            "`2.` Later [0:59]",
        ]

    def test_idle_empty_queue(self):
        lines = format_status(StatusSnapshot(connected=True)).splitlines()

        assert lines[0].startswith("**State:** idle | **Loop:** none")
        assert lines[1:] == ["Queue is empty."]

    def test_preview_limit(self):
        status = StatusSnapshot(
            connected=True, queue=[make_track(f"Song {i}") for i in range(7)]
        )

        lines = format_status(status, preview=5).splitlines()

        assert lines[-2] == "`5.` Song 4 [3:00]"
        assert lines[-1] == "...and 2 more"
