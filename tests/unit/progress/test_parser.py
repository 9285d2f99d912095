"""Unit tests for the FFmpeg progress parser."""

import pytest

from encodekit.progress.parser import (
    MAX_LINE_LENGTH,
    ProgressParser,
    find_fatal_marker,
    parse_timestamp,
)

STATUS_LINE = (
    "frame=  100 fps= 30 q=28.0 size=     256kB time=00:00:03.33 "
    "bitrate= 629.9kbits/s speed=1.01x"
)


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_standard(self) -> None:
        assert parse_timestamp("time=00:01:02.50") == pytest.approx(62.5)

    def test_hours(self) -> None:
        assert parse_timestamp("size=1kB time=02:00:00.00 x") == 7200.0

    def test_no_fraction(self) -> None:
        assert parse_timestamp("time=00:00:07") == 7.0

    def test_negative_clamps_to_zero(self) -> None:
        assert parse_timestamp("time=-00:00:00.04 bitrate=N/A") == 0.0

    def test_not_available(self) -> None:
        assert parse_timestamp("time=N/A bitrate=N/A") is None

    def test_no_marker(self) -> None:
        assert parse_timestamp("Input #0, matroska,webm, from 'in.mkv':") is None


class TestFindFatalMarker:
    """Tests for find_fatal_marker."""

    def test_unknown_encoder(self) -> None:
        assert find_fatal_marker("Unknown encoder 'libfoo'") == "unknown encoder"

    def test_case_insensitive(self) -> None:
        assert find_fatal_marker("in.mkv: NO SUCH FILE OR DIRECTORY") is not None

    def test_conversion_failed(self) -> None:
        assert find_fatal_marker("Conversion failed!") == "conversion failed!"

    def test_ordinary_line(self) -> None:
        assert find_fatal_marker("Stream mapping:") is None
        assert find_fatal_marker(STATUS_LINE) is None

    @pytest.mark.parametrize(
        "line,name",
        [
            ("[aost#0:0 @ 0x55d1] Unknown encoder 'libnope'", "unknown encoder"),
            ("missing.mkv: No such file or directory", "cannot open file"),
            ("/srv/out dir/out.mp4: Permission denied", "cannot open file"),
            (
                "broken.mkv: Invalid data found when processing input",
                "cannot open file",
            ),
            (
                "[in#0 @ 0x7f3a] Error opening input: No such file or directory",
                "cannot open file",
            ),
            (
                "Encoder (codec mp3) not found for output stream #0:0",
                "encoder not found",
            ),
            ("Output file #0 does not contain any stream", "no output streams"),
            ("Unrecognized option 'bogus'.", "unrecognized option"),
        ],
    )
    def test_fatal_shapes(self, line: str, name: str) -> None:
        assert find_fatal_marker(line) == name

    @pytest.mark.parametrize(
        "line",
        [
            "[h264 @ 0x1] Error while decoding stream #0:0: "
            "Invalid data found when processing input",
            "    title           : no such file or directory",
            "    comment         : permission denied",
            "Input #0, matroska,webm, from 'permission denied.mkv':",
            "Input #0, matroska,webm, from 'No such file or directory.mkv':",
            "[mp3 @ 0x2] Header missing",
            "Output #0, mp4, to 'conversion failed!.mp4':",
        ],
    )
    def test_phrases_outside_fatal_shapes(self, line: str) -> None:
        assert find_fatal_marker(line) is None


class TestProgressParserFeed:
    """Tests for single-line parsing."""

    def test_scenario_quarter_done(self) -> None:
        parser = ProgressParser(total_duration=10.0)
        event = parser.feed("frame=60 fps=24 time=00:00:02.50 bitrate=N/A speed=1x")
        assert event is not None
        assert event.elapsed == 2.5
        assert event.fraction == pytest.approx(0.25)
        assert event.percent == pytest.approx(25.0)
        assert not event.is_fatal

    def test_status_fields(self) -> None:
        event = ProgressParser(10.0).feed(STATUS_LINE)
        assert event is not None
        assert event.frame == 100
        assert event.fps == 30.0
        assert event.bitrate == "629.9kbits/s"
        assert event.speed == "1.01x"

    def test_not_available_fields(self) -> None:
        event = ProgressParser().feed("frame=0 fps=0.0 time=00:00:00.00 bitrate=N/A")
        assert event is not None
        assert event.bitrate is None

    def test_unknown_total_has_no_fraction(self) -> None:
        event = ProgressParser().feed("time=00:00:05.00")
        assert event is not None
        assert event.elapsed == 5.0
        assert event.fraction is None
        assert event.percent is None

    @pytest.mark.parametrize("total", [0.0, -3.0])
    def test_non_positive_total_is_unknown(self, total: float) -> None:
        parser = ProgressParser(total)
        assert parser.state.total_duration is None
        event = parser.feed("time=00:00:05.00")
        assert event is not None and event.fraction is None

    def test_non_status_line(self) -> None:
        parser = ProgressParser(10.0)
        assert parser.feed("Press [q] to stop, [?] for help") is None
        assert parser.feed("   ") is None
        assert parser.state.last_event is None

    def test_fatal_line(self) -> None:
        parser = ProgressParser(10.0)
        parser.feed("time=00:00:01.00")
        event = parser.feed("Error while opening encoder for output stream #0:0")
        assert event is not None
        assert event.is_fatal
        assert event.error is not None and "opening encoder" in event.error
        assert event.elapsed == 1.0
        assert parser.fatal_error == event.error

    def test_first_fatal_line_latches(self) -> None:
        parser = ProgressParser()
        parser.feed("Unknown encoder 'libnope'")
        parser.feed("Conversion failed!")
        assert parser.fatal_error == "Unknown encoder 'libnope'"


class TestProgressMonotonicity:
    """Fraction never decreases and never exceeds 1.0."""

    def test_increasing_markers(self) -> None:
        parser = ProgressParser(total_duration=4.0)
        fractions = []
        for seconds in (0.5, 1.0, 2.0, 3.0, 4.0, 5.0, 8.0):
            event = parser.feed(f"time=00:00:{seconds:05.2f}")
            assert event is not None
            fractions.append(event.fraction)
        assert fractions == sorted(fractions)
        assert fractions[-1] == 1.0
        assert all(0.0 <= f <= 1.0 for f in fractions)

    def test_backwards_marker_keeps_fraction(self) -> None:
        parser = ProgressParser(total_duration=10.0)
        parser.feed("time=00:00:05.00")
        event = parser.feed("time=00:00:04.00")
        assert event is not None
        assert event.fraction == pytest.approx(0.5)


class TestProgressParserChunks:
    """Tests for line reassembly across read boundaries."""

    def test_carriage_return_lines(self) -> None:
        parser = ProgressParser(10.0)
        events = parser.feed_chunk(
            "time=00:00:01.00 speed=1x\rtime=00:00:02.00 speed=1x\r"
        )
        assert [e.elapsed for e in events] == [1.0, 2.0]

    def test_split_across_chunks(self) -> None:
        parser = ProgressParser(10.0)
        assert parser.feed_chunk("frame=1 time=00:00:0") == []
        events = parser.feed_chunk("3.00 bitrate=1kbits/s\n")
        assert len(events) == 1
        assert events[0].elapsed == 3.0

    def test_crlf_and_blank_lines(self) -> None:
        parser = ProgressParser()
        lines = parser.split_lines("first\r\n\r\nsecond\n")
        assert lines == ["first", "second"]

    def test_flush_unterminated_fatal(self) -> None:
        parser = ProgressParser()
        assert parser.feed_chunk("Conversion failed!") == []
        events = parser.flush()
        assert len(events) == 1
        assert events[0].is_fatal
        assert parser.flush() == []

    def test_remainder_clears(self) -> None:
        parser = ProgressParser()
        parser.split_lines("partial")
        assert parser.remainder() == "partial"
        assert parser.remainder() == ""

    def test_overlong_line_is_bounded(self) -> None:
        parser = ProgressParser()
        events = parser.feed_chunk("Unknown encoder 'libnope' ")
        for _ in range(8):
            events += parser.feed_chunk("x" * (MAX_LINE_LENGTH // 4))
            assert len(parser._pending) <= MAX_LINE_LENGTH

        assert len(events) == 1
        assert events[0].is_fatal
        assert events[0].error.startswith("Unknown encoder 'libnope'")
        assert len(events[0].error) <= MAX_LINE_LENGTH

    def test_rest_of_overlong_line_is_skipped(self) -> None:
        parser = ProgressParser()
        lines = parser.split_lines("a" * (MAX_LINE_LENGTH + 10))
        assert lines == ["a" * MAX_LINE_LENGTH]
        assert parser.split_lines("more of the same line") == []
        assert parser.split_lines(" end\rnext\r") == ["next"]
