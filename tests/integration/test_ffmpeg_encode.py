"""Integration tests that run the real ffmpeg binary.

Skipped when ffmpeg/ffprobe are not installed. Sources are generated with
lavfi test patterns so no fixture media is needed.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from encodekit import (
    AudioSpec,
    Encoder,
    EncodingSpec,
    ExternalToolFailedError,
    VideoSpec,
)
from encodekit.probe import FFprobeProber

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
        reason="ffmpeg/ffprobe not installed",
    ),
]


@pytest.fixture(scope="module")
def source_video(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Four seconds of test pattern video with a sine tone."""
    path = tmp_path_factory.mktemp("media") / "source.mkv"
    subprocess.run(  # nosec B603 B607
        [
            "ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "lavfi",
            "-i",
            "testsrc=duration=4:size=160x120:rate=10",
            "-f",
            "lavfi",
            "-i",
            "sine=frequency=440:duration=4",
            "-c:v",
            "mpeg4",
            "-c:a",
            "pcm_s16le",
            "-y",
            str(path),
        ],
        check=True,
        capture_output=True,
        timeout=60,
    )
    return path


class TestProbe:
    """Probing a generated source."""

    def test_probe(self, source_video: Path) -> None:
        probe = FFprobeProber().probe(source_video)
        assert probe.duration == pytest.approx(4.0, abs=0.2)
        assert probe.has_video
        assert probe.has_audio


class TestEncode:
    """End-to-end encodes."""

    def test_trimmed_encode(self, source_video: Path, tmp_path: Path) -> None:
        target = tmp_path / "out.mkv"
        spec = (
            EncodingSpec()
            .with_format("matroska")
            .with_video(VideoSpec(codec="mpeg4"))
            .with_audio(AudioSpec(codec="pcm_s16le"))
            .with_offset(1.0)
            .with_duration(2.0)
        )
        events = []
        result = Encoder().encode(source_video, target, spec, on_progress=events.append)

        assert result.exit_code == 0
        assert target.exists()
        fractions = [e.fraction for e in events if e.fraction is not None]
        assert fractions == sorted(fractions)
        assert all(f <= 1.0 for f in fractions)

        encoded = FFprobeProber().probe(target)
        assert encoded.duration == pytest.approx(2.0, abs=0.3)

    def test_unknown_encoder_fails(self, source_video: Path, tmp_path: Path) -> None:
        spec = EncodingSpec().with_video(VideoSpec(codec="no_such_encoder"))
        with pytest.raises(ExternalToolFailedError) as exc_info:
            Encoder().encode(source_video, tmp_path / "out.mkv", spec)
        assert exc_info.value.diagnostic_lines
