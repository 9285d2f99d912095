"""Prober interface for source media inspection."""

from pathlib import Path
from typing import Protocol

from encodekit.probe.models import SourceProbe


class Prober(Protocol):
    """Protocol for source probing implementations.

    A prober turns a source path into a SourceProbe. Implementations can use
    ffprobe or any other inspection tool; the encoding core only reads the
    result.
    """

    def probe(self, path: Path) -> SourceProbe:
        """Describe the media at ``path``.

        Args:
            path: Path to the source file.

        Returns:
            SourceProbe with container, duration and stream information.

        Raises:
            ProbeError: If the file cannot be inspected.
        """
        ...
