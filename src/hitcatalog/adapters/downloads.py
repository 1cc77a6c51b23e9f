"""Local audio download lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from hitcatalog.domain.model import Hit


@dataclass(frozen=True, slots=True)
class DownloadDirectory:
    """Directory holding ``<yt_id>_<playback_offset>.mp3`` files."""

    path: Path

    def file_for(self, hit: Hit) -> Path:
        return self.path / f"{hit.yt_id}_{hit.playback_offset}.mp3"

    def __call__(self, hit: Hit) -> bool:
        return self.file_for(hit).is_file()
