from __future__ import annotations
from pathlib import Path
from typing import Iterable, Optional

FONT_EXTENSIONS = {".ttf", ".otf", ".ttc"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}


def normalize(name: str) -> str:
    return "".join(ch.lower() for ch in name if ch.isalnum())


class AssetLocator:
    """Resolves font and image references relative to an app directory.

    A reference may be a path that exists as-is, a path relative to the app
    root or to its ``assets`` folder, or a bare font name matched loosely
    against the files in ``assets`` ("roboto regular" finds Roboto-Regular.ttf).
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root else Path.cwd()
        self.assets_dir = self.root / "assets"

    def _search_dirs(self) -> Iterable[Path]:
        yield self.root
        yield self.assets_dir
        yield self.assets_dir / "fonts"

    def _resolve(self, reference: Optional[str], extensions: set[str]) -> Optional[Path]:
        if not reference:
            return None
        candidate = Path(reference)
        if candidate.is_absolute() and candidate.exists():
            return candidate
        for directory in self._search_dirs():
            relative_candidate = directory / reference
            if relative_candidate.exists():
                return relative_candidate
        if not reference.lower().endswith(tuple(extensions)):
            target = normalize(reference)
            for directory in self._search_dirs():
                if not directory.is_dir():
                    continue
                for entry in directory.iterdir():
                    if entry.suffix.lower() in extensions and normalize(entry.stem) == target:
                        return entry
        return None

    def font(self, reference: Optional[str]) -> Optional[Path]:
        return self._resolve(reference, FONT_EXTENSIONS)

    def image(self, reference: Optional[str]) -> Optional[Path]:
        return self._resolve(reference, IMAGE_EXTENSIONS)

    def list_fonts(self) -> list[str]:
        names: list[str] = []
        for directory in self._search_dirs():
            if not directory.is_dir():
                continue
            for entry in directory.iterdir():
                if entry.is_file() and entry.suffix.lower() in FONT_EXTENSIONS:
                    names.append(entry.stem)
        return sorted(set(names))
