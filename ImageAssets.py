# ImageAssets.py
# Lost Circuits: product photo loading with settle counting
#
# Single-threaded and cooperative: request() queues a path, pump() loads the
# next queued path(s). A failed load counts as settled just like a success,
# so a broken photo never blocks the sheet. No cancellation.

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Callable, Iterable, Optional

from PIL import Image

from paths import resolve_data_path


def _open_rgba(path: Path) -> Image.Image:
    with Image.open(path) as im:
        img = im.convert("RGBA")
    img.load()
    return img


class AssetLibrary:
    """
    path (as written in the CSV) -> decoded RGBA image.

    on_settled(path, ok) is called once per requested path.
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        loader: Callable[[Path], Image.Image] = _open_rgba,
        on_settled: Optional[Callable[[str, bool], None]] = None,
    ):
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self._loader = loader
        self.on_settled = on_settled

        self.images: dict[str, Image.Image] = {}
        self.failed: dict[str, str] = {}
        self._pending: deque[str] = deque()
        self._requested: set[str] = set()
        self._settled = 0

    # ------------------------------------------------------

    @property
    def requested_count(self) -> int:
        return len(self._requested)

    @property
    def settled_count(self) -> int:
        return self._settled

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def all_settled(self) -> bool:
        return self._settled == len(self._requested)

    # ------------------------------------------------------

    def request(self, path: str) -> None:
        path = (path or "").strip()
        if not path or path in self._requested:
            return
        self._requested.add(path)
        self._pending.append(path)

    def request_all(self, paths: Iterable[str]) -> None:
        for p in paths:
            self.request(p)

    def pump(self, max_items: int = 1) -> int:
        """Loads up to max_items queued assets. Returns how many settled."""
        n = 0
        while self._pending and n < max_items:
            path = self._pending.popleft()
            ok = False
            try:
                self.images[path] = self._loader(resolve_data_path(path, self.base_dir))
                ok = True
            except (OSError, ValueError, Image.DecompressionBombError) as e:
                self.failed[path] = str(e)
                print(f"[WARN] Image load failed: {path} ({e})")
            finally:
                # a popped path is always settled, whatever the loader did
                self._settled += 1
                n += 1
                if self.on_settled is not None:
                    self.on_settled(path, ok)
        return n

    def load_all(self) -> int:
        return self.pump(max_items=len(self._pending))
