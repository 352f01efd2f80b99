# lrid/instrument_store.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from .engine.instrument import Instrument, load_instrument_file
from .settings import get_settings

logger = logging.getLogger(__name__)


class InstrumentCache:
    """
    Holds the parsed instrument for the service. Reloads when the file's
    mtime changes or after invalidate(). Load errors propagate to the caller.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._instrument: Optional[Instrument] = None
        self._mtime: Optional[float] = None
        self._lock = threading.Lock()

    def _current_mtime(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def get(self) -> Instrument:
        with self._lock:
            mtime = self._current_mtime()
            if self._instrument is None or mtime != self._mtime:
                self._instrument = load_instrument_file(self.path)
                self._mtime = mtime
                logger.info(
                    "Loaded instrument %s v%s from %s",
                    self._instrument.id, self._instrument.version, self.path,
                )
            return self._instrument

    def invalidate(self) -> None:
        with self._lock:
            self._instrument = None
            self._mtime = None


instrument_cache = InstrumentCache(get_settings().INSTRUMENT_PATH)


def get_instrument() -> Instrument:
    return instrument_cache.get()
