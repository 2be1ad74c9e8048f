import logging
import os
import threading
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from weightwatch.errors import StoreWriteError
from weightwatch.models import Measurement, in_range

logger = logging.getLogger(__name__)


def parse_line(line: str) -> Optional[Measurement]:
    """Parse one `YYYY-MM-DD <value>` line, or return None if it is not one."""
    parts = line.split()
    if len(parts) != 2:
        return None
    try:
        d = date.fromisoformat(parts[0])
        value = Decimal(parts[1])
    except (ValueError, InvalidOperation):
        return None
    if not in_range(value):
        return None
    return Measurement(date=d, value=value)


class WeightLog:
    """Append-only measurement file. Lines are never rewritten or removed."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def ensure_dir(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, measurement: Measurement) -> Measurement:
        line = measurement.to_line() + "\n"
        with self._lock:
            try:
                self.ensure_dir()
                with self._path.open("a") as f:
                    f.write(line)
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise StoreWriteError(f"Could not write to {self._path}: {e}") from e
        logger.debug("Appended %s to %s", line.strip(), self._path)
        return measurement

    def read_all(self) -> List[Measurement]:
        if not self._path.exists():
            return []
        out = []
        with self._path.open("r", encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                m = parse_line(line)
                if m is None:
                    logger.warning("Skipping malformed line %d in %s: %r", lineno, self._path, line)
                    continue
                out.append(m)
        logger.debug("Read %d measurements from %s", len(out), self._path)
        return out
