import logging
import threading
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from dateutil import parser as dateparser

from weightwatch.config import Settings
from weightwatch.errors import InvalidInputError, StoreWriteError
from weightwatch.models import AutoRange, ExplicitRange, Measurement, RenderParams, in_range
from weightwatch.plot.gnuplot import GnuplotRunner
from weightwatch.render.template import load_template, render_script
from weightwatch.storage.weightlog import WeightLog

logger = logging.getLogger(__name__)

# ---------------- Input parsing -----------------

def parse_value(raw: Union[str, float, Decimal, None]) -> Decimal:
    if raw is None or str(raw).strip() == "":
        raise InvalidInputError("Missing weight value")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise InvalidInputError(f"Not a number: {raw!r}")
    if not value.is_finite():
        raise InvalidInputError(f"Not a number: {raw!r}")
    if not in_range(value):
        raise InvalidInputError(f"Out of range: {raw!r}")
    return value


def parse_date(raw: Union[str, date, None], today: Optional[date] = None) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if raw is None or raw.strip() == "":
        return today or date.today()
    raw = raw.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return dateparser.parse(raw, default=datetime.combine(today or date.today(), datetime.min.time())).date()
    except (ValueError, OverflowError):
        raise InvalidInputError(f"Not a date: {raw!r}")

# ---------------- Aggregates -----------------

def daily_averages(rows: List[Measurement]) -> Dict[date, Decimal]:
    buckets: Dict[date, List[Decimal]] = {}
    for m in rows:
        buckets.setdefault(m.date, []).append(m.value)
    return {d: sum(vals) / len(vals) for d, vals in sorted(buckets.items())}


def daily_moving_average(rows: List[Measurement], window: int) -> Dict[date, Decimal]:
    """Trailing average over the last `window` days that have data."""
    if window < 1:
        raise InvalidInputError("Moving average window must be at least 1")
    daily = list(daily_averages(rows).items())
    out = {}
    for i, (d, _) in enumerate(daily):
        span = [v for _, v in daily[max(0, i - window + 1):i + 1]]
        out[d] = sum(span) / len(span)
    return out

# ---------------- Service -----------------

class WeightService:
    def __init__(self, settings: Settings, log: Optional[WeightLog] = None,
                 runner: Optional[GnuplotRunner] = None):
        self.settings = settings
        self.log = log or WeightLog(settings.data_file)
        self.runner = runner or GnuplotRunner(settings.gnuplot, timeout=settings.plot_timeout)
        self._render_lock = threading.Lock()

    def add(self, value, on=None) -> Measurement:
        m = Measurement(date=parse_date(on), value=parse_value(value))
        self.log.append(m)
        logger.info("Recorded %s on %s", m.value, m.date.isoformat())
        return m

    def list_weights(self) -> List[Measurement]:
        return self.log.read_all()

    def recent(self, limit: Optional[int] = None) -> List[Measurement]:
        if limit is None:
            limit = self.settings.table_rows
        rows = self.log.read_all()
        return list(reversed(rows))[:limit]

    def bounds(self, rows: Optional[List[Measurement]] = None) -> Optional[Tuple[Decimal, Decimal]]:
        if rows is None:
            rows = self.log.read_all()
        if not rows:
            return None
        values = [m.value for m in rows]
        return min(values), max(values)

    def render_params(self, today: Optional[date] = None) -> RenderParams:
        today = today or date.today()
        bounds = self.bounds()
        if bounds is None:
            weight_range = AutoRange()
        else:
            pad = Decimal(str(self.settings.weight_pad))
            weight_range = ExplicitRange(start=bounds[0] - pad, end=bounds[1] + pad)
        return RenderParams(
            date_start=today - timedelta(days=self.settings.window_days),
            date_end=today + timedelta(days=1),
            weight_range=weight_range,
            data_file=self.log.path,
            output=self.settings.output_image,
        )

    def render_chart(self, today: Optional[date] = None) -> Path:
        params = self.render_params(today)
        script = render_script(load_template(self.settings.template), params)
        # the store file must exist for gnuplot to read it
        try:
            self.log.ensure_dir()
            self.log.path.touch(exist_ok=True)
        except OSError as e:
            raise StoreWriteError(f"Could not create {self.log.path}: {e}") from e
        with self._render_lock:
            return self.runner.run(script, params.output)
