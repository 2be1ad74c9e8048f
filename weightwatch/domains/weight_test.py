from datetime import date
from decimal import Decimal

import pytest

from weightwatch.config import Settings
from weightwatch.domains import weight as weight_domain
from weightwatch.domains.weight import WeightService, parse_date, parse_value
from weightwatch.errors import InvalidInputError, PlotToolMissingError
from weightwatch.models import AutoRange, ExplicitRange, Measurement


class RecordingRunner:
    def __init__(self, error=None):
        self.scripts = []
        self.error = error

    def run(self, script, output):
        self.scripts.append(script)
        if self.error:
            raise self.error
        output.write_bytes(b"\x89PNG")
        return output


@pytest.fixture
def settings(tmp_path):
    return Settings(data_file=tmp_path / "weights.dat", output_image=tmp_path / "chart.png")


def test_parse_value():
    assert parse_value("185.4") == Decimal("185.4")
    assert parse_value(" 72 ") == Decimal("72")
    for bad in (None, "", "heavy", "nan", "inf", "1e100000", "0E-1000"):
        with pytest.raises(InvalidInputError):
            parse_value(bad)


def test_parse_date():
    today = date(2024, 6, 15)
    assert parse_date("2024-06-01") == date(2024, 6, 1)
    assert parse_date("June 2 2024") == date(2024, 6, 2)
    assert parse_date("", today=today) == today
    assert parse_date(None, today=today) == today
    with pytest.raises(InvalidInputError):
        parse_date("not a date")


def test_add_appends(settings):
    svc = WeightService(settings, runner=RecordingRunner())
    rec = svc.add("185.4", "2024-06-01")
    assert rec == Measurement(date=date(2024, 6, 1), value=Decimal("185.4"))
    assert settings.data_file.read_text() == "2024-06-01 185.4\n"


def test_add_defaults_to_today(settings):
    svc = WeightService(settings, runner=RecordingRunner())
    assert svc.add("80").date == date.today()


def test_add_rejects_bad_input_without_writing(settings):
    svc = WeightService(settings, runner=RecordingRunner())
    with pytest.raises(InvalidInputError):
        svc.add("abc", "2024-06-01")
    assert not settings.data_file.exists()


def test_recent_is_newest_first_and_limited(settings):
    svc = WeightService(settings.model_copy(update={"table_rows": 2}), runner=RecordingRunner())
    for i, v in enumerate(["80.1", "80.2", "80.3"], 1):
        svc.add(v, f"2024-06-0{i}")
    assert [str(m.value) for m in svc.recent()] == ["80.3", "80.2"]
    assert len(svc.recent(10)) == 3


def test_render_params_auto_when_empty(settings):
    svc = WeightService(settings, runner=RecordingRunner())
    p = svc.render_params(today=date(2024, 6, 30))
    assert isinstance(p.weight_range, AutoRange)
    assert p.date_start == date(2024, 6, 2)
    assert p.date_end == date(2024, 7, 1)
    assert p.data_file == settings.data_file
    assert p.output == settings.output_image


def test_render_params_pads_bounds(settings):
    svc = WeightService(settings, runner=RecordingRunner())
    svc.add("185.4", "2024-06-01")
    svc.add("184.9", "2024-06-02")
    wr = svc.render_params(today=date(2024, 6, 2)).weight_range
    assert wr == ExplicitRange(start=Decimal("179.9"), end=Decimal("190.4"))


def test_render_chart_scenario(settings):
    runner = RecordingRunner()
    svc = WeightService(settings.model_copy(update={"window_days": 30}), runner=runner)
    svc.add("185.4", "2024-06-01")
    svc.add("184.9", "2024-06-02")

    assert svc.render_chart(today=date(2024, 7, 1)) == settings.output_image
    script = runner.scripts[0]
    assert f'plot "{settings.data_file}" u 1:2 w linespoints pointtype 7 lc "black"' in script
    assert 'set xrange ["2024-06-01":"2024-07-02"]' in script
    assert "set yrange [179.9:190.4]" in script
    assert "{{" not in script


def test_render_chart_creates_empty_store(settings):
    runner = RecordingRunner()
    WeightService(settings, runner=runner).render_chart()
    assert settings.data_file.exists()
    assert "yrange" not in runner.scripts[0]


def test_render_chart_propagates_missing_tool(settings):
    svc = WeightService(settings, runner=RecordingRunner(PlotToolMissingError("gnuplot")))
    with pytest.raises(PlotToolMissingError):
        svc.render_chart()


def test_daily_and_moving_averages():
    rows = [
        Measurement(date=date(2024, 6, 2), value=Decimal("81")),
        Measurement(date=date(2024, 6, 1), value=Decimal("80")),
        Measurement(date=date(2024, 6, 1), value=Decimal("82")),
        Measurement(date=date(2024, 6, 3), value=Decimal("84")),
    ]
    daily = weight_domain.daily_averages(rows)
    assert list(daily) == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)]
    assert daily[date(2024, 6, 1)] == Decimal("81")
    ma = weight_domain.daily_moving_average(rows, 2)
    assert ma[date(2024, 6, 1)] == Decimal("81")
    assert ma[date(2024, 6, 3)] == Decimal("82.5")
    with pytest.raises(InvalidInputError):
        weight_domain.daily_moving_average(rows, 0)
