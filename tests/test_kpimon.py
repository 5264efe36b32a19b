import io
import re

import pytest

from onoscli.command import ArgsError, CommandContext
from onoscli.kpimon import (
    MeasurementRecord,
    collect_measurements,
    format_metrics,
    format_timestamp,
    get_command,
)

KEY_A = "e2:1:cell-a:cgi-a"
KEY_B = "e2:2:cell-b:cgi-b"


def _sample():
    return {
        KEY_B: [MeasurementRecord(2_000_000_000, "RRC.Conn.Avg", 7)],
        KEY_A: [
            MeasurementRecord(3_000_000_000, "RRC.Conn.Max", 4),
            MeasurementRecord(1_000_000_000, "RRC.Conn.Avg", 1.5),
            MeasurementRecord(1_000_000_000, "RRC.Conn.Max", None),
        ],
    }


class FakeKpimon:
    def __init__(self, measurements=None, stream=()):
        self.measurements = measurements or {}
        self.stream = list(stream)

    def list_measurements(self):
        return self.measurements

    def watch_measurements(self):
        return iter(self.stream)


class FakeGnmi:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def set(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error


def _context(**clients):
    addresses = []

    def factory(client):
        def make(address):
            addresses.append(address)
            return client
        return make

    ctx = CommandContext(clients={k: factory(v) for k, v in clients.items()}, out=io.StringIO())
    return ctx, addresses


def test_collect_groups_by_key_and_time():
    results, types = collect_measurements(_sample())
    assert types == ["RRC.Conn.Avg", "RRC.Conn.Max"]
    assert set(results) == {KEY_A, KEY_B}
    assert results[KEY_A][1_000_000_000] == {"RRC.Conn.Avg": "1.5", "RRC.Conn.Max": "<nil>"}
    assert results[KEY_A][3_000_000_000] == {"RRC.Conn.Max": "4"}
    assert results[KEY_B][2_000_000_000] == {"RRC.Conn.Avg": "7"}


@pytest.mark.parametrize(
    "value, text",
    [(2.0, "2"), (0.25, "0.25"), (1e6, "1e+06"), (-3, "-3")],
)
def test_value_text(value, text):
    results, _ = collect_measurements({KEY_A: [MeasurementRecord(0, "m", value)]})
    assert results[KEY_A][0]["m"] == text


def test_format_timestamp_millis_not_padded():
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}\.5", format_timestamp(1_600_000_000_005_000_000))
    assert format_timestamp(1_500_000_000_123_456_789).endswith(".123")


def test_format_metrics_rows_sorted_and_aligned():
    results, types = collect_measurements(_sample())
    lines = format_metrics(results, types, True).splitlines()
    assert lines[0].startswith("Node ID")
    assert all(name in lines[0] for name in types)
    rows = lines[1:]
    assert len(rows) == 3
    assert [r.split()[0] for r in rows] == ["e2:1", "e2:1", "e2:2"]
    assert all(len(row) == len(lines[0]) for row in rows)
    assert rows[1].split()[-2:] == ["N/A", "4"]
    assert rows[0].split()[-2:] == ["1.5", "<nil>"]


def test_format_metrics_without_header():
    results, types = collect_measurements(_sample())
    text = format_metrics(results, types, False)
    assert "Node ID" not in text
    assert text.count("\n") == 3


def test_malformed_key_raises():
    results, types = collect_measurements({"e2:1": [MeasurementRecord(0, "m", 1)]})
    with pytest.raises(ValueError):
        format_metrics(results, types, True)


def test_list_metrics_command():
    fake = FakeKpimon(_sample())
    ctx, addresses = _context(kpimon=fake)
    get_command().execute(["list", "metrics"], ctx)
    out = ctx.out.getvalue()
    assert addresses == ["onos-kpimon:5150"]
    assert out.count("\n") == 4
    assert out.startswith("Node ID")


def test_list_metrics_no_headers():
    ctx, _ = _context(kpimon=FakeKpimon(_sample()))
    get_command().execute(["list", "metrics", "--no-headers"], ctx)
    out = ctx.out.getvalue()
    assert "Node ID" not in out
    assert out.count("\n") == 3


def test_watch_metrics_prints_header_once():
    stream = [
        {KEY_A: [MeasurementRecord(1_000_000_000, "x", 1)]},
        {KEY_B: [MeasurementRecord(2_000_000_000, "y", 2)]},
    ]
    ctx, _ = _context(kpimon=FakeKpimon(stream=stream))
    get_command().execute(["watch", "metrics"], ctx)
    out = ctx.out.getvalue()
    assert out.count("Node ID") == 1
    assert out.count("\n") == 3


def test_set_report_interval_success():
    gnmi = FakeGnmi()
    ctx, addresses = _context(gnmi=gnmi)
    get_command().execute(["set", "report-interval", "250"], ctx)
    assert ctx.out.getvalue() == "Report period interval is set to 250 ms successfully\n"
    assert addresses == ["onos-config:5150"]
    call = gnmi.calls[0]
    assert call["path"] == "/report_period/interval"
    assert call["target"] == "onos-kpimon"
    assert call["value"] == 250
    assert call["extensions"] == {101: b"1.0.0", 102: b"RIC"}


def test_set_report_interval_failure_is_printed():
    ctx, _ = _context(gnmi=FakeGnmi(error=RuntimeError("denied")))
    result = get_command().execute(["set", "report-interval", "10"], ctx)
    assert result is None
    assert ctx.out.getvalue() == "denied\n"


@pytest.mark.parametrize("text", ["abc", "-1", "18446744073709551616"])
def test_set_report_interval_rejects_bad_numbers(text):
    ctx, _ = _context(gnmi=FakeGnmi())
    with pytest.raises(ValueError):
        get_command().execute(["set", "report-interval", text], ctx)


def test_set_report_interval_needs_one_arg():
    ctx, _ = _context(gnmi=FakeGnmi())
    with pytest.raises(ArgsError):
        get_command().execute(["set", "report-interval"], ctx)


def test_command_tree():
    cmd = get_command()
    assert cmd.find("list metrics").short == "Get metrics"
    assert cmd.find("watch metrics").short == "Watch metrics"
    assert cmd.find("set report-interval").short == "Set report period interval"