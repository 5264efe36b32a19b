"""Commands of the KPI monitoring application."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from .command import Command, CommandContext, add_config_flags, exact_args

CONFIG_NAME = "kpimon"
DEFAULT_ADDRESS = "onos-kpimon:5150"
KPIMON_SERVICE = "kpimon"
GNMI_SERVICE = "gnmi"

NODE_ID_HEADER = "Node ID"
CELL_OBJ_ID_HEADER = "Cell Object ID"
CELL_GLOBAL_ID_HEADER = "Cell Global ID"
TIME_HEADER = "Time"
MISSING_VALUE = "N/A"

ONOS_CONFIG_ADDRESS = "onos-config:5150"
MODEL_NAME = "RIC"
MODEL_VERSION = "1.0.0"
REPORT_INTERVAL_PATH = "/report_period/interval"
REPORT_INTERVAL_TARGET = "onos-kpimon"
MODEL_VERSION_EXTENSION = 101
MODEL_NAME_EXTENSION = 102

_UINT64_MAX = 2**64 - 1
_DIGITS = re.compile(r"[0-9]+")

MeasurementValue = Union[int, float, None]
Results = dict[str, dict[int, dict[str, str]]]


@dataclass
class MeasurementRecord:
    """One measured value of a cell at a point in time (nanoseconds since the epoch)."""

    timestamp: int
    measurement_name: str
    measurement_value: MeasurementValue = None


def _float_text(value: float) -> str:
    """Shortest text for a float, switching to exponent form as %g does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    exp10 = len(digits) + exponent - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
    point = exp10 + 1
    if point <= 0:
        body = "0." + "0" * -point + digits
    elif point >= len(digits):
        body = digits + "0" * (point - len(digits))
    else:
        body = f"{digits[:point]}.{digits[point:]}"
    return prefix + body


def _value_text(value: MeasurementValue) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _float_text(value)
    return str(value)


def collect_measurements(
    measurements: Mapping[str, Iterable[MeasurementRecord]],
) -> tuple[Results, list[str]]:
    """Group records by cell key and timestamp; also return the sorted measurement names."""
    results: Results = {}
    names: set[str] = set()
    for key, records in measurements.items():
        per_time = results.setdefault(key, {})
        for record in records:
            names.add(record.measurement_name)
            per_time.setdefault(record.timestamp, {})[record.measurement_name] = _value_text(
                record.measurement_value
            )
    return results, sorted(names)


def format_timestamp(nanos: int) -> str:
    """Local wall-clock time of a nanosecond timestamp as HH:MM:SS.<millis>."""
    seconds, rem = divmod(nanos, 10**9)
    moment = datetime.fromtimestamp(seconds)
    return f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}.{rem // 10**6}"


def _type_column(text: str, name: str) -> str:
    return f" {text:>{len(name) + 3}}"


def _header(types: list[str]) -> str:
    head = (
        f"{NODE_ID_HEADER:<10} {CELL_OBJ_ID_HEADER:>20} "
        f"{CELL_GLOBAL_ID_HEADER:>20} {TIME_HEADER:>15}"
    )
    return head + "".join(_type_column(name, name) for name in types) + "\n"


def _split_key(key: str) -> list[str]:
    ids = key.split(":")
    if len(ids) < 4:
        raise ValueError(f"malformed measurement key {key!r}: expected 4 ':'-separated fields")
    return ids


def format_metrics(results: Mapping[str, Mapping[int, Mapping[str, str]]], types: list[str],
                   headers: bool = True) -> str:
    """The metrics table: one row per cell key and timestamp, keys and times ascending."""
    lines = [_header(types)] if headers else []
    for key in sorted(results):
        e2_id, node_id, cell_id, cell_global_id = _split_key(key)[:4]
        metrics = results[key]
        for timestamp in sorted(metrics):
            row = (
                f"{e2_id + ':' + node_id:<10} {cell_id:>20} {cell_global_id:>20} "
                f"{format_timestamp(timestamp):>15}"
            )
            values = metrics[timestamp]
            row += "".join(_type_column(values.get(name, MISSING_VALUE), name) for name in types)
            lines.append(row + "\n")
    return "".join(lines)


def _no_headers(context: CommandContext) -> bool:
    return bool(context.flags.get("no-headers", False))


def _run_list_metrics(context: CommandContext, args: list) -> Any:
    client = context.client(KPIMON_SERVICE)
    results, types = collect_measurements(client.list_measurements())
    context.write(format_metrics(results, types, not _no_headers(context)))
    return results


def _run_watch_metrics(context: CommandContext, args: list) -> None:
    client = context.client(KPIMON_SERVICE)
    header_printed = False
    for measurements in client.watch_measurements():
        results, types = collect_measurements(measurements)
        if not header_printed and not _no_headers(context):
            context.write(_header(types))
        header_printed = True
        context.write(format_metrics(results, types, False))


def _parse_interval(text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise ValueError(f'parsing "{text}": invalid syntax')
    value = int(text)
    if value > _UINT64_MAX:
        raise ValueError(f'parsing "{text}": value out of range')
    return value


def _gnmi_client(context: CommandContext) -> Any:
    factory: Optional[Any] = context.clients.get(GNMI_SERVICE)
    if factory is None:
        raise ConnectionError(f"no client available for service {GNMI_SERVICE}")
    return factory(ONOS_CONFIG_ADDRESS)


def _run_set_report_interval(context: CommandContext, args: list) -> Any:
    client = _gnmi_client(context)
    interval = _parse_interval(args[0])
    try:
        client.set(
            path=REPORT_INTERVAL_PATH,
            target=REPORT_INTERVAL_TARGET,
            value=interval,
            extensions={
                MODEL_VERSION_EXTENSION: MODEL_VERSION.encode(),
                MODEL_NAME_EXTENSION: MODEL_NAME.encode(),
            },
        )
    except Exception as exc:
        context.write(f"{exc}\n")
        return None
    context.write(f"Report period interval is set to {interval} ms successfully\n")
    return interval


def _list_metrics_command() -> Command:
    cmd = Command("metrics", "Get metrics", run=_run_list_metrics)
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _watch_metrics_command() -> Command:
    cmd = Command("metrics", "Watch metrics", run=_run_watch_metrics)
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _set_report_interval_command() -> Command:
    cmd = Command(
        "report-interval <interval>",
        "Set report period interval",
        run=_run_set_report_interval,
        args=exact_args(1),
    )
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_list_command() -> Command:
    cmd = Command("list {metrics} [args]", "List KPIMON resources")
    cmd.add_command(_list_metrics_command())
    return cmd


def _get_watch_command() -> Command:
    cmd = Command("watch {metrics} [args]", "Watch KPIMON resources")
    cmd.add_command(_watch_metrics_command())
    return cmd


def _get_set_command() -> Command:
    cmd = Command("set {report_interval} [args]", "Set KPIMON parameters")
    cmd.add_command(_set_report_interval_command())
    return cmd


def get_command() -> Command:
    """Root command of the KPI monitoring application."""
    cmd = Command("kpimon {get/set} [args]", "ONOS KPIMON subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(_get_list_command(), _get_watch_command(), _get_set_command())
    return cmd