"""Commands of the mobility load balancing application."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from .command import Command, CommandContext, add_config_flags
from .output import TabWriter

CONFIG_NAME = "mlb"
DEFAULT_ADDRESS = "onos-mlb:5150"
MLB_SERVICE = "mlb"

PARAMETERS_HEADER = "Name\tValue\n"
OCN_HEADER = (
    "sCell node ID\tsCell PLMN ID\tsCell cell ID\tsCell object ID\t"
    "nCell PLMN ID\tnCell cell ID\tOcn [dB]\n"
)

_FLAG_FIELDS = {
    "interval": "interval",
    "delta-ocn": "delta_ocn",
    "overload-threshold": "overload_threshold",
    "target-threshold": "target_threshold",
}


@dataclass
class MlbParameters:
    """Tuning parameters of the load balancer."""

    interval: int = 10
    delta_ocn: int = 3
    overload_threshold: int = 100
    target_threshold: int = 100


def format_parameters(params: MlbParameters) -> str:
    """Tab-separated name/value lines for the parameters."""
    return (
        f"interval [sec]\t{params.interval}\n"
        f"Delta Ocn per step\t{params.delta_ocn}\n"
        f"Overload threshold [%]\t{params.overload_threshold}\n"
        f"Target threshold [%]\t{params.target_threshold}\n"
    )


def _split(key: str, parts: int) -> list[str]:
    ids = key.split(":")
    if len(ids) < parts:
        raise ValueError(f"malformed cell key {key!r}: expected {parts} ':'-separated fields")
    return ids


def format_ocn_rows(ocn_map: Mapping[str, Mapping[str, int]]) -> str:
    """Tab-separated rows of cell offsets (in dB), sorted by serving and neighbour key."""
    rows = []
    for serving in sorted(ocn_map):
        s_ids = _split(serving, 5)
        s_node = f"{s_ids[0]}:{s_ids[1]}"
        records = ocn_map[serving]
        for neighbour in sorted(records):
            n_ids = _split(neighbour, 3)
            rows.append(
                f"{s_node}\t{s_ids[2]}\t{s_ids[3]}\t{s_ids[4]}\t"
                f"{n_ids[1]}\t{n_ids[2]}\t{int(records[neighbour])}\n"
            )
    return "".join(rows)


def _no_headers(context: CommandContext) -> bool:
    return bool(context.flags.get("no-headers", False))


def _run_list_parameters(context: CommandContext, args: list) -> Any:
    client = context.client(MLB_SERVICE)
    params = client.get_mlb_params()
    with TabWriter(context.out) as writer:
        if not _no_headers(context):
            writer.write(PARAMETERS_HEADER)
        writer.write(format_parameters(params))
    return params


def _run_list_ocns(context: CommandContext, args: list) -> Any:
    client = context.client(MLB_SERVICE)
    ocn_map = client.get_ocn()
    rows = format_ocn_rows(ocn_map)
    with TabWriter(context.out) as writer:
        if not _no_headers(context):
            writer.write(OCN_HEADER)
        writer.write(rows)
    return ocn_map


def _run_set_parameters(context: CommandContext, args: list) -> Any:
    client = context.client(MLB_SERVICE)
    current = client.get_mlb_params()
    changes = {
        field: int(context.flags[flag])
        for flag, field in _FLAG_FIELDS.items()
        if flag in context.changed
    }
    params = replace(current, **changes)
    if not client.set_mlb_params(params):
        raise RuntimeError("failed to set MLB parameters")
    return params


def _list_parameters_command() -> Command:
    cmd = Command("parameters", "Get all MLB parameters", run=_run_list_parameters)
    cmd.add_flag("no-headers", False, "disable output headers")
    return cmd


def _list_ocns_command() -> Command:
    cmd = Command("ocns", "Get all Ocn for all cells", run=_run_list_ocns)
    cmd.add_flag("no-headers", False, "disable output headers")
    return cmd


def _set_parameters_command() -> Command:
    cmd = Command("parameters", "Set MLB parameters", run=_run_set_parameters)
    cmd.add_flag("interval", 10, "MLB interval")
    cmd.add_flag("delta-ocn", 3, "Delta Ocn per step")
    cmd.add_flag("overload-threshold", 100, "Overload threshold [%]")
    cmd.add_flag("target-threshold", 100, "Target threshold [%]")
    return cmd


def _get_list_command() -> Command:
    cmd = Command("list {parameters/ocns}", "List MLB resources")
    cmd.add_command(_list_parameters_command(), _list_ocns_command())
    return cmd


def _get_set_command() -> Command:
    cmd = Command("set {parameters}", "Set MLB resources")
    cmd.add_command(_set_parameters_command())
    return cmd


def get_command() -> Command:
    """Root command of the load balancing application."""
    cmd = Command("mlb {set/list} [args]", "ONOS MLB subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(_get_set_command(), _get_list_command())
    return cmd