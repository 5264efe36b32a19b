"""Commands of the mobile handover application."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .command import Command, CommandContext, add_config_flags

CONFIG_NAME = "mho"
DEFAULT_ADDRESS = "onos-mho:5150"
MHO_SERVICE = "mho"

UE_HEADER = f"{'UeID':<8} {'CellGlobalID':<16} {'RrcState':<8}\n"
CELL_HEADER = f"{'CGI':<16} {'Num UEs':<16} {'Handovers-in':<16} {'Handovers-out':<16}\n"

# Length of the common prefix cut from RRC state names.
_RRC_STATE_PREFIX_LEN = 10

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass
class Ue:
    """A user equipment and the cell serving it."""

    ue_id: str
    cgi: str = ""
    rrc_state: str = ""


@dataclass
class Cell:
    """A cell with its load and handover counters."""

    cgi: str
    num_ues: int = 0
    cumulative_handovers_in: int = 0
    cumulative_handovers_out: int = 0


def _atoi(text: str) -> int:
    """Decimal value of text; 0 when it is not a number, clamped to 64 bits."""
    if not _DECIMAL.fullmatch(text):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(text)))


def format_ue(ue: Ue) -> str:
    """One line describing a UE, its id shown in hexadecimal."""
    rrc_state = ue.rrc_state
    if len(rrc_state) >= _RRC_STATE_PREFIX_LEN:
        rrc_state = rrc_state[_RRC_STATE_PREFIX_LEN:]
    return f"{_atoi(ue.ue_id):<8x} {ue.cgi:<16} {rrc_state:<8}\n"


def format_cell(cell: Cell) -> str:
    """One line describing a cell."""
    return (
        f"{cell.cgi:<16} {cell.num_ues:<16} {cell.cumulative_handovers_in:<16} "
        f"{cell.cumulative_handovers_out:<16}\n"
    )


def _no_headers(context: CommandContext) -> bool:
    return bool(context.flags.get("no-headers", False))


def _run_get_ues(context: CommandContext, args: list) -> Any:
    client = context.client(MHO_SERVICE)
    ues = list(client.get_ues())
    if not _no_headers(context):
        context.write(UE_HEADER)
    for ue in ues:
        context.write(format_ue(ue))
    return ues


def _run_get_cells(context: CommandContext, args: list) -> Any:
    client = context.client(MHO_SERVICE)
    cells = list(client.get_cells())
    if not _no_headers(context):
        context.write(CELL_HEADER)
    for cell in cells:
        context.write(format_cell(cell))
    return cells


def _get_ues_command() -> Command:
    cmd = Command("ues", "Get ues", run=_run_get_ues)
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_cells_command() -> Command:
    cmd = Command("cells", "Get cells", run=_run_get_cells)
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_get_command() -> Command:
    cmd = Command("get {ues|cells} [args]", "Get UE, Cell info")
    cmd.add_command(_get_ues_command(), _get_cells_command())
    return cmd


def get_command() -> Command:
    """Root command of the mobile handover application."""
    cmd = Command("mho {get/set} [args]", "ONOS MHO subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(_get_get_command())
    return cmd