"""Commands of the PCI conflict resolution application."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .command import Command, CommandContext, add_config_flags, exact_args, maximum_n_args, no_args
from .output import TabWriter

CONFIG_NAME = "pci"
DEFAULT_ADDRESS = "onos-pci:5150"
PCI_SERVICE = "pci"

TABLE_HEADER = "ID\tNode ID\tDlearfcn\tCell Type\tPCI\tPCI Pool\n"
RESOLVED_HEADER = "ID\tTotal Resolved Conflicts\tMost Recent Resolution\n"

_HEX = re.compile(r"[0-9a-fA-F]+")
_UINT64_MAX = 2**64 - 1


@dataclass
class PciRange:
    """An inclusive range of PCI values."""

    min: int
    max: int


@dataclass
class PciCell:
    """A cell with its physical cell identifier and neighbours."""

    id: int
    node_id: str = ""
    dlearfcn: int = 0
    cell_type: str = ""
    pci: int = 0
    pci_pool: list[PciRange] = field(default_factory=list)
    neighbor_ids: list[int] = field(default_factory=list)


@dataclass
class CellResolution:
    """How often a cell's PCI conflicts were resolved, and the latest change."""

    id: int
    resolved_conflicts: int = 0
    original_pci: int = 0
    resolved_pci: int = 0


def _pool_text(pool: list[PciRange]) -> str:
    return "[" + ",".join(f"{r.min}:{r.max}" for r in pool) + "]"


def format_cell_row(cell: PciCell) -> str:
    """One tab-separated table row describing a cell."""
    return (
        f"{cell.id:x}\t{cell.node_id}\t{cell.dlearfcn}\t{cell.cell_type}\t{cell.pci}\t"
        f"{_pool_text(cell.pci_pool)}\n"
    )


def format_resolved_row(cell: CellResolution) -> str:
    """One tab-separated table row describing a cell's resolutions."""
    return f"{cell.id:x}\t{cell.resolved_conflicts}\t{cell.original_pci}=>{cell.resolved_pci}\n"


def format_single_cell(cell: PciCell) -> str:
    """A multi-line description of one cell."""
    neighbors = ",".join(f"{n:x}" for n in cell.neighbor_ids)
    return (
        f"ID: {cell.id:x}\nNode ID: {cell.node_id}\nDlearfcn: {cell.dlearfcn}\n"
        f"Cell Type: {cell.cell_type}\nPCI: {cell.pci}\n"
        f"Neighbors: [{neighbors}]\n"
        f"PCI Pool: {_pool_text(cell.pci_pool)}\n"
    )


def _parse_cell_id(text: str) -> int:
    if not _HEX.fullmatch(text):
        raise ValueError(f"invalid cell id {text!r}: not a hexadecimal number")
    value = int(text, 16)
    if value > _UINT64_MAX:
        raise ValueError(f"invalid cell id {text!r}: value out of range")
    return value


def _no_headers(context: CommandContext) -> bool:
    return bool(context.flags.get("no-headers", False))


def _write_cell_table(context: CommandContext, cells: list[PciCell]) -> None:
    with TabWriter(context.out) as writer:
        if not _no_headers(context):
            writer.write(TABLE_HEADER)
        for cell in cells:
            writer.write(format_cell_row(cell))


def _run_get_conflicts(context: CommandContext, args: list) -> Any:
    cell_id = _parse_cell_id(args[0]) if args else 0
    client = context.client(PCI_SERVICE)
    cells = list(client.get_conflicts(cell_id=cell_id))
    _write_cell_table(context, cells)
    return cells


def _run_get_resolved(context: CommandContext, args: list) -> Any:
    client = context.client(PCI_SERVICE)
    cells = list(client.get_resolved_conflicts())
    with TabWriter(context.out) as writer:
        if not _no_headers(context):
            writer.write(RESOLVED_HEADER)
        for cell in cells:
            writer.write(format_resolved_row(cell))
    return cells


def _run_get_cell(context: CommandContext, args: list) -> Any:
    client = context.client(PCI_SERVICE)
    cell = client.get_cell(cell_id=_parse_cell_id(args[0]))
    with TabWriter(context.out) as writer:
        writer.write(format_single_cell(cell))
    return cell


def _run_get_cells(context: CommandContext, args: list) -> Any:
    client = context.client(PCI_SERVICE)
    cells = list(client.get_cells())
    _write_cell_table(context, cells)
    return cells


def _get_conflicts_command() -> Command:
    cmd = Command(
        "conflicts",
        "Get the conflicting cells for a specific cell or all cells if not specified",
        run=_run_get_conflicts,
        args=maximum_n_args(1),
        aliases=["conflict"],
    )
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_resolved_command() -> Command:
    cmd = Command(
        "resolved",
        "Get the number of resolutions and most recent resolution for all cells",
        run=_run_get_resolved,
        args=no_args(),
    )
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_cell_command() -> Command:
    return Command("cell <id>", "Get a single cell's info", run=_run_get_cell, args=exact_args(1))


def _get_cells_command() -> Command:
    cmd = Command("cells", "Get all cells", run=_run_get_cells, args=no_args())
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_get_command() -> Command:
    cmd = Command("get {conflicts/resolved/cell/cells}", "Get PCI resources")
    cmd.add_command(
        _get_conflicts_command(),
        _get_resolved_command(),
        _get_cell_command(),
        _get_cells_command(),
    )
    return cmd


def get_command() -> Command:
    """Root command of the PCI application."""
    cmd = Command("pci {get} [args]", "ONOS PCI subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(_get_get_command())
    return cmd