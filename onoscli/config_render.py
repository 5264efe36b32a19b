"""Records of configuration changes and their text rendering."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEVICE_CHANGE_HEADER = (
    "CHANGE                                                       "
    "INDEX   REVISION PHASE    STATE     REASON   MESSAGE\n"
)
NETWORK_CHANGE_HEADER = (
    "CHANGE                               INDEX   REVISION USERNAME             "
    "PHASE    STATE     REASON   MESSAGE\n"
)
SNAPSHOT_HEADER = "ID                      DEVICE          VERSION TYPE        INDEX SNAPSHOTID\n"


class ValueType(Enum):
    """Type of a configuration value."""

    EMPTY = 0
    STRING = 1
    INT = 2
    UINT = 3
    BOOL = 4
    DECIMAL = 5
    FLOAT = 6
    BYTES = 7
    LEAFLIST_STRING = 8
    LEAFLIST_INT = 9
    LEAFLIST_UINT = 10
    LEAFLIST_BOOL = 11
    LEAFLIST_DECIMAL = 12
    LEAFLIST_FLOAT = 13
    LEAFLIST_BYTES = 14

    def __str__(self) -> str:
        return self.name


def _scalar_to_string(kind: ValueType, value: Any) -> str:
    if kind is ValueType.BOOL:
        return "true" if value else "false"
    if kind is ValueType.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if kind is ValueType.FLOAT:
        return str(float(value))
    return str(value)


@dataclass
class TypedValue:
    """A value together with its type."""

    value: Any = None
    type: ValueType = ValueType.EMPTY

    def to_string(self) -> str:
        """Render the value as text."""
        if self.type is ValueType.EMPTY:
            return ""
        if self.type.name.startswith("LEAFLIST_"):
            base = ValueType[self.type.name[len("LEAFLIST_"):]]
            return ",".join(_scalar_to_string(base, item) for item in self.value)
        return _scalar_to_string(self.type, self.value)


def typed_string(value: str) -> TypedValue:
    """A string-typed value."""
    return TypedValue(value, ValueType.STRING)


@dataclass
class ChangeValue:
    path: str
    value: TypedValue
    removed: bool = False


@dataclass
class Change:
    device_id: str
    device_version: str
    values: list[ChangeValue] = field(default_factory=list)


@dataclass
class Status:
    phase: str = "CHANGE"
    state: str = "PENDING"
    reason: str = "NONE"
    message: str = ""


@dataclass
class NetworkChangeRef:
    id: str
    index: int = 0


@dataclass
class DeviceChange:
    id: str
    index: int
    change: Change
    network_change: NetworkChangeRef
    revision: int = 0
    status: Status = field(default_factory=Status)


@dataclass
class NetworkChange:
    id: str
    index: int
    changes: list[Change] = field(default_factory=list)
    revision: int = 0
    username: str = ""
    status: Status = field(default_factory=Status)


@dataclass
class PathValue:
    path: str
    value: TypedValue


@dataclass
class Snapshot:
    id: str
    device_id: str
    device_version: str
    device_type: str
    change_index: int
    snapshot_id: str
    values: list[PathValue] = field(default_factory=list)


def wrap_path(path: str, line_len: int, tabs: int) -> str:
    """Cut a path into lines of line_len characters, padding the last one."""
    full = len(path) // line_len
    pieces = [path[start:start + line_len] for start in range(0, full * line_len, line_len)]
    if len(path) % line_len:
        pieces.append(path[full * line_len:].ljust(line_len))
    return ("\n" + "\t" * tabs + "  ").join(pieces)


def _typed_cell(value: TypedValue, width: int) -> str:
    text = f"({value.type}) {value.to_string()}"
    return f"{text:<{width}}|"


def _change_value_line(cv: ChangeValue) -> str:
    path = f"|{wrap_path(cv.path, 50, 1):<50}|"
    removed = f"{str(cv.removed).lower():<7}|"
    return f"\t{path}{_typed_cell(cv.value, 40)}{removed}\n"


def _status_columns(status: Status) -> str:
    return f"{status.phase:<8} {status.state:<9} {status.reason:<8} {status.message}"


def render_device_change(change: DeviceChange) -> str:
    """Text block for one device change."""
    head = f"{change.id:<60} {change.index:<7} {change.revision:<8} {_status_columns(change.status)}\n"
    ref = change.network_change
    detail = (
        f"\t{ref.id:<52} {ref.index:<9} "
        f"Device: {change.change.device_id} ({change.change.device_version})\n"
    )
    values = "".join(_change_value_line(cv) for cv in change.change.values)
    return head + detail + values + "\n"


def render_network_change(change: NetworkChange, verbose: bool = False) -> str:
    """Text block for one network change, with values when verbose."""
    parts = [
        f"{change.id:<31} {change.index:<7} {change.revision:<8} {change.username:<20} "
        f"{_status_columns(change.status)}\n"
    ]
    for device in change.changes:
        parts.append(f"\tDevice: {device.device_id} ({device.device_version})\n")
        if verbose:
            parts.extend(_change_value_line(cv) for cv in device.values)
            parts.append("\n")
    parts.append("\n")
    return "".join(parts)


def _path_value_cells(path_value: PathValue, value_width: int) -> str:
    return f"{wrap_path(path_value.path, 80, 0):<80}|" + _typed_cell(path_value.value, value_width)


def render_opstate(path_value: PathValue) -> str:
    """One operational state entry, without a trailing newline."""
    return _path_value_cells(path_value, 20)


def render_snapshot(snapshot: Snapshot, verbose: bool = False) -> str:
    """Text block for one snapshot, with its values when verbose."""
    head = (
        f"{snapshot.id:<24} {snapshot.device_id:<16} {snapshot.device_version:<8} "
        f"{snapshot.device_type:<12} {snapshot.change_index:<6} {snapshot.snapshot_id}\n"
    )
    if not verbose:
        return head
    values = "".join(_path_value_cells(pv, 40) + "\n" for pv in snapshot.values)
    return head + values + "\n"