# onoscli

Building blocks for a command line client of ONOS micro-services: a small
command tree with flags and usage text, the subsystem commands built on it,
text formatters for what those commands print, and option and query parsing
for a gNMI client.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module                   | Contents |
|--------------------------|----------|
| `onoscli.command`        | `Command`, `Flag`, `CommandContext`, `ArgsError`; argument checks `exact_args`, `maximum_n_args`, `no_args`; `add_config_flags` and `get_config_command` |
| `onoscli.output`         | `ExitCode`, `CliExit`, `output`, `exit_with_output`, `exit_with_success`, `exit_with_error`, `exit_with_error_message`, and `TabWriter` for aligned columns |
| `onoscli.gnmi_query`     | `parse_query`, `query_type`, `QueryType`, `GnmiOptions`, `parse_options`, `QueryError` |
| `onoscli.config_render`  | records of device changes, network changes, opstate and snapshots, `wrap_path` and the `render_*` functions |
| `onoscli.modelregistry`  | `modelregistry` command (`list`, `get`), `ConfigModel`, `ConfigModule`, `render_model` |
| `onoscli.e2t`            | `e2t` command (`get subscriptions`, `get subscription`, `watch subscriptions`), `Subscription`, formatters |
| `onoscli.pci`            | `pci` command (`get conflicts`, `get resolved`, `get cell`, `get cells`), `PciCell`, formatters |
| `onoscli.mho`            | `mho` command (`get ues`, `get cells`), `Ue`, `Cell`, formatters |
| `onoscli.mlb`            | `mlb` command (`list parameters`, `list ocns`, `set parameters`), `MlbParameters`, formatters |
| `onoscli.kpimon`         | `kpimon` command (`list metrics`, `watch metrics`, `set report-interval`), `collect_measurements`, `format_metrics` |

## Running a subsystem command

Each subsystem module has a `get_command()` that returns its command tree.
`Command.execute(argv, context)` picks the sub-command, checks its
arguments and flags, and runs it. The service clients come from the
`CommandContext`: `clients` maps a service name to a factory that is called
with the value of the `--service-address` flag (each subsystem has its own
default, for example `onos-pci:5150`).

```python
import io

from onoscli.command import CommandContext
from onoscli.pci import PciCell, get_command


class PciClient:
    def __init__(self, address):
        self.address = address

    def get_cells(self):
        return [PciCell(id=0x1A, node_id="e2:1", dlearfcn=100, cell_type="FEMTO", pci=12)]


out = io.StringIO()
get_command().execute(["get", "cells"], CommandContext(clients={"pci": PciClient}, out=out))
print(out.getvalue())
```

The service names and the client methods each module calls:

| Module          | Service name          | Methods |
|-----------------|-----------------------|---------|
| `modelregistry` | `model-registry`      | `list_models(metadata=...)`, `get_model(name=..., version=..., metadata=...)` |
| `e2t`           | `subscription-admin`  | `list_subscriptions()`, `get_subscription(subscription_id=...)`, `watch_subscriptions(no_replay=...)` |
| `pci`           | `pci`                 | `get_conflicts(cell_id=...)`, `get_resolved_conflicts()`, `get_cell(cell_id=...)`, `get_cells()` |
| `mho`           | `mho`                 | `get_ues()`, `get_cells()` |
| `mlb`           | `mlb`                 | `get_mlb_params()`, `set_mlb_params(params)`, `get_ocn()` |
| `kpimon`        | `kpimon`, `gnmi`      | `list_measurements()`, `watch_measurements()`; gNMI `set(path=..., target=..., value=..., extensions=...)` |

A missing factory raises `ConnectionError`. `--help` (or a command without
a sub-command) writes the usage text; a bad argument count or an unknown
flag raises `ArgsError`. Most listing commands take `--no-headers`.

## gNMI queries and options

`parse_query` splits a query path on a single-character delimiter, keeping
bracketed key/value selectors together:

```python
from onoscli.gnmi_query import parse_query

parse_query("/foo[key=a/b]/bar/", "/")
# ['foo[key=a/b]', 'bar']
```

A missing or unmatched bracket, a nested `[`, or a delimiter that is not one
character raises `QueryError`.

`parse_options(argv)` reads gNMI client flags (`-a/--address`, `-q/--query`,
`-qt/--query_type`, `-d/--delimiter`, `-en/--encodingType` and others) into a
`GnmiOptions`; it raises `QueryError` when no address is given or when only
one of `--client_crt` and `--client_key` is. `GnmiOptions.queries()` checks
the query type and parses every query, and `GnmiOptions.request_encoding()`
returns `JSON` or `PROTO`.

## Config change rendering

`onoscli.config_render` holds `DeviceChange`, `NetworkChange`, `PathValue`,
`Snapshot` and related records, and `render_device_change`,
`render_network_change`, `render_opstate` and `render_snapshot` turn them
into the fixed-width text blocks of a change listing. `wrap_path` cuts a
long path into lines of a given width.

## What this package does not do

- It installs no `onos` executable and has no single root command that
  gathers the subsystems; each subsystem's `get_command()` is run on its own.
- It has no `config` command tree (network changes, device changes, opstate,
  snapshots, rollback, compaction); only the rendering of those records is
  here.
- It does not generate Markdown documentation for the commands.
- It opens no network connections: no gRPC or gNMI transport is included.
  Every client is supplied by the caller through `CommandContext`, and the
  gNMI module parses options and queries but sends no requests.