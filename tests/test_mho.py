import io

import pytest

from onoscli.command import ArgsError, CommandContext
from onoscli.mho import Cell, Ue, format_cell, format_ue, get_command


class FakeMho:
    def __init__(self, ues=(), cells=()):
        self.ues = list(ues)
        self.cells = list(cells)

    def get_ues(self):
        return iter(self.ues)

    def get_cells(self):
        return iter(self.cells)


def make_context(client, addresses=None):
    def factory(address):
        if addresses is not None:
            addresses.append(address)
        return client

    return CommandContext(clients={"mho": factory}, out=io.StringIO())


def test_format_ue_shows_hex_id_and_trimmed_state():
    line = format_ue(Ue("255", "c1", "RRC_STATE_CONNECTED"))
    assert line.endswith("\n")
    assert line.split() == ["ff", "c1", "CONNECTED"]


def test_format_ue_non_numeric_id_is_zero():
    assert format_ue(Ue("abc", "c1", "IDLE")).split()[0] == "0"


def test_format_ue_short_state_kept():
    assert format_ue(Ue("1", "c1", "IDLE")).split()[2] == "IDLE"


def test_format_ue_state_of_prefix_length_becomes_empty():
    assert format_ue(Ue("1", "cgi", "0123456789")).split() == ["1", "cgi"]


def test_format_ue_columns_are_fixed_width():
    line = format_ue(Ue("16", "cgi-x", "RRC_STATE_IDLE"))
    assert line[:8].rstrip() == "10"
    assert line[9:25].rstrip() == "cgi-x"
    assert line[26:].rstrip() == "IDLE"


def test_format_cell_columns():
    line = format_cell(Cell("cgi1", 3, 4, 5))
    assert line.split() == ["cgi1", "3", "4", "5"]
    assert line[:16].rstrip() == "cgi1"
    assert line[17:33].rstrip() == "3"
    assert line[34:50].rstrip() == "4"


def test_get_ues_command_writes_header_and_rows():
    ues = [Ue("1", "a", "RRC_STATE_IDLE"), Ue("2", "b", "RRC_STATE_CONNECTED")]
    context = make_context(FakeMho(ues=ues))
    result = get_command().execute(["get", "ues"], context)
    lines = context.out.getvalue().splitlines(keepends=True)
    assert lines[0].split() == ["UeID", "CellGlobalID", "RrcState"]
    assert lines[1:] == [format_ue(ue) for ue in ues]
    assert result == ues


def test_get_ues_no_headers():
    ues = [Ue("7", "a", "IDLE")]
    context = make_context(FakeMho(ues=ues))
    get_command().execute(["get", "ues", "--no-headers"], context)
    assert context.out.getvalue() == format_ue(ues[0])


def test_get_cells_command_writes_header_and_rows():
    cells = [Cell("x", 1, 2, 3)]
    context = make_context(FakeMho(cells=cells))
    get_command().execute(["get", "cells"], context)
    lines = context.out.getvalue().splitlines(keepends=True)
    assert lines[0].split() == ["CGI", "Num", "UEs", "Handovers-in", "Handovers-out"]
    assert lines[1] == format_cell(cells[0])
    assert len(lines) == 2


def test_default_address_is_used():
    addresses = []
    context = make_context(FakeMho(), addresses)
    get_command().execute(["get", "cells"], context)
    assert addresses == ["onos-mho:5150"]


def test_missing_client_raises():
    context = CommandContext(out=io.StringIO())
    with pytest.raises(ConnectionError):
        get_command().execute(["get", "ues"], context)


def test_unknown_sub_command_raises():
    context = make_context(FakeMho())
    with pytest.raises(ArgsError):
        get_command().execute(["get", "nothing"], context)


def test_command_tree():
    cmd = get_command()
    assert cmd.find("get ues").short == "Get ues"
    assert cmd.find("get cells").short == "Get cells"
    assert cmd.find("get").short == "Get UE, Cell info"