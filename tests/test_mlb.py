import io

import pytest

from onoscli.command import CommandContext
from onoscli.mlb import MlbParameters, format_ocn_rows, format_parameters, get_command


class FakeMlb:
    def __init__(self, params=None, ocn=None, success=True):
        self.params = params or MlbParameters()
        self.ocn = ocn or {}
        self.success = success
        self.sent = None

    def get_mlb_params(self):
        return self.params

    def set_mlb_params(self, params):
        self.sent = params
        return self.success

    def get_ocn(self):
        return self.ocn


def make_context(client):
    return CommandContext(clients={"mlb": lambda address: client}, out=io.StringIO())


def test_format_parameters_lines():
    text = format_parameters(MlbParameters(10, 3, 100, 100))
    pairs = [line.split("\t") for line in text.splitlines()]
    assert pairs == [
        ["interval [sec]", "10"],
        ["Delta Ocn per step", "3"],
        ["Overload threshold [%]", "100"],
        ["Target threshold [%]", "100"],
    ]


def test_format_ocn_rows_sorted_and_split():
    ocn = {
        "e2:2:p2:c2:o2": {"x:np:nc": 1},
        "e2:1:p1:c1:o1": {"x:nb:nb1": -3, "x:na:na1": 2},
    }
    rows = [row.split("\t") for row in format_ocn_rows(ocn).splitlines()]
    assert rows == [
        ["e2:1", "p1", "c1", "o1", "na", "na1", "2"],
        ["e2:1", "p1", "c1", "o1", "nb", "nb1", "-3"],
        ["e2:2", "p2", "c2", "o2", "np", "nc", "1"],
    ]


def test_format_ocn_rows_empty():
    assert format_ocn_rows({}) == ""


def test_format_ocn_rows_malformed_key():
    with pytest.raises(ValueError):
        format_ocn_rows({"only:two": {"x:a:b": 1}})
    with pytest.raises(ValueError):
        format_ocn_rows({"a:b:c:d:e": {"short": 1}})


def test_list_parameters_aligned():
    context = make_context(FakeMlb(MlbParameters(10, 3, 90, 80)))
    get_command().execute(["list", "parameters"], context)
    lines = context.out.getvalue().splitlines()
    assert lines[0].startswith("Name")
    assert [line.rsplit(" ", 1)[1] for line in lines] == ["Value", "10", "3", "90", "80"]
    starts = {len(line) - len(line.rsplit(" ", 1)[1]) for line in lines}
    assert len(starts) == 1


def test_list_parameters_no_headers():
    context = make_context(FakeMlb())
    get_command().execute(["list", "parameters", "--no-headers"], context)
    lines = context.out.getvalue().splitlines()
    assert len(lines) == 4
    assert lines[0].startswith("interval [sec]")


def test_list_ocns_command():
    ocn = {"e2:1:p1:c1:o1": {"x:np:nc": 4}}
    context = make_context(FakeMlb(ocn=ocn))
    get_command().execute(["list", "ocns"], context)
    lines = context.out.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("sCell node ID")
    assert lines[1].split() == ["e2:1", "p1", "c1", "o1", "np", "nc", "4"]


def test_set_parameters_only_changed_flags():
    client = FakeMlb(MlbParameters(5, 1, 70, 60))
    context = make_context(client)
    result = get_command().execute(["set", "parameters", "--interval", "20"], context)
    assert client.sent == MlbParameters(20, 1, 70, 60)
    assert result == client.sent


def test_set_parameters_all_flags():
    client = FakeMlb(MlbParameters(5, 1, 70, 60))
    context = make_context(client)
    get_command().execute(
        ["set", "parameters", "--delta-ocn", "2", "--overload-threshold=95",
         "--target-threshold", "85"],
        context,
    )
    assert client.sent == MlbParameters(5, 2, 95, 85)


def test_set_parameters_failure():
    context = make_context(FakeMlb(success=False))
    with pytest.raises(RuntimeError, match="failed to set MLB parameters"):
        get_command().execute(["set", "parameters"], context)


def test_command_tree():
    cmd = get_command()
    assert cmd.find("list ocns").short == "Get all Ocn for all cells"
    assert cmd.find("set parameters").short == "Set MLB parameters"
    assert [c.name for c in cmd.commands] == ["set", "list"]