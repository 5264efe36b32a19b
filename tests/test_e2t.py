import io

import pytest

from onoscli import e2t
from onoscli.command import ArgsError, CommandContext


def make_sub(sub_id="sub-1", node="e2:1", revision=3):
    return e2t.Subscription(
        id=sub_id,
        revision=revision,
        service_model_name="oran-e2sm-kpm",
        service_model_version="v2",
        e2_node_id=node,
        encoding="ASN1_PER",
        phase="SUBSCRIPTION_OPEN",
        state="SUBSCRIPTION_COMPLETE",
        actions=[1, 2],
        event_trigger="trigger",
    )


class FakeSubscriptionClient:
    def __init__(self, subs=(), events=(), error=None):
        self.subs = list(subs)
        self.events = list(events)
        self.error = error
        self.no_replay = None
        self.requested = []
        self.address = None

    def list_subscriptions(self):
        return self.subs

    def get_subscription(self, subscription_id):
        self.requested.append(subscription_id)
        return next(s for s in self.subs if s.id == subscription_id)

    def watch_subscriptions(self, no_replay):
        self.no_replay = no_replay

        def gen():
            yield from self.events
            if self.error is not None:
                raise self.error

        return gen()


def make_context(fake):
    def factory(address):
        fake.address = address
        return fake

    buf = io.StringIO()
    return CommandContext(clients={e2t.SUBSCRIPTION_SERVICE: factory}, out=buf), buf


def test_format_subscription_fields():
    sub = make_sub()
    row = e2t.format_subscription(sub)
    assert row.endswith("\n")
    fields = row[:-1].split("\t")
    assert len(fields) == 7
    assert fields[0] == sub.id
    assert int(fields[1]) == sub.revision
    assert fields[2] == "oran-e2sm-kpm:v2"
    assert fields[3] == sub.e2_node_id
    assert fields[4:] == [sub.encoding, sub.phase, sub.state]


def test_format_subscription_empty_values_shown_as_none():
    sub = e2t.Subscription(id="s", service_model_name="m", service_model_version="1")
    fields = e2t.format_subscription(sub)[:-1].split("\t")
    assert fields[3:] == [e2t.NONE_TEXT] * 4


def test_format_subscription_details():
    sub = make_sub()
    block = e2t.format_subscription_details(sub)
    pairs = dict(line.split("\t", 1) for line in block.splitlines())
    assert pairs["Subscription ID:"] == sub.id
    assert int(pairs["Revision:"]) == sub.revision
    assert pairs["Service Model:"] == sub.service_model_name
    assert pairs["Service Model Version:"] == sub.service_model_version
    assert pairs["E2 Node ID:"] == sub.e2_node_id
    assert pairs["Status:"] == sub.state
    assert pairs["Actions:"] == "[1 2]"
    assert pairs["Trigger:"] == "trigger"


def test_get_subscriptions_lists_rows_with_header():
    subs = [make_sub("sub-1"), make_sub("sub-2")]
    fake = FakeSubscriptionClient(subs)
    context, buf = make_context(fake)
    result = e2t.get_command().execute(["get", "subscriptions"], context)
    assert result == subs
    lines = buf.getvalue().splitlines()
    assert lines[0].startswith("Subscription ID")
    assert [line.split()[0] for line in lines[1:]] == ["sub-1", "sub-2"]
    assert fake.address == e2t.DEFAULT_ADDRESS


def test_get_subscriptions_no_headers_and_alias():
    fake = FakeSubscriptionClient([make_sub("sub-9")])
    context, buf = make_context(fake)
    e2t.get_command().execute(["list", "subscriptions", "--no-headers"], context)
    lines = buf.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].split()[0] == "sub-9"


def test_get_subscription_by_id():
    fake = FakeSubscriptionClient([make_sub("sub-1"), make_sub("sub-2")])
    context, buf = make_context(fake)
    result = e2t.get_command().execute(["get", "subscription", "sub-2"], context)
    assert result.id == "sub-2"
    assert fake.requested == ["sub-2"]
    assert buf.getvalue().splitlines()[0].split() == ["Subscription", "ID:", "sub-2"]


def test_get_subscription_requires_one_arg():
    fake = FakeSubscriptionClient([make_sub()])
    context, _ = make_context(fake)
    with pytest.raises(ArgsError):
        e2t.get_command().execute(["get", "subscription"], context)


def test_watch_subscriptions_strips_event_prefix():
    events = [
        e2t.SubscriptionEvent("SUBSCRIPTION_CREATED", make_sub("sub-1")),
        e2t.SubscriptionEvent("SUBSCRIPTION_UPDATED", make_sub("sub-2")),
    ]
    fake = FakeSubscriptionClient(events=events)
    context, buf = make_context(fake)
    e2t.get_command().execute(["watch", "subscriptions", "--no-replay"], context)
    assert fake.no_replay is True
    lines = buf.getvalue().splitlines()
    assert lines[0].startswith("Event Type")
    assert [line.split()[:2] for line in lines[1:]] == [
        ["CREATED", "sub-1"],
        ["UPDATED", "sub-2"],
    ]


def test_watch_subscriptions_reports_stream_error():
    fake = FakeSubscriptionClient(
        events=[e2t.SubscriptionEvent("SUBSCRIPTION_CREATED", make_sub())],
        error=RuntimeError("boom"),
    )
    context, buf = make_context(fake)
    with pytest.raises(RuntimeError):
        e2t.get_command().execute(["watch", "subscriptions", "--no-headers"], context)
    assert fake.no_replay is False
    assert "Error receiving notification : boom" in buf.getvalue()


def test_root_sub_commands():
    shorts = {cmd.short for cmd in e2t.get_command().commands}
    assert shorts == {"Manage the CLI configuration", "Get command", "Watch command"}