"""Commands of the E2 termination subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .command import (
    Command,
    CommandContext,
    add_config_flags,
    exact_args,
    get_config_command,
)
from .output import TabWriter

CONFIG_NAME = "e2t"
DEFAULT_ADDRESS = "onos-e2t:5150"
SUBSCRIPTION_SERVICE = "subscription-admin"

NONE_TEXT = "<None>"
SUBSCRIPTION_HEADERS = (
    "Subscription ID\tRevision\tService Model ID\tE2 NodeID\tEncoding\tPhase\tState"
)
EVENT_TYPE_PREFIX = "SUBSCRIPTION_"


@dataclass
class Subscription:
    """A southbound subscription as reported by the E2 termination."""

    id: str
    revision: int = 0
    service_model_name: str = ""
    service_model_version: str = ""
    e2_node_id: str = ""
    encoding: str = ""
    phase: str = ""
    state: str = ""
    actions: list[Any] = field(default_factory=list)
    event_trigger: Any = None


@dataclass
class SubscriptionEvent:
    """A change notification for one subscription."""

    type: str
    subscription: Subscription


def _or_none(text: str) -> str:
    return text if text else NONE_TEXT


def _value_text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_value_text(item) for item in value) + "]"
    return str(value)


def format_subscription(sub: Subscription) -> str:
    """One tab-separated table row describing a subscription."""
    return (
        f"{sub.id}\t{sub.revision}\t{sub.service_model_name}:{sub.service_model_version}\t"
        f"{_or_none(sub.e2_node_id)}\t{_or_none(sub.encoding)}\t"
        f"{_or_none(sub.phase)}\t{_or_none(sub.state)}\n"
    )


def format_subscription_details(sub: Subscription) -> str:
    """A tab-separated key/value block describing a subscription in full."""
    return (
        f"Subscription ID:\t{sub.id}\n"
        f"Revision:\t{sub.revision}\n"
        f"Service Model:\t{sub.service_model_name}\n"
        f"Service Model Version:\t{sub.service_model_version}\n"
        f"E2 Node ID:\t{_or_none(sub.e2_node_id)}\n"
        f"Encoding:\t{_or_none(sub.encoding)}\n"
        f"Phase:\t{_or_none(sub.phase)}\n"
        f"Status:\t{_or_none(sub.state)}\n"
        f"Actions:\t{_value_text(sub.actions)}\n"
        f"Trigger:\t{_value_text(sub.event_trigger)}\n"
    )


def _no_headers(context: CommandContext) -> bool:
    return bool(context.flags.get("no-headers", False))


def _run_get_subscriptions(context: CommandContext, args: list) -> Any:
    client = context.client(SUBSCRIPTION_SERVICE)
    subscriptions = list(client.list_subscriptions())
    with TabWriter(context.out) as writer:
        if not _no_headers(context):
            writer.write(SUBSCRIPTION_HEADERS + "\n")
        for sub in subscriptions:
            writer.write(format_subscription(sub))
    return subscriptions


def _run_get_subscription(context: CommandContext, args: list) -> Any:
    client = context.client(SUBSCRIPTION_SERVICE)
    sub = client.get_subscription(subscription_id=args[0])
    with TabWriter(context.out) as writer:
        writer.write(format_subscription_details(sub))
    return sub


def _run_watch_subscriptions(context: CommandContext, args: list) -> None:
    client = context.client(SUBSCRIPTION_SERVICE)
    stream = client.watch_subscriptions(no_replay=bool(context.flags.get("no-replay", False)))
    writer = TabWriter(context.out)
    if not _no_headers(context):
        writer.write("Event Type\t")
        writer.write(SUBSCRIPTION_HEADERS + "\n")
        writer.flush()
    events = iter(stream)
    while True:
        try:
            event = next(events)
        except StopIteration:
            break
        except Exception as exc:
            context.write(f"Error receiving notification : {exc}")
            raise
        writer.write(event.type.replace(EVENT_TYPE_PREFIX, "", 1) + "\t")
        writer.write(format_subscription(event.subscription))
        writer.flush()


def _get_subscriptions_command() -> Command:
    cmd = Command("subscriptions", "Get SB subscriptions", run=_run_get_subscriptions)
    cmd.add_flag("no-headers", False, "disables output headers")
    return cmd


def _get_subscription_command() -> Command:
    return Command(
        "subscription", "Get SB subscription", run=_run_get_subscription, args=exact_args(1)
    )


def _watch_subscriptions_command() -> Command:
    cmd = Command("subscriptions", "Watch SB subscriptions", run=_run_watch_subscriptions)
    cmd.add_flag("no-headers", False, "disables output headers")
    cmd.add_flag("no-replay", False, "disables replay of existing state")
    return cmd


def _get_get_command() -> Command:
    cmd = Command("get {subscriptions,subscription} [args]", "Get command", aliases=["list"])
    cmd.add_command(_get_subscriptions_command(), _get_subscription_command())
    return cmd


def _get_watch_command() -> Command:
    cmd = Command("watch {subscriptions} [args]", "Watch command")
    cmd.add_command(_watch_subscriptions_command())
    return cmd


def get_command() -> Command:
    """Root command of the E2 termination subsystem."""
    cmd = Command("e2t {get,add,remove,watch} [args]", "ONOS e2t subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(get_config_command(), _get_get_command(), _get_watch_command())
    return cmd