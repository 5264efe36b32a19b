"""Commands of the config model registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .command import AUTH_HEADER_FLAG, Command, CommandContext, add_config_flags, exact_args, no_args

CONFIG_NAME = "modelregistry"
DEFAULT_ADDRESS = "onos-config:5151"
MODEL_REGISTRY_SERVICE = "model-registry"

_MODULES_HEADER = "Name                      File                           Revision   Organization\n"


@dataclass
class ConfigModule:
    """One YANG module of a config model."""

    name: str
    file: str = ""
    revision: str = ""
    organization: str = ""


@dataclass
class ConfigModel:
    """A registered config model and its modules."""

    name: str
    version: str
    modules: list[ConfigModule] = field(default_factory=list)


def render_model(model: ConfigModel) -> str:
    """Text block describing a model and its modules."""
    lines = [f"{model.name}: {model.version}     {len(model.modules)} YANGS\n", _MODULES_HEADER]
    lines.extend(
        f"{m.name:<25} {m.file:<30} {m.revision:<12} {m.organization:<25}\n"
        for m in model.modules
    )
    lines.append("\n")
    return "".join(lines)


def _metadata(context: CommandContext) -> dict[str, str]:
    header = context.flags.get(AUTH_HEADER_FLAG, "")
    return {"authorization": header} if header else {}


def _run_list(context: CommandContext, args: list) -> Any:
    client = context.client(MODEL_REGISTRY_SERVICE)
    models = list(client.list_models(metadata=_metadata(context)))
    for model in models:
        context.write(render_model(model))
    return models


def _run_get(context: CommandContext, args: list) -> Any:
    name, version = args
    client = context.client(MODEL_REGISTRY_SERVICE)
    model = client.get_model(name=name, version=version, metadata=_metadata(context))
    context.write(render_model(model))
    return model


def get_list_command() -> Command:
    """Command that lists every registered model."""
    return Command("list", "List all models in config model registry", run=_run_list, args=no_args())


def get_get_command() -> Command:
    """Command that shows one model by name and version."""
    return Command(
        "get <name> <version>",
        "Get a model in config model registry by name and version",
        run=_run_get,
        args=exact_args(2),
    )


def get_command() -> Command:
    """Root command of the model registry."""
    cmd = Command("modelregistry {list|get} [args]", "ONOS Config Model Registry subsystem commands")
    add_config_flags(cmd, DEFAULT_ADDRESS)
    cmd.add_command(get_list_command(), get_get_command())
    return cmd