"""Factory functions for creating a telemetry sink from configuration.

This module is the glue between SinkSettings and a ready-to-use sink:
1. Discovering sink classes via pluggy hooks
2. Instantiating the configured sink
3. Configuring it with its options

Usage:
    from scmpulse.core.config import load_settings
    from scmpulse.telemetry.factory import create_sink

    settings = load_settings(Path("scmpulse.yaml"))
    sink = create_sink(settings.sink)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pluggy
import structlog

from scmpulse.core.config import SinkSettings
from scmpulse.telemetry.errors import TelemetrySinkError
from scmpulse.telemetry.hookspecs import PROJECT_NAME, ScmPulseSinkSpec
from scmpulse.telemetry.protocols import TelemetrySinkProtocol
from scmpulse.telemetry.sinks import BuiltinSinksPlugin

logger = structlog.get_logger(__name__)


def _resolve_sink_name(sink_class: type[TelemetrySinkProtocol]) -> str:
    """Resolve a sink name from its class-level ``_name`` or an instance.

    Raises:
        TelemetrySinkError: If the resolved name is not a non-empty string
    """
    class_name = sink_class.__name__

    class_dict = sink_class.__dict__
    if "_name" in class_dict:
        name_hint = class_dict["_name"]
        if type(name_hint) is str and name_hint != "":
            return name_hint
        raise TelemetrySinkError(
            class_name,
            f"Sink class attribute _name must be a non-empty string, got {name_hint!r}",
        )

    try:
        instance = sink_class()
    except Exception as e:
        raise TelemetrySinkError(
            class_name,
            f"Failed to instantiate sink class during discovery: {e}",
        ) from e

    resolved = instance.name
    if type(resolved) is not str or resolved == "":
        raise TelemetrySinkError(
            class_name,
            f"Sink name must be a non-empty string, got {resolved!r}",
        )
    return resolved


def discover_sinks(sink_plugins: Iterable[Any] = ()) -> dict[str, type[TelemetrySinkProtocol]]:
    """Discover telemetry sinks via pluggy hooks.

    Registers the built-in sinks plus any plugin objects provided by the
    caller, then calls every ``scmpulse_get_sinks`` hook.

    Returns:
        Mapping of sink name to sink class.

    Raises:
        TelemetrySinkError: If a plugin is invalid, a hook misbehaves, or
            two sinks share a name.
    """
    plugin_manager = pluggy.PluginManager(PROJECT_NAME)
    plugin_manager.add_hookspecs(ScmPulseSinkSpec)

    for plugin in [BuiltinSinksPlugin(), *sink_plugins]:
        try:
            plugin_manager.register(plugin)
            plugin_manager.check_pending()
        except (pluggy.PluginValidationError, ValueError) as e:
            if isinstance(e, pluggy.PluginValidationError):
                plugin_manager.unregister(plugin=plugin)
            raise TelemetrySinkError(
                "sink_plugins",
                f"Invalid telemetry sink plugin {type(plugin).__name__}: {e}",
            ) from e

    registry: dict[str, type[TelemetrySinkProtocol]] = {}
    for hook_impl in plugin_manager.hook.scmpulse_get_sinks.get_hookimpls():
        plugin_name = type(hook_impl.plugin).__name__
        try:
            sink_classes = hook_impl.function()
        except Exception as e:
            raise TelemetrySinkError(
                "sink_plugins",
                f"Telemetry sink plugin {plugin_name} failed in scmpulse_get_sinks: {e}",
            ) from e

        if sink_classes is None or type(sink_classes) in (str, bytes):
            raise TelemetrySinkError(
                "sink_plugins",
                f"scmpulse_get_sinks in plugin {plugin_name} returned {type(sink_classes).__name__}; "
                "expected iterable of sink classes",
            )

        for sink_class in sink_classes:
            sink_name = _resolve_sink_name(sink_class)
            if sink_name in registry:
                raise TelemetrySinkError(
                    sink_name,
                    f"Duplicate telemetry sink name '{sink_name}' discovered: "
                    f"{registry[sink_name].__name__} and {sink_class.__name__}",
                )
            registry[sink_name] = sink_class

    return registry


def create_sink(settings: SinkSettings, *, sink_plugins: Iterable[Any] = ()) -> TelemetrySinkProtocol:
    """Create and configure the sink named in settings.

    Raises:
        TelemetrySinkError: If the sink name is unknown or its options are invalid
    """
    registry = discover_sinks(sink_plugins)
    try:
        sink_class = registry[settings.name]
    except KeyError:
        available = sorted(registry)
        raise TelemetrySinkError(
            settings.name,
            f"Unknown sink. Available sinks: {available}",
        ) from None

    sink = sink_class()
    sink.configure(dict(settings.options))
    logger.debug("sink_configured", sink=settings.name, options_keys=sorted(settings.options))
    return sink
