"""
Event names, typed notification payloads and the subscriber registry.

Wave Link pushes state changes as JSON-RPC notifications. The client turns
them into named events which application code subscribes to with
``client.on(...)``. Subscriptions belong to the client instance and survive
reconnects.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .logger import get_logger

logger = get_logger("EVENTS")

EventCallback = Callable[..., Any]


class EventName(str, Enum):
    """
    Events a client emits.

    ``connected`` and ``disconnected`` carry no arguments. ``error`` carries
    the exception. Each ``*Changed`` event carries one payload. ``notification``
    fires for every server push with ``(method, params)``.
    """

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    INPUT_DEVICES_CHANGED = "inputDevicesChanged"
    INPUT_DEVICE_CHANGED = "inputDeviceChanged"
    OUTPUT_DEVICES_CHANGED = "outputDevicesChanged"
    OUTPUT_DEVICE_CHANGED = "outputDeviceChanged"
    CHANNELS_CHANGED = "channelsChanged"
    CHANNEL_CHANGED = "channelChanged"
    MIXES_CHANGED = "mixesChanged"
    MIX_CHANGED = "mixChanged"
    LEVEL_METER_CHANGED = "levelMeterChanged"
    FOCUSED_APP_CHANGED = "focusedAppChanged"
    NOTIFICATION = "notification"

    @classmethod
    def coerce(cls, event: EventName | str) -> EventName:
        """
        Accept an EventName or its wire string.

        Raises:
            ValueError: If the name is not a known event
        """
        if isinstance(event, cls):
            return event
        try:
            return cls(event)
        except ValueError:
            raise ValueError(
                f"Unknown event name: {event!r}. "
                f"Valid names: {', '.join(e.value for e in cls)}"
            ) from None


class PositionalPayload(BaseModel):
    """
    Base for notifications whose params arrive as a positional array.

    Fields are filled from the array in declaration order. Missing trailing
    elements are left as None and extra elements are ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_params(cls, params: list[Any] | tuple[Any, ...]) -> PositionalPayload:
        return cls(**dict(zip(cls.model_fields, params)))


class OutputDevicesChanged(PositionalPayload):
    """Payload of ``outputDevicesChanged``: ``[mainOutput, outputDevices]``."""

    main_output: Optional[Any] = Field(default=None, alias="mainOutput")
    output_devices: Optional[Any] = Field(default=None, alias="outputDevices")


class LevelMeterChanged(PositionalPayload):
    """Payload of ``levelMeterChanged``: ``[inputs, outputs, channels, mixes]``."""

    inputs: Optional[Any] = None
    outputs: Optional[Any] = None
    channels: Optional[Any] = None
    mixes: Optional[Any] = None


class FocusedAppChanged(PositionalPayload):
    """Payload of ``focusedAppChanged``: ``[appId, appName, channel]``."""

    app_id: Optional[Any] = Field(default=None, alias="appId")
    app_name: Optional[Any] = Field(default=None, alias="appName")
    channel: Optional[Any] = None


class EventEmitter:
    """
    Ordered, duplicate-free registry of event callbacks.

    Callbacks may be plain functions or coroutine functions. ``emit`` calls
    them one at a time in registration order and awaits any awaitable they
    return. A callback that raises is logged and does not prevent the
    remaining callbacks from running.

    Usage
    -----
    ```python
    emitter = EventEmitter()

    @emitter.on("mixChanged")
    async def on_mix(params):
        print(params)

    await emitter.emit(EventName.MIX_CHANGED, {"id": "mix-1"})
    ```
    """

    def __init__(self) -> None:
        self._listeners: dict[EventName, list[EventCallback]] = {}

    def on(
        self, event: EventName | str, callback: EventCallback | None = None
    ) -> Any:
        """
        Register a callback for an event.

        Registering the same callback twice for one event is a no-op. When
        called without a callback, returns a decorator.

        Raises:
            ValueError: If the event name is unknown
        """
        name = EventName.coerce(event)

        if callback is None:

            def decorator(func: EventCallback) -> EventCallback:
                self.on(name, func)
                return func

            return decorator

        listeners = self._listeners.setdefault(name, [])
        if callback not in listeners:
            listeners.append(callback)
        return callback

    def off(self, event: EventName | str, callback: EventCallback) -> bool:
        """
        Remove a callback.

        Returns:
            True if callback was found and removed, False otherwise
        """
        listeners = self._listeners.get(EventName.coerce(event))
        if not listeners:
            return False
        try:
            listeners.remove(callback)
            return True
        except ValueError:
            return False

    def remove_all_listeners(self, event: EventName | str | None = None) -> None:
        """
        Remove every callback for one event, or for all events if none is given.
        """
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(EventName.coerce(event), None)

    def listeners(self, event: EventName | str) -> list[EventCallback]:
        return list(self._listeners.get(EventName.coerce(event), ()))

    def listener_count(self, event: EventName | str) -> int:
        return len(self._listeners.get(EventName.coerce(event), ()))

    async def emit(self, event: EventName | str, *args: Any) -> None:
        """
        Invoke every callback registered for ``event`` with ``args``.

        The callback list is copied first, so callbacks may subscribe or
        unsubscribe while the event is being delivered.
        """
        name = EventName.coerce(event)
        for callback in list(self._listeners.get(name, ())):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                callback_name = getattr(callback, "__name__", str(callback))
                logger.error(
                    f"Error in {name.value} handler {callback_name}: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
