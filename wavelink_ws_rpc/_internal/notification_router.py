"""
Notification routing component.

Turns server pushes into typed events. Routing is a pure function of the
method name over a closed set of known notifications; anything else reaches
subscribers only through the catch-all ``notification`` event.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from ..events import (
    EventName,
    FocusedAppChanged,
    LevelMeterChanged,
    OutputDevicesChanged,
    PositionalPayload,
)
from ..logger import get_logger

if TYPE_CHECKING:
    from ..events import EventEmitter
    from ..schemas import JsonRpcNotification

logger = get_logger("NOTIFICATION_ROUTER")


class NotificationMethod(str, Enum):
    """
    Notification methods Wave Link is known to push.
    """

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

    @property
    def event(self) -> EventName:
        return EventName(self.value)


# Notifications whose params arrive as a positional array
POSITIONAL_PAYLOADS: dict[NotificationMethod, type[PositionalPayload]] = {
    NotificationMethod.OUTPUT_DEVICES_CHANGED: OutputDevicesChanged,
    NotificationMethod.LEVEL_METER_CHANGED: LevelMeterChanged,
    NotificationMethod.FOCUSED_APP_CHANGED: FocusedAppChanged,
}

# Marker for "no typed event for this notification"
_SKIP = object()


class NotificationRouter:
    """
    Dispatches notifications to an EventEmitter.

    For a known method the typed event is emitted first, carrying either the
    params as sent or, for positional notifications, a payload model built
    from the array. The catch-all ``notification`` event is then always
    emitted with the method name and the raw params.

    Args:
        emitter: Registry the events are emitted on
    """

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter

    @staticmethod
    def classify(method: str) -> NotificationMethod | None:
        """
        Map a method name to a known notification, or None if unknown.
        """
        try:
            return NotificationMethod(method)
        except ValueError:
            return None

    @staticmethod
    def build_payload(kind: NotificationMethod, params: Any) -> Any:
        """
        Build the typed event payload for a known notification.

        Returns the module-level skip marker when positional params are not
        an array.
        """
        payload_cls = POSITIONAL_PAYLOADS.get(kind)
        if payload_cls is None:
            return params
        if not isinstance(params, (list, tuple)):
            logger.warning(
                f"Ignoring {kind.value} notification with non-array params: "
                f"{type(params).__name__}"
            )
            return _SKIP
        return payload_cls.from_params(params)

    async def dispatch(self, notification: JsonRpcNotification) -> None:
        method = notification.method
        params = notification.params

        kind = self.classify(method)
        if kind is None:
            logger.debug(f"Unrecognized notification method: {method}")
        else:
            payload = self.build_payload(kind, params)
            if payload is not _SKIP:
                await self._emitter.emit(kind.event, payload)

        await self._emitter.emit(EventName.NOTIFICATION, method, params)
