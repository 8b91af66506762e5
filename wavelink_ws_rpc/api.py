"""
Typed wrappers over Wave Link's JSON-RPC methods.

These are thin conveniences around ``call()``: results are returned exactly
as decoded from the wire and params are passed through unvalidated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

LEVEL_METER_TYPES = ("input", "output", "channel", "mix")


def _find_by_id(result: Any, key: str, item_id: str) -> dict[str, Any] | None:
    items = result.get(key) if isinstance(result, dict) else None
    for item in items or ():
        if isinstance(item, dict) and item.get("id") == item_id:
            return item
    return None


class WaveLinkApi(ABC):
    """
    Mixin providing the Wave Link method surface.

    Subclasses supply ``call(method, params=None, timeout=...)``.
    """

    @abstractmethod
    async def call(self, method: str, params: Any = None, **kwargs: Any) -> Any:
        """Send one request and return its result."""

    # Getters

    async def get_application_info(self) -> Any:
        return await self.call("getApplicationInfo")

    async def get_input_devices(self) -> Any:
        return await self.call("getInputDevices")

    async def get_output_devices(self) -> Any:
        return await self.call("getOutputDevices")

    async def get_channels(self) -> Any:
        return await self.call("getChannels")

    async def get_mixes(self) -> Any:
        return await self.call("getMixes")

    # Setters

    async def set_input_device(self, params: dict[str, Any]) -> None:
        await self.call("setInputDevice", params)

    async def set_output_device(self, params: dict[str, Any]) -> None:
        await self.call("setOutputDevice", params)

    async def set_channel(self, params: dict[str, Any]) -> None:
        await self.call("setChannel", params)

    async def set_mix(self, params: dict[str, Any]) -> None:
        await self.call("setMix", params)

    async def add_to_channel(self, params: dict[str, Any]) -> None:
        await self.call("addToChannel", params)

    async def set_subscription(self, params: dict[str, Any]) -> Any:
        return await self.call("setSubscription", params)

    # Channels

    async def set_channel_mute(self, channel_id: str, is_muted: bool) -> None:
        await self.set_channel({"id": channel_id, "isMuted": is_muted})

    async def set_channel_volume(self, channel_id: str, level: float) -> None:
        """Set channel volume (0.0 - 1.0)."""
        await self.set_channel({"id": channel_id, "level": level})

    async def set_channel_mix_volume(
        self, channel_id: str, mix_id: str, level: float
    ) -> None:
        """Set a channel's volume within one mix."""
        await self.set_channel(
            {"id": channel_id, "mixes": [{"id": mix_id, "level": level}]}
        )

    async def set_channel_mix_mute(
        self, channel_id: str, mix_id: str, is_muted: bool
    ) -> None:
        await self.set_channel(
            {"id": channel_id, "mixes": [{"id": mix_id, "isMuted": is_muted}]}
        )

    async def toggle_channel_mute(self, channel_id: str) -> None:
        """
        Flip a channel's mute state.

        Reads the channel list first; does nothing if the id is unknown.
        """
        channel = _find_by_id(await self.get_channels(), "channels", channel_id)
        if channel is not None:
            await self.set_channel_mute(channel_id, not channel.get("isMuted", False))

    # Mixes

    async def set_mix_volume(self, mix_id: str, level: float) -> None:
        """Set mix master volume (0.0 - 1.0)."""
        await self.set_mix({"id": mix_id, "level": level})

    async def set_mix_mute(self, mix_id: str, is_muted: bool) -> None:
        await self.set_mix({"id": mix_id, "isMuted": is_muted})

    async def toggle_mix_mute(self, mix_id: str) -> None:
        mix = _find_by_id(await self.get_mixes(), "mixes", mix_id)
        if mix is not None:
            await self.set_mix_mute(mix_id, not mix.get("isMuted", False))

    # Inputs

    async def set_input_gain(self, device_id: str, input_id: str, value: float) -> None:
        """Set input gain (0.0 - 1.0)."""
        await self.set_input_device(
            {
                "id": device_id,
                "inputs": [{"id": input_id, "gain": {"value": value, "maxRange": 0}}],
            }
        )

    async def set_input_mute(self, device_id: str, input_id: str, is_muted: bool) -> None:
        await self.set_input_device(
            {"id": device_id, "inputs": [{"id": input_id, "isMuted": is_muted}]}
        )

    # Outputs

    async def _set_output(self, device_id: str, output: dict[str, Any]) -> None:
        await self.set_output_device(
            {"outputDevice": {"id": device_id, "outputs": [output]}}
        )

    async def set_output_volume(
        self, device_id: str, output_id: str, level: float
    ) -> None:
        await self._set_output(device_id, {"id": output_id, "level": level})

    async def switch_output_mix(
        self, device_id: str, output_id: str, mix_id: str
    ) -> None:
        """Route an output to a different mix."""
        await self._set_output(device_id, {"id": output_id, "mixId": mix_id})

    async def remove_output_from_mix(self, device_id: str, output_id: str) -> None:
        """Detach an output from every mix (empty mixId)."""
        await self._set_output(device_id, {"id": output_id, "mixId": ""})

    # Subscriptions

    async def subscribe_focused_app(self, enabled: bool = True) -> None:
        await self.set_subscription({"focusedAppChanged": {"isEnabled": enabled}})

    async def subscribe_level_meter(
        self, meter_type: str, meter_id: str, enabled: bool = True
    ) -> None:
        """
        Enable or disable level meter notifications for one element.

        Args:
            meter_type: One of "input", "output", "channel" or "mix"
            meter_id: Id of the element to meter
            enabled: Whether notifications should be sent

        Raises:
            ValueError: If meter_type is not a known element type
        """
        if meter_type not in LEVEL_METER_TYPES:
            raise ValueError(
                f"Invalid level meter type: {meter_type!r}. "
                f"Expected one of: {', '.join(LEVEL_METER_TYPES)}"
            )
        await self.set_subscription(
            {
                "levelMeterChanged": {
                    "type": meter_type,
                    "id": meter_id,
                    "isEnabled": enabled,
                }
            }
        )
