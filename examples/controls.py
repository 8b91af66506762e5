"""
Adjust channels, mixes and outputs.

Each change is reverted after a short pause, so running this leaves the
mixer as it was.

Usage:
    python examples/controls.py
"""

import asyncio

from wavelink_ws_rpc import WaveLinkClient


async def main() -> None:
    async with WaveLinkClient() as client:
        channels = (await client.get_channels())["channels"]
        mixes = (await client.get_mixes())["mixes"]
        if not channels or not mixes:
            print("No channels or mixes configured")
            return

        channel, mix = channels[0], mixes[0]

        print(f"Toggling mute on channel {channel['id']}")
        await client.toggle_channel_mute(channel["id"])
        await asyncio.sleep(1)
        await client.toggle_channel_mute(channel["id"])

        print(f"Setting {channel['id']} to 50% in mix {mix['id']}")
        original = next(
            (m["level"] for m in channel.get("mixes", []) if m["id"] == mix["id"]), 1.0
        )
        await client.set_channel_mix_volume(channel["id"], mix["id"], 0.5)
        await asyncio.sleep(1)
        await client.set_channel_mix_volume(channel["id"], mix["id"], original)

        print(f"Setting mix {mix['id']} master volume to 25%")
        await client.set_mix_volume(mix["id"], 0.25)
        await asyncio.sleep(1)
        await client.set_mix_volume(mix["id"], mix["level"])

        outputs = await client.get_output_devices()
        for device in outputs["outputDevices"]:
            for output in device.get("outputs", []):
                print(f"Output {device['id']}/{output['id']} is on mix {output.get('mixId')!r}")


if __name__ == "__main__":
    asyncio.run(main())
