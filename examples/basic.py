"""
Connect to Wave Link and print the current mixer state.

Usage:
    python examples/basic.py
"""

import asyncio

from wavelink_ws_rpc import WaveLinkClient


def percent(level: float) -> str:
    return f"{level * 100:.0f}%"


async def main() -> None:
    async with WaveLinkClient() as client:
        print(f"Connected on port {client.port}\n")

        info = await client.get_application_info()
        print("=== Application Info ===")
        print(f"Name: {info.get('name')}")
        print(f"App ID: {info.get('appID')}")
        print(f"Interface Revision: {info.get('interfaceRevision')}\n")

        print("=== Channels ===")
        for channel in (await client.get_channels())["channels"]:
            print(f"{channel['id']}: {percent(channel['level'])} (muted: {channel['isMuted']})")
            for mix in channel.get("mixes", []):
                print(f"  {mix['id']}: {percent(mix['level'])} (muted: {mix['isMuted']})")
        print()

        print("=== Mixes ===")
        for mix in (await client.get_mixes())["mixes"]:
            print(f"{mix['name']} ({mix['id']}): {percent(mix['level'])} (muted: {mix['isMuted']})")
        print()

        print("=== Input Devices ===")
        for device in (await client.get_input_devices())["inputDevices"]:
            print(f"{device['id']} (Wave device: {device.get('isWaveDevice')})")
            for input_ in device.get("inputs", []):
                print(f"  {input_['id']}: gain {percent(input_['gain']['value'])}")
        print()

        outputs = await client.get_output_devices()
        print("=== Output Devices ===")
        print(f"Main Output: {outputs['mainOutput']}")
        for device in outputs["outputDevices"]:
            for output in device.get("outputs", []):
                print(f"{device['id']}/{output['id']}: {percent(output['level'])} -> {output.get('mixId')}")


if __name__ == "__main__":
    asyncio.run(main())
