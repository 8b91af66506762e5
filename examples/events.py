"""
Print Wave Link notifications as they arrive.

Change a volume, mute a channel or switch the focused application while
this runs. Press Ctrl+C to exit.

Usage:
    WAVELINK_RPC_LOGGING=CONSOLE python examples/events.py
"""

import asyncio

from wavelink_ws_rpc import FocusedAppChanged, WaveLinkClient


async def main() -> None:
    client = WaveLinkClient()

    client.on("connected", lambda: print("Connected to Wave Link"))
    client.on("disconnected", lambda: print("Disconnected from Wave Link"))
    client.on("error", lambda error: print(f"Error: {error}"))

    @client.on("channelChanged")
    def on_channel(channel: dict) -> None:
        print(f"Channel {channel.get('id')}: level={channel.get('level')} muted={channel.get('isMuted')}")

    @client.on("mixChanged")
    def on_mix(mix: dict) -> None:
        print(f"Mix {mix.get('id')}: level={mix.get('level')} muted={mix.get('isMuted')}")

    @client.on("focusedAppChanged")
    def on_focus(app: FocusedAppChanged) -> None:
        print(f"Focused app: {app.app_name} ({app.app_id}) on {app.channel}")

    client.on("notification", lambda method, params: print(f"Notification: {method}"))

    await client.connect()
    await client.subscribe_focused_app(True)

    try:
        await asyncio.Event().wait()
    finally:
        await client.disconnect()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
