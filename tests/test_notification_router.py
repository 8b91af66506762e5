"""
Tests for NotificationRouter.

This test module covers:
- Classification of known and unknown notification methods
- Pass-through payloads for object notifications
- Positional payload destructuring
- The catch-all notification event
- Callback isolation during dispatch
"""

from __future__ import annotations

from typing import Any

import pytest

from wavelink_ws_rpc._internal.notification_router import (
    NotificationMethod,
    NotificationRouter,
)
from wavelink_ws_rpc.events import (
    EventEmitter,
    EventName,
    FocusedAppChanged,
    LevelMeterChanged,
    OutputDevicesChanged,
)
from wavelink_ws_rpc.schemas import JsonRpcNotification

# ============================================================================
# Fixtures
# ============================================================================


class Recorder:
    """Records (event, args) for every emitted event, in order."""

    def __init__(self, emitter: EventEmitter) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        for name in EventName:
            emitter.on(name, self._make(name))

    def _make(self, name: EventName) -> Any:
        def record(*args: Any) -> None:
            self.calls.append((name.value, args))

        return record

    def events(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def recorder(emitter: EventEmitter) -> Recorder:
    return Recorder(emitter)


@pytest.fixture
def router(emitter: EventEmitter) -> NotificationRouter:
    return NotificationRouter(emitter)


def notification(method: str, params: Any = None) -> JsonRpcNotification:
    return JsonRpcNotification(method=method, params=params)


# ============================================================================
# Classification Tests
# ============================================================================


class TestClassify:
    def test_known_methods(self) -> None:
        for method in NotificationMethod:
            assert NotificationRouter.classify(method.value) is method

    def test_unknown_method(self) -> None:
        assert NotificationRouter.classify("somethingNew") is None

    def test_every_method_has_an_event(self) -> None:
        for method in NotificationMethod:
            assert method.event.value == method.value


# ============================================================================
# Dispatch Tests
# ============================================================================


class TestDispatch:
    """Test the typed event followed by the catch-all event."""

    @pytest.mark.asyncio
    async def test_object_payload_passes_through(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        """
        Verifies that:
        - The typed event carries params exactly as sent
        - The typed event fires before the catch-all
        - The catch-all carries (method, params)
        """
        params = {"id": "mix-1", "isMuted": True}
        await router.dispatch(notification("mixChanged", params))

        assert recorder.calls == [
            ("mixChanged", (params,)),
            ("notification", ("mixChanged", params)),
        ]

    @pytest.mark.asyncio
    async def test_output_devices_changed_destructured(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        await router.dispatch(
            notification("outputDevicesChanged", ["main-out", [{"id": "dev-1"}]])
        )

        name, (payload,) = recorder.calls[0]
        assert name == "outputDevicesChanged"
        assert isinstance(payload, OutputDevicesChanged)
        assert payload.main_output == "main-out"
        assert payload.output_devices == [{"id": "dev-1"}]
        assert payload.model_dump(by_alias=True) == {
            "mainOutput": "main-out",
            "outputDevices": [{"id": "dev-1"}],
        }

    @pytest.mark.asyncio
    async def test_level_meter_changed_destructured(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        await router.dispatch(
            notification("levelMeterChanged", [[0.1], [0.2], [0.3], [0.4]])
        )

        _, (payload,) = recorder.calls[0]
        assert isinstance(payload, LevelMeterChanged)
        assert payload.inputs == [0.1]
        assert payload.outputs == [0.2]
        assert payload.channels == [0.3]
        assert payload.mixes == [0.4]

    @pytest.mark.asyncio
    async def test_focused_app_changed_destructured(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        await router.dispatch(
            notification("focusedAppChanged", ["com.spotify", "Spotify", "music"])
        )

        _, (payload,) = recorder.calls[0]
        assert isinstance(payload, FocusedAppChanged)
        assert payload.app_id == "com.spotify"
        assert payload.app_name == "Spotify"
        assert payload.channel == "music"

    @pytest.mark.asyncio
    async def test_missing_tuple_elements_become_none(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        await router.dispatch(notification("focusedAppChanged", ["com.spotify"]))

        _, (payload,) = recorder.calls[0]
        assert payload.app_id == "com.spotify"
        assert payload.app_name is None
        assert payload.channel is None

    @pytest.mark.asyncio
    async def test_non_array_positional_params_skip_typed_event(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        """
        Verifies that:
        - A positional notification with object params emits no typed event
        - The catch-all is still emitted with the raw params
        """
        params = {"inputs": []}
        await router.dispatch(notification("levelMeterChanged", params))

        assert recorder.calls == [("notification", ("levelMeterChanged", params))]

    @pytest.mark.asyncio
    async def test_unknown_method_only_emits_catch_all(
        self, router: NotificationRouter, recorder: Recorder
    ) -> None:
        await router.dispatch(notification("somethingNew", [1, 2]))

        assert recorder.calls == [("notification", ("somethingNew", [1, 2]))]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_block_catch_all(
        self, emitter: EventEmitter, router: NotificationRouter
    ) -> None:
        seen: list[str] = []

        def broken(params: Any) -> None:
            raise RuntimeError("subscriber bug")

        emitter.on(EventName.CHANNEL_CHANGED, broken)
        emitter.on(EventName.NOTIFICATION, lambda method, params: seen.append(method))

        await router.dispatch(notification("channelChanged", {"id": "ch-1"}))

        assert seen == ["channelChanged"]
