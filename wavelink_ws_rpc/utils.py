from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import pydantic
from packaging import version

from .logger import get_logger

if TYPE_CHECKING:
    from pydantic import BaseModel

T = TypeVar("T", bound="BaseModel")

logger = get_logger("wavelink_ws_rpc.utils")

WEBSOCKET_SCHEME = "ws"


def build_url(host: str, port: int) -> str:
    """Return the WebSocket URL of a candidate endpoint, e.g. ``ws://127.0.0.1:1884``."""
    return f"{WEBSOCKET_SCHEME}://{host}:{port}"


# pydantic 1.x names its (de)serializers differently; keep both working
def is_pydantic_pre_v2() -> bool:
    return version.parse(pydantic.VERSION).major < 2


def pydantic_serialize(model: BaseModel, **kwargs: Any) -> str:
    """Render a model as a JSON text frame."""
    if is_pydantic_pre_v2():
        return model.json(**kwargs)
    return model.model_dump_json(**kwargs)


def pydantic_dump(model: BaseModel, **kwargs: Any) -> dict[str, Any]:
    """Render a model as a plain dict, ``None`` members included."""
    if is_pydantic_pre_v2():
        return model.dict(**kwargs)
    return model.model_dump(**kwargs)


def pydantic_parse(model: type[T], data: Any, **kwargs: Any) -> T:
    """Validate decoded JSON into ``model``; raises pydantic.ValidationError."""
    if is_pydantic_pre_v2():
        parsed = model.parse_obj(data, **kwargs)
    else:
        parsed = model.model_validate(data, **kwargs)
    logger.debug("Parsed %s: %s", model.__name__, parsed)
    return parsed
