import logging
from typing import Protocol, Union

from fastapi import WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState


Payload = Union[str, bytes]


class TransportError(Exception):
    """The connection can no longer be read from or written to."""


class IdleTimeoutError(TransportError):
    pass


class Channel(Protocol):
    async def receive(self) -> Payload: ...

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...


class WebSocketChannel:
    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def receive(self) -> Payload:
        try:
            message = await self.websocket.receive()
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise TransportError(f"read failed: {exc!r}") from exc

        if message["type"] == "websocket.disconnect":
            raise TransportError(f"client disconnected (code {message.get('code')})")
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send(self, message: str) -> None:
        try:
            await self.websocket.send_text(message)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise TransportError(f"write failed: {exc!r}") from exc

    async def close(self) -> None:
        if self.websocket.application_state != WebSocketState.CONNECTED:
            return
        if self.websocket.client_state != WebSocketState.CONNECTED:
            return
        try:
            await self.websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
        except (RuntimeError, OSError) as exc:
            logging.debug("close after transport failure: %s", exc)
