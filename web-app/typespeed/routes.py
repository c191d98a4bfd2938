import logging

from fastapi import APIRouter, Request, WebSocket, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from typespeed.channel import WebSocketChannel
from typespeed.messages import TEMPLATES_DIR
from typespeed.session import run_session

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def read_practice(request: Request):
    return templates.TemplateResponse(request, "index.html", {"ws_path": "/ws"})


@router.get("/favicon.ico")
async def favicon():
    return Response(status_code=204)


@router.websocket("/ws")
async def typing_session(websocket: WebSocket):
    settings = websocket.app.state.settings
    origin = websocket.headers.get("origin")
    if origin != settings.frontend_origin:
        logging.warning("Rejected WebSocket upgrade from origin %s", origin)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    phrase = await run_in_threadpool(websocket.app.state.text_source.next)
    logging.info("Session started for %s (%s chars)", websocket.client, len(phrase))

    await run_session(
        WebSocketChannel(websocket),
        phrase,
        clock=websocket.app.state.clock,
        idle_timeout=settings.idle_timeout,
    )
