"""WebSocket tick server.

The landmark detector runs client-side (MediaPipe in the browser); each
client streams its per-frame landmarks here and gets back the stable
gesture, smoothed cursor and trail for that frame. Every connection has
its own GestureSession.

Protocol (JSON text messages):
    -> {"type": "frame", "landmarks": [[x, y, z], ...] | null}
    <- {"type": "tick", "gesture": "POINT", "cursor": {"x":..,"y":..}, ...}
    -> {"type": "reset"}       <- {"type": "reset"}
    -> {"type": "ping"}        <- {"type": "pong", "server_time": ...}

Usage:
    gesture-cursor serve
    # or
    uvicorn gesture_cursor.server:app --host 0.0.0.0 --port 8765
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from gesture_cursor import __version__
from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import GestureCategory
from gesture_cursor.modes import ModeController
from gesture_cursor.pipeline import GestureSession

logger = logging.getLogger("gesture_cursor.server")

app = FastAPI(title="gesture-cursor", version=__version__)


class ServerState:
    def __init__(self):
        self.config = TrackerConfig()
        self.sessions: dict[int, GestureSession] = {}
        self.total_ticks = 0
        self.last_gesture: Optional[dict] = None

    def new_session(self, key: int) -> GestureSession:
        session = GestureSession(self.config)
        self.sessions[key] = session
        return session

    def drop_session(self, key: int):
        self.sessions.pop(key, None)


state = ServerState()


@app.get("/api/status")
async def api_status():
    return {
        "version": __version__,
        "sessions": len(state.sessions),
        "total_ticks": state.total_ticks,
        "last_gesture": state.last_gesture,
    }


@app.get("/api/config")
async def api_config():
    return state.config.to_dict()


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    key = id(ws)
    session = state.new_session(key)
    modes = ModeController()
    logger.info("Client connected (%d sessions)", len(state.sessions))

    try:
        await ws.send_json({
            "type": "connected",
            "gestures": [g.value for g in GestureCategory],
            "config": state.config.to_dict(),
        })

        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            msg = message.get("text")
            if msg is None:
                await ws.send_json({"type": "error", "message": "expected a text message"})
                continue
            try:
                data = json.loads(msg)
            except json.JSONDecodeError:
                await ws.send_json({"type": "error", "message": "invalid JSON"})
                continue
            if not isinstance(data, dict):
                await ws.send_json({"type": "error", "message": "expected a JSON object"})
                continue

            kind = data.get("type")
            if kind == "frame":
                result = session.process_tick(data.get("landmarks"))
                mode_state = modes.update(result.event, hovered=data.get("hovered"))
                state.total_ticks += 1

                payload = {"type": "tick", **result.to_dict(), "display": mode_state.to_dict()}
                if result.event.changed:
                    state.last_gesture = {
                        "gesture": result.event.gesture.value,
                        "timestamp": time.time(),
                    }
                await ws.send_json(payload)
            elif kind == "reset":
                session.reset()
                modes.reset()
                await ws.send_json({"type": "reset"})
            elif kind == "ping":
                await ws.send_json({"type": "pong", "server_time": time.time()})
            else:
                await ws.send_json({"type": "error", "message": f"unknown message type: {kind!r}"})
    except WebSocketDisconnect:
        pass
    finally:
        state.drop_session(key)
        logger.info("Client disconnected (%d sessions)", len(state.sessions))
