"""WebSocket route — pushes orchestrator notifications to chat clients."""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from lutobot.agent.models import AgentContext

router = APIRouter()


# ── Connection Registry ──────────────────────────────────────


class ConnectionManager:
    """In-memory WebSocket connection registry keyed by conversation id.

    Single event loop, so no locking.
    """

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}

    def connect(self, conversation_id: str, ws: WebSocket) -> None:
        self._connections.setdefault(conversation_id, set()).add(ws)
        logger.debug(
            f"WS connected: conversation={conversation_id}, "
            f"total={len(self._connections[conversation_id])}"
        )

    def disconnect(self, conversation_id: str, ws: WebSocket) -> None:
        conns = self._connections.get(conversation_id)
        if conns is not None:
            conns.discard(ws)
            if not conns:
                del self._connections[conversation_id]
        logger.debug(f"WS disconnected: conversation={conversation_id}")

    def is_connected(self, conversation_id: str) -> bool:
        return bool(self._connections.get(conversation_id))

    async def send_event(self, conversation_id: str, event: dict) -> bool:
        """Push an event to every socket watching a conversation.

        Returns True if at least one connection received it. Broken
        connections are dropped.
        """
        conns = self._connections.get(conversation_id)
        if not conns:
            return False

        sent = False
        broken: list[WebSocket] = []
        for ws in list(conns):
            try:
                await ws.send_json(event)
                sent = True
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug(f"Dropping broken WS for {conversation_id}: {e}")
                broken.append(ws)

        for ws in broken:
            conns.discard(ws)
        if not conns:
            self._connections.pop(conversation_id, None)
        return sent

    async def notify(self, text: str, context: AgentContext) -> None:
        """Orchestrator notification hook."""
        if not context.conversation_id:
            return
        await self.send_event(
            context.conversation_id,
            {
                "type": "notification",
                "message": text,
                "conversation_id": context.conversation_id,
            },
        )


# ── WebSocket Endpoint ───────────────────────────────────────


@router.websocket("/ws/events/{conversation_id}")
async def ws_events(ws: WebSocket, conversation_id: str):
    """Event stream for one conversation.

    Server event: {"type": "notification", "message": "...", "conversation_id": "..."}
    Client messages are ignored (keep-alive only).
    """
    manager: ConnectionManager = ws.app.state.ws_manager
    await ws.accept()
    manager.connect(conversation_id, ws)
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(conversation_id, ws)
