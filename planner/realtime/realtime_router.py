"""Websocket that pushes a fresh task forest whenever a project's tasks change."""

import asyncio
import logging
from datetime import datetime

import anyio
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from planner.auth.auth_router import user_from_token
from planner.database import get_session_factory
from planner.models.project import Project
from planner.profile.profile_service import get_or_create_profile
from planner.realtime.change_feed import ChangeEvent, feed
from planner.task import task_service
from planner.task.task_board import TaskBoard

logger = logging.getLogger("planner.realtime")

router = APIRouter(tags=["realtime"])

POLICY_VIOLATION = 1008


def _authorize(session_factory, token: str, project_id: int) -> None:
    db = session_factory()
    try:
        user = user_from_token(token, db)
        profile = get_or_create_profile(db, user)
        project = db.get(Project, project_id)
        if not project or project.owner_id != profile.id:
            raise HTTPException(404, "Project not found")
    finally:
        db.close()


def _snapshot(session_factory, project_id: int) -> list:
    db = session_factory()
    try:
        forest = task_service.fetch_task_tree(db, project_id)
        return task_service.serialize_forest(forest)
    finally:
        db.close()


@router.websocket("/ws/projects/{project_id}/tasks")
async def task_changes(
    websocket: WebSocket,
    project_id: int,
    token: str = "",
    session_factory=Depends(get_session_factory),
):
    try:
        await run_in_threadpool(_authorize, session_factory, token, project_id)
    except HTTPException as exc:
        await websocket.close(code=POLICY_VIOLATION, reason=str(exc.detail))
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    changes: asyncio.Queue = asyncio.Queue()
    board = TaskBoard(project_id)

    def _on_change(change: ChangeEvent) -> None:
        # commits happen on worker threads; hand over to the socket's loop
        loop.call_soon_threadsafe(changes.put_nowait, change)

    subscription = feed.subscribe("tasks", {"project_id": project_id}, _on_change)
    logger.info("ws_connected", extra={"project_id": project_id, "subscribers": feed.subscriber_count})

    async def send_snapshot(reason: str) -> None:
        fetch_token = board.begin_fetch()
        tasks = await run_in_threadpool(_snapshot, session_factory, project_id)
        if not board.apply(fetch_token, tasks):
            return
        await websocket.send_json(
            {
                "type": "snapshot",
                "reason": reason,
                "project_id": project_id,
                "token": fetch_token,
                "tasks": tasks,
                "timestamp": datetime.now().isoformat(),
            }
        )

    async def pump_changes() -> None:
        try:
            while True:
                change = await changes.get()
                # collapse a burst of changes into one re-fetch
                while not changes.empty():
                    change = changes.get_nowait()
                await send_snapshot(change.action.lower())
        except (WebSocketDisconnect, RuntimeError):
            # socket went away while sending
            return

    async def read_client() -> None:
        try:
            while True:
                msg = await websocket.receive_json()
                if msg.get("type") == "ping":
                    await websocket.send_json({"type": "pong", "timestamp": datetime.now().isoformat()})
                elif msg.get("type") == "refresh":
                    await send_snapshot("refresh")
        except WebSocketDisconnect:
            logger.info("ws_disconnected", extra={"project_id": project_id})

    try:
        await send_snapshot("connected")
        async with anyio.create_task_group() as tg:
            tg.start_soon(pump_changes)
            await read_client()
            tg.cancel_scope.cancel()
    except WebSocketDisconnect:
        logger.info("ws_disconnected", extra={"project_id": project_id})
    finally:
        feed.unsubscribe(subscription)
