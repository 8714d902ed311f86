"""Supervisor for the single long-running ``run_project`` session.

Two states: idle (no slot) and running (one ``ActiveSession``). Starting a
new session while one is running kills the old one first. A session that
exits on its own clears the slot, but only if it is still the active one.
All transitions happen on the event loop, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from godot_mcp.errors import NoActiveSession

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


class ActiveSession:
    """A running Godot process plus its accumulated output lines."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self.process = process
        self.output: list[str] = []
        self.errors: list[str] = []
        self._tasks: list[asyncio.Task] = []

    @property
    def pid(self) -> int | None:
        return self.process.pid

    def start(self, on_exit: Callable[["ActiveSession"], None]) -> None:
        """Begin pumping stdout/stderr and watch for the process exiting."""
        if self.process.stdout is not None:
            self._tasks.append(asyncio.create_task(self._pump(self.process.stdout, self.output, "stdout")))
        if self.process.stderr is not None:
            self._tasks.append(asyncio.create_task(self._pump(self.process.stderr, self.errors, "stderr")))
        self._tasks.append(asyncio.create_task(self._watch(on_exit)))

    async def _pump(self, stream: asyncio.StreamReader, sink: list[str], label: str) -> None:
        # Raw chunks rather than readline, which gives up on lines over 64 KiB.
        pending = b""
        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            *lines, pending = (pending + chunk).split(b"\n")
            for raw in lines:
                self._append(sink, label, raw)
        if pending:
            self._append(sink, label, pending)

    @staticmethod
    def _append(sink: list[str], label: str, raw: bytes) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")
        sink.append(line)
        if line.strip():
            logger.debug("[Godot %s] %s", label, line)

    async def _watch(self, on_exit: Callable[["ActiveSession"], None]) -> None:
        code = await self.process.wait()
        # Drain whatever the pumps have not appended yet.
        pumps = [t for t in self._tasks if t is not asyncio.current_task()]
        if pumps:
            await asyncio.gather(*pumps, return_exceptions=True)
        logger.debug("Godot process %s exited with code %s", self.pid, code)
        on_exit(self)

    def kill(self) -> None:
        if self.process.returncode is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass  # exited between the check and the signal

    async def drain(self) -> None:
        """Wait until the pumps and the exit watcher have finished."""
        await asyncio.gather(*self._tasks, return_exceptions=True)

    def buffers(self) -> dict[str, list[str]]:
        return {"output": list(self.output), "errors": list(self.errors)}


class SessionSupervisor:
    """Owns the one-slot Active Session and its state transitions."""

    def __init__(self) -> None:
        self._active: ActiveSession | None = None

    @property
    def active(self) -> ActiveSession | None:
        return self._active

    @property
    def state(self) -> str:
        return "running" if self._active is not None else "idle"

    async def start(self, process: asyncio.subprocess.Process) -> ActiveSession:
        """Record *process* as the active session, superseding any existing one."""
        previous = self._active
        if previous is not None:
            logger.debug("Killing existing Godot process %s before starting a new one", previous.pid)
            previous.kill()
        session = ActiveSession(process)
        self._active = session
        session.start(self._on_exit)
        return session

    def _on_exit(self, session: ActiveSession) -> None:
        if self._active is session:
            self._active = None

    def snapshot(self) -> dict[str, list[str]]:
        """Return the buffers accumulated so far without changing state."""
        if self._active is None:
            raise NoActiveSession()
        return self._active.buffers()

    async def stop(self) -> dict[str, Any]:
        """Kill the active session and return its final buffers."""
        session = self._active
        if session is None:
            raise NoActiveSession(
                "No active Godot process to stop.",
                [
                    "Use run_project to start a Godot project first",
                    "The process may have already terminated",
                ],
            )
        logger.debug("Stopping active Godot process %s", session.pid)
        session.kill()
        self._active = None
        final = session.buffers()
        return {
            "message": "Godot project stopped",
            "finalOutput": final["output"],
            "finalErrors": final["errors"],
        }

    async def terminate(self) -> None:
        """Kill any active session and wait for it to exit; safe to call when idle."""
        session = self._active
        if session is None:
            return
        logger.debug("Killing active Godot process %s", session.pid)
        session.kill()
        self._active = None
        try:
            await asyncio.wait_for(session.drain(), timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Godot process %s did not exit after kill", session.pid)

    async def shutdown(self) -> None:
        await self.terminate()
