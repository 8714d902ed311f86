"""Locating and invoking the Godot executable.

The engine is an opaque collaborator: we hand it an argument vector and read
back plain text. Synchronous calls wait for the process to exit. By default
they have no deadline; ``GODOT_MCP_TIMEOUT`` sets one for every call.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
from dataclasses import dataclass

from godot_mcp.errors import EngineInvocationFailed, GENERIC_HINTS

logger = logging.getLogger(__name__)

_HOME = os.path.expanduser("~")

# Conventional install locations, probed in order.
DEFAULT_GODOT_PATHS: dict[str, list[str]] = {
    "darwin": [
        "/Applications/Godot.app/Contents/MacOS/Godot",
        "/Applications/Godot_4.app/Contents/MacOS/Godot",
        f"{_HOME}/Applications/Godot.app/Contents/MacOS/Godot",
        f"{_HOME}/Applications/Godot_4.app/Contents/MacOS/Godot",
    ],
    "win32": [
        "C:\\Program Files\\Godot\\Godot.exe",
        "C:\\Program Files (x86)\\Godot\\Godot.exe",
        "C:\\Program Files\\Godot_4\\Godot.exe",
        "C:\\Program Files (x86)\\Godot_4\\Godot.exe",
    ],
    "linux": [
        "/usr/bin/godot",
        "/usr/local/bin/godot",
        "/snap/bin/godot",
        f"{_HOME}/.local/bin/godot",
    ],
}

FALLBACK_GODOT_PATH = "/Applications/Godot.app/Contents/MacOS/Godot"

# The startup probe should never hang the server.
PROBE_TIMEOUT: float = 10.0


def _platform_key(platform: str) -> str:
    if platform.startswith("linux"):
        return "linux"
    return platform


def _probe(path: str) -> bool:
    """Return True if *path* exists and answers ``--version``."""
    if not os.path.exists(path):
        return False
    try:
        subprocess.run(
            [path, "--version"],
            check=True,
            capture_output=True,
            timeout=PROBE_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Path %s not valid or executable: %s", path, e)
        return False
    return True


def locate_godot(override: str | None = None, platform: str = sys.platform) -> str:
    """Pick the Godot executable once, at startup.

    An explicit override always wins. Otherwise the first platform candidate
    that exists and runs ``--version`` is used. If none does, the hard-coded
    fallback is returned and later calls report the engine as unavailable.
    """
    if override:
        logger.debug("Using Godot path from environment: %s", override)
        return override

    key = _platform_key(platform)
    logger.debug("Detecting Godot path for platform: %s", key)
    for candidate in DEFAULT_GODOT_PATHS.get(key, []):
        logger.debug("Checking Godot path: %s", candidate)
        if _probe(candidate):
            logger.debug("Found Godot at: %s", candidate)
            return candidate

    logger.warning(
        "Could not find Godot in common locations for %s; using default path %s. "
        "Set the GODOT_PATH environment variable to specify the correct path.",
        key,
        FALLBACK_GODOT_PATH,
    )
    return FALLBACK_GODOT_PATH


@dataclass
class EngineOutput:
    returncode: int
    stdout: str
    stderr: str


class GodotEngine:
    """Runs the Godot executable as a child process.

    Every spawn failure (missing executable, permission denied, any other
    ``OSError``) surfaces as ``EngineInvocationFailed`` so handlers can report
    it as a tool error.
    """

    def __init__(self, path: str, timeout: float | None = None) -> None:
        self.path = path
        self.timeout = timeout
        # Waiters for launched editors, so each exit is reaped.
        self.editors: set[asyncio.Task] = set()

    async def _spawn(self, args: list[str], **kwargs) -> asyncio.subprocess.Process:
        logger.debug("Spawning %s %s", self.path, " ".join(args))
        try:
            return await asyncio.create_subprocess_exec(self.path, *args, **kwargs)
        except FileNotFoundError as e:
            raise EngineInvocationFailed(
                f"Godot executable not found: {self.path}",
                ["Check if the GODOT_PATH environment variable is set correctly", "Ensure Godot is installed correctly"],
            ) from e
        except PermissionError as e:
            raise EngineInvocationFailed(
                f"Godot executable is not runnable: {self.path}",
                ["Make sure the Godot binary has execute permission", *GENERIC_HINTS[1:2]],
            ) from e
        except OSError as e:
            raise EngineInvocationFailed(f"Failed to start Godot: {e}", GENERIC_HINTS) from e

    async def run(self, args: list[str]) -> EngineOutput:
        """Run Godot with *args*, wait for exit, and return decoded output."""
        proc = await self._spawn(
            args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise EngineInvocationFailed(
                f"Godot did not finish within {self.timeout}s; the engine may be hung",
                ["Increase GODOT_MCP_TIMEOUT or unset it", "Run the same command manually to inspect it"],
            ) from e
        return EngineOutput(
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def query(self, args: list[str]) -> str:
        """Run a read-only command and return its trimmed stdout."""
        out = await self.run(args)
        if out.returncode != 0:
            detail = out.stderr.strip() or out.stdout.strip() or "no output"
            raise EngineInvocationFailed(
                f"Godot exited with code {out.returncode}: {detail}",
                GENERIC_HINTS[:2],
            )
        return out.stdout.strip()

    async def version(self) -> str:
        return await self.query(["--version"])

    async def launch_editor(self, project_path: str) -> asyncio.subprocess.Process:
        """Open the editor for *project_path* and return without waiting."""
        proc = await self._spawn(
            ["-e", "--path", project_path],
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        task = asyncio.create_task(self._reap_editor(proc))
        self.editors.add(task)
        task.add_done_callback(self.editors.discard)
        return proc

    async def _reap_editor(self, proc: asyncio.subprocess.Process) -> None:
        try:
            code = await proc.wait()
        except Exception:
            logger.exception("Failed waiting for Godot editor %s", proc.pid)
            return
        logger.debug("Godot editor %s exited with code %s", proc.pid, code)

    async def spawn_debug(self, project_path: str, scene: str | None = None) -> asyncio.subprocess.Process:
        """Start the project in debug mode with piped output."""
        args = ["-d", "--path", project_path]
        if scene:
            args.append(scene)
        return await self._spawn(
            args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
