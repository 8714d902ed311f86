"""Tests for the run_project session supervisor."""

import asyncio
import signal
import sys

import pytest

from godot_mcp.engine import GodotEngine
from godot_mcp.errors import NoActiveSession
from godot_mcp.session import SessionSupervisor

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="fake Godot is a shell script")

CHATTY = """\
echo "Godot Engine v4.3"
echo "Hello from _ready"
echo "WARNING: something odd" >&2
exec sleep 30
"""


async def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.02)


class TestSessionSupervisor:
    @pytest.mark.asyncio
    async def test_idle_reads_fail(self) -> None:
        supervisor = SessionSupervisor()
        assert supervisor.state == "idle"
        with pytest.raises(NoActiveSession):
            supervisor.snapshot()
        with pytest.raises(NoActiveSession) as exc:
            await supervisor.stop()
        assert exc.value.message == "No active Godot process to stop."

    @pytest.mark.asyncio
    async def test_snapshot_is_ordered_and_idempotent(self, make_godot) -> None:
        engine = GodotEngine(make_godot(CHATTY))
        supervisor = SessionSupervisor()
        await supervisor.start(await engine.spawn_debug("/games/demo"))
        try:
            await _wait_for(lambda: len(supervisor.snapshot()["output"]) == 2 and supervisor.snapshot()["errors"])

            first = supervisor.snapshot()
            second = supervisor.snapshot()

            assert first == second
            assert first == {
                "output": ["Godot Engine v4.3", "Hello from _ready"],
                "errors": ["WARNING: something odd"],
            }
            assert supervisor.state == "running"
        finally:
            await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_snapshot_returns_copies(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        await supervisor.start(await GodotEngine(make_godot(CHATTY)).spawn_debug("/games/demo"))
        try:
            await _wait_for(lambda: len(supervisor.snapshot()["output"]) == 2)
            supervisor.snapshot()["output"].clear()
            assert len(supervisor.snapshot()["output"]) == 2
        finally:
            await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_second_start_supersedes_first(self, make_godot) -> None:
        engine = GodotEngine(make_godot(CHATTY))
        supervisor = SessionSupervisor()
        first = await engine.spawn_debug("/games/demo")
        await supervisor.start(first)
        second = await engine.spawn_debug("/games/demo")
        await supervisor.start(second)
        try:
            assert await asyncio.wait_for(first.wait(), 5) == -signal.SIGKILL
            await asyncio.sleep(0.1)  # let the first session's exit watcher run

            assert supervisor.state == "running"
            assert supervisor.active is not None
            assert supervisor.active.process is second
        finally:
            await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_stop_returns_final_buffers_and_clears_slot(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        process = await GodotEngine(make_godot(CHATTY)).spawn_debug("/games/demo")
        await supervisor.start(process)
        await _wait_for(lambda: len(supervisor.snapshot()["output"]) == 2)

        final = await supervisor.stop()

        assert final["message"] == "Godot project stopped"
        assert final["finalOutput"] == ["Godot Engine v4.3", "Hello from _ready"]
        assert supervisor.state == "idle"
        with pytest.raises(NoActiveSession):
            supervisor.snapshot()
        assert await asyncio.wait_for(process.wait(), 5) == -signal.SIGKILL

    @pytest.mark.asyncio
    async def test_natural_exit_clears_slot(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        await supervisor.start(await GodotEngine(make_godot('echo "bye"\n')).spawn_debug("/games/demo"))

        await _wait_for(lambda: supervisor.state == "idle")

        with pytest.raises(NoActiveSession):
            supervisor.snapshot()

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        await supervisor.shutdown()
        process = await GodotEngine(make_godot(CHATTY)).spawn_debug("/games/demo")
        await supervisor.start(process)
        await supervisor.shutdown()
        await supervisor.shutdown()
        assert process.returncode == -signal.SIGKILL
        assert supervisor.state == "idle"

    @pytest.mark.asyncio
    async def test_line_longer_than_stream_limit(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        godot = make_godot("""\
            head -c 70000 /dev/zero | tr '\\0' x
            echo
            echo "after-long-line"
            printf "partial"
            exec sleep 30
        """)
        await supervisor.start(await GodotEngine(godot).spawn_debug("/games/demo"))
        try:
            await _wait_for(lambda: "after-long-line" in supervisor.snapshot()["output"])

            output = supervisor.snapshot()["output"]
            assert output[0] == "x" * 70000
            assert output[1] == "after-long-line"
        finally:
            await supervisor.shutdown()

    @pytest.mark.asyncio
    async def test_unterminated_last_line_is_kept(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        session = await supervisor.start(
            await GodotEngine(make_godot('printf "one\\r\\ntwo"\n')).spawn_debug("/games/demo")
        )

        await asyncio.wait_for(session.drain(), 5)

        assert session.output == ["one", "two"]
        assert supervisor.state == "idle"

    @pytest.mark.asyncio
    async def test_terminate_kills_before_returning(self, make_godot) -> None:
        supervisor = SessionSupervisor()
        process = await GodotEngine(make_godot(CHATTY)).spawn_debug("/games/demo")
        await supervisor.start(process)

        await supervisor.terminate()

        assert process.returncode == -signal.SIGKILL
        assert supervisor.state == "idle"
