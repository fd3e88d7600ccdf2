import asyncio

import pytest

from bisindo.orchestrator.contracts import InferenceResult, LoopConfig
from bisindo.orchestrator.errors import ERR_NETWORK, NetworkError
from bisindo.orchestrator.state_machine import Busy, Ready, Result
from helpers import wait_until


async def test_cycles_never_overlap(session, inference):
    inference.delay_s = 0.01
    await session.open()

    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 5)
    session.stop_loop()
    await session.loop.join()

    assert inference.max_active == 1
    assert not session.machine.in_flight


async def test_loop_uses_continuous_profile(session, inference):
    await session.open()
    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 1)
    session.stop_loop()
    await session.loop.join()

    sent = inference.images[0]
    assert sent.target_width == 256
    assert sent.encoding_quality == 1.0
    assert max(sent.width, sent.height) <= 256


async def test_failures_are_retried_and_skipped(session, inference):
    inference.replies = [InferenceResult("A", 0.92), NetworkError("down"), NetworkError("down")]
    inference.delay_s = 0.02
    await session.open()

    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 4)
    session.stop_loop()
    await session.loop.join()

    history = list(session.machine.history)
    assert "busy --fail:NETWORK_ERROR--> error" in history
    assert "error --new_cycle--> ready" in history
    # failed cycles never replace what is on screen
    assert session.machine.last_result.label == "A"


async def test_error_returns_to_ready_without_user_action(session, inference):
    inference.replies = [NetworkError("down")]
    await session.open()
    inference.gate = asyncio.Event()

    session.start_loop(LoopConfig(interval_ms=10_000))
    await inference.entered.wait()
    inference.gate.set()
    await wait_until(lambda: session.machine.last_error is not None)

    assert isinstance(session.machine.state, Ready)
    assert session.machine.last_error.kind == ERR_NETWORK
    assert session.loop.running
    session.stop_loop()
    await session.loop.join()


async def test_next_cycle_waits_for_interval(session, inference):
    await session.open()

    session.start_loop(LoopConfig(interval_ms=10_000))
    await wait_until(lambda: isinstance(session.machine.state, Result))
    await asyncio.sleep(0.05)
    assert inference.calls == 1

    session.stop_loop()
    await asyncio.wait_for(session.loop.join(), timeout=1.0)
    assert inference.calls == 1


async def test_stop_discards_in_flight_result(session, inference):
    inference.gate = asyncio.Event()
    await session.open()

    session.start_loop(LoopConfig(interval_ms=0))
    await inference.entered.wait()
    assert isinstance(session.machine.state, Busy)
    session.stop_loop()
    assert isinstance(session.machine.state, Ready)
    history_len = len(session.machine.history)

    inference.gate.set()
    await session.loop.join()

    assert isinstance(session.machine.state, Ready)
    assert session.machine.last_result is None
    assert len(session.machine.history) == history_len
    assert inference.calls == 1


async def test_stop_is_idempotent(session, inference):
    await session.open()
    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 1)

    session.stop_loop()
    state, cycles = session.machine.state, session.loop.cycles
    session.stop_loop()

    assert not session.loop.running
    assert session.machine.state == state
    assert session.loop.cycles == cycles
    await session.loop.join()


async def test_stop_before_start_is_harmless(session):
    session.stop_loop()
    assert not session.loop.running


async def test_restart_never_runs_two_loops(session, inference):
    inference.gate = asyncio.Event()
    await session.open()

    session.start_loop(LoopConfig(interval_ms=0))
    await inference.entered.wait()
    session.start_loop(LoopConfig(interval_ms=0))
    assert session.loop.running
    await asyncio.sleep(0.02)
    assert inference.calls == 1

    inference.gate.set()
    await wait_until(lambda: inference.calls >= 3)
    session.stop_loop()
    await session.loop.join()

    assert inference.max_active == 1


async def test_restart_awaits_previous_instance(session, inference):
    inference.delay_s = 0.01
    await session.open()
    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 1)

    await session.loop.restart(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 3)
    session.stop_loop()
    await session.loop.join()

    assert inference.max_active == 1


async def test_disabled_config_only_tears_down(session, inference):
    await session.open()
    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 1)

    session.start_loop(LoopConfig(interval_ms=0, enabled=False))
    await session.loop.join()
    calls = inference.calls
    await asyncio.sleep(0.02)

    assert not session.loop.running
    assert inference.calls == calls


async def test_capture_failure_does_not_kill_loop(session, camera, inference):
    inference.delay_s = 0.02
    await session.open()
    camera.fail_next = True

    session.start_loop(LoopConfig(interval_ms=0))
    await wait_until(lambda: inference.calls >= 1)
    session.stop_loop()
    await session.loop.join()

    assert "capturing --capture_aborted:CAPTURE_FAILED--> ready" in list(session.machine.history)
    assert camera.captures >= 1


async def test_single_shot_ignored_while_loop_runs(session, inference):
    await session.open()
    session.start_loop(LoopConfig(interval_ms=10_000))
    out = await session.capture("camera")
    assert out.error_code == "BUSY"
    session.stop_loop()
    await session.loop.join()


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        LoopConfig(interval_ms=-1)
