"""Property tests for RunController invariants."""

from __future__ import annotations

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from oracle_agent.agent.runtime.controller import RunController
from oracle_agent.agent.runtime.models import ModelResponse
from oracle_agent.agent.runtime.registry import AgentRunRegistry
from oracle_agent.exceptions import AuthorizationError, InvalidStateError
from oracle_agent.oracle.gateway import OracleGateway, OracleIdentity
from oracle_agent.oracle.transports import InMemoryOracleTransport

ORACLE_TOKEN = "oracle-secret-token"

_text = st.text(max_size=12)

_model_step = st.tuples(
    st.just("model"),
    _text,
    st.sampled_from(["", "web_search", "code_interpreter"]),
    st.one_of(st.just(""), _text),
)
_tool_step = st.tuples(st.just("tool"), _text, st.just(""), st.one_of(st.just(""), _text))
_forged_step = st.tuples(st.just("forged"), _text, st.just(""), st.just(""))

_steps = st.lists(st.one_of(_model_step, _tool_step, _forged_step), max_size=25)


def _controller() -> tuple[RunController, InMemoryOracleTransport]:
    transport = InMemoryOracleTransport()
    gateway = OracleGateway(transport, OracleIdentity(name="oracle", token=ORACLE_TOKEN), admin="admin")
    return RunController(AgentRunRegistry(), gateway), transport


async def _apply(controller: RunController, run_id: int, step: tuple[str, str, str, str]) -> None:
    kind, text, function_name, error = step
    if kind == "model":
        await controller.on_model_response(
            run_id,
            ModelResponse(content=text, function_name=function_name, function_arguments="{}"),
            error,
            credential=ORACLE_TOKEN,
        )
    elif kind == "tool":
        await controller.on_tool_response(run_id, text, error, credential=ORACLE_TOKEN)
    else:
        await controller.on_model_response(run_id, ModelResponse(content=text), credential="forged-" + text)


@given(max_iterations=st.integers(min_value=0, max_value=6), steps=_steps)
@settings(deadline=None, max_examples=200)
def test_property_run_invariants_hold_for_any_callback_sequence(
    max_iterations: int, steps: list[tuple[str, str, str, str]]
) -> None:
    """Budget is never exceeded, history only grows from [system, user], finished runs are frozen."""

    async def _scenario() -> None:
        controller, _ = _controller()
        run_id = await controller.start("sys", "query", max_iterations, owner="owner")
        run = controller.get_run(run_id)
        previous = controller.get_history(run_id)
        for step in steps:
            was_finished = run.is_finished
            count_before = run.responses_count
            try:
                await _apply(controller, run_id, step)
            except InvalidStateError:
                assert was_finished
            except AuthorizationError:
                assert step[0] == "forged"
                assert controller.get_history(run_id) == previous
                assert run.responses_count == count_before
            history = controller.get_history(run_id)

            assert run.responses_count <= run.max_iterations
            assert [m.role.value for m in history[:2]] == ["system", "user"]
            assert history[: len(previous)] == previous
            if was_finished:
                assert run.is_finished
                assert history == previous
                assert run.responses_count == count_before
            previous = history

    asyncio.run(_scenario())


@given(count=st.integers(min_value=1, max_value=20))
@settings(deadline=None)
def test_property_run_ids_are_never_reused(count: int) -> None:
    """Run ids are allocated 0..n-1 in order."""

    async def _scenario() -> list[int]:
        controller, transport = _controller()
        ids = [await controller.start("sys", "q", 1, owner="owner") for _ in range(count)]
        assert len(transport.drain()) == count
        return ids

    assert asyncio.run(_scenario()) == list(range(count))


@given(token=st.text(min_size=1, max_size=30).filter(lambda value: value != ORACLE_TOKEN))
@settings(deadline=None)
def test_property_non_oracle_tool_callbacks_change_nothing(token: str) -> None:
    """Any credential other than the oracle token is rejected before any mutation."""

    async def _scenario() -> None:
        controller, transport = _controller()
        run_id = await controller.start("sys", "q", 3, owner="owner")
        transport.drain()
        try:
            await controller.on_tool_response(run_id, "forged", credential=token)
        except AuthorizationError:
            pass
        else:
            raise AssertionError("forged callback was accepted")
        assert len(controller.get_history(run_id)) == 2
        assert transport.drain() == []

    asyncio.run(_scenario())
