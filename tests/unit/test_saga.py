import pytest
from prometheus_client import REGISTRY

from phonebook.services import Saga


async def _value(value):
    return value


@pytest.mark.asyncio
async def test_compensations_run_in_reverse_order():
    undone = []

    async def undo(result):
        undone.append(result)

    with pytest.raises(ValueError):
        async with Saga("demo") as saga:
            await saga.step("first", _value("a"), undo=undo)
            await saga.step("second", _value("b"), undo=undo)
            raise ValueError("boom")

    assert undone == ["b", "a"]


@pytest.mark.asyncio
async def test_successful_saga_does_not_compensate():
    undone = []

    async def undo(result):
        undone.append(result)

    async with Saga("demo") as saga:
        result = await saga.step("only", _value(7), undo=undo)

    assert result == 7
    assert undone == []


@pytest.mark.asyncio
async def test_failing_compensation_does_not_mask_original_error():
    undone = []

    async def broken(_):
        raise RuntimeError("cannot undo")

    async def recorded():
        undone.append("recorded")

    with pytest.raises(KeyError):
        async with Saga("demo") as saga:
            saga.record("manual", recorded)
            await saga.step("broken", _value(None), undo=broken)
            raise KeyError("original")

    assert undone == ["recorded"]


@pytest.mark.asyncio
async def test_disabled_compensation_leaves_steps():
    undone = []

    async def undo(result):
        undone.append(result)

    with pytest.raises(ValueError):
        async with Saga("demo", compensate=False) as saga:
            await saga.step("first", _value("a"), undo=undo)
            raise ValueError("boom")

    assert undone == []


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_outcomes_and_compensations_are_counted():
    runs_before = _sample("phonebook_saga_runs_total", saga="metered", outcome="compensated")
    undo_before = _sample("phonebook_saga_compensations_total", saga="metered", step="first", result="ok")

    async def undo(_):
        return None

    with pytest.raises(ValueError):
        async with Saga("metered") as saga:
            await saga.step("first", _value(1), undo=undo)
            raise ValueError("boom")

    assert _sample("phonebook_saga_runs_total", saga="metered", outcome="compensated") == runs_before + 1
    assert _sample("phonebook_saga_compensations_total", saga="metered", step="first", result="ok") == undo_before + 1
