"""Task/result queue dispatch."""

import queue

import pytest

from mandelcanvas.errors import InvalidConfig, InvalidDimensions, InvalidScale
from mandelcanvas.frame import render
from mandelcanvas.viewport import ViewportTransform
from mandelcanvas.worker import RenderFailure, RenderWorker, handle, serve


def test_handle_renders_wire_message():
    assert handle([1, 1, {}]) == b"\xff\xff\xff\xff"
    assert handle([4, 3, {"scale": 0.5, "maxIterations": 20}]) == render(4, 3, ViewportTransform(scale=0.5), 20)


def test_handle_rejects_bad_messages():
    with pytest.raises(InvalidDimensions):
        handle([0, 5, {}])
    with pytest.raises(InvalidScale):
        handle([5, 5, {"scale": 0}])
    with pytest.raises(InvalidConfig):
        handle([5, 5, {"zoom": 2}])


def test_serve_answers_in_order_and_stops():
    tasks, results = queue.Queue(), queue.Queue()
    tasks.put((0, [2, 2, {}]))
    tasks.put((1, [0, 2, {}]))
    tasks.put((2, [1, 1, {"offsetX": -256}]))
    tasks.put(None)
    serve(tasks, results)

    job, buf = results.get_nowait()
    assert job == 0 and len(buf) == 16

    job, failure = results.get_nowait()
    assert job == 1
    assert isinstance(failure, RenderFailure)
    assert failure.error == "InvalidDimensions"
    assert isinstance(failure.exception(), InvalidDimensions)

    job, buf = results.get_nowait()
    assert job == 2 and buf != b"\xff\xff\xff\xff"
    assert results.empty()


def test_unknown_failure_maps_to_runtime_error():
    exc = RenderFailure("ZeroDivisionError", "boom").exception()
    assert isinstance(exc, RuntimeError)
    assert "boom" in str(exc)


def test_worker_process_round_trip():
    with RenderWorker() as worker:
        assert worker.alive
        buf = worker.render(4, 3, {"scale": 0.5, "maxIterations": 50}, timeout=60)
        assert buf == render(4, 3, ViewportTransform(scale=0.5), 50)
        with pytest.raises(InvalidScale):
            worker.render(5, 5, {"scale": 0}, timeout=60)
        # still serving after a rejected job
        assert len(worker.render(2, 2, timeout=60)) == 16
    assert not worker.alive


def test_worker_result_times_out():
    with RenderWorker() as worker:
        with pytest.raises(TimeoutError):
            worker.result(timeout=0.1)
