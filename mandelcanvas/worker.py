"""Off-process rendering over a task queue / result queue pair.

The caller puts ``(job_id, [width, height, options])`` on the task queue and
reads ``(job_id, buffer)`` back from the result queue. A rejected request
comes back as ``(job_id, RenderFailure)``. ``None`` stops the worker. A
render is never cancelled half way; a caller that loses interest simply
drops the result.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import queue as queue_mod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from mandelcanvas.config import RenderRequest
from mandelcanvas.errors import InvalidConfig, InvalidDimensions, InvalidScale, RenderError
from mandelcanvas.frame import render
from mandelcanvas.util.logging_setup import get_logger, logging_initialiser

ERRORS = {cls.__name__: cls for cls in (RenderError, InvalidDimensions, InvalidScale, InvalidConfig)}

@dataclass(frozen=True)
class RenderFailure:
    error: str
    message: str

    def exception(self) -> Exception:
        cls = ERRORS.get(self.error)
        if cls is None:
            return RuntimeError(f"{self.error}: {self.message}")
        return cls(self.message)

def handle(message: Any) -> bytes:
    request = RenderRequest.from_wire(message)
    return render(request.width, request.height, request.transform, config=request.config)

def serve(tasks, results, log_queue=None, log_level: int = logging.INFO) -> None:
    logging_initialiser(log_queue, log_level)
    logger = get_logger()
    logger.info("Render worker ready")
    while True:
        item = tasks.get()
        if item is None:
            break
        job_id, message = item
        try:
            buf = handle(message)
        except RenderError as e:
            logger.warning("Job %s rejected: %s", job_id, e)
            results.put((job_id, RenderFailure(type(e).__name__, str(e))))
            continue
        except Exception as e:
            logger.exception("Job %s failed", job_id)
            results.put((job_id, RenderFailure(type(e).__name__, str(e))))
            continue
        logger.debug("Job %s done bytes=%s", job_id, len(buf))
        results.put((job_id, buf))
    logger.info("Render worker stopped")

class RenderWorker:
    """A background process that renders ``[width, height, options]`` messages."""

    def __init__(self, *, log_queue=None, log_level: int = logging.INFO, context=None) -> None:
        ctx = context or mp.get_context()
        self._tasks = ctx.Queue()
        self._results = ctx.Queue()
        self._process = ctx.Process(
            target=serve,
            args=(self._tasks, self._results, log_queue, log_level),
            name="mandelcanvas-worker",
            daemon=True,
        )
        self._next_id = 0

    def start(self) -> "RenderWorker":
        self._process.start()
        return self

    @property
    def alive(self) -> bool:
        return self._process.is_alive()

    def submit(self, width: int, height: int, options: Optional[Dict[str, Any]] = None) -> int:
        job_id = self._next_id
        self._next_id += 1
        self._tasks.put((job_id, [width, height, options or {}]))
        return job_id

    def result(self, timeout: Optional[float] = None) -> Tuple[int, bytes]:
        try:
            job_id, payload = self._results.get(timeout=timeout)
        except queue_mod.Empty:
            raise TimeoutError(f"no render result within {timeout}s") from None
        if isinstance(payload, RenderFailure):
            raise payload.exception()
        return job_id, payload

    def render(self, width: int, height: int, options: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> bytes:
        job_id = self.submit(width, height, options)
        got, buf = self.result(timeout=timeout)
        if got != job_id:
            raise RuntimeError(f"result for job {got} arrived while waiting for job {job_id}")
        return buf

    def close(self, timeout: float = 5.0) -> None:
        if self._process.is_alive():
            self._tasks.put(None)
            self._process.join(timeout)
        if self._process.is_alive():
            get_logger().warning("Render worker did not stop within %ss, terminating", timeout)
            self._process.terminate()
            self._process.join()

    def __enter__(self) -> "RenderWorker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
