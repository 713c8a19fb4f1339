"""Concurrent creation of many todos, with a worker pool or a bounded fan-out."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Iterable

from .dto import BatchCreateResponse, BatchCreateRequest, BatchResult, CreateTodoRequest
from .stats_service import _format_duration
from .todo_service import TodoService

_DEFAULT_PROCESSING_DELAY = 0.1


def _as_list(requests: Iterable[CreateTodoRequest] | BatchCreateRequest) -> list[CreateTodoRequest]:
    if isinstance(requests, BatchCreateRequest):
        return list(requests.todos)
    return list(requests)


class BatchProcessor:
    """Creates todos in parallel through a :class:`TodoService`.

    ``worker_count`` bounds how many todos are created at the same time.
    ``processing_delay`` is the simulated work, in seconds, that each worker
    of the pool spends on a job before creating the todo.
    """

    def __init__(
        self,
        todo_service: TodoService,
        worker_count: int,
        processing_delay: float = _DEFAULT_PROCESSING_DELAY,
    ) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.todo_service = todo_service
        self.worker_count = worker_count
        self.processing_delay = processing_delay

    def _create(self, request: CreateTodoRequest, index: int = 0) -> BatchResult:
        try:
            todo = self.todo_service.create(request)
        except Exception as exc:  # every failure is reported in the result
            return BatchResult(index=index, success=False, error=str(exc))
        return BatchResult(index=index, success=True, todo_id=todo.id)

    def _worker(
        self,
        worker_id: int,
        jobs: queue.Queue[CreateTodoRequest],
        results: queue.Queue[BatchResult],
    ) -> None:
        while True:
            try:
                request = jobs.get_nowait()
            except queue.Empty:
                break
            print(f"🔨 Worker {worker_id} processing job: {request.title}")
            if self.processing_delay > 0:
                time.sleep(self.processing_delay)
            result = self._create(request)
            if result.success:
                print(f"✅ Worker {worker_id} completed: {request.title} (ID: {result.todo_id})")
            else:
                print(f"❌ Worker {worker_id} failed: {result.error}")
            results.put(result)
        print(f"👋 Worker {worker_id} finished")

    def process_batch(
        self, requests: Iterable[CreateTodoRequest] | BatchCreateRequest
    ) -> BatchCreateResponse:
        """Create every request with a fixed pool of workers sharing one job queue.

        Results come back in the order the workers finish them.
        """
        started = time.perf_counter_ns()
        jobs: queue.Queue[CreateTodoRequest] = queue.Queue()
        results: queue.Queue[BatchResult] = queue.Queue()

        for number, request in enumerate(_as_list(requests), start=1):
            jobs.put(request)
            print(f"📤 Sent job {number} to queue")

        workers = [
            threading.Thread(target=self._worker, args=(worker_id, jobs, results), daemon=True)
            for worker_id in range(1, self.worker_count + 1)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        response = BatchCreateResponse()
        while not results.empty():
            result = results.get_nowait()
            response.results.append(result)
            if result.success:
                response.success_count += 1
            else:
                response.failure_count += 1
        response.time_elapsed = _format_duration(time.perf_counter_ns() - started)
        return response

    def process_batch_v2(
        self, requests: Iterable[CreateTodoRequest] | BatchCreateRequest
    ) -> BatchCreateResponse:
        """Start one thread per request, at most ``worker_count`` creating at once.

        Each result carries the index of its request in the batch.
        """
        started = time.perf_counter_ns()
        gate = threading.Semaphore(self.worker_count)
        lock = threading.Lock()
        response = BatchCreateResponse()

        def run(index: int, request: CreateTodoRequest) -> None:
            with gate:
                result = self._create(request, index)
            with lock:
                response.results.append(result)
                if result.success:
                    response.success_count += 1
                else:
                    response.failure_count += 1

        threads = [
            threading.Thread(target=run, args=(index, request), daemon=True)
            for index, request in enumerate(_as_list(requests))
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        response.time_elapsed = _format_duration(time.perf_counter_ns() - started)
        return response