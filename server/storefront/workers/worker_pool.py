from __future__ import annotations
"""server/storefront/workers/worker_pool.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Pool de workers in-process : N threads qui vident une file BORNÉE de tâches.

- submit() bloque l'appelant quand la file est pleine (backpressure voulue :
  pas de perte, pas de croissance illimitée).
- run(stop) démarre les N workers et bloque jusqu'à leur sortie.
- Une tâche qui lève est journalisée puis oubliée : pas de retry.
- À l'arrêt, la tâche en cours se termine ; les tâches encore en file sont abandonnées.
"""

import logging
import queue
import threading
from typing import Callable

log = logging.getLogger(__name__)

Task = Callable[[], object]


class WorkerPool:
    def __init__(self, size: int, capacity: int, *, poll_interval: float = 0.1):
        if size < 1:
            raise ValueError("worker pool size must be >= 1")
        if capacity < 1:
            raise ValueError("worker pool capacity must be >= 1")
        self.size = size
        self.capacity = capacity
        self._poll_interval = poll_interval
        self._queue: queue.Queue[Task] = queue.Queue(maxsize=capacity)

    @property
    def pending(self) -> int:
        """Nombre (approximatif) de tâches en attente dans la file."""
        return self._queue.qsize()

    def submit(self, task: Task) -> None:
        self._queue.put(task)

    def run(self, stop: threading.Event) -> None:
        workers = [
            threading.Thread(
                target=self._work,
                args=(index, stop),
                name=f"worker-pool-{index}",
                daemon=True,
            )
            for index in range(self.size)
        ]
        for worker in workers:
            worker.start()
        log.info("Worker pool started", extra={"workers": self.size, "capacity": self.capacity})

        for worker in workers:
            worker.join()
        log.info("Worker pool stopped", extra={"abandoned": self.pending})

    def start(self, stop: threading.Event) -> threading.Thread:
        """Lance run() dans un thread dédié (usage serveur) et le retourne."""
        thread = threading.Thread(target=self.run, args=(stop,), name="worker-pool", daemon=True)
        thread.start()
        return thread

    def _work(self, index: int, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                task = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            try:
                task()
            except Exception:
                log.error("Worker pool error", exc_info=True, extra={"worker": index})
            finally:
                self._queue.task_done()
