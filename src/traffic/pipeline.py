"""
Traffic pipeline
----------------

Concurrent engine driving the spawned actors. Actors are split across a pool
of stage threads; every cycle each thread applies the stage callable to its
share of actors.

Exceptions raised by a stage are NOT caught here: they end the thread and
reach threading.excepthook, where the fault trap decides what to do.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Sequence

from models.config import PipelineConfig
from models.enums import LogCategory
from models.errors import ConnectionLostError, StartupError
from runtime.runtime_info import RuntimeInfo
from simulation.protocols import ActorHandle, ISimulationClient
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.PIPELINE)

Stage = Callable[[ActorHandle], None]


class TrafficPipeline:
    """
    IWorkerSubsystem implementation backed by threads.

    Example:
        pipeline = TrafficPipeline(registry, client, config.pipeline)
        pipeline.start()   # returns once every stage thread is running
        ...
        pipeline.stop()    # joins the threads; safe to call again
    """

    def __init__(
        self,
        actors: Sequence[ActorHandle],
        client: ISimulationClient,
        config: PipelineConfig,
        stage: Optional[Stage] = None,
    ):
        self._actors = list(actors)
        self._client = client
        self._config = config
        self._stage = stage or self._apply_target_speed
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self.stop_calls = 0

    @property
    def worker_count(self) -> int:
        wanted = self._config.worker_count or RuntimeInfo.core_count()
        return max(1, min(wanted, len(self._actors)))

    @property
    def is_running(self) -> bool:
        with self._lock:
            return any(t.is_alive() for t in self._threads)

    def partitions(self) -> List[List[ActorHandle]]:
        """Round-robin split of the actors, one list per stage thread."""
        count = self.worker_count
        return [self._actors[i::count] for i in range(count)]

    # ----------------------------------------------------------------------
    # LIFECYCLE
    # ----------------------------------------------------------------------
    def start(self) -> None:
        """
        Launch the stage threads and wait until all of them are running.

        Raises:
            RuntimeError: already started
            StartupError: a thread did not report ready within start_timeout
        """
        with self._lock:
            if self._threads:
                raise RuntimeError("TrafficPipeline already started")

            self._stop_event.clear()
            ready: List[threading.Event] = []
            for index, share in enumerate(self.partitions()):
                event = threading.Event()
                thread = threading.Thread(
                    target=self._run_stage,
                    args=(share, event),
                    name=f"pipeline-stage-{index}",
                    daemon=True,
                )
                ready.append(event)
                self._threads.append(thread)
                thread.start()

        deadline = time.monotonic() + self._config.start_timeout
        for index, event in enumerate(ready):
            if not event.wait(max(0.0, deadline - time.monotonic())):
                self.stop()
                raise StartupError(f"Pipeline stage {index} did not start within {self._config.start_timeout}s")

        log.info(
            f"Pipeline running with {len(ready)} stage threads",
            actors=len(self._actors),
            cycle_interval=self._config.cycle_interval,
        )

    def stop(self) -> None:
        """Signal every stage thread and join them. Idempotent."""
        with self._lock:
            self.stop_calls += 1
            self._stop_event.set()
            threads, self._threads = self._threads, []

        if not threads:
            log.debug("Pipeline already stopped")
            return

        current = threading.current_thread()
        for thread in threads:
            if thread is not current:
                thread.join()
        log.debug(f"Joined {len(threads)} stage threads")

    # ----------------------------------------------------------------------
    # STAGE THREADS
    # ----------------------------------------------------------------------
    def _run_stage(self, actors: List[ActorHandle], ready: threading.Event) -> None:
        ready.set()
        while not self._stop_event.wait(self._config.cycle_interval):
            for actor in actors:
                if self._stop_event.is_set():
                    return
                self._stage(actor)

    def _apply_target_speed(self, actor: ActorHandle) -> None:
        # Connection loss is detected by the supervisor's liveness poll
        try:
            if actor.is_alive:
                self._client.apply_target_speed(actor, self._config.target_speed_mps)
        except ConnectionLostError:
            return
