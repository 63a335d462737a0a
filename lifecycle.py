"""Actor group for the exporter's long-running activities.

Each actor is an (execute, interrupt) pair. `Group.run` starts every execute
in its own thread; as soon as one returns or raises, every interrupt is
called with that outcome and the group waits for all actors to finish, for
at most the grace period when one is set.
"""
import logging
import queue
import signal
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Execute = Callable[[], None]
Interrupt = Callable[[Optional[BaseException]], None]


class SignalReceived(Exception):
    """Raised by the signal actor when the process is asked to terminate."""

    def __init__(self, signum: int):
        self.signum = signum
        super().__init__(f"received signal {signal.Signals(signum).name}")


class Group:
    """Actors that start together and stop together.

    `grace` bounds how long `run` waits, once the first actor has finished,
    for the rest to return. Actors still running after that are abandoned;
    their threads are daemons and do not keep the process alive.
    """

    def __init__(self, grace: Optional[float] = None) -> None:
        self.grace = grace
        self._actors: List[Tuple[str, Execute, Interrupt]] = []

    def add(self, name: str, execute: Execute, interrupt: Interrupt) -> None:
        self._actors.append((name, execute, interrupt))

    def run(self) -> Optional[BaseException]:
        """Run all actors and return the error of whichever finished first.

        Returns None when the first actor returned normally.
        """
        if not self._actors:
            return None

        done: "queue.Queue[Tuple[str, Optional[BaseException]]]" = queue.Queue()

        def _run(name: str, execute: Execute) -> None:
            err: Optional[BaseException] = None
            try:
                execute()
            except Exception as e:
                err = e
            done.put((name, err))

        threads = []
        for name, execute, _ in self._actors:
            t = threading.Thread(target=_run, args=(name, execute), name=name, daemon=True)
            t.start()
            threads.append(t)

        first_name, first_err = done.get()
        logger.info(f"Actor {first_name} finished ({first_err or 'no error'}), stopping all actors")
        deadline = None if self.grace is None else time.monotonic() + self.grace

        for name, _, interrupt in self._actors:
            try:
                interrupt(first_err)
            except Exception:
                logger.exception(f"Error while stopping actor {name}")

        # Drain the remaining completions so every actor has returned.
        finished = {first_name}
        for _ in range(len(self._actors) - 1):
            try:
                name, _ = done.get(timeout=self._remaining(deadline))
            except queue.Empty:
                stuck = sorted(t.name for t in threads if t.name not in finished)
                logger.warning(f"Actors {stuck} did not stop within {self.grace}s, abandoning them")
                return first_err
            finished.add(name)
        for t in threads:
            t.join(self._remaining(deadline))
        return first_err

    @staticmethod
    def _remaining(deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())


class SignalActor:
    """Waits for SIGINT/SIGTERM, or for a sibling to request cancellation.

    `install()` must be called from the main thread before the group runs.
    """

    def __init__(self, signals: Sequence[int] = (signal.SIGINT, signal.SIGTERM)):
        self.signals = tuple(signals)
        self.received: Optional[int] = None
        self._wake = threading.Event()
        self._previous = {}

    def install(self) -> None:
        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def _handle(self, signum, frame) -> None:
        self.received = signum
        self._wake.set()

    def execute(self) -> None:
        self._wake.wait()
        if self.received is not None:
            raise SignalReceived(self.received)

    def interrupt(self, err: Optional[BaseException]) -> None:
        self._wake.set()


def is_clean_exit(err: Optional[BaseException]) -> bool:
    return err is None or isinstance(err, SignalReceived)
