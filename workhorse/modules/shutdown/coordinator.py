"""Shutdown coordinator for managing graceful shutdown of application components."""

import asyncio
import os
import signal
import threading
import time
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from ..errors import signal_exit_code
from ..logging import BaseLogger

# Type for signal handlers
SignalHandlerType = Union[Callable[[int, Optional[types.FrameType]], Any], int, None]

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)
RELOAD_SIGNALS = (signal.SIGHUP,) if hasattr(signal, "SIGHUP") else ()


class LifecycleState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ShutdownOutcome(str, Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ShutdownConfig:
    """Shutdown settings, fixed at startup."""
    grace_period: float = 10.0
    double_signal_window: float = 2.0
    double_signal_message: str = "Press Ctrl+C again to force quit"


@dataclass
class ShutdownHandler:
    """Handler for shutdown operations.

    The handler is called with the seconds left before the grace deadline.
    It may be sync or async; returning False or raising marks it failed.
    """
    name: str
    handler: Callable


@dataclass
class ReloadHandler:
    name: str
    handler: Callable


class ShutdownCoordinator:
    """Turns OS signals into an ordered, time-bounded, single-run shutdown."""

    def __init__(
        self,
        logger: BaseLogger,
        config: Optional[ShutdownConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        exit_func: Callable[[int], Any] = os._exit
    ):
        """
        Initialize the shutdown coordinator.

        Args:
            logger: Logger instance for logging shutdown events
            config: Grace period and double-signal settings
            clock: Monotonic clock used by the double-signal latch
            exit_func: Called with the exit status on a forced exit
        """
        self.logger = logger
        self.config = config or ShutdownConfig()
        self._clock = clock
        self._exit = exit_func
        self._handlers: List[ShutdownHandler] = []
        self._reload_handlers: List[ReloadHandler] = []
        self._state = LifecycleState.STARTING
        self._outcome: Optional[ShutdownOutcome] = None
        self._shutdown_task: Optional["asyncio.Task[ShutdownOutcome]"] = None
        self._shutdown_requested = False
        self._signals: "asyncio.Queue[signal.Signals]" = asyncio.Queue()
        self._active_loop: Optional[asyncio.AbstractEventLoop] = None
        self._original_handlers: dict = {}

        # Double-signal latch
        self._lock = threading.Lock()
        self._double_signal_window: Optional[float] = None
        self._double_signal_message = ""
        self._first_signal_at: Optional[float] = None

        self.failed_handlers: List[str] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def outcome(self) -> Optional[ShutdownOutcome]:
        return self._outcome

    @property
    def is_shutting_down(self) -> bool:
        """Check if shutdown is in progress or finished."""
        return self._state in (LifecycleState.SHUTTING_DOWN, LifecycleState.STOPPED)

    def _set_state(self, state: LifecycleState) -> None:
        self.logger.log_debug(f"Lifecycle state: {self._state.value} -> {state.value}")
        self._state = state

    def mark_running(self) -> None:
        """Record that the listener is bound and serving."""
        if self._state is LifecycleState.STARTING:
            self._set_state(LifecycleState.RUNNING)

    def register_shutdown_handler(self, name: str, handler: Callable) -> None:
        """Register a shutdown handler.

        Handlers run in reverse registration order, so register the
        resource closest to the outside world last.
        """
        self._handlers.append(ShutdownHandler(name, handler))

    def register_reload_handler(self, name: str, handler: Callable) -> None:
        """Register a handler invoked (in registration order) on SIGHUP."""
        self._reload_handlers.append(ReloadHandler(name, handler))

    def enable_double_signal(self, window: float, message: str) -> None:
        """A second termination signal within `window` seconds forces exit."""
        with self._lock:
            self._double_signal_window = window
            self._double_signal_message = message

    def setup_signal_handlers(self) -> None:
        """
        Install OS signal handlers that forward to the running loop.
        This should be called from the main thread.
        """
        for sig in TERMINATION_SIGNALS + RELOAD_SIGNALS:
            self._original_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        for sig, original in self._original_handlers.items():
            if original is not None:
                signal.signal(sig, original)
        self._original_handlers = {}

    def _handle_signal(self, sig_num: int, frame: Optional[types.FrameType]) -> None:
        """OS-level entry point; defers to notify() on the event loop."""
        if self._state is LifecycleState.STOPPED:
            return
        loop = self._active_loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.notify, sig_num)

    def notify(self, sig_num: int) -> None:
        """
        Deliver a signal to the coordinator.

        Must run on the event loop thread. Termination signals either
        start the shutdown sequence, restart the double-signal window, or
        force an exit; reload signals are queued for listen().
        """
        sig = signal.Signals(sig_num)

        if sig in RELOAD_SIGNALS:
            if self.is_shutting_down:
                self.logger.log_debug(f"Ignoring {sig.name} during shutdown")
                return
            self._signals.put_nowait(sig)
            return

        force = False
        with self._lock:
            if self._state is LifecycleState.STOPPED:
                self.logger.log_debug(f"Ignoring {sig.name}: shutdown already complete")
                return
            now = self._clock()
            window = self._double_signal_window
            if window is not None and self._first_signal_at is not None and now - self._first_signal_at <= window:
                force = True
            else:
                self._first_signal_at = now

        if force:
            self._force_exit(sig)
            return

        self.logger.log_info(f"Received {sig.name} signal, initiating graceful shutdown...", signal=sig.name)
        if window is not None:
            self.logger.log_warning(self._double_signal_message)

        if self._shutdown_requested:
            self.logger.log_info("Shutdown already in progress")
            return
        self._shutdown_requested = True
        self._signals.put_nowait(sig)

    def _force_exit(self, sig: signal.Signals) -> None:
        code = signal_exit_code(sig)
        self.logger.log_warning(
            f"Received second {sig.name} within {self._double_signal_window}s, forcing exit",
            signal=sig.name,
            exit_code=code
        )
        self.logger.flush()
        self._exit(code)

    async def listen(
        self,
        stop: Optional[asyncio.Event] = None,
        install_signal_handlers: bool = True
    ) -> ShutdownOutcome:
        """
        Block until a termination signal arrives or `stop` is set.

        Reload signals run the reload handlers and keep listening. A
        termination signal runs the shutdown sequence and returns its
        outcome. Cancelling the task that awaits listen() also stops it.

        Args:
            stop: Event that ends listening without shutting down
            install_signal_handlers: Route OS signals here (main thread only)
        """
        self._active_loop = asyncio.get_running_loop()
        installed = install_signal_handlers and threading.current_thread() is threading.main_thread()
        if installed:
            self.setup_signal_handlers()

        try:
            while True:
                next_signal = asyncio.ensure_future(self._signals.get())
                waiters = {next_signal}
                if stop is not None:
                    waiters.add(asyncio.ensure_future(stop.wait()))
                try:
                    await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    for waiter in waiters:
                        if not waiter.done():
                            waiter.cancel()

                if not next_signal.done() or next_signal.cancelled():
                    self.logger.log_info("Signal listener stopped")
                    return ShutdownOutcome.CANCELLED

                sig = next_signal.result()
                if sig in RELOAD_SIGNALS:
                    await self.reload()
                    continue
                return await self.shutdown(reason=sig.name)
        finally:
            # Once stopped, our handlers stay in place so late signals are no-ops
            if installed and self._state is not LifecycleState.STOPPED:
                self.restore_signal_handlers()

    async def reload(self) -> None:
        """Run reload handlers without changing lifecycle state."""
        if not self._reload_handlers:
            self.logger.log_info("Reload requested but no reload handlers are registered")
            return
        for handler in self._reload_handlers:
            try:
                result = handler.handler()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                self.logger.log_error(f"Error in reload handler {handler.name}: {str(e)}")

    async def shutdown(self, reason: str = "requested") -> ShutdownOutcome:
        """
        Run the shutdown sequence once; later calls return the same outcome.
        """
        if self._outcome is not None:
            return self._outcome
        if self._shutdown_task is None:
            self._shutdown_requested = True
            self._shutdown_task = asyncio.ensure_future(self._execute_handlers(reason))
        return await asyncio.shield(self._shutdown_task)

    async def _execute_handlers(self, reason: str) -> ShutdownOutcome:
        """
        Execute registered handlers newest-first under one shared deadline.
        """
        self._set_state(LifecycleState.SHUTTING_DOWN)
        grace = self.config.grace_period
        self.logger.log_info("Starting graceful shutdown...", reason=reason, grace_period=grace)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + grace
        outcome = ShutdownOutcome.COMPLETED

        for handler in reversed(self._handlers):
            remaining = deadline - loop.time()
            if remaining <= 0:
                outcome = ShutdownOutcome.TIMED_OUT
                break

            self.logger.log_info(f"Executing shutdown handler: {handler.name}")
            task = asyncio.ensure_future(self._invoke(handler, remaining))
            done, _ = await asyncio.wait({task}, timeout=remaining)
            if not done:
                task.cancel()
                self.logger.log_warning(f"Shutdown handler {handler.name} did not finish before the deadline")
                outcome = ShutdownOutcome.TIMED_OUT
                break

            error = asyncio.CancelledError("handler was cancelled") if task.cancelled() else task.exception()
            if error is not None:
                self.failed_handlers.append(handler.name)
                self.logger.log_error(f"Error in shutdown handler {handler.name}: {str(error)}")
            elif task.result() is False:
                self.failed_handlers.append(handler.name)
                self.logger.log_error(f"Shutdown handler {handler.name} reported failure")

        if outcome is ShutdownOutcome.TIMED_OUT:
            self.logger.log_warning(
                f"Shutdown timed out after {grace} seconds. "
                "Some handlers may not have completed gracefully."
            )
        else:
            self.logger.log_info("Graceful shutdown completed")

        self._outcome = outcome
        self._set_state(LifecycleState.STOPPED)
        return outcome

    async def _invoke(self, handler: ShutdownHandler, remaining: float) -> Any:
        try:
            if asyncio.iscoroutinefunction(handler.handler):
                return await handler.handler(remaining)
            result = await self._run_in_thread(handler, remaining)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        except (SystemExit, KeyboardInterrupt) as e:
            raise RuntimeError(f"handler exited with {type(e).__name__}: {e}") from e

    async def _run_in_thread(self, handler: ShutdownHandler, remaining: float) -> Any:
        """Run a sync handler on a daemon thread so a stuck one can be abandoned."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def settle(result: Any, error: Optional[BaseException]) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        def run() -> None:
            try:
                result, error = handler.handler(remaining), None
            except Exception as e:
                result, error = None, e
            except BaseException as e:
                result, error = None, RuntimeError(f"handler exited with {type(e).__name__}: {e}")
            try:
                loop.call_soon_threadsafe(settle, result, error)
            except RuntimeError:
                # Loop already closed; the deadline passed long ago
                pass

        threading.Thread(target=run, name=f"shutdown-{handler.name}", daemon=True).start()
        return await future
