"""Mode-dispatching executor composed of per-mode handlers."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from app.domain import ExecutorOutcome

from .interfaces import ExecutorPort, ModeHandlerPort

logger = logging.getLogger(__name__)

FAILURE_CODE = 500
SUCCESS_CODE = 200


class ModeDispatchExecutor(ExecutorPort):
    """Executor routing each payload to the handler registered for its mode."""

    def __init__(self, handlers: Iterable[ModeHandlerPort]):
        """Initialize executor with handlers keyed by their mode.

        Args:
            handlers: Mode handlers; each mode may be registered once.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when two handlers claim the same mode.
        """

        self._handlers: dict[str, ModeHandlerPort] = {}
        for handler in handlers:
            mode = handler.handler_mode()
            if mode in self._handlers:
                raise ValueError(f"duplicate handler for mode {mode!r}")
            self._handlers[mode] = handler

    def executor_supported_modes(self) -> tuple[str, ...]:
        """Return registered modes in registration order."""

        return tuple(self._handlers)

    def executor_is_ready(self) -> bool:
        """Return whether every registered handler is ready."""

        return bool(self._handlers) and all(handler.handler_is_ready() for handler in self._handlers.values())

    async def executor_startup(self) -> None:
        """Start every handler; a failing handler stays not ready.

        Returns:
            None: Startup completes as side effect.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        for mode, handler in self._handlers.items():
            try:
                await handler.handler_startup()
            except Exception:
                logger.exception("Executor handler for mode %r failed to start", mode)

    async def executor_shutdown(self) -> None:
        """Stop every handler.

        Returns:
            None: Shutdown completes as side effect.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        for mode, handler in self._handlers.items():
            try:
                await handler.handler_shutdown()
            except Exception:
                logger.exception("Executor handler for mode %r failed to stop", mode)

    async def executor_run(self, payload: Mapping[str, object]) -> ExecutorOutcome:
        """Dispatch payload by mode and normalize every failure to code 500.

        Args:
            payload: Job payload including the mode discriminator.

        Returns:
            ExecutorOutcome: Success outcome with handler fields, or failure outcome.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        mode = str(payload.get("mode", ""))
        handler = self._handlers.get(mode)
        if handler is None:
            return ExecutorOutcome(code=FAILURE_CODE, message=f"unsupported mode: {mode!r}")

        try:
            result_fields = await handler.handler_run(payload)
        except Exception as error:
            logger.warning("Executor attempt for mode %r failed: %s", mode, error)
            return ExecutorOutcome(code=FAILURE_CODE, message=str(error) or error.__class__.__name__)

        return ExecutorOutcome(code=SUCCESS_CODE, payload=dict(result_fields))
