"""Typed interfaces for executor-layer responsibilities."""

from typing import Mapping, Protocol

from app.domain import ExecutorOutcome


class ModeHandlerPort(Protocol):
    """Port definition for one task kind keyed by its mode discriminator."""

    def handler_mode(self) -> str:
        """Return the mode discriminator served by this handler.

        Returns:
            str: Mode value as sent by clients.

        Raises:
            RuntimeError: Raised when mode metadata is unavailable.
        """

    def handler_is_ready(self) -> bool:
        """Return whether the handler can accept work.

        Returns:
            bool: True when underlying resources are started.

        Raises:
            RuntimeError: Raised when readiness cannot be determined.
        """

    async def handler_startup(self) -> None:
        """Acquire underlying resources.

        Returns:
            None: Startup completes as side effect.

        Raises:
            RuntimeError: Raised when resources cannot be acquired.
        """

    async def handler_shutdown(self) -> None:
        """Release underlying resources.

        Returns:
            None: Shutdown completes as side effect.

        Raises:
            RuntimeError: Raised when resources cannot be released.
        """

    async def handler_run(self, payload: Mapping[str, object]) -> dict[str, object]:
        """Perform one task and return result fields.

        Args:
            payload: Job payload including the mode discriminator.

        Returns:
            dict[str, object]: JSON-serializable result fields.

        Raises:
            ExecutorFailure: Raised when the attempt failed.
        """


class ExecutorPort(Protocol):
    """Port definition for the capability that executes job payloads."""

    def executor_supported_modes(self) -> tuple[str, ...]:
        """Return mode discriminators this executor can dispatch.

        Returns:
            tuple[str, ...]: Deterministic list of supported modes.

        Raises:
            RuntimeError: Raised when mode metadata is unavailable.
        """

    def executor_is_ready(self) -> bool:
        """Return whether the executor can accept work.

        Returns:
            bool: True when every handler is ready.

        Raises:
            RuntimeError: Raised when readiness cannot be determined.
        """

    async def executor_startup(self) -> None:
        """Start underlying resources of every handler.

        Returns:
            None: Startup completes as side effect.

        Raises:
            RuntimeError: Raised when resources cannot be acquired.
        """

    async def executor_shutdown(self) -> None:
        """Stop underlying resources of every handler.

        Returns:
            None: Shutdown completes as side effect.

        Raises:
            RuntimeError: Raised when resources cannot be released.
        """

    async def executor_run(self, payload: Mapping[str, object]) -> ExecutorOutcome:
        """Execute one payload and return its tagged outcome.

        Args:
            payload: Job payload including the mode discriminator.

        Returns:
            ExecutorOutcome: Outcome with code 500 for any failure.

        Raises:
            RuntimeError: This contract does not raise; failures are outcomes.
        """
