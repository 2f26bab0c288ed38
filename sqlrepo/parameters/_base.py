"""Parameter converter abstractions."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from sqlrepo.core.chain import LOWEST_PRIORITY
from sqlrepo.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlrepo.driver._sync import SyncDriverAdapterBase

__all__ = ("AdvancedParameterConverter", "ParameterContext", "ParameterConverter")


class ParameterConverter(ABC):
    """Turns one typed call argument into one or more named bind values."""

    priority: ClassVar[int] = LOWEST_PRIORITY
    catch_all: ClassVar[bool] = False

    @abstractmethod
    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        """Return True when this converter binds arguments declared as ``target_type``."""

    @abstractmethod
    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        """Add the bind value(s) for argument ``name`` to ``parameters``."""


class ParameterContext:
    """Per invocation context handed to advanced converters.

    Gives access to the execution primitive and to a database connection
    acquired on first use. Everything acquired through the context is released
    when the context closes, whether the conversion succeeded or not.
    """

    __slots__ = ("_connection", "_stack", "executor")

    def __init__(self, executor: "Optional[SyncDriverAdapterBase]" = None) -> None:
        self.executor = executor
        self._stack = ExitStack()
        self._connection: Any = None

    def __enter__(self) -> "ParameterContext":
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close()

    def connection(self) -> Any:
        """Return the scoped connection, acquiring it from the executor on first call.

        Raises:
            ImproperConfigurationError: If the context was created without an executor.
        """
        if self._connection is None:
            if self.executor is None:
                msg = "No execution primitive available to provide a connection"
                raise ImproperConfigurationError(msg)
            self._connection = self._stack.enter_context(self.executor.provide_connection())
        return self._connection

    def close(self) -> None:
        self._connection = None
        self._stack.close()


class AdvancedParameterConverter(ParameterConverter):
    """A converter that needs the invocation context, e.g. to create driver specific values."""

    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        msg = f"{type(self).__name__}.bind should not be executed; use bind_with_context"
        raise NotImplementedError(msg)

    @abstractmethod
    def bind_with_context(
        self,
        name: str,
        value: Any,
        target_type: Any,
        annotations: "Sequence[Any]",
        parameters: "dict[str, Any]",
        context: ParameterContext,
    ) -> None:
        """Add the bind value(s) for argument ``name`` using ``context``."""
