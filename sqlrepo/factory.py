"""Creation of repository instances from contract classes.

Example:
    >>> class ConfQueries:
    ...     @query("SELECT CONF_VALUE FROM LA_CONF WHERE CONF_KEY = :key")
    ...     def find_value(self, key: Annotated[str, Bind("key")]) -> str: ...
    >>> repository = QueryFactory(driver).create(ConfQueries)
    >>> repository.find_value("BASE_URL")
"""

import inspect
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar, get_type_hints

from sqlrepo.core.descriptor import contract_members, describe_contract
from sqlrepo.dispatcher import QueryDispatcher
from sqlrepo.driver._sync import SyncDriverAdapterBase
from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.utils.logging import get_logger
from sqlrepo.utils.type_guards import is_subclass_of, split_annotated

if TYPE_CHECKING:
    from sqlrepo.config import RepositoryConfig
    from sqlrepo.core.descriptor import MethodDescriptor

__all__ = ("QueryFactory",)

logger = get_logger("factory")

ContractT = TypeVar("ContractT")


def _returns_executor(func: "Callable[..., Any]") -> bool:
    try:
        hints = get_type_hints(func)
    except (NameError, TypeError):
        return False
    annotation, _ = split_annotated(hints.get("return"))
    return is_subclass_of(annotation, SyncDriverAdapterBase)


def _copy_identity(method: "Callable[..., Any]", original: "Callable[..., Any]") -> None:
    method.__name__ = original.__name__
    method.__qualname__ = original.__qualname__
    method.__doc__ = original.__doc__
    method.__module__ = original.__module__


class QueryFactory:
    """Builds repository instances bound to one execution primitive.

    Each contract class is described once: its query methods become entries of
    a dispatch table implemented by a generated subclass, and the generated
    class is reused for every later :meth:`create` call.
    """

    __slots__ = ("_lock", "_repository_types", "dispatcher", "executor")

    def __init__(self, executor: SyncDriverAdapterBase, config: "Optional[RepositoryConfig]" = None) -> None:
        self.executor = executor
        self.dispatcher = QueryDispatcher(executor, config)
        self._repository_types: dict[type, type] = {}
        self._lock = threading.Lock()

    def create(self, contract: "type[ContractT]") -> ContractT:
        """Return a repository implementing ``contract``.

        Raises:
            ImproperConfigurationError: If the contract has an abstract method without a query,
                or a query method whose arguments or result cannot be handled.
        """
        repository_type = self._repository_types.get(contract)
        if repository_type is None:
            repository_type = self._build(contract)
            with self._lock:
                self._repository_types[contract] = repository_type
        return repository_type()

    def _build(self, contract: "type[Any]") -> "type[Any]":
        descriptors = describe_contract(contract)
        namespace: dict[str, Any] = {"__module__": contract.__module__, "__sqlrepo_descriptors__": descriptors}
        for name, attribute in contract_members(contract).items():
            if not inspect.isfunction(attribute):
                continue
            descriptor = descriptors.get(name)
            if descriptor is not None:
                self.dispatcher.validate(descriptor)
                namespace[name] = self._dispatch_function(descriptor, attribute)
            elif _returns_executor(attribute):
                namespace[name] = self._executor_function(attribute)
            elif getattr(attribute, "__isabstractmethod__", False):
                msg = f"Method {contract.__qualname__}.{name} has neither a query nor an implementation"
                raise ImproperConfigurationError(msg)

        repository_type = type(f"{contract.__name__}Repository", (contract,), namespace)
        logger.debug("Created repository %s with %d query methods", repository_type.__name__, len(descriptors))
        return repository_type

    def _dispatch_function(
        self, descriptor: "MethodDescriptor", original: "Callable[..., Any]"
    ) -> "Callable[..., Any]":
        dispatcher = self.dispatcher

        def method(instance: Any, *args: Any, **kwargs: Any) -> Any:
            arguments = descriptor.bind_arguments(instance, args, kwargs)
            return dispatcher.invoke(descriptor, arguments)

        _copy_identity(method, original)
        return method

    def _executor_function(self, original: "Callable[..., Any]") -> "Callable[..., Any]":
        executor = self.executor

        def method(instance: Any, *args: Any, **kwargs: Any) -> SyncDriverAdapterBase:
            return executor

        _copy_identity(method, original)
        return method
