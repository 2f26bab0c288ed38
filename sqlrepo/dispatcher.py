"""Per invocation execution of query methods."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from sqlrepo.config import RepositoryConfig
from sqlrepo.core.actions import StatementAction, classify_action
from sqlrepo.core.descriptor import ReturnShape
from sqlrepo.core.keys import GeneratedKeyExtractor
from sqlrepo.core.query import QueryMode, resolve_query_text
from sqlrepo.exceptions import MultipleResultsFoundError
from sqlrepo.mapping.resolver import RowMapperResolver
from sqlrepo.parameters.processor import ParameterProcessor
from sqlrepo.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlrepo.core.descriptor import MethodDescriptor
    from sqlrepo.driver._sync import SyncDriverAdapterBase

__all__ = ("QueryDispatcher",)

logger = get_logger("dispatcher")


class QueryDispatcher:
    """Runs query methods against an execution primitive.

    Each invocation resolves the query text for the active backend, builds the
    bind values through the parameter converter chain, classifies the action
    and shapes the result according to the method's declared return.
    """

    __slots__ = ("active_db", "executor", "key_extractor", "parameters", "resolver")

    def __init__(self, executor: "SyncDriverAdapterBase", config: Optional[RepositoryConfig] = None) -> None:
        config = config or RepositoryConfig()
        self.executor = executor
        self.active_db = config.resolve_active_db(executor.dialect or None)
        self.parameters = ParameterProcessor(config.parameter_converter_chain, executor)
        self.resolver = RowMapperResolver(config.column_mapper_chain, fallback=executor.single_column_mapper)
        self.key_extractor = GeneratedKeyExtractor()

    def validate(self, descriptor: "MethodDescriptor") -> None:
        """Fail early when an argument of ``descriptor`` has no parameter converter.

        Raises:
            ImproperConfigurationError: If a bound argument type is not accepted by any converter.
        """
        self.parameters.validate(descriptor.binds)

    def invoke(self, descriptor: "MethodDescriptor", arguments: "Sequence[Any]") -> Any:
        """Execute one call of a query method.

        Args:
            descriptor: Call descriptor of the method.
            arguments: Call arguments, ``self`` excluded, in declaration order.

        Returns:
            The query text for template methods, otherwise the shaped result.
        """
        metadata = descriptor.metadata
        text = resolve_query_text(self.active_db, metadata)
        if metadata.mode is QueryMode.TEMPLATE:
            return text

        parameters = self.parameters.process(descriptor.binds, arguments)
        return_type = descriptor.return_type
        action = classify_action(metadata.mode, text, return_type.returns_generated_key)
        log_with_context(
            logger,
            logging.DEBUG,
            "Dispatching %s",
            descriptor.name,
            method=descriptor.name,
            action=action.value,
            shape=return_type.shape.value,
            active_db=self.active_db,
        )

        if action is StatementAction.INSERT_WITH_KEY:
            return self.key_extractor.execute(
                self.executor, text, parameters, return_type.element_type, descriptor.generated_key_name
            )
        if action is StatementAction.UPDATE or return_type.shape is ReturnShape.NONE:
            count = self.executor.execute(text, parameters)
            return None if return_type.shape is ReturnShape.NONE else count
        return self._query(descriptor, text, parameters)

    def _query(self, descriptor: "MethodDescriptor", text: str, parameters: "dict[str, Any]") -> Any:
        return_type = descriptor.return_type
        row_mapper = self.resolver.resolve(
            return_type.element_type, descriptor.metadata.explicit_row_mapper, return_type.markers
        )
        if return_type.shape is ReturnShape.LIST:
            return self.executor.select(text, parameters, row_mapper)
        if return_type.shape is ReturnShape.OPTIONAL:
            rows = self.executor.select(text, parameters, row_mapper)
            if len(rows) > 1:
                raise MultipleResultsFoundError(len(rows))
            return rows[0] if rows else None
        return self.executor.select_one(text, parameters, row_mapper)
