"""Engine configuration: active backend and plugin chain assembly."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional

from sqlrepo.core.chain import build_chain
from sqlrepo.mapping.columns import default_column_mapper_factories
from sqlrepo.parameters.converters import default_parameter_converters
from sqlrepo.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrepo.core.chain import PluginChain
    from sqlrepo.mapping._base import ColumnMapperFactory
    from sqlrepo.parameters._base import ParameterConverter

__all__ = ("RepositoryConfig",)

logger = get_logger("config")


class RepositoryConfig:
    """Configuration of a repository factory.

    Plugins are supplied once, at construction; the resulting chains are
    immutable. Additional plugins are registered after the defaults, so at
    equal priority a default plugin is consulted first.

    Args:
        active_db: Identifier of the backend in use, selecting query overrides.
            Defaults to the dialect of the execution primitive.
        column_mapper_factories: Additional column mapper factories.
        parameter_converters: Additional parameter converters.
        exclude_column_mapper_factories: Default factory classes to leave out.
        exclude_parameter_converters: Default converter classes to leave out.
        use_default_column_mappers: Start from the built-in factories.
        use_default_parameter_converters: Start from the built-in converters.
    """

    __slots__ = (
        "_column_mapper_chain",
        "_parameter_converter_chain",
        "active_db",
        "column_mapper_factories",
        "exclude_column_mapper_factories",
        "exclude_parameter_converters",
        "parameter_converters",
        "use_default_column_mappers",
        "use_default_parameter_converters",
    )

    def __init__(
        self,
        *,
        active_db: Optional[str] = None,
        column_mapper_factories: "Sequence[ColumnMapperFactory]" = (),
        parameter_converters: "Sequence[ParameterConverter]" = (),
        exclude_column_mapper_factories: "Sequence[type[ColumnMapperFactory]]" = (),
        exclude_parameter_converters: "Sequence[type[ParameterConverter]]" = (),
        use_default_column_mappers: bool = True,
        use_default_parameter_converters: bool = True,
    ) -> None:
        self.active_db = active_db
        self.column_mapper_factories = tuple(column_mapper_factories)
        self.parameter_converters = tuple(parameter_converters)
        self.exclude_column_mapper_factories = tuple(exclude_column_mapper_factories)
        self.exclude_parameter_converters = tuple(exclude_parameter_converters)
        self.use_default_column_mappers = use_default_column_mappers
        self.use_default_parameter_converters = use_default_parameter_converters
        self._column_mapper_chain = self._build_column_mapper_chain()
        self._parameter_converter_chain = self._build_parameter_converter_chain()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(active_db={self.active_db!r}, "
            f"column_mapper_factories={len(self.column_mapper_factories)}, "
            f"parameter_converters={len(self.parameter_converters)})"
        )

    @property
    def column_mapper_chain(self) -> "PluginChain[ColumnMapperFactory]":
        return self._column_mapper_chain

    @property
    def parameter_converter_chain(self) -> "PluginChain[ParameterConverter]":
        return self._parameter_converter_chain

    def _build_column_mapper_chain(self) -> "PluginChain[ColumnMapperFactory]":
        chain = build_chain(
            default_column_mapper_factories(),
            self.column_mapper_factories,
            self.exclude_column_mapper_factories,
            use_defaults=self.use_default_column_mappers,
            kind="column mapper factory",
        )
        if not any(factory.catch_all for factory in chain):
            logger.warning(
                "No catch-all column mapper factory configured; unmatched types fall back to the execution primitive"
            )
        return chain

    def _build_parameter_converter_chain(self) -> "PluginChain[ParameterConverter]":
        chain = build_chain(
            default_parameter_converters(),
            self.parameter_converters,
            self.exclude_parameter_converters,
            use_defaults=self.use_default_parameter_converters,
            kind="parameter converter",
        )
        if not any(converter.catch_all for converter in chain):
            logger.debug("No catch-all parameter converter configured; unmatched argument types are rejected")
        return chain

    def resolve_active_db(self, default: Optional[str] = None) -> Optional[str]:
        """Return the configured backend identifier, or ``default`` when none is set."""
        return self.active_db if self.active_db is not None else default
