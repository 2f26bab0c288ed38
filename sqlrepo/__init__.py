"""sqlrepo: declarative repositories over plain SQL."""

from sqlrepo import adapters, core, driver, exceptions, mapping, parameters, typing, utils
from sqlrepo.__metadata__ import __version__
from sqlrepo.config import RepositoryConfig
from sqlrepo.core import (
    LOWEST_PRIORITY,
    AsJson,
    Bind,
    Column,
    GeneratedKeyResult,
    QueryMode,
    auto_generated_key,
    query,
    query_override,
)
from sqlrepo.dispatcher import QueryDispatcher
from sqlrepo.driver import GeneratedKeys, ResultRow, SyncDriverAdapterBase
from sqlrepo.exceptions import (
    DataError,
    GeneratedKeyError,
    ImproperConfigurationError,
    MappingError,
    MultipleResultsFoundError,
    NotFoundError,
    SQLRepoError,
)
from sqlrepo.factory import QueryFactory
from sqlrepo.mapping import ColumnMapper, ColumnMapperFactory, RowMapper, row_constructor
from sqlrepo.parameters import AdvancedParameterConverter, ParameterContext, ParameterConverter
from sqlrepo.typing import Empty

__all__ = (
    "LOWEST_PRIORITY",
    "AdvancedParameterConverter",
    "AsJson",
    "Bind",
    "Column",
    "ColumnMapper",
    "ColumnMapperFactory",
    "DataError",
    "Empty",
    "GeneratedKeyError",
    "GeneratedKeyResult",
    "GeneratedKeys",
    "ImproperConfigurationError",
    "MappingError",
    "MultipleResultsFoundError",
    "NotFoundError",
    "ParameterContext",
    "ParameterConverter",
    "QueryDispatcher",
    "QueryFactory",
    "QueryMode",
    "RepositoryConfig",
    "ResultRow",
    "RowMapper",
    "SQLRepoError",
    "SyncDriverAdapterBase",
    "__version__",
    "adapters",
    "auto_generated_key",
    "core",
    "driver",
    "exceptions",
    "mapping",
    "parameters",
    "query",
    "query_override",
    "row_constructor",
    "typing",
    "utils",
)
