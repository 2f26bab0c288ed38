"""Mapping of result rows to typed values."""

from sqlrepo.mapping._base import ColumnMapper, ColumnMapperFactory, ColumnRowMapper, RowMapper, SingleColumnRowMapper
from sqlrepo.mapping.columns import (
    BooleanColumnMapperFactory,
    DateColumnMapperFactory,
    DateTimeColumnMapperFactory,
    DefaultColumnMapperFactory,
    EnumColumnMapperFactory,
    JsonColumnMapperFactory,
    default_column_mapper_factories,
)
from sqlrepo.mapping.constructor import ConstructorRowMapper, RowBinding, has_row_constructor, row_constructor
from sqlrepo.mapping.resolver import NOT_APPLICABLE, Found, MapperCache, RowMapperResolver

__all__ = (
    "NOT_APPLICABLE",
    "BooleanColumnMapperFactory",
    "ColumnMapper",
    "ColumnMapperFactory",
    "ColumnRowMapper",
    "ConstructorRowMapper",
    "DateColumnMapperFactory",
    "DateTimeColumnMapperFactory",
    "DefaultColumnMapperFactory",
    "EnumColumnMapperFactory",
    "Found",
    "JsonColumnMapperFactory",
    "MapperCache",
    "RowBinding",
    "RowMapper",
    "RowMapperResolver",
    "SingleColumnRowMapper",
    "default_column_mapper_factories",
    "has_row_constructor",
    "row_constructor",
)
