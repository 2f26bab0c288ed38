"""Conversion of call arguments into bind values."""

from sqlrepo.parameters._base import AdvancedParameterConverter, ParameterContext, ParameterConverter
from sqlrepo.parameters.converters import (
    DateTimeParameterConverter,
    DefaultParameterConverter,
    EnumParameterConverter,
    JsonParameterConverter,
    default_parameter_converters,
)
from sqlrepo.parameters.processor import ParameterProcessor

__all__ = (
    "AdvancedParameterConverter",
    "DateTimeParameterConverter",
    "DefaultParameterConverter",
    "EnumParameterConverter",
    "JsonParameterConverter",
    "ParameterContext",
    "ParameterConverter",
    "ParameterProcessor",
    "default_parameter_converters",
)
