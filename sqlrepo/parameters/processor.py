"""Turns call arguments into named bind values through the parameter converter chain."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional

from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.parameters._base import AdvancedParameterConverter, ParameterContext, ParameterConverter

if TYPE_CHECKING:
    from sqlrepo.core.chain import PluginChain
    from sqlrepo.core.descriptor import BindParameter
    from sqlrepo.driver._sync import SyncDriverAdapterBase

__all__ = ("ParameterProcessor",)


def _type_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


class ParameterProcessor:
    """Applies the first accepting converter, by ascending priority, to each bound argument."""

    __slots__ = ("converters", "executor")

    def __init__(
        self, converters: "PluginChain[ParameterConverter]", executor: "Optional[SyncDriverAdapterBase]" = None
    ) -> None:
        self.converters = converters
        self.executor = executor

    def converter_for(self, bind: "BindParameter") -> ParameterConverter:
        """Return the converter handling ``bind``.

        Raises:
            ImproperConfigurationError: If no converter accepts the declared type.
        """
        converter = self.converters.find(bind.declared_type, bind.annotations)
        if converter is None:
            msg = (
                f"No parameter converter accepts the type {_type_name(bind.declared_type)} "
                f"of the argument bound to {bind.bind_name!r}"
            )
            raise ImproperConfigurationError(msg)
        return converter

    def validate(self, binds: "Sequence[BindParameter]") -> None:
        """Check up front that every bound argument has a converter."""
        for bind in binds:
            if bind.bind_name is not None:
                self.converter_for(bind)

    def process(self, binds: "Sequence[BindParameter]", arguments: "Sequence[Any]") -> "dict[str, Any]":
        """Build the bind values of one invocation.

        Args:
            binds: Bind specification of the method.
            arguments: Call arguments, ``self`` excluded, in declaration order.

        Raises:
            ImproperConfigurationError: If an argument has no accepting converter.

        Returns:
            Bind values keyed by placeholder name.
        """
        parameters: dict[str, Any] = {}
        with ParameterContext(self.executor) as context:
            for bind in binds:
                if bind.bind_name is None:
                    continue
                value = arguments[bind.argument_position]
                converter = self.converter_for(bind)
                if isinstance(converter, AdvancedParameterConverter):
                    converter.bind_with_context(
                        bind.bind_name, value, bind.declared_type, bind.annotations, parameters, context
                    )
                else:
                    converter.bind(bind.bind_name, value, bind.declared_type, bind.annotations, parameters)
        return parameters
