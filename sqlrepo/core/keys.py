"""Generated key extraction for inserts returning database assigned identifiers."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Optional

from sqlrepo.core.type_conversion import coerce_key
from sqlrepo.exceptions import GeneratedKeyError, ImproperConfigurationError
from sqlrepo.typing import KeyT
from sqlrepo.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrepo.driver._common import GeneratedKeys
    from sqlrepo.driver._sync import SyncDriverAdapterBase

__all__ = ("GeneratedKeyExtractor", "GeneratedKeyResult")

logger = get_logger("core.keys")


@dataclass(frozen=True)
class GeneratedKeyResult(Generic[KeyT]):
    """Affected row count and generated key of an insert."""

    affected_rows: int
    key: KeyT


class GeneratedKeyExtractor:
    """Executes a mutation with generated key retrieval and picks the key to return."""

    __slots__ = ()

    def execute(
        self,
        executor: "SyncDriverAdapterBase",
        sql: str,
        parameters: "dict[str, Any]",
        key_type: Any = int,
        key_name: Optional[str] = None,
    ) -> "GeneratedKeyResult[Any]":
        generated = executor.execute_with_keys(sql, parameters)
        return self.extract(generated, key_type=key_type, key_name=key_name, sql=sql)

    def extract(
        self,
        generated: "GeneratedKeys",
        key_type: Any = int,
        key_name: Optional[str] = None,
        sql: str = "",
    ) -> "GeneratedKeyResult[Any]":
        """Select and coerce the generated key.

        Args:
            generated: Keys reported by the execution primitive.
            key_type: Declared key type.
            key_name: Key column named by the method, required when several keys are reported.
            sql: Statement text, used in diagnostics.

        Raises:
            ImproperConfigurationError: If several keys were generated and no key name is declared.
            GeneratedKeyError: If no key was generated or the key is NULL.

        Returns:
            The affected row count with the coerced key.
        """
        keys = generated.keys
        if len(keys) > 1:
            if key_name is None:
                msg = f"More than one key for query {sql!r}: the auto_generated_key directive is required"
                raise ImproperConfigurationError(msg)
            value = generated.get(key_name)
            if value is None:
                msg = f"The key with name {key_name!r} has returned null for query {sql!r}: a non null key is required"
                raise GeneratedKeyError(msg)
        elif keys:
            value = generated.get(key_name) if key_name is not None else None
            if value is None:
                value = next(iter(keys.values()))
            if value is None:
                msg = f"The generated key of query {sql!r} is null: a non null key is required"
                raise GeneratedKeyError(msg)
        else:
            msg = f"No generated key was returned for query {sql!r}"
            raise GeneratedKeyError(msg)

        logger.debug("Generated key %r for query %r", value, sql)
        return GeneratedKeyResult(affected_rows=generated.affected_rows, key=coerce_key(value, key_type))
