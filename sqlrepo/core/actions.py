"""Classification of an invocation as a query, a mutation or an insert with generated key."""

import re
from enum import Enum
from typing import Final

from sqlrepo.core.query import QueryMode

__all__ = ("StatementAction", "classify_action", "is_select_statement")

_IGNORED_CHARACTERS: Final = re.compile(r"[()\s]+")


class StatementAction(Enum):
    QUERY = "query"
    UPDATE = "update"
    INSERT_WITH_KEY = "insert_with_key"


def is_select_statement(text: str) -> bool:
    """Check whether a statement reads rows, ignoring parentheses, whitespace and case.

    Example:
        >>> is_select_statement(" ( SELECT 1 ) ")
        True
        >>> is_select_statement("update t set x=1")
        False
    """
    return _IGNORED_CHARACTERS.sub("", text).lower().startswith("select")


def classify_action(mode: QueryMode, text: str, returns_generated_key: bool = False) -> StatementAction:
    """Decide how an invocation is executed.

    Args:
        mode: Declared query mode.
        text: Resolved query text.
        returns_generated_key: Whether the method declares a ``GeneratedKeyResult`` return.

    Returns:
        The action to perform.
    """
    if returns_generated_key:
        return StatementAction.INSERT_WITH_KEY
    if mode in {QueryMode.SELECT, QueryMode.MODIFYING_WITH_RETURN}:
        return StatementAction.QUERY
    if mode is QueryMode.MODIFYING:
        return StatementAction.UPDATE
    return StatementAction.QUERY if is_select_statement(text) else StatementAction.UPDATE
