"""Execution primitive base classes and result rows."""

from sqlrepo.driver._common import GeneratedKeys, ResultColumns, ResultRow
from sqlrepo.driver._sync import SyncDriverAdapterBase

__all__ = ("GeneratedKeys", "ResultColumns", "ResultRow", "SyncDriverAdapterBase")
