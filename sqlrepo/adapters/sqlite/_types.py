import sqlite3

from typing_extensions import TypeAlias

SqliteConnection: TypeAlias = sqlite3.Connection

__all__ = ("SqliteConnection",)
