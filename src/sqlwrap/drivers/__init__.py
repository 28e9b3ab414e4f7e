"""Built-in database drivers."""

from sqlwrap.driver import Driver
from sqlwrap.drivers.sqlite import SQLiteDriver

# Engine name -> driver class
DRIVERS: dict[str, type[Driver]] = {
    SQLiteDriver.name: SQLiteDriver,
}

__all__ = [
    "DRIVERS",
    "SQLiteDriver",
]
