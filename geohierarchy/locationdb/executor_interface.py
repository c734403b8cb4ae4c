from abc import ABC, abstractmethod
from enum import Enum


class LocationDbType(str, Enum):
    """
    database types the hierarchy tables can be read from; same as settings.LOCATION_DB["TYPE"]
    """

    POSTGRES = "postgres"
    SQLITE = "sqlite"


class LocationExecutor(ABC):
    @abstractmethod
    def execute(self, sql_statement: str, params: list) -> list[dict]:
        """run a statement with $1..$n placeholders bound to params, in order"""

    @abstractmethod
    def get_dbtype(self):
        pass
