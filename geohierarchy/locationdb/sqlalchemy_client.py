import re
import tempfile

from sqlalchemy import text
from sqlalchemy.engine import Engine, create_engine
from sqlalchemy.pool import StaticPool

from geohierarchy.locationdb.executor_interface import LocationDbType, LocationExecutor

POSITIONAL_PLACEHOLDER = re.compile(r"\$(\d+)")

DEFAULT_CONNECTION_CONFIG = {
    "pool_size": 5,
    "pool_timeout": 30,
}


def to_named_binds(sql_statement: str, params: list) -> tuple[str, dict]:
    """
    Rewrite $1..$n placeholders to the :p1..:pn binds sqlalchemy's text() understands
    Every placeholder must have a matching entry in params
    """
    used = set()

    def replace(match: re.Match) -> str:
        position = int(match.group(1))
        if position < 1 or position > len(params):
            raise ValueError(f"No parameter bound for placeholder ${position}")
        used.add(position)
        return f":p{position}"

    statement = POSITIONAL_PLACEHOLDER.sub(replace, sql_statement)
    return statement, {f"p{position}": params[position - 1] for position in used}


class SqlAlchemyLocationClient(LocationExecutor):
    """runs hierarchy statements on a sqlalchemy engine"""

    engine: Engine = None

    def execute(self, sql_statement: str, params: list = None) -> list[dict]:
        """
        Execute the sql query and return the results
        """
        statement, bind_params = to_named_binds(sql_statement, params or [])
        with self.engine.connect() as connection:
            result = connection.execute(text(statement), bind_params)
            rows = result.fetchall()
            return [dict(row._mapping) for row in rows]

    def dispose(self):
        """close all pooled connections"""
        self.engine.dispose()


class PostgresLocationClient(SqlAlchemyLocationClient):
    def __init__(self, creds: dict, connection_config: dict = None):
        """
        Establish connection to the postgres database using sqlalchemy engine
        Creds come from settings.LOCATION_DB
        """
        connection_args = {
            "host": creds["host"],
            "port": creds["port"],
            "dbname": creds["database"],
            "user": creds["username"].strip(),
            "password": creds["password"],
        }

        if "sslrootcert" in creds and creds["sslrootcert"]:
            connection_args["sslrootcert"] = creds["sslrootcert"]

        if "sslmode" in creds and isinstance(creds["sslmode"], str) and creds["sslmode"]:
            connection_args["sslmode"] = creds["sslmode"]

        if "sslmode" in creds and isinstance(creds["sslmode"], bool):
            connection_args["sslmode"] = "require" if creds["sslmode"] else "disable"

        if (
            "sslmode" in creds
            and isinstance(creds["sslmode"], dict)
            and "ca_certificate" in creds["sslmode"]
        ):
            # sslrootcert needs a file path, the certificate itself is written to disk
            with tempfile.NamedTemporaryFile(delete=False) as fp:
                fp.write(creds["sslmode"]["ca_certificate"].encode())
                connection_args["sslrootcert"] = fp.name

        pool_config = {**DEFAULT_CONNECTION_CONFIG, **(connection_config or {})}
        self.engine = create_engine(
            "postgresql+psycopg2://",
            connect_args=connection_args,
            pool_size=pool_config["pool_size"],
            pool_timeout=pool_config["pool_timeout"],
        )

    def get_dbtype(self):
        return LocationDbType.POSTGRES


class SqliteLocationClient(SqlAlchemyLocationClient):
    def __init__(self, db_path: str = None):
        """
        sqlite database at db_path; in memory when db_path is empty or ":memory:"
        An in memory database is shared by every connection of this client
        """
        if not db_path or db_path == ":memory:":
            self.engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(f"sqlite:///{db_path}")

    def get_dbtype(self):
        return LocationDbType.SQLITE
