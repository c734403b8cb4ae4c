import threading

from django.conf import settings

from geohierarchy.locationdb.executor_interface import LocationDbType, LocationExecutor
from geohierarchy.locationdb.sqlalchemy_client import (
    PostgresLocationClient,
    SqliteLocationClient,
)


class LocationExecutorFactory:
    _client: LocationExecutor = None
    _client_lock = threading.Lock()

    @classmethod
    def connect(cls, creds: dict, dbtype: str, connection_config: dict = None) -> LocationExecutor:
        if dbtype == LocationDbType.POSTGRES:
            return PostgresLocationClient(creds, connection_config=connection_config)
        elif dbtype == LocationDbType.SQLITE:
            return SqliteLocationClient(creds.get("path"))
        else:
            raise ValueError(f"Location database type {dbtype} is not supported")

    @classmethod
    def _connect_from_settings(cls) -> LocationExecutor:
        db_config = getattr(settings, "LOCATION_DB", None)
        if not db_config:
            raise ValueError("Location database not configured")

        creds = {
            "host": db_config.get("HOST"),
            "port": db_config.get("PORT"),
            "database": db_config.get("NAME"),
            "username": db_config.get("USER") or "",
            "password": db_config.get("PASSWORD") or "",
            "sslmode": db_config.get("SSLMODE"),
            "path": db_config.get("PATH"),
        }
        connection_config = {
            "pool_size": db_config.get("POOL_SIZE", 5),
            "pool_timeout": db_config.get("POOL_TIMEOUT", 30),
        }
        return cls.connect(creds, db_config.get("TYPE"), connection_config)

    @classmethod
    def get_location_executor(cls) -> LocationExecutor:
        """client for settings.LOCATION_DB, created once per process"""
        if cls._client is None:
            with cls._client_lock:
                # another thread may have created it while we waited
                if cls._client is None:
                    cls._client = cls._connect_from_settings()
        return cls._client

    @classmethod
    def reset(cls):
        """drop the cached client, disposing its connection pool"""
        with cls._client_lock:
            if cls._client is not None:
                cls._client.dispose()
            cls._client = None
