from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database


@dataclass
class MongoConfig:
    uri: str
    database: str

    @classmethod
    def from_settings(cls, mongo_config: dict) -> "MongoConfig":
        return cls(
            uri=str(mongo_config.get("uri", "mongodb://localhost:27017")),
            database=str(mongo_config.get("database", "school_attendance")),
        )


class MongoConnection:
    """Singleton-like holder of the process-wide MongoClient.

    pymongo pools connections itself, so unlike MySQL we keep one client around.
    """

    _instance: Optional["MongoConnection"] = None

    def __init__(self, config: MongoConfig, *, client: Optional[MongoClient] = None):
        self._config = config
        self._client = client

    @classmethod
    def get_instance(cls, config: MongoConfig) -> "MongoConnection":
        if cls._instance is None:
            cls._instance = MongoConnection(config)
        return cls._instance

    def client(self) -> MongoClient:
        if self._client is None:
            self._client = MongoClient(self._config.uri, tz_aware=False)
        return self._client

    def database(self) -> Database:
        return self.client()[self._config.database]
