# Abstract key-value cache interface the catalog repositories are written against
from abc import ABC, abstractmethod
from typing import Optional


class CacheUnavailableError(Exception):
    """The cache backend could not serve a request. Never fatal to a caller whose store write succeeded."""


class CacheStore(ABC):
    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    @abstractmethod
    def exists(self, cache_key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get(self, cache_key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, cache_key: str, value: str, ttl_seconds: Optional[int] = None) -> bool:
        raise NotImplementedError

    @abstractmethod
    def expire(self, cache_key: str, ttl_seconds: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, cache_key: str) -> bool:
        raise NotImplementedError
