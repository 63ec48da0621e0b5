"""Interfaces and basic implementations for secret resolution."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping


class SecretNotFoundError(KeyError):
    """Raised when a secret cannot be resolved."""


class SecretProvider(ABC):
    """Abstract secret lookup contract."""

    @abstractmethod
    def get_secret(self, key: str) -> str:
        """Return the secret associated with ``key``."""


class EnvSecretProvider(SecretProvider):
    """Reads secrets from environment variables, e.g. ``FFPUB_PASSWORD``."""

    def __init__(self, prefix: str = "", env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else os.environ
        self._prefix = prefix

    def get_secret(self, key: str) -> str:
        compound = f"{self._prefix}{key}" if self._prefix else key
        name = compound.upper().replace(".", "_")
        value = self._env.get(name)
        if not value:
            raise SecretNotFoundError(compound)
        return value


class MappingSecretProvider(SecretProvider):
    """Looks secrets up in a plain mapping such as the parsed config file."""

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self._mapping = mapping

    def get_secret(self, key: str) -> str:
        try:
            value = self._mapping[key]
        except KeyError as exc:
            raise SecretNotFoundError(key) from exc
        if value is None:
            raise SecretNotFoundError(key)
        return str(value)


class ChainedSecretProvider(SecretProvider):
    """Tries multiple providers until one returns a secret."""

    def __init__(self, providers: Iterable[SecretProvider]) -> None:
        self._providers = tuple(providers)

    def get_secret(self, key: str) -> str:
        for provider in self._providers:
            try:
                return provider.get_secret(key)
            except SecretNotFoundError:
                continue
        raise SecretNotFoundError(key)

    def get_secret_or(self, key: str, default: str) -> str:
        try:
            return self.get_secret(key)
        except SecretNotFoundError:
            return default


__all__ = [
    "ChainedSecretProvider",
    "EnvSecretProvider",
    "MappingSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
]
