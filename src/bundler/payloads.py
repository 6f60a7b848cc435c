"""Payload resolvers: turn a module's opaque payload reference into bytes.

The bundler never interprets payload contents; it only asks a resolver for
them in the already-fixed order.
"""
from __future__ import annotations

import logging
import os
from typing import Mapping, Union

from registry.modules import ModuleRegistry
from resolution.errors import PayloadNotFound

logger = logging.getLogger(__name__)


class PayloadResolver:
    """Base class for payload resolvers."""

    def fetch(self, module_id: str) -> bytes:
        """Return the payload bytes for ``module_id``.

        Raises:
            PayloadNotFound: when the payload cannot be produced.
        """
        raise NotImplementedError


class FilePayloadResolver(PayloadResolver):
    """Reads ``<root>/<payload>`` for each module of a registry."""

    def __init__(self, registry: ModuleRegistry, root: str):
        self.registry = registry
        self.root = root

    def location(self, module_id: str) -> str:
        return os.path.join(self.root, self.registry.get(module_id).payload)

    def fetch(self, module_id: str) -> bytes:
        path = self.location(module_id)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except FileNotFoundError:
            raise PayloadNotFound(module_id, path) from None
        except OSError as e:
            logger.error("Failed to read payload %s: %s", path, e)
            raise PayloadNotFound(module_id, path) from e


class MappingPayloadResolver(PayloadResolver):
    """Serves payloads from an in-memory mapping of id -> text or bytes."""

    def __init__(self, payloads: Mapping[str, Union[str, bytes]]):
        self._payloads = dict(payloads)

    def fetch(self, module_id: str) -> bytes:
        try:
            value = self._payloads[module_id]
        except KeyError:
            raise PayloadNotFound(module_id, "<memory>") from None
        return value.encode("utf-8") if isinstance(value, str) else value
