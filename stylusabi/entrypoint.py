"""The program entrypoint: calldata in, status and output out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .external import Router

__all__ = ["Entrypoint"]

logger = logging.getLogger(__name__)


@dataclass
class Entrypoint:
    """Where execution begins.

    The target is either a :class:`Router`, whose storage ``storage_factory``
    creates for each invocation, or a function taking the calldata and returning
    output bytes (raising an exception with ``to_revert_data`` to revert).
    Reentrant invocations revert unless ``allow_reentrant`` is set, and
    ``on_exit`` runs before the output is produced.
    """

    target: Router | Callable[[bytes], bytes]
    storage_factory: Callable[[], Any] | None = None
    allow_reentrant: bool = False
    on_exit: Callable[[], None] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.target, Router):
            if self.storage_factory is None:
                raise ValueError("a router entrypoint needs a storage factory")
        elif not callable(self.target):
            raise TypeError("not a struct or fn")
        elif self.storage_factory is not None:
            raise ValueError("a function entrypoint takes no storage")

    def dispatch(self, storage: Any, data: bytes, value: int = 0) -> tuple[bool, bytes]:
        """Run the target on ``data``; returns ``(success, output)``."""
        data = bytes(data)
        if isinstance(self.target, Router):
            if len(data) < 4:
                logger.debug("calldata too short: %s", data.hex())
                return False, b""
            selector = int.from_bytes(data[:4], "big")
            result = self.target.route(storage, selector, data[4:], value)
            if result is None:
                logger.debug("unknown method selector: %08x", selector)
                return False, b""
            return result
        try:
            return True, bytes(self.target(data))
        except Exception as err:
            to_revert_data = getattr(err, "to_revert_data", None)
            if to_revert_data is None:
                raise
            return False, bytes(to_revert_data())

    def user_entrypoint(
        self, data: bytes, reentrant: bool = False, value: int = 0
    ) -> tuple[int, bytes]:
        """Handle one invocation; returns status 0 on success, 1 on revert, and the output."""
        if reentrant and not self.allow_reentrant:
            return 1, b""
        storage = self.storage_factory() if self.storage_factory is not None else None
        ok, output = self.dispatch(storage, data, value)
        if self.on_exit is not None:
            self.on_exit()
        return (0 if ok else 1), output