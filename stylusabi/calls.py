"""Call configuration and the errors of calls to other contracts."""

from __future__ import annotations

import logging
import operator
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, replace
from typing import Any

from .abi_types import unsigned
from .selector import function_selector

__all__ = ["Call", "CallError", "Revert", "AbiDecodingFailed", "panic_data"]

logger = logging.getLogger(__name__)

_U64_MAX = (1 << 64) - 1
_U256_LIMIT = 1 << 256
_PANIC_GENERIC = 0x00


def _check_u256(number: int, what: str) -> int:
    number = operator.index(number)
    if not 0 <= number < _U256_LIMIT:
        raise ValueError(f"{what} must fit in 256 unsigned bits")
    return number


def panic_data(code: int) -> bytes:
    """Revert data of a Solidity ``Panic(uint256)`` with the given code."""
    code = _check_u256(code, "panic code")
    return function_selector("Panic", unsigned(256)) + code.to_bytes(32, "big")


@dataclass(frozen=True)
class Call:
    """Configuration of a call to another contract.

    A call without a value may call ``pure``, ``view`` and ``write`` methods;
    once a value is set, even zero, only mutating calls are allowed.
    """

    gas: int = _U64_MAX
    value: int | None = None
    storage: Any = None

    def __post_init__(self) -> None:
        gas = operator.index(self.gas)
        if not 0 <= gas <= _U64_MAX:
            raise ValueError("gas must fit in 64 unsigned bits")
        if self.value is not None:
            _check_u256(self.value, "value")

    @classmethod
    def new_in(cls, storage: Any) -> Call:
        """Begin configuring a call that holds the top-level storage."""
        return cls(storage=storage)

    def with_gas(self, gas: int) -> Call:
        """Amount of gas to supply; larger amounts are clipped to the gas left."""
        return replace(self, gas=gas)

    def with_value(self, value: int) -> Call:
        """Amount of wei to send; this rules out non-mutating calls."""
        return replace(self, value=value)

    @property
    def call_value(self) -> int:
        """The wei sent with the call, zero if none was set."""
        return 0 if self.value is None else self.value

    @property
    def is_static(self) -> bool:
        """Whether the configuration may be used for a static call."""
        return self.value is None

    @property
    def is_non_payable(self) -> bool:
        """Whether the configuration may call ``write`` methods."""
        return self.value is None


class CallError(Exception, metaclass=ABCMeta):
    """A call to another contract failed."""

    @abstractmethod
    def to_revert_data(self) -> bytes:
        """The data to revert with when passing this failure on."""


class Revert(CallError):
    """The other contract reverted with the given data."""

    def __init__(self, data: bytes = b"") -> None:
        self.data = bytes(data)
        super().__init__(self.data)

    def to_revert_data(self) -> bytes:
        return self.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Revert):
            return NotImplemented
        return self.data == other.data

    def __hash__(self) -> int:
        return hash((Revert, self.data))


class AbiDecodingFailed(CallError):
    """The other contract's return data could not be decoded."""

    def __init__(self, reason: str) -> None:
        self.reason = str(reason)
        super().__init__(self.reason)

    def to_revert_data(self) -> bytes:
        logger.debug("failed to decode return data from external call: %s", self.reason)
        return panic_data(_PANIC_GENERIC)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbiDecodingFailed):
            return NotImplemented
        return self.reason == other.reason

    def __hash__(self) -> int:
        return hash((AbiDecodingFailed, self.reason))