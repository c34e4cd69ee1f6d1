"""Solidity ABI type names, selectors, storage layout and selector-based method routing."""

__version__ = "0.1.0"