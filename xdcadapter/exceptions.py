"""Module for custom exceptions.

This should contain base classes. Children of these base classes are defined in the modules where they are used.
"""


class XdcAdapterError(Exception):
    """Base class for all errors raised by this package."""


class InvalidAddressFormat(XdcAdapterError, ValueError):
    """Input is neither a `xdc` address, a `0x` address nor a bare 40 hex character payload."""


class InvalidAmount(XdcAdapterError, ValueError):
    """Amount is not numeric, is negative, has too many decimals or does not fit uint256."""


class InvalidBlockHeight(XdcAdapterError, ValueError):
    """Block height was negative."""


class UpstreamQueryFailure(XdcAdapterError):
    """JSON-RPC node or the block explorer failed to answer a query.

    The original exception is available as ``__cause__``.
    """


class SignerRequired(XdcAdapterError):
    """A state changing operation was called on a provider without a private key."""

    def __init__(self, operation: str):
        super().__init__(f"Signer required to {operation}")
        self.operation = operation
