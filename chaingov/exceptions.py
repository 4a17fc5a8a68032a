"""
ChainGov Exceptions

Base exception classes shared across the package. Governance-specific
errors live next to the code that raises them (chaingov.governance).
"""


class ChainGovException(Exception):
    """Base exception for ChainGov."""
    pass


class ArithmeticOverflowError(ChainGovException):
    """uint256 addition overflowed or subtraction underflowed."""
    pass


class InvalidKeyError(ChainGovException):
    """Invalid cryptographic key."""
    pass


class InvalidAddressError(ChainGovException):
    """Invalid address format."""
    pass


class InvalidSignatureError(ChainGovException):
    """Invalid or unrecoverable signature."""
    pass


class CallRevertedError(ChainGovException):
    """A dispatched contract call failed."""
    pass


class InsufficientFundsError(CallRevertedError):
    """Native value transfer exceeds the sender's balance."""
    pass


class ConfigurationError(ChainGovException):
    """Configuration error."""
    pass
