"""Exceptions raised while calculating an eth.store day."""


class EthStoreError(Exception):
    """Base class for every failure of a day calculation."""


class InvalidArgument(EthStoreError, ValueError):
    """The caller asked for something that cannot be calculated."""


class MalformedResponse(EthStoreError):
    """The beacon node answered with data that does not parse."""


class MalformedSnapshot(MalformedResponse):
    """A validator snapshot is unparsable or internally inconsistent."""


class GatewayUnavailable(EthStoreError):
    """The data source could not be reached within the retry budget."""


class InternalError(EthStoreError):
    """An accounting invariant was violated."""


__all__ = [
    "EthStoreError",
    "GatewayUnavailable",
    "InternalError",
    "InvalidArgument",
    "MalformedResponse",
    "MalformedSnapshot",
]
