class ChannelError(Exception):
    """Base class for every error raised by mpe_channels. Can provide a custom message."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidAmount(ChannelError):
    """Raised when an amount is negative or not an integral number of cogs"""

    def __init__(self, amount, reason="amount should be a non-negative integer number of cogs"):
        super().__init__("Invalid amount %r: %s" % (amount, reason))
        self.amount = amount


class InsufficientFunds(ChannelError):
    def __init__(self, required, available, what="balance"):
        super().__init__("Insufficient %s: required %s cogs, available %s cogs" % (what, required, available))
        self.required = required
        self.available = available


class LedgerCallFailed(ChannelError):
    """Raised when a read or a transaction against the ledger fails. The original exception is kept in `cause`"""

    def __init__(self, message, cause=None):
        if cause is not None:
            message = "%s: %s" % (message, cause)
        super().__init__(message)
        self.cause = cause


class TransactionError(LedgerCallFailed):
    """Raised when an Ethereum transaction receipt has a status of 0. Optionally includes receipt"""

    def __init__(self, message, receipt=None):
        super().__init__(message)
        self.receipt = receipt


class NoExtensionNeeded(ChannelError):
    def __init__(self, channel_id, expiration, requested_expiration):
        super().__init__("PaymentChannel[id: %s] already expires at block %s, requested %s" % (
            channel_id, expiration, requested_expiration))
        self.channel_id = channel_id
        self.expiration = expiration
        self.requested_expiration = requested_expiration


class StaleChannelState(ChannelError):
    def __init__(self, channel_id, message):
        super().__init__("PaymentChannel[id: %s] %s" % (channel_id, message))
        self.channel_id = channel_id


class ChannelNotExpired(ChannelError):
    def __init__(self, channel_id, expiration, current_block):
        super().__init__("PaymentChannel[id: %s] expires at block %s, current block is %s" % (
            channel_id, expiration, current_block))
        self.channel_id = channel_id
        self.expiration = expiration
        self.current_block = current_block


class NoUsableServiceOffer(ChannelError):
    pass
