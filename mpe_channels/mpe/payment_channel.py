import collections
import logging

from mpe_channels.account import AccountFundingPolicy
from mpe_channels.errors import ChannelNotExpired, InsufficientFunds, NoExtensionNeeded, StaleChannelState
from mpe_channels.utils.token2cogs import to_cogs

logger = logging.getLogger(__name__)


class ChannelSnapshot(collections.namedtuple(
        "ChannelSnapshot", ("channel_id", "nonce", "value", "amount_spent", "expiration"))):
    """Immutable view of a channel, all predicates are pure"""
    __slots__ = ()

    @property
    def available_amount(self):
        return self.value - self.amount_spent

    def has_sufficient_funds(self, price):
        return self.available_amount >= price

    def is_valid(self, required_expiration):
        return self.expiration >= required_expiration


class PaymentChannel:
    def __init__(self, channel_id, account, mpe_contract, funding_policy=None, strict=False, amount_spent=0):
        self.channel_id = channel_id
        self.account = account
        self.mpe_contract = mpe_contract
        self.funding_policy = funding_policy or AccountFundingPolicy(account)
        self.strict = strict
        self.sender = None
        self.signer = None
        self.recipient = None
        self.group_id = None
        self.nonce = None
        self.value = 0
        self.expiration = 0
        self.amount_spent = amount_spent

    def __repr__(self):
        return "PaymentChannel(id=%s, nonce=%s, value=%s, spent=%s, expiration=%s)" % (
            self.channel_id, self.nonce, self.value, self.amount_spent, self.expiration)

    @property
    def available_amount(self):
        return self.value - self.amount_spent

    def snapshot(self):
        return ChannelSnapshot(self.channel_id, self.nonce, self.value, self.amount_spent, self.expiration)

    def has_sufficient_funds(self, price):
        return self.snapshot().has_sufficient_funds(price)

    def is_valid(self, required_expiration):
        return self.snapshot().is_valid(required_expiration)

    def refresh(self):
        record = self.mpe_contract.channels(self.channel_id)
        if self.nonce is not None and record.nonce != self.nonce:
            # recipient claimed the channel, spending restarts from zero for the new nonce
            logger.debug("PaymentChannel[id: %s] nonce changed %s -> %s", self.channel_id, self.nonce, record.nonce)
            self.amount_spent = 0
        self.sender = record.sender
        self.signer = record.signer
        self.recipient = record.recipient
        self.group_id = record.group_id
        self.nonce = record.nonce
        self.value = record.value
        self.expiration = record.expiration
        return self

    def check_in_sync(self):
        if self.nonce is None:
            raise StaleChannelState(self.channel_id, "state has never been read from the ledger")
        record = self.mpe_contract.channels(self.channel_id)
        for field in ("nonce", "value", "expiration"):
            local, remote = getattr(self, field), getattr(record, field)
            if local != remote:
                raise StaleChannelState(self.channel_id, "local %s=%s differs from ledger %s=%s" % (
                    field, local, field, remote))

    def record_payment(self, amount):
        amount = to_cogs(amount)
        if amount > self.available_amount:
            raise InsufficientFunds(amount, self.available_amount, "channel balance")
        self.amount_spent += amount
        return self.amount_spent

    def add_funds(self, amount):
        if self.strict:
            self.check_in_sync()
        self.funding_policy.ensure_escrow_balance(amount)
        receipt = self.mpe_contract.channel_add_funds(self.account, self.channel_id, amount)
        self.refresh()
        return receipt

    def extend_expiration(self, expiration):
        expiration = to_cogs(expiration)
        if expiration <= self.expiration:
            raise NoExtensionNeeded(self.channel_id, self.expiration, expiration)
        if self.strict:
            self.check_in_sync()
        receipt = self.mpe_contract.channel_extend(self.account, self.channel_id, expiration)
        self.refresh()
        return receipt

    def extend_and_add_funds(self, expiration, amount):
        if self.strict:
            self.check_in_sync()
        self.funding_policy.ensure_escrow_balance(amount)
        receipt = self.mpe_contract.channel_extend_and_add_funds(self.account, self.channel_id, expiration, amount)
        self.refresh()
        return receipt

    def claim_timeout(self, current_block=None):
        if current_block is None:
            current_block = self.mpe_contract.block_number()
        if current_block < self.expiration:
            raise ChannelNotExpired(self.channel_id, self.expiration, current_block)
        if self.strict:
            self.check_in_sync()
        receipt = self.mpe_contract.channel_claim_timeout(self.account, self.channel_id)
        self.refresh()
        return receipt
