import collections
import enum
import logging

from mpe_channels.errors import StaleChannelState

logger = logging.getLogger(__name__)


class ChannelStatus(enum.Enum):
    REUSABLE = "reusable"
    NEEDS_EXTENSION = "needs_extension"
    NEEDS_FUNDING = "needs_funding"
    NEEDS_BOTH = "needs_both"


class SelectionAction(enum.Enum):
    OPEN = "open"
    REUSE = "reuse"
    EXTEND = "extend"
    ADD_FUNDS = "add_funds"
    EXTEND_AND_ADD_FUNDS = "extend_and_add_funds"


SelectionPlan = collections.namedtuple("SelectionPlan", ("action", "index"))

# evaluated in this order, first channel with the status wins
_ACTION_FOR_STATUS = (
    (ChannelStatus.REUSABLE, SelectionAction.REUSE),
    (ChannelStatus.NEEDS_EXTENSION, SelectionAction.EXTEND),
    (ChannelStatus.NEEDS_FUNDING, SelectionAction.ADD_FUNDS),
)


def classify_channel(snapshot, price, required_expiration):
    funded = snapshot.has_sufficient_funds(price)
    valid = snapshot.is_valid(required_expiration)
    if funded and valid:
        return ChannelStatus.REUSABLE
    if funded:
        return ChannelStatus.NEEDS_EXTENSION
    if valid:
        return ChannelStatus.NEEDS_FUNDING
    return ChannelStatus.NEEDS_BOTH


def plan_selection(snapshots, price, required_expiration):
    """
    Decide what to do with the known channels (oldest first) so that one of them can pay `price`
    and stays open until `required_expiration`. Pure function of its arguments.
    """
    if len(snapshots) == 0:
        return SelectionPlan(SelectionAction.OPEN, None)

    statuses = [classify_channel(s, price, required_expiration) for s in snapshots]
    for status, action in _ACTION_FOR_STATUS:
        if status in statuses:
            return SelectionPlan(action, statuses.index(status))
    return SelectionPlan(SelectionAction.EXTEND_AND_ADD_FUNDS, 0)


class PaymentChannelManagementStrategy:
    def __init__(self, channel_provider, block_offset=0, call_allowance=1):
        if not isinstance(call_allowance, int) or call_allowance < 1:
            raise ValueError("call_allowance should be a positive integer, got %r" % (call_allowance,))
        if not isinstance(block_offset, int) or block_offset < 0:
            raise ValueError("block_offset should be a non-negative integer, got %r" % (block_offset,))
        self.channel_provider = channel_provider
        self.block_offset = block_offset
        self.call_allowance = call_allowance

    def select_channel(self, account, service_offer, known_channels, current_block=None):
        service_offer.validate()
        if current_block is None:
            current_block = self.channel_provider.current_block_number()

        service_call_price = service_offer.price_in_cogs
        required_expiration = service_offer.required_expiration(current_block)
        new_expiration = required_expiration + self.block_offset
        amount = service_call_price * self.call_allowance

        plan = plan_selection([c.snapshot() for c in known_channels], service_call_price, required_expiration)
        logger.debug("Channel selection for %r at block %s: %s", service_offer, current_block, plan)

        if plan.action is SelectionAction.OPEN:
            payment_channel = self._open_channel(account, service_offer, amount, new_expiration)
        else:
            payment_channel = known_channels[plan.index]
            if plan.action is SelectionAction.EXTEND:
                payment_channel.extend_expiration(new_expiration)
            elif plan.action is SelectionAction.ADD_FUNDS:
                payment_channel.add_funds(amount)
            elif plan.action is SelectionAction.EXTEND_AND_ADD_FUNDS:
                payment_channel.extend_and_add_funds(new_expiration, amount)

        self._ensure_usable(payment_channel, service_call_price, required_expiration)
        return payment_channel

    def _open_channel(self, account, service_offer, amount, expiration):
        mpe_balance = account.escrow_balance()
        if mpe_balance >= amount:
            return self.channel_provider.open_channel(account, amount, expiration,
                                                      service_offer.payment_address, service_offer.group_id)
        return self.channel_provider.deposit_and_open_channel(account, amount, expiration,
                                                              service_offer.payment_address, service_offer.group_id)

    @staticmethod
    def _ensure_usable(channel, price, required_expiration):
        if not channel.has_sufficient_funds(price):
            raise StaleChannelState(channel.channel_id, "available amount %s is below price %s after selection" % (
                channel.available_amount, price))
        if not channel.is_valid(required_expiration):
            raise StaleChannelState(channel.channel_id, "expiration %s is below required %s after selection" % (
                channel.expiration, required_expiration))
