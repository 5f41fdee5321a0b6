import logging

from mpe_channels.account import AccountFundingPolicy
from mpe_channels.errors import LedgerCallFailed
from mpe_channels.mpe.payment_channel import PaymentChannel

logger = logging.getLogger(__name__)


class PaymentChannelProvider(object):

    def __init__(self, mpe_contract, strict=False):
        self.mpe_contract = mpe_contract
        self.strict = strict

    def current_block_number(self):
        return self.mpe_contract.block_number()

    def escrow_balance(self, account):
        return self.mpe_contract.balance(account.address)

    def get_past_open_channels(self, account, payment_address, group_id, starting_block_number=0,
                               to_block_number=None):
        events = self.mpe_contract.get_past_open_channels(account.address, payment_address, group_id,
                                                          starting_block_number, to_block_number,
                                                          signer=account.signer_address)
        return [self.make_channel(account, event.channel_id) for event in events]

    def open_channel(self, account, amount, expiration, payment_address, group_id):
        receipt = self.mpe_contract.open_channel(account, payment_address, group_id, amount, expiration)
        return self._get_newly_opened_channel(receipt, account, payment_address, group_id)

    def deposit_and_open_channel(self, account, amount, expiration, payment_address, group_id):
        AccountFundingPolicy(account).ensure_token_balance(amount)
        receipt = self.mpe_contract.deposit_and_open_channel(account, payment_address, group_id, amount,
                                                             expiration)
        return self._get_newly_opened_channel(receipt, account, payment_address, group_id)

    def make_channel(self, account, channel_id):
        return PaymentChannel(channel_id, account, self.mpe_contract, strict=self.strict)

    def _get_newly_opened_channel(self, receipt, account, payment_address, group_id):
        events = self.mpe_contract.get_open_channel_events_from_receipt(receipt)
        if events:
            channel = self.make_channel(account, events[0].channel_id)
        else:
            # receipt logs were not decoded, only an unambiguous match in the receipt block is accepted
            open_channels = self.get_past_open_channels(account, payment_address, group_id, receipt["blockNumber"],
                                                        receipt["blockNumber"])
            if len(open_channels) != 1:
                raise LedgerCallFailed("Error while opening channel, %s candidate channels in block %s, please "
                                       "check transaction %s" % (len(open_channels), receipt["blockNumber"],
                                                                 receipt["transactionHash"].hex()))
            channel = open_channels[0]
        logger.info("Opened PaymentChannel[id: %s]", channel.channel_id)
        return channel.refresh()
