import collections
import logging

from snet.contracts import get_contract_deployment_block
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.logs import DISCARD

from mpe_channels.errors import LedgerCallFailed
from mpe_channels.utils.token2cogs import to_cogs
from mpe_channels.utils.utils import get_contract_object

logger = logging.getLogger(__name__)

BLOCKS_PER_BATCH = 5000

CHANNEL_OPEN_EVENT_SIGNATURE = "ChannelOpen(uint256,uint256,address,address,address,bytes32,uint256,uint256)"

# web3 raises ValueError for JSON-RPC errors and requests raises OSError subclasses for transport errors
LEDGER_ERRORS = (Web3Exception, ValueError, OSError)

ChannelRecord = collections.namedtuple(
    "ChannelRecord",
    ("channel_id", "nonce", "sender", "signer", "recipient", "group_id", "value", "expiration"))

ChannelOpenEvent = collections.namedtuple(
    "ChannelOpenEvent",
    ("channel_id", "nonce", "sender", "signer", "recipient", "group_id", "amount", "expiration", "block_number"))


class MPEContract:
    def __init__(self, w3, address=None, contract=None):
        self.web3 = w3
        self.contract = contract if contract is not None else get_contract_object(w3, "MultiPartyEscrow", address)
        self._deployment_block = None

    @property
    def address(self):
        return self.contract.address

    @property
    def deployment_block(self):
        if self._deployment_block is None:
            self._deployment_block = self._read(
                "deployment block", get_contract_deployment_block, self.web3, "MultiPartyEscrow")
        return self._deployment_block

    def block_number(self):
        return self._read("latest block number", lambda: self.web3.eth.block_number)

    def balance(self, address):
        logger.debug("Fetching MPE account balance of %s", address)
        return self._read("balances(%s)" % address, self.contract.functions.balances(address).call)

    def channels(self, channel_id):
        channel_id = to_cogs(channel_id)
        logger.debug("Fetch latest PaymentChannel[id: %s] state", channel_id)
        data = self._read("channels(%s)" % channel_id, self.contract.functions.channels(channel_id).call)
        if isinstance(data, dict):
            data = [data[k] for k in ("nonce", "sender", "signer", "recipient", "groupId", "value", "expiration")]
        nonce, sender, signer, recipient, group_id, value, expiration = data
        return ChannelRecord(channel_id, nonce, sender, signer, recipient, bytes(group_id), value, expiration)

    def get_past_open_channels(self, sender, recipient, group_id, from_block=None, to_block=None, signer=None):
        if to_block is None:
            to_block = self.block_number()
        if not from_block:
            from_block = self.deployment_block

        logger.debug("Fetching all payment channel open events from block %s to block %s", from_block, to_block)
        event_topics = [self.web3.keccak(text=CHANNEL_OPEN_EVENT_SIGNATURE).hex()]
        logs = []
        batch_start = from_block
        while batch_start <= to_block:
            batch_end = min(batch_start + BLOCKS_PER_BATCH, to_block)
            logs += self._read("get_logs[%s, %s]" % (batch_start, batch_end), self.web3.eth.get_logs,
                               {"fromBlock": batch_start,
                                "toBlock": batch_end,
                                "address": self.contract.address,
                                "topics": event_topics})
            batch_start = batch_end + 1

        events = [self._event_from_log(log) for log in logs]
        sender = sender.lower()
        signer = (signer or sender).lower()
        recipient = recipient.lower() if recipient else None
        # recipient and group_id equal to None match any channel of the sender
        return [e for e in events
                if (e.sender.lower() == sender or e.signer.lower() == signer) and
                (recipient is None or e.recipient.lower() == recipient) and
                (group_id is None or e.group_id == group_id)]

    def get_open_channel_events_from_receipt(self, receipt):
        """ ChannelOpen events emitted by the transaction of `receipt`, in log order """
        events = self._read("ChannelOpen events of receipt", self.contract.events.ChannelOpen().process_receipt,
                            receipt, DISCARD)
        return [self._event_from_event_data(event_data) for event_data in events
                if event_data["address"].lower() == self.contract.address.lower()]

    def _event_from_log(self, log):
        return self._event_from_event_data(self.contract.events.ChannelOpen().process_log(log))

    @staticmethod
    def _event_from_event_data(event_data):
        args = event_data["args"]
        return ChannelOpenEvent(channel_id=args["channelId"],
                                nonce=args["nonce"],
                                sender=args["sender"],
                                signer=args["signer"],
                                recipient=args["recipient"],
                                group_id=bytes(args["groupId"]),
                                amount=args["amount"],
                                expiration=args["expiration"],
                                block_number=event_data["blockNumber"])

    def deposit(self, account, amount_in_cogs):
        amount = to_cogs(amount_in_cogs)
        logger.info("Depositing %s cogs to MPE account", amount)
        return self._transact(account, "deposit", amount)

    def withdraw(self, account, amount_in_cogs):
        amount = to_cogs(amount_in_cogs)
        logger.info("Withdrawing %s cogs from MPE account", amount)
        return self._transact(account, "withdraw", amount)

    def open_channel(self, account, payment_address, group_id, amount, expiration):
        amount = to_cogs(amount)
        expiration = to_cogs(expiration)
        logger.info("Opening new payment channel [amount: %s, expiry: %s]", amount, expiration)
        return self._transact(account, "openChannel", account.signer_address,
                              Web3.to_checksum_address(payment_address), group_id, amount, expiration)

    def deposit_and_open_channel(self, account, payment_address, group_id, amount, expiration):
        amount = to_cogs(amount)
        expiration = to_cogs(expiration)
        logger.info("Depositing %s cogs to MPE address and opening new payment channel [expiry: %s]",
                    amount, expiration)
        return self._transact(account, "depositAndOpenChannel", account.signer_address,
                              Web3.to_checksum_address(payment_address), group_id, amount, expiration)

    def channel_add_funds(self, account, channel_id, amount):
        channel_id = to_cogs(channel_id)
        amount = to_cogs(amount)
        logger.info("Funding PaymentChannel[id: %s] with %s cogs", channel_id, amount)
        return self._transact(account, "channelAddFunds", channel_id, amount)

    def channel_extend(self, account, channel_id, expiration):
        channel_id = to_cogs(channel_id)
        expiration = to_cogs(expiration)
        logger.info("Extending PaymentChannel[id: %s]. New expiry is block# %s", channel_id, expiration)
        return self._transact(account, "channelExtend", channel_id, expiration)

    def channel_extend_and_add_funds(self, account, channel_id, expiration, amount):
        channel_id = to_cogs(channel_id)
        expiration = to_cogs(expiration)
        amount = to_cogs(amount)
        logger.info("Extending and funding PaymentChannel[id: %s] with amount: %s and expiry: %s",
                    channel_id, amount, expiration)
        return self._transact(account, "channelExtendAndAddFunds", channel_id, expiration, amount)

    def channel_claim_timeout(self, account, channel_id):
        channel_id = to_cogs(channel_id)
        logger.info("Claiming unused funds from expired PaymentChannel[id: %s]", channel_id)
        return self._transact(account, "channelClaimTimeout", channel_id)

    def _transact(self, account, fn_name, *args):
        try:
            return account.send_transaction(getattr(self.contract.functions, fn_name), *args)
        except LEDGER_ERRORS as e:
            raise LedgerCallFailed("MPE transaction %s failed" % fn_name, e) from e

    @staticmethod
    def _read(what, fn, *args):
        try:
            return fn(*args)
        except LEDGER_ERRORS as e:
            raise LedgerCallFailed("MPE call %s failed" % what, e) from e
