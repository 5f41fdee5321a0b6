""" In-memory MultiPartyEscrow with the same interface as MPEContract, for unit tests """
from web3 import Web3

from mpe_channels.errors import TransactionError
from mpe_channels.mpe.mpe_contract import ChannelOpenEvent, ChannelRecord

SENDER = Web3.to_checksum_address("0x" + "a1" * 20)
OTHER_SENDER = Web3.to_checksum_address("0x" + "b2" * 20)
RECIPIENT = Web3.to_checksum_address("0x" + "c3" * 20)
GROUP_ID = b"\x01" * 32
OTHER_GROUP_ID = b"\x02" * 32

CHANNEL_MUTATIONS = ("openChannel", "depositAndOpenChannel", "channelAddFunds", "channelExtend",
                     "channelExtendAndAddFunds", "channelClaimTimeout")


class FakeMPEContract:
    address = "0x" + "ee" * 20
    deployment_block = 1

    def __init__(self, block_number=50):
        self.current_block = block_number
        self.balances = {}
        self.token_balances = {}
        self.records = {}
        self.events = []
        self.transactions = []
        self.next_channel_id = 0
        # when False, channel mutations are "submitted" but never reflected in channels()
        self.apply_mutations = True

    # helpers for tests

    def add_channel(self, sender, recipient, group_id, value, expiration, nonce=0):
        channel_id = self.next_channel_id
        self.next_channel_id += 1
        self.records[channel_id] = ChannelRecord(channel_id, nonce, sender, sender, recipient, group_id, value,
                                                 expiration)
        self.events.append(ChannelOpenEvent(channel_id, nonce, sender, sender, recipient, group_id, value,
                                            expiration, self.current_block))
        return channel_id

    def set_record(self, channel_id, **fields):
        self.records[channel_id] = self.records[channel_id]._replace(**fields)

    def channel_transactions(self):
        return [t for t in self.transactions if t[0] in CHANNEL_MUTATIONS]

    def _mine(self, name, *args):
        self.current_block += 1
        self.transactions.append((name,) + args)
        return {"status": 1, "blockNumber": self.current_block, "blockHash": b"\xbb" * 32, "gasUsed": 21000,
                "transactionHash": bytes([len(self.transactions)]) * 32}

    def _revert(self, message):
        raise TransactionError("Transaction failed: %s" % message, {"status": 0})

    def _update(self, channel_id, **fields):
        if self.apply_mutations:
            self.set_record(channel_id, **fields)

    def _take_escrow(self, address, amount):
        if self.balances.get(address, 0) < amount:
            self._revert("escrow balance too low")
        self.balances[address] -= amount

    def _take_tokens(self, address, amount):
        if self.token_balances.get(address, 0) < amount:
            self._revert("token balance too low")
        self.token_balances[address] -= amount

    # reads

    def block_number(self):
        return self.current_block

    def balance(self, address):
        return self.balances.get(address, 0)

    def channels(self, channel_id):
        return self.records[channel_id]

    def get_past_open_channels(self, sender, recipient, group_id, from_block=None, to_block=None, signer=None):
        if to_block is None:
            to_block = self.current_block
        if not from_block:
            from_block = self.deployment_block
        signer = signer or sender
        return [e for e in self.events
                if from_block <= e.block_number <= to_block and
                (e.sender.lower() == sender.lower() or e.signer.lower() == signer.lower()) and
                (recipient is None or e.recipient.lower() == recipient.lower()) and
                (group_id is None or e.group_id == group_id)]

    def get_open_channel_events_from_receipt(self, receipt):
        return list(receipt.get("logs", []))

    # transactions

    def deposit(self, account, amount_in_cogs):
        self._take_tokens(account.address, amount_in_cogs)
        self.balances[account.address] = self.balances.get(account.address, 0) + amount_in_cogs
        return self._mine("deposit", amount_in_cogs)

    def withdraw(self, account, amount_in_cogs):
        self._take_escrow(account.address, amount_in_cogs)
        self.token_balances[account.address] = self.token_balances.get(account.address, 0) + amount_in_cogs
        return self._mine("withdraw", amount_in_cogs)

    def _open(self, name, account, payment_address, group_id, amount, expiration):
        receipt = self._mine(name, amount, expiration)
        channel_id = self.next_channel_id
        self.next_channel_id += 1
        self.records[channel_id] = ChannelRecord(channel_id, 0, account.address, account.signer_address,
                                                 payment_address, group_id, amount, expiration)
        event = ChannelOpenEvent(channel_id, 0, account.address, account.signer_address, payment_address, group_id,
                                 amount, expiration, receipt["blockNumber"])
        self.events.append(event)
        receipt["logs"] = [event]
        return receipt

    def open_channel(self, account, payment_address, group_id, amount, expiration):
        self._take_escrow(account.address, amount)
        return self._open("openChannel", account, payment_address, group_id, amount, expiration)

    def deposit_and_open_channel(self, account, payment_address, group_id, amount, expiration):
        self._take_tokens(account.address, amount)
        return self._open("depositAndOpenChannel", account, payment_address, group_id, amount, expiration)

    def channel_add_funds(self, account, channel_id, amount):
        self._take_escrow(account.address, amount)
        receipt = self._mine("channelAddFunds", channel_id, amount)
        self._update(channel_id, value=self.records[channel_id].value + amount)
        return receipt

    def channel_extend(self, account, channel_id, expiration):
        if expiration < self.records[channel_id].expiration:
            self._revert("expiration can only be extended")
        receipt = self._mine("channelExtend", channel_id, expiration)
        self._update(channel_id, expiration=expiration)
        return receipt

    def channel_extend_and_add_funds(self, account, channel_id, expiration, amount):
        if expiration < self.records[channel_id].expiration:
            self._revert("expiration can only be extended")
        self._take_escrow(account.address, amount)
        receipt = self._mine("channelExtendAndAddFunds", channel_id, expiration, amount)
        record = self.records[channel_id]
        self._update(channel_id, value=record.value + amount, expiration=expiration)
        return receipt

    def channel_claim_timeout(self, account, channel_id):
        record = self.records[channel_id]
        if self.current_block < record.expiration:
            self._revert("channel is not expired")
        receipt = self._mine("channelClaimTimeout", channel_id)
        self.balances[record.sender] = self.balances.get(record.sender, 0) + record.value
        self._update(channel_id, value=0, nonce=record.nonce + 1)
        return receipt


class FakeAccount:
    def __init__(self, mpe_contract, address=SENDER, token_balance=0, escrow_balance=0):
        self.mpe_contract = mpe_contract
        self.address = address
        self.signer_address = address
        self.allowance_amount = 0
        mpe_contract.token_balances[address] = token_balance
        mpe_contract.balances[address] = escrow_balance

    def escrow_balance(self):
        return self.mpe_contract.balance(self.address)

    def token_balance(self, address=None):
        return self.mpe_contract.token_balances.get(address or self.address, 0)

    def allowance(self):
        return self.allowance_amount

    def approve_transfer(self, amount_in_cogs):
        self.allowance_amount = amount_in_cogs
        self.mpe_contract.transactions.append(("approve", amount_in_cogs))

    def deposit_to_escrow_account(self, amount_in_cogs):
        if amount_in_cogs > self.allowance_amount:
            self.approve_transfer(amount_in_cogs)
        return self.mpe_contract.deposit(self, amount_in_cogs)
