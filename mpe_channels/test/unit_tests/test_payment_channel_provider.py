import unittest

from fake_ledger import GROUP_ID, OTHER_SENDER, RECIPIENT, FakeAccount, FakeMPEContract
from mpe_channels.errors import LedgerCallFailed
from mpe_channels.mpe.payment_channel_provider import PaymentChannelProvider


class BusyBlockMPEContract(FakeMPEContract):
    """ Another channel for the same sender, recipient and group is opened in the block of ours """

    def _open(self, name, account, payment_address, group_id, amount, expiration):
        receipt = super()._open(name, account, payment_address, group_id, amount, expiration)
        self.add_channel(account.address, payment_address, group_id, 999, 7)
        return receipt


class UndecodedReceiptMPEContract(FakeMPEContract):
    """ Receipt logs cannot be decoded, so the opened channel has to be found among the block events """

    def get_open_channel_events_from_receipt(self, receipt):
        return []


class TestPaymentChannelProvider(unittest.TestCase):

    def test_open_channel_uses_the_receipt_event(self):
        mpe_contract = BusyBlockMPEContract()
        account = FakeAccount(mpe_contract, escrow_balance=100)
        channel = PaymentChannelProvider(mpe_contract).open_channel(account, 5, 150, RECIPIENT, GROUP_ID)

        self.assertEqual((channel.channel_id, channel.value, channel.expiration), (0, 5, 150))
        same_block = [e for e in mpe_contract.events if e.block_number == mpe_contract.current_block]
        self.assertEqual([e.channel_id for e in same_block], [0, 1])

    def test_deposit_and_open_channel_uses_the_receipt_event(self):
        mpe_contract = BusyBlockMPEContract()
        account = FakeAccount(mpe_contract, token_balance=100)
        channel = PaymentChannelProvider(mpe_contract).deposit_and_open_channel(account, 5, 150, RECIPIENT,
                                                                                GROUP_ID)

        self.assertEqual((channel.channel_id, channel.value, channel.expiration), (0, 5, 150))

    def test_undecoded_receipt_falls_back_to_the_block_events(self):
        mpe_contract = UndecodedReceiptMPEContract()
        account = FakeAccount(mpe_contract, escrow_balance=100)
        # channels of another sender or from an earlier block are not candidates
        mpe_contract.add_channel(account.address, RECIPIENT, GROUP_ID, 10, 500)
        mpe_contract.add_channel(OTHER_SENDER, RECIPIENT, GROUP_ID, 10, 500)

        channel = PaymentChannelProvider(mpe_contract).open_channel(account, 5, 150, RECIPIENT.lower(), GROUP_ID)
        self.assertEqual((channel.channel_id, channel.value, channel.expiration), (2, 5, 150))

    def test_ambiguous_block_events_are_rejected(self):
        class AmbiguousMPEContract(UndecodedReceiptMPEContract, BusyBlockMPEContract):
            pass

        mpe_contract = AmbiguousMPEContract()
        account = FakeAccount(mpe_contract, escrow_balance=100)
        with self.assertRaises(LedgerCallFailed):
            PaymentChannelProvider(mpe_contract).open_channel(account, 5, 150, RECIPIENT, GROUP_ID)

    def test_strict_provider_makes_strict_channels(self):
        mpe_contract = FakeMPEContract()
        account = FakeAccount(mpe_contract)
        self.assertTrue(PaymentChannelProvider(mpe_contract, strict=True).make_channel(account, 0).strict)
        self.assertFalse(PaymentChannelProvider(mpe_contract).make_channel(account, 0).strict)


if __name__ == '__main__':
    unittest.main()
