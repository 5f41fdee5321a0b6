from mpe_channels.account import AccountFundingPolicy
from mpe_channels.cli.commands.commands import BlockchainCommand
from mpe_channels.utils.token2cogs import cogs2strtoken


class MPEAccountCommand(BlockchainCommand):

    def print_account(self):
        self._printout(self.account.address)

    def print_token_and_mpe_balances(self):
        """ Print balance of tokens and of the MPE wallet """
        address = self.args.account or self.account.address
        token_cogs = self.account.token_balance(address)
        mpe_cogs = self.mpe_contract.balance(address)

        # we cannot use _pprint here because it doesn't conserve order yet
        self._printout("    account: %s" % address)
        self._printout("    TOKEN: %s" % cogs2strtoken(token_cogs))
        self._printout("    MPE: %s" % cogs2strtoken(mpe_cogs))

    def deposit_to_mpe(self):
        AccountFundingPolicy(self.account).ensure_token_balance(self.args.amount)
        self._pprint_receipt(self.account.deposit_to_escrow_account(self.args.amount))

    def withdraw_from_mpe(self):
        self._pprint_receipt(self.account.withdraw_from_escrow_account(self.args.amount))
