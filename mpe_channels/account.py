import logging

from mpe_channels.errors import InsufficientFunds, LedgerCallFailed, TransactionError
from mpe_channels.mpe.mpe_contract import LEDGER_ERRORS
from mpe_channels.utils.token2cogs import to_cogs
from mpe_channels.utils.utils import get_address_from_private, get_contract_object, normalize_private_key

logger = logging.getLogger(__name__)

DEFAULT_GAS = 210000
DEFAULT_TRANSACTION_TIMEOUT = 300


class Account:
    def __init__(self, w3, config, mpe_contract, token_contract=None):
        self.config = config
        self.web3 = w3
        self.mpe_contract = mpe_contract
        if token_contract is None:
            token_contract = get_contract_object(self.web3, "SingularityNetToken",
                                                 config.get("token_contract_address", None))
        self.token_contract = token_contract
        self.private_key = normalize_private_key(config["private_key"])
        signer_private_key = config.get("signer_private_key", None)
        if signer_private_key is not None:
            self.signer_private_key = normalize_private_key(signer_private_key)
        else:
            self.signer_private_key = self.private_key
        self.address = get_address_from_private(self.private_key)
        self.signer_address = get_address_from_private(self.signer_private_key)
        self.transaction_timeout = int(config.get("transaction_timeout", DEFAULT_TRANSACTION_TIMEOUT))
        self.nonce = 0

    def _get_nonce(self):
        nonce = self.web3.eth.get_transaction_count(self.address)
        if self.nonce >= nonce:
            nonce = self.nonce + 1
        self.nonce = nonce
        return nonce

    def _get_gas_price(self):
        return int(self.web3.eth.gas_price)

    def _send_signed_transaction(self, contract_fn, *args):
        transaction = contract_fn(*args).build_transaction({
            "chainId": int(self.web3.eth.chain_id),
            "gas": DEFAULT_GAS,
            "gasPrice": self._get_gas_price(),
            "nonce": self._get_nonce()
        })
        signed_txn = self.web3.eth.account.sign_transaction(transaction, private_key=self.private_key)
        return self.web3.to_hex(self.web3.eth.send_raw_transaction(signed_txn.rawTransaction))

    def send_transaction(self, contract_fn, *args):
        try:
            txn_hash = self._send_signed_transaction(contract_fn, *args)
            logger.debug("Waiting for transaction %s", txn_hash)
            receipt = self.web3.eth.wait_for_transaction_receipt(txn_hash, self.transaction_timeout)
        except LEDGER_ERRORS as e:
            raise LedgerCallFailed("Transaction failed to be submitted or mined", e) from e
        if receipt["status"] == 0:
            raise TransactionError("Transaction %s failed" % txn_hash, receipt)
        return receipt

    def escrow_balance(self):
        return self.mpe_contract.balance(self.address)

    def token_balance(self, address=None):
        return self._call_token("balanceOf", address or self.address)

    def allowance(self):
        return self._call_token("allowance", self.address, self.mpe_contract.address)

    def approve_transfer(self, amount_in_cogs):
        amount = to_cogs(amount_in_cogs)
        logger.info("Approving transfer of %s cogs to MPE contract", amount)
        return self.send_transaction(self.token_contract.functions.approve, self.mpe_contract.address, amount)

    def deposit_to_escrow_account(self, amount_in_cogs):
        amount = to_cogs(amount_in_cogs)
        already_approved = self.allowance()
        if amount > already_approved:
            self.approve_transfer(amount)
        return self.mpe_contract.deposit(self, amount)

    def withdraw_from_escrow_account(self, amount_in_cogs):
        return self.mpe_contract.withdraw(self, amount_in_cogs)

    def _call_token(self, fn_name, *args):
        try:
            return getattr(self.token_contract.functions, fn_name)(*args).call()
        except LEDGER_ERRORS as e:
            raise LedgerCallFailed("Token call %s failed" % fn_name, e) from e


class AccountFundingPolicy:
    """
    Makes sure the escrow balance covers an amount before a channel is funded with it.
    Only the shortfall is ever deposited, nothing is left idle in escrow.
    """

    def __init__(self, account):
        self.account = account

    def shortfall(self, required, escrow_balance):
        return max(0, to_cogs(required) - escrow_balance)

    def ensure_escrow_balance(self, required):
        """Deposit the missing part of `required` into escrow. Returns the deposited amount (0 if none)."""
        escrow_balance = self.account.escrow_balance()
        shortfall = self.shortfall(required, escrow_balance)
        if shortfall == 0:
            return 0
        token_balance = self.account.token_balance()
        if token_balance < shortfall:
            raise InsufficientFunds(shortfall, token_balance, "token balance to fund escrow")
        logger.info("Escrow balance %s is below %s, depositing %s cogs", escrow_balance, required, shortfall)
        self.account.deposit_to_escrow_account(shortfall)
        return shortfall

    def ensure_token_balance(self, required):
        """Precheck for operations that deposit straight from the token balance (deposit and open)."""
        required = to_cogs(required)
        token_balance = self.account.token_balance()
        if token_balance < required:
            raise InsufficientFunds(required, token_balance, "token balance")
        if required > self.account.allowance():
            self.account.approve_transfer(required)
