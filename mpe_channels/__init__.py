from mpe_channels.account import Account
from mpe_channels.concurrency_manager import ConcurrencyManager
from mpe_channels.mpe.mpe_contract import MPEContract
from mpe_channels.mpe.payment_channel_provider import PaymentChannelProvider
from mpe_channels.payment_channel_management_strategies.default import PaymentChannelManagementStrategy
from mpe_channels.service_client import ServiceClient
from mpe_channels.service_offer import ServiceOffer
from mpe_channels.utils.utils import get_web3

DEFAULT_ETH_RPC_ENDPOINT = "http://localhost:8545"


class ChannelSDK:
    """Payment channel SDK: one web3 handle, one MPE contract and one account shared by all service clients"""

    def __init__(self, config, w3=None, mpe_contract=None, account=None):
        self._config = config

        # Instantiate Ethereum client
        self.web3 = w3 or get_web3(self._config.get("eth_rpc_endpoint", DEFAULT_ETH_RPC_ENDPOINT))

        # Get MPE contract address from config if specified; mostly for local testing
        if mpe_contract is None:
            mpe_contract = MPEContract(self.web3, self._config.get("mpe_contract_address", None))
        self.mpe_contract = mpe_contract

        self.account = account or Account(self.web3, config, self.mpe_contract)
        self.payment_channel_provider = PaymentChannelProvider(
            self.mpe_contract, strict=_as_bool(self._config.get("strict_channel_state", False)))
        self.concurrency_manager = ConcurrencyManager()

    def create_service_client(self, service_offer, payment_channel_management_strategy=None):
        if isinstance(service_offer, dict):
            service_offer = ServiceOffer.from_group_metadata(service_offer)
        if payment_channel_management_strategy is None:
            payment_channel_management_strategy = PaymentChannelManagementStrategy(
                self.payment_channel_provider,
                block_offset=int(self._config.get("block_offset", 0)),
                call_allowance=int(self._config.get("call_allowance", 1)))
        return ServiceClient(service_offer, self.account, self.payment_channel_provider,
                             payment_channel_management_strategy, self.concurrency_manager)


def _as_bool(value):
    if isinstance(value, str):
        return value in ["yes", "on", "true", "True", "1"]
    return bool(value)
