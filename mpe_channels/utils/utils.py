import base64
import binascii

import web3
from snet.contracts import get_contract_def


def get_web3(rpc_endpoint):
    if rpc_endpoint.startswith("ws:") or rpc_endpoint.startswith("wss:"):
        provider = web3.WebsocketProvider(rpc_endpoint)
    else:
        provider = web3.HTTPProvider(rpc_endpoint)

    return web3.Web3(provider)


def normalize_private_key(private_key):
    if private_key.startswith("0x"):
        private_key = bytes(bytearray.fromhex(private_key[2:]))
    else:
        private_key = bytes(bytearray.fromhex(private_key))
    return private_key


def get_address_from_private(private_key):
    return web3.Account.from_key(private_key).address


def group_id_to_bytes(group_id):
    """
    Group id as it is stored in the contract (bytes32).
    Service metadata keeps it base64 encoded, the command line may pass it as 0x-hex.
    >>> group_id_to_bytes("0x" + "ab" * 32) == bytes.fromhex("ab" * 32)
    True
    >>> group_id_to_bytes(base64.b64encode(b"\\x01" * 32).decode()) == b"\\x01" * 32
    True
    """
    if isinstance(group_id, (bytes, bytearray)):
        return bytes(group_id)
    if not isinstance(group_id, str) or not group_id:
        raise ValueError("group_id should be bytes or non-empty string")
    if group_id.startswith("0x"):
        return bytes.fromhex(group_id[2:])
    try:
        return base64.b64decode(group_id, validate=True)
    except binascii.Error:
        raise ValueError("group_id %r is neither base64 nor 0x-hex" % group_id)


def group_id_to_str(group_id):
    return base64.b64encode(group_id).decode("utf-8")


def read_default_contract_address(w3, contract_name):
    chain_id = w3.net.version  # this will raise exception if endpoint is invalid
    networks = get_contract_def(contract_name).get("networks", {})
    contract_address = networks.get(chain_id, {}).get("address", None)
    if not contract_address:
        raise Exception("%s is not deployed on network %s, please set its address explicitly" % (
            contract_name, chain_id))
    return w3.to_checksum_address(contract_address)


def get_contract_object(w3, contract_name, address=None):
    if address is None:
        address = read_default_contract_address(w3, contract_name)
    return w3.eth.contract(abi=get_contract_def(contract_name)["abi"], address=w3.to_checksum_address(address))
