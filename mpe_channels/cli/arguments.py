import argparse
import sys

from mpe_channels.cli.commands.commands import IdentityCommand, NetworkCommand, SessionCommand, VersionCommand
from mpe_channels.cli.commands.mpe_account import MPEAccountCommand
from mpe_channels.cli.commands.mpe_channel import MPEChannelCommand
from mpe_channels.config import get_session_keys
from mpe_channels.utils.token2cogs import strtoken2cogs


class CustomParser(argparse.ArgumentParser):
    def error(self, message):
        sys.stderr.write("error: {}\n\n".format(message))
        self.print_help(sys.stderr)
        sys.exit(2)


def get_root_parser(config):
    parser = CustomParser(prog="mpe-channels", description="MultiPartyEscrow payment channels CLI")
    parser.add_argument("--print-traceback", action="store_true",
                        help="Do not catch last exception and print full TraceBack")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log ledger operations (-v info, -vv debug)")
    add_root_options(parser, config)

    return parser


def add_root_options(parser, config):
    subparsers = parser.add_subparsers(title="mpe-channels commands", metavar="COMMAND")
    subparsers.required = True

    p = subparsers.add_parser("version", help="Show version and exit")
    add_version_options(p)

    p = subparsers.add_parser("identity", help="Manage identities")
    add_identity_options(p)

    p = subparsers.add_parser("network", help="Manage networks")
    add_network_options(p)

    p = subparsers.add_parser("session", help="View session state")
    p.set_defaults(cmd=SessionCommand, fn="show")

    p = subparsers.add_parser("set", help="Set session keys")
    p.set_defaults(cmd=SessionCommand, fn="set")
    p.add_argument("key", choices=get_session_keys(), help="Session key to set")
    p.add_argument("value", help="Desired value of session key")

    p = subparsers.add_parser("account", help="Token and MPE escrow account")
    add_mpe_account_options(p)

    p = subparsers.add_parser("channel", help="Interact with MPE payment channels")
    add_mpe_channel_options(p)


def add_version_options(parser):
    parser.set_defaults(cmd=VersionCommand)
    parser.set_defaults(fn="show")


def add_identity_options(parser):
    parser.set_defaults(cmd=IdentityCommand)
    subparsers = parser.add_subparsers(title="actions", metavar="ACTION")
    subparsers.required = True

    p = subparsers.add_parser("list", help="List of identities")
    p.set_defaults(fn="list")

    p = subparsers.add_parser("create", help="Create a new identity")
    p.set_defaults(fn="create")
    p.add_argument("identity_name", help="Name of identity to create")
    p.add_argument("private_key", help="Hex-encoded private key")
    p.add_argument("--signer-private-key", default=None,
                   help="Hex-encoded private key of the channel signer (default is private_key)")
    p.add_argument("--network", default=None, help="Network this identity will be bind to")

    p = subparsers.add_parser("set", help="Switch to identity")
    p.set_defaults(fn="set")
    p.add_argument("identity_name", help="Name of identity")


def add_network_options(parser):
    parser.set_defaults(cmd=NetworkCommand)
    subparsers = parser.add_subparsers(title="actions", metavar="ACTION")
    subparsers.required = True

    p = subparsers.add_parser("list", help="List of networks")
    p.set_defaults(fn="list")

    p = subparsers.add_parser("create", help="Create a new network")
    p.set_defaults(fn="create")
    p.add_argument("network_name", help="Name of network to create")
    p.add_argument("eth_rpc_endpoint", help="Ethereum rpc endpoint")

    p = subparsers.add_parser("set", help="Switch to network")
    p.set_defaults(fn="set")
    p.add_argument("network_name", help="Name of network")


def add_p_quiet(p):
    p.add_argument("--quiet", "-q", action="store_true", help="Print only transaction hash")


def add_mpe_account_options(parser):
    parser.set_defaults(cmd=MPEAccountCommand)
    subparsers = parser.add_subparsers(title="Commands", metavar="COMMAND")
    subparsers.required = True

    p = subparsers.add_parser("print", help="Print the current ETH account")
    p.set_defaults(fn="print_account")

    p = subparsers.add_parser("balance", help="Print balance of tokens and balance of MPE wallet")
    p.set_defaults(fn="print_token_and_mpe_balances")
    p.add_argument("--account", default=None, help="Account to print balance for (default is the current identity)")

    p = subparsers.add_parser("deposit", help="Deposit tokens to MPE wallet")
    p.set_defaults(fn="deposit_to_mpe")
    p.add_argument("amount", type=strtoken2cogs, help="Amount of tokens to deposit in MPE wallet")
    add_p_quiet(p)

    p = subparsers.add_parser("withdraw", help="Withdraw tokens from MPE wallet")
    p.set_defaults(fn="withdraw_from_mpe")
    p.add_argument("amount", type=strtoken2cogs, help="Amount of tokens to withdraw from MPE wallet")
    add_p_quiet(p)


def add_p_channel_id(p):
    # int is ok here because in python3 int is unlimited
    p.add_argument("channel_id", type=int, help="channel_id")


def add_p_expiration(p):
    p.add_argument("expiration",
                   help="Expiration time in blocks (<int>), or in blocks related to the current_block "
                        "(+<int>blocks), or in days related to the current_block (+<int>days)")


def add_p_from_block(p):
    p.add_argument("--from-block", type=int, default=0,
                   help="Start searching from this block (default is the MPE deployment block)")


def add_p_group(p):
    p.add_argument("payment_address", help="Payment address of the service group (channel recipient)")
    p.add_argument("group_id", help="Group id of the service group (base64 or 0x-hex)")


def add_mpe_channel_options(parser):
    parser.set_defaults(cmd=MPEChannelCommand)
    subparsers = parser.add_subparsers(title="Commands", metavar="COMMAND")
    subparsers.required = True

    p = subparsers.add_parser("print", help="Print the on-chain state of the channel")
    p.set_defaults(fn="print_channel")
    add_p_channel_id(p)

    p = subparsers.add_parser("print-filter-group",
                              help="Print channels opened by the current identity, optionally for one group")
    p.set_defaults(fn="print_channels_filter_group")
    p.add_argument("--payment-address", default=None, help="Only channels to this recipient")
    p.add_argument("--group-id", default=None, help="Only channels of this group (base64 or 0x-hex)")
    add_p_from_block(p)

    p = subparsers.add_parser("open", help="Open a new channel")
    p.set_defaults(fn="open_channel")
    add_p_group(p)
    p.add_argument("amount", type=strtoken2cogs, help="Amount of tokens to put in the channel")
    add_p_expiration(p)
    p.add_argument("--deposit", action="store_true",
                   help="Deposit the amount from the token balance and open in one transaction")

    p = subparsers.add_parser("add-funds", help="Add funds to the channel")
    p.set_defaults(fn="channel_add_funds")
    add_p_channel_id(p)
    p.add_argument("amount", type=strtoken2cogs, help="Amount of tokens to add to the channel")
    add_p_quiet(p)

    p = subparsers.add_parser("extend", help="Set new expiration for the channel")
    p.set_defaults(fn="channel_extend")
    add_p_channel_id(p)
    add_p_expiration(p)
    add_p_quiet(p)

    p = subparsers.add_parser("extend-add", help="Set new expiration for the channel and add funds")
    p.set_defaults(fn="channel_extend_and_add_funds")
    add_p_channel_id(p)
    add_p_expiration(p)
    p.add_argument("amount", type=strtoken2cogs, help="Amount of tokens to add to the channel")
    add_p_quiet(p)

    p = subparsers.add_parser("claim-timeout", help="Claim timeout of the channel")
    p.set_defaults(fn="channel_claim_timeout")
    add_p_channel_id(p)
    add_p_quiet(p)

    p = subparsers.add_parser("claim-timeout-all",
                              help="Claim timeout for all expired channels which have current identity as a sender")
    p.set_defaults(fn="channel_claim_timeout_all")
    add_p_from_block(p)
    add_p_quiet(p)

    p = subparsers.add_parser("select",
                              help="Get a channel usable for one call: reuse, extend, fund or open one")
    p.set_defaults(fn="select_channel")
    add_p_group(p)
    p.add_argument("price", type=strtoken2cogs, help="Price of one call in tokens")
    p.add_argument("expiration_threshold", type=int,
                   help="Number of blocks the channel must stay open after the current block")

    p = subparsers.add_parser("block-number", help="Print the last ethereum block number")
    p.set_defaults(fn="print_block_number")
