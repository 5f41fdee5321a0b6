import json
import sys
from textwrap import indent

import yaml

from mpe_channels import ChannelSDK
from mpe_channels.version import __version__


def serializable(o):
    if isinstance(o, bytes):
        return o.hex()
    else:
        return o.__dict__


class Command(object):
    def __init__(self, config, args, out_f=sys.stdout, err_f=sys.stderr):
        self.config = config
        self.args = args
        self.out_f = out_f
        self.err_f = err_f

    def _error(self, message):
        self._printerr("ERROR: {}".format(message))
        sys.exit(1)

    def _ensure(self, condition, message):
        if not condition:
            self._error(message)

    @staticmethod
    def _print(message, fd):
        message = str(message) + "\n"
        try:
            fd.write(message)
        except UnicodeEncodeError:
            if hasattr(fd, "buffer"):
                fd.buffer.write(message.encode("utf-8"))
            else:
                raise

    def _printout(self, message):
        if self.out_f is not None:
            self._print(message, self.out_f)

    def _printerr(self, message):
        if self.err_f is not None:
            self._print(message, self.err_f)

    def _pprint(self, item):
        self._printout(indent(yaml.dump(json.loads(json.dumps(item, default=serializable)), default_flow_style=False,
                                        indent=4), "    "))

    def _pprint_receipt(self, receipt):
        if getattr(self.args, "quiet", False):
            self._pprint({"transactionHash": receipt["transactionHash"]})
        else:
            self._pprint({"receipt_summary": {"blockHash": receipt["blockHash"],
                                              "blockNumber": receipt["blockNumber"],
                                              "gasUsed": receipt["gasUsed"],
                                              "transactionHash": receipt["transactionHash"]}})


class VersionCommand(Command):
    def show(self):
        self._pprint({"version": __version__})


class BlockchainCommand(Command):
    def __init__(self, config, args, out_f=sys.stdout, err_f=sys.stderr, sdk=None):
        super(BlockchainCommand, self).__init__(config, args, out_f, err_f)
        self._sdk = sdk

    @property
    def sdk(self):
        if self._sdk is None:
            self._sdk = ChannelSDK(self.config.to_sdk_config())
        return self._sdk

    @property
    def account(self):
        return self.sdk.account

    @property
    def mpe_contract(self):
        return self.sdk.mpe_contract


class SessionCommand(Command):
    def show(self):
        self._pprint(self.config.session_to_dict())

    def set(self):
        self.config.set_session_field(self.args.key, self.args.value, self.out_f)


class NetworkCommand(Command):
    def list(self):
        for network in self.config.get_all_networks_names():
            self._printout(network)

    def create(self):
        self.config.add_network(self.args.network_name, self.args.eth_rpc_endpoint)

    def set(self):
        self.config.set_session_network(self.args.network_name, self.out_f)


class IdentityCommand(Command):
    def list(self):
        for identity_name in self.config.get_all_identities_names():
            self._printout(identity_name)

    def create(self):
        identity_name = self.args.identity_name
        self._ensure(identity_name not in self.config.get_all_identities_names(),
                     "identity_name {} already exists".format(identity_name))
        identity = {"private_key": self.args.private_key}
        if self.args.signer_private_key:
            identity["signer_private_key"] = self.args.signer_private_key
        if self.args.network:
            identity["network"] = self.args.network
        self.config.add_identity(identity_name, identity, self.out_f)

    def set(self):
        self.config.set_session_identity(self.args.identity_name, self.out_f)
