from configparser import ConfigParser, ExtendedInterpolation
from pathlib import Path
import sys

default_config_folder = Path("~").expanduser().joinpath(".mpe-channels")
DEFAULT_NETWORK = "local"


class Config(ConfigParser):
    def __init__(self, _config_folder=default_config_folder, out_f=sys.stderr):
        super(Config, self).__init__(interpolation=ExtendedInterpolation(), delimiters=("=",))
        self._config_file = _config_folder.joinpath("config")
        if self._config_file.exists():
            with open(self._config_file) as f:
                self.read_file(f)
        else:
            self.create_default_config(out_f)

    def get_session_network_name(self):
        session_network = self["session"]["network"]
        self._check_section("network.%s" % session_network)
        return session_network

    def safe_get_session_identity_network_names(self):
        if "identity" not in self["session"]:
            raise Exception("Session identity is not set, please add one with 'mpe-channels identity create'")

        session_identity = self["session"]["identity"]
        self._check_section("identity.%s" % session_identity)

        session_network = self.get_session_network_name()

        network = self._get_identity_section(session_identity).get("network")
        if network and network != session_network:
            raise Exception("Your session identity '%s' is bind to network '%s', which is different from your"
                            " session network '%s', please switch identity or network" % (
                                session_identity, network, session_network))
        return session_identity, session_network

    def set_session_network(self, network, out_f):
        if network not in self.get_all_networks_names():
            raise Exception("Network %s is not in config" % network)
        print("Switch to network: %s" % network, file=out_f)
        self["session"]["network"] = network
        self._persist()

    def set_session_identity(self, identity, out_f):
        if identity not in self.get_all_identities_names():
            raise Exception('Identity "%s" is not in config' % identity)
        network = self._get_identity_section(identity).get("network")
        if network:
            print('Identity "%s" is bind to network "%s"' % (identity, network), file=out_f)
            self.set_session_network(network, out_f)
        print("Switch to identity: %s" % identity, file=out_f)
        self["session"]["identity"] = identity
        self._persist()

    # session is the union of session.identity + session.network
    # if value is presented in both we get it from session.identity
    def get_session_field(self, key, exception_if_not_found=True):
        session_identity, session_network = self.safe_get_session_identity_network_names()

        rez_identity = self._get_identity_section(session_identity).get(key)
        rez_network = self._get_network_section(session_network).get(key)

        rez = rez_identity or rez_network
        if not rez and exception_if_not_found:
            raise Exception("Cannot find %s in the session.identity and in the session.network" % key)
        return rez

    def set_session_field(self, key, value, out_f):
        if key in get_session_network_keys():
            session_network = self.get_session_network_name()
            self._get_network_section(session_network)[key] = str(value)
            print("set {}={} for network={}".format(key, value, session_network), file=out_f)
        elif key in get_session_identity_keys():
            session_identity, _ = self.safe_get_session_identity_network_names()
            self._get_identity_section(session_identity)[key] = str(value)
            print("set {}={} for identity={}".format(key, value, session_identity), file=out_f)
        else:
            raise Exception("key {} not in {}".format(key, get_session_keys()))
        self._persist()

    def session_to_dict(self):
        session_identity, session_network = self.safe_get_session_identity_network_names()

        show = {"session", "network.%s" % session_network}
        response = {f: dict(self[f]) for f in show}
        # never print the secret itself
        identity = dict(self["identity.%s" % session_identity])
        for secret in ("private_key", "signer_private_key"):
            if secret in identity:
                identity[secret] = "*****"
        response["identity.%s" % session_identity] = identity
        return response

    def to_sdk_config(self):
        """ configuration dictionary understood by ChannelSDK """
        sdk_config = {"eth_rpc_endpoint": self.get_session_field("default_eth_rpc_endpoint")}
        for key in get_session_keys():
            if key == "default_eth_rpc_endpoint":
                continue
            value = self.get_session_field(key, exception_if_not_found=False)
            if value:
                sdk_config[key] = value
        return sdk_config

    def add_network(self, network, rpc_endpoint):
        network_section = "network.%s" % network
        if network_section in self:
            raise Exception("Network section %s already exists in config" % network)

        self[network_section] = {}
        self[network_section]["default_eth_rpc_endpoint"] = str(rpc_endpoint)
        self._persist()

    def add_identity(self, identity_name, identity, out_f=sys.stdout):
        identity_section = "identity.%s" % identity_name
        if identity_section in self:
            raise Exception("Identity section %s already exists in config" % identity_section)
        if "network" in identity and identity["network"] not in self.get_all_networks_names():
            raise Exception("Network %s is not in config" % identity["network"])

        self[identity_section] = identity
        self._persist()
        # switch to it, if it was the first identity
        if len(self.get_all_identities_names()) == 1:
            print("You've just added your first identity %s. We will automatically switch to it!" % identity_name,
                  file=out_f)
            self.set_session_identity(identity_name, out_f)

    def _get_network_section(self, network):
        """ return section for network """
        return self["network.%s" % network]

    def _get_identity_section(self, identity):
        """ return section for the specific identity """
        return self["identity.%s" % identity]

    def get_all_identities_names(self):
        return [x[len("identity."):] for x in self.sections() if x.startswith("identity.")]

    def get_all_networks_names(self):
        return [x[len("network."):] for x in self.sections() if x.startswith("network.")]

    def create_default_config(self, out_f=sys.stderr):
        """ Create default configuration if config file does not exist """
        # make config directory with the minimal possible permission
        self._config_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        self["network.local"] = {
            "default_eth_rpc_endpoint": "http://localhost:8545"
        }
        self["network.sepolia"] = {
            "default_eth_rpc_endpoint": "https://rpc.sepolia.org",
        }
        self["session"] = {"network": DEFAULT_NETWORK}
        self._persist()
        print("We've created configuration file with default values in: %s\n" % str(self._config_file), file=out_f)

    def _check_section(self, s):
        if s not in self:
            raise Exception("Config error, section %s is absent" % s)

    def _persist(self):
        with open(self._config_file, "w") as f:
            self.write(f)
        self._config_file.chmod(0o600)


def get_session_identity_keys():
    return ["private_key", "signer_private_key"]


def get_session_network_keys():
    return ["default_eth_rpc_endpoint", "mpe_contract_address", "token_contract_address", "transaction_timeout",
            "block_offset", "call_allowance", "strict_channel_state"]


def get_session_keys():
    return get_session_network_keys() + get_session_identity_keys()
