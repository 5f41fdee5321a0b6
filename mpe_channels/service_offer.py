from web3 import Web3

from mpe_channels.errors import NoUsableServiceOffer
from mpe_channels.utils.utils import group_id_to_bytes, group_id_to_str


class ServiceOffer(object):
    """
    Channel group of a service: who gets paid, which group the channel binds to,
    what a call costs and how many blocks a channel must stay open for.
    """

    def __init__(self, payment_address, group_id, price_in_cogs, expiration_threshold, group_name=None):
        try:
            # ledger events carry checksummed addresses and web3 rejects anything else in a transaction
            self.payment_address = Web3.to_checksum_address(payment_address) if payment_address else None
            self.group_id = group_id_to_bytes(group_id) if group_id else None
        except (TypeError, ValueError) as e:
            raise NoUsableServiceOffer(str(e)) from e
        self.price_in_cogs = price_in_cogs
        self.expiration_threshold = expiration_threshold
        self.group_name = group_name

    def __repr__(self):
        return "ServiceOffer(payment_address=%s, group_id=%s, price_in_cogs=%s, expiration_threshold=%s)" % (
            self.payment_address, group_id_to_str(self.group_id) if self.group_id else None,
            self.price_in_cogs, self.expiration_threshold)

    @classmethod
    def from_group_metadata(cls, group: dict):
        """ group is one element of "groups" in service metadata """
        try:
            payment = group["payment"]
            return cls(payment["payment_address"],
                       group["group_id"],
                       int(group["pricing"][0]["price_in_cogs"]),
                       int(payment["payment_expiration_threshold"]),
                       group.get("group_name"))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise NoUsableServiceOffer("Malformed service group metadata: %r" % (e,)) from e

    def validate(self):
        if not self.payment_address:
            raise NoUsableServiceOffer("Service offer has no payment address")
        if not self.group_id:
            raise NoUsableServiceOffer("Service offer has no group id")
        if not isinstance(self.price_in_cogs, int) or self.price_in_cogs <= 0:
            raise NoUsableServiceOffer("Service offer price should be a positive number of cogs, got %r" % (
                self.price_in_cogs,))
        if not isinstance(self.expiration_threshold, int) or self.expiration_threshold < 0:
            raise NoUsableServiceOffer("Service offer expiration threshold should be a non-negative number of "
                                       "blocks, got %r" % (self.expiration_threshold,))
        return self

    def required_expiration(self, current_block):
        return current_block + self.expiration_threshold

    def key(self, sender):
        return sender.lower(), self.payment_address.lower(), self.group_id
