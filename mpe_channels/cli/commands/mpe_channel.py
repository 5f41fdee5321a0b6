from mpe_channels.cli.commands.commands import BlockchainCommand
from mpe_channels.service_offer import ServiceOffer
from mpe_channels.utils.utils import group_id_to_bytes, group_id_to_str


class MPEChannelCommand(BlockchainCommand):

    def _get_channel(self, channel_id):
        channel = self.sdk.payment_channel_provider.make_channel(self.account, channel_id)
        return channel.refresh()

    def _expiration_str_to_blocks(self, expiration_str, current_block):
        s = expiration_str
        if s.startswith("+") and s.endswith("days"):
            rez = current_block + int(s[1:-4]) * 4 * 60 * 24
        elif s.startswith("+") and s.endswith("blocks"):
            rez = current_block + int(s[1:-6])
        else:
            rez = int(s)
        return rez

    def _get_expiration_from_args(self):
        current_block = self.mpe_contract.block_number()
        expiration = self._expiration_str_to_blocks(self.args.expiration, current_block)
        if expiration <= current_block:
            raise Exception("Channel expiration %i is in the past (current block %i)" % (expiration, current_block))
        return expiration

    def _get_service_offer(self):
        return ServiceOffer(self.args.payment_address, group_id_to_bytes(self.args.group_id),
                            self.args.price, self.args.expiration_threshold)

    @staticmethod
    def _channel_to_dict(channel):
        return {"channel_id": channel.channel_id,
                "nonce": channel.nonce,
                "sender": channel.sender,
                "signer": channel.signer,
                "recipient": channel.recipient,
                "group_id": group_id_to_str(channel.group_id),
                "value": channel.value,
                "expiration": channel.expiration}

    def print_channel(self):
        self._pprint(self._channel_to_dict(self._get_channel(self.args.channel_id)))

    def print_channels_filter_group(self):
        group_id = group_id_to_bytes(self.args.group_id) if self.args.group_id else None
        channels = self.sdk.payment_channel_provider.get_past_open_channels(
            self.account, self.args.payment_address, group_id, self.args.from_block)
        self._printout("Channels for sender: %s" % self.account.address)
        self._pprint([self._channel_to_dict(channel.refresh()) for channel in channels])

    def open_channel(self):
        expiration = self._get_expiration_from_args()
        provider = self.sdk.payment_channel_provider
        group_id = group_id_to_bytes(self.args.group_id)
        if self.args.deposit:
            channel = provider.deposit_and_open_channel(self.account, self.args.amount, expiration,
                                                        self.args.payment_address, group_id)
        else:
            channel = provider.open_channel(self.account, self.args.amount, expiration,
                                            self.args.payment_address, group_id)
        self._printout("#channel_id")
        self._printout(channel.channel_id)

    def channel_add_funds(self):
        self._pprint_receipt(self._get_channel(self.args.channel_id).add_funds(self.args.amount))

    def channel_extend(self):
        channel = self._get_channel(self.args.channel_id)
        self._pprint_receipt(channel.extend_expiration(self._get_expiration_from_args()))

    def channel_extend_and_add_funds(self):
        channel = self._get_channel(self.args.channel_id)
        self._pprint_receipt(channel.extend_and_add_funds(self._get_expiration_from_args(), self.args.amount))

    def channel_claim_timeout(self):
        self._pprint_receipt(self._get_channel(self.args.channel_id).claim_timeout())

    def channel_claim_timeout_all(self):
        provider = self.sdk.payment_channel_provider
        current_block = self.mpe_contract.block_number()
        for channel in provider.get_past_open_channels(self.account, None, None, self.args.from_block):
            channel.refresh()
            if channel.value > 0 and channel.expiration <= current_block:
                self._printout("# claim timeout for channel %s" % channel.channel_id)
                self._pprint_receipt(channel.claim_timeout(current_block))

    def select_channel(self):
        service_client = self.sdk.create_service_client(self._get_service_offer())
        channel = service_client.get_payment_channel()
        self._pprint(self._channel_to_dict(channel))

    def print_block_number(self):
        self._printout(self.mpe_contract.block_number())
