import logging

logger = logging.getLogger(__name__)


class ServiceClient:
    def __init__(self, service_offer, account, payment_channel_provider, payment_strategy, concurrency_manager):
        self.service_offer = service_offer.validate()
        self.account = account
        self.payment_channel_provider = payment_channel_provider
        self.payment_strategy = payment_strategy
        self.concurrency_manager = concurrency_manager
        self.payment_channels = []
        self.last_read_block = 0

    @property
    def channel_key(self):
        return self.service_offer.key(self.account.address)

    def _filter_existing_channels_from_new_payment_channels(self, new_payment_channels):
        existing_ids = {channel.channel_id for channel in self.payment_channels}
        return [channel for channel in new_payment_channels if channel.channel_id not in existing_ids]

    def load_open_channels(self):
        current_block_number = self.get_current_block_number()
        new_payment_channels = self.payment_channel_provider.get_past_open_channels(
            self.account, self.service_offer.payment_address, self.service_offer.group_id,
            self.last_read_block, current_block_number)
        self.payment_channels = self.payment_channels + self._filter_existing_channels_from_new_payment_channels(
            new_payment_channels)
        self.last_read_block = current_block_number + 1
        return self.payment_channels

    def update_channel_states(self):
        for channel in self.payment_channels:
            channel.refresh()
        return self.payment_channels

    def get_current_block_number(self):
        return self.payment_channel_provider.current_block_number()

    def default_channel_expiration(self):
        return self.service_offer.required_expiration(self.get_current_block_number())

    def open_channel(self, amount, expiration):
        channel = self.payment_channel_provider.open_channel(
            self.account, amount, expiration, self.service_offer.payment_address, self.service_offer.group_id)
        self._remember(channel)
        return channel

    def deposit_and_open_channel(self, amount, expiration):
        channel = self.payment_channel_provider.deposit_and_open_channel(
            self.account, amount, expiration, self.service_offer.payment_address, self.service_offer.group_id)
        self._remember(channel)
        return channel

    def get_payment_channel(self):
        """ Return a channel which can pay for one more call, funding/extending/opening one if needed """
        with self.concurrency_manager.lock(self.channel_key):
            self.load_open_channels()
            self.update_channel_states()
            payment_channel = self.payment_strategy.select_channel(
                self.account, self.service_offer, self.payment_channels, self.get_current_block_number())
            self._remember(payment_channel)
            return payment_channel

    def claim_timeout_all(self):
        """ Reclaim the remaining funds of every expired channel. Returns the ids of claimed channels """
        claimed = []
        with self.concurrency_manager.lock(self.channel_key):
            self.load_open_channels()
            self.update_channel_states()
            current_block_number = self.get_current_block_number()
            for channel in self.payment_channels:
                if channel.expiration <= current_block_number and channel.value > 0:
                    channel.claim_timeout(current_block_number)
                    claimed.append(channel.channel_id)
        logger.info("Claimed timeout for channels %s", claimed)
        return claimed

    def _remember(self, channel):
        if channel.channel_id not in {c.channel_id for c in self.payment_channels}:
            self.payment_channels.append(channel)
