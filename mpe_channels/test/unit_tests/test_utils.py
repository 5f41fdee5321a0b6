import base64
import unittest
from unittest.mock import MagicMock, patch

from mpe_channels.utils.utils import get_contract_object, group_id_to_bytes, group_id_to_str

GROUP_ID = bytes(range(32))
MPE_DEF = {"abi": [{"name": "channels"}], "networks": {"11155111": {"address": "0x" + "ee" * 20}}}


class TestGroupId(unittest.TestCase):

    def test_group_id_to_bytes(self):
        self.assertEqual(group_id_to_bytes(GROUP_ID), GROUP_ID)
        self.assertEqual(group_id_to_bytes(bytearray(GROUP_ID)), GROUP_ID)
        self.assertEqual(group_id_to_bytes("0x" + GROUP_ID.hex()), GROUP_ID)
        self.assertEqual(group_id_to_bytes(group_id_to_str(GROUP_ID)), GROUP_ID)
        self.assertEqual(group_id_to_str(GROUP_ID), base64.b64encode(GROUP_ID).decode("utf-8"))

    def test_invalid_group_id(self):
        for group_id in ("", "not base64!", None, 12):
            with self.subTest(group_id=group_id):
                with self.assertRaises(ValueError):
                    group_id_to_bytes(group_id)


@patch("mpe_channels.utils.utils.get_contract_def", return_value=MPE_DEF)
class TestGetContractObject(unittest.TestCase):

    def setUp(self):
        self.w3 = MagicMock()
        self.w3.net.version = "11155111"
        self.w3.to_checksum_address.side_effect = lambda address: address

    def test_default_address_from_networks(self, get_contract_def):
        get_contract_object(self.w3, "MultiPartyEscrow")
        get_contract_def.assert_called_with("MultiPartyEscrow")
        self.w3.eth.contract.assert_called_once_with(abi=MPE_DEF["abi"], address="0x" + "ee" * 20)

    def test_explicit_address(self, get_contract_def):
        get_contract_object(self.w3, "MultiPartyEscrow", "0x" + "12" * 20)
        self.w3.eth.contract.assert_called_once_with(abi=MPE_DEF["abi"], address="0x" + "12" * 20)

    def test_unknown_network(self, get_contract_def):
        self.w3.net.version = "1337"
        with self.assertRaises(Exception):
            get_contract_object(self.w3, "MultiPartyEscrow")
        self.w3.eth.contract.assert_not_called()


if __name__ == '__main__':
    unittest.main()
