"""Network ids and configs."""
import pytest

from xdcadapter.chain import NetworkId, UnknownNetwork, XDC_APOTHEM, XDC_MAINNET, get_network_config


def test_network_id():
    assert NetworkId.mainnet.value == 50
    assert NetworkId.mainnet.get_name() == "XDC Mainnet"
    assert NetworkId.apothem.get_slug() == "apothem"
    assert NetworkId.apothem.is_testnet()
    assert not NetworkId.mainnet.is_testnet()


def test_get_by_slug():
    assert NetworkId.get_by_slug("mainnet") == NetworkId.mainnet
    assert NetworkId.get_by_slug("Testnet") == NetworkId.apothem

    with pytest.raises(UnknownNetwork):
        NetworkId.get_by_slug("ropsten")


def test_get_network_config():
    assert get_network_config(50) is XDC_MAINNET
    assert get_network_config(NetworkId.apothem) is XDC_APOTHEM
    assert get_network_config("apothem").chain_id == 51

    with pytest.raises(UnknownNetwork):
        get_network_config(1)


def test_system_contracts():
    assert XDC_MAINNET.validator_contract == "xdc0000000000000000000000000000000000000088"
    assert XDC_MAINNET.epoch_length == 900


def test_custom_rpc_url():
    config = XDC_APOTHEM.with_rpc_url("http://localhost:8545")
    assert config.name == "Custom Network"
    assert config.rpc_url == "http://localhost:8545"
    assert config.chain_id == 51
    assert config.validator_contract == XDC_APOTHEM.validator_contract
    # Original untouched
    assert XDC_APOTHEM.rpc_url == "https://erpc.apothem.network"

    custom = XDC_MAINNET.with_rpc_url("http://localhost:8545", chain_id=551)
    assert custom.get_network_id() is None
    assert XDC_MAINNET.get_network_id() == NetworkId.mainnet
