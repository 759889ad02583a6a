"""Constants and mappings for the STX raffle client."""

from enum import Enum

MICRO_STX_PER_STX = 1_000_000


class StacksChain(str, Enum):
    """CAIP-2 chain identifiers negotiated over WalletConnect."""

    MAINNET = "stacks:1"
    TESTNET = "stacks:2147483648"


# Stacks API endpoints used for read-only contract calls
# https://docs.hiro.so/stacks/api
API_URLS = {
    "mainnet": "https://api.mainnet.hiro.so",
    "testnet": "https://api.testnet.hiro.so",
}

STACKS_NAMESPACE = "stacks"

METHOD_SIGN_MESSAGE = "stacks_signMessage"
METHOD_STX_TRANSFER = "stacks_stxTransfer"
METHOD_CONTRACT_CALL = "stacks_contractCall"
METHOD_CONTRACT_DEPLOY = "stacks_contractDeploy"

PAIRING_METHODS = (
    METHOD_SIGN_MESSAGE,
    METHOD_STX_TRANSFER,
    METHOD_CONTRACT_CALL,
    METHOD_CONTRACT_DEPLOY,
)
PAIRING_EVENTS = ("accountsChanged", "chainChanged")

SESSION_SLOT = "walletconnect_session"

USER_DISCONNECTED_CODE = 6000
USER_DISCONNECTED_MESSAGE = "User disconnected"


def get_chain_id(network: str) -> str:
    """Get the pairing chain identifier for a network name.

    Args:
        network: Network name ("mainnet" or "testnet")

    Returns:
        Chain identifier

    Raises:
        ValueError: If network is not known
    """
    network = network.lower()
    if network == "mainnet":
        return StacksChain.MAINNET.value
    if network == "testnet":
        return StacksChain.TESTNET.value
    raise ValueError(f"Unknown Stacks network: {network}")


def get_api_url(network: str) -> str:
    """Get the default Stacks API base URL for a network name.

    Raises:
        ValueError: If network is not known
    """
    network = network.lower()
    if network not in API_URLS:
        raise ValueError(f"Unknown Stacks network: {network}")
    return API_URLS[network]
