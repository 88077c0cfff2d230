import os

import dotenv
import rlp
from eth_abi.abi import encode
from eth_account import Account
from eth_utils import is_address, keccak, to_bytes, to_checksum_address

from scripts.utils import log

dotenv.load_dotenv()


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# anvil / hardhat account #0, only used when no key is configured
TEST_PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'


def get_account(accountName, allow_test_key=False):
    log.h1(f'Connecting to deployer account {accountName}')

    accountKey = os.environ.get(f'{accountName}_PRIVATE_KEY')
    if not accountKey:
        if not allow_test_key:
            raise KeyError(f'{accountName}_PRIVATE_KEY is not set')
        log.warn(f'{accountName}_PRIVATE_KEY not set, using the local test key')
        accountKey = TEST_PRIVATE_KEY

    account = Account.from_key(accountKey)
    log.h2(f'Deployer account {accountName} connected')

    return account


def is_valid_address(value) -> bool:
    return isinstance(value, str) and value.startswith("0x") and is_address(value)


def checksum(address: str) -> str:
    return to_checksum_address(address)


def same_address(a, b) -> bool:
    if a is None or b is None:
        return a is b
    return a.lower() == b.lower()


def encode_args(types: list, args: list) -> str:
    """
    ABI-encode constructor or initializer arguments.
    Returns hex string without '0x' prefix
    """
    if not types:
        return ""
    return encode(list(types), list(args)).hex()


def predict_contract_address(deployer: str, nonce: int) -> str:
    """
    Address a CREATE transaction from `deployer` with `nonce` will produce,
    known before the transaction is mined.
    """
    encoded = rlp.encode([to_bytes(hexstr=deployer), nonce])
    return to_checksum_address(keccak(encoded)[12:])
