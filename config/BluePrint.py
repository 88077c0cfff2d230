# confirmations / timeouts
DEFAULT_CONFIRMATIONS = 2
DEFAULT_TIMEOUT = 300  # seconds
DEFAULT_POLL_DELAY = 2  # seconds


CONSTANTS = {
    "UNISWAP_V2_ROUTER": "0x425141165d3DE9FEC831896C016617a52363b687",
    "NFT_BASE_URL": "https://ipfs.io/ipfs/QmV6kA1AedDtbLWB4RZm2gMLjFrifwt4gEmQeWD6t2ywLW/",
    "NFT_NAME": "Ambassadors",
    "NFT_SYMBOL": "Ambassadors",
}


# cross-chain selectors
SELECTORS = {
    "sepolia": 16015286601757825753,
    "polygonAmoy": 16281711391670634445,
    "bscTestnet": 13264668187771770619,
}


NETWORKS = {
    "sepolia": {
        "CHAIN_ID": 11155111,
        "ROUTER": "0x0BF3dE8c5D3e8A2B34D2BEeB17ABfCeBaf363A59",
        # sender on sepolia talks to amoy
        "OUTBOUND_SELECTOR": SELECTORS["polygonAmoy"],
        "INBOUND_SELECTOR": SELECTORS["polygonAmoy"],
        "NFT": {
            "NAME": CONSTANTS["NFT_NAME"],
            "SYMBOL": CONSTANTS["NFT_SYMBOL"],
            "BASE_URI": CONSTANTS["NFT_BASE_URL"],
        },
        "RPC_ENV": "SEPOLIA_RPC_URL",
        "DEFAULT_RPC": "https://ethereum-sepolia-rpc.publicnode.com",
        "EXPLORER_URL": "https://sepolia.etherscan.io/address/",
        "CONFIRMATIONS": 2,
    },
    "polygonAmoy": {
        "CHAIN_ID": 80002,
        "ROUTER": "0x9C32fCB86BF0f4a1A8921a9Fe46de3198bb884B2",
        # receiver on amoy accepts messages from sepolia
        "OUTBOUND_SELECTOR": SELECTORS["sepolia"],
        "INBOUND_SELECTOR": SELECTORS["sepolia"],
        "NFT": {
            "NAME": CONSTANTS["NFT_NAME"],
            "SYMBOL": CONSTANTS["NFT_SYMBOL"],
            "BASE_URI": CONSTANTS["NFT_BASE_URL"],
        },
        "RPC_ENV": "AMOY_RPC_URL",
        "DEFAULT_RPC": "https://rpc-amoy.polygon.technology",
        "EXPLORER_URL": "https://amoy.polygonscan.com/address/",
        "CONFIRMATIONS": 3,
    },
    "bscTestnet": {
        "CHAIN_ID": 97,
        "ROUTER": "0xE1053aE1857476f36A3C62580FF9b016E8EE8F6f",
        "OUTBOUND_SELECTOR": SELECTORS["sepolia"],
        "INBOUND_SELECTOR": SELECTORS["sepolia"],
        "NFT": None,
        "RPC_ENV": "BSC_TESTNET_RPC_URL",
        "DEFAULT_RPC": "https://data-seed-prebsc-1-s1.binance.org:8545",
        "EXPLORER_URL": "https://testnet.bscscan.com/address/",
        "CONFIRMATIONS": 3,
    },
    "bsc": {
        "CHAIN_ID": 56,
        # no bridge router published for mainnet yet
        "ROUTER": None,
        "OUTBOUND_SELECTOR": None,
        "INBOUND_SELECTOR": None,
        "NFT": None,
        "RPC_ENV": "BSC_RPC_URL",
        "DEFAULT_RPC": "https://bsc-dataseed1.binance.org",
        "EXPLORER_URL": "https://bscscan.com/address/",
        "CONFIRMATIONS": 5,
    },
}


# params are (source, key or value, abi type)
COMPONENTS = {
    "Sender": {
        "CONTRACT": "BridgeSender",
        "KIND": "immutable",
        "PARAMS": [
            ("profile", "router", "address"),
            ("profile", "outbound_selector", "uint64"),
        ],
    },
    "Receiver": {
        "CONTRACT": "BridgeReceiver",
        "KIND": "immutable",
        "PARAMS": [
            ("profile", "router", "address"),
            ("profile", "inbound_selector", "uint64"),
        ],
    },
    "Manager": {
        "CONTRACT": "BridgeManager",
        "KIND": "upgradeable-transparent",
        "PARAMS": [
            ("profile", "router", "address"),
            ("profile", "outbound_selector", "uint64"),
        ],
    },
    # plain constructor variant, router only (first bscTestnet deployment)
    "ManagerImmutable": {
        "CONTRACT": "BridgeManager",
        "KIND": "immutable",
        "PARAMS": [
            ("profile", "router", "address"),
        ],
    },
    "NFT": {
        "CONTRACT": "BridgeNFT",
        "KIND": "immutable",
        "PARAMS": [
            ("profile", "nft.name", "string"),
            ("profile", "nft.symbol", "string"),
            ("profile", "nft.base_uri", "string"),
        ],
    },
    "Teleport": {
        "CONTRACT": "Teleport",
        "KIND": "upgradeable-transparent",
        "PARAMS": [
            ("literal", CONSTANTS["UNISWAP_V2_ROUTER"], "address"),
        ],
    },
}
