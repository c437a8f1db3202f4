from subql_migrate.errors import SemanticMismatchError
from subql_migrate.models import NetworkFamily

# Subgraph data source kind -> SubQuery network family.
GRAPH_TO_SUBQL_NETWORK_FAMILY: dict[str, NetworkFamily] = {
    "ethereum": NetworkFamily.ETHEREUM,
    "ethereum/contract": NetworkFamily.ETHEREUM,
}

# Subgraph network name -> chain id, per network family.
GRAPH_NETWORK_NAME_CHAIN_ID: dict[NetworkFamily, dict[str, str]] = {
    NetworkFamily.ETHEREUM: {
        "arbitrum-one": "42161",
        "arbitrum-goerli": "421613",
        "arbitrum-sepolia": "421614",
        "avalanche": "43114",
        "base": "8453",
        "base-sepolia": "84532",
        "bsc": "56",
        "celo": "42220",
        "chapel": "97",
        "fantom": "250",
        "fuji": "43113",
        "gnosis": "100",
        "goerli": "5",
        "holesky": "17000",
        "linea": "59144",
        "mainnet": "1",
        "matic": "137",
        "mumbai": "80001",
        "optimism": "10",
        "optimism-sepolia": "11155420",
        "polygon-amoy": "80002",
        "polygon-zkevm": "1101",
        "scroll": "534352",
        "sepolia": "11155111",
        "zksync-era": "324",
    },
}

# Runner package that indexes each network family.
RUNNER_BY_NETWORK_FAMILY: dict[NetworkFamily, str] = {
    NetworkFamily.SUBSTRATE: "@subql/node",
    NetworkFamily.COSMOS: "@subql/node-cosmos",
    NetworkFamily.ALGORAND: "@subql/node-algorand",
    NetworkFamily.ETHEREUM: "@subql/node-ethereum",
    NetworkFamily.NEAR: "@subql/node-near",
    NetworkFamily.STELLAR: "@subql/node-stellar",
    NetworkFamily.CONCORDIUM: "@subql/node-concordium",
    NetworkFamily.STARKNET: "@subql/node-starknet",
    NetworkFamily.SOLANA: "@subql/node-solana",
}


def get_chain_id_by_network_name(network_family: NetworkFamily, chain_name: str) -> str:
    chain_id = GRAPH_NETWORK_NAME_CHAIN_ID.get(network_family, {}).get(chain_name)
    if not chain_id:
        raise SemanticMismatchError(f"Could not find chainId for network {network_family} chain {chain_name}")
    return chain_id


def find_runner_by_network_family(network_family: NetworkFamily) -> str:
    runner = RUNNER_BY_NETWORK_FAMILY.get(network_family)
    if runner is None:
        raise SemanticMismatchError(f"Runner not found for network family {network_family}")
    return runner
