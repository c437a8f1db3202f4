"""Shared fixtures and helpers for tests."""

import json
from pathlib import Path

import pytest

from subql_migrate.migrate.manifest import read_subgraph_manifest
from subql_migrate.models import SubgraphManifest

_TESTS_ROOT = Path(__file__).parent


# ---------------------------------------------------------------------------
# Auto-marker: tag every test under tests/unit as "unit"
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_TESTS_ROOT)
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Fixture data
# ---------------------------------------------------------------------------

SUBGRAPH_YAML = """\
specVersion: 0.0.5
description: POAP subgraph
schema:
  file: ./schema.graphql
dataSources:
  - kind: ethereum/contract
    name: Poap
    network: mainnet
    source:
      address: "0x22C1f6050E56d2876009903609a2cC3fEf83B415"
      abi: Poap
      startBlock: 7844214
    mapping:
      kind: ethereum/events
      apiVersion: 0.0.6
      language: wasm/assemblyscript
      entities:
        - Event
        - Token
        - Account
      abis:
        - name: Poap
          file: ./abis/Poap.json
      eventHandlers:
        - event: EventToken(uint256,uint256)
          handler: handleEventToken
        - event: Transfer(indexed address,indexed address,indexed uint256)
          handler: handleTransfer
      file: ./src/mapping.ts
"""

SUBGRAPH_SCHEMA = """\
type Account @entity {
  id: ID!
  tokens: [Token!]!
  tokensOwned: BigInt!
}

type Token @entity(immutable: true) {
  id: ID!
  owner: Account!
  event: Event!
  mintedAt: Timestamp!
  transferCount: Int8!
}

type Event @entity {
  id: ID!
  tokens: [Token!]!
  tokenCount: BigInt!
}
"""

PROJECT_TS = """\
import {
  EthereumProject,
  EthereumDatasourceKind,
  EthereumHandlerKind,
} from "@subql/types-ethereum";

// Can expand the Datasource processor types via the generic param
const project: EthereumProject = {
  specVersion: "1.0.0",
  version: "0.0.1",
  name: "ethereum-starter",
  runner: {
    node: {
      name: "@subql/node-ethereum",
      version: ">=3.0.0",
    },
    query: {
      name: "@subql/query",
      version: "*",
    },
  },
  schema: {
    file: "./schema.graphql",
  },
  network: {
    chainId: "1",
    endpoint: ["https://eth.api.onfinality.io/public", "https://ethereum.rpc.subquery.network/public"],
  },
  dataSources: [
    {
      kind: EthereumDatasourceKind.Runtime,
      startBlock: 4719568,
      options: {
        abi: "erc20",
        address: "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
      },
      assets: new Map([["erc20", { file: "./abis/erc20.abi.json" }]]),
      mapping: {
        file: "./dist/index.js",
        handlers: [
          {
            kind: EthereumHandlerKind.Call,
            handler: "handleTransaction",
            filter: {
              function: "approve(address spender, uint256 rawAmount)",
            },
          },
          {
            kind: EthereumHandlerKind.Event,
            handler: "handleLog",
            filter: {
              topics: [
                "Transfer(address indexed from, address indexed to, uint256 amount)",
              ],
            },
          },
        ],
      },
    },
  ],
  repository: "https://github.com/subquery/ethereum-subql-starter",
};

// Must set default to the project instance
export default project;
"""


@pytest.fixture
def project_ts() -> str:
    """Return a hand-written Ethereum project.ts."""
    return PROJECT_TS


@pytest.fixture
def subgraph_schema() -> str:
    """Return the sample subgraph schema."""
    return SUBGRAPH_SCHEMA


@pytest.fixture
def subgraph_dir(tmp_path: Path) -> Path:
    """A local subgraph project with manifest, schema, ABI, mapping and package.json."""
    root = tmp_path / "poap-subgraph"
    (root / "abis").mkdir(parents=True)
    (root / "src").mkdir()
    (root / "subgraph.yaml").write_text(SUBGRAPH_YAML, encoding="utf-8")
    (root / "schema.graphql").write_text(SUBGRAPH_SCHEMA, encoding="utf-8")
    (root / "abis" / "Poap.json").write_text("[]", encoding="utf-8")
    (root / "src" / "mapping.ts").write_text("export function handleTransfer(): void {}\n", encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps({"name": "poap-mainnet-subgraph", "author": "POAP", "description": "from package"}),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def subgraph_manifest(subgraph_dir: Path) -> SubgraphManifest:
    """Return the parsed subgraph.yaml from subgraph_dir."""
    return read_subgraph_manifest(subgraph_dir / "subgraph.yaml", "mockSubgraphPath")
