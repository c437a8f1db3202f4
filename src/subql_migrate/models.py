from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NetworkFamily(StrEnum):
    SUBSTRATE = "Substrate"
    COSMOS = "Cosmos"
    ALGORAND = "Algorand"
    ETHEREUM = "Ethereum"
    NEAR = "Near"
    STELLAR = "Stellar"
    CONCORDIUM = "Concordium"
    STARKNET = "Starknet"
    SOLANA = "Solana"


class _CamelModel(BaseModel):
    """Base for models read from or written to camelCase manifests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# ---------------------------------------------------------------------------
# Subgraph (source) manifest
# ---------------------------------------------------------------------------


class SubgraphAbi(_CamelModel):
    name: str
    file: str


class SubgraphEventHandler(_CamelModel):
    event: str
    handler: str


class SubgraphCallHandler(_CamelModel):
    function: str
    handler: str


class SubgraphBlockHandler(_CamelModel):
    handler: str
    filter: dict[str, Any] | None = None


class SubgraphMapping(_CamelModel):
    kind: str | None = None
    api_version: str | None = None
    language: str | None = None
    file: str | None = None
    entities: list[str] = Field(default_factory=list)
    abis: list[SubgraphAbi] = Field(default_factory=list)
    block_handlers: list[SubgraphBlockHandler] | None = None
    event_handlers: list[SubgraphEventHandler] | None = None
    call_handlers: list[SubgraphCallHandler] | None = None


class SubgraphSource(_CamelModel):
    abi: str
    address: str | None = None
    start_block: int | None = None
    end_block: int | None = None


class SubgraphTemplate(_CamelModel):
    name: str
    kind: str | None = None
    network: str | None = None
    source: SubgraphSource
    mapping: SubgraphMapping


class SubgraphDataSource(SubgraphTemplate):
    context: dict[str, Any] | None = None


class SubgraphManifest(_CamelModel):
    spec_version: str | None = None
    name: str | None = None
    author: str | None = None
    description: str | None = None
    repository: str | None = None
    schema_file: dict[str, str] | None = Field(default=None, alias="schema")
    features: list[str] | None = None
    graft: dict[str, Any] | None = None
    data_sources: list[SubgraphDataSource] = Field(default_factory=list)
    templates: list[SubgraphTemplate] | None = None


# ---------------------------------------------------------------------------
# SubQuery (target) project
# ---------------------------------------------------------------------------


class SubqlHandler(_CamelModel):
    handler: str
    kind: str
    migrate_handler_type: str
    filter: dict[str, Any] | None = None


class SubqlMapping(_CamelModel):
    file: str
    handlers: list[SubqlHandler] = Field(default_factory=list)


class SubqlAsset(_CamelModel):
    file: str


class SubqlOptions(_CamelModel):
    abi: str
    address: str | None = None


class SubqlDatasource(_CamelModel):
    kind: str
    migrate_datasource_type: str
    start_block: int | None = None
    end_block: int | None = None
    options: SubqlOptions | None = None
    assets: dict[str, SubqlAsset] = Field(default_factory=dict)
    mapping: SubqlMapping


class SubqlTemplate(_CamelModel):
    kind: str
    migrate_datasource_type: str
    name: str
    options: SubqlOptions | None = None
    assets: dict[str, SubqlAsset] = Field(default_factory=dict)
    mapping: SubqlMapping


class SubqlRunnerSpec(_CamelModel):
    name: str
    version: str = "^"


class SubqlRunner(_CamelModel):
    node: SubqlRunnerSpec
    query: SubqlRunnerSpec


class SubqlNetwork(_CamelModel):
    chain_id: str
    endpoint: str | list[str] = ""


class SubqlProject(_CamelModel):
    spec_version: str = "1.0.0"
    version: str | None = None
    name: str | None = None
    description: str | None = None
    repository: str = ""
    runner: SubqlRunner
    schema_file: dict[str, str] | None = Field(default=None, alias="schema")
    network: SubqlNetwork
    data_sources: list[SubqlDatasource] = Field(default_factory=list)
    templates: list[SubqlTemplate] | None = None


class ChainInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    network_family: NetworkFamily
    chain_id: str
