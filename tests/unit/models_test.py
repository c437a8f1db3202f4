"""Unit tests for manifest models."""

import pytest
from pydantic import ValidationError

from subql_migrate.models import (
    ChainInfo,
    NetworkFamily,
    SubgraphManifest,
    SubqlAsset,
    SubqlDatasource,
    SubqlMapping,
    SubqlRunnerSpec,
)


class TestSubgraphManifest:
    """Tests for the SubgraphManifest model."""

    def test_reads_camel_case_keys(self) -> None:
        """Test that camelCase YAML keys populate snake_case fields."""
        manifest = SubgraphManifest.model_validate(
            {
                "specVersion": "0.0.5",
                "schema": {"file": "./schema.graphql"},
                "dataSources": [
                    {
                        "kind": "ethereum/contract",
                        "name": "Token",
                        "source": {"abi": "Token", "startBlock": 5},
                        "mapping": {"abis": [{"name": "Token", "file": "./abis/Token.json"}]},
                    }
                ],
            }
        )
        assert manifest.spec_version == "0.0.5"
        assert manifest.schema_file == {"file": "./schema.graphql"}
        assert manifest.data_sources[0].source.start_block == 5
        assert manifest.data_sources[0].mapping.event_handlers is None

    def test_keeps_unknown_keys(self) -> None:
        """Test that unknown keys are kept on the model."""
        manifest = SubgraphManifest.model_validate({"indexerHints": {"prune": "auto"}})
        assert manifest.model_extra == {"indexerHints": {"prune": "auto"}}

    def test_defaults(self) -> None:
        """Test the defaults of optional fields."""
        manifest = SubgraphManifest()
        assert manifest.data_sources == []
        assert manifest.templates is None


class TestSubqlModels:
    """Tests for the SubQuery project models."""

    def test_dump_uses_camel_case(self) -> None:
        """Test that dumping by alias produces camelCase keys."""
        ds = SubqlDatasource(
            kind="ethereum/Runtime",
            migrate_datasource_type="EthereumDatasourceKind.Runtime",
            start_block=1,
            assets={"erc20": SubqlAsset(file="./abis/erc20.json")},
            mapping=SubqlMapping(file="./dist/index.js"),
        )
        dumped = ds.model_dump(by_alias=True, exclude_none=True)
        assert dumped["startBlock"] == 1
        assert dumped["migrateDatasourceType"] == "EthereumDatasourceKind.Runtime"
        assert "endBlock" not in dumped

    def test_runner_version_default(self) -> None:
        """Test the default runner version."""
        assert SubqlRunnerSpec(name="@subql/query").version == "^"

    def test_mapping_requires_file(self) -> None:
        """Test that a mapping without a file is rejected."""
        with pytest.raises(ValidationError):
            SubqlMapping()  # type: ignore[call-arg]


class TestChainInfo:
    """Tests for the ChainInfo model."""

    def test_equality(self) -> None:
        """Test that equal fields compare equal."""
        assert ChainInfo(network_family=NetworkFamily.ETHEREUM, chain_id="1") == ChainInfo(
            network_family="Ethereum", chain_id="1"
        )

    def test_is_frozen(self) -> None:
        """Test that ChainInfo cannot be modified."""
        info = ChainInfo(network_family=NetworkFamily.ETHEREUM, chain_id="1")
        with pytest.raises(ValidationError):
            info.chain_id = "2"  # type: ignore[misc]

    def test_rejects_unknown_family(self) -> None:
        """Test that an unknown network family is rejected."""
        with pytest.raises(ValidationError):
            ChainInfo(network_family="Bitcoin", chain_id="1")
