"""Convert a subgraph ``subgraph.yaml`` into a SubQuery ``project.ts``."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from subql_migrate.config import DEFAULT_HANDLER_BUILD_PATH
from subql_migrate.errors import CallerContractViolation, SemanticMismatchError, StructuralParseError
from subql_migrate.manifest.ts_manifest import TsExpression, ts_stringify
from subql_migrate.migrate.networks import (
    GRAPH_TO_SUBQL_NETWORK_FAMILY,
    find_runner_by_network_family,
    get_chain_id_by_network_name,
)
from subql_migrate.models import (
    ChainInfo,
    NetworkFamily,
    SubgraphDataSource,
    SubgraphManifest,
    SubgraphTemplate,
    SubqlAsset,
    SubqlDatasource,
    SubqlHandler,
    SubqlMapping,
    SubqlNetwork,
    SubqlOptions,
    SubqlProject,
    SubqlRunner,
    SubqlRunnerSpec,
    SubqlTemplate,
)

logger = logging.getLogger(__name__)

_Source = TypeVar("_Source")
_Target = TypeVar("_Target")


# ---------------------------------------------------------------------------
# Ethereum converters
# ---------------------------------------------------------------------------

ETHEREUM_RUNTIME_KIND = "ethereum/Runtime"


def _ethereum_assets(ds: SubgraphTemplate) -> dict[str, SubqlAsset]:
    return {abi.name: SubqlAsset(file=abi.file) for abi in ds.mapping.abis}


def _ethereum_handlers(ds: SubgraphTemplate) -> list[SubqlHandler]:
    mapping = ds.mapping
    handlers = [
        SubqlHandler(
            kind=ETHEREUM_RUNTIME_KIND,
            migrate_handler_type="EthereumHandlerKind.Block",
            handler=h.handler,
        )
        for h in mapping.block_handlers or []
    ]
    handlers.extend(
        SubqlHandler(
            kind="ethereum/LogHandler",
            migrate_handler_type="EthereumHandlerKind.Event",
            handler=h.handler,
            filter={"topics": [h.event]},
        )
        for h in mapping.event_handlers or []
    )
    handlers.extend(
        SubqlHandler(
            kind="ethereum/TransactionHandler",
            migrate_handler_type="EthereumHandlerKind.Call",
            handler=h.handler,
            filter={"f": h.function},
        )
        for h in mapping.call_handlers or []
    )
    return handlers


def convert_ethereum_ds(ds: SubgraphDataSource) -> SubqlDatasource:
    return SubqlDatasource(
        kind=ETHEREUM_RUNTIME_KIND,
        migrate_datasource_type="EthereumDatasourceKind.Runtime",
        start_block=ds.source.start_block,
        end_block=ds.source.end_block,
        options=SubqlOptions(abi=ds.source.abi, address=ds.source.address),
        assets=_ethereum_assets(ds),
        mapping=SubqlMapping(file=DEFAULT_HANDLER_BUILD_PATH, handlers=_ethereum_handlers(ds)),
    )


def convert_ethereum_template(template: SubgraphTemplate) -> SubqlTemplate:
    return SubqlTemplate(
        kind=ETHEREUM_RUNTIME_KIND,
        migrate_datasource_type="EthereumDatasourceKind.Runtime",
        name=template.name,
        options=SubqlOptions(abi=template.source.abi),
        assets=_ethereum_assets(template),
        mapping=SubqlMapping(file=DEFAULT_HANDLER_BUILD_PATH, handlers=_ethereum_handlers(template)),
    )


@dataclass(frozen=True)
class NetworkConverter:
    ds_converter: Callable[[SubgraphDataSource], SubqlDatasource]
    template_converter: Callable[[SubgraphTemplate], SubqlTemplate]


NETWORK_CONVERTERS: dict[NetworkFamily, NetworkConverter] = {
    NetworkFamily.ETHEREUM: NetworkConverter(
        ds_converter=convert_ethereum_ds,
        template_converter=convert_ethereum_template,
    ),
}


def subgraph_ds_to_subql_ds(
    convert: Callable[[_Source], _Target], subgraph_ds: Sequence[_Source]
) -> list[_Target]:
    return [convert(ds) for ds in subgraph_ds]


def subgraph_template_to_subql_template(
    convert: Callable[[_Source], _Target], subgraph_templates: Sequence[_Source]
) -> list[_Target]:
    return [convert(t) for t in subgraph_templates]


# ---------------------------------------------------------------------------
# Reading and validating the subgraph manifest
# ---------------------------------------------------------------------------


def load_subgraph_manifest(raw: dict[str, Any]) -> SubgraphManifest:
    try:
        return SubgraphManifest.model_validate(raw)
    except ValidationError as e:
        raise StructuralParseError(f"Invalid subgraph manifest: {e}") from e


def read_subgraph_manifest(input_path: str | Path, subgraph_path: str | Path) -> SubgraphManifest:
    try:
        text = Path(input_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"Unable to find subgraph manifest under: {subgraph_path}") from None
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StructuralParseError(f"Subgraph manifest is not valid YAML ({input_path}): {e}") from e
    if not isinstance(raw, dict):
        raise StructuralParseError(f"Subgraph manifest {input_path} is not a mapping")
    return load_subgraph_manifest(raw)


def _unsupported(name: str) -> CallerContractViolation:
    return CallerContractViolation(
        f'Unfortunately migration does not support option "{name}" from subgraph, '
        "please remove or find alternative solutions"
    )


def subgraph_validation(manifest: SubgraphManifest) -> None:
    if manifest.features:
        raise _unsupported("features")
    if manifest.graft:
        raise _unsupported("graft")
    if any(ds.context for ds in manifest.data_sources):
        raise _unsupported("context")


def extract_network_from_manifest(manifest: SubgraphManifest) -> ChainInfo:
    kinds = [ds.kind for ds in manifest.data_sources if ds.kind is not None]
    networks = [ds.network for ds in manifest.data_sources if ds.network is not None]
    if not kinds or not networks:
        raise SemanticMismatchError("Subgraph dataSource kind or network not been found")

    distinct_networks = list(dict.fromkeys(networks))
    if len(distinct_networks) > 1:
        raise SemanticMismatchError(
            f"All network values in subgraph Networks should be the same. Got {','.join(distinct_networks)}"
        )

    first_kind = kinds[0]
    network_family = GRAPH_TO_SUBQL_NETWORK_FAMILY.get(first_kind)
    if network_family is None:
        raise SemanticMismatchError(
            f"Corresponding SubQuery network is not found with subgraph data source kind {first_kind}"
        )
    return ChainInfo(
        network_family=network_family,
        chain_id=get_chain_id_by_network_name(network_family, networks[0]),
    )


# ---------------------------------------------------------------------------
# Building and rendering the SubQuery project
# ---------------------------------------------------------------------------


def graph_manifest_to_subql_manifest(chain_info: ChainInfo, manifest: SubgraphManifest) -> SubqlProject:
    converter = NETWORK_CONVERTERS.get(chain_info.network_family)
    if converter is None:
        raise SemanticMismatchError(
            f"{chain_info.network_family} is missing datasource/template convert methods for migration."
        )
    return SubqlProject(
        network=SubqlNetwork(chain_id=chain_info.chain_id, endpoint=""),
        name=manifest.name,
        spec_version="1.0.0",
        runner=SubqlRunner(
            node=SubqlRunnerSpec(name=find_runner_by_network_family(chain_info.network_family)),
            query=SubqlRunnerSpec(name="@subql/query"),
        ),
        version=manifest.spec_version,
        data_sources=subgraph_ds_to_subql_ds(converter.ds_converter, manifest.data_sources),
        description=manifest.description,
        schema_file=manifest.schema_file,
        repository="",
        templates=(
            subgraph_template_to_subql_template(converter.template_converter, manifest.templates)
            if manifest.templates
            else None
        ),
    )


def _assets_expression(assets: dict[str, SubqlAsset]) -> TsExpression:
    entries = ", ".join(f"['{name}', {{file: '{asset.file}'}}]" for name, asset in assets.items())
    return TsExpression(f"new Map([{entries}])")


def _datasource_to_ts(ds: SubqlDatasource | SubqlTemplate) -> dict[str, Any]:
    out: dict[str, Any] = {"kind": TsExpression(ds.migrate_datasource_type)}
    if isinstance(ds, SubqlTemplate):
        out["name"] = ds.name
    else:
        if ds.start_block is not None:
            out["startBlock"] = ds.start_block
        if ds.end_block is not None:
            out["endBlock"] = ds.end_block
    if ds.options is not None:
        out["options"] = ds.options.model_dump(by_alias=True, exclude_none=True)
    out["assets"] = _assets_expression(ds.assets)
    handlers = []
    for h in ds.mapping.handlers:
        entry: dict[str, Any] = {"handler": h.handler, "kind": TsExpression(h.migrate_handler_type)}
        if h.filter is not None:
            entry["filter"] = h.filter
        handlers.append(entry)
    out["mapping"] = {"file": ds.mapping.file, "handlers": handlers}
    return out


def render_manifest(project: SubqlProject, network_family: NetworkFamily) -> str:
    """Render *project* as ``project.ts`` source text."""
    family = network_family.value
    body: dict[str, Any] = {
        "specVersion": project.spec_version,
        "version": project.version,
        "name": project.name,
        "description": project.description,
        "runner": project.runner.model_dump(by_alias=True),
        "schema": project.schema_file,
        "network": {
            "chainId": project.network.chain_id,
            "endpoint": project.network.endpoint,
        },
        "dataSources": [_datasource_to_ts(ds) for ds in project.data_sources],
    }
    if project.templates:
        body["templates"] = [_datasource_to_ts(t) for t in project.templates]
    body["repository"] = project.repository
    body = {key: value for key, value in body.items() if value is not None}

    return (
        "import {\n"
        f"  {family}Project,\n"
        f"  {family}DatasourceKind,\n"
        f"  {family}HandlerKind,\n"
        f"}} from '@subql/types-{family.lower()}';\n"
        "\n"
        f"const project: {family}Project = {ts_stringify(body)};\n"
        "\n"
        "// Must set default to the project instance\n"
        "export default project;\n"
    )


def migrate_manifest(chain_info: ChainInfo, manifest: SubgraphManifest, output_path: str | Path) -> None:
    target = Path(output_path)
    target.unlink(missing_ok=True)
    project = graph_manifest_to_subql_manifest(chain_info, manifest)
    try:
        rendered = render_manifest(project, chain_info.network_family)
    except (TypeError, ValueError) as e:
        raise StructuralParseError(f"Failed to create project manifest, {e}") from e
    target.write_text(rendered, encoding="utf-8")
    logger.info("Project manifest written to %s", target)
