import json
import logging
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from subql_migrate.config import (
    DEFAULT_ABI_DIR,
    DEFAULT_MAPPING_DIR,
    DEFAULT_SUBGRAPH_MANIFEST,
    DEFAULT_SUBGRAPH_SCHEMA,
    DEFAULT_SUBQL_MANIFEST,
    DEFAULT_SUBQL_SCHEMA,
    MAPPING_DOCS_URL,
)
from subql_migrate.errors import MigrationError
from subql_migrate.migrate.manifest import (
    extract_network_from_manifest,
    migrate_manifest,
    read_subgraph_manifest,
    subgraph_validation,
)
from subql_migrate.migrate.schema import migrate_schema
from subql_migrate.models import ChainInfo, SubgraphManifest

logger = logging.getLogger(__name__)

_GITHUB_LINK = re.compile(r"^https://github\.com/(?P<domain>[^/]+)/(?P<repository>[^/]+)(?:/tree/(?P<branch>[^/]+))?")
_BITBUCKET_LINK = re.compile(
    r"^https://(?:[^/]+@)?bitbucket\.org/(?P<domain>[^/]+)/(?P<repository>[^/]+)(?:/src/(?P<branch>[^/]+))?"
)
_SSH_LINK = re.compile(r"^git@(?:bitbucket\.org|github\.com):[^/]+/(?P<repository>[^/]+)\.git$")


@dataclass(frozen=True)
class GitInfo:
    link: str
    branch: str | None = None


def extract_git_info(link: str) -> GitInfo | None:
    """Parse a GitHub/Bitbucket HTTPS or SSH link. Returns None for anything else."""
    if _SSH_LINK.match(link):
        return GitInfo(link=link)
    for pattern, host in ((_GITHUB_LINK, "github.com"), (_BITBUCKET_LINK, "bitbucket.org")):
        match = pattern.match(link)
        if match:
            return GitInfo(
                link=f"https://{host}/{match.group('domain')}/{match.group('repository')}",
                branch=match.group("branch"),
            )
    return None


def clone_git_repo(info: GitInfo, target: Path) -> Path:
    args = ["git", "clone", "--depth", "1"]
    if info.branch:
        args += ["--branch", info.branch]
    result = subprocess.run(
        [*args, info.link, str(target)],
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise MigrationError(f"Failed to clone {info.link}: {result.stderr.strip()}")
    return target


def improve_project_info(subgraph_dir: str | Path, manifest: SubgraphManifest) -> SubgraphManifest:
    """Return *manifest* with name, author and description filled in from the subgraph's package.json."""
    package = json.loads((Path(subgraph_dir) / "package.json").read_text(encoding="utf-8"))
    return manifest.model_copy(
        update={
            "name": str(package.get("name", "")).replace("subgraph", "subquery"),
            "author": package.get("author"),
            "description": manifest.description or package.get("description"),
            "repository": "",
        }
    )


def extract_all_abi_files(manifest: SubgraphManifest) -> list[str]:
    files = (abi.file for ds in manifest.data_sources for abi in ds.mapping.abis if abi.file)
    return list(dict.fromkeys(files))


def migrate_abis(manifest: SubgraphManifest, subgraph_dir: str | Path, subql_dir: str | Path) -> list[Path]:
    target_dir = Path(subql_dir) / DEFAULT_ABI_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for abi_file in extract_all_abi_files(manifest):
        source = Path(subgraph_dir) / abi_file
        target = target_dir / source.name
        shutil.copyfile(source, target)
        copied.append(target)
    logger.info(
        "ABI files used in project manifest copied successfully, please copy other required ABI files to %s",
        target_dir,
    )
    return copied


def migrate_mapping(subgraph_dir: str | Path, subql_dir: str | Path) -> None:
    target = Path(subql_dir) / DEFAULT_MAPPING_DIR
    shutil.rmtree(target, ignore_errors=True)
    shutil.copytree(Path(subgraph_dir) / DEFAULT_MAPPING_DIR, target)
    logger.info(
        "Mapping handlers have been copied over, they will need to be updated to work with SubQuery. "
        "See our documentation for more details %s",
        MAPPING_DOCS_URL,
    )


def _migrate_local(subgraph_dir: Path, subgraph_path: str, subql_dir: Path) -> ChainInfo:
    manifest = read_subgraph_manifest(subgraph_dir / DEFAULT_SUBGRAPH_MANIFEST, subgraph_path)
    if (subgraph_dir / "package.json").exists():
        manifest = improve_project_info(subgraph_dir, manifest)
    subgraph_validation(manifest)
    chain_info = extract_network_from_manifest(manifest)

    subql_dir.mkdir(parents=True, exist_ok=True)
    migrate_manifest(chain_info, manifest, subql_dir / DEFAULT_SUBQL_MANIFEST)
    migrate_schema(subgraph_dir / DEFAULT_SUBGRAPH_SCHEMA, subql_dir / DEFAULT_SUBQL_SCHEMA)
    migrate_abis(manifest, subgraph_dir, subql_dir)
    if (subgraph_dir / DEFAULT_MAPPING_DIR).is_dir():
        migrate_mapping(subgraph_dir, subql_dir)
    return chain_info


def run_migration(subgraph_path: str, subql_dir: str | Path) -> ChainInfo:
    """Migrate the subgraph at *subgraph_path* (local directory or git link) into *subql_dir*."""
    target = Path(subql_dir)
    git_info = extract_git_info(subgraph_path)
    if git_info is None:
        return _migrate_local(Path(subgraph_path), subgraph_path, target)

    with tempfile.TemporaryDirectory() as tmp:
        clone_dir = clone_git_repo(git_info, Path(tmp) / "subgraph")
        logger.info("Cloned %s into %s", git_info.link, clone_dir)
        return _migrate_local(clone_dir, subgraph_path, target)
