import os

DEFAULT_SUBGRAPH_MANIFEST = "subgraph.yaml"
DEFAULT_SUBGRAPH_SCHEMA = "schema.graphql"
DEFAULT_SUBQL_MANIFEST = "project.ts"
DEFAULT_SUBQL_SCHEMA = "schema.graphql"

DEFAULT_ABI_DIR = "abis"
DEFAULT_MAPPING_DIR = "src"
DEFAULT_HANDLER_BUILD_PATH = "./dist/index.js"

SCHEMA_DOCS_URL = "https://academy.subquery.network/build/graphql.html"
MAPPING_DOCS_URL = "https://academy.subquery.network/build/graph-migration.html#codegen"

_LOG_LEVEL_ENV = "SUBQL_MIGRATE_LOG_LEVEL"
_DEFAULT_LOG_LEVEL = "INFO"


def get_log_level() -> str:
    return os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LOG_LEVEL).upper()
