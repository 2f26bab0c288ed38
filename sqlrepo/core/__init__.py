"""Query declarations, call descriptors and the engine's decision logic."""

from sqlrepo.core.actions import StatementAction, classify_action, is_select_statement
from sqlrepo.core.chain import LOWEST_PRIORITY, PluginChain, build_chain
from sqlrepo.core.descriptor import BindParameter, MethodDescriptor, ReturnShape, ReturnType, describe_contract
from sqlrepo.core.keys import GeneratedKeyExtractor, GeneratedKeyResult
from sqlrepo.core.markers import AsJson, Bind, Column
from sqlrepo.core.query import (
    QueryMetadata,
    QueryMode,
    auto_generated_key,
    query,
    query_override,
    resolve_query_text,
)

__all__ = (
    "LOWEST_PRIORITY",
    "AsJson",
    "Bind",
    "BindParameter",
    "Column",
    "GeneratedKeyExtractor",
    "GeneratedKeyResult",
    "MethodDescriptor",
    "PluginChain",
    "QueryMetadata",
    "QueryMode",
    "ReturnShape",
    "ReturnType",
    "StatementAction",
    "auto_generated_key",
    "build_chain",
    "classify_action",
    "describe_contract",
    "is_select_statement",
    "query",
    "query_override",
    "resolve_query_text",
)
