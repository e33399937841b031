"""
LangGraph nodes for the cricket digest pipeline.

Each node is an async function that:
- Takes DigestState as input (plus the collaborators it needs)
- Returns a dict with partial state updates

Nodes:
- collect: Fetch all sources concurrently
- deduplicate: Drop near-duplicate headlines
- rank: Recent-first ordering and truncation
- summarize: Write the report with Claude (with fallback)
- notify / notify_empty: Email the report or the "no news" notice
"""

from cricket_digest.graph.nodes.collect import collect, create_collect_node
from cricket_digest.graph.nodes.deduplicate import create_deduplicate_node, deduplicate
from cricket_digest.graph.nodes.notify import (
    create_notify_empty_node,
    create_notify_node,
    notify,
    notify_empty,
)
from cricket_digest.graph.nodes.rank import create_rank_node, rank
from cricket_digest.graph.nodes.summarize import create_summarize_node, summarize

__all__ = [
    "collect",
    "deduplicate",
    "rank",
    "summarize",
    "notify",
    "notify_empty",
    "create_collect_node",
    "create_deduplicate_node",
    "create_rank_node",
    "create_summarize_node",
    "create_notify_node",
    "create_notify_empty_node",
]
