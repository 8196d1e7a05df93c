"""Service: threshold clustering of a grouped, weighted item graph.

Nodes are first partitioned by their static ``group``; inside each group
the edges at or above the threshold define connected components, and
every component becomes a cluster.  Aggregate weights are then computed
from *all* edges, splitting an edge evenly when it runs between two
clusters.  Clusters with no positive weight are not returned.
"""

from __future__ import annotations

import logging
from typing import Iterable

from clusterview.domain.models import (
    Cluster,
    ClusterLink,
    ClusterSummary,
    Edge,
    Node,
)

log = logging.getLogger(__name__)

DETAIL_ITEM_LIMIT = 18


def cluster(
    nodes: list[Node],
    edges: list[Edge],
    threshold: float,
    group_order: Iterable[str] | None = None,
) -> list[Cluster]:
    """Partition *nodes* into weighted clusters at *threshold*.

    The threshold is used as given; callers clamp it beforehand.
    """
    label_of = {n.id: n.label for n in nodes}
    members_by_group = _partition_by_group(nodes, group_order)

    components: list[Cluster] = []
    for group, group_ids in members_by_group.items():
        components.extend(_group_components(group, group_ids, edges, threshold))

    # Aggregate weight over the full edge set
    cluster_of: dict[str, Cluster] = {}
    for comp in components:
        for nid in comp.member_ids:
            cluster_of[nid] = comp

    for e in edges:
        ca = cluster_of.get(e.source)
        cb = cluster_of.get(e.target)
        if ca is None or cb is None:
            continue
        if ca is cb:
            ca.weight += e.weight
        else:
            ca.weight += e.weight / 2
            cb.weight += e.weight / 2

    visible = []
    for comp in components:
        if comp.weight > 0:
            comp.items = sorted(label_of[nid] for nid in comp.member_ids)
            visible.append(comp)

    log.debug(
        "threshold=%.3f: %d components, %d visible",
        threshold, len(components), len(visible),
    )
    return visible


def _partition_by_group(
    nodes: list[Node],
    group_order: Iterable[str] | None,
) -> dict[str, list[str]]:
    by_group: dict[str, list[str]] = {}
    for n in nodes:
        by_group.setdefault(n.group, []).append(n.id)

    ordered: dict[str, list[str]] = {}
    for g in group_order or ():
        if g in by_group and g not in ordered:
            ordered[g] = by_group[g]
    for g, ids in by_group.items():
        if g not in ordered:
            ordered[g] = ids
    return ordered


def _group_components(
    group: str,
    group_ids: list[str],
    edges: list[Edge],
    threshold: float,
) -> list[Cluster]:
    in_group = set(group_ids)

    # dict keys keep neighbour insertion order, which fixes traversal order
    adj: dict[str, dict[str, None]] = {nid: {} for nid in group_ids}
    for e in edges:
        if e.weight >= threshold and e.source in in_group and e.target in in_group:
            adj[e.source][e.target] = None
            adj[e.target][e.source] = None

    seen: set[str] = set()
    comps: list[Cluster] = []
    idx = 0
    for start in group_ids:
        if start in seen:
            continue
        seen.add(start)
        stack = [start]
        collected = [start]
        while stack:
            cur = stack.pop()
            for nei in adj[cur]:
                if nei not in seen:
                    seen.add(nei)
                    stack.append(nei)
                    collected.append(nei)

        if len(collected) == len(group_ids):
            cid = group
        else:
            idx += 1
            cid = f"{group} • {idx}"
        comps.append(Cluster(id=cid, group=group, member_ids=collected))
    return comps


# ── Views onto a clustering ─────────────────────────────────────────────────


def summarize(c: Cluster) -> ClusterSummary:
    return ClusterSummary(id=c.id, weight=c.weight, items=list(c.items), size=c.size)


def cluster_links(clusters: list[Cluster], edges: list[Edge]) -> list[ClusterLink]:
    """Sum edge weights between each pair of distinct visible clusters."""
    cluster_of: dict[str, str] = {}
    for c in clusters:
        for nid in c.member_ids:
            cluster_of[nid] = c.id

    totals: dict[tuple[str, str], ClusterLink] = {}
    for e in edges:
        ca = cluster_of.get(e.source)
        cb = cluster_of.get(e.target)
        if ca is None or cb is None or ca == cb:
            continue
        pair = (ca, cb) if ca < cb else (cb, ca)
        link = totals.get(pair)
        if link is None:
            link = totals[pair] = ClusterLink(source=ca, target=cb, weight=0.0)
        link.weight += e.weight
    return list(totals.values())


def format_detail(summary: ClusterSummary, limit: int = DETAIL_ITEM_LIMIT) -> str:
    """Detail line shown when a cluster is selected."""
    items = summary.items
    text = (
        f"{summary.id}  total link weight: {summary.weight:.2f}  "
        f"items: {', '.join(items[:limit])}"
    )
    if len(items) > limit:
        text += f" … and {len(items) - limit} more"
    return text
