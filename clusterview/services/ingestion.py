"""Service: turn an input document into a validated ``GraphState``.

Two document shapes are accepted:

* node list — ``{"nodes": [{id, label, group?, text?}], "links": [{id?, source, target, weight}]}``
  (``"edges"`` is accepted as an alias of ``"links"``);
* raw labels — ``{"raw": "a, b\\nc", "links": [[label_a, label_b, weight], ...]}``.

Validation happens here once; downstream code trusts the records.
"""

from __future__ import annotations

import json
import logging
import math
import re
from pathlib import Path
from typing import Any

from clusterview.domain.models import Edge, GraphState, Node, _uid
from clusterview.ports.classifier import GroupClassifierPort

log = logging.getLogger(__name__)

_LABEL_SPLIT = re.compile(r"[\n,]+")


class DocumentError(ValueError):
    """The input document is malformed."""


def load_document(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError(f"Expected a JSON object in {path}")
    return data


def build_graph(document: dict[str, Any], classifier: GroupClassifierPort) -> GraphState:
    """Build the session graph from a parsed document."""
    if "nodes" in document:
        state = _from_node_list(document, classifier)
    elif "raw" in document:
        state = _from_raw(document, classifier)
    else:
        raise DocumentError("Document needs either 'nodes' or 'raw'")

    state.group_order = classifier.groups
    log.info("Ingested %d nodes, %d edges", len(state.nodes), len(state.edges))
    return state


def load_graph(path: str | Path, classifier: GroupClassifierPort) -> GraphState:
    return build_graph(load_document(path), classifier)


# ── node-list shape ─────────────────────────────────────────────────────────


def _from_node_list(document: dict[str, Any], classifier: GroupClassifierPort) -> GraphState:
    raw_nodes = document.get("nodes") or []
    raw_links = document.get("links", document.get("edges")) or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_links, list):
        raise DocumentError("'nodes' and 'links' must be lists")

    nodes: list[Node] = []
    seen: set[str] = set()
    for i, rec in enumerate(raw_nodes):
        if not isinstance(rec, dict):
            raise DocumentError(f"node #{i} is not an object")
        nid = _required(rec, "id", f"node #{i}")
        label = _required(rec, "label", f"node #{i}")
        if nid in seen:
            raise DocumentError(f"duplicate node id: {nid}")
        seen.add(nid)

        group = rec.get("group")
        if not group:
            group = classifier.classify(str(rec.get("text") or label))
        nodes.append(Node(id=nid, label=label, group=str(group)))

    edges: list[Edge] = []
    for i, rec in enumerate(raw_links):
        if not isinstance(rec, dict):
            raise DocumentError(f"link #{i} is not an object")
        where = f"link #{i}"
        edge_id = rec.get("id")
        edges.append(Edge(
            source=_required(rec, "source", where),
            target=_required(rec, "target", where),
            weight=_weight(rec.get("weight"), where),
            id=None if edge_id is None else str(edge_id),
        ))

    return GraphState(nodes=nodes, edges=edges)


# ── raw-label shape ─────────────────────────────────────────────────────────


def _from_raw(document: dict[str, Any], classifier: GroupClassifierPort) -> GraphState:
    raw = document.get("raw")
    if not isinstance(raw, str):
        raise DocumentError("'raw' must be a string of delimited labels")

    labels = list(dict.fromkeys(
        s.strip() for s in _LABEL_SPLIT.split(raw) if s.strip()
    ))
    nodes = [Node(id=_uid(), label=label, group=classifier.classify(label)) for label in labels]
    id_by_label = {n.label: n.id for n in nodes}

    edges: list[Edge] = []
    dropped = 0
    for i, triple in enumerate(document.get("links") or []):
        if not isinstance(triple, (list, tuple)) or len(triple) != 3:
            raise DocumentError(f"link #{i} must be [label_a, label_b, weight]")
        a, b, w = triple
        weight = _weight(w, f"link #{i}")
        source = id_by_label.get(str(a))
        target = id_by_label.get(str(b))
        if source is None or target is None:
            dropped += 1
            continue
        edges.append(Edge(source=source, target=target, weight=weight))

    if dropped:
        log.info("Dropped %d links with unknown labels", dropped)
    return GraphState(nodes=nodes, edges=edges)


# ── helpers ──


def _required(rec: dict[str, Any], key: str, where: str) -> str:
    value = rec.get(key)
    if value is None or value == "":
        raise DocumentError(f"{where} is missing '{key}'")
    return str(value)


def _weight(value: Any, where: str) -> float:
    if isinstance(value, bool):
        raise DocumentError(f"{where} has a non-numeric weight: {value!r}")
    try:
        weight = float(value)
    except (TypeError, ValueError) as exc:
        raise DocumentError(f"{where} has a non-numeric weight: {value!r}") from exc
    if not math.isfinite(weight) or not 0.0 <= weight <= 1.0:
        raise DocumentError(f"{where} has a weight outside [0, 1]: {value!r}")
    return weight
