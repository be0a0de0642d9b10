"""
domain co-occurrence network.
nodes are domains, edges count the records where two domains appear together.
"""

from dataclasses import dataclass, field
from itertools import combinations
from typing import Any, Dict, List, Tuple

from ..index.experience_index import ExperienceIndex


@dataclass
class DomainNode:
    id: str
    size: int  # records containing this domain

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "size": self.size}


@dataclass
class DomainEdge:
    source: str
    target: str
    weight: int  # records where both domains co-occur

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "target": self.target, "weight": self.weight}


@dataclass
class DomainNetwork:
    nodes: List[DomainNode] = field(default_factory=list)
    edges: List[DomainEdge] = field(default_factory=list)

    def edge_weight(self, a: str, b: str) -> int:
        """weight of the {a, b} edge, 0 if the pair never co-occurs."""
        key = edge_key(a, b)
        for edge in self.edges:
            if (edge.source, edge.target) == key:
                return edge.weight
        return 0

    def node_size(self, domain: str) -> int:
        for node in self.nodes:
            if node.id == domain:
                return node.size
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def edge_key(a: str, b: str) -> Tuple[str, str]:
    """canonical undirected key: (A, B) and (B, A) collapse."""
    return (a, b) if a <= b else (b, a)


def generate_domain_network(index: ExperienceIndex) -> DomainNetwork:
    """
    build the co-occurrence network.
    each record adds 1 to every pair among its distinct domains.
    quadratic in per-record domain count, which is expected to stay small.
    """
    weights: Dict[Tuple[str, str], int] = {}

    for experience in index.experiences.values():
        domains = experience.experience.unique_domains()
        for a, b in combinations(domains, 2):
            key = edge_key(a, b)
            weights[key] = weights.get(key, 0) + 1

    nodes = [
        DomainNode(id=domain, size=len(ids))
        for domain, ids in index.domain_index.items()
    ]
    edges = [
        DomainEdge(source=source, target=target, weight=weight)
        for (source, target), weight in weights.items()
    ]
    return DomainNetwork(nodes=nodes, edges=edges)
