"""Grouping of near-duplicate matches for reporting."""

from typing import List

import networkx as nx

from lshdedup.types import DuplicateGroup, DuplicatePair


class DuplicateGraph:
    """Graph of documents with an edge for every detected duplicate."""

    def __init__(self) -> None:
        self.graph: "nx.Graph[str]" = nx.Graph()
        self.pairs: List[DuplicatePair] = []

    def add_document(self, key: str) -> None:
        """Record a document that was looked up."""
        self.graph.add_node(key)

    def add_pair(self, pair: DuplicatePair) -> None:
        """Record that *pair.duplicate* matched *pair.original*."""
        self.pairs.append(pair)
        self.graph.add_edge(pair.duplicate, pair.original, weight=pair.similarity)

    @property
    def document_count(self) -> int:
        return self.graph.number_of_nodes()

    def get_groups(self) -> List[DuplicateGroup]:
        """Get all groups of near-duplicates, most similar first."""
        groups = []
        for i, component in enumerate(nx.connected_components(self.graph), 1):
            if len(component) < 2:
                continue

            subgraph = self.graph.subgraph(component)
            weights = [w for _, _, w in subgraph.edges(data="weight")]
            groups.append(
                DuplicateGroup(
                    id=i,
                    keys=sorted(component),
                    similarity=sum(weights) / len(weights),
                )
            )

        return sorted(groups, key=lambda g: (-g.similarity, g.keys[0]))

    def unique_keys(self) -> List[str]:
        """Documents that matched nothing and were matched by nothing."""
        return sorted(node for node, degree in self.graph.degree() if degree == 0)
