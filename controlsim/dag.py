from __future__ import annotations

from enum import Enum

from ._exceptions import GraphError


class CovariateRole(Enum):
    """Where a covariate sits relative to a predictor → outcome relationship."""

    CONSEQUENCE_OF_OUTCOME = "consequence of the outcome"
    MEDIATOR = "mediator"
    POST_TREATMENT = "consequence of the predictor"
    CONFOUNDER = "confounder"
    CAUSE_OF_OUTCOME = "independent cause of the outcome"
    SHARES_CAUSE_WITH_OUTCOME = "shares a cause with the outcome"
    UNRELATED = "unrelated"


class _Node:
    """
    A node proxy returned by ``DAG.assume()``. Use ``.causes()`` to assert edges::

        dag.assume("X").causes("Y")
        dag.assume("u").causes("Y", "Z")
    """

    def __init__(self, name: str, dag: DAG) -> None:
        self._name = name
        self._dag = dag

    def causes(self, *effects: str) -> _Node:
        """
        Assert that this node causes one or more effects.
        Returns self so you can chain further ``.causes()`` calls.
        """
        for effect in effects:
            self._dag._assert_edge(self._name, effect)
        return self


class DAG:
    """
    A directed acyclic graph describing how a synthetic sample is generated.

    Build the graph by calling ``assume().causes()`` for each generative link.
    Latent variables are ordinary nodes: a node that is not a column of the
    generated sample is drawn as unobserved by ``plot_dag``.

    Example::

        dag = DAG()
        dag.assume("X").causes("Y")
        dag.assume("u").causes("Y", "Z")
    """

    def __init__(self) -> None:
        self._edges: list[tuple[str, str]] = []

    # ── Building the graph ────────────────────────────────────────────────────

    def assume(self, node: str) -> _Node:
        """Name a node and return it so you can assert what it causes."""
        return _Node(node, self)

    def _assert_edge(self, cause: str, effect: str) -> None:
        """Add a directed edge after validating it keeps the graph acyclic."""
        if cause == effect:
            raise GraphError(f"Self-loops are not allowed: '{cause}'")
        if (cause, effect) in self._edges:
            raise GraphError(f"'{cause}' → '{effect}' already asserted")
        self._edges.append((cause, effect))
        if self._has_cycle():
            self._edges.pop()
            raise GraphError(
                f"Asserting '{cause}' → '{effect}' would create a cycle. "
                f"Causal graphs must be acyclic (DAGs)."
            )

    # ── Graph properties ──────────────────────────────────────────────────────

    @property
    def nodes(self) -> set[str]:
        """All nodes in the graph."""
        result: set[str] = set()
        for cause, effect in self._edges:
            result.add(cause)
            result.add(effect)
        return result

    @property
    def edges(self) -> list[tuple[str, str]]:
        """All directed edges as (cause, effect) pairs, in assertion order."""
        return list(self._edges)

    def parents(self, node: str) -> set[str]:
        """Direct causes of node."""
        return {cause for cause, effect in self._edges if effect == node}

    def children(self, node: str) -> set[str]:
        """Direct effects of node."""
        return {effect for cause, effect in self._edges if cause == node}

    def ancestors(self, node: str) -> set[str]:
        """All nodes with a directed path leading to node."""
        return self._reach(node, self.parents)

    def descendants(self, node: str) -> set[str]:
        """All nodes reachable from node via directed paths."""
        return self._reach(node, self.children)

    def layers(self) -> list[list[str]]:
        """
        Group nodes by their longest distance from a root.

        Layer 0 holds the nodes without parents; every edge points from a
        lower layer to a strictly higher one. Nodes within a layer are
        sorted by name so the grouping is stable.
        """
        depth: dict[str, int] = {}
        for node in self._topological_order():
            depth[node] = max((depth[p] + 1 for p in self.parents(node)), default=0)
        grouped: list[list[str]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
        for node, d in depth.items():
            grouped[d].append(node)
        return [sorted(layer) for layer in grouped]

    def covariate_role(self, covariate: str, predictor: str, outcome: str) -> CovariateRole:
        """
        Classify what controlling for ``covariate`` means for the effect of
        ``predictor`` on ``outcome``.

        Checks run from the most to the least harmful adjustment: a
        consequence of the outcome (case-control bias) first, then
        post-treatment variables, then confounders, then variables that
        only explain outcome variance.
        """
        for var in (covariate, predictor, outcome):
            if var not in self.nodes:
                raise ValueError(
                    f"'{var}' is not a node in the DAG. Known nodes: {sorted(self.nodes)}"
                )

        outcome_ancestors = self.ancestors(outcome)
        if covariate in self.descendants(outcome):
            return CovariateRole.CONSEQUENCE_OF_OUTCOME
        if covariate in self.descendants(predictor):
            if covariate in outcome_ancestors:
                return CovariateRole.MEDIATOR
            return CovariateRole.POST_TREATMENT
        if covariate in self.ancestors(predictor) and covariate in outcome_ancestors:
            return CovariateRole.CONFOUNDER
        if covariate in outcome_ancestors:
            return CovariateRole.CAUSE_OF_OUTCOME
        if self.ancestors(covariate) & outcome_ancestors:
            return CovariateRole.SHARES_CAUSE_WITH_OUTCOME
        return CovariateRole.UNRELATED

    # ── Internal helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _reach(node: str, step) -> set[str]:
        result: set[str] = set()
        queue = list(step(node))
        while queue:
            current = queue.pop()
            if current not in result:
                result.add(current)
                queue.extend(step(current))
        return result

    def _topological_order(self) -> list[str]:
        """Kahn's algorithm. Returns fewer nodes than the graph has if it contains a cycle."""
        in_degree: dict[str, int] = {n: 0 for n in self.nodes}
        for _, effect in self._edges:
            in_degree[effect] += 1

        queue = sorted(n for n, deg in in_degree.items() if deg == 0)
        order: list[str] = []
        while queue:
            node = queue.pop(0)
            order.append(node)
            for child in sorted(self.children(node)):
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)
        return order

    def _has_cycle(self) -> bool:
        return len(self._topological_order()) != len(self.nodes)

    # ── Display ───────────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        if not self._edges:
            return "DAG (empty)"
        lines = ["DAG:"]
        for cause, effect in self._edges:
            lines.append(f"  {cause} → {effect}")
        return "\n".join(lines)
