class UnknownModelError(ValueError):
    """
    Raised when a causal-model selector is not one of the recognised tags.

    There is no fallback model: the error lists the tags that are accepted.
    """
    pass


class GraphError(Exception):
    """Raised when the DAG is structurally invalid."""
    pass
