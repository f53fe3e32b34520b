class LearningMapError(Exception):
    """Base class for every learning map failure reported to the caller"""


class InvalidGraphError(LearningMapError):
    """Dangling edge, duplicate node id or malformed generator output"""


class IdCollisionError(LearningMapError):
    """Merged graphs share node ids, i.e. the addition was not namespaced"""

    def __init__(self, ids: set[str]):
        self.ids: set[str] = ids
        super().__init__(f'Node ids already present in the map: {", ".join(sorted(ids))}')


class UnknownNodeError(LearningMapError):
    def __init__(self, node_id: str):
        self.node_id: str = node_id
        super().__init__(f'Node {node_id!r} is not part of the map')


class NodeBusyError(LearningMapError):
    """Expansion requested for a node whose previous expansion is still in flight"""

    def __init__(self, node_id: str):
        self.node_id: str = node_id
        super().__init__(f'Node {node_id!r} is already being expanded')


class GeneratorError(LearningMapError):
    """Content generator failed or returned nothing"""


class GenerationTimeoutError(GeneratorError):
    pass


class ExpansionFailedError(LearningMapError):
    """
    Node expansion failed, the map was left untouched.

    Carries the node that triggered the expansion and a human-readable cause;
    the original exception is chained as ``__cause__``.
    """

    def __init__(self, node_id: str, cause: str):
        self.node_id: str = node_id
        self.cause: str = cause
        super().__init__(f'Failed to expand node {node_id!r}: {cause}')


class ExpansionTimeoutError(ExpansionFailedError):
    pass


class UnknownSessionError(LearningMapError):
    def __init__(self, session_id: str):
        self.session_id: str = session_id
        super().__init__(f'Session {session_id!r} does not exist')
