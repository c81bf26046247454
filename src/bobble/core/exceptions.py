"""
Exceptions raised by bobble.

Only conditions the user can cause are modelled here. Contract violations by
callers (missing module info, inconsistent parents) surface as the plain
``KeyError``/``ValidationError`` raised where the data is used.
"""


class BobbleError(Exception):
    """Base class for bobble errors."""


class ReportNotFoundError(BobbleError):
    def __init__(self, location: str):
        self.location = location
        super().__init__(f"No stats loaded: {location}. Run 'bobble load <stats.json>' first.")


class ChunkGroupNotFoundError(BobbleError):
    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Chunk group not found: {', '.join(self.names)}")


class NodeNotFoundError(BobbleError):
    def __init__(self, node: str):
        self.node = node
        super().__init__(f"Module not found: {node}")


class InvalidCutKeyError(BobbleError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid cut key: {text!r} (expected 'node' or 'parent=>child')")
