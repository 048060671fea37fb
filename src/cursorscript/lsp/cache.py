"""
Per-document cache of the last successfully parsed tree.

A document whose latest edit fails to parse keeps serving its previous
Program, so completion and navigation stay useful while the user types.
"""

import logging
from typing import Optional

from cursorscript.compiler.ast_nodes import Program

logger = logging.getLogger(__name__)


class ASTCache:
    """
    Maps document URIs to their last good Program.

    Entries are replaced by a single assignment, so a reader sees either the
    previous Program or the new one, never a partially built tree. Entries
    are only removed when the document is closed.
    """

    def __init__(self) -> None:
        self._programs: dict[str, Program] = {}

    def get(self, uri: str) -> Optional[Program]:
        """Get the last good Program for a document, if any."""
        return self._programs.get(uri)

    def store(self, uri: str, program: Program) -> None:
        """Publish a freshly parsed Program for a document."""
        self._programs[uri] = program

    def evict(self, uri: str) -> None:
        """Forget a document (called when it is closed)."""
        if self._programs.pop(uri, None) is not None:
            logger.debug(f"Evicted cached AST for {uri}")

    def __contains__(self, uri: object) -> bool:
        return uri in self._programs

    def __len__(self) -> int:
        return len(self._programs)
