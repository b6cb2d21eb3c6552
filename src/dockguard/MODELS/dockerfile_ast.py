"""
Models for the Dockerfile Abstract Syntax Tree.
"""
from typing import List, Optional
from pydantic import BaseModel

class BuildInstruction(BaseModel):
    """
    Represents a single instruction in a Dockerfile.

    ``command`` is always lowercase. ``position`` is the index of the
    instruction within its file, counting from zero.
    """
    command: str
    arguments: List[str] = []
    position: int
    flags: List[str] = []
    line: Optional[int] = None
    raw: Optional[str] = None

    @property
    def first_argument(self) -> Optional[str]:
        """The first argument token, or None when there are no arguments."""
        return self.arguments[0] if self.arguments else None
