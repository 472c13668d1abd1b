"""
Result of the content transformation pipeline.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TransformResult:
    """
    Transformed source content.

    ``modified`` is true only when new element identifiers were assigned, so a
    second run over already-tagged content reports False.
    """

    modified: bool
    new_content: str
