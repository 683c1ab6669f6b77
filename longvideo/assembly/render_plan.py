"""
Render Plans
============

Structured, inspectable descriptions of the assembly work. A plan is a
sequence of operations; each operation knows how to turn itself into an
argv list for its tool, so nothing is ever assembled as a shell string.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


FFMPEG = "ffmpeg"


@dataclass
class RenderOperation:
    """One tool invocation."""

    tool: str
    inputs: List[str]
    output: str
    filters: List[str] = field(default_factory=list)
    filter_complex: Optional[str] = None
    arguments: List[str] = field(default_factory=list)
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_command(self) -> List[str]:
        """Build the argv list for this operation."""
        if self.tool != FFMPEG:
            command = [self.tool]
            for source in self.inputs:
                command += ["-i", source]
            return command + ["-o", self.output] + list(self.arguments)

        command = [FFMPEG, "-y"]
        for source in self.inputs:
            command += ["-i", source]
        if self.filter_complex:
            command += ["-filter_complex", self.filter_complex]
        if self.filters:
            command += ["-vf", ",".join(self.filters)]
        return command + list(self.arguments) + [self.output]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool,
            "inputs": list(self.inputs),
            "output": self.output,
            "filters": list(self.filters),
            "filter_complex": self.filter_complex,
            "arguments": list(self.arguments),
            "parameters": dict(self.parameters),
            "command": self.to_command(),
        }


@dataclass
class RenderPlan:
    """
    An ordered list of operations for one assembly stage.

    A plan without operations is a pass-through: its output is its source.
    """

    stage: str
    operations: List[RenderOperation] = field(default_factory=list)
    parameters: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def is_passthrough(self) -> bool:
        return not self.operations

    @property
    def inputs(self) -> List[str]:
        if self.operations:
            return list(self.operations[0].inputs)
        return [self.source] if self.source else []

    @property
    def output(self) -> Optional[str]:
        if self.operations:
            return self.operations[-1].output
        return self.source

    def commands(self) -> List[List[str]]:
        return [operation.to_command() for operation in self.operations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "inputs": self.inputs,
            "output": self.output,
            "passthrough": self.is_passthrough,
            "operations": [operation.to_dict() for operation in self.operations],
            "parameters": dict(self.parameters),
        }
