"""
Debug tracing infrastructure for layerflow.

When debug mode is enabled on a layout, the orchestrator records a snapshot
of every pipeline stage: what ran, the relevant numbers, and the layer
ordering at that point.

This is primarily useful for:
1. Understanding which stage produced a surprising layout
2. Comparing operators (e.g. crossings before and after decrossing)
3. Writing targeted tests

Usage:
    >>> layout = sugiyama().with_debug(True)
    >>> result = layout(dag)
    >>> print(result.trace.summary())
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from .models import LayoutNode


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    The layout pipeline has these stages:
    1. validate_sizes - node sizes checked
    2. layering - layers assigned
    3. validate_layers - layering checked
    4. insert_dummies - long links split into dummy chains
    5. decross - layers reordered
    6. coord - x assigned
    7. validate_coords - x values checked
    8. rescale - y assigned and everything scaled to the output size
    9. remove_dummies - dummy chains folded into link points

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
        layers: Optional node ids per layer, in order, at this stage
    """

    name: str
    data: Dict[str, Any]
    layers: Optional[List[List[Hashable]]] = None

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        if self.layers:
            lines.append("  Layers:")
            for i, layer in enumerate(self.layers):
                lines.append(f"    {i}: {', '.join(str(id) for id in layer)}")
        return "\n".join(lines)


@dataclass
class LayoutTrace:
    """
    Complete trace of a layout call.

    Attributes:
        stages: List of pipeline stages with their data
    """

    stages: List[PipelineStage] = field(default_factory=list)

    def add_stage(
        self,
        name: str,
        data: Dict[str, Any],
        layers: Optional[List[List[LayoutNode]]] = None,
    ) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "decross")
            data: Dictionary of relevant data at this stage
            layers: Optional layered graph to snapshot
        """
        snapshot = None
        if layers is not None:
            snapshot = [[entry.id for entry in layer] for layer in layers]
        self.stages.append(PipelineStage(name, data.copy(), snapshot))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def summary(self) -> str:
        """Generate a human-readable overview of the stages."""
        lines = [
            "=" * 60,
            "LAYOUT TRACE SUMMARY",
            "=" * 60,
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            has_layers = "+" if stage.layers else "-"
            lines.append(f"  [{has_layers}] {stage.name}")
        return "\n".join(lines)

    def dump(self) -> str:
        """Generate a complete dump of every stage."""
        lines = [self.summary(), "", "PIPELINE STAGES:", "-" * 40]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
