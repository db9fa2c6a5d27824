from typing import Protocol, Optional, Any, runtime_checkable
from dataclasses import dataclass, field
from lume.domain.types import ImageBuffer


@dataclass
class PipelineContext:
    """
    Shared state passed through the pipeline.
    """

    # Directory a relative LUT reference is resolved against
    lut_base_dir: Optional[str] = None

    # Stage bookkeeping gathered while processing
    metrics: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class IProcessor(Protocol):
    """
    Interface for any grading stage.
    Returns None when the stage does not apply or its operator cannot run;
    the caller then keeps the previous image.
    """

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]: ...
