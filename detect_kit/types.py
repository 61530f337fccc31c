from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CandidateBox:
    """
    Decoded detection in original image pixel space.

    `width`/`height` are inclusive extents and may be 0 for degenerate boxes.
    """

    left: int
    top: int
    width: int
    height: int
    class_id: int
    score: float

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return self.left, self.top, self.width, self.height

    @property
    def is_degenerate(self) -> bool:
        return self.width == 0 or self.height == 0


# Boxes selected by suppression keep the same shape.
Detection = CandidateBox
