from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional

from ...core.enums import Remarks


@dataclass(frozen=True)
class StatusDecision:
    """Remarks to write with a slot fill; None leaves the stored remarks unchanged."""

    remarks: Optional[Remarks] = None

    @property
    def overwrites(self) -> bool:
        return self.remarks is not None


class RemarksStrategy(ABC):
    """Strategy Pattern: encapsulate how a slot fill is classified."""

    @abstractmethod
    def decide(self, at: time) -> StatusDecision:
        raise NotImplementedError
