"""
Inference backend interface.

The neural detector prepares the input tensor and decodes the raw outputs
itself; a backend only has to run the network.
"""

from __future__ import annotations

from typing import List, Protocol

import numpy as np


class InferenceBackend(Protocol):
    def set_input(self, blob: np.ndarray) -> None:
        ...

    def forward(self) -> List[np.ndarray]:
        """Run a forward pass and return every output layer."""
        ...

    def set_accelerated(self, enabled: bool) -> None:
        """Switch between CPU and accelerator execution. Raises if unsupported."""
        ...
