from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceEngine(Protocol):
    def run(self, batch: np.ndarray) -> np.ndarray:
        """Score a `[batch_size, max_sequence_length]` float32 batch.

        Returns label scores shaped `[label_count, frame_count, batch_size]`.
        """
        ...
