from __future__ import annotations

from dataclasses import dataclass
from math import gcd

import numpy as np
from scipy import signal

from offline_stt.utils.logger import Logger


@dataclass(frozen=True)
class SincParameters:
    """Windowed-sinc low-pass settings.

    `sinc_len` is the kernel length in input samples. `f_cutoff` is relative
    to the Nyquist frequency of the lower of the two rates. `window` is any
    name accepted by `scipy.signal.get_window`.
    """

    sinc_len: int = 256
    f_cutoff: float = 0.95
    window: str = "blackmanharris"

    def __post_init__(self) -> None:
        if self.sinc_len < 2 or self.sinc_len % 2:
            raise ValueError("sinc_len must be an even number >= 2.")
        if not 0.0 < self.f_cutoff <= 1.0:
            raise ValueError("f_cutoff must be in (0, 1].")


class SincResampler:
    """Whole-buffer sample-rate converter built on polyphase windowed-sinc filtering."""

    def __init__(
        self,
        parameters: SincParameters | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self.parameters = parameters or SincParameters()
        self._logger = logger
        self._filters: dict[tuple[int, int], np.ndarray] = {}

    def resample(self, samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
        if source_rate <= 0 or target_rate <= 0:
            raise ValueError("Sample rates must be positive.")
        if source_rate == target_rate:
            return samples

        divisor = gcd(source_rate, target_rate)
        up = target_rate // divisor
        down = source_rate // divisor

        x = np.asarray(samples, dtype=np.float64).reshape(-1)
        self._log(
            f"[RESAMPLE] {source_rate} Hz -> {target_rate} Hz (up={up}, down={down}): "
            f"{x.size} samples"
        )
        if x.size == 0:
            return np.empty(0, dtype=np.float32)

        # Output length is ceil(len * up / down); the odd-length kernel is centered.
        out = signal.resample_poly(x, up, down, window=self.lowpass(up, down))
        return out.astype(np.float32, copy=False)

    def lowpass(self, up: int, down: int) -> np.ndarray:
        """FIR coefficients at the upsampled rate for an `up / down` conversion."""
        key = (up, down)
        taps = self._filters.get(key)
        if taps is not None:
            return taps

        params = self.parameters
        taps = signal.firwin(
            params.sinc_len * up + 1,
            params.f_cutoff / max(up, down),
            window=params.window,
        )
        self._filters[key] = taps
        return taps

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.debug(message)
