# ================================================================
# Light Processor - Visual Encoder
# ================================================================
# Projects a registry snapshot onto a fixed grid_side x grid_side
# RGBA-style float32 grid, one cell per word in rank order
# ================================================================

from typing import Optional, Sequence

import numpy as np

from light_processor.config import GRID_SIDE, CHANNELS

# Channel layout per cell
FREQUENCY_CHANNEL = 0
HUE_CHANNEL = 1
SATURATION_CHANNEL = 2
RESERVED_CHANNEL = 3

TRANSPORT_DTYPE = np.dtype("<f4")


class VisualEncoder:
    """
    Fixed-size 4-channel encoding of the registry.

    Cell index equals rank in the snapshot (rank 0 -> cell 0), row-major.
    Per cell: [frequency / max_frequency, hue, saturation, 1.0].

    Cells past the current word count are not cleared between encodes,
    so they may still hold values from an earlier ranking or the
    initial fill.
    """

    def __init__(self, grid_side: int = GRID_SIDE, initial_fill: str = "noise",
                 rng: Optional[np.random.Generator] = None):
        self.grid_side = grid_side
        self.initial_fill = initial_fill
        self.rng = rng or np.random.default_rng()
        self.word_count = 0
        self._buffer: Optional[np.ndarray] = None

    @property
    def cell_count(self):
        return self.grid_side * self.grid_side

    @property
    def buffer(self) -> np.ndarray:
        """Flat float32 buffer of length grid_side^2 * 4 (allocated on first use)."""
        if self._buffer is None:
            self._buffer = self._allocate()
        return self._buffer

    def _allocate(self):
        size = self.cell_count * CHANNELS
        if self.initial_fill == "zeros":
            return np.zeros(size, dtype=np.float32)
        # Random texture with opaque marker, as the renderer starts from
        data = self.rng.random((self.cell_count, CHANNELS), dtype=np.float32)
        data[:, RESERVED_CHANNEL] = 1.0
        return data.reshape(-1)

    def encode(self, snapshot: Sequence) -> np.ndarray:
        """
        Write `snapshot` (ranked words) into the grid and return the flat buffer.

        Words past grid_side^2 are omitted.
        """
        buf = self.buffer
        words = snapshot[:self.cell_count]
        n = len(words)
        self.word_count = n
        if n == 0:
            return buf

        freqs = np.fromiter((w.frequency for w in words), dtype=np.float64, count=n)
        max_freq = float(freqs.max())

        cells = buf[:n * CHANNELS].reshape(n, CHANNELS)
        if max_freq > 0:
            cells[:, FREQUENCY_CHANNEL] = freqs / max_freq
        else:
            cells[:, FREQUENCY_CHANNEL] = 0.0
        cells[:, HUE_CHANNEL] = np.fromiter((w.hue for w in words), dtype=np.float32, count=n)
        cells[:, SATURATION_CHANNEL] = np.fromiter((w.saturation for w in words), dtype=np.float32, count=n)
        cells[:, RESERVED_CHANNEL] = 1.0
        return buf

    def cell(self, rank: int) -> np.ndarray:
        """The 4 channel values at cell `rank`."""
        if not 0 <= rank < self.cell_count:
            raise IndexError(f"cell {rank} outside grid of {self.cell_count} cells")
        start = rank * CHANNELS
        return self.buffer[start:start + CHANNELS]

    def as_grid(self) -> np.ndarray:
        """View of the buffer shaped (grid_side, grid_side, 4)."""
        return self.buffer.reshape(self.grid_side, self.grid_side, CHANNELS)

    # ------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Little-endian float32 bytes, row-major by rank, no compression."""
        return self.buffer.astype(TRANSPORT_DTYPE, copy=False).tobytes()

    @classmethod
    def from_bytes(cls, data: bytes, grid_side: int = GRID_SIDE, word_count: int = 0):
        """Rebuild an encoder from bytes produced by `to_bytes`."""
        expected = grid_side * grid_side * CHANNELS * TRANSPORT_DTYPE.itemsize
        if len(data) != expected:
            raise ValueError(f"expected {expected} bytes for grid side {grid_side}, got {len(data)}")
        encoder = cls(grid_side=grid_side, initial_fill="zeros")
        encoder._buffer = np.frombuffer(data, dtype=TRANSPORT_DTYPE).astype(np.float32)
        encoder.word_count = word_count
        return encoder
