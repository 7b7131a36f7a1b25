"""
Convolution kernels for PixelSight filters.
"""

import numpy as np
from typing import Sequence, Tuple, Union

from ..exceptions import InvalidArgumentError


class Kernel:
    """
    Immutable weighted matrix with odd width and height.

    Taps are stored row-major as float64; the centre tap sits at
    (width // 2, height // 2).
    """

    def __init__(self, width: int, height: int,
                 taps: Union[Sequence[float], np.ndarray]):
        if width < 1 or height < 1 or width % 2 == 0 or height % 2 == 0:
            raise InvalidArgumentError(f"Kernel dimensions must be odd and positive, got {width}x{height}")

        data = np.asarray(taps, dtype=np.float64).reshape(-1)
        if data.size != width * height:
            raise InvalidArgumentError(
                f"Kernel of {width}x{height} needs {width * height} taps, got {data.size}"
            )

        self._data = data.reshape(height, width).copy()
        self._data.setflags(write=False)

    @classmethod
    def from_matrix(cls, matrix: Union[Sequence[Sequence[float]], np.ndarray]) -> 'Kernel':
        """Build a kernel from a 2D row-major matrix."""
        array = np.asarray(matrix, dtype=np.float64)
        if array.ndim != 2:
            raise InvalidArgumentError(f"Kernel matrix must be 2D, got {array.ndim}D")
        return cls(array.shape[1], array.shape[0], array)

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def radius(self) -> Tuple[int, int]:
        """(horizontal, vertical) distance from the centre to the border."""
        return self.width // 2, self.height // 2

    @property
    def data(self) -> np.ndarray:
        """Read-only (height, width) tap matrix."""
        return self._data

    def total(self) -> float:
        return float(self._data.sum())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Kernel):
            return NotImplemented
        return self._data.shape == other._data.shape and np.array_equal(self._data, other._data)

    def __hash__(self):
        return hash((self._data.shape, self._data.tobytes()))

    def __repr__(self) -> str:
        return f"Kernel({self.width}x{self.height}, sum={self.total():.4f})"
