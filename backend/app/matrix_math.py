import math
import operator
import string
from typing import Dict, List, Sequence, Tuple

import numpy as np

MODULUS = 26
ALPHABET = string.ascii_uppercase
LETTER_INDEX: Dict[str, int] = {letter: i for i, letter in enumerate(ALPHABET)}

# Multiplicative inverses mod 26, 0 where none exists (even residues and 13)
INVERSES: Tuple[int, ...] = (
    0, 1, 0, 9, 0, 21, 0, 15, 0, 3, 0, 19, 0,
    0, 0, 7, 0, 23, 0, 11, 0, 5, 0, 17, 0, 25,
)


class MatrixError(ValueError):
    """Base class for key matrices that cannot be used for Hill decryption."""


class ShapeError(MatrixError):
    pass


class SingularMatrixError(MatrixError):
    pass


def to_base26(num: int) -> int:
    """Fold any integer into the residue range [0, 26)."""
    return num % MODULUS


def find_inverse(num: int) -> int:
    """
    Multiplicative inverse of a residue mod 26.
    Returns 0 when the residue is not invertible, so callers must check
    for 0 before treating the result as an inverse.
    """
    return INVERSES[to_base26(num)]


def _minor(values: Sequence[int], n: int, index: int) -> List[int]:
    # Drop the row and column that pass through flat position `index`
    row, col = index // n, index % n
    return [v for j, v in enumerate(values) if j // n != row and j % n != col]


def _determinant(values: Sequence[int], n: int) -> int:
    if n == 1:
        return to_base26(values[0])
    if n == 2:
        return to_base26(values[0] * values[3] - values[1] * values[2])

    total = 0
    for i in range(n):
        # Sign follows the column index of the expanded entry
        sign = -1 if i % 2 else 1
        total += sign * values[i] * _determinant(_minor(values, n, i), n - 1)
    return to_base26(total)


class ModularMatrix:
    """
    Immutable n x n matrix of residues mod 26, stored flat in row-major order.
    """

    __slots__ = ("_values", "_n")

    def __init__(self, values: Sequence[int]):
        n = math.isqrt(len(values))
        if n == 0 or n * n != len(values):
            raise ShapeError(f"This matrix is not a square matrix: {len(values)} values given")
        self._values: Tuple[int, ...] = tuple(to_base26(operator.index(v)) for v in values)
        self._n = n

    @classmethod
    def from_flat(cls, values: Sequence[int]) -> "ModularMatrix":
        return cls(values)

    @property
    def values(self) -> Tuple[int, ...]:
        return self._values

    def dimension(self) -> int:
        return self._n

    def column(self, index: int) -> List[int]:
        """Values at index, index + n, index + 2n, ..."""
        if not 0 <= index < self._n:
            raise IndexError(f"Column {index} out of range for dimension {self._n}")
        return list(self._values[index::self._n])

    def rows(self) -> List[List[int]]:
        n = self._n
        return [list(self._values[r * n:(r + 1) * n]) for r in range(n)]

    def as_array(self) -> np.ndarray:
        return np.array(self._values, dtype=int).reshape(self._n, self._n)

    def determinant(self) -> int:
        """Determinant mod 26 by cofactor expansion along the first row."""
        return _determinant(self._values, self._n)

    def find_inverse(self) -> "ModularMatrix":
        """
        Inverse mod 26 via the adjugate scaled by the determinant's inverse.
        Raises SingularMatrixError when the determinant has no inverse mod 26.
        """
        det = self.determinant()
        det_inverse = find_inverse(det)
        if det_inverse == 0:
            raise SingularMatrixError(
                f"This matrix does not have a valid inverse: determinant is {det}"
            )

        n = self._n
        values = self._values
        if n == 1:
            return ModularMatrix([det_inverse])
        if n == 2:
            a, b, c, d = values
            return ModularMatrix([d * det_inverse, -b * det_inverse,
                                  -c * det_inverse, a * det_inverse])

        # 1. Transpose across the main diagonal
        transposed = [values[(i % n) * n + i // n] for i in range(n * n)]

        # 2. Replace every entry with its signed minor determinant, scaled by det^-1
        # The sign follows the flat index, which matches (-1)^(row+col) only for odd n;
        # even n >= 4 therefore does not yield a true inverse
        result = []
        for i in range(n * n):
            sign = -1 if i % 2 else 1
            minor_det = _determinant(_minor(transposed, n, i), n - 1)
            result.append(sign * det_inverse * minor_det)

        return ModularMatrix(result)

    def __eq__(self, other):
        if not isinstance(other, ModularMatrix):
            return NotImplemented
        return self._values == other._values

    def __hash__(self):
        return hash(self._values)

    def __repr__(self):
        return f"ModularMatrix({list(self._values)})"

    def __str__(self):
        result = ""
        for i, value in enumerate(self._values):
            result += str(value)
            result += "\n" if i % self._n == self._n - 1 else "\t"
        return result
