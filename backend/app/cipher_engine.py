from typing import List, Sequence, Tuple

from .matrix_math import ALPHABET, LETTER_INDEX, ModularMatrix, find_inverse, to_base26


class Solver:
    def __init__(self, code: str):
        # Ciphertext to be decrypted; every transform below reads from it
        self.code = code

    def _map_letters(self, fn) -> str:
        return "".join(
            ALPHABET[to_base26(fn(LETTER_INDEX[ch]))] if ch in LETTER_INDEX else ch
            for ch in self.code
        )

    # --- MONOALPHABETIC ---

    def decrypt_shift(self, key: int) -> str:
        return self._map_letters(lambda idx: idx - key)

    def brute_force_shift(self) -> List[Tuple[int, str]]:
        """Every non-trivial shift key with its candidate plaintext."""
        return [(key, self.decrypt_shift(key)) for key in range(1, 26)]

    def decrypt_affine(self, a: int, b: int) -> str:
        a_inverse = find_inverse(a)
        if a_inverse == 0:
            raise ValueError(f"Affine multiplier {a} has no inverse mod 26")
        return self._map_letters(lambda idx: a_inverse * (idx - b))

    def decrypt_substitution(self, key: str) -> str:
        """key[k] is the cipher letter for ALPHABET[k]."""
        positions = {letter: k for k, letter in enumerate(key)}
        return "".join(ALPHABET[positions[ch]] if ch in positions else ch for ch in self.code)

    def substitution_preview(self, replace_string: str) -> str:
        """
        Partial substitution solve: each cipher letter is replaced by the
        character in its alphabet slot, e.g. '_' for still-unknown letters.
        """
        if len(replace_string) != 26:
            raise ValueError(
                f"replace string is wrong length - should be 26 but is {len(replace_string)}"
            )
        return "".join(
            replace_string[LETTER_INDEX[ch]] if ch in LETTER_INDEX else ch for ch in self.code
        )

    # --- POLYALPHABETIC ---

    def decrypt_vigenere(self, key: str) -> str:
        shifts = [LETTER_INDEX[k] for k in key]
        result = []
        j = 0
        for ch in self.code:
            if ch in LETTER_INDEX:
                result.append(ALPHABET[to_base26(LETTER_INDEX[ch] - shifts[j % len(shifts)])])
                j += 1
            else:
                result.append(ch)
        return "".join(result)

    def decrypt_autokey(self, key: int) -> str:
        result = []
        temp_key = key
        for ch in self.code:
            if ch not in LETTER_INDEX:
                result.append(ch)
                continue
            plain_idx = to_base26(LETTER_INDEX[ch] - temp_key)
            result.append(ALPHABET[plain_idx])
            temp_key = plain_idx
        return "".join(result)

    def brute_force_autokey(self) -> List[Tuple[int, str]]:
        return [(key, self.decrypt_autokey(key)) for key in range(26)]

    # --- BLOCK CIPHERS ---

    def decrypt_hill(self, key: ModularMatrix) -> str:
        """
        Decrypts block by block with the inverse key matrix.
        The code length must be a multiple of the key dimension.
        """
        n = key.dimension()
        inverse = key.find_inverse()
        columns = [inverse.column(j) for j in range(n)]

        result = []
        for i in range(0, len(self.code), n):
            block = [LETTER_INDEX[ch] for ch in self.code[i:i + n]]
            for col in columns:
                total = sum(c * k for c, k in zip(block, col))
                result.append(ALPHABET[to_base26(total)])
        return "".join(result)

    def decrypt_permutation(self, key: Sequence[int]) -> str:
        """
        key is a permutation of 1..n; e.g. [3, 1, 6, 4, 5, 2] places the 3rd
        letter of each block of 6 first. The code length must be a multiple of n.
        """
        n = len(key)
        inverse = [0] * n
        for i, target in enumerate(key):
            inverse[target - 1] = i + 1

        result = []
        for j in range(0, len(self.code), n):
            block = self.code[j:j + n]
            result.extend(block[pos - 1] for pos in inverse)
        return "".join(result)
