import numpy as np
import pytest

from app.cipher_engine import Solver
from app.matrix_math import ALPHABET, ModularMatrix, SingularMatrixError


def hill_encrypt(plaintext, key):
    # Row vector times key matrix, the convention decrypt_hill undoes
    n = key.dimension()
    result = ""
    for i in range(0, len(plaintext), n):
        block = np.array([ALPHABET.index(ch) for ch in plaintext[i:i + n]])
        result += "".join(ALPHABET[v] for v in (block @ key.as_array()) % 26)
    return result


def test_decrypt_shift():
    assert Solver("KHOOR ZRUOG").decrypt_shift(3) == "HELLO WORLD"
    assert Solver("ABC").decrypt_shift(-1) == "BCD"


def test_brute_force_shift_covers_every_key():
    candidates = Solver("KHOOR").brute_force_shift()
    assert [key for key, _ in candidates] == list(range(1, 26))
    assert (3, "HELLO") in candidates


def test_decrypt_affine():
    assert Solver("IHHWVC SWFRCP").decrypt_affine(5, 8) == "AFFINE CIPHER"


def test_decrypt_affine_rejects_non_invertible_multiplier():
    with pytest.raises(ValueError):
        Solver("ABC").decrypt_affine(13, 1)


def test_decrypt_substitution():
    key = "QWERTYUIOPASDFGHJKLZXCVBNM"
    assert Solver("ITSSG!").decrypt_substitution(key) == "HELLO!"


def test_substitution_preview():
    replace = "_" * 17 + "J" + "_" * 4 + "C" + "_" * 3
    assert Solver("VHWR").substitution_preview(replace) == "__CJ"
    with pytest.raises(ValueError):
        Solver("VHWR").substitution_preview("ABC")


def test_decrypt_vigenere():
    assert Solver("LXFOPVEFRNHR").decrypt_vigenere("LEMON") == "ATTACKATDAWN"
    assert Solver("LXFOPV EFRNHR").decrypt_vigenere("LEMON") == "ATTACK ATDAWN"


def test_decrypt_autokey():
    assert Solver("KLPWZ").decrypt_autokey(3) == "HELLO"
    assert Solver("KL PWZ").decrypt_autokey(3) == "HE LLO"


def test_brute_force_autokey():
    candidates = Solver("KLPWZ").brute_force_autokey()
    assert len(candidates) == 26
    assert (3, "HELLO") in candidates


def test_decrypt_hill_2x2_known_pair():
    key = ModularMatrix([3, 2, 5, 7])
    assert hill_encrypt("HELP", key) == "PQEX"
    assert Solver("PQEX").decrypt_hill(key) == "HELP"


@pytest.mark.parametrize("values", [
    [3, 2, 5, 7],
    [5, 8, 17, 3],
    [6, 24, 1, 13, 16, 10, 20, 17, 15],
    [2, 4, 5, 9, 2, 1, 3, 17, 7],
])
def test_decrypt_hill_round_trip(values):
    key = ModularMatrix(values)
    plaintext = "ATTACKATDAWN"
    assert Solver(hill_encrypt(plaintext, key)).decrypt_hill(key) == plaintext


def test_decrypt_hill_singular_key():
    with pytest.raises(SingularMatrixError):
        Solver("ABCD").decrypt_hill(ModularMatrix([2, 4, 1, 2]))


def test_decrypt_permutation():
    key = [3, 1, 6, 4, 5, 2]
    assert Solver("CAFDEB").decrypt_permutation(key) == "ABCDEF"
    assert Solver("CAFDEBIGLJKH").decrypt_permutation(key) == "ABCDEFGHIJKL"
