from pydantic import BaseModel
from typing import List, Literal, Optional

class ShiftRequest(BaseModel):
    ciphertext: str
    key: int

class AffineRequest(BaseModel):
    ciphertext: str
    a: int
    b: int

class SubstitutionRequest(BaseModel):
    ciphertext: str
    key: str # 26-letter permutation of the alphabet

class SubstitutionPreviewRequest(BaseModel):
    ciphertext: str
    replace_string: str # 26 chars, '_' for unknown letters

class VigenereRequest(BaseModel):
    ciphertext: str
    key: str

class HillRequest(BaseModel):
    ciphertext: str
    matrix: List[int] # n*n values, row-major

class PermutationRequest(BaseModel):
    ciphertext: str
    key: List[int] # permutation of 1..n

class AutokeyRequest(BaseModel):
    ciphertext: str
    key: int

class BruteForceRequest(BaseModel):
    ciphertext: str
    cipher: Literal["shift", "autokey"] = "shift"

class MatrixInput(BaseModel):
    matrix: List[int]

class Candidate(BaseModel):
    key: int
    plaintext: str

class BruteForceResult(BaseModel):
    cipher: str
    candidates: List[Candidate]

class DecryptionResult(BaseModel):
    plaintext: str

class HillKeyResult(BaseModel):
    dimension: int
    determinant: int
    matrix: List[List[int]]
    inverse: List[int]
    inverse_rows: List[List[int]]

class ExcelExportRequest(BaseModel):
    ciphertext: str
    cipher: Literal["shift", "autokey"] = "shift"
    matrix: Optional[List[int]] = None # Hill key to include with its inverse
