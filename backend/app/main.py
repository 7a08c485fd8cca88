from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from .matrix_math import ModularMatrix, ShapeError, SingularMatrixError, LETTER_INDEX, find_inverse
from .cipher_engine import Solver
from .schemas import (
    ShiftRequest, AffineRequest, SubstitutionRequest, SubstitutionPreviewRequest,
    VigenereRequest, HillRequest, PermutationRequest, AutokeyRequest,
    BruteForceRequest, BruteForceResult, DecryptionResult, MatrixInput,
    HillKeyResult, ExcelExportRequest,
)
import numpy as np
import pandas as pd
import io
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor

# Configure logging
logger = logging.getLogger("uvicorn")

app = FastAPI()

# Cofactor expansion grows factorially, so larger keys are refused up front
MAX_HILL_DIMENSION = 5
MAX_CONCURRENT_MATRIX_OPS = 2
matrix_semaphore = asyncio.Semaphore(MAX_CONCURRENT_MATRIX_OPS)
thread_pool = ThreadPoolExecutor(max_workers=4)

SUPPORTED_CIPHERS = ["shift", "affine", "substitution", "vigenere", "hill", "permutation", "autokey"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"]
)

# --- Helper Functions ---

def _prepare_text(text: str) -> str:
    return text.upper()

def _prepare_block_text(text: str, block_size: int) -> str:
    # Block ciphers ignore whitespace; what remains must fill whole blocks
    code = "".join(text.upper().split())
    if len(code) % block_size != 0:
        raise HTTPException(
            status_code=400,
            detail=f"Ciphertext length {len(code)} is not a multiple of the block size {block_size}"
        )
    return code

def _check_dimension(n: int):
    if not 1 <= n <= MAX_HILL_DIMENSION:
        raise HTTPException(status_code=400, detail=f"Hill key dimension must be between 1 and {MAX_HILL_DIMENSION}, got {n}")
    # The cofactor sign follows the flat index, which only inverts odd sizes beyond 2x2
    if n >= 4 and n % 2 == 0:
        raise HTTPException(
            status_code=400,
            detail=f"Hill key dimension {n} is not supported: the (-1)^i cofactor sign convention only yields a true inverse for 1x1, 2x2 and odd dimensions"
        )

def _build_key_matrix(values) -> ModularMatrix:
    try:
        key = ModularMatrix.from_flat(values)
    except ShapeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _check_dimension(key.dimension())
    return key

def _invert(key: ModularMatrix) -> ModularMatrix:
    try:
        return key.find_inverse()
    except SingularMatrixError as e:
        logger.warning(f"Rejected Hill key {list(key.values)}: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid Hill key: {e}")

def _hill_key_result(key: ModularMatrix, inverse: ModularMatrix) -> dict:
    return {
        "dimension": key.dimension(),
        "determinant": key.determinant(),
        "matrix": key.rows(),
        "inverse": list(inverse.values),
        "inverse_rows": inverse.rows()
    }

def _brute_force(ciphertext: str, cipher: str):
    solver = Solver(_prepare_text(ciphertext))
    if cipher == "autokey":
        return solver.brute_force_autokey()
    return solver.brute_force_shift()

@app.get("/")
def read_root():
    return {"service": "classical cipher solver", "ciphers": SUPPORTED_CIPHERS}

# --- Keyed decryption ---

@app.post("/decrypt/shift", response_model=DecryptionResult)
def decrypt_shift(req: ShiftRequest):
    return {"plaintext": Solver(_prepare_text(req.ciphertext)).decrypt_shift(req.key)}

@app.post("/decrypt/affine", response_model=DecryptionResult)
def decrypt_affine(req: AffineRequest):
    if find_inverse(req.a) == 0:
        raise HTTPException(status_code=400, detail=f"Affine key a={req.a} is not invertible mod 26")
    return {"plaintext": Solver(_prepare_text(req.ciphertext)).decrypt_affine(req.a, req.b)}

@app.post("/decrypt/substitution", response_model=DecryptionResult)
def decrypt_substitution(req: SubstitutionRequest):
    key = req.key.upper()
    if len(key) != 26 or set(key) != set(LETTER_INDEX):
        raise HTTPException(status_code=400, detail="Substitution key must contain each letter A-Z exactly once")
    return {"plaintext": Solver(_prepare_text(req.ciphertext)).decrypt_substitution(key)}

@app.post("/decrypt/substitution-preview", response_model=DecryptionResult)
def substitution_preview(req: SubstitutionPreviewRequest):
    try:
        plaintext = Solver(_prepare_text(req.ciphertext)).substitution_preview(req.replace_string)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"plaintext": plaintext}

@app.post("/decrypt/vigenere", response_model=DecryptionResult)
def decrypt_vigenere(req: VigenereRequest):
    key = req.key.upper()
    if not key or any(ch not in LETTER_INDEX for ch in key):
        raise HTTPException(status_code=400, detail="Vigenere key must be a non-empty string of letters")
    return {"plaintext": Solver(_prepare_text(req.ciphertext)).decrypt_vigenere(key)}

@app.post("/decrypt/hill", response_model=DecryptionResult)
async def decrypt_hill(req: HillRequest):
    key = _build_key_matrix(req.matrix)
    code = _prepare_block_text(req.ciphertext, key.dimension())
    if any(ch not in LETTER_INDEX for ch in code):
        raise HTTPException(status_code=400, detail="Hill ciphertext may only contain letters A-Z")

    async with matrix_semaphore:
        logger.info(f"🔓 Decrypting Hill cipher ({key.dimension()}x{key.dimension()} key, {len(code)} letters)")
        try:
            plaintext = await asyncio.get_event_loop().run_in_executor(
                thread_pool,
                Solver(code).decrypt_hill,
                key
            )
        except SingularMatrixError as e:
            logger.warning(f"Rejected Hill key {list(key.values)}: {e}")
            raise HTTPException(status_code=400, detail=f"Invalid Hill key: {e}")
        except Exception as e:
            logger.error(f"❌ Hill decryption failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
    return {"plaintext": plaintext}

@app.post("/decrypt/permutation", response_model=DecryptionResult)
def decrypt_permutation(req: PermutationRequest):
    if not req.key or sorted(req.key) != list(range(1, len(req.key) + 1)):
        raise HTTPException(status_code=400, detail=f"Permutation key must contain each of 1..{len(req.key)} exactly once")
    code = _prepare_block_text(req.ciphertext, len(req.key))
    return {"plaintext": Solver(code).decrypt_permutation(req.key)}

@app.post("/decrypt/autokey", response_model=DecryptionResult)
def decrypt_autokey(req: AutokeyRequest):
    return {"plaintext": Solver(_prepare_text(req.ciphertext)).decrypt_autokey(req.key)}

# --- Key search ---

@app.post("/brute-force", response_model=BruteForceResult)
def brute_force(req: BruteForceRequest):
    candidates = _brute_force(req.ciphertext, req.cipher)
    return {
        "cipher": req.cipher,
        "candidates": [{"key": key, "plaintext": text} for key, text in candidates]
    }

# --- Hill key matrices ---

@app.post("/hill/inverse", response_model=HillKeyResult)
async def hill_inverse(input_data: MatrixInput):
    key = _build_key_matrix(input_data.matrix)
    async with matrix_semaphore:
        logger.info(f"🧮 Inverting {key.dimension()}x{key.dimension()} key matrix")
        inverse = await asyncio.get_event_loop().run_in_executor(
            thread_pool,
            _invert,
            key
        )
    return _hill_key_result(key, inverse)

@app.get("/random-hill-key", response_model=HillKeyResult)
def get_random_hill_key(dimension: int = 2):
    _check_dimension(dimension)

    # Loop until the determinant is a unit mod 26, otherwise there is no inverse
    while True:
        mat = np.random.randint(0, 26, dimension * dimension, dtype=int)
        key = ModularMatrix.from_flat(mat.tolist())
        if find_inverse(key.determinant()) != 0:
            break

    return _hill_key_result(key, key.find_inverse())

@app.post("/export-excel")
def export_excel(req: ExcelExportRequest):
    candidates = _brute_force(req.ciphertext, req.cipher)
    df_candidates = pd.DataFrame(candidates, columns=['Key', 'Plaintext'])

    key = None
    if req.matrix is not None:
        key = _build_key_matrix(req.matrix)
        inverse = _invert(key)

    logger.info(f"📊 Exporting {len(candidates)} {req.cipher} candidates to Excel")
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df_candidates.to_excel(writer, sheet_name='Candidates', index=False)
        if key is not None:
            pd.DataFrame(key.as_array()).to_excel(writer, sheet_name='Hill Key', header=False, index=False)
            pd.DataFrame(inverse.as_array()).to_excel(writer, sheet_name='Hill Inverse', header=False, index=False)

    output.seek(0)

    headers = {
        'Content-Disposition': f'attachment; filename="{req.cipher}_candidates.xlsx"'
    }
    return StreamingResponse(output, headers=headers, media_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
