import numpy as np
import cv2
import sys
from pathlib import Path
import tifffile

from hdmi_core import BLACK_LEVEL, WHITE_LEVEL, DimensionError

# --- CONFIGURACIÓN ---
CAMERA_MODEL = "Axiom BETA HDMI"

# Disposición del raw reconstruido (celda 2x2):
#   (0,0)=G  (1,0)=B
#   (0,1)=R  (1,1)=G
# CFAPattern: 0=Red, 1=Green, 2=Blue -> GBRG
CFA_PATTERN = [1, 2, 0, 1]

# --- MATRIZ DE COLOR GENÉRICA (sRGB D65) ---
# No es calibración de la cámara, sólo evita dominantes al abrir el DNG.
COLOR_MATRIX_1 = [
    3.2404542, -1.5371385, -0.4985314,
    -0.9692660, 1.8760108, 0.0415560,
    0.0556434, -0.2040259, 1.0572252
]


def save_as_dng(raw, output_path, black_level=BLACK_LEVEL, white_level=WHITE_LEVEL):
    """
    Guarda el raw lineal (uint16, un plano) como DNG.
    """
    if raw.ndim != 2 or raw.dtype != np.uint16:
        raise DimensionError(f"DNG: se esperaba un plano uint16, forma {raw.shape} {raw.dtype}")

    extratags = [
        (50706, 'B', 4, [1, 4, 0, 0], True),       # DNGVersion
        (50717, 'I', 1, white_level, True),        # WhiteLevel
        (50718, 'I', 1, black_level, True),        # BlackLevel
        (33421, 'H', 2, [2, 2], True),             # CFARepeatPatternDim
        (33422, 'B', 4, CFA_PATTERN, True),        # CFAPattern
        (50721, 'd', 9, COLOR_MATRIX_1, True),     # ColorMatrix1
        (50710, 'B', 3, [0, 1, 2], True),          # CFAPlaneColor
        (50708, 's', 0, CAMERA_MODEL, True),       # UniqueCameraModel
    ]

    tifffile.imwrite(
        output_path,
        raw,
        photometric='cfa',
        planarconfig=1,
        extrasamples=None,
        tile=None,
        extratags=extratags
    )


def pgm_to_dng(pgm_path):
    pgm_path = Path(pgm_path)
    raw = cv2.imread(str(pgm_path), cv2.IMREAD_UNCHANGED)
    if raw is None:
        raise OSError(f"No se pudo leer {pgm_path}")
    dng_path = pgm_path.with_suffix(".dng")
    save_as_dng(raw, dng_path)
    return dng_path


def main(argv=None):
    files = [Path(a) for a in (sys.argv[1:] if argv is None else argv)]
    if not files:
        print("Uso: raw2dng frame*.pgm")
        return 1

    failed = 0
    for f in files:
        if f.suffix.lower() != ".pgm":
            print(f"WARN|Ignorado (no es .pgm): {f.name}")
            continue
        try:
            dng_path = pgm_to_dng(f)
            print(f"INFO|{f.name} -> {dng_path.name}")
        except (OSError, DimensionError) as e:
            print(f"ERROR|{f.name}: {e}")
            failed += 1
    return failed


def run():
    sys.exit(1 if main() else 0)


if __name__ == "__main__":
    run()
