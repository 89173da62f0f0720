import numpy as np
import cv2
from pathlib import Path

from hdmi_core import DimensionError

# --- CONVENCIÓN DE NOMBRES ---
# ffmpeg exporta frame00001A.ppm / frame00001B.ppm (B retrasado un frame)
MARKER_A = "A.ppm"
MARKER_B = "B.ppm"


def read_ppm(path):
    """
    Lee un PPM de 16 bits (como lo exporta ffmpeg).
    Devuelve (h, w, 3) uint16 en orden R, G, B y orden de bytes del host.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No encontrado: {path}")

    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise OSError(f"No se pudo leer {path}")

    if img.ndim != 3 or img.shape[2] != 3:
        raise DimensionError(f"{path.name}: no es una imagen RGB (forma {img.shape})")
    if img.dtype != np.uint16:
        raise DimensionError(f"{path.name}: se esperaba un PPM de 16 bits, no {img.dtype}")

    # OpenCV entrega BGR
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def write_pgm(path, raw):
    """ Guarda el raw como PGM de 16 bits (un plano) """
    if raw.ndim != 2 or raw.dtype != np.uint16:
        raise DimensionError(f"PGM: se esperaba un plano uint16, forma {raw.shape} {raw.dtype}")
    if not cv2.imwrite(str(path), raw):
        raise OSError(f"No se pudo escribir {path}")


def is_frame_a(path):
    return Path(path).name.endswith(MARKER_A)


def is_frame_b(path):
    return Path(path).name.endswith(MARKER_B)


def classify_input(path):
    if is_frame_a(path):
        return "A"
    if is_frame_b(path):
        return "B"
    if Path(path).name.endswith(".ppm"):
        return "ppm"
    return "unknown"


def frame_b_path(path_a):
    """ frame00001A.ppm -> frame00001B.ppm """
    path_a = Path(path_a)
    if not is_frame_a(path_a):
        raise ValueError(f"{path_a.name} no termina en {MARKER_A}")
    return path_a.with_name(path_a.name[:-len(MARKER_A)] + MARKER_B)


def output_path(path_a, suffix=".pgm", out_dir=None):
    """ frame00001A.ppm -> frame00001.pgm (la A también se quita) """
    path_a = Path(path_a)
    if not is_frame_a(path_a):
        raise ValueError(f"{path_a.name} no termina en {MARKER_A}")
    base = path_a.parent if out_dir is None else Path(out_dir)
    return base / (path_a.name[:-len(MARKER_A)] + suffix)
