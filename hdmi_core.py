import numpy as np

from hdmi_filters import (KERNEL_SCALE, KERNEL_SIZE, N_PLANES,
                          bayer_channel, kernel_table)

# --- CONFIGURACIÓN ---
# Curva aplicada por la cámara antes de grabar y rango legal HDMI
GAMMA = 0.52
GAIN = 0.85
OFFSET = 45
BLACK_LEVEL = 128
WHITE_LEVEL = 4095
LEGAL_MIN = 16
LEGAL_MAX = 235

LUT_SIZE = 0x10000
MAX_SAMPLE = 0xFFFF


class DimensionError(ValueError):
    """ Buffers con dimensiones inválidas o que no coinciden entre sí """


class FrameContext:
    """
    Par de frames HDMI (A y B) y el buffer raw de salida.
    frame_a / frame_b: (height, width, 3) en orden R, G, B.
    raw: (2*height, 2*width), se crea si no se pasa.
    """

    def __init__(self, frame_a, frame_b, raw=None):
        frame_a = np.asarray(frame_a)
        frame_b = np.asarray(frame_b)

        for name, frame in (("A", frame_a), ("B", frame_b)):
            if frame.dtype != np.uint16:
                raise DimensionError(f"Frame {name}: se esperaban muestras uint16, no {frame.dtype}")
            if frame.ndim != 3 or frame.shape[2] != N_PLANES:
                raise DimensionError(f"Frame {name}: se esperaban 3 planos, forma {frame.shape}")
            if frame.shape[0] <= 0 or frame.shape[1] <= 0:
                raise DimensionError(f"Frame {name}: dimensiones no positivas {frame.shape[1]}x{frame.shape[0]}")

        if frame_a.shape != frame_b.shape:
            raise DimensionError(
                f"Frames A y B no coinciden: {frame_a.shape[1]}x{frame_a.shape[0]} "
                f"vs {frame_b.shape[1]}x{frame_b.shape[0]}")

        self.height, self.width = frame_a.shape[:2]
        self.frame_a = frame_a
        self.frame_b = frame_b

        raw_shape = (2 * self.height, 2 * self.width)
        if raw is None:
            raw = np.zeros(raw_shape, dtype=np.uint16)
        elif raw.shape != raw_shape or raw.dtype != np.uint16:
            raise DimensionError(f"Buffer raw {raw.shape} {raw.dtype}, se esperaba {raw_shape} uint16")
        self.raw = raw

    @property
    def frames(self):
        return (self.frame_a, self.frame_b)


def recover_bayer_channel(ctx, dx, dy):
    """
    Recupera un canal Bayer en el interior de la imagen (sin el borde de 1 píxel).
    Cada muestra = suma de 6 kernels 3x3 (2 frames x 3 planos) / KERNEL_SCALE.
    """
    w, h = ctx.width, ctx.height
    if w < 3 or h < 3:
        return

    table = kernel_table()[bayer_channel(dx, dy)]

    # Filtro distinto para columnas pares / impares
    xs = np.arange(1, w - 1)
    parity = (xs % 2 == 0).astype(np.intp)

    acc = np.zeros((h - 2, w - 2), dtype=np.int64)
    for k, frame in enumerate(ctx.frames):
        for p in range(N_PLANES):
            plane = frame[:, :, p].astype(np.int64)
            for i in range(KERNEL_SIZE):
                for j in range(KERNEL_SIZE):
                    coef = table[:, k, p, i, j][parity]
                    acc += plane[i:h - 2 + i, j:w - 2 + j] * coef[None, :]

    out = np.clip(acc // KERNEL_SCALE, 0, MAX_SAMPLE)
    ctx.raw[2 + dy:2 * (h - 1):2, 2 + dx:2 * (w - 1):2] = out


def fill_border(ctx):
    """
    Borde de 1 píxel: copia directa, sin filtrar.
    G1 de B, G2 de A, R y B de B (el bug de líneas del grabador obliga a esta asignación).
    """
    border = np.ones((ctx.height, ctx.width), dtype=bool)
    border[1:-1, 1:-1] = False

    a, b = ctx.frame_a, ctx.frame_b
    sources = (
        ((0, 0), b[:, :, 1]),
        ((1, 1), a[:, :, 1]),
        ((0, 1), b[:, :, 0]),
        ((1, 0), b[:, :, 2]),
    )
    for (dx, dy), src in sources:
        cell = ctx.raw[dy::2, dx::2]
        cell[border] = src[border]


def recover_raw_data(ctx):
    """ Reconstruye el raw completo a partir de los dos frames HDMI """
    for dx, dy in ((0, 0), (0, 1), (1, 0), (1, 1)):
        recover_bayer_channel(ctx, dx, dy)
    fill_border(ctx)
    return ctx.raw


def build_linear_lut(gamma=GAMMA, gain=GAIN, offset=OFFSET,
                     black_level=BLACK_LEVEL, white_level=WHITE_LEVEL):
    """
    LUT de 16 bits -> lineal 12 bits.
    1. Deshace el escalado HDMI 16-235.
    2. Deshace la gamma de la cámara.
    3. Escala al rango de 12 bits con nivel de negro black_level.
    """
    data = np.arange(LUT_SIZE, dtype=np.float64) / MAX_SAMPLE
    data = data * (LEGAL_MAX - LEGAL_MIN) / 255.0 + LEGAL_MIN / 255.0
    data = np.power(data, 1.0 / gamma)
    lut = np.rint(data * white_level / gain + black_level - offset)
    lut = np.clip(lut, 0, white_level).astype(np.uint16)
    lut.flags.writeable = False
    return lut


def convert_to_linear(raw, lut=None):
    """ Aplica la LUT in-place sobre el buffer raw """
    if raw.dtype != np.uint16:
        raise DimensionError(f"Buffer raw debe ser uint16, no {raw.dtype}")
    if lut is None:
        lut = build_linear_lut()
    raw[...] = lut[raw]
    return raw


def process_pair(frame_a, frame_b, lut=None):
    """ Frames A/B (h, w, 3) -> raw lineal (2h, 2w) """
    ctx = FrameContext(frame_a, frame_b)
    recover_raw_data(ctx)
    return convert_to_linear(ctx.raw, lut)
