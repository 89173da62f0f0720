import numpy as np

from hdmi_filters import KERNEL_SCALE, bayer_channel, column_parity, get_kernel


def write_ppm16(path, rgb):
    """ PPM binario de 16 bits (big endian), como lo exporta ffmpeg """
    h, w = rgb.shape[:2]
    header = f"P6\n{w} {h}\n65535\n".encode("ascii")
    path.write_bytes(header + rgb.astype(">u2").tobytes())
    return path


def reference_sample(frame_a, frame_b, x, y, dx, dy):
    # Versión escalar, muestra a muestra, con división entera truncada
    ch = bayer_channel(dx, dy)
    c = column_parity(x)
    total = 0
    for k, frame in enumerate((frame_a, frame_b)):
        for p in range(3):
            kern = get_kernel(ch, c, k, p)
            for i in range(3):
                for j in range(3):
                    total += int(kern[i, j]) * int(frame[y - 1 + i, x - 1 + j, p])
    q = abs(total) // KERNEL_SCALE
    q = q if total >= 0 else -q
    return int(np.clip(q, 0, 65535))
