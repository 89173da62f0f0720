import sys
import argparse
import subprocess
from pathlib import Path
from multiprocessing import Pool, cpu_count, freeze_support

import hdmi_core
import hdmi_io
import raw2dng

# --- CONFIGURACIÓN ---
# Retardo del frame B respecto al A al extraer con ffmpeg (un frame a 60p)
FRAME_B_DELAY = "00.016"

USAGE = """HDMI RAW converter for Axiom BETA

Uso:
  ffmpeg -i input.mov -vf "framestep=2" -pix_fmt rgb48be frame%05dA.ppm
  ffmpeg -ss 00.016 -i input.mov -vf "framestep=2" -pix_fmt rgb48be frame%05dB.ppm
  hdmi4k frame*A.ppm
  raw2dng frame*.pgm

  (o directamente: hdmi4k --extract input.mov --dng)
"""


def extract_frames(video, out_dir, delay=FRAME_B_DELAY):
    """
    Extrae los frames A (pares) y B (retrasados) de un video HDMI a PPM 16 bits.
    Devuelve la lista de frames A generados.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    base_cmd = ['ffmpeg', '-y', '-loglevel', 'error']
    filters = ['-vf', 'framestep=2', '-pix_fmt', 'rgb48be']

    cmd_a = base_cmd + ['-i', str(video)] + filters + [str(out_dir / "frame%05dA.ppm")]
    cmd_b = base_cmd + ['-ss', delay, '-i', str(video)] + filters + [str(out_dir / "frame%05dB.ppm")]

    for cmd in (cmd_a, cmd_b):
        print(f"INFO|{' '.join(cmd)}")
        subprocess.run(cmd, check=True, stderr=subprocess.PIPE)

    return sorted(out_dir.glob("*" + hdmi_io.MARKER_A))


def collect_inputs(paths):
    """
    Sólo se convierten frames A; el B se busca por nombre.
    Las carpetas se expanden a sus *A.ppm.
    """
    files = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            files.extend(sorted(p.glob("*" + hdmi_io.MARKER_A)))
            continue

        kind = hdmi_io.classify_input(p)
        if kind == "A":
            files.append(p)
        elif kind == "B":
            print(f"INFO|Ignorado (especificar sólo frames A): {p.name}")
        elif kind == "ppm":
            print(f"WARN|Los archivos de entrada deben terminar en A.ppm: {p.name}")
        else:
            print(f"WARN|Tipo de archivo desconocido: {p.name}")
    return files


def convert_pair_task(args):
    # args: path_a, out_dir, lut, write_dng
    path_a, out_dir, lut, write_dng = args

    try:
        path_b = hdmi_io.frame_b_path(path_a)
        if not path_b.is_file():
            return f"{path_a.name}: falta el frame B ({path_b.name})"

        rgb_a = hdmi_io.read_ppm(path_a)
        rgb_b = hdmi_io.read_ppm(path_b)

        raw = hdmi_core.process_pair(rgb_a, rgb_b, lut)

        hdmi_io.write_pgm(hdmi_io.output_path(path_a, ".pgm", out_dir), raw)
        if write_dng:
            raw2dng.save_as_dng(raw, hdmi_io.output_path(path_a, ".dng", out_dir))
        return None

    except (OSError, ValueError) as e:
        return f"{path_a.name}: {e}"


def parse_args(argv):
    parser = argparse.ArgumentParser(description="HDMI RAW converter (frames A/B -> raw Bayer)")
    parser.add_argument("inputs", nargs="*", help="Frames *A.ppm o carpetas")
    parser.add_argument("--extract", default=None, help="Video HDMI a extraer con ffmpeg antes de convertir")
    parser.add_argument("--delay", default=FRAME_B_DELAY, help="Retardo del frame B (ffmpeg -ss)")
    parser.add_argument("--out-dir", default=None, help="Carpeta de salida (por defecto, junto a la entrada)")
    parser.add_argument("--dng", action="store_true", help="Guardar también DNG")
    parser.add_argument("--workers", type=int, default=max(1, cpu_count() - 1))
    parser.add_argument("--gamma", type=float, default=hdmi_core.GAMMA)
    parser.add_argument("--gain", type=float, default=hdmi_core.GAIN)
    parser.add_argument("--offset", type=float, default=hdmi_core.OFFSET)
    return parser.parse_args(argv)


def main(argv=None):
    """ Devuelve la cantidad de pares que fallaron """
    freeze_support()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(USAGE)
        return 0

    args = parse_args(argv)
    out_dir = Path(args.out_dir) if args.out_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    files = []
    if args.extract:
        video = Path(args.extract)
        try:
            files.extend(extract_frames(video, out_dir or video.parent / video.stem, args.delay))
        except (OSError, subprocess.CalledProcessError) as e:
            print(f"ERROR|ffmpeg: {e}")
            return 1

    files.extend(collect_inputs(args.inputs))
    if not files:
        print("WARN|No hay frames A para convertir")
        return 0

    lut = hdmi_core.build_linear_lut(gamma=args.gamma, gain=args.gain, offset=args.offset)
    tasks = [(f, out_dir, lut, args.dng) for f in files]

    print(f"INFO|Gamma {args.gamma} | Ganancia {args.gain} | Offset {args.offset} | DNG: {'sí' if args.dng else 'no'}")
    print(f"START|{len(tasks)}")
    sys.stdout.flush()

    workers = max(1, min(args.workers, len(tasks)))
    if workers == 1:
        failed = _report(map(convert_pair_task, tasks))
    else:
        with Pool(workers) as pool:
            failed = _report(pool.imap_unordered(convert_pair_task, tasks))

    print(f"INFO|Listo. {len(tasks) - failed}/{len(tasks)} convertidos.")
    return failed


def _report(results):
    failed = 0
    for i, res in enumerate(results):
        if res:
            print(f"ERROR|{res}")
            failed += 1
        print(f"PROG|{i+1}")
        sys.stdout.flush()
    return failed


def run():
    sys.stdout.reconfigure(line_buffering=True)
    sys.exit(1 if main() else 0)


if __name__ == "__main__":
    run()
