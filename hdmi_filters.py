import numpy as np

# --- CONFIGURACIÓN ---
# Punto fijo de los coeficientes: cada juego de 6 kernels suma ~1.0 al dividir por esto.
KERNEL_SCALE = 8192

N_CHANNELS = 4
N_PARITY = 2
N_FRAMES = 2
N_PLANES = 3
KERNEL_SIZE = 3

# Celda (dx, dy) del tile 2x2 -> bloque de la tabla.
# Los bloques están listados R, G1, G2, B; el raw sale con G en (0,0).
BAYER_CHANNEL_INDEX = {
    (0, 0): 2,
    (1, 0): 3,
    (0, 1): 0,
    (1, 1): 1,
}

# Filtros para recuperar los canales Bayer (R, G1, G2, B) a partir de dos frames HDMI:
#   frame A: R, G1, B
#   frame B: R', G2, B' (retrasado 1 stop)
# Ajustados offline sobre material Shogun (ffmpeg -vcodec copy), antes de linealizar.
# Deshacen también la matriz de color del grabador y el bug de líneas intercambiadas.
# Orden: [bloque][paridad de columna][frame A/B][plano R/G/B][fila][columna]
KERNEL_COEFFS = (
    # ===== R =====
    # paridad 0, frame A, plano R (suma 0.08)
       464,   -524,   -122,
      -326,    951,    387,
      -104,     21,    -83,
    # paridad 0, frame A, plano G (suma 0.00)
     -8348,   8083,    -79,
      4527,  -3959,    230,
     -3018,   2623,    -30,
    # paridad 0, frame A, plano B (suma -0.03)
      7664,  -7586,    -30,
     -3884,   3730,     18,
      2734,  -2820,    -44,
    # paridad 0, frame B, plano R (suma 1.01)
      9398,  -8421,    -99,
      1177,   5070,    266,
     -3032,   3936,    -42,
    # paridad 0, frame B, plano G (suma -0.08)
     -9194,   8993,    -11,
     -1766,   1417,    -21,
      2541,  -2394,   -190,
    # paridad 0, frame B, plano B (suma 0.01)
      -347,    259,     90,
       802,   -711,    -37,
       498,   -359,    -93,
    # paridad 1, frame A, plano R (suma 0.84)
      -165,   -194,    866,
       192,    263,   5460,
      -149,    -32,    654,
    # paridad 1, frame A, plano G (suma -0.12)
      -221,   5416,  -5716,
       263,  13406, -13528,
      -175,  -3649,   3261,
    # paridad 1, frame A, plano B (suma -0.01)
        44,  -5604,   5608,
        43, -13116,  12935,
       -85,   3325,  -3198,
    # paridad 1, frame B, plano R (suma 0.25)
       215,  -2989,   2957,
       526,   8633,  -7560,
       144,   1149,  -1040,
    # paridad 1, frame B, plano G (suma 0.04)
        29,   2515,  -2704,
      -353,  -7354,   8103,
       -62,   -601,    763,
    # paridad 1, frame B, plano B (suma -0.01)
        -1,    256,   -216,
       -76,    -43,    -64,
        21,   -276,    332,
    # ===== G1 =====
    # paridad 0, frame A, plano R (suma 0.07)
        65,      4,    -66,
       590,   -145,    169,
      -257,    335,   -110,
    # paridad 0, frame A, plano G (suma 0.75)
      5358,  -5380,   -148,
     -3296,   9438,    248,
      -291,    344,   -118,
    # paridad 0, frame A, plano B (suma 0.15)
     -5643,   5667,    -59,
      3132,  -2045,    105,
       366,   -371,    101,
    # paridad 0, frame B, plano R (suma 0.03)
      -359,    326,    -96,
     -6351,   6546,    148,
      3276,  -3338,     58,
    # paridad 0, frame B, plano G (suma 0.09)
       524,   -416,     40,
      6370,  -6356,    287,
     -3268,   3512,     85,
    # paridad 0, frame B, plano B (suma -0.10)
      -236,    128,     31,
      -493,      3,    -92,
      -128,     82,    -73,
    # paridad 1, frame A, plano R (suma 0.33)
         3,   -212,    158,
      -100,  -1503,   4434,
        63,   -172,     35,
    # paridad 1, frame A, plano G (suma 0.73)
       -16,   5670,  -5584,
       217,  20874, -15239,
       -30,  -3319,   3400,
    # paridad 1, frame A, plano B (suma -0.01)
        22,  -4978,   5059,
       140, -11578,  11114,
       -23,   3964,  -3788,
    # paridad 1, frame B, plano R (suma -0.23)
      -316,   7759,  -7823,
     -1557,   4812,  -4535,
      -340,    197,   -104,
    # paridad 1, frame B, plano G (suma 0.12)
        38,  -7236,   7264,
       107,  -4937,   5463,
      -133,   -218,    607,
    # paridad 1, frame B, plano B (suma 0.07)
        -4,   -473,    467,
        98,    673,   -390,
       -25,    603,   -404,
    # ===== G2 =====
    # paridad 0, frame A, plano R (suma -0.02)
        17,    -87,    -27,
      -463,    497,    -26,
       189,   -221,     -3,
    # paridad 0, frame A, plano G (suma 0.05)
     -2549,   2702,    -73,
      -277,    537,     40,
      3950,  -3976,     47,
    # paridad 0, frame A, plano B (suma -0.08)
      2540,  -2501,   -130,
       881,   -987,   -292,
     -4222,   4176,   -153,
    # paridad 0, frame B, plano R (suma 0.11)
       532,   -295,    -48,
      3374,  -2774,     35,
    -10387,  10458,     16,
    # paridad 0, frame B, plano G (suma 0.80)
      -515,    645,    -56,
     -4905,  11107,    190,
     10386, -10213,   -100,
    # paridad 0, frame B, plano B (suma 0.14)
      -178,     95,    -34,
      2130,   -686,    -29,
      -161,    121,    -88,
    # paridad 1, frame A, plano R (suma -0.18)
        -8,   -360,    355,
      -113,    361,  -1594,
       138,     51,   -302,
    # paridad 1, frame A, plano G (suma 0.09)
        85,   8568,  -8264,
       128,  -9194,   9167,
        49,  -1701,   1878,
    # paridad 1, frame A, plano B (suma 0.04)
        32,  -7766,   7688,
        79,   9079,  -8702,
       -74,   1793,  -1796,
    # paridad 1, frame B, plano R (suma 0.27)
      -243,  14363, -14345,
       -68,    685,   2031,
      -133,  -2819,   2781,
    # paridad 1, frame B, plano G (suma 0.76)
       -80, -14095,  14148,
       375,   8186,  -2135,
      -163,   3080,  -3086,
    # paridad 1, frame B, plano B (suma 0.02)
       -33,    157,    -43,
         9,   -589,    554,
       -19,     66,     52,
    # ===== B =====
    # paridad 0, frame A, plano R (suma 0.00)
       567,   -577,    174,
       114,    -44,   -384,
       -72,    260,    -16,
    # paridad 0, frame A, plano G (suma -0.03)
       617,   -393,    -14,
      8087,  -7671,   -710,
       741,   -868,    -47,
    # paridad 0, frame A, plano B (suma 0.81)
     -1344,   1352,    647,
     -7923,   8321,   4918,
      -735,    608,    793,
    # paridad 0, frame B, plano R (suma -0.02)
     -3509,   3389,    -38,
     -2787,   2812,    167,
     14593, -14702,    -61,
    # paridad 0, frame B, plano G (suma 0.00)
      3399,  -3717,   -259,
      2445,  -2093,    651,
    -14566,  14225,    -60,
    # paridad 0, frame B, plano B (suma 0.23)
       174,   -115,     85,
       566,    104,    707,
       -48,    133,    312,
    # paridad 1, frame A, plano R (suma 0.06)
       -51,   -155,    410,
        -8,   -281,    496,
        91,    223,   -236,
    # paridad 1, frame A, plano G (suma 0.04)
       -29,   -688,   1069,
       -60,   1345,  -1225,
        18,  -1678,   1589,
    # paridad 1, frame A, plano B (suma 0.13)
       -63,   1469,  -1389,
       197,   -240,    956,
      -116,   1615,  -1395,
    # paridad 1, frame B, plano R (suma -0.08)
      -183,   6555,  -6596,
       -85,  -4934,   4731,
        20,  -5176,   5053,
    # paridad 1, frame B, plano G (suma -0.07)
       -11,  -6824,   6288,
        24,   3998,  -3497,
      -126,   5238,  -5642,
    # paridad 1, frame B, plano B (suma 0.92)
      -113,    850,    -39,
       211,   6028,   -225,
      -107,    710,    194,
)


def bayer_channel(dx, dy):
    """ Bloque de la tabla que predice la celda (dx, dy) del tile Bayer """
    try:
        return BAYER_CHANNEL_INDEX[(dx, dy)]
    except KeyError:
        raise ValueError(f"Celda Bayer inválida: ({dx}, {dy})") from None


def column_parity(x):
    # Columnas pares usan la sub-tabla 1
    return 0 if x % 2 else 1


def kernel_index(ch, c, k, p, i=0, j=0):
    """
    Índice plano dentro de KERNEL_COEFFS.
    ch: bloque, c: paridad, k: frame (0=A, 1=B), p: plano, (i, j): posición en el kernel.
    """
    idx = ch
    idx = idx * N_PARITY + c
    idx = idx * N_FRAMES + k
    idx = idx * N_PLANES + p
    idx = idx * KERNEL_SIZE + i
    return idx * KERNEL_SIZE + j


def get_kernel(ch, c, k, p):
    start = kernel_index(ch, c, k, p)
    taps = KERNEL_COEFFS[start:start + KERNEL_SIZE * KERNEL_SIZE]
    return np.array(taps, dtype=np.int32).reshape(KERNEL_SIZE, KERNEL_SIZE)


_TABLE = np.array(KERNEL_COEFFS, dtype=np.int32).reshape(
    N_CHANNELS, N_PARITY, N_FRAMES, N_PLANES, KERNEL_SIZE, KERNEL_SIZE)
_TABLE.flags.writeable = False


def kernel_table():
    """ Vista de solo lectura (4, 2, 2, 3, 3, 3) de la tabla completa """
    return _TABLE


def kernel_gain(ch, c):
    # Ganancia DC del predictor: entrada gris -> salida * ganancia
    return float(_TABLE[ch, c].sum()) / KERNEL_SCALE
