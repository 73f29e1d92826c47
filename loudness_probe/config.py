"""Configuration constants for loudness-probe."""

import os

# External tool executables, overridable from the environment
SOX_BINARY = os.environ.get("LOUDNESS_PROBE_SOX", "sox")
BS1770GAIN_BINARY = os.environ.get("LOUDNESS_PROBE_BS1770GAIN", "bs1770gain")

# Highpass cutoff in Hz applied before measuring, keeps bass from skewing loudness
HIGHPASS_CUTOFF_HZ = 150

# Line printed by `sox ... stat` on stderr
DURATION_PATTERN = r"Length \(seconds\):\s+(?P<length>\d+(\.\d+)?)"


# Prefix of the private directory holding the filtered copy
TEMP_DIR_PREFIX = "loudness_probe"

# bs1770gain flags
BS1770GAIN_BASE_FLAGS = "-itr"      # integrated, true peak, range
BS1770GAIN_MAXIMA_FLAGS = "ms"      # momentary maximum, shortterm maximum
BS1770GAIN_OUTPUT_ARGS = [
    "--loglevel=quiet",  # remove all non-essential output
    "--xml",             # XML on stdout
]

# Extensions picked up when collecting files from directories
SUPPORTED_INPUT_FORMATS = {".wav", ".flac", ".ogg", ".mp3", ".aiff", ".aif"}
