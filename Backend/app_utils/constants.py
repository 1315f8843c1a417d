# ---------------- Algorithm Selector Aliases ----------------
# Keys are normalized selectors: lowercase, no spaces, dashes or underscores.
ALGORITHM_ALIASES = {
    # Mean / Average hash
    "mean": "Mean",
    "average": "Mean",
    "ahash": "Mean",

    # Gradient (difference) hashes
    "gradient": "Gradient",
    "dhash": "Gradient",
    "vertgradient": "VertGradient",
    "verticalgradient": "VertGradient",
    "doublegradient": "DoubleGradient",

    # Block based
    "blockmean": "BlockMean",
    "blockhash": "Blockhash",

    "median": "Median",

    # Frequency domain
    "dct": "DCT",
    "phash": "DCT",
}

DEFAULT_ALGORITHM = "Gradient"
DEFAULT_HASH_SIZE = 8
DEFAULT_MATCH_THRESHOLD = 5  # hamming distance, same as dedup threshold

# ---------------- Decoder ----------------
SUPPORTED_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "WEBP"}

# Block based algorithms and DCT work on a grid this many times the hash size
BLOCK_SCALE = 4
BLOCKHASH_BANDS = 4
