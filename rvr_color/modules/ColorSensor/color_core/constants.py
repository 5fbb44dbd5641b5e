"""Color sensor tuning constants and configuration defaults."""

# Channel range reported by the RGB sensor
CHANNEL_MIN = 0
CHANNEL_MAX = 255
CHANNELS = ("r", "g", "b")

# Stabilizer
DEFAULT_STABILITY_THRESHOLD = 3.0  # per-channel std-dev of the running averages
DEFAULT_STABILITY = 1
DEFAULT_SAMPLE_FREQUENCY = 0.0  # Hz; 0 = sample on demand

# Values applied by configure() for omitted arguments
CONFIGURE_DEFAULT_STABILITY = 20
CONFIGURE_DEFAULT_SAMPLE_FREQUENCY = 100.0

# Scanner
DEFAULT_SCAN_FREQUENCY = 10.0
