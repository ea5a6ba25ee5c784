"""
Central Configuration
All constants, limits, and rhythm defaults in one place
"""

# === SEQUENCER ===
# Upper bound on steps in one submitted sequence
DEFAULT_MAX_STEPS = 100

# Used when a Wait step carries no (or a zero) duration
DEFAULT_WAIT_MS = 500

# Wire names for step variants (routine JSON "type" field)
STEP_TYPES = ('say', 'wait', 'animate', 'playPlugin')

# === CANNED SEQUENCES ===
GREETING_DEFAULT_NAME = "friend"
GREETING_PAUSE_MS = 800       # say hello -> wave
GREETING_WAVE_HOLD_MS = 500   # wave -> question
GREETING_QUESTION = "How are you feeling today?"

CELEBRATION_JUMP_HOLD_MS = 300
CELEBRATION_SPARKLE_HOLD_MS = 500

# === RHYTHM CLOCK ===
# Floor for any scheduled tick interval
MIN_TICK_INTERVAL_MS = 50

# Variation used when locked to an external source
SYNC_VARIATION = 0.05

# Adaptive mode: interval never shrinks below this fraction of base
ADAPTIVE_MIN_FACTOR = 0.3
ADAPTIVE_INTENSITY_SCALE = 0.7

# Pulse mode: heartbeat shape over a 4-tick cycle
PULSE_CYCLE_TICKS = 4
PULSE_BASE_FACTOR = 0.8
PULSE_DEPTH = 0.4

# Log tick statistics every N ticks (debug level)
TICK_STATS_EVERY = 10

# Per-mode defaults. Order matches RhythmMode.
DEFAULT_RHYTHM_CONFIGS = {
    'steady': {
        'base_interval_ms': 1000,
        'intensity': 'medium',
        'variation': 0.1,
    },
    'pulse': {
        'base_interval_ms': 400,
        'intensity': 'medium',
        'variation': 0.3,
    },
    'sequence': {
        'base_interval_ms': 500,
        'intensity': 'medium',
        'variation': 0.2,
        'sequence': (300, 600, 200, 800, 400),
    },
    'adaptive': {
        'base_interval_ms': 600,
        'intensity': 'medium',
        'variation': 0.4,
    },
    'sync': {
        'base_interval_ms': 1000,
        'intensity': 'medium',
        'variation': 0.1,
    },
}

# Named clock presets for launch environments
RHYTHM_PROFILES = {
    'development': {
        'mode': 'steady',
        'base_interval_ms': 2000,  # slower beat while developing
        'intensity': 'low',
        'variation': 0.1,
    },
    'production': {
        'mode': 'adaptive',
        'base_interval_ms': 800,
        'intensity': 'medium',
        'variation': 0.3,
    },
    'demo': {
        'mode': 'pulse',
        'base_interval_ms': 600,
        'intensity': 'high',
        'variation': 0.4,
    },
}

# === ROUTINES ===
ROUTINE_VERSION = 1
ROUTINE_FILE_SUFFIX = ".json"
