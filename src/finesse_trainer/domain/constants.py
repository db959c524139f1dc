"""Tunable numbers for SM-2 scheduling, mastery, sessions and difficulty."""

# ---------- SM-2 ----------
DEFAULT_EASINESS = 2.5
MIN_EASINESS = 1.3
INITIAL_INTERVAL = 1
SECOND_INTERVAL = 6
QUALITY_CORRECT = 4
QUALITY_INCORRECT = 0
PASSING_QUALITY = 3
LENIENT_EASINESS_PENALTY = 0.1
LENIENT_MIN_INTERVAL = 2

# ---------- Mastery ----------
MASTERY_THRESHOLD = 0.90
MIN_ATTEMPTS_FOR_MASTERY = 5
MASTERED_REVIEW_MIN = 10
MASTERED_REVIEW_MAX = 20

# ---------- Sessions ----------
MAX_SESSION_HISTORY = 100

# ---------- Difficulty / Flow ----------
PERFORMANCE_WINDOW = 20
MIN_CONSISTENCY_SAMPLES = 3
CONSISTENCY_STDDEV_SCALE = 500.0
FLOW_MIN_ACCURACY = 0.8
FLOW_MIN_CONSISTENCY = 0.6
FLOW_MAX_RESPONSE_MS = 1000.0
FLOW_MIN_STREAK = 5
STRUGGLE_ACCURACY = 0.5
STRUGGLE_BIAS_MULT = 1.3
FLOW_NEW_PATTERN_MULT = 0.7
FLOW_SPEED = 1.2
STRUGGLE_SPEED = 0.8
