MAX_BODY_BYTES = 1 * 1024 * 1024  # 1 MB soft cap
ALLOWED_EXTENSIONS = {'.txt'}
MIME_ALLOW = {
    ".txt": {"text/plain", "application/octet-stream"},
}

# Scorer configuration
BASELINE_SCORE = 85
SEVERITY_PENALTIES = {
    "high": 15,
    "medium": 8,
    "low": 3,
}
STRENGTH_BONUS = 5
SCORE_MIN = 0
SCORE_MAX = 100

# Verdict bands (inclusive lower bounds)
GOOD_SCORE = 80
FAIR_SCORE = 60

# LLM configuration
DEFAULT_MODELS = {
    "openai": "gpt-4",
    "anthropic": "claude-3-sonnet-20240229",
}
LLM_TIMEOUT = 60.0  # seconds
LLM_MAX_TOKENS = 2000
LLM_TEMPERATURE = 0.7
