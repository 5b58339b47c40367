"""Static market reference data used by the analytics engine."""

# Salary band used when no career document matches the target role
DEFAULT_BASE_SALARY = 50000
DEFAULT_MAX_SALARY = 120000

# Quiz tiers in ascending difficulty
LEVEL_ORDINALS = {
    "none": 0,
    "easy": 1,
    "medium": 2,
    "advanced": 3,
}
MAX_LEVEL_ORDINAL = 3

# Keyword -> approximate open postings. Order matters: "data scientist"
# must be tested before "data".
MOCK_JOB_COUNTS = [
    (("software", "developer"), 12400),
    (("data scientist",), 5200),
    (("data",), 8700),
    (("product",), 4300),
    (("design", "ux"), 3800),
    (("devops", "cloud"), 6100),
    (("machine learning", "ml", "ai"), 7500),
    (("cyber", "security"), 4900),
    (("mobile", "ios", "android"), 3600),
]


def get_level_ordinal(level):
    """Map a quiz tier name to its ordinal; unknown or empty tiers count as none."""
    if not level:
        return 0
    return LEVEL_ORDINALS.get(str(level).lower(), 0)


def get_mock_job_count(role):
    """Deterministic posting count for a role when live job data is unavailable."""
    base = (role or "").lower()
    for keywords, count in MOCK_JOB_COUNTS:
        if any(keyword in base for keyword in keywords):
            return count
    return 2000 + (len(role or "") * 317) % 5000
