DEFAULT_MODEL = "gpt-4o-mini"

OPINION_RANGE = (-100.0, 100.0)
CONFIDENCE_RANGE = (0.0, 100.0)
ENGAGEMENT_RANGE = (0.0, 100.0)
PROSECUTION_BIAS_RANGE = (-50, 50)

SEATED_COUNT = 12
ALTERNATE_COUNT = 4
POOL_SIZE = 18
