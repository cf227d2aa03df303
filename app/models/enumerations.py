from enum import Enum

class Module(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    CONTENT = "content"
    PAID = "paid"
    NURTURE = "nurture"
    INFRA = "infra"      # Marketing infrastructure (CRM, automation)
    ATTR = "attr"        # Attribution & analytics

class Outcome(str, Enum):
    FOUNDATION = "Foundation"        # overall < 50
    MOMENTUM = "Momentum"            # 50 <= overall < 75
    OPTIMIZATION = "Optimization"    # overall >= 75

class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class RecommendationSource(str, Enum):
    LLM = "llm"            # Narrative generator returned valid output
    FALLBACK = "fallback"  # Deterministic summary built from gap records

class PresenceTrigger(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    NEVER = "never"
