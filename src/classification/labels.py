# label vocabularies for the four classification taxonomies
# each taxonomy has an explicit default member used when no rule matches

from enum import Enum


class IntentType(str, Enum):
    EFFICACY_INFO = "efficacy_information"
    SAFETY_INFO = "safety_information"
    MECHANISM_INFO = "mechanism_information"
    ALTERNATIVES_INFO = "alternatives_information"
    COST_INFO = "cost_information"
    GUIDELINE_INFO = "guideline_information"
    GENERAL_INFO = "general_information"
    CLARIFICATION = "clarification"
    PATIENT_SPECIFIC = "patient_specific"
    EDUCATION = "education"


class DecisionType(str, Enum):
    TREATMENT_SELECTION = "treatment_selection"
    DOSING = "dosing"
    DIAGNOSTIC = "diagnostic"
    MONITORING = "monitoring"
    REFERRAL = "referral"
    RISK_ASSESSMENT = "risk_assessment"
    PREVENTIVE = "preventive"
    DISCONTINUATION = "discontinuation"
    OTHER = "other"


class GapType(str, Enum):
    CONCEPTUAL = "conceptual"
    TEMPORAL = "temporal"
    CONFLICTING = "conflicting"
    RARE_CASE = "rare_case"
    EVIDENCE_BASED = "evidence_based"
    SPECIALIZED = "specialized"
    PRACTICAL = "practical"
    PATIENT_SPECIFIC = "patient_specific"
    GENERAL = "general"


class WorkflowStage(str, Enum):
    PREVENTION = "prevention"
    DIAGNOSIS = "diagnosis"
    TREATMENT = "treatment"
    MONITORING = "monitoring"
    MODIFICATION = "modification"
    RELAPSE = "relapse"
    PALLIATIVE = "palliative"
    EDUCATION = "education"
    FOLLOWUP = "followup"
    UNSPECIFIED = "unspecified"


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GapSeverity(str, Enum):
    CRITICAL = "critical"
    MODERATE = "moderate"
    MINOR = "minor"


# taxonomy name -> (label enum, default label)
TAXONOMIES = {
    "intent": (IntentType, IntentType.GENERAL_INFO),
    "decision": (DecisionType, DecisionType.OTHER),
    "information_gap": (GapType, GapType.GENERAL),
    "workflow": (WorkflowStage, WorkflowStage.UNSPECIFIED),
}
