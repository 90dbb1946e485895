# trend models: question input and distribution / trend summary responses
# field names mirror the dataclasses in aggregation/ and trends/, camelCase on the wire

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from records import ClinicalIntent, ClinicalSetting, ConceptCategory
from trends.config import MAX_FORECAST_HORIZON


# request side

class ConceptIn(BaseModel):
    term: str
    category: ConceptCategory
    confidence: float = 1.0


class DemographicsIn(BaseModel):
    age_group: Optional[str] = Field(None, alias="ageGroup")
    gender: Optional[str] = None
    comorbidities: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list, alias="riskFactors")

    model_config = {"populate_by_name": True}


class QuestionIn(BaseModel):
    """one classified question as produced by the upstream extraction step"""
    id: Optional[str] = None
    text: str = ""
    timestamp: datetime
    medical_concepts: list[ConceptIn] = Field(default_factory=list, alias="medicalConcepts")
    clinical_intent: Optional[ClinicalIntent] = Field(None, alias="clinicalIntent")
    demographics: Optional[DemographicsIn] = None
    clinical_setting: Optional[ClinicalSetting] = Field(None, alias="clinicalSetting")
    treatment_indications: list[str] = Field(default_factory=list, alias="treatmentIndications")

    model_config = {"populate_by_name": True}


class DistributionsRequest(BaseModel):
    questions: list[QuestionIn] = Field(default_factory=list)
    granularity: str = "monthly"


class TrendAnalysisRequest(BaseModel):
    """thresholds left unset fall back to the server defaults"""
    questions: list[QuestionIn] = Field(default_factory=list)
    granularity: Optional[str] = None
    min_sample_size: Optional[int] = Field(None, alias="minSampleSize", ge=1)
    significance_level: Optional[float] = Field(None, alias="significanceLevel", gt=0, le=1)
    baseline_periods: Optional[int] = Field(None, alias="baselinePeriods", ge=1)
    forecast_horizon: Optional[int] = Field(None, alias="forecastHorizon", ge=1, le=MAX_FORECAST_HORIZON)
    correlation_threshold: Optional[float] = Field(None, alias="correlationThreshold", ge=0, le=1)

    model_config = {"populate_by_name": True}


# distributions

class DemographicSummaryOut(BaseModel):
    total_questions: int = Field(0, alias="totalQuestions")
    age_groups: dict[str, int] = Field(default_factory=dict, alias="ageGroups")
    age_group_percentages: dict[str, float] = Field(default_factory=dict, alias="ageGroupPercentages")
    gender_distribution: dict[str, int] = Field(default_factory=dict, alias="genderDistribution")
    gender_percentages: dict[str, float] = Field(default_factory=dict, alias="genderPercentages")
    common_comorbidities: list[dict[str, Any]] = Field(default_factory=list, alias="commonComorbidities")
    risk_factors: list[dict[str, Any]] = Field(default_factory=list, alias="riskFactors")

    model_config = {"populate_by_name": True}


class TopicDistributionOut(BaseModel):
    category: str
    count: int
    percentage: float
    sub_topics: list[dict[str, Any]] = Field(default_factory=list, alias="subTopics")

    model_config = {"populate_by_name": True}


class IntentBreakdownOut(BaseModel):
    intent: str
    count: int
    percentage: float
    common_concepts: list[str] = Field(default_factory=list, alias="commonConcepts")

    model_config = {"populate_by_name": True}


class JourneyStageOut(BaseModel):
    stage: str
    question_count: int = Field(0, alias="questionCount")
    common_concepts: list[str] = Field(default_factory=list, alias="commonConcepts")
    average_timing: float = Field(0.0, alias="averageTiming")
    timing_samples: int = Field(0, alias="timingSamples")

    model_config = {"populate_by_name": True}


class PeriodDistributionOut(BaseModel):
    period: str
    question_count: int = Field(0, alias="questionCount")
    demographics: DemographicSummaryOut
    topics: list[TopicDistributionOut] = Field(default_factory=list)
    intents: list[IntentBreakdownOut] = Field(default_factory=list)
    journey: list[JourneyStageOut] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class DistributionsResponse(BaseModel):
    granularity: str
    periods: list[PeriodDistributionOut] = Field(default_factory=list)


# trend summary

class TopicTrendOut(BaseModel):
    topic_id: str = Field(..., alias="topicId")
    name: str
    current_frequency: float = Field(..., alias="currentFrequency")
    baseline_frequency: float = Field(..., alias="baselineFrequency")
    total_frequency: int = Field(..., alias="totalFrequency")
    growth_rate: float = Field(..., alias="growthRate")
    percentage_change: float = Field(..., alias="percentageChange")
    p_value: float = Field(..., alias="pValue")

    model_config = {"populate_by_name": True}


class EmergingTopicOut(TopicTrendOut):
    velocity_score: float = Field(..., alias="velocityScore")
    newness: float
    related_topics: list[str] = Field(default_factory=list, alias="relatedTopics")


class TopicCorrelationOut(BaseModel):
    source_id: str = Field(..., alias="sourceId")
    target_id: str = Field(..., alias="targetId")
    source_name: str = Field(..., alias="sourceName")
    target_name: str = Field(..., alias="targetName")
    correlation_coefficient: float = Field(..., alias="correlationCoefficient")
    p_value: float = Field(..., alias="pValue")
    cooccurrence_frequency: float = Field(..., alias="cooccurrenceFrequency")
    is_novel: bool = Field(..., alias="isNovel")
    recent_coefficient: float = Field(..., alias="recentCoefficient")
    baseline_coefficient: Optional[float] = Field(None, alias="baselineCoefficient")
    sample_size: int = Field(..., alias="sampleSize")

    model_config = {"populate_by_name": True}


class PredictedChangeOut(BaseModel):
    direction: str
    timeframe: int
    confidence: float


class SeasonalPatternOut(BaseModel):
    topic_id: str = Field(..., alias="topicId")
    name: str
    seasonality_strength: float = Field(..., alias="seasonalityStrength")
    peak_periods: list[str] = Field(default_factory=list, alias="peakPeriods")
    trough_periods: list[str] = Field(default_factory=list, alias="troughPeriods")
    current_position: str = Field(..., alias="currentPosition")
    next_predicted_change: Optional[PredictedChangeOut] = Field(None, alias="nextPredictedChange")
    seasonal_indices: dict[str, float] = Field(default_factory=dict, alias="seasonalIndices")
    seasonality_type: str = Field("annual", alias="seasonalityType")

    model_config = {"populate_by_name": True}


class TrendForecastOut(BaseModel):
    topic_id: str = Field(..., alias="topicId")
    name: str
    forecast_period: str = Field(..., alias="forecastPeriod")
    model: str
    current_frequency: float = Field(..., alias="currentFrequency")
    projected_frequency: float = Field(..., alias="projectedFrequency")
    growth_projection: float = Field(..., alias="growthProjection")
    confidence_interval: list[float] = Field(..., alias="confidenceInterval")
    fit_r_squared: float = Field(..., alias="fitRSquared")
    growth_drivers: list[str] = Field(default_factory=list, alias="growthDrivers")
    seasonal_adjusted: bool = Field(False, alias="seasonalAdjusted")

    model_config = {"populate_by_name": True, "protected_namespaces": ()}


class TrendSummaryResponse(BaseModel):
    granularity: str
    emerging_topics: list[EmergingTopicOut] = Field(default_factory=list, alias="emergingTopics")
    fading_topics: list[TopicTrendOut] = Field(default_factory=list, alias="fadingTopics")
    correlations: list[TopicCorrelationOut] = Field(default_factory=list)
    seasonal_patterns: list[SeasonalPatternOut] = Field(default_factory=list, alias="seasonalPatterns")
    forecasts: list[TrendForecastOut] = Field(default_factory=list)
    analysis_timestamp: str = Field(..., alias="analysisTimestamp")
    data_timeframe: Optional[dict[str, Any]] = Field(None, alias="dataTimeframe")

    model_config = {"populate_by_name": True}
