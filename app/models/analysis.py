from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

Severity = Literal["low", "medium", "high"]
Category = Literal["communication", "timing", "boundaries", "interest", "social-cues", "oversharing"]
AnalysisMethod = Literal["local", "llm"]
Provider = Literal["openai", "anthropic", "custom"]
InputType = Literal["transcript", "description", "recording"]


class _Frozen(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Issue(_Frozen):
    category: Category
    title: str
    description: str
    severity: Severity
    examples: List[str] = Field(default_factory=list)

class Suggestion(_Frozen):
    category: str
    title: str
    description: str
    actionable: bool = True

class RiskFactor(_Frozen):
    type: str
    description: str
    impact: Severity

class AnalysisResult(_Frozen):
    overall_score: int = Field(alias="overallScore", ge=0, le=100)
    issues: List[Issue] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    risk_factors: List[RiskFactor] = Field(default_factory=list, alias="riskFactors")
    summary: Optional[str] = None
    analysis_method: AnalysisMethod = Field("local", alias="analysisMethod")


class LLMConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: Provider
    api_key: str = Field(alias="apiKey")
    model: Optional[str] = None
    endpoint: Optional[str] = None

class ConversationInput(BaseModel):
    text: str
    type: InputType = "description"

class LLMConversationInput(ConversationInput):
    llm: Optional[LLMConfig] = None
