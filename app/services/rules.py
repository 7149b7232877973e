from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, List, Optional, Tuple
import logging
import re
from app.models.analysis import Issue, Suggestion, RiskFactor

log = logging.getLogger("rules")

# ASCII word boundaries and case folding: "éok" still ends in a standalone "ok"
_I = re.IGNORECASE | re.ASCII

@dataclass(frozen=True)
class Detector:
    """
    One row of the detector table. A detector fires when its match count is
    strictly greater than `threshold`; it then emits whichever of
    issue / strength / suggestion / risk factor it carries.
    """
    name: str
    stage: str
    pattern: re.Pattern
    threshold: int
    category: Optional[str] = None
    severity: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    example_limit: int = 2
    fixed_examples: Tuple[str, ...] = ()
    suggestion: Optional[Suggestion] = None
    risk_factor: Optional[RiskFactor] = None
    strength: Optional[str] = None

    def fires(self, matches: List[str]) -> bool:
        return len(matches) > self.threshold

    def issue(self, matches: List[str]) -> Optional[Issue]:
        if self.title is None:
            return None
        examples = list(self.fixed_examples) if self.fixed_examples else matches[: self.example_limit]
        return Issue(
            category=self.category, title=self.title, description=self.description,
            severity=self.severity, examples=examples,
        )

@dataclass
class Findings:
    issues: List[Issue] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)
    risk_factors: List[RiskFactor] = field(default_factory=list)

@dataclass(frozen=True)
class DerivationRule:
    """A rule evaluated over the complete findings once every detector has run."""
    name: str
    applies: Callable[[Findings], bool]
    suggestion: Suggestion


DETECTORS: Tuple[Detector, ...] = (
    # --- communication ---
    Detector(
        name="excessive_questions", stage="communication",
        pattern=re.compile(r"\?.*\?.*\?"),
        threshold=2,
        category="communication", severity="medium",
        title="Too Many Questions",
        description="You may have overwhelmed them with multiple questions at once.",
        suggestion=Suggestion(
            category="Communication",
            title="Ask one question at a time",
            description="Allow them to respond to one question before asking another. "
                        "This creates a more natural flow.",
        ),
    ),
    Detector(
        name="one_word_responses", stage="communication",
        pattern=re.compile(r"\b(?:ok|yes|no|maybe|sure|fine)\b\.?\s*$", _I | re.MULTILINE),
        threshold=3,
        category="interest", severity="high",
        title="Received Short Responses",
        description="They gave mostly brief, low-effort responses indicating decreased interest.",
        example_limit=3,
    ),
    Detector(
        name="interrupting", stage="communication",
        pattern=re.compile(r"\b(?:but|however|actually|well actually)\b", _I),
        threshold=2,
        category="communication", severity="medium",
        title="Interrupting or Contradicting",
        description="You may have frequently interrupted or contradicted their statements.",
    ),
    # --- timing ---
    Detector(
        name="rapid_fire_messages", stage="timing",
        pattern=re.compile(r"(?:.{1,50}\n){3,}"),
        threshold=1,
        category="timing", severity="medium",
        title="Message Flooding",
        description="Sending multiple messages in quick succession can feel overwhelming.",
        fixed_examples=("Multiple consecutive short messages",),
        suggestion=Suggestion(
            category="Timing",
            title="Give them space to respond",
            description="Wait for their response before sending additional messages. "
                        "Quality over quantity.",
        ),
    ),
    Detector(
        name="delayed_responses", stage="timing",
        pattern=re.compile(r"\b(?:sorry for the late reply|sorry i just saw this|been busy)\b", _I),
        threshold=0,
        category="timing", severity="low",
        title="Inconsistent Response Times",
        description="Delayed responses may indicate conflicting priorities or interest levels.",
    ),
    # --- boundaries ---
    Detector(
        name="personal_details", stage="boundaries",
        pattern=re.compile(r"\b(?:my ex|my therapist|my medication|my problems|my trauma)\b", _I),
        threshold=1,
        category="boundaries", severity="high",
        title="Oversharing Personal Information",
        description="Sharing very personal details too early can make others uncomfortable.",
        risk_factor=RiskFactor(
            type="Boundary Issues",
            description="Oversharing personal information early in relationships",
            impact="high",
        ),
    ),
    Detector(
        name="pushy_behavior", stage="boundaries",
        pattern=re.compile(r"\b(?:you should|you need to|you have to|why don't you)\b", _I),
        threshold=2,
        category="boundaries", severity="high",
        title="Pushy or Controlling Language",
        description="Using commanding language can feel controlling and push people away.",
    ),
    Detector(
        name="inappropriate_questions", stage="boundaries",
        pattern=re.compile(r"\b(?:how much do you make|are you single|what's your address)\b", _I),
        threshold=0,
        risk_factor=RiskFactor(
            type="Inappropriate Questions",
            description="Asking personal or invasive questions too early",
            impact="high",
        ),
    ),
    # --- engagement ---
    Detector(
        name="enthusiasm_markers", stage="engagement",
        # the upper-case run stays case-sensitive even though the rest is not
        pattern=re.compile(r"!{2,}|(?-i:[A-Z]{3,})|\b(?:love|amazing|awesome|excited|can't wait)\b", _I),
        threshold=2,
        strength="Showed genuine enthusiasm and excitement",
    ),
    Detector(
        name="disengagement", stage="engagement",
        pattern=re.compile(r"\b(?:busy|swamped|hectic|whatever|don't care|not interested)\b", _I),
        threshold=1,
        category="interest", severity="high",
        title="Signs of Disengagement",
        description="The conversation showed clear signs of decreased interest or availability.",
    ),
    Detector(
        name="negative_venting", stage="engagement",
        pattern=re.compile(r"\b(?:hate|horrible|awful|terrible|worst|can't stand)\b", _I),
        threshold=3,
        category="communication", severity="medium",
        title="Excessive Negativity",
        description="The conversation may have been dominated by complaints or negative topics.",
        fixed_examples=("Multiple negative expressions detected",),
        suggestion=Suggestion(
            category="Tone",
            title="Balance negative topics with positive ones",
            description="Try to maintain a more balanced conversation with both challenges "
                        "and positive aspects.",
        ),
    ),
)

DETECTORS_BY_NAME = MappingProxyType({d.name: d for d in DETECTORS})
STAGES: Tuple[str, ...] = ("communication", "timing", "boundaries", "engagement")

DERIVATIONS: Tuple[DerivationRule, ...] = (
    DerivationRule(
        name="open_ended_questions",
        applies=lambda f: any(i.category == "interest" for i in f.issues),
        suggestion=Suggestion(
            category="Engagement",
            title="Ask engaging, open-ended questions",
            description="Focus on questions that invite storytelling and deeper conversation.",
        ),
    ),
)


def scan(detector: Detector, text: str) -> List[str]:
    """Fresh, ordered, non-overlapping matches of `detector` in `text`."""
    return [m.group(0) for m in detector.pattern.finditer(text)]

def run_detectors(text: str, detectors: Tuple[Detector, ...] = DETECTORS) -> Findings:
    findings = Findings()
    for d in detectors:
        matches = scan(d, text)
        if not d.fires(matches):
            continue
        log.debug("detector %s fired (%d matches)", d.name, len(matches))
        issue = d.issue(matches)
        if issue is not None:
            findings.issues.append(issue)
        if d.strength:
            findings.strengths.append(d.strength)
        if d.suggestion is not None:
            findings.suggestions.append(d.suggestion)
        if d.risk_factor is not None:
            findings.risk_factors.append(d.risk_factor)
    return findings

def apply_derivations(findings: Findings, rules: Tuple[DerivationRule, ...] = DERIVATIONS) -> Findings:
    for rule in rules:
        if rule.applies(findings):
            findings.suggestions.append(rule.suggestion)
    return findings
