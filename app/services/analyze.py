from __future__ import annotations
from typing import List
import logging
from app.services import rules as R
from app.models.analysis import AnalysisResult, Issue
from app.core import config

log = logging.getLogger("analyze")

VERDICTS = {
    "good": "This conversation went relatively well! There are just a few minor areas for improvement.",
    "fair": "The conversation had some challenges, but with a few adjustments, "
            "future interactions could go much better.",
    "poor": "This conversation had several significant issues that likely contributed to the outcome. "
            "The good news is that these are all learnable skills.",
}

def calculate_score(issues: List[Issue], strengths: List[str]) -> int:
    # Start from the baseline, subtract per-severity penalties, add strength bonuses
    score = config.BASELINE_SCORE
    for issue in issues:
        score -= config.SEVERITY_PENALTIES[issue.severity]
    score += len(strengths) * config.STRENGTH_BONUS
    return max(config.SCORE_MIN, min(config.SCORE_MAX, score))

def describe_score(score: int) -> str:
    if score >= config.GOOD_SCORE:
        return VERDICTS["good"]
    if score >= config.FAIR_SCORE:
        return VERDICTS["fair"]
    return VERDICTS["poor"]

def analyze(text: str) -> AnalysisResult:
    """
    Score a conversation against the fixed detector table.

    Stage 1 runs every detector over the full text; stage 2 runs the
    derivation rules over the complete findings; the score is computed last.
    Every pattern scans the whole input, so cost grows with input length;
    callers are expected to cap very large inputs.
    """
    findings = R.run_detectors(text)
    findings = R.apply_derivations(findings)
    score = calculate_score(findings.issues, findings.strengths)

    log.debug(
        "local analysis score=%d issues=%d strengths=%d risks=%d",
        score, len(findings.issues), len(findings.strengths), len(findings.risk_factors),
    )
    return AnalysisResult(
        overall_score=score,
        issues=findings.issues,
        strengths=findings.strengths,
        suggestions=findings.suggestions,
        risk_factors=findings.risk_factors,
        analysis_method="local",
    )
