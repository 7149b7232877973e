from fastapi import APIRouter, HTTPException
from app.models.analysis import ConversationInput, LLMConversationInput
from app.services.analyze import analyze, describe_score
from app.services.llm import (
    LLMConfigError, LLMProviderError, LLMResponseError, analyze_with_llm, config_from_env,
)
import logging

log = logging.getLogger("routes_analyze")

router = APIRouter(tags=["analyze"])

def result_payload(result) -> dict:
    body = result.model_dump(by_alias=True)
    body["verdict"] = describe_score(result.overall_score)
    return body

@router.post("/analyze")
def analyze_local(body: ConversationInput):
    log.info("local analysis type=%s chars=%d", body.type, len(body.text))
    return result_payload(analyze(body.text))

@router.post("/analyze/llm")
def analyze_llm(body: LLMConversationInput):
    log.info("llm analysis type=%s chars=%d", body.type, len(body.text))
    try:
        cfg = body.llm or config_from_env()
        result = analyze_with_llm(body.text, cfg)
    except LLMConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (LLMProviderError, LLMResponseError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    return result_payload(result)
