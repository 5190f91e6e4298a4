"""Prompt-generation analytics: confidence heuristic, cost estimate, audit record."""

from __future__ import annotations

import json
import uuid
from typing import List, Optional

from promptcore.analyzer import SemanticAnalysis, classify_question, extract_entities
from promptcore.prompts.types import PromptDetails, PromptGenerationRecord

FALLBACK_TEMPLATE = "fallback"
COST_PER_1K_TOKENS = 0.03


def confidence_score(details: PromptDetails, table_count: int) -> float:
    score = 0.5
    if details.template_name and details.template_name != FALLBACK_TEMPLATE:
        score += 0.2
    if table_count > 0:
        score += 0.1
    if len(details.sections) > 3:
        score += 0.1
    if 100 < details.token_count < 4000:
        score += 0.1
    return min(1.0, round(score, 4))


def cost_estimate(token_count: int) -> float:
    return token_count / 1000 * COST_PER_1K_TOKENS


def build_generation_record(
    query: str,
    details: PromptDetails,
    tables_used: List[str],
    *,
    context: Optional[str] = None,
    analysis: Optional[SemanticAnalysis] = None,
    user_id: str = "system",
) -> PromptGenerationRecord:
    if analysis is not None:
        intent, domain = analysis.intent, analysis.domain
        entities = [e.text for e in analysis.entities]
    else:
        intent, domain = classify_question(query)
        entities = [e.text for e in extract_entities(query)]

    return PromptGenerationRecord(
        user_query=query,
        generated_prompt=details.full_prompt,
        template_name=details.template_name,
        template_version=details.template_version,
        intent=intent,
        domain=domain,
        entities=entities,
        tables_used=list(tables_used),
        token_count=details.token_count,
        confidence_score=confidence_score(details, len(tables_used)),
        cost_estimate=cost_estimate(details.token_count),
        request_id=str(uuid.uuid4()),
        user_id=user_id,
        time_context=json.dumps({"context": context}) if context else None,
    )
