from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from app.dependencies import get_prompt_service
from app.schemas import (
    PromptRequest,
    PromptResponse,
    PromptSectionModel,
    RelationshipModel,
    SchemaRequest,
    SchemaResponse,
    TableModel,
)
from app.security import require_api_key
from app.services.prompt_service import PromptService
from promptcore.schema.types import SchemaContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prompts"])


def _round_trace(t: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: v for k, v in t.items() if v is not None}
    try:
        out["duration_ms"] = round(float(t.get("duration_ms") or 0.0), 2)
    except (TypeError, ValueError):
        out["duration_ms"] = 0.0
    return out


def _schema_response(ctx: SchemaContext) -> SchemaResponse:
    return SchemaResponse(
        tables=[TableModel.from_metadata(t) for t in ctx.relevant_tables],
        scores=dict(ctx.scores),
        strategy=ctx.selection_strategy,
        forced_tables=list(ctx.forced_tables),
        relationships=[RelationshipModel(**r.__dict__) for r in ctx.relationships],
        suggested_joins=list(ctx.suggested_joins),
        column_mappings=dict(ctx.column_mappings),
        business_terms=list(ctx.business_terms),
    )


@router.post(
    "/prompts",
    name="build_prompt",
    dependencies=[Depends(require_api_key)],
    response_model=PromptResponse,
)
def build_prompt(
    request: PromptRequest,
    svc: PromptService = Depends(get_prompt_service),
) -> PromptResponse:
    tables = [t.to_metadata() for t in request.tables] if request.tables is not None else None
    details, schema, traces = svc.build_prompt(request.query, request.context, tables)

    sections: List[PromptSectionModel] = [
        PromptSectionModel(**s.__dict__) for s in details.sections
    ]
    return PromptResponse(
        prompt=details.full_prompt,
        template_name=details.template_name,
        template_version=details.template_version,
        token_count=details.token_count,
        fallback=details.template_name == "fallback",
        sections=sections,
        tables=schema.table_names if schema is not None else [],
        strategy=schema.selection_strategy if schema is not None else None,
        traces=[_round_trace(t) for t in traces],
        generated_at=details.generated_at,
    )


@router.post(
    "/schema/relevant",
    name="relevant_schema",
    dependencies=[Depends(require_api_key)],
    response_model=SchemaResponse,
)
def relevant_schema(
    request: SchemaRequest,
    svc: PromptService = Depends(get_prompt_service),
) -> SchemaResponse:
    tables = [t.to_metadata() for t in request.tables] if request.tables is not None else None
    ctx = svc.relevant_schema(request.query, tables)
    logger.debug("Relevant schema served", extra={"tables": ctx.table_names})
    return _schema_response(ctx)
