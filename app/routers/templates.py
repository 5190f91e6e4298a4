from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from app.dependencies import get_prompt_service
from app.schemas import TemplateRequest, TemplateResponse
from app.security import require_api_key
from app.services.prompt_service import PromptService
from promptcore.prompts.types import PromptTemplate

router = APIRouter(prefix="/templates", tags=["templates"])


def _to_response(t: PromptTemplate) -> TemplateResponse:
    return TemplateResponse(**t.__dict__)


def _to_template(req: TemplateRequest) -> PromptTemplate:
    return PromptTemplate(
        name=req.name,
        version=req.version,
        content=req.content,
        description=req.description,
        is_active=req.is_active,
        created_by=req.created_by,
        parameters=req.parameters,
    )


@router.get("", name="list_templates", response_model=List[TemplateResponse])
def list_templates(svc: PromptService = Depends(get_prompt_service)) -> List[TemplateResponse]:
    return [_to_response(t) for t in svc.list_templates()]


@router.post(
    "",
    name="create_template",
    status_code=201,
    dependencies=[Depends(require_api_key)],
    response_model=TemplateResponse,
)
def create_template(
    request: TemplateRequest,
    svc: PromptService = Depends(get_prompt_service),
) -> TemplateResponse:
    return _to_response(svc.create_template(_to_template(request)))


@router.put(
    "",
    name="update_template",
    dependencies=[Depends(require_api_key)],
    response_model=TemplateResponse,
)
def update_template(
    request: TemplateRequest,
    svc: PromptService = Depends(get_prompt_service),
) -> TemplateResponse:
    return _to_response(svc.update_template(_to_template(request)))
