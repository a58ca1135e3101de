"""
제안서(견적) API입니다.
티어 선택, 추가 기능 토글, 유지보수 플랜 선택과 제출/수락/거절/인보이스 전환을 제공합니다.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.layers.layer2_budget import parse_budget
from app.services.orchestrator import get_orchestrator
from app.utils import validate_record_id

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateProposalRequest(BaseModel):
    """제안서 생성 요청 (예산은 자유 입력 문자열 또는 숫자)"""
    client_ref: str = Field(..., min_length=1)
    project_type: str
    project_ref: Optional[str] = None
    budget: Optional[Union[str, float]] = None
    notes: str = ""


class TierRequest(BaseModel):
    tier_id: str


class AddOnRequest(BaseModel):
    feature_id: str


class MaintenanceRequest(BaseModel):
    """유지보수 플랜 선택 (plan_id=None이면 선택 해제)"""
    plan_id: Optional[str] = None


def _proposal_view(proposal) -> dict:
    return proposal.model_dump(mode="json")


@router.post("")
async def create_proposal(request: CreateProposalRequest) -> dict:
    """
    제안서를 생성합니다.
    예산이 주어지면 해석된 기준 금액에 맞는 티어가 추천됩니다.
    """
    budget = parse_budget(request.budget) if request.budget is not None else None
    proposal = await get_orchestrator().proposals.create(
        project_type=request.project_type,
        client_ref=request.client_ref,
        project_ref=request.project_ref,
        budget=budget,
        notes=request.notes,
    )
    return _proposal_view(proposal)


@router.get("/catalog/{project_type}")
async def get_catalog(project_type: str) -> dict:
    """프로젝트 유형별 티어, 추가 기능, 유지보수 플랜 목록."""
    catalog = get_orchestrator().calculator.catalog
    resolved = catalog.resolve_project_type(project_type)
    return {
        "project_type": resolved,
        "tiers": [tier.model_dump(mode="json") for tier in catalog.tiers_for(resolved)],
        "features": [feature.model_dump(mode="json") for feature in catalog.features_for(resolved)],
        "maintenance_plans": [plan.model_dump(mode="json") for plan in catalog.maintenance_plans()],
    }


@router.get("/{proposal_id}")
async def get_proposal(proposal_id: str) -> dict:
    validate_record_id(proposal_id)
    return _proposal_view(await get_orchestrator().proposals.get(proposal_id))


@router.get("/{proposal_id}/breakdown")
async def get_breakdown(proposal_id: str) -> dict:
    """가격 내역 (유지보수 플랜은 일회성 합계와 분리)."""
    validate_record_id(proposal_id)
    breakdown = await get_orchestrator().proposals.breakdown(proposal_id)
    return breakdown.model_dump(mode="json")


@router.get("/{proposal_id}/add-ons")
async def get_available_add_ons(proposal_id: str) -> dict:
    validate_record_id(proposal_id)
    orchestrator = get_orchestrator()
    proposal = await orchestrator.proposals.get(proposal_id)
    tier = orchestrator.calculator.catalog.get_tier(proposal.tier_id) if proposal.tier_id else None
    return {
        "proposal_id": proposal.id,
        "add_ons": [
            {
                "id": feature.id,
                "name": feature.name,
                "price": float(orchestrator.calculator.add_on_price(tier, feature)),
                "selected": feature.id in proposal.selected_features,
            }
            for feature in orchestrator.calculator.available_add_ons(proposal)
        ],
    }


# ==================== 선택 조작 ====================

@router.post("/{proposal_id}/tier")
async def select_tier(proposal_id: str, request: TierRequest) -> dict:
    validate_record_id(proposal_id)
    proposal = await get_orchestrator().proposals.select_tier(proposal_id, request.tier_id)
    return _proposal_view(proposal)


@router.post("/{proposal_id}/switch-tier")
async def switch_tier(proposal_id: str, request: TierRequest) -> dict:
    """티어 변경. 새 티어에 포함된 기능은 무료 처리되고, 적용 불가한 추가 기능은 제거됩니다."""
    validate_record_id(proposal_id)
    proposal = await get_orchestrator().proposals.switch_tier(proposal_id, request.tier_id)
    return _proposal_view(proposal)


@router.post("/{proposal_id}/add-ons")
async def toggle_add_on(proposal_id: str, request: AddOnRequest) -> dict:
    """추가 기능 토글 (티어 포함 기능은 변화 없음)."""
    validate_record_id(proposal_id)
    proposal = await get_orchestrator().proposals.toggle_add_on(proposal_id, request.feature_id)
    return _proposal_view(proposal)


@router.post("/{proposal_id}/maintenance")
async def select_maintenance(proposal_id: str, request: MaintenanceRequest) -> dict:
    validate_record_id(proposal_id)
    proposal = await get_orchestrator().proposals.select_maintenance_plan(
        proposal_id, request.plan_id
    )
    return _proposal_view(proposal)


# ==================== 상태 전이 ====================

@router.post("/{proposal_id}/submit")
async def submit_proposal(proposal_id: str) -> dict:
    validate_record_id(proposal_id)
    return _proposal_view(await get_orchestrator().proposals.submit(proposal_id))


@router.post("/{proposal_id}/accept")
async def accept_proposal(proposal_id: str) -> dict:
    validate_record_id(proposal_id)
    return _proposal_view(await get_orchestrator().proposals.accept(proposal_id))


@router.post("/{proposal_id}/reject")
async def reject_proposal(proposal_id: str) -> dict:
    validate_record_id(proposal_id)
    return _proposal_view(await get_orchestrator().proposals.reject(proposal_id))


@router.post("/{proposal_id}/convert")
async def convert_proposal(proposal_id: str) -> dict:
    """수락된 제안서를 인보이스로 전환합니다."""
    validate_record_id(proposal_id)
    invoice = await get_orchestrator().invoices.create_from_proposal(proposal_id)
    logger.info(f"[API] 제안서 전환 완료: {proposal_id} → {invoice.invoice_number}")
    return invoice.to_view()
