"""
제안서 가격 계산기(Proposal Pricing Calculator) 모듈입니다.

주입된 PricingCatalog 위에서 동작하는 무상태 계산기입니다.
모든 조작은 입력 ProposalRequest를 바꾸지 않고 새 ProposalRequest를 반환합니다.

가격 규칙:
    computed_total = tier.base_price + Σ price(addon)   (addon ∉ tier.included_features)

- 티어에 포함된 기능은 추가 비용 0이며 절대 중복 계산하지 않습니다.
- 유지보수 플랜의 월 요금은 별도 필드에만 기록되고 일회성 합계에 더해지지 않습니다.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.exceptions import InputValidationError, InvalidTransitionError
from app.models import (
    BudgetRange,
    FeatureCatalogEntry,
    PriceBreakdown,
    PriceLine,
    ProposalRequest,
    ProposalStatus,
    TierDefinition,
    quantize_money,
)

from .catalog import PricingCatalog

logger = logging.getLogger(__name__)


class ProposalCalculator:
    """
    티어 선택, 추가 기능 토글, 유지보수 플랜 선택을 계산하는 순수 계산기.

    사용 예:
        calculator = ProposalCalculator(get_pricing_catalog())
        proposal = calculator.start_proposal("business-site", client_ref="client-1")
        proposal = calculator.toggle_add_on(proposal, "booking")
    """

    def __init__(self, catalog: PricingCatalog):
        self.catalog = catalog

    # ==================== 조회 ====================

    def recommend_tier(
        self, project_type: str, baseline: Optional[Decimal] = None
    ) -> TierDefinition:
        """
        예산 기준 금액에 맞는 티어를 추천합니다.
        기준 금액을 포함하는 가격 밴드가 없으면 가장 가까운 밴드를, 기준 금액이 없으면 중간 티어를 고릅니다.
        """
        tiers = self.catalog.tiers_for(project_type)
        if not tiers:
            raise InputValidationError(
                f"티어가 없는 프로젝트 유형입니다: {project_type}",
                details={"project_type": project_type},
            )
        if baseline is None:
            return tiers[len(tiers) // 2]

        for tier in tiers:
            if tier.contains(baseline):
                return tier

        def distance(tier: TierDefinition) -> Decimal:
            if baseline < tier.price_min:
                return tier.price_min - baseline
            return baseline - tier.price_max

        return min(tiers, key=distance)

    def add_on_price(self, tier: TierDefinition, feature: FeatureCatalogEntry) -> Decimal:
        """추가 기능 가격. 비율 가격은 티어 기본가 기준으로 계산합니다."""
        if feature.percent_of_base is not None:
            return quantize_money(tier.base_price * feature.percent_of_base / 100)
        return quantize_money(feature.price)

    def available_add_ons(self, proposal: ProposalRequest) -> list[FeatureCatalogEntry]:
        """현재 티어의 프로젝트 유형에 적용 가능한 추가 기능 (포함 기능 제외)."""
        if proposal.tier_id is None:
            return []
        tier = self.catalog.get_tier(proposal.tier_id)
        return [
            feature
            for feature in self.catalog.features_for(tier.project_type)
            if feature.id not in tier.included_features
            and (feature.price > 0 or feature.percent_of_base)
        ]

    def compute_total(self, proposal: ProposalRequest) -> Decimal:
        if proposal.tier_id is None:
            return Decimal("0")
        tier = self.catalog.get_tier(proposal.tier_id)
        total = tier.base_price
        for feature_id in sorted(proposal.selected_features - tier.included_features):
            feature = self.catalog.feature(tier.project_type, feature_id)
            if feature is not None:
                total += self.add_on_price(tier, feature)
        return quantize_money(total)

    def breakdown(self, proposal: ProposalRequest) -> PriceBreakdown:
        """가격 내역 (티어 한 줄 + 추가 기능 줄, 유지보수 플랜은 별도 표시)."""
        if proposal.tier_id is None:
            raise InputValidationError(
                "티어가 선택되지 않은 제안서입니다", details={"proposal_id": proposal.id}
            )
        tier = self.catalog.get_tier(proposal.tier_id)

        add_on_lines = [
            PriceLine(
                id=feature.id,
                description=feature.name,
                amount=self.add_on_price(tier, feature),
            )
            for feature in self.catalog.features_for(tier.project_type)
            if feature.id in proposal.add_ons
        ]

        maintenance_plan = None
        if proposal.maintenance_plan_id:
            maintenance_plan = self.catalog.get_maintenance_plan(proposal.maintenance_plan_id)

        return PriceBreakdown(
            proposal_id=proposal.id,
            tier_line=PriceLine(
                id=tier.id,
                description=f"{tier.name} Package",
                amount=tier.base_price,
            ),
            add_on_lines=add_on_lines,
            included_features=sorted(tier.included_features),
            maintenance_plan=maintenance_plan,
            one_time_total=self.compute_total(proposal),
        )

    # ==================== 선택 조작 (draft 상태에서만) ====================

    def _require_status(self, proposal: ProposalRequest, action: str, *statuses: ProposalStatus):
        if proposal.status not in statuses:
            raise InvalidTransitionError(proposal.status.value, action)

    def _updated(self, proposal: ProposalRequest, **changes) -> ProposalRequest:
        updated = proposal.model_copy(update={**changes, "updated_at": datetime.now()})
        return updated.model_copy(update={"computed_total": self.compute_total(updated)})

    def start_proposal(
        self,
        project_type: str,
        client_ref: str,
        project_ref: Optional[str] = None,
        budget: Optional[BudgetRange] = None,
        notes: str = "",
    ) -> ProposalRequest:
        """예산에 맞는 추천 티어가 선택된 draft 제안서를 만듭니다."""
        resolved = self.catalog.resolve_project_type(project_type)
        baseline = budget.baseline_amount if budget is not None else None
        tier = self.recommend_tier(resolved, baseline)

        proposal = ProposalRequest(
            client_ref=client_ref,
            project_ref=project_ref,
            project_type=resolved,
            budget=budget,
            notes=notes,
        )
        logger.info(f"[ProposalCalculator] 제안서 생성: {proposal.id} ({resolved}, 추천 티어 {tier.id})")
        return self.select_tier(proposal, tier.id)

    def select_tier(self, proposal: ProposalRequest, tier_id: str) -> ProposalRequest:
        """
        티어를 선택합니다. 포함 기능이 추가 비용 없이 선택 목록에 채워집니다.
        이미 티어가 선택되어 있으면 switch_tier와 같습니다.
        """
        self._require_status(proposal, "select_tier", ProposalStatus.DRAFT)
        if proposal.tier_id is not None:
            return self.switch_tier(proposal, tier_id)

        tier = self.catalog.get_tier(tier_id)
        return self._updated(
            proposal,
            tier_id=tier.id,
            project_type=tier.project_type,
            included_features=tier.included_features,
            selected_features=tier.included_features,
        )

    def switch_tier(self, proposal: ProposalRequest, tier_id: str) -> ProposalRequest:
        """
        티어를 바꿉니다. 포함 기능을 다시 채우고,
        새 티어에서 유효하지 않은 추가 기능은 선택에서 제거합니다.
        """
        self._require_status(proposal, "switch_tier", ProposalStatus.DRAFT)
        tier = self.catalog.get_tier(tier_id)

        kept = {
            feature_id
            for feature_id in proposal.add_ons
            if self.catalog.feature(tier.project_type, feature_id) is not None
        }
        dropped = proposal.add_ons - kept
        if dropped:
            logger.info(
                f"[ProposalCalculator] {proposal.id}: 티어 변경으로 추가 기능 제거 {sorted(dropped)}"
            )

        return self._updated(
            proposal,
            tier_id=tier.id,
            project_type=tier.project_type,
            included_features=tier.included_features,
            selected_features=frozenset(tier.included_features | kept),
        )

    def toggle_add_on(self, proposal: ProposalRequest, feature_id: str) -> ProposalRequest:
        """
        추가 기능을 선택/해제합니다.
        현재 티어에 포함된 기능은 아무 변화가 없습니다 (중복 계산 방지).
        """
        self._require_status(proposal, "toggle_add_on", ProposalStatus.DRAFT)
        if proposal.tier_id is None:
            raise InputValidationError(
                "티어를 먼저 선택해야 합니다", details={"proposal_id": proposal.id}
            )
        tier = self.catalog.get_tier(proposal.tier_id)

        if feature_id in tier.included_features:
            return proposal

        if self.catalog.feature(tier.project_type, feature_id) is None:
            raise InputValidationError(
                f"이 티어에 적용할 수 없는 기능입니다: {feature_id}",
                details={"tier_id": tier.id, "feature_id": feature_id},
            )

        if feature_id in proposal.selected_features:
            selected = proposal.selected_features - {feature_id}
        else:
            selected = proposal.selected_features | {feature_id}
        return self._updated(proposal, selected_features=frozenset(selected))

    def select_maintenance_plan(
        self, proposal: ProposalRequest, plan_id: Optional[str]
    ) -> ProposalRequest:
        """유지보수 플랜 선택/해제. 월 요금은 일회성 합계와 분리됩니다."""
        self._require_status(proposal, "select_maintenance_plan", ProposalStatus.DRAFT)
        if plan_id is None:
            return self._updated(
                proposal, maintenance_plan_id=None, maintenance_monthly_price=Decimal("0")
            )
        plan = self.catalog.get_maintenance_plan(plan_id)
        return self._updated(
            proposal,
            maintenance_plan_id=plan.id,
            maintenance_monthly_price=plan.monthly_price,
        )

    # ==================== 상태 전이 ====================

    def submit(self, proposal: ProposalRequest) -> ProposalRequest:
        self._require_status(proposal, "submit", ProposalStatus.DRAFT)
        if proposal.tier_id is None:
            raise InputValidationError(
                "티어가 선택되지 않은 제안서는 제출할 수 없습니다",
                details={"proposal_id": proposal.id},
            )
        return self._updated(proposal, status=ProposalStatus.SUBMITTED)

    def accept(self, proposal: ProposalRequest) -> ProposalRequest:
        self._require_status(proposal, "accept", ProposalStatus.SUBMITTED)
        return self._updated(proposal, status=ProposalStatus.ACCEPTED)

    def reject(self, proposal: ProposalRequest) -> ProposalRequest:
        self._require_status(proposal, "reject", ProposalStatus.SUBMITTED)
        return self._updated(proposal, status=ProposalStatus.REJECTED)

    def mark_converted(self, proposal: ProposalRequest, invoice_id: str) -> ProposalRequest:
        """수락된 제안서만 인보이스로 전환할 수 있습니다."""
        self._require_status(proposal, "convert", ProposalStatus.ACCEPTED)
        return self._updated(proposal, status=ProposalStatus.CONVERTED, invoice_id=invoice_id)

    def release_conversion(self, proposal: ProposalRequest, invoice_id: str) -> ProposalRequest:
        """인보이스 생성에 실패한 전환을 되돌립니다 (같은 invoice_id로 선점한 경우만)."""
        self._require_status(proposal, "release", ProposalStatus.CONVERTED)
        if proposal.invoice_id != invoice_id:
            raise InvalidTransitionError(
                proposal.status.value,
                "release",
                details={"invoice_id": proposal.invoice_id, "requested": invoice_id},
            )
        return self._updated(proposal, status=ProposalStatus.ACCEPTED, invoice_id=None)
