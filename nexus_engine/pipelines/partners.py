"""
Partner sourcing for the architect stage.

The architect stage asks a PartnerDirectory for candidates; it never
builds partner lists itself. IllustrativePartnerDirectory returns the six
canonical partner types with commitments derived from the diagnosis, and
StaticPartnerDirectory serves a caller-supplied list.
"""

from typing import List, Optional, Protocol, Sequence

from nexus_engine.models.inputs import Partner
from nexus_engine.models.pipeline import DiagnosisResult
from nexus_engine.scoring.utils import clamp

PARTNER_CAPABILITIES = {
    "Anchor": ["Manufacturing", "Supply Chain", "Operations"],
    "Infrastructure": ["Construction", "Engineering", "Logistics"],
    "Innovation": ["Technology", "R&D", "Education"],
    "Capital": ["Investment", "Finance", "Banking"],
    "Government": ["Policy", "Regulation", "Planning"],
    "Community": ["Community", "Sustainability", "Culture"],
}

# RCI component that most reflects each partner type's local footing
_TYPE_DRIVER = {
    "Anchor": "market_access",
    "Infrastructure": "infrastructure",
    "Innovation": "innovation",
    "Capital": "economic",
    "Government": "institutions",
    "Community": "human_capital",
}


class PartnerDirectory(Protocol):
    async def find_partners(
        self, region: str, objective: str, diagnosis: Optional[DiagnosisResult]
    ) -> List[Partner]:
        ...


class StaticPartnerDirectory:
    """Serve a fixed partner list regardless of region."""

    def __init__(self, partners: Sequence[Partner]):
        self.partners = list(partners)

    async def find_partners(self, region, objective, diagnosis) -> List[Partner]:
        return [p.model_copy() for p in self.partners]


class IllustrativePartnerDirectory:
    """
    Six canonical partner archetypes for a region.

    Commitment is 60 + 0.4 × the RCI component driving that type;
    reputation is 60 + 0.4 × the RCI score. Without a diagnosis both
    default to 70.
    """

    async def find_partners(
        self, region: str, objective: str, diagnosis: Optional[DiagnosisResult]
    ) -> List[Partner]:
        region_name = region or "Target Region"
        components = diagnosis.rci.components if diagnosis else None

        partners = []
        for index, (partner_type, capabilities) in enumerate(PARTNER_CAPABILITIES.items()):
            if components is not None:
                driver = getattr(components, _TYPE_DRIVER[partner_type])
                commitment = clamp(60 + 0.4 * driver)
                reputation = clamp(60 + 0.4 * diagnosis.rci.score)
            else:
                commitment = reputation = 70.0

            partners.append(
                Partner(
                    name=f"{region_name} {partner_type} Partner {index + 1}",
                    type=partner_type,
                    capabilities=list(capabilities),
                    commitment=round(commitment, 2),
                    reputation=round(reputation, 2),
                    rationale=(
                        f"Strategic {partner_type.lower()} partner providing "
                        f"{', '.join(capabilities)} capabilities for {region_name} development"
                    ),
                )
            )
        return partners
