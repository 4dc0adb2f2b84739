# storage.py
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select

from db import LeadRecord, OfferRecord, make_session_factory
from models import Intent, Lead, Offer

logger = logging.getLogger(__name__)

LEAD_FIELDS = ("name", "role", "company", "industry", "location", "linkedin_bio")


def normalize_lead_row(row: Dict[str, str]) -> Dict[str, str]:
    """Trim every lead field; accepts 'linkedinBio' for 'linkedin_bio'."""
    data = {f: str(row.get(f) or "").strip() for f in LEAD_FIELDS}
    if not data["linkedin_bio"]:
        data["linkedin_bio"] = str(row.get("linkedinBio") or "").strip()
    return data


def lead_identity(data) -> tuple:
    return (data["name"], data["company"], data["linkedin_bio"])


class Store:
    """Offers and leads persisted through SQLAlchemy."""

    def __init__(self, session_factory):
        self._session = session_factory

    @classmethod
    def from_url(cls, database_url: str) -> "Store":
        return cls(make_session_factory(database_url))

    # --- offers ---
    def create_offer(self, name: str, value_props: List[str], ideal_use_cases: List[str]) -> Offer:
        with self._session() as s:
            rec = OfferRecord(name=name, value_props=list(value_props), ideal_use_cases=list(ideal_use_cases))
            s.add(rec)
            s.commit()
            return Offer.model_validate(rec)

    def latest_offer(self) -> Optional[Offer]:
        with self._session() as s:
            q = select(OfferRecord).order_by(OfferRecord.created_at.desc(), OfferRecord.id.desc()).limit(1)
            rec = s.scalars(q).first()
            return Offer.model_validate(rec) if rec else None

    # --- leads ---
    def bulk_insert_leads(self, rows: Iterable[Dict[str, str]]) -> int:
        """Insert rows, skipping any lead already stored (or repeated in the batch)."""
        data = [normalize_lead_row(r) for r in rows]
        if not data:
            return 0
        with self._session() as s:
            names = {d["name"] for d in data}
            existing = s.execute(
                select(LeadRecord.name, LeadRecord.company, LeadRecord.linkedin_bio).where(LeadRecord.name.in_(names))
            )
            seen = {tuple(r) for r in existing}
            fresh = []
            for d in data:
                key = lead_identity(d)
                if key in seen:
                    continue
                seen.add(key)
                fresh.append(LeadRecord(**d))
            s.add_all(fresh)
            s.commit()
        skipped = len(data) - len(fresh)
        if skipped:
            logger.info("Skipped %d duplicate lead(s)", skipped)
        return len(fresh)

    def find_leads(
        self,
        intent: Optional[Intent] = None,
        min_score: Optional[float] = None,
        limit: Optional[int] = None,
        unscored: bool = False,
        newest_first: bool = True,
    ) -> List[Lead]:
        q = select(LeadRecord)
        if unscored:
            q = q.where(LeadRecord.intent.is_(None))
        if intent is not None:
            q = q.where(LeadRecord.intent == Intent(intent).value)
        if min_score is not None:
            q = q.where(LeadRecord.score >= min_score)
        if newest_first:
            q = q.order_by(LeadRecord.created_at.desc(), LeadRecord.id.desc())
        else:
            q = q.order_by(LeadRecord.created_at.asc(), LeadRecord.id.asc())
        if limit:
            q = q.limit(limit)
        with self._session() as s:
            return [Lead.model_validate(rec) for rec in s.scalars(q)]

    def unscored_leads(self) -> List[Lead]:
        return self.find_leads(unscored=True, newest_first=False)

    def all_leads(self) -> List[Lead]:
        return self.find_leads()

    def update_lead_score(self, lead_id: int, intent: Intent, score: int, reasoning: str) -> Lead:
        with self._session() as s:
            rec = s.get(LeadRecord, lead_id)
            if rec is None:
                raise LookupError(f"Lead {lead_id} not found")
            rec.intent = Intent(intent).value
            rec.score = score
            rec.reasoning = reasoning
            s.commit()
            return Lead.model_validate(rec)
