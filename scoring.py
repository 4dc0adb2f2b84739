# scoring.py
import json
import logging
import textwrap
from typing import List

from errors import BackendUnavailable, NoOfferConfigured, NoUnscoredLeads
from llm import BlocksResponse, TextResponse
from models import Classification, Intent, Lead, Offer

logger = logging.getLogger(__name__)

DECISION_MAKER_KEYWORDS = ("head", "chief", "founder")
INFLUENCER_KEYWORDS = ("manager", "lead", "executive")
AI_POINTS = {Intent.HIGH: 50, Intent.MEDIUM: 30, Intent.LOW: 10}
INTENT_LABELS = tuple(intent.value for intent in Intent)

FALLBACK_CLASSIFICATION = Classification(
    intent=Intent.MEDIUM, reasoning="Not classified.", ai_points=30, defaulted=True
)


# --- Rule layer (max 50) ---
def role_points(role) -> int:
    role = (role or "").lower()
    if any(k in role for k in DECISION_MAKER_KEYWORDS):
        return 20
    if any(k in role for k in INFLUENCER_KEYWORDS):
        return 10
    return 0


def industry_points(industry, ideal_use_cases: List[str]) -> int:
    industry = (industry or "").lower()
    ideal = [use_case.lower() for use_case in ideal_use_cases]
    if any(use_case in industry for use_case in ideal):
        return 20
    if any(word in use_case for use_case in ideal for word in industry.split()):
        return 10
    return 0


def completeness_points(lead: Lead) -> int:
    fields = [lead.name, lead.role, lead.company, lead.industry, lead.location, lead.linkedin_bio]
    return 10 if all(fields) else 0


def score_rule(lead: Lead, offer: Offer) -> int:
    return role_points(lead.role) + industry_points(lead.industry, offer.ideal_use_cases) + completeness_points(lead)


# --- AI layer (max 50) ---
PROMPT_TEMPLATE = textwrap.dedent("""
    You are a sales assistant. Given the product details and lead profile,
    classify the lead's buying intent as High, Medium, or Low and explain why in 1-2 sentences.

    Offer:
    Name: {offer_name}
    Value Props: {offer_props}
    Ideal Use Cases: {offer_uses}

    Lead:
    Name: {lead_name}
    Role: {lead_role}
    Company: {lead_company}
    Industry: {lead_industry}
    Location: {lead_location}
    Bio: {lead_bio}

    Respond ONLY in JSON format:
    {{
      "intent": "High" | "Medium" | "Low",
      "reasoning": "short explanation"
    }}
""").strip()


def build_prompt(lead: Lead, offer: Offer) -> str:
    return PROMPT_TEMPLATE.format(
        offer_name=offer.name,
        offer_props=", ".join(offer.value_props),
        offer_uses=", ".join(offer.ideal_use_cases),
        lead_name=lead.name or "",
        lead_role=lead.role or "",
        lead_company=lead.company or "",
        lead_industry=lead.industry or "",
        lead_location=lead.location or "",
        lead_bio=lead.linkedin_bio or "",
    )


def extract_text(response) -> str:
    """Flatten a backend response into one string."""
    if isinstance(response, TextResponse):
        return response.text
    if isinstance(response, str):
        return response
    if isinstance(response, BlocksResponse):
        parts = []
        for block in response.blocks:
            text = block.get("text") if isinstance(block, dict) else getattr(block, "text", None)
            parts.append(text if text else str(block))
        return " ".join(parts)
    return str(response)


async def classify(lead: Lead, offer: Offer, backend) -> str:
    response = await backend.invoke(build_prompt(lead, offer))
    return extract_text(response)


def parse_classification(raw_text: str) -> Classification:
    """Read the model's JSON verdict, or fall back to Medium/30 if it is unusable."""
    try:
        cleaned = raw_text.replace("```json", "").replace("```", "").strip()
        data = json.loads(cleaned)
        # null values count as missing
        raw_intent = data.get("intent") or Intent.MEDIUM.value
        reasoning = data.get("reasoning") or FALLBACK_CLASSIFICATION.reasoning
        # points follow the exact label; anything else scores as Medium
        intent = Intent(raw_intent) if raw_intent in INTENT_LABELS else Intent.MEDIUM
        return Classification(intent=intent, reasoning=str(reasoning), ai_points=AI_POINTS[intent])
    except Exception:
        logger.warning("AI response parsing failed: %.200r", raw_text)
        return FALLBACK_CLASSIFICATION


def combine(rule_points: int, ai_points: int) -> int:
    return rule_points + ai_points


# --- full pipeline ---
async def score_lead(lead: Lead, offer: Offer, backend) -> Classification:
    try:
        raw_text = await classify(lead, offer, backend)
    except BackendUnavailable as e:
        logger.warning("Classification failed for lead %s, using fallback: %s", lead.id, e)
        return FALLBACK_CLASSIFICATION
    return parse_classification(raw_text)


async def run_scoring(store, backend) -> List[Lead]:
    """Score every unscored lead against the latest offer, one lead at a time."""
    offer = store.latest_offer()
    if offer is None:
        raise NoOfferConfigured()

    leads = store.unscored_leads()
    if not leads:
        raise NoUnscoredLeads()

    logger.info("Scoring %d lead(s) against offer %r with %s", len(leads), offer.name, getattr(backend, "name", backend))
    results = []
    for lead in leads:
        rule_points = score_rule(lead, offer)
        verdict = await score_lead(lead, offer, backend)
        final_score = combine(rule_points, verdict.ai_points)
        updated = store.update_lead_score(lead.id, verdict.intent, final_score, verdict.reasoning)
        results.append(updated)
    return results
