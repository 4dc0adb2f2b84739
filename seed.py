# seed.py
"""Seed the database with demo offers and pre-scored leads.

    python seed.py
"""
import logging

from config import load_settings
from storage import Store, lead_identity, normalize_lead_row

logger = logging.getLogger("seed")

OFFERS = [
    {
        "name": "AI Outreach Automation",
        "value_props": ["24/7 outreach", "6x more meetings"],
        "ideal_use_cases": ["B2B SaaS mid-market"],
    },
    {
        "name": "Lead Scoring Optimizer",
        "value_props": ["Intent-based ranking", "Faster conversions"],
        "ideal_use_cases": ["Growth-stage startups", "B2B SaaS sales teams"],
    },
]

LEADS = [
    {
        "name": "Ava Patel", "role": "Head of Growth", "company": "FlowMetrics", "industry": "B2B SaaS",
        "location": "New York", "linkedin_bio": "Experienced growth leader scaling mid-market SaaS products.",
        "intent": "High", "score": 90, "reasoning": "Decision-maker in a SaaS mid-market firm matching ICP.",
    },
    {
        "name": "Rahul Mehta", "role": "Marketing Executive", "company": "AdSpark", "industry": "Advertising",
        "location": "Delhi", "linkedin_bio": "Focused on digital campaigns for consumer brands.",
        "intent": "Medium", "score": 65, "reasoning": "Influencer role; industry partially aligned with offer use cases.",
    },
    {
        "name": "Sophia Zhang", "role": "CTO", "company": "DataLytix", "industry": "B2B SaaS",
        "location": "San Francisco", "linkedin_bio": "Driving AI adoption for SaaS automation tools.",
        "intent": "High", "score": 95, "reasoning": "CTO and strong ICP match; clear technical alignment with offer.",
    },
    {
        "name": "Lucas Silva", "role": "Sales Associate", "company": "CloudEdge", "industry": "Cloud Computing",
        "location": "São Paulo", "linkedin_bio": "Helps SMBs adopt scalable cloud solutions.",
        "intent": "Low", "score": 40, "reasoning": "Entry-level role; not a direct decision-maker despite tech overlap.",
    },
    {
        "name": "Emily Carter", "role": "Founder", "company": "GreenPulse", "industry": "CleanTech",
        "location": "London", "linkedin_bio": "Building sustainable tech ventures in energy efficiency.",
        "intent": "Medium", "score": 70, "reasoning": "Decision-maker but industry slightly outside primary ICP.",
    },
]


def seed(store: Store) -> None:
    for offer in OFFERS:
        store.create_offer(**offer)
    logger.info("Seeded %d offers.", len(OFFERS))

    inserted = store.bulk_insert_leads(LEADS)
    # bulk insert only writes profile fields; apply the demo scores on top
    demos = {lead_identity(normalize_lead_row(lead)): lead for lead in LEADS}
    for lead in store.find_leads(unscored=True):
        demo = demos.get(lead_identity(lead.model_dump()))
        if demo:
            store.update_lead_score(lead.id, demo["intent"], demo["score"], demo["reasoning"])
    logger.info("Seeded %d leads.", inserted)


if __name__ == "__main__":
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    seed(Store.from_url(settings.database_url))
