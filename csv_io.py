# csv_io.py
import io
import logging
from typing import Dict, List, Sequence

import pandas as pd

from errors import InvalidCSV
from models import Lead

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["name", "role", "company", "industry", "location", "linkedin_bio"]
EXPORT_COLUMNS = ["id"] + REQUIRED_COLUMNS + ["intent", "score", "reasoning", "created_at"]
CHUNK_ROWS = 500


def _normalize_columns(columns) -> List[str]:
    cols = [str(c).strip() for c in columns]
    return ["linkedin_bio" if c == "linkedinBio" else c.lower() for c in cols]


def parse_leads_csv(source, chunksize: int = CHUNK_ROWS) -> List[Dict[str, str]]:
    """Parse a CSV path or binary stream into string-keyed rows.

    The file is read in chunks so large uploads are never fully loaded as one
    DataFrame. Every cell comes back as a string; empty cells are "".
    """
    try:
        rows: List[Dict[str, str]] = []
        with pd.read_csv(source, dtype=str, keep_default_na=False, chunksize=chunksize) as reader:
            for chunk in reader:
                chunk.columns = _normalize_columns(chunk.columns)
                missing = [c for c in REQUIRED_COLUMNS if c not in chunk.columns]
                if missing:
                    raise InvalidCSV(f"CSV missing required headers: {', '.join(missing)}")
                rows.extend(chunk.fillna("").to_dict(orient="records"))
    except pd.errors.EmptyDataError:
        raise InvalidCSV("CSV is empty or invalid")
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidCSV(f"Could not parse CSV: {e}")

    if not rows:
        raise InvalidCSV("CSV is empty or invalid")
    logger.debug("Parsed %d CSV rows", len(rows))
    return rows


def export_leads_csv(leads: Sequence[Lead]) -> str:
    records = [lead.model_dump(mode="json") for lead in leads]
    df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
    df["score"] = df["score"].astype("Int64")
    stream = io.StringIO()
    df.to_csv(stream, index=False)
    return stream.getvalue()
