"""
JSON export of the AI model input, as downloaded from the dashboard.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple
import json
import logging

from app.schemas.recommendation import RecommendationRequest

logger = logging.getLogger(__name__)


def export_filename(now: datetime, prefix: str = "ai-model-input") -> str:
    return f"{prefix}-{now.date().isoformat()}.json"


def export_request(request: RecommendationRequest, now: datetime = None) -> Tuple[str, str]:
    """
    Serialize a request for download.

    Returns:
        (filename, pretty-printed JSON document)
    """
    now = now or datetime.now(timezone.utc)
    document = request.model_dump(mode="json", by_alias=True)
    document["exportedAt"] = now.isoformat()
    return export_filename(now), json.dumps(document, indent=2, ensure_ascii=False)


def parse_exported_request(text: str) -> RecommendationRequest:
    """Load a previously exported request; the export timestamp is dropped."""
    data = json.loads(text)
    data.pop("exportedAt", None)
    return RecommendationRequest.model_validate(data)


def write_export(request: RecommendationRequest, directory: Path, now: datetime = None) -> Path:
    filename, content = export_request(request, now)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(content, encoding="utf-8")
    logger.info(f"Exported AI model input for {len(request.trains)} trains to {path}")
    return path
