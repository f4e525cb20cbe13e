import json
from typing import Any, Dict, Optional
from datetime import datetime


def json_serializer(obj: Any) -> str:
    """JSON serializer for objects not serializable by default json code"""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Type {type(obj)} not serializable")


def safe_json_dumps(data: Dict) -> str:
    """Safely convert dict to JSON string"""
    return json.dumps(data, default=json_serializer, ensure_ascii=False)


def safe_trim(value: Optional[str]) -> str:
    """Trim a possibly-missing text value"""
    return (value or "").strip()


def or_none(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when blank (the store keeps NULL, not '')"""
    trimmed = safe_trim(value)
    return trimmed or None

