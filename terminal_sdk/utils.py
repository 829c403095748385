from typing import Any, Dict


def _safe_json_parse(response: Any) -> Any:
    """Safely parse JSON response, returning dict with raw text on failure."""
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        content_type = response.headers.get("Content-Type", "")
        data: Dict[str, Any] = {
            "_raw_response": response.text[:2000],
            "_parse_error": "Not valid JSON",
        }
        if content_type:
            data["_content_type"] = content_type
        return data
