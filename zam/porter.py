import json
import yaml
from datetime import datetime
from typing import List, Dict, Any, Optional

from zam.models import Alias


def export_to_dict(aliases: List[Alias], tag_filter: Optional[str] = None) -> Dict[str, Any]:
    """Export aliases to a dictionary format"""
    if tag_filter:
        wanted = tag_filter.lower()
        aliases = [alias for alias in aliases if wanted in (tag.lower() for tag in alias.tags)]

    export_data = {
        "version": "1.0",
        "exported_at": datetime.now().isoformat(),
        "count": len(aliases),
        "aliases": [alias.to_dict() for alias in aliases],
    }

    if tag_filter:
        export_data["tag_filter"] = tag_filter

    return export_data


def dump(data: Dict[str, Any], format: str = "json") -> str:
    """Serialize export data as JSON or YAML text"""
    if format == "yaml":
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, default=str, ensure_ascii=False) + "\n"
