from typing import List, Optional, Sequence, Union

from .models import TopicMatchMode

def parse_topics(
    topics: Optional[Union[str, Sequence[str]]] = None,
    topic: Optional[str] = None,
) -> List[str]:
    """
    Topics from query parameters: `?topics=a,b`, `?topics=a&topics=b`, or a
    single `?topic=a` when `topics` is absent. Values are trimmed and empties dropped.
    """
    raw = topics if topics else topic
    if raw is None:
        return []
    values = [raw] if isinstance(raw, str) else list(raw)
    out: List[str] = []
    for v in values:
        for part in str(v).split(","):
            part = part.strip()
            if part and part not in out:
                out.append(part)
    return out

def parse_topic_mode(value: Optional[str]) -> TopicMatchMode:
    return "all" if (value or "").strip().lower() == "all" else "any"
