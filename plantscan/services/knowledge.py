import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from plantscan.constants import DISEASE_CATEGORY_KEYWORDS, UNKNOWN_KEY
from plantscan.schemas.knowledge import KnowledgeEntry, NamedKnowledgeEntry

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """
    Read-only mapping of normalized disease/pest name -> KnowledgeEntry.

    Built once (usually from the bundled JSON dataset) and passed to whoever
    needs it. Key order follows the dataset.
    """

    def __init__(self, entries: Optional[Mapping[str, Union[KnowledgeEntry, dict]]] = None):
        parsed: Dict[str, KnowledgeEntry] = {}
        for key, raw in (entries or {}).items():
            try:
                parsed[key] = raw if isinstance(raw, KnowledgeEntry) else KnowledgeEntry.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed knowledge entry '{key}': {e}")
        self._entries = MappingProxyType(parsed)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "KnowledgeBase":
        path = cls._resolve_path(str(path))
        try:
            if not os.path.exists(path):
                logger.warning(f"Knowledge base dataset not found at: {path}")
                return cls()

            with open(path, mode='r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                logger.error(f"Knowledge base dataset must be a JSON object: {path}")
                return cls()

            kb = cls(data)
            logger.info(f"Loaded {len(kb)} knowledge entries from {path}")
            return kb
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load knowledge base ({path}): {e}")
            return cls()

    @staticmethod
    def _resolve_path(path: str) -> str:
        if not os.path.exists(path):
            possible_path = os.path.join(os.getcwd(), path)
            if os.path.exists(possible_path):
                return possible_path
        return path

    @property
    def entries(self) -> Mapping[str, KnowledgeEntry]:
        return self._entries

    def get(self, key: str) -> Optional[KnowledgeEntry]:
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str = "", category: str = "all") -> List[NamedKnowledgeEntry]:
        """
        Filter entries for browsing.

        Category is 'all', 'disease' or 'pest'. Diseases are told apart from
        pests by keywords in the entry name.
        """
        query = (query or "").lower()
        results = []
        for key, entry in self._entries.items():
            if key == UNKNOWN_KEY:
                continue

            matches_search = query in key.lower() or query in entry.scientific_name.lower()
            if not matches_search:
                continue

            is_disease = any(term in key.lower() for term in DISEASE_CATEGORY_KEYWORDS)
            if category == "disease" and not is_disease:
                continue
            if category == "pest" and is_disease:
                continue

            results.append(NamedKnowledgeEntry(name=key, **entry.model_dump()))
        return results
