"""
Maps a raw classifier label onto a knowledge base entry.

The lookup is an ordered cascade of pure strategies. The first one that
returns an entry wins; if none does, a generic entry is synthesized.
"""
import logging
import re
from typing import Callable, Optional, Sequence, Tuple

from plantscan.constants import DISEASE_KEYWORDS, UNKNOWN_KEY
from plantscan.schemas.knowledge import KnowledgeEntry, Treatment, TreatmentSet
from plantscan.services.knowledge import KnowledgeBase

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[_\-\s]+")
# "bell pepper with bacterial spot" -> "bacterial spot"
_QUALIFIER = re.compile(r"^[^a-z]*(?:.*?\b(?:with|having)\s+)?")

Strategy = Callable[[str, str, KnowledgeBase], Optional[KnowledgeEntry]]


def normalize_label(label: str) -> str:
    """Lowercase, turn runs of '_', '-' and whitespace into one space, trim."""
    return _SEPARATORS.sub(" ", label.lower()).strip()


def strip_qualifier(normalized: str) -> str:
    return _QUALIFIER.sub("", normalized, count=1).strip()


def match_exact(normalized: str, raw: str, kb: KnowledgeBase) -> Optional[KnowledgeEntry]:
    return kb.get(normalized)


def match_raw(normalized: str, raw: str, kb: KnowledgeBase) -> Optional[KnowledgeEntry]:
    return kb.get(raw.lower())


def match_generic(normalized: str, raw: str, kb: KnowledgeBase) -> Optional[KnowledgeEntry]:
    generic = strip_qualifier(normalized)
    logger.debug(f"Trying generic lookup: {generic!r}")
    return kb.get(generic)


def match_keyword(normalized: str, raw: str, kb: KnowledgeBase) -> Optional[KnowledgeEntry]:
    for keyword in DISEASE_KEYWORDS:
        if keyword not in normalized:
            continue
        matching_key = next((key for key in kb.keys() if keyword in key), None)
        if matching_key:
            logger.info(f"Found partial match: {matching_key}")
            return kb.get(matching_key)
    return None


def match_unknown_entry(normalized: str, raw: str, kb: KnowledgeBase) -> Optional[KnowledgeEntry]:
    return kb.get(UNKNOWN_KEY)


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    match_exact,
    match_raw,
    match_generic,
    match_keyword,
    match_unknown_entry,
)


def synthesize_entry(normalized: str, detection_kind: str) -> KnowledgeEntry:
    """Generic entry for labels the knowledge base knows nothing about."""
    if "spot" in normalized:
        advice = "Spot diseases are often fungal or bacterial infections that can spread if not treated."
    else:
        advice = "Consider consulting with a local agricultural expert for proper identification and treatment."

    return KnowledgeEntry(
        scientific_name=f"Unknown {detection_kind}",
        severity="Medium",
        description=f"This appears to be a {detection_kind} affecting your plant. {advice}",
        symptoms=[
            f"Visible {detection_kind} symptoms detected",
            "May cause plant stress",
            "Could spread to other plants",
        ],
        treatments=TreatmentSet(
            organic=[
                Treatment(
                    name="Neem oil spray",
                    dosage="5-10 ml per liter of water",
                    frequency="Every 7-10 days",
                    safety="Safe for beneficial insects when applied in evening",
                ),
                Treatment(
                    name="Baking soda solution",
                    dosage="1 tsp per liter of water",
                    frequency="Every 5-7 days",
                    safety="Test on small area first",
                ),
            ],
            chemical=[
                Treatment(
                    name="Copper-based fungicide",
                    dosage="Follow manufacturer instructions",
                    frequency="As per label directions",
                    safety="Wear protective equipment, avoid spraying during bloom",
                ),
            ],
            preventive=[
                "Monitor plant regularly",
                "Maintain good air circulation",
                "Avoid overhead watering",
                "Remove affected plant parts",
                "Practice crop rotation",
                "Ensure proper plant spacing",
            ],
        ),
    )


class LabelResolver:
    def __init__(self, knowledge_base: KnowledgeBase, strategies: Sequence[Strategy] = DEFAULT_STRATEGIES):
        self.knowledge_base = knowledge_base
        self.strategies = tuple(strategies)

    def resolve(self, raw_label: str, detection_kind: str) -> Tuple[str, KnowledgeEntry]:
        normalized = normalize_label(raw_label)
        logger.info(f"Looking up in knowledge base: {normalized!r}")

        for strategy in self.strategies:
            entry = strategy(normalized, raw_label, self.knowledge_base)
            if entry is not None:
                logger.debug(f"Resolved {normalized!r} via {strategy.__name__}")
                return normalized, entry

        logger.info(f"No match found for {normalized!r}, using fallback")
        return normalized, synthesize_entry(normalized, detection_kind)
