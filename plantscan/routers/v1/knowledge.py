from fastapi import APIRouter, Depends, HTTPException
from typing import List, Literal

from plantscan.dependencies import get_knowledge_base
from plantscan.schemas.knowledge import KnowledgeEntry, NamedKnowledgeEntry
from plantscan.services.knowledge import KnowledgeBase

router = APIRouter()


@router.get("/knowledge", response_model=List[NamedKnowledgeEntry])
async def search_knowledge(
    q: str = "",
    category: Literal["all", "disease", "pest"] = "all",
    kb: KnowledgeBase = Depends(get_knowledge_base),
):
    """
    Browse the knowledge base by name / scientific name and category.
    """
    return kb.search(q, category)


@router.get("/knowledge/{name}", response_model=KnowledgeEntry)
async def get_knowledge_entry(name: str, kb: KnowledgeBase = Depends(get_knowledge_base)):
    entry = kb.get(name.lower())
    if entry is None:
        raise HTTPException(status_code=404, detail="Knowledge entry not found")
    return entry
