from fastapi import Request

from plantscan.services.knowledge import KnowledgeBase
from plantscan.services.pipeline import DetectionPipeline
from plantscan.services.storage import DetectionStore


def get_pipeline(request: Request) -> DetectionPipeline:
    return request.app.state.pipeline


def get_store(request: Request) -> DetectionStore:
    return request.app.state.store


def get_knowledge_base(request: Request) -> KnowledgeBase:
    return request.app.state.knowledge_base


def get_upload_dir(request: Request):
    return request.app.state.upload_dir
