from plantscan.models.kv import Base, KeyValueEntry

__all__ = ["Base", "KeyValueEntry"]
