from .factory import rollups, rollups_from_store

__all__ = ["rollups", "rollups_from_store"]
