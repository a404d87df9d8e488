# import every model so SQLAlchemy registers it in Base.metadata

from bookstore.data.models.snapshot import SnapshotModel

__all__ = ["SnapshotModel"]
