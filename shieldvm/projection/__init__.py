from shieldvm.projection.materializer import RecordMaterializer, extract_primitive
from shieldvm.projection.projector import VisibilityProjector

__all__ = ["RecordMaterializer", "VisibilityProjector", "extract_primitive"]
