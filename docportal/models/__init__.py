"""
ORM models.

Importing this package registers every table on `Base.metadata`, which is
what Alembic and the test schema setup read.
"""

from docportal.models.base import Base
from docportal.models.tenant import Tenant
from docportal.models.document import Document
from docportal.models.analysis_version import AnalysisVersion
from docportal.models.status_event import DocumentStatusEvent
from docportal.models.embedding import DocumentEmbedding

__all__ = [
    "Base",
    "Tenant",
    "Document",
    "AnalysisVersion",
    "DocumentStatusEvent",
    "DocumentEmbedding",
]
