"""Pipeline execution: processor, result and orchestrator."""

from pdfclust.pipeline.processor import PdfClusteringProcessor
from pdfclust.pipeline.result import ClusteringResult
from pdfclust.pipeline.orchestrator import PipelineOrchestrator

__all__ = ['PdfClusteringProcessor', 'ClusteringResult', 'PipelineOrchestrator']
