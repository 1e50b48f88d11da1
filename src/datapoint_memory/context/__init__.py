"""
Read side: turning stored datapoint history into chat context.
"""

from datapoint_memory.context.assembler import ContextAssembler
from datapoint_memory.context.rag import RAGContextService

__all__ = [
    "ContextAssembler",
    "RAGContextService",
]
