"""
API endpoint modules for InterviewReady
"""

from interviewready.api.endpoints import interview, report, metadata

__all__ = ["interview", "report", "metadata"]
