"""
API layer for InterviewReady

Contains FastAPI routers for:
- Interview session management
- Report preview, saving and history
- Reference metadata
- WebSocket real-time communication
"""

from interviewready.api.router import api_router

__all__ = ["api_router"]
