"""
InterviewReady - Adaptive Spoken Mock Interview Trainer

Runs short spoken mock interviews whose question difficulty adapts
to how well each answer scores, ending in a saved report.
"""

__version__ = "0.1.0"
__author__ = "InterviewReady Team"
