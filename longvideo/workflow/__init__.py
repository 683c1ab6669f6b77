"""
Workflow Orchestration
======================

The long-video pipeline, stage by stage.

Components:
- ScenePlanner: request -> scenes
- ModelRouter: scene -> best model
- ClipScheduler: batched concurrent clip generation
- ContinuityAnalyzer: per-clip scoring and flagging
- RegenerationManager: bounded retries on alternate models
- LongVideoOrchestrator: main entry point
"""

from .events import CancellationToken, EventDispatcher, EventType, ProgressEvent
from .planner import ScenePlanner
from .router import ModelRouter
from .scheduler import ClipScheduler
from .continuity import ContinuityAnalyzer, ContinuityReport
from .regeneration import RegenerationManager, RegenerationReport
from .orchestrator import LongVideoOrchestrator

__all__ = [
    "CancellationToken",
    "EventDispatcher",
    "EventType",
    "ProgressEvent",
    "ScenePlanner",
    "ModelRouter",
    "ClipScheduler",
    "ContinuityAnalyzer",
    "ContinuityReport",
    "RegenerationManager",
    "RegenerationReport",
    "LongVideoOrchestrator",
]
