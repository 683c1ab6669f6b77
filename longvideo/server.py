"""
HTTP API
========

FastAPI server for starting, inspecting and cancelling long-video runs.

Usage:
    longvideo-server --port 8000
    uvicorn longvideo.server:create_app --factory --port 8000
"""

import argparse
import logging
import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any

from fastapi import FastAPI, BackgroundTasks, HTTPException
from pydantic import BaseModel, Field

from .core.config import Config
from .core.exceptions import ValidationError
from .production.models import LongVideoRequest
from .workflow.events import CancellationToken, EventType, ProgressEvent
from .workflow.orchestrator import LongVideoOrchestrator

logger = logging.getLogger(__name__)


class VideoRequest(BaseModel):
    """Request model for a long-video run."""
    title: str
    description: str = ""
    total_duration: float = Field(30, gt=0)
    style: str = "cinematic"
    aspect_ratio: str = "16:9"
    target_quality: str = "1080p"
    script: Optional[str] = None
    voiceover_style: Optional[str] = None
    music_genre: Optional[str] = None
    brand_colors: List[str] = Field(default_factory=list)

    def to_request(self) -> LongVideoRequest:
        try:
            return LongVideoRequest(**self.model_dump())
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.to_dict())


def create_app(
    orchestrator: Optional[LongVideoOrchestrator] = None,
    config: Optional[Config] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        orchestrator: Orchestrator to run jobs on (built from config if omitted)
        config: Configuration used when building the orchestrator

    Returns:
        FastAPI application with its own in-memory job table
    """
    app = FastAPI(
        title="Long Video API",
        description="REST API for long-form AI video generation",
        version="0.1.0",
    )

    if orchestrator is None:
        orchestrator = LongVideoOrchestrator(config=config or Config.load())

    jobs: Dict[str, Dict[str, Any]] = {}
    tokens: Dict[str, CancellationToken] = {}

    def track_steps(event: ProgressEvent) -> None:
        job = jobs.get(event.payload.get("run"))
        if job is None:
            return
        if event.event_type == EventType.STEP_UPDATED:
            step = {key: event.payload[key] for key in ("step", "status", "progress", "details")}
            for i, existing in enumerate(job["steps"]):
                if existing["step"] == step["step"]:
                    job["steps"][i] = step
                    break
            else:
                job["steps"].append(step)
        elif event.event_type == EventType.BATCH_STARTED:
            job["batch"] = f"{event.payload['batch']}/{event.payload['batch_count']}"

    orchestrator.add_listener(track_steps)

    app.state.orchestrator = orchestrator
    app.state.jobs = jobs

    async def run_job(job_id: str, request: LongVideoRequest) -> None:
        """Background task for one run."""
        jobs[job_id]["status"] = "processing"
        result = await orchestrator.generate_long_video(request, cancel_token=tokens[job_id])

        if tokens[job_id].cancelled:
            status = "cancelled"
        else:
            status = "completed" if result.success else "failed"

        jobs[job_id].update({
            "status": status,
            "result": result.to_dict(),
            "video_url": result.video_url,
            "error": result.error,
            "completed_at": datetime.now().isoformat(),
        })
        tokens.pop(job_id, None)

    @app.on_event("shutdown")
    async def shutdown():
        """Cleanup on shutdown."""
        await orchestrator.close()

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "backends": sorted(orchestrator.backends),
            "active_runs": orchestrator.active_runs,
        }

    @app.get("/models")
    async def list_models():
        """List model capabilities."""
        return {
            "models": [
                capabilities.to_dict()
                for capabilities in orchestrator.get_model_capabilities().values()
            ]
        }

    @app.post("/estimate")
    async def estimate(request: VideoRequest):
        """Estimate the generation time of a request."""
        return orchestrator.estimate_generation_time(request.to_request()).to_dict()

    @app.post("/videos")
    async def start_video(request: VideoRequest, background_tasks: BackgroundTasks):
        """
        Start a long-video run.

        The run executes in the background. Use /videos/{job_id} to check progress.
        """
        long_request = request.to_request()
        job_id = f"job_{uuid.uuid4().hex[:12]}"

        tokens[job_id] = CancellationToken(name=job_id)
        jobs[job_id] = {
            "job_id": job_id,
            "status": "queued",
            "created_at": datetime.now().isoformat(),
            "request": long_request.to_dict(),
            "steps": [],
            "result": None,
        }

        background_tasks.add_task(run_job, job_id, long_request)

        return {
            "job_id": job_id,
            "status": "queued",
            "message": f"Generation started. Check /videos/{job_id} for progress.",
        }

    @app.get("/videos/{job_id}")
    async def get_video(job_id: str):
        """Get the status of a run."""
        if job_id not in jobs:
            raise HTTPException(status_code=404, detail="Job not found")
        return jobs[job_id]

    @app.post("/videos/{job_id}/cancel")
    async def cancel_video(job_id: str):
        """Cancel a queued or running job."""
        if job_id not in jobs:
            raise HTTPException(status_code=404, detail="Job not found")

        token = tokens.get(job_id)
        if token is None:
            return {"job_id": job_id, "cancelled": False, "status": jobs[job_id]["status"]}

        token.cancel(f"Job {job_id} cancelled")
        return {"job_id": job_id, "cancelled": True, "status": jobs[job_id]["status"]}

    return app


def main(argv=None) -> None:
    """Console script entry point."""
    import uvicorn

    parser = argparse.ArgumentParser(prog="longvideo-server", description="Long Video HTTP API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--config", help="Path to config file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(create_app(config=Config.load(args.config)), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
