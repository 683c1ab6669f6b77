#!/usr/bin/env python3
"""
Simple Long Video Example
=========================

Plan, generate and assemble a 30 second promotional video, printing
progress events as they arrive.
"""

import asyncio
import os

from longvideo import (
    EventType,
    LongVideoOrchestrator,
    LongVideoRequest,
    ProgressEvent,
)


def on_event(event: ProgressEvent) -> None:
    if event.event_type == EventType.STEP_UPDATED:
        payload = event.payload
        print(f"  {payload['step']:<18} {payload['status']:<12} {payload['progress']:>3}%")
    elif event.event_type == EventType.RENDER_PLAN_READY:
        for operation in event.payload["plan"]["operations"]:
            print(f"    $ {' '.join(operation['command'])}")


async def main():
    """Long video generation example."""

    if not os.getenv("HF_TOKEN"):
        print("Please set HF_TOKEN environment variable")
        print("Get your token at: https://huggingface.co/settings/tokens")
        return

    request = LongVideoRequest(
        title="Morning Roast",
        description="A small coffee roastery opening its doors at sunrise",
        script=(
            "The city is still asleep. "
            "Inside the roastery, green beans tumble into the drum. "
            "The first customers line up outside. "
            "A barista pours a perfect rosetta. "
            "The shop fills with warm light and conversation. "
            "Morning Roast, coffee worth waking up for."
        ),
        total_duration=30,
        style="promotional",
        target_quality="1080p",
    )

    async with LongVideoOrchestrator(api_token=os.getenv("HF_TOKEN"), listeners=[on_event]) as orchestrator:
        estimate = orchestrator.estimate_generation_time(request)
        print("=== Long Video Generation ===")
        print(f"Clips: {estimate.clip_count}, estimated {estimate.total_minutes:.1f} min\n")

        result = await orchestrator.generate_long_video(request)

    print(f"\nSuccess: {result.success}")
    print(f"Clips: {result.successful_clips}/{result.total_clips}")
    print(f"Average quality: {result.average_quality:.1f}")
    if result.video_url:
        print(f"Output: {result.video_url}")
    if result.exhausted_scene_ids:
        print(f"Below continuity threshold: {', '.join(result.exhausted_scene_ids)}")
    if result.error:
        print(f"Error: {result.error}")


if __name__ == "__main__":
    asyncio.run(main())
