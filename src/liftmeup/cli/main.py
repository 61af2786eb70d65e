"""
CLI entry point using Typer.

Provides commands for the workout tracker:
- workouts / create-workout / suggest / quests: pick what to train
- start / train / log-set / rest / complete: run a workout
- history / stats / prs: review progress
- profiles / create-profile / export / import / reset / delete-profile: manage data
"""

from .app import app
from .commands import analysis, planning, profile, sessions  # noqa: F401  (register commands)

if __name__ == "__main__":
    app()
