"""Progression map: node states and the linear unlock rule."""

from .graph import Blocked, NoExercise, ProgressionGraph, Ready, SelectResult

__all__ = ["Blocked", "NoExercise", "ProgressionGraph", "Ready", "SelectResult"]
