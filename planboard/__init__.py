"""Lesson-plan scheduling conflicts and compliance tracking."""
