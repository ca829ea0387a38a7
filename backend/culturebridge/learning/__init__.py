"""
Language learning core.

This package holds the learning-side business rules:
- Session lifecycle and scoring (sessions)
- Per-language skills, streaks and weekly goals (progress)
- One-time achievements and their rewards (achievements)
- Content templates and recommendations

The service module is the entry point used by the API.
"""
