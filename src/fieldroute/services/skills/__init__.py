"""Skill qualification exports."""

from .qualification import is_qualified, missing_skills, required_skill_names

__all__ = ["is_qualified", "missing_skills", "required_skill_names"]
