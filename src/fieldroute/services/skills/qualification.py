"""Worker/job skill qualification.

Jobs that list explicit skill ids require the worker to hold every one of them.
Older jobs carry no skill ids; for those the service category is looked up in a
keyword table and the worker qualifies when any of their skill names loosely
matches any keyword. The two paths deliberately differ (all vs any).
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ...models.domain import ExplicitSkills, Job, ServiceCategorySkills, Worker

SERVICE_SKILL_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Lawn Mowing": ("Lawn Mowing", "Lawn Care", "Mowing", "Lawn Edging", "Lawn", "Zero-Turn Mower", "Walk-Behind Mower", "Edging & Trimming"),
    "Lawn Edging": ("Lawn Edging", "Edging & Trimming", "Lawn Mowing", "Lawn Care", "Lawn", "Mowing", "String Trimmer", "Edger"),
    "Tree Trimming": ("Tree Trimming", "Pruning", "Tree Work", "Trimming & Pruning", "Chainsaw Operation"),
    "Tree Removal": ("Tree Removal", "Tree Work", "Tree Trimming", "Chainsaw Operation", "ISA Certified Arborist"),
    "Trimming & Pruning": ("Trimming & Pruning", "Pruning", "Tree Trimming", "Bush/Shrub Pruning", "Hedge Trimming", "Landscaping", "Lawn Care"),
    "Landscaping": ("Landscaping", "Planting", "Garden Bed Maintenance", "Landscape Design", "Mulching", "Lawn Care"),
    "Planting": ("Planting (Shrubs)", "Planting (Flowers)", "Planting (Trees)", "Planting", "Landscaping", "Garden Bed Maintenance", "Lawn Care", "Mulching", "Edging & Trimming"),
    "Mulching": ("Mulching", "Landscaping", "Garden Bed Maintenance", "Planting", "Planting (Shrubs)", "Planting (Flowers)", "Lawn Care", "Edging & Trimming"),
    "Hardscaping": ("Hardscaping", "Paver Installation", "Retaining Wall", "Concrete Work", "Stone Work"),
    "Irrigation": ("Irrigation", "Sprinkler Repair", "Sprinkler Installation", "Irrigation Repair", "Irrigation Installation"),
    "Fertilization": ("Fertilization", "Lawn Treatment", "Pesticide Applicator License", "Weed Control", "Lawn Care"),
    "Hedge Trimming": ("Hedge Trimming", "Bush/Shrub Pruning", "Pruning", "Trimming & Pruning"),
    "Spring Cleanup": ("Spring Cleanup", "Fall Cleanup", "Cleanup", "Leaf Removal", "Lawn Care", "Debris Removal", "Lawn Mowing", "Leaf Blower"),
    "Fall Cleanup": ("Fall Cleanup", "Spring Cleanup", "Cleanup", "Leaf Removal", "Lawn Care", "Debris Removal", "Leaf Blower"),
    "Leaf Removal": ("Leaf Removal", "Fall Cleanup", "Spring Cleanup", "Cleanup", "Leaf Blower", "Debris Removal", "Lawn Care", "Lawn Mowing"),
    "Aeration": ("Aeration", "Lawn Care", "Lawn Mowing", "Lawn Treatment"),
    "Seeding": ("Seeding", "Seeding & Overseeding", "Lawn Care", "Sod Installation", "Aeration"),
}


def keywords_for_service(service_type: str) -> tuple[str, ...]:
    """Acceptable skill names for a service category; empty means anyone qualifies."""

    return SERVICE_SKILL_KEYWORDS.get(service_type, ())


def _fuzzy_match(skill_name: str, keyword: str) -> bool:
    skill_lower = skill_name.lower()
    keyword_lower = keyword.lower()
    return skill_lower == keyword_lower or keyword_lower in skill_lower or skill_lower in keyword_lower


def has_keyword_skill(worker_skills: Sequence[str], service_type: str) -> bool:
    keywords = keywords_for_service(service_type)
    if not keywords:
        return True
    return any(_fuzzy_match(skill, keyword) for keyword in keywords for skill in worker_skills)


def is_qualified(worker: Worker, job: Job) -> bool:
    if job.allow_unqualified:
        return True

    requirement = job.skill_requirement
    if isinstance(requirement, ExplicitSkills):
        return requirement.skill_ids <= set(worker.skill_ids)
    if isinstance(requirement, ServiceCategorySkills):
        return has_keyword_skill(worker.skills, requirement.service_type)
    raise TypeError(f"Unsupported skill requirement: {requirement!r}")


def missing_skills(worker: Worker, job: Job) -> set[str]:
    """Required skill ids the worker lacks; empty for jobs without explicit requirements."""

    requirement = job.skill_requirement
    if not isinstance(requirement, ExplicitSkills):
        return set()
    return set(requirement.skill_ids) - set(worker.skill_ids)


def skill_names(skill_ids: Sequence[str], lookup: Mapping[str, str]) -> list[str]:
    return [lookup.get(skill_id, skill_id) for skill_id in skill_ids]


def required_skill_names(job: Job, lookup: Mapping[str, str]) -> list[str]:
    """Human-readable requirement list used in diagnostics."""

    if job.required_skill_ids:
        return skill_names(job.required_skill_ids, lookup)
    return list(keywords_for_service(job.service_type))
