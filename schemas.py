"""
Database Schemas for the Portfolio API

Each Pydantic model = one MongoDB collection (lowercased class name).
Fields are camelCase on the wire and in storage.
"""

import json
from datetime import datetime
from typing import Any, List, Literal, Optional, get_args, get_origin

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_IMAGE = "/images/default-profile.jpg"
DEFAULT_RESUME = "/documents/resume.pdf"

SkillCategory = Literal["Frontend", "Backend", "Database", "DevOps/Cloud", "Tools", "Languages", "Other"]
Proficiency = Literal["Basic", "Intermediate", "Advanced", "Expert"]

SKILL_CATEGORIES = get_args(SkillCategory)
PROFICIENCY_LEVELS = get_args(Proficiency)


def _is_structured(annotation: Any) -> bool:
    if get_origin(annotation) in (list, dict):
        return True
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _decode(value: str, annotation: Any) -> Any:
    # Multipart admin forms send lists/objects as JSON text
    try:
        return json.loads(value)
    except ValueError:
        if get_origin(annotation) is list:
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class Document(BaseModel):
    """Base for stored records: camelCase aliases, trimmed strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def decode_json_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        decoded = dict(data)
        for name, field in cls.model_fields.items():
            if not _is_structured(field.annotation):
                continue
            for key in {name, field.alias or name}:
                if isinstance(decoded.get(key), str):
                    decoded[key] = _decode(decoded[key], field.annotation)
        return decoded

    @classmethod
    def field_aliases(cls) -> dict:
        """Map both python names and aliases to the stored (alias) key."""
        lookup = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            lookup[name] = alias
            lookup[alias] = alias
        return lookup


# Auth
class Admin(Document):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., description="pbkdf2_sha256 hash")
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


# Content
class SocialLinks(Document):
    github: str = ""
    linkedin: str = ""
    instagram: str = ""
    leetcode: str = ""
    codeforces: str = ""


class Home(Document):
    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    tagline: str = Field(..., min_length=1)
    bio: str = Field(..., min_length=1)
    profile_image: str = DEFAULT_IMAGE
    resume_url: str = DEFAULT_RESUME
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    highlights: List[str] = []
    is_active: bool = True


class ImpactMetric(Document):
    label: str = ""
    value: str = ""


class Impact(Document):
    metrics: List[ImpactMetric] = []
    description: str = ""


class ProjectLinks(Document):
    github: str = ""
    live: str = ""
    demo: str = ""


class Project(Document):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    problem_statement: str = Field(..., min_length=1)
    tech_stack: List[str] = []
    role: str = Field(..., min_length=1)
    challenges: List[str] = []
    impact: Impact = Field(default_factory=Impact)
    image: str = DEFAULT_IMAGE
    links: ProjectLinks = Field(default_factory=ProjectLinks)
    featured: bool = False
    order: int = Field(0, ge=0)
    is_active: bool = True


class Experience(Document):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    location: str = ""
    # Free-form ("Jan 2023", "2021-06"); empty end date means current role
    start_date: str = Field(..., min_length=1)
    end_date: str = ""
    description: str = ""
    achievements: List[str] = []
    technologies: List[str] = []
    company_logo: str = DEFAULT_IMAGE
    order: int = Field(0, ge=0)
    is_active: bool = True


class Skill(Document):
    name: str = Field(..., min_length=1)
    category: SkillCategory
    proficiency: Proficiency
    level: int = Field(50, ge=0, le=100)
    years_of_experience: float = Field(1, ge=0)
    icon: str = ""
    order: int = Field(0, ge=0)
    is_active: bool = True


class ContactSubmission(Document):
    name: str = Field(..., min_length=2)
    email: EmailStr
    subject: str = Field(..., min_length=5)
    message: str = Field(..., min_length=10)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class Contact(ContactSubmission):
    is_read: bool = False
    is_replied: bool = False
    reply: str = ""
    replied_at: Optional[datetime] = None
