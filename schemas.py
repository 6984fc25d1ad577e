"""
schemas.py — Pydantic models for request/response validation.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ── Auth ──────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class Token(BaseModel):
    token: str


class PasswordResetRequest(BaseModel):
    email: str = ""


class PasswordResetConfirm(BaseModel):
    token: str = ""
    password: str = ""


# ── Account ───────────────────────────────────────────

class ThemeUpdate(BaseModel):
    theme: Optional[str] = None


class EmailTemplate(BaseModel):
    subject: Optional[str] = None
    headerColor: Optional[str] = None
    buttonColor: Optional[str] = None
    logoUrl: Optional[str] = None
    customMessage: Optional[str] = None


# ── Technologies ──────────────────────────────────────

class TechnologyCategory(str, Enum):
    BACKEND = "Backend"
    FRONTEND = "Frontend"
    DATABASE = "Database"
    DEVOPS = "DevOps"
    TOOLS = "Tools & Frameworks"


class Technology(BaseModel):
    model_config = ConfigDict(extra="allow", use_enum_values=True)

    category: TechnologyCategory
    name: str = Field(..., min_length=1)
    icon: str = Field(..., min_length=1)
    level: int = Field(..., ge=0, le=100)
    experience: str = Field(..., min_length=1)
    projectCount: int = 0
    description: Optional[str] = None
    keyFeatures: List[str] = Field(default_factory=list)


# ── Messages ──────────────────────────────────────────

class ProjectType(str, Enum):
    WEB = "Web Development"
    API = "API Development"
    DATABASE = "Database Architecture"
    MOBILE = "Mobile App"
    OTHER = "Other"


class Timeline(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class MessageCreate(BaseModel):
    """Canonical inbox message as submitted by the public site."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    company: Optional[str] = Field(default=None, max_length=100)
    projectType: ProjectType
    timeline: Optional[Timeline] = None
    projectPriority: Optional[str] = None
    requirements: List[str] = Field(default_factory=list)
    message: str = Field(..., min_length=1, max_length=2000)

    @field_validator("name", "message", "company", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _lower(cls, value):
        return value.lower()


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    company: Optional[str] = None
    projectType: Optional[str] = None
    projectPriority: Optional[str] = None
    requirements: List[str] = Field(default_factory=list)
    message: str = Field(..., min_length=1)
