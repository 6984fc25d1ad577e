"""
content_routes.py — Portfolio content: projects, education, skills, technologies, personal info.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, ValidationError

from auth import get_token_payload
from config import Config
from deps import get_config, get_resources
from errors import ValidationFailure
from resources import Resources
from schemas import Technology
from uploads import CERTIFICATE_POLICY, IMAGE_POLICY, accept_upload, remove_asset
from utils import logger, split_list_field

router = APIRouter()


# ── Helpers ───────────────────────────────────────────

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def require_fields(*checks) -> None:
    """Raise ValidationFailure listing the message of every (value, message) pair whose value is blank."""
    errors = [message for value, message in checks if _is_blank(value)]
    if errors:
        logger.warning("Validation errors: %s", errors)
        raise ValidationFailure(f"Validation failed: {' '.join(errors)}", details=errors)


def parse_list_field(raw: Optional[str]) -> List[str]:
    """Form value holding either a JSON array or a comma-separated list."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        return [part.strip() for part in raw.split(",")]
    if isinstance(parsed, list):
        return [str(item) for item in parsed]
    return [str(parsed)]


def _usable_path(value: Optional[str]) -> bool:
    return not _is_blank(value) and value not in ("undefined", "null")


def validated(model: type[BaseModel], data: dict) -> dict:
    try:
        return model(**data).model_dump()
    except ValidationError as e:
        details = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        logger.warning("%s validation failed: %s", model.__name__, details)
        raise ValidationFailure("Validation failed", details=details)


# ── Projects ──────────────────────────────────────────

@router.get("/projects")
def list_projects(resources: Resources = Depends(get_resources)):
    logger.info("GET /api/projects")
    return resources.projects.list()


@router.get("/projects/{project_id}")
def get_project(project_id: str, resources: Resources = Depends(get_resources)):
    return resources.projects.get(project_id)


@router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    technologies: Optional[str] = Form(None),
    githubLink: Optional[str] = Form(None),
    liveLink: Optional[str] = Form(None),
    existingImage: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    upload = accept_upload(image, IMAGE_POLICY)
    require_fields(
        (title, "Title is required."),
        (description, "Description is required."),
        (technologies, "Technologies are required."),
    )

    image_path = upload.save(config.PUBLIC_DIR) if upload else (existingImage if _usable_path(existingImage) else None)
    project = resources.projects.insert({
        "title": title.strip(),
        "description": description.strip(),
        "technologies": split_list_field(technologies),
        "image": image_path,
        "githubLink": githubLink or "",
        "liveLink": liveLink or "",
    })
    logger.info("Project created: %s", project["id"])
    return project


@router.put("/projects/{project_id}")
def update_project(
    project_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    technologies: Optional[str] = Form(None),
    githubLink: Optional[str] = Form(None),
    liveLink: Optional[str] = Form(None),
    existingImage: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    upload = accept_upload(image, IMAGE_POLICY)
    require_fields(
        (title, "Title is required."),
        (description, "Description is required."),
        (technologies, "Technologies are required."),
    )
    replaced = {}

    def apply(project):
        replaced["image"] = project.get("image")
        project.update({
            "title": title.strip(),
            "description": description.strip(),
            "technologies": split_list_field(technologies),
            "githubLink": githubLink or "",
            "liveLink": liveLink or "",
        })
        if upload:
            project["image"] = upload.save(config.PUBLIC_DIR)
        elif _usable_path(existingImage):
            project["image"] = existingImage
        else:
            project["image"] = project.get("image") or None
        return project

    project = resources.projects.update(project_id, apply)
    if upload and replaced["image"] and replaced["image"] != project["image"]:
        remove_asset(config.PUBLIC_DIR, replaced["image"])
    logger.info("Project updated: %s", project_id)
    return project


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str,
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    project = resources.projects.delete(project_id)
    remove_asset(config.PUBLIC_DIR, project.get("image"))
    logger.info("Project deleted: %s", project_id)
    return {"message": "Project deleted successfully"}


# ── Education ─────────────────────────────────────────

def _education_fields(year, title, institution, description, highlights, skills, isCurrent) -> dict:
    require_fields(
        (year, "Year is required."),
        (title, "Title is required."),
        (institution, "Institution is required."),
    )
    try:
        parsed_year = int(year)
    except ValueError:
        raise ValidationFailure("Validation failed: Year must be a number.", details=["Year must be a number."])
    return {
        "year": parsed_year,
        "title": title.strip(),
        "institution": institution.strip(),
        "description": description or "",
        "highlights": parse_list_field(highlights),
        "skills": parse_list_field(skills),
        "isCurrent": isCurrent == "true",
    }


@router.get("/public/education")
def list_public_education(resources: Resources = Depends(get_resources)):
    return resources.education.list()


@router.get("/education")
def list_education(resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return resources.education.list()


@router.get("/education/{entry_id}")
def get_education(
    entry_id: str,
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    return resources.education.get(entry_id)


@router.post("/education", status_code=status.HTTP_201_CREATED)
def create_education(
    year: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    institution: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    highlights: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    isCurrent: Optional[str] = Form(None),
    certificate: Optional[UploadFile] = File(None),
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    upload = accept_upload(certificate, CERTIFICATE_POLICY)
    fields = _education_fields(year, title, institution, description, highlights, skills, isCurrent)
    if upload:
        fields["certificate"] = upload.save(config.PUBLIC_DIR)
    entry = resources.education.insert(fields)
    logger.info("Education entry created: %s", entry["id"])
    return entry


@router.put("/education/{entry_id}")
def update_education(
    entry_id: str,
    year: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    institution: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    highlights: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    isCurrent: Optional[str] = Form(None),
    certificate: Optional[UploadFile] = File(None),
    existing_certificate: Optional[str] = Form(None, alias="certificatePath"),
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    upload = accept_upload(certificate, CERTIFICATE_POLICY)
    fields = _education_fields(year, title, institution, description, highlights, skills, isCurrent)
    replaced = {}

    def apply(entry):
        replaced["certificate"] = entry.get("certificate")
        entry.update(fields)
        if upload:
            entry["certificate"] = upload.save(config.PUBLIC_DIR)
        elif _usable_path(existing_certificate):
            entry["certificate"] = existing_certificate
        return entry

    entry = resources.education.update(entry_id, apply)
    if upload and replaced["certificate"]:
        remove_asset(config.PUBLIC_DIR, replaced["certificate"])
    logger.info("Education entry updated: %s", entry_id)
    return entry


@router.delete("/education/{entry_id}")
def delete_education(
    entry_id: str,
    resources: Resources = Depends(get_resources),
    config: Config = Depends(get_config),
    _token: dict = Depends(get_token_payload),
):
    entry = resources.education.delete(entry_id)
    remove_asset(config.PUBLIC_DIR, entry.get("certificate"))
    logger.info("Education entry deleted: %s", entry_id)
    return {"message": "Education entry deleted successfully"}


# ── Skills ────────────────────────────────────────────

@router.get("/skills")
def list_skills(resources: Resources = Depends(get_resources)):
    return resources.skills.raw()


@router.get("/skills/{skill_id}")
def get_skill(skill_id: str, resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    return {"skill": resources.skills.get(skill_id)}


@router.post("/skills")
def create_skill(
    body: dict = Body(...),
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    skill = resources.skills.insert(body)
    logger.info("Skill created: %s", skill["id"])
    return skill


@router.put("/skills/{skill_id}")
def update_skill(
    skill_id: str,
    body: dict = Body(...),
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    def apply(skill):
        skill.update({k: v for k, v in body.items() if k not in ("id", "createdAt")})
        return skill

    return resources.skills.update(skill_id, apply)


@router.delete("/skills/{skill_id}")
def delete_skill(skill_id: str, resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    resources.skills.delete(skill_id)
    return {"message": "Skill deleted successfully"}


# ── Technologies ──────────────────────────────────────

@router.get("/technologies")
def list_technologies(resources: Resources = Depends(get_resources)):
    return resources.technologies.list()


@router.get("/technologies/{tech_id}")
def get_technology(tech_id: str, resources: Resources = Depends(get_resources)):
    return resources.technologies.get(tech_id)


@router.post("/technologies", status_code=status.HTTP_201_CREATED)
def create_technology(
    body: dict = Body(...),
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    technology = resources.technologies.insert(validated(Technology, body))
    logger.info("Technology created: %s", technology["id"])
    return technology


@router.put("/technologies/{tech_id}")
def update_technology(
    tech_id: str,
    body: dict = Body(...),
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    def apply(existing):
        stamps = {k: existing[k] for k in ("id", "createdAt") if k in existing}
        merged = {k: v for k, v in {**existing, **body}.items() if k not in ("id", "createdAt", "updatedAt")}
        return {**stamps, **validated(Technology, merged)}

    return resources.technologies.update(tech_id, apply)


@router.delete("/technologies/{tech_id}")
def delete_technology(tech_id: str, resources: Resources = Depends(get_resources), _token: dict = Depends(get_token_payload)):
    resources.technologies.delete(tech_id)
    return {"message": "Technology deleted successfully"}


# ── Personal info ─────────────────────────────────────

@router.get("/personal-info")
def get_personal_info(resources: Resources = Depends(get_resources)):
    return resources.personal_info()


@router.put("/personal-info")
def update_personal_info(
    body: dict = Body(...),
    resources: Resources = Depends(get_resources),
    _token: dict = Depends(get_token_payload),
):
    for field in ("name", "profession", "experience", "education"):
        if _is_blank(body.get(field)):
            raise ValidationFailure(f"Missing required field: {field}")
    resources.replace_personal_info(body)
    return {"success": True, "message": "Personal information updated successfully"}
