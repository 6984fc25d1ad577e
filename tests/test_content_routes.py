"""
Content route tests: projects, education, skills, technologies, personal info.
"""

import json
from pathlib import Path

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _project_form(**overrides):
    form = {
        "title": "Portfolio API",
        "description": "The backend of this site",
        "technologies": "Python, FastAPI, ,SQLite",
        "githubLink": "https://github.com/me/api",
    }
    form.update(overrides)
    return form


class TestProjects:

    def test_public_list_starts_empty(self, client):
        response = client.get("/api/projects")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_requires_auth(self, client):
        assert client.post("/api/projects", data=_project_form()).status_code == 401

    def test_create_get_update_delete(self, client, auth_headers):
        created = client.post("/api/projects", data=_project_form(), headers=auth_headers)
        assert created.status_code == 201
        project = created.json()
        assert project["technologies"] == ["Python", "FastAPI", "SQLite"]
        assert project["image"] is None
        assert project["liveLink"] == ""

        assert client.get(f"/api/projects/{project['id']}").json()["title"] == "Portfolio API"

        updated = client.put(
            f"/api/projects/{project['id']}",
            data=_project_form(title="  Renamed  ", existingImage="/assets/images/kept.png"),
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["title"] == "Renamed"
        assert updated.json()["image"] == "/assets/images/kept.png"
        assert "updatedAt" in updated.json()

        deleted = client.delete(f"/api/projects/{project['id']}", headers=auth_headers)
        assert deleted.json() == {"message": "Project deleted successfully"}
        assert client.get(f"/api/projects/{project['id']}").status_code == 404

    def test_update_without_image_keeps_previous(self, client, auth_headers):
        project = client.post(
            "/api/projects", data=_project_form(existingImage="/assets/images/a.png"), headers=auth_headers
        ).json()
        updated = client.put(
            f"/api/projects/{project['id']}", data=_project_form(existingImage="undefined"), headers=auth_headers
        )
        assert updated.json()["image"] == "/assets/images/a.png"

    def test_update_validation_lists_missing_fields(self, client, auth_headers):
        project = client.post("/api/projects", data=_project_form(), headers=auth_headers).json()
        response = client.put(
            f"/api/projects/{project['id']}", data=_project_form(title=" ", technologies=""), headers=auth_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed: Title is required. Technologies are required."
        assert body["details"] == ["Title is required.", "Technologies are required."]

    def test_update_unknown_project_is_404(self, client, auth_headers):
        response = client.put("/api/projects/123", data=_project_form(), headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}

    def test_delete_unknown_project_is_404(self, client, auth_headers, resources):
        client.post("/api/projects", data=_project_form(), headers=auth_headers)
        before = resources.projects.list()
        response = client.delete("/api/projects/does-not-exist", headers=auth_headers)
        assert response.status_code == 404
        assert resources.projects.list() == before

    def test_image_upload_is_stored_under_assets(self, client, auth_headers, config):
        response = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("shot one.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 201
        image = response.json()["image"]
        assert image.startswith("/assets/images/") and image.endswith("-shot_one.png")
        assert (Path(config.PUBLIC_DIR) / image.lstrip("/")).read_bytes() == PNG_BYTES

    def test_replacing_image_deletes_old_file(self, client, auth_headers, config):
        project = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("a.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        ).json()
        old_file = Path(config.PUBLIC_DIR) / project["image"].lstrip("/")

        updated = client.put(
            f"/api/projects/{project['id']}",
            data=_project_form(),
            files={"image": ("b.gif", b"GIF89a", "image/gif")},
            headers=auth_headers,
        ).json()

        assert not old_file.exists()
        assert (Path(config.PUBLIC_DIR) / updated["image"].lstrip("/")).exists()

    def test_deleting_project_removes_its_image(self, client, auth_headers, config):
        project = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("pic.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        ).json()
        image_file = Path(config.PUBLIC_DIR) / project["image"].lstrip("/")
        assert image_file.exists()

        response = client.delete(f"/api/projects/{project['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert not image_file.exists()

    def test_uploaded_filename_cannot_escape_assets(self, client, auth_headers, config):
        response = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("../../evil name.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        image = response.json()["image"]
        assert image.startswith("/assets/images/") and image.endswith("-evil_name.png")
        assert ".." not in image
        assert (Path(config.PUBLIC_DIR) / image.lstrip("/")).exists()

    def test_unsupported_mime_type_is_rejected_before_mutation(self, client, auth_headers, resources, config):
        project = client.post("/api/projects", data=_project_form(), headers=auth_headers).json()
        before = resources.projects.list()

        created = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("bundle.zip", b"PK\x03\x04", "application/zip")},
            headers=auth_headers,
        )
        updated = client.put(
            f"/api/projects/{project['id']}",
            data=_project_form(title="Changed"),
            files={"image": ("bundle.zip", b"PK\x03\x04", "application/zip")},
            headers=auth_headers,
        )

        assert created.status_code == 400
        assert updated.status_code == 400
        assert created.json() == {"error": "Invalid file type"}
        assert resources.projects.list() == before
        assert list((Path(config.PUBLIC_DIR) / "assets" / "images").iterdir()) == []

    def test_oversized_image_is_rejected(self, client, auth_headers, resources):
        big = b"\x00" * (5 * 1024 * 1024 + 1)
        response = client.post(
            "/api/projects",
            data=_project_form(),
            files={"image": ("big.png", big, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "File too large"}
        assert resources.projects.list() == []


class TestEducation:

    def _form(self, **overrides):
        form = {
            "year": "2021",
            "title": "BSc Computer Science",
            "institution": "State University",
            "highlights": json.dumps(["Thesis on compilers", "Dean's list"]),
            "skills": "C, Python",
            "isCurrent": "false",
        }
        form.update(overrides)
        return form

    def test_public_mirror_needs_no_auth(self, client, auth_headers):
        client.post("/api/education", data=self._form(), headers=auth_headers)
        assert client.get("/api/education").status_code == 401
        public = client.get("/api/public/education")
        assert public.status_code == 200
        assert public.json()[0]["institution"] == "State University"

    def test_create_parses_lists_and_flags(self, client, auth_headers):
        entry = client.post("/api/education", data=self._form(isCurrent="true"), headers=auth_headers).json()
        assert entry["year"] == 2021
        assert entry["highlights"] == ["Thesis on compilers", "Dean's list"]
        assert entry["skills"] == ["C", "Python"]
        assert entry["isCurrent"] is True
        assert client.get(f"/api/education/{entry['id']}", headers=auth_headers).json() == entry

    def test_create_lists_every_missing_field(self, client, auth_headers):
        response = client.post(
            "/api/education", data=self._form(year="", institution=" "), headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["details"] == ["Year is required.", "Institution is required."]

    def test_non_numeric_year_is_rejected(self, client, auth_headers):
        response = client.post("/api/education", data=self._form(year="soon"), headers=auth_headers)
        assert response.status_code == 400

    def test_certificate_upload_and_cleanup(self, client, auth_headers, config):
        entry = client.post(
            "/api/education",
            data=self._form(),
            files={"certificate": ("diploma.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth_headers,
        ).json()
        cert = Path(config.PUBLIC_DIR) / entry["certificate"].lstrip("/")
        assert entry["certificate"].startswith("/assets/certificates/")
        assert cert.exists()

        client.delete(f"/api/education/{entry['id']}", headers=auth_headers)
        assert not cert.exists()

    def test_update_keeps_certificate_path(self, client, auth_headers):
        entry = client.post("/api/education", data=self._form(), headers=auth_headers).json()
        updated = client.put(
            f"/api/education/{entry['id']}",
            data=self._form(title="MSc", certificatePath="/assets/certificates/old.pdf"),
            headers=auth_headers,
        ).json()
        assert updated["title"] == "MSc"
        assert updated["certificate"] == "/assets/certificates/old.pdf"

    def test_certificate_rejects_zip(self, client, auth_headers):
        response = client.post(
            "/api/education",
            data=self._form(),
            files={"certificate": ("x.zip", b"PK", "application/zip")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "Only PDF and image files" in response.json()["error"]


class TestSkills:

    def test_skills_keep_their_wrapper(self, client, auth_headers, resources):
        assert client.get("/api/skills").json() == {"skills": []}

        skill = client.post("/api/skills", json={"name": "Docker", "level": 80}, headers=auth_headers).json()
        assert client.get("/api/skills").json()["skills"][0]["name"] == "Docker"
        assert client.get(f"/api/skills/{skill['id']}", headers=auth_headers).json() == {"skill": skill}

        updated = client.put(f"/api/skills/{skill['id']}", json={"level": 90}, headers=auth_headers).json()
        assert updated["level"] == 90 and updated["name"] == "Docker"

        client.delete(f"/api/skills/{skill['id']}", headers=auth_headers)
        assert resources.store.load("skills.json") == {"skills": []}

    def test_delete_unknown_skill_is_404(self, client, auth_headers):
        response = client.delete("/api/skills/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Skill not found"}


class TestTechnologies:

    VALID = {
        "category": "Backend",
        "name": "FastAPI",
        "icon": "fa-bolt",
        "level": 85,
        "experience": "3 years",
        "keyFeatures": ["async", "typed"],
    }

    def test_public_read_authenticated_write(self, client, auth_headers):
        assert client.post("/api/technologies", json=self.VALID).status_code == 401
        created = client.post("/api/technologies", json=self.VALID, headers=auth_headers)
        assert created.status_code == 201
        assert created.json()["projectCount"] == 0
        assert client.get("/api/technologies").json()[0]["name"] == "FastAPI"

    def test_invalid_category_and_level_are_rejected(self, client, auth_headers):
        body = {**self.VALID, "category": "Cooking", "level": 140}
        response = client.post("/api/technologies", json=body, headers=auth_headers)
        assert response.status_code == 400
        assert len(response.json()["details"]) == 2

    def test_update_merges_and_revalidates(self, client, auth_headers):
        tech = client.post("/api/technologies", json=self.VALID, headers=auth_headers).json()

        ok = client.put(f"/api/technologies/{tech['id']}", json={"level": 95}, headers=auth_headers)
        assert ok.status_code == 200
        assert ok.json()["level"] == 95
        assert ok.json()["id"] == tech["id"]
        assert ok.json()["createdAt"] == tech["createdAt"]

        bad = client.put(f"/api/technologies/{tech['id']}", json={"level": -1}, headers=auth_headers)
        assert bad.status_code == 400
        assert client.get(f"/api/technologies/{tech['id']}").json()["level"] == 95


class TestPersonalInfo:

    def test_default_document_is_written_on_first_read(self, client, resources):
        response = client.get("/api/personal-info")
        assert response.status_code == 200
        assert "profession" in response.json()
        assert resources.store.load("personal-info.json") == response.json()

    def test_corrupt_document_is_not_overwritten_by_a_read(self, client, config):
        path = Path(config.DATA_DIR) / "personal-info.json"
        path.write_text('{"name": "Sam", "profession": "Dev",', encoding="utf-8")

        response = client.get("/api/personal-info")

        assert response.status_code == 200
        assert response.json()["profession"] == "Backend Developer"
        assert path.read_text(encoding="utf-8") == '{"name": "Sam", "profession": "Dev",'

    def test_update_requires_fields_and_auth(self, client, auth_headers):
        info = {"name": "Jo", "profession": "Dev", "experience": "5y", "education": "BSc", "location": "Remote"}
        assert client.put("/api/personal-info", json=info).status_code == 401

        missing = client.put("/api/personal-info", json={**info, "experience": ""}, headers=auth_headers)
        assert missing.status_code == 400
        assert missing.json() == {"error": "Missing required field: experience"}

        saved = client.put("/api/personal-info", json=info, headers=auth_headers)
        assert saved.json()["success"] is True
        assert client.get("/api/personal-info").json() == info
