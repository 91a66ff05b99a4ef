import os
import tempfile
import unittest
from io import BytesIO
from pathlib import Path

# Keep API tests deterministic: no rate limiting, no real providers.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

import httpx
from docx import Document
from fastapi.testclient import TestClient

from app.api.v1.cv import get_cv_match_service
from app.main import app
from app.parsing.parse import ResumeExtractor
from app.schemas.cv import DOCX_MEDIA_TYPE, MAX_UPLOAD_BYTES, PDF_MEDIA_TYPE
from app.services.cv_match_service import CvMatchService
from app.services.file_store import TransientFileStore
from app.services.job_search import AdzunaJobSearch
from app.services.title_inference import TitleInferenceEngine


def _docx_bytes(*lines: str) -> bytes:
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _adzuna_results(count: int) -> list[dict]:
    return [
        {
            "title": f"Backend Engineer {index}",
            "company": {"display_name": f"Company {index}"},
            "location": {"display_name": "Austin, Texas"},
            "salary_text": "$130,000" if index % 2 == 0 else None,
            "description": "Design and operate Python services. " * 10,
            "redirect_url": f"https://www.adzuna.com/land/ad/{index}",
        }
        for index in range(count)
    ]


class ScriptedAIClient:
    def __init__(self, response: str):
        self.response = response
        self.error: Exception | None = None

    async def generate(self, prompt: str) -> str:
        if self.error is not None:
            raise self.error
        return self.response


class CvApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)
        cls.resume = _docx_bytes(
            "Alex Rivera",
            "Experience",
            "Backend developer at Fintech Co: built REST APIs in Python and Go, owned PostgreSQL schemas.",
            "Skills",
            "Python, Go, PostgreSQL, Docker, Kubernetes, AWS",
            "Education",
            "BSc Computer Science",
        )

    @classmethod
    def tearDownClass(cls):
        app.dependency_overrides.clear()

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.scratch = Path(self._tmp.name) / "scratch"
        self.requests: list[str] = []
        self.provider_status = 200
        self.provider_payload: dict = {"results": _adzuna_results(10)}
        self.ai = ScriptedAIClient('["Backend Engineer", "Python Developer", "Platform Engineer"]')

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(str(request.url))
            return httpx.Response(self.provider_status, json=self.provider_payload)

        store = TransientFileStore(self.scratch)
        store.ensure_scratch_dir()
        self.service = CvMatchService(
            file_store=store,
            extractor=ResumeExtractor(),
            title_engine=TitleInferenceEngine(self.ai, timeout_s=5),
            job_search=AdzunaJobSearch(
                app_id="id",
                app_key="key",
                base_url="https://api.adzuna.test/v1/api/jobs",
                transport=httpx.MockTransport(handler),
            ),
        )
        app.dependency_overrides[get_cv_match_service] = lambda: self.service

    def tearDown(self):
        self._tmp.cleanup()

    def _upload(self, content: bytes | None = None, media_type: str = DOCX_MEDIA_TYPE, location: str | None = "Austin"):
        files = {"cv": ("resume.docx", content if content is not None else self.resume, media_type)}
        data = {"location": location} if location is not None else {}
        return self.client.post("/api/upload-cv", files=files, data=data)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_upload_end_to_end(self):
        response = self._upload()
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertTrue(body["success"])
        self.assertEqual(body["rawKeyword"][0], "Backend Engineer")
        self.assertEqual(len(body["rawKeyword"]), 3)
        self.assertEqual(body["location"], "Austin")
        self.assertLessEqual(len(body["jobs"]), 10)
        self.assertEqual(len(body["jobs"]), 10)
        for job in body["jobs"]:
            self.assertEqual(set(job), {"title", "company", "location", "salary", "description", "url"})
            self.assertTrue(job["description"].endswith("..."))
            self.assertEqual(len(job["description"]), 203)
        self.assertEqual(body["jobs"][0]["salary"], "$130,000")
        self.assertEqual(body["jobs"][1]["salary"], "Not specified")
        self.assertEqual(body["jobs"][3]["company"], "Company 3")

        self.assertIn("what=Backend+Engineer", self.requests[0])
        self.assertIn("where=Austin", self.requests[0])
        self.assertEqual(list(self.scratch.iterdir()), [])

    def test_upload_without_file(self):
        response = self.client.post("/api/upload-cv", data={"location": "Austin"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"msg": "Upload File to continue"})

    def test_upload_without_location(self):
        response = self._upload(location=None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Location is required"})
        self.assertEqual(self.requests, [])

    def test_upload_rejects_unsupported_media_type(self):
        response = self._upload(content=b"plain text", media_type="text/plain")
        self.assertEqual(response.status_code, 400)
        self.assertIn("PDF, DOC, DOCX", response.json()["error"])

    def test_upload_rejects_oversized_file(self):
        response = self._upload(content=b"%PDF-" + b"0" * MAX_UPLOAD_BYTES, media_type=PDF_MEDIA_TYPE)
        self.assertEqual(response.status_code, 413)
        self.assertIn("File too large", response.json()["error"])
        self.assertEqual(list(self.scratch.iterdir()), [])

    def test_content_that_does_not_match_media_type_is_a_500(self):
        response = self._upload(content=b"not really a pdf at all", media_type=PDF_MEDIA_TYPE)
        self.assertEqual(response.status_code, 500)
        self.assertIn("error", response.json())
        self.assertEqual(list(self.scratch.iterdir()), [])
        self.assertEqual(self.requests, [])

    def test_malformed_model_output_is_a_500(self):
        self.ai.response = "Backend Engineer, Python Developer"
        response = self._upload()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Model response is not valid JSON."})
        self.assertEqual(self.requests, [])

    def test_unexpected_failure_is_a_500_with_cors_headers(self):
        self.ai.error = ValueError("sdk blew up")
        files = {"cv": ("resume.docx", self.resume, DOCX_MEDIA_TYPE)}
        response = self.client.post(
            "/api/upload-cv",
            files=files,
            data={"location": "Austin"},
            headers={"Origin": "http://localhost:5173"},
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "sdk blew up"})
        self.assertEqual(response.headers.get("access-control-allow-origin"), "http://localhost:5173")
        self.assertEqual(list(self.scratch.iterdir()), [])
        self.assertEqual(self.requests, [])

    def test_provider_failure_fails_the_whole_request(self):
        self.provider_status = 401
        self.provider_payload = {"exception": "AUTH_FAIL", "display": "Authorisation failed"}
        response = self._upload()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Authorisation failed"})

    def test_specific_job_searches_selected_keyword(self):
        response = self.client.post(
            "/getSpecificJob",
            json={"index": 1, "location": "Berlin", "keywords": ["Backend Engineer", "Python Developer"]},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["jobs"]), 10)
        self.assertIn("what=Python+Developer", self.requests[0])
        self.assertIn("where=Berlin", self.requests[0])

    def test_specific_job_missing_fields(self):
        for payload in (
            {"location": "Berlin", "keywords": ["A"]},
            {"index": 0, "keywords": ["A"]},
            {"index": 0, "location": "Berlin"},
        ):
            with self.subTest(payload=payload):
                response = self.client.post("/getSpecificJob", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertIn("error", response.json())
        self.assertEqual(self.requests, [])

    def test_specific_job_index_out_of_range(self):
        response = self.client.post(
            "/getSpecificJob",
            json={"index": 5, "location": "Berlin", "keywords": ["A", "B"]},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("out of range", response.json()["error"])
        self.assertEqual(self.requests, [])

    def test_specific_job_provider_failure(self):
        self.provider_status = 500
        self.provider_payload = {"display": "Service unavailable"}
        response = self.client.post(
            "/getSpecificJob",
            json={"index": 0, "location": "Berlin", "keywords": ["Backend Engineer"]},
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Service unavailable"})


if __name__ == "__main__":
    unittest.main()
