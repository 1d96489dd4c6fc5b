import json

import pytest

from learnace.routers import analyze as analyze_router
from learnace.schemas import AnalysisResult, QuestionScore
from learnace.settings import settings


@pytest.fixture
def fake_analysis(monkeypatch):
	calls = []

	async def fake(content, mime_type="image/jpeg", **kwargs):
		calls.append((content, mime_type))
		return AnalysisResult(
			success=True,
			question_scores=[QuestionScore(topic="Statistics", scored=2, total=5)],
			weak_areas=["Statistics"],
		)

	monkeypatch.setattr(analyze_router, "analyze_exam_paper", fake)
	return calls


def test_health_and_info(client):
	assert client.get("/health").json() == {"status": "ok"}
	assert client.get("/info").json()["status"] == "ok"


# ---- analyze-exam ----

def test_analyze_exam_success(client, png_bytes, fake_analysis):
	r = client.post("/api/analyze-exam", files={"image": ("paper.png", png_bytes, "image/png")})
	assert r.status_code == 200
	body = r.json()
	assert body == {
		"success": True,
		"questionScores": [{"topic": "Statistics", "scored": 2, "total": 5, "percentage": 40}],
		"weakAreas": ["Statistics"],
	}
	assert fake_analysis == [(png_bytes, "image/png")]


def test_analyze_exam_missing_file(client, fake_analysis):
	r = client.post("/api/analyze-exam")
	assert r.status_code == 400
	assert fake_analysis == []


def test_analyze_exam_rejects_non_image(client, fake_analysis):
	r = client.post("/api/analyze-exam", files={"image": ("notes.txt", b"just some text", "text/plain")})
	assert r.status_code == 400
	assert "Invalid file type" in r.json()["detail"]
	assert fake_analysis == []


def test_analyze_exam_rejects_mislabelled_bytes(client, fake_analysis):
	r = client.post("/api/analyze-exam", files={"image": ("paper.png", b"not really a png", "image/png")})
	assert r.status_code == 400
	assert fake_analysis == []


def test_analyze_exam_rejects_oversized_upload(client, png_bytes, fake_analysis, monkeypatch):
	monkeypatch.setattr(settings, "max_upload_bytes", len(png_bytes) - 1)
	r = client.post("/api/analyze-exam", files={"image": ("paper.png", png_bytes, "image/png")})
	assert r.status_code == 400
	assert fake_analysis == []


def test_analyze_exam_internal_failure(client, png_bytes, monkeypatch):
	async def broken(*args, **kwargs):
		raise RuntimeError("unexpected")

	monkeypatch.setattr(analyze_router, "analyze_exam_paper", broken)
	r = client.post("/api/analyze-exam", files={"image": ("paper.png", png_bytes, "image/png")})
	assert r.status_code == 500
	assert r.json() == {"success": False, "error": "Internal server error during analysis"}


def test_analyze_exam_missing_key_returns_typed_failure(client, png_bytes, monkeypatch):
	monkeypatch.setattr(settings, "gemini_api_key", None)
	monkeypatch.setattr(settings, "analysis_demo_fallback", False)
	r = client.post("/api/analyze-exam", files={"image": ("paper.png", png_bytes, "image/png")})
	assert r.status_code == 200
	assert r.json() == {
		"success": False,
		"questionScores": [],
		"weakAreas": [],
		"error": "Gemini API key not configured",
	}


# ---- auth ----

@pytest.mark.parametrize("path", ["/api/login", "/api/signup"])
def test_login_and_signup_open_session(client, storage, path):
	r = client.post(path, json={"username": "maya", "password": "secret"})
	assert r.status_code == 200
	assert r.json() == {"success": True, "user": {"username": "maya", "isLoggedIn": True}}
	assert storage.get_user().username == "maya"


def test_login_stores_username_as_given(client, storage):
	r = client.post("/api/login", json={"username": " maya ", "password": " "})
	assert r.status_code == 200
	assert r.json()["user"]["username"] == " maya "
	assert storage.get_user().username == " maya "

	r = client.post("/api/login", json={"username": "  ", "password": "secret"})
	assert r.status_code == 200
	assert storage.get_user().username == "  "


@pytest.mark.parametrize(
	"body",
	[{"username": "maya"}, {"password": "secret"}, {"username": "", "password": "secret"}, {}],
)
def test_login_requires_both_fields(client, storage, body):
	r = client.post("/api/login", json=body)
	assert r.status_code == 400
	assert storage.get_user() is None


def test_current_user_and_logout(client):
	assert client.get("/api/user").status_code == 404
	client.post("/api/login", json={"username": "maya", "password": "pw"})
	assert client.get("/api/user").json() == {"username": "maya", "isLoggedIn": True}
	assert client.post("/api/logout").status_code == 204
	assert client.get("/api/user").status_code == 404


# ---- quizzes ----

def test_create_list_delete_quiz(client):
	r = client.post(
		"/api/quizzes",
		json={"score": 64, "date": "2024-04-01", "questionScores": "Stats|1/5\nAlgebra|4/5\nbad line"},
	)
	assert r.status_code == 201
	created = r.json()
	assert created["weakAreas"] == ["Stats"]
	assert [qs["topic"] for qs in created["questionScores"]] == ["Stats", "Algebra"]

	listed = client.get("/api/quizzes").json()
	assert listed == [created]

	assert client.delete(f"/api/quizzes/{created['id']}").status_code == 204
	assert client.get("/api/quizzes").json() == []
	assert client.delete(f"/api/quizzes/{created['id']}").status_code == 204


def test_create_quiz_with_manual_weak_areas(client):
	r = client.post("/api/quizzes", json={"score": "70.5", "weakAreas": "trig; stats, TRIG"})
	assert r.status_code == 201
	body = r.json()
	assert body["score"] == 70.5
	assert set(body["weakAreas"]) == {"Trig", "Stats"}
	assert "questionScores" not in body


@pytest.mark.parametrize("score", [101, -5, "ninety", None])
def test_create_quiz_rejects_bad_score(client, score):
	r = client.post("/api/quizzes", json={"score": score})
	assert r.status_code == 400
	assert r.json()["detail"] == "Please enter a score between 0 and 100"
	assert client.get("/api/quizzes").json() == []


def test_weak_area_summary(client):
	client.post("/api/quizzes", json={"score": 40, "questionScores": "Algebra|1/4\nTrig|1/5"})
	client.post("/api/quizzes", json={"score": 55, "questionScores": "Algebra|2/5"})
	summary = client.get("/api/weak-areas").json()
	assert summary[0] == {"topic": "Algebra", "frequency": 2, "averageScore": 33}
	assert summary[1] == {"topic": "Trig", "frequency": 1, "averageScore": 20}


def test_parse_preview(client):
	r = client.post("/api/question-scores/parse", json={"text": "Algebra|3/5\nStats|1/4\nAlgebra|3/0"})
	assert r.json() == {
		"questionScores": [
			{"topic": "Algebra", "scored": 3, "total": 5, "percentage": 60},
			{"topic": "Stats", "scored": 1, "total": 4, "percentage": 25},
		],
		"weakAreas": ["Stats"],
	}


def test_quote(client):
	assert client.get("/api/quote").json()["quote"]


# ---- settings and exports ----

def test_settings_update_is_partial(client):
	assert client.get("/api/settings").json() == {
		"theme": "light",
		"notifications": True,
		"emailUpdates": False,
		"autoAnalysis": True,
	}
	r = client.put("/api/settings", json={"theme": "dark", "autoAnalysis": False})
	assert r.json() == {"theme": "dark", "notifications": True, "emailUpdates": False, "autoAnalysis": False}
	assert client.put("/api/settings", json={"theme": "sepia"}).status_code == 422


def test_export_csv(client):
	client.post("/api/quizzes", json={"score": 80, "date": "2024-04-02", "weakAreas": "trig, stats"})
	r = client.get("/api/export/csv")
	assert r.status_code == 200
	assert r.headers["content-type"].startswith("text/csv")
	assert 'filename="quiz-tracker-' in r.headers["content-disposition"]
	assert r.text.split("\n") == ['"Date","Score (%)","Weak Areas"', '"2024-04-02","80","Trig; Stats"']


def test_export_json(client):
	client.post("/api/login", json={"username": "maya", "password": "pw"})
	client.post("/api/quizzes", json={"score": 80})
	client.put("/api/settings", json={"theme": "dark"})
	r = client.get("/api/export/json")
	assert 'filename="learn-ace-data-maya-' in r.headers["content-disposition"]
	doc = json.loads(r.text)
	assert doc["username"] == "maya"
	assert len(doc["quizEntries"]) == 1
	assert doc["settings"]["theme"] == "dark"


def test_delete_account_clears_everything(client, storage):
	client.post("/api/login", json={"username": "maya", "password": "pw"})
	client.post("/api/quizzes", json={"score": 80})
	assert client.delete("/api/account").status_code == 204
	assert storage.store.keys() == []
	assert client.get("/api/quizzes").json() == []


def test_summary_empty_history(client):
	assert client.get("/api/summary").json() == {"totalQuizzes": 0, "averageScore": 0.0, "topWeakAreas": []}


def test_summary_overview(client):
	client.post("/api/quizzes", json={"score": 40, "date": "2024-04-01", "questionScores": "Algebra|1/4\nTrig|1/5"})
	latest = client.post("/api/quizzes", json={"score": 55.5, "date": "2024-04-02", "questionScores": "Algebra|2/5"}).json()
	body = client.get("/api/summary").json()
	assert body["totalQuizzes"] == 2
	assert body["averageScore"] == 47.8
	assert body["latestEntry"] == latest
	assert body["topWeakAreas"] == [
		{"topic": "Algebra", "frequency": 2, "averageScore": 33},
		{"topic": "Trig", "frequency": 1, "averageScore": 20},
	]
