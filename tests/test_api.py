# tests for the fastapi app
# covers health, classification, distributions and trend analysis endpoints

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.main import app


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _question(qid, month, terms, intent="treatment", day=1):
    return {
        "id": qid,
        "text": "question text",
        "timestamp": f"2023-{month:02d}-{day:02d}T10:00:00Z",
        "medicalConcepts": [{"term": t, "category": "disease"} for t in terms],
        "clinicalIntent": intent,
    }


def _series(term, counts):
    questions = []
    for month, n in enumerate(counts, start=1):
        for i in range(n):
            questions.append(_question(f"{term}-{month}-{i}", month, [term], day=1 + i % 28))
    return questions


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok", "service": "clinical-question-trends-api"}


class TestClassify:
    """POST /classify"""

    @pytest.mark.asyncio
    async def test_classify(self, client: AsyncClient):
        res = await client.post("/classify", json={
            "text": "This is an urgent question about managing a rare presentation of this disease",
        })
        assert res.status_code == 200
        data = res.json()
        assert data["decisionPoint"]["urgency"] == "high"
        assert data["informationGap"]["primaryType"] == "rare_case"
        assert data["informationGap"]["severity"] == "critical"
        assert 0.3 <= data["intent"]["confidence"] <= 0.95
        assert data["timestamp"] is None

    @pytest.mark.asyncio
    async def test_classify_empty_text(self, client: AsyncClient):
        res = await client.post("/classify", json={"text": ""})
        assert res.status_code == 200
        data = res.json()
        assert data["intent"]["primaryType"] == "general_information"
        assert data["workflow"]["patientContext"] == "unspecified"
        assert data["textLength"] == 0

    @pytest.mark.asyncio
    async def test_classify_anonymizes(self, client: AsyncClient):
        res = await client.post("/classify", json={"text": "Patient Jane Doe called 555-123-4567"})
        assert "555-123-4567" not in res.json()["anonymizedText"]

    @pytest.mark.asyncio
    async def test_batch(self, client: AsyncClient):
        res = await client.post("/classify/batch", json={
            "texts": ["what dose?", "", None],
            "timestamp": "2024-03-01T12:00:00Z",
        })
        assert res.status_code == 200
        data = res.json()
        assert data["count"] == 3
        assert data["results"][0]["decisionPoint"]["primaryType"] == "dosing"
        assert all(r["timestamp"].startswith("2024-03-01") for r in data["results"])

    @pytest.mark.asyncio
    async def test_bad_body(self, client: AsyncClient):
        res = await client.post("/classify/batch", json={"texts": "not a list"})
        assert res.status_code == 422


class TestDistributions:
    """POST /trends/distributions"""

    @pytest.mark.asyncio
    async def test_monthly(self, client: AsyncClient):
        questions = [
            _question("q1", 1, ["asthma"], "diagnosis"),
            _question("q2", 1, ["hypertension"]),
            _question("q3", 3, ["viral pneumonia"], "prognosis"),
        ]
        questions[0]["demographics"] = {"ageGroup": "child", "gender": "male"}
        res = await client.post("/trends/distributions", json={"questions": questions})
        assert res.status_code == 200
        data = res.json()
        assert data["granularity"] == "monthly"
        assert [p["period"] for p in data["periods"]] == ["2023-01", "2023-03"]
        january = data["periods"][0]
        assert january["questionCount"] == 2
        assert january["demographics"]["ageGroups"]["child"] == 1
        assert {i["intent"] for i in january["intents"]} == {"diagnosis", "treatment"}
        assert len(january["journey"]) == 7

    @pytest.mark.asyncio
    async def test_quarterly(self, client: AsyncClient):
        questions = [_question("q1", 1, ["asthma"]), _question("q2", 3, ["asthma"])]
        res = await client.post("/trends/distributions", json={"questions": questions, "granularity": "quarterly"})
        assert [p["period"] for p in res.json()["periods"]] == ["2023-Q1"]

    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient):
        res = await client.post("/trends/distributions", json={"questions": []})
        assert res.status_code == 200
        assert res.json()["periods"] == []

    @pytest.mark.asyncio
    async def test_bad_granularity(self, client: AsyncClient):
        res = await client.post("/trends/distributions", json={"questions": [], "granularity": "hourly"})
        assert res.status_code == 400
        assert "hourly" in res.json()["detail"]

    @pytest.mark.asyncio
    async def test_bad_question(self, client: AsyncClient):
        bad = _question("q1", 1, ["asthma"])
        bad["medicalConcepts"][0]["category"] = "gene"
        res = await client.post("/trends/distributions", json={"questions": [bad]})
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_timestamp(self, client: AsyncClient):
        bad = _question("q1", 1, ["asthma"])
        del bad["timestamp"]
        res = await client.post("/trends/distributions", json={"questions": [bad]})
        assert res.status_code == 422


class TestAnalyze:
    """POST /trends/analyze"""

    @pytest.mark.asyncio
    async def test_emerging_topic(self, client: AsyncClient):
        questions = _series("flu", [10, 10, 10, 25]) + _series("cold", [8, 8, 8, 8])
        res = await client.post("/trends/analyze", json={"questions": questions, "minSampleSize": 5})
        assert res.status_code == 200
        data = res.json()
        assert data["granularity"] == "monthly"
        assert [t["topicId"] for t in data["emergingTopics"]] == ["disease_flu"]
        assert data["emergingTopics"][0]["percentageChange"] == pytest.approx(150.0)
        assert data["dataTimeframe"]["questions"] == 87
        assert len(data["forecasts"]) == 2

    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient):
        res = await client.post("/trends/analyze", json={"questions": []})
        assert res.status_code == 200
        data = res.json()
        assert data["emergingTopics"] == []
        assert data["dataTimeframe"] is None

    @pytest.mark.asyncio
    async def test_weekly(self, client: AsyncClient):
        res = await client.post("/trends/analyze", json={
            "questions": _series("flu", [3, 4, 5]),
            "granularity": "weekly",
        })
        assert res.status_code == 200
        assert res.json()["granularity"] == "weekly"

    @pytest.mark.asyncio
    async def test_bad_granularity(self, client: AsyncClient):
        res = await client.post("/trends/analyze", json={"questions": [], "granularity": "fortnightly"})
        assert res.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_threshold(self, client: AsyncClient):
        res = await client.post("/trends/analyze", json={"questions": [], "significanceLevel": 0})
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_forecast_horizon_bounded(self, client: AsyncClient):
        res = await client.post("/trends/analyze", json={
            "questions": _series("flu", [1, 2, 4, 8, 16, 32]),
            "forecastHorizon": 2000,
        })
        assert res.status_code == 422
