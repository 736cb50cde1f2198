"""
API 路由测试
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dau_impact.api import router
from dau_impact.models.config import default_baseline


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return TestClient(app)


@pytest.fixture
def payload():
    return {
        "initiative_type": "combined",
        "acquisition": {"weekly_installs": 70000, "weeks_to_start": 2, "duration": 8},
        "retention": {"target_users": "all", "months_to_start": 1, "d1_gain": 3, "d7_gain": 2},
        "exposure_rate": 50,
        "baseline": default_baseline().model_dump(mode="json"),
    }


class TestPredict:
    """预测接口测试"""

    def test_predict(self, client, payload):
        response = client.post("/api/predict", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert len(body["baseline"]) == 12
        assert body["granularity"] == "monthly"
        assert body["retention_curves"]["base_new_user"]["kind"] == "power"
        assert body["summary"]["peak_month"] >= 1

    def test_predict_invalid_filter(self, client, payload):
        payload["platforms"] = ["ios", "web"]

        response = client.post("/api/predict", json=payload)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert "commercial_web" in " ".join(detail["errors"])

    def test_predict_schema_error(self, client, payload):
        payload["exposure_rate"] = 150

        response = client.post("/api/predict", json=payload)

        assert response.status_code == 422

    def test_validate(self, client, payload):
        response = client.post("/api/validate", json=payload)

        assert response.status_code == 200
        assert response.json()["valid"] is True


class TestCurveEndpoints:
    """基线与曲线接口测试"""

    def test_default_baseline(self, client):
        response = client.get("/api/default-baseline")

        assert response.status_code == 200
        body = response.json()
        assert body["current_dau"]["consumer_android"] == 8300000
        assert set(body["retention_curves"]) == {"existing", "new"}

    def test_fit_curve(self, client):
        series = {"d1": 30, "d7": 30, "d14": 30, "d28": 30, "d360": 30, "d720": 30}

        response = client.post("/api/fit-curve", json={"series": series, "curve": "power"})

        assert response.status_code == 200
        params = response.json()["params"]
        assert params["kind"] == "power"
        assert abs(params["b"]) < 1e-6
        assert params["a"] == pytest.approx(0.3, abs=0.01)
        assert response.json()["fitted_values"]["day7"] == pytest.approx(0.3, abs=0.01)

    def test_fit_curve_exponential(self, client):
        series = {"d1": 58, "d7": 51.8, "d14": 50, "d28": 48, "d360": 30, "d720": 20}

        response = client.post("/api/fit-curve", json={"series": series, "curve": "exponential"})

        assert response.status_code == 200
        assert response.json()["params"]["c"] == pytest.approx(0.16)


class TestApplication:
    """应用入口测试"""

    def test_health(self):
        from main import app

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
