"""Profit margin endpoints."""


class TestProfitMargin:
    def test_default_margin(self, client, user_headers):
        resp = client.get("/api/settings/profit-margin", headers=user_headers)
        assert resp.status_code == 200
        assert resp.json == {"profitMargin": 0.5}

    def test_update_margin(self, client, user_headers):
        resp = client.put("/api/settings/profit-margin", json={"newProfitMargin": 0.25}, headers=user_headers)
        assert resp.status_code == 200
        assert resp.json["message"] == "Margem de lucro atualizada com sucesso"
        assert resp.json["profitMargin"] == 0.25

        resp = client.get("/api/settings/profit-margin", headers=user_headers)
        assert resp.json["profitMargin"] == 0.25

    def test_margin_is_global(self, client, user_headers, other_headers):
        client.put("/api/settings/profit-margin", json={"newProfitMargin": 0.8}, headers=user_headers)
        resp = client.get("/api/settings/profit-margin", headers=other_headers)
        assert resp.json["profitMargin"] == 0.8

    def test_missing_value(self, client, user_headers):
        resp = client.put("/api/settings/profit-margin", json={}, headers=user_headers)
        assert resp.status_code == 400

    def test_invalid_value(self, client, user_headers):
        resp = client.put("/api/settings/profit-margin", json={"newProfitMargin": "muito"}, headers=user_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Margem de lucro inválida"

        resp = client.put("/api/settings/profit-margin", json={"newProfitMargin": "0,3"}, headers=user_headers)
        assert resp.status_code == 400

        resp = client.put("/api/settings/profit-margin", json=[0.3], headers=user_headers)
        assert resp.status_code == 400

        resp = client.get("/api/settings/profit-margin", headers=user_headers)
        assert resp.json["profitMargin"] == 0.5
