"""
Tests for the anti-forgery stage.

Covers token generation, the per-mode cookie attributes and the
rejection of state-changing requests without a matching token.
"""

from fastapi.testclient import TestClient

from campbook.common.csrf import CsrfTokens


def _set_cookies(resp, name: str) -> list:
    return [c for c in resp.headers.get_list("set-cookie") if c.startswith(f"{name}=")]


class TestCsrfTokens:
    """Tests for CsrfTokens."""

    def test_token_matches_its_secret(self) -> None:
        tokens = CsrfTokens()
        secret = tokens.new_secret()
        assert tokens.verify(secret, tokens.create(secret))

    def test_token_rejected_for_other_secret(self) -> None:
        tokens = CsrfTokens()
        token = tokens.create(tokens.new_secret())
        assert not tokens.verify(tokens.new_secret(), token)

    def test_tampered_token_rejected(self) -> None:
        tokens = CsrfTokens()
        secret = tokens.new_secret()
        token = tokens.create(secret)
        assert not tokens.verify(secret, token[:-1] + ("A" if token[-1] != "A" else "B"))

    def test_missing_values_rejected(self) -> None:
        tokens = CsrfTokens()
        assert not tokens.verify(None, "abc-def")
        assert not tokens.verify("secret", None)
        assert not tokens.verify("secret", "nodash")

    def test_tokens_are_salted(self) -> None:
        tokens = CsrfTokens()
        secret = tokens.new_secret()
        assert tokens.create(secret) != tokens.create(secret)


class TestCsrfCookie:
    """Tests for the secret cookie attributes."""

    def test_dev_cookie_attributes(self, dev_client: TestClient) -> None:
        cookies = _set_cookies(dev_client.get("/health"), "_csrf")
        assert len(cookies) == 1
        cookie = cookies[0].lower()
        assert "httponly" in cookie
        assert "secure" not in cookie
        assert "samesite" not in cookie

    def test_prod_cookie_attributes(self, prod_client: TestClient) -> None:
        cookies = _set_cookies(prod_client.get("/health"), "_csrf")
        assert len(cookies) == 1
        cookie = cookies[0].lower()
        assert "httponly" in cookie
        assert "secure" in cookie
        assert "samesite=lax" in cookie

    def test_cookie_issued_once_per_session(self, dev_client: TestClient) -> None:
        assert _set_cookies(dev_client.get("/health"), "_csrf")
        assert not _set_cookies(dev_client.get("/health"), "_csrf")

    def test_restore_sets_readable_cookie(self, dev_client: TestClient) -> None:
        resp = dev_client.get("/api/csrf/restore")
        token = resp.json()["XSRF-Token"]
        cookies = _set_cookies(resp, "XSRF-TOKEN")
        assert len(cookies) == 1
        assert token in cookies[0]
        assert "httponly" not in cookies[0].lower()


class TestCsrfEnforcement:
    """State-changing requests need a matching token."""

    def test_prod_post_without_token_is_forbidden(self, prod_client: TestClient) -> None:
        resp = prod_client.post(
            "/api/bookings",
            json={"userId": 1, "campsiteId": 1, "checkIn": "2022-06-01", "checkOut": "2022-06-03"},
        )
        assert resp.status_code == 403
        body = resp.json()
        assert body["title"] == "Authorization Error"
        assert body["message"] == "invalid csrf token"
        assert body["stack"] is None

    def test_rejection_still_issues_secret_cookie(self, prod_client: TestClient) -> None:
        resp = prod_client.post("/api/bookings", json={})
        assert resp.status_code == 403
        cookies = _set_cookies(resp, "_csrf")
        assert len(cookies) == 1
        assert "httponly" in cookies[0].lower()

        # 之后沿用同一个 secret，不再重新下发
        token = prod_client.get("/api/csrf/restore").json()["XSRF-Token"]
        resp = prod_client.delete("/api/bookings/999", headers={"XSRF-Token": token})
        assert resp.status_code == 404
        assert not _set_cookies(resp, "_csrf")

    def test_dev_post_without_token_is_forbidden(self, dev_client: TestClient) -> None:
        resp = dev_client.delete("/api/bookings/1")
        assert resp.status_code == 403
        assert isinstance(resp.json()["stack"], str)

    def test_wrong_token_is_forbidden(self, dev_client: TestClient) -> None:
        dev_client.get("/api/csrf/restore")
        resp = dev_client.delete("/api/bookings/1", headers={"X-CSRF-Token": "deadbeef-nottherightdigest"})
        assert resp.status_code == 403

    def test_unknown_route_still_checks_token(self, prod_client: TestClient) -> None:
        assert prod_client.post("/api/nowhere").status_code == 403

    def test_valid_token_reaches_dispatcher(self, dev_client: TestClient, csrf_headers) -> None:
        headers = csrf_headers(dev_client)
        resp = dev_client.delete("/api/bookings/999", headers=headers)
        # 通过 csrf 后由路由返回 404
        assert resp.status_code == 404
        assert resp.json()["title"] == "Resource Not Found"

    def test_valid_token_in_prod(self, prod_client: TestClient, csrf_headers) -> None:
        headers = csrf_headers(prod_client)
        resp = prod_client.delete("/api/bookings/999", headers=headers)
        assert resp.status_code == 404

    def test_token_accepted_from_query(self, dev_client: TestClient) -> None:
        token = dev_client.get("/api/csrf/restore").json()["XSRF-Token"]
        resp = dev_client.delete(f"/api/bookings/999?_csrf={token}")
        assert resp.status_code == 404
