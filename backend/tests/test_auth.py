from datetime import datetime, timedelta, timezone

import jwt
from flask import Flask, g, jsonify

from utils.auth import (
    ROLE_ADMIN,
    generate_token,
    is_admin,
    require_admin,
    require_auth,
    verify_token,
)


def _build_test_app():
    app = Flask(__name__)
    app.config.update(
        JWT_SECRET="unit-test-secret",
        JWT_ALGORITHM="HS256",
        JWT_EXPIRATION_HOURS=1,
    )

    @app.route("/viewer")
    @require_auth
    def viewer_view():
        return jsonify({"sub": g.current_user["sub"]})

    @app.route("/admin")
    @require_admin
    def admin_view():
        return jsonify({"role": g.current_user["role"]})

    return app


def test_token_round_trip_keeps_claims():
    app = _build_test_app()
    with app.app_context():
        token = generate_token("owner@example.com", role=ROLE_ADMIN)
        claims = verify_token(token)

    assert claims["sub"] == "owner@example.com"
    assert claims["role"] == "admin"
    assert is_admin(claims)


def test_expired_and_foreign_tokens_are_rejected():
    app = _build_test_app()
    with app.app_context():
        expired = jwt.encode(
            {"sub": "a", "role": "viewer", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            "unit-test-secret",
            algorithm="HS256",
        )
        foreign = jwt.encode({"sub": "a", "role": "admin"}, "someone-elses-secret", algorithm="HS256")

        assert verify_token(expired) is None
        assert verify_token(foreign) is None
        assert verify_token("garbage") is None


def test_require_auth_and_require_admin():
    app = _build_test_app()
    client = app.test_client()
    with app.app_context():
        viewer = generate_token("v@example.com")
        admin = generate_token("a@example.com", role=ROLE_ADMIN)

    assert client.get("/viewer").status_code == 401
    assert client.get("/viewer", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/viewer", headers={"Authorization": "Bearer "}).status_code == 401

    r = client.get("/viewer", headers={"Authorization": f"Bearer {viewer}"})
    assert r.status_code == 200
    assert r.get_json() == {"sub": "v@example.com"}

    r = client.get("/admin", headers={"Authorization": f"Bearer {viewer}"})
    assert r.status_code == 403
    assert r.get_json()["code"] == "ADMIN_REQUIRED"

    r = client.get("/admin", headers={"Authorization": f"Bearer {admin}"})
    assert r.status_code == 200
    assert r.get_json() == {"role": "admin"}
