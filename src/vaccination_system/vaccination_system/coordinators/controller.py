from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.auth import bearer_token
from ..common.payload import json_body
from ..container import Container
from .model import Coordinator


def coordinator_to_json(c: Coordinator) -> dict:
    return {
        "id": c.coordinator_id,
        "name": c.name,
        "email": c.email,
        "school": c.school,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/signup", methods=["POST"], endpoint="auth_signup")
    def signup():
        data = json_body()
        result = container.auth_service.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            school=data.get("school", ""),
        )
        return (
            jsonify(
                {
                    "message": "Coordinator registered successfully",
                    "token": result.token,
                    "coordinator": coordinator_to_json(result.coordinator),
                }
            ),
            201,
        )

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        result = container.auth_service.login(email=data.get("email", ""), password=data.get("password", ""))
        return jsonify(
            {
                "message": "Login successful",
                "token": result.token,
                "coordinator": coordinator_to_json(result.coordinator),
            }
        )

    @app.route("/api/auth/verify", methods=["GET"], endpoint="auth_verify")
    def verify():
        g.coordinator = container.auth_service.resolve_token(bearer_token())
        return jsonify({"coordinator": coordinator_to_json(g.coordinator)})
