from __future__ import annotations

from apibench.config import FrameworkTarget
from apibench.scenarios.base import Scenario

RUSTAPI = "rustapi"
ACTIX = "actix"

CREATE_USER_PAYLOAD = {"name": "Bench User", "email": "bench@example.com"}


def default_targets() -> list[FrameworkTarget]:
    return [
        FrameworkTarget(RUSTAPI, "http://127.0.0.1:8080"),
        FrameworkTarget(ACTIX, "http://127.0.0.1:8081"),
    ]


def builtin_scenarios() -> list[Scenario]:
    return [
        Scenario("plain_text", "GET", "/", description="Plain text hello"),
        Scenario("json", "GET", "/json", description="Small JSON object"),
        Scenario("path_param", "GET", "/users/1", description="JSON with a path parameter"),
        Scenario(
            "user_post",
            "GET",
            "/users/1/posts/1",
            description="JSON with nested path parameters",
            paths={RUSTAPI: "/posts/1"},
        ),
        Scenario(
            "users_list",
            "GET",
            "/users",
            description="JSON list of 10 users",
            paths={RUSTAPI: "/users-list"},
        ),
        Scenario(
            "create_user",
            "POST",
            "/users",
            description="JSON body parsing",
            paths={RUSTAPI: "/create-user"},
            payload=CREATE_USER_PAYLOAD,
        ),
    ]
