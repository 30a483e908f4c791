"""Tests for the API document built from route rules."""

from __future__ import annotations

from lindyhop import LindyHop
from lindyhop.config import Settings
from lindyhop.docs import describe_rule, document_path
from lindyhop.validation import NumberRule, StringRule


def declare_users(api: LindyHop, users_model) -> None:
    users = api.router("/users")
    users.post("/foo", "This is what this endpoint does").params(lambda validate: (
        validate.string("type", "The type of foo you want to get").optional().trim().lower_case(),
        validate.number("bar").min(0).max(100),
        validate.object("userId", "The id of the user for something").model(users_model).as_("user"),
    )).run(lambda params: params)
    users.get("/{user_id:int}", "Fetch one user").params(lambda validate: (
        validate.number("user_id").in_("path"),
        validate.string("fields").array().optional(),
    )).outputs("yaml").run(lambda params: params)


def test_document_shape(api, users_model):
    declare_users(api, users_model)

    doc = api.docs()

    assert doc["swagger"] == "2.0"
    assert doc["info"] == {"title": "API", "version": "0.1.0"}
    assert doc["basePath"] == "/"
    assert set(doc["paths"]) == {"/users/foo", "/users/{user_id}"}


def test_post_parameters_default_to_form_data(api, users_model):
    declare_users(api, users_model)

    operation = api.docs()["paths"]["/users/foo"]["post"]

    assert operation["description"] == "This is what this endpoint does"
    assert operation["produces"] == ["application/json"]
    assert operation["parameters"] == [
        {
            "name": "type",
            "in": "formData",
            "description": "The type of foo you want to get",
            "required": False,
            "type": "string",
        },
        {
            "name": "bar",
            "in": "formData",
            "required": True,
            "type": "number",
            "minimum": 0,
            "maximum": 100,
        },
        {
            "name": "userId",
            "in": "formData",
            "description": "The id of the user for something",
            "required": True,
            "type": "string",
        },
    ]
    assert set(operation["responses"]) == {"200", "400"}


def test_get_parameters_and_explicit_location(api, users_model):
    declare_users(api, users_model)

    operation = api.docs()["paths"]["/users/{user_id}"]["get"]

    assert operation["produces"] == ["application/x-yaml"]
    user_id, fields = operation["parameters"]
    assert user_id == {"name": "user_id", "in": "path", "required": True, "type": "number"}
    assert fields == {
        "name": "fields",
        "in": "query",
        "required": False,
        "type": "array",
        "items": {"type": "string"},
        "collectionFormat": "multi",
    }


def test_docs_need_no_request_and_are_stable(api, users_model):
    declare_users(api, users_model)
    assert api.docs() == api.docs()


def test_router_docs(api, users_model):
    declare_users(api, users_model)
    router = api.routers[0]

    paths = router.docs()

    assert list(paths["/users/foo"]) == ["post"]
    assert paths["/users/foo"]["post"] == router.routes[0].describe()


def test_settings_drive_document_info(app):
    settings = Settings(_env_file=None, DOCS_TITLE="Users API", DOCS_VERSION="2.1.0", DOCS_BASE_PATH="/v2")
    api = LindyHop(app, settings)

    doc = api.docs()

    assert doc["info"] == {"title": "Users API", "version": "2.1.0"}
    assert doc["basePath"] == "/v2"
    assert doc["paths"] == {}


def test_describe_rule_details():
    rule = NumberRule("limit", "Page size").optional().default(20).integer().min(1)
    assert describe_rule(rule, "GET").model_dump(by_alias=True, exclude_none=True) == {
        "name": "limit",
        "in": "query",
        "description": "Page size",
        "required": False,
        "type": "integer",
        "minimum": 1,
        "default": 20,
    }

    header = StringRule("x-token").in_("header")
    assert describe_rule(header, "POST").location == "header"


def test_document_path_strips_converters():
    assert document_path("/users/{user_id:int}/files/{name:path}") == "/users/{user_id}/files/{name}"


def test_serve_docs(api, client, users_model):
    declare_users(api, users_model)
    api.serve_docs("/docs.json")

    res = client.get("/docs.json")

    assert res.status_code == 200
    assert set(res.json()["paths"]) == {"/users/foo", "/users/{user_id}"}


def test_path_parameters_are_always_required():
    rule = NumberRule("user_id").in_("path").optional()
    assert describe_rule(rule, "GET").required is True
