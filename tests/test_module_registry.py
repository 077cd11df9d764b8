from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from docportal.main import create_app
from docportal.modules.registry import MODULES, ModuleHandle, initialize_modules


def _ping_module() -> ModuleHandle:
    router = APIRouter(prefix="/ping")

    @router.get("")
    def ping():
        return {"pong": True}

    return ModuleHandle("ping", router)


def _broken_module() -> ModuleHandle:
    raise RuntimeError("missing credentials")


def test_failing_module_is_recorded_and_others_load():
    app = FastAPI()
    results = initialize_modules(app, {"ping": _ping_module, "broken": _broken_module})

    by_name = {r.name: r for r in results}
    assert by_name["ping"].ok
    assert by_name["ping"].handle.name == "ping"
    assert not by_name["broken"].ok
    assert by_name["broken"].error == "RuntimeError: missing credentials"
    assert app.state.modules == results

    assert TestClient(app).get("/ping").json() == {"pong": True}


def test_health_reports_degraded_module():
    registry = {"health": MODULES["health"], "broken": _broken_module}
    app = create_app(registry)

    body = TestClient(app).get("/api/health").json()

    assert body["status"] == "degraded"
    assert body["modules"]["health"] == "ok"
    assert "missing credentials" in body["modules"]["broken"]


def test_default_registry_loads_everything(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert set(body["modules"]) == set(MODULES)


def test_init_results_are_logged_at_info(caplog):
    app = FastAPI()
    with caplog.at_level("INFO", logger="docportal.modules"):
        results = initialize_modules(app, {"ping": _ping_module, "broken": _broken_module})

    assert [r.ok for r in results] == [True, False]
    logged = {r.getMessage(): r for r in caplog.records if r.name == "docportal.modules"}
    assert logged["module.initialized"].module_name == "ping"
    assert logged["module.init_failed"].module_name == "broken"
    assert logged["module.init_failed"].exc_info is not None


def test_app_builds_with_info_logging(caplog):
    with caplog.at_level("INFO"):
        app = create_app()

    assert {m.name for m in app.state.modules} == set(MODULES)
    assert all(m.ok for m in app.state.modules)
