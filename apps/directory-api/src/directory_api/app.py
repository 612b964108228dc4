from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

from devkit.observability import configure_otel, configure_probe_access_log_filter
from devkit.redis import AsyncRedisManager
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from geo_engine import GEOLOCATION_OPTIONS, GeolocationErrorReason, LocationUnavailableError

from directory_api.dependencies import get_directory_store, get_redis_manager, load_directory_store
from directory_api.errors import ApiError
from directory_api.middleware import ObservabilityMiddleware
from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE
from directory_api.observability import (
    CompositeMetricsCollector,
    InMemoryMetricsCollector,
    PrometheusMetricsCollector,
)
from directory_api.repositories.base import BackendError
from directory_api.response import error_response, success_response
from directory_api.routers.admin_banners import router as admin_banners_router
from directory_api.routers.admin_hospitals import router as admin_hospitals_router
from directory_api.routers.auth import router as auth_router
from directory_api.routers.banners import router as banners_router
from directory_api.routers.hospitals import router as hospitals_router
from directory_api.routers.realtime import router as realtime_router
from directory_api.store import DirectoryStore

logger = logging.getLogger(__name__)

LOCATION_ERRORS: dict[GeolocationErrorReason, tuple[str, str]] = {
    GeolocationErrorReason.PERMISSION_DENIED: ("LOCATION_PERMISSION_DENIED", "Location permission denied"),
    GeolocationErrorReason.UNSUPPORTED: ("LOCATION_UNSUPPORTED", "Geolocation is not supported"),
    GeolocationErrorReason.POSITION_UNAVAILABLE: ("LOCATION_UNAVAILABLE", "Location is unavailable"),
    GeolocationErrorReason.TIMEOUT: ("LOCATION_TIMEOUT", "Location request timed out"),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = await load_directory_store()
    app.state.prom_metrics.set_record_count(HOSPITALS_TABLE, len(store.state.hospitals))
    app.state.prom_metrics.set_record_count(BANNERS_TABLE, len(store.state.banners))
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Banten Hospital Directory API", version="0.1.0", lifespan=lifespan)
    configure_otel(service_name="banten-directory-api")
    configure_probe_access_log_filter()
    app.state.request_metrics = InMemoryMetricsCollector()
    app.state.prom_metrics = PrometheusMetricsCollector()
    app.state.composite_metrics = CompositeMetricsCollector(
        [app.state.request_metrics, app.state.prom_metrics]
    )
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)
    app.include_router(hospitals_router)
    app.include_router(banners_router)
    app.include_router(auth_router)
    app.include_router(admin_hospitals_router)
    app.include_router(admin_banners_router)
    app.include_router(realtime_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz(
        store: DirectoryStore = Depends(get_directory_store),
        redis: AsyncRedisManager | None = Depends(get_redis_manager),
    ) -> JSONResponse:
        checks = {"directory": store.state.last_error is None}
        if redis is not None:
            checks["redis"] = await redis.is_reachable()
        if not all(checks.values()):
            return JSONResponse(status_code=503, content=error_response("NOT_READY", "Dependencies are not ready"))
        return JSONResponse(content=success_response({"status": "ready", "checks": checks}, meta={}))

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.get("/dev/directory-test", response_class=HTMLResponse)
    async def directory_test_page() -> str:
        return DIRECTORY_TEST_PAGE.replace("__GEOLOCATION_OPTIONS__", json.dumps(GEOLOCATION_OPTIONS))

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=422,
            content=error_response("VALIDATION_ERROR", message, details),
        )

    @app.exception_handler(LocationUnavailableError)
    async def handle_location_error(_: Request, exc: LocationUnavailableError) -> JSONResponse:
        code, message = LOCATION_ERRORS[exc.reason]
        return JSONResponse(status_code=422, content=error_response(code, message))

    @app.exception_handler(BackendError)
    async def handle_backend_error(_: Request, exc: BackendError) -> JSONResponse:
        logger.error("backend_error", extra={"component": "http", "code": exc.code, "error": exc.message})
        return JSONResponse(status_code=502, content=error_response("BACKEND_ERROR", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("unexpected_error", extra={"component": "http"})
        return JSONResponse(status_code=500, content=error_response("INTERNAL_ERROR", "Internal server error"))

    return app


DIRECTORY_TEST_PAGE = """
<!doctype html>
<html lang="id">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Banten Hospital Directory Test</title>
    <style>
      body { font-family: sans-serif; max-width: 900px; margin: 24px auto; padding: 0 12px; }
      input, button, select, textarea { width: 100%; margin-top: 8px; padding: 8px; box-sizing: border-box; }
      button { cursor: pointer; }
      .row { display: grid; grid-template-columns: 1fr 1fr; gap: 8px; }
      .muted { color: #666; font-size: 13px; }
      pre { background: #111; color: #eaeaea; padding: 12px; border-radius: 8px; overflow: auto; }
      h3 { margin-top: 20px; }
    </style>
  </head>
  <body>
    <h1>Banten Hospital Directory Quick Test</h1>
    <p class="muted">Swagger: <a href="/docs" target="_blank">/docs</a></p>

    <h3>Hospitals</h3>
    <label>City</label>
    <select id="city"></select>
    <label>Search</label>
    <input id="query" placeholder="nama, alamat, fasilitas, layanan" />
    <div class="row">
      <button onclick="listHospitals()">GET /v1/hospitals</button>
      <button onclick="nearest()">Use my location</button>
    </div>
    <p class="muted" id="location">location: unknown</p>
    <button onclick="listBanners()">GET /v1/banners</button>

    <h3>Admin</h3>
    <label>Email</label>
    <input id="email" value="admin@example.com" />
    <label>Password</label>
    <input id="password" type="password" value="password123" />
    <div class="row">
      <button onclick="login()">Login</button>
      <button onclick="session()">Session</button>
    </div>
    <label>Access Token</label>
    <textarea id="access" rows="3"></textarea>

    <h3>Response</h3>
    <pre id="out">ready</pre>

    <script>
      const GEOLOCATION_OPTIONS = __GEOLOCATION_OPTIONS__;
      let position = null;

      async function req(path, method, body=null) {
        const headers = { "Content-Type": "application/json" };
        const token = document.getElementById("access").value.trim();
        if (token) headers["Authorization"] = "Bearer " + token;
        const res = await fetch(path, { method, headers, body: body ? JSON.stringify(body) : undefined });
        const text = await res.text();
        document.getElementById("out").textContent = `HTTP ${res.status}\\n${text}`;
        try { return JSON.parse(text); } catch { return null; }
      }

      function hospitalQuery(extra) {
        const params = new URLSearchParams(extra || {});
        const city = document.getElementById("city").value;
        const query = document.getElementById("query").value.trim();
        if (city && !params.has("city")) params.set("city", city);
        if (query) params.set("query", query);
        if (position) {
          params.set("lat", position.lat);
          params.set("lng", position.lng);
        }
        return params.toString();
      }

      async function loadCities() {
        const data = await req("/v1/cities", "GET");
        if (!data || !data.success) return;
        const select = document.getElementById("city");
        select.innerHTML = data.data.map((city) => `<option>${city}</option>`).join("");
      }

      async function listHospitals() { await req("/v1/hospitals?" + hospitalQuery(), "GET"); }
      async function listBanners() { await req("/v1/banners", "GET"); }

      function nearest() {
        if (!navigator.geolocation) {
          req("/v1/hospitals?" + hospitalQuery({ city: "Lokasi Terdekat", geolocation_error: "UNSUPPORTED" }), "GET");
          return;
        }
        navigator.geolocation.getCurrentPosition(
          (pos) => {
            position = { lat: pos.coords.latitude, lng: pos.coords.longitude };
            document.getElementById("location").textContent = `location: ${position.lat}, ${position.lng}`;
            req("/v1/hospitals?" + hospitalQuery({ city: "Lokasi Terdekat" }), "GET");
          },
          (err) => {
            req("/v1/hospitals?" + hospitalQuery({ city: "Lokasi Terdekat", geolocation_error: String(err.code) }), "GET");
          },
          GEOLOCATION_OPTIONS,
        );
      }

      async function login() {
        const email = document.getElementById("email").value.trim();
        const password = document.getElementById("password").value;
        const data = await req("/v1/auth/login", "POST", { email, password });
        if (data && data.success) {
          document.getElementById("access").value = data.data.access_token || "";
        }
      }
      async function session() { await req("/v1/auth/session", "GET"); }

      loadCities();
    </script>
  </body>
</html>
"""


app = create_app()
