from datetime import datetime, timezone

from flask import Flask, render_template, request

from .app_utils import make_error, make_ok, public_error
from .config import setup_logger
from .services.vod_service import VodService, build_default_service

app = Flask(__name__)

logger = setup_logger(__name__)

_service_singleton = None


def _get_service() -> VodService:
    global _service_singleton
    if _service_singleton is None:
        _service_singleton = build_default_service()
        logger.info(
            "vod_service ready cache_dir=%s workers=%d deadline=%s",
            _service_singleton.cache.cache_dir,
            _service_singleton.max_workers,
            _service_singleton.deadline,
        )
    return _service_singleton


def _query_args():
    return (
        request.args.get("user"),
        request.args.get("before"),
        request.args.get("season"),
    )


def _log_failure(exc: BaseException) -> None:
    logger.error("Unhandled exception: %s", exc, exc_info=exc)


@app.route("/", methods=["GET"])
def index():
    """Render the death VOD list for the requested page."""
    user, before, season = _query_args()
    try:
        page = _get_service().get_vods(user, before, season)
    except Exception as exc:
        status, message, should_log = public_error(exc)
        if should_log:
            _log_failure(exc)
        return (
            render_template(
                "index.html",
                user=user or "",
                vods=[],
                last_match_id=None,
                season=None,
                error=message,
            ),
            status,
        )

    return render_template(
        "index.html",
        user=user or "",
        vods=page.events,
        last_match_id=page.next_cursor,
        season=page.season,
        error=None,
    )


@app.route("/api/vods", methods=["GET"])
def api_vods():
    user, before, season = _query_args()
    try:
        page = _get_service().get_vods(user, before, season)
    except Exception as exc:
        status, message, should_log = public_error(exc)
        if should_log:
            _log_failure(exc)
        return make_error(error=message, message=message, status_code=status)
    return make_ok(page.to_dict())


@app.route("/health", methods=["GET"])
def health():
    return make_ok({"ok": True, "ts": datetime.now(timezone.utc).isoformat()}, message="OK")


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
