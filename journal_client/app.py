import logging
from datetime import datetime, timezone

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from journal_client import config
from journal_client.api_service import JournalApi
from journal_client.controller import ControllerRegistry
from journal_client.views import build_view

logger = logging.getLogger(__name__)


def create_app(api_url=None, transport=None, secret_key=None, max_sessions=None):
    """Build the journal client app. `transport` lets tests fake the remote API."""
    logging.basicConfig(
        level=config.resolve_log_level(config.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not isinstance(logging.getLevelName(config.LOG_LEVEL), int):
        logger.warning("Unknown LOG_LEVEL %r, using INFO", config.LOG_LEVEL)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = secret_key or config.SECRET_KEY
    app.config["API_BASE_URL"] = (api_url or config.API_BASE_URL).rstrip("/")

    registry = ControllerRegistry(
        lambda: JournalApi(app.config["API_BASE_URL"], transport=transport),
        max_sessions=max_sessions or config.MAX_SESSIONS,
    )
    app.extensions["journal_registry"] = registry

    def session_id():
        if "client_id" not in session:
            session["client_id"] = registry.new_session_id()
        return session["client_id"]

    async def current_controller():
        """The session's controller; a new one is mounted (entries fetched) first."""
        controller, created = registry.get_or_create(session_id())
        if created:
            await controller.mount()
        return controller

    # ---------- Routes ----------

    @app.route("/", methods=["GET"])
    async def index():
        controller = await current_controller()
        return render_template("index.html", view=build_view(controller.state))

    @app.route("/entries", methods=["POST"])
    async def submit_entry():
        """Copy the form into the draft, then save it (blank drafts are ignored)."""
        controller = await current_controller()
        controller.set_draft_text(request.form.get("text", ""))
        controller.set_draft_mood(request.form.get("mood", ""))
        await controller.submit_entry()
        return redirect(url_for("index"))

    @app.route("/memory-options", methods=["POST"])
    async def load_memory_options():
        controller = await current_controller()
        await controller.load_memory_options()
        return redirect(url_for("index"))

    @app.route("/reflect/<memory_id>", methods=["POST"])
    async def request_reflection(memory_id):
        controller = await current_controller()
        option = controller.memory_option_by_key(memory_id)
        # Keep the server's id type (ints stay ints) when the memory is known.
        await controller.request_reflection(option.id if option else memory_id)
        return redirect(url_for("index"))

    @app.route("/reload", methods=["POST"])
    def reload():
        """Drop this session's in-memory state, like reloading the page."""
        registry.discard(session_id())
        return redirect(url_for("index"))

    @app.route("/state", methods=["GET"])
    async def state():
        controller = await current_controller()
        return jsonify(controller.state.to_json()), 200

    @app.route("/health")
    def health():
        """Simple health check."""
        return jsonify({
            "ok": True,
            "api_url": app.config["API_BASE_URL"],
            "time": datetime.now(timezone.utc).isoformat(),
        }), 200

    return app


if __name__ == "__main__":
    create_app().run(
        host="0.0.0.0",
        port=config.PORT,
        debug=True
    )
