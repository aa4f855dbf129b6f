"""Flask web UI rendering the entity forms and record tables."""

import logging
import os

from flask import (
    Blueprint,
    Flask,
    abort,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from .client import EntityStoreClient
from .config import Config
from .controller import FormController
from .enums import FieldType, Mode

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__, template_folder="templates")


def create_app(config=None, client: EntityStoreClient | None = None, controller: FormController | None = None):
    """Create and configure Flask application.

    Args:
        config: Application configuration object (optional, will load from file if not provided)
        client: Backend client (optional, built from ``config.api`` if not provided)
        controller: Form controller (optional, built from config and client if not provided)

    Returns:
        Configured Flask application
    """
    if config is None:
        config = Config.load(os.environ.get("CONFIG_FILE", "config.toml"))

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.web.secret_key
    app.config["config"] = config
    app.config["controller"] = controller or FormController.from_config(config, client)

    app.register_blueprint(bp)

    @app.errorhandler(404)
    def not_found(error):
        return render_template("404.html"), 404

    return app


def _controller() -> FormController:
    return current_app.config["controller"]


def _activate(key: str) -> FormController:
    """Make ``key`` the active entity, switching only when it changes."""
    ctrl = _controller()
    if key not in ctrl.registry:
        abort(404)
    if ctrl.session.active != key:
        ctrl.switch_entity(key)
    return ctrl


def _render_entity(ctrl: FormController, status: int = 200):
    config = current_app.config["config"]
    return (
        render_template(
            "entity.html",
            api_base=config.api.base_url,
            entities=ctrl.registry.items(),
            active=ctrl.session.active,
            schema=ctrl.schema,
            state=ctrl.session,
            editing=ctrl.mode == Mode.EDITING,
            rows=ctrl.rows(),
            notice=ctrl.pop_notice(),
            options=ctrl.input_options,
            FieldType=FieldType,
        ),
        status,
    )


@bp.route("/")
def index():
    return redirect(url_for("web.entity", key=_controller().registry.default_key))


@bp.route("/<key>")
def entity(key: str):
    """Render the form and record table of one entity."""
    ctrl = _controller()
    if key not in ctrl.registry:
        abort(404)
    if ctrl.session.active == key:
        ctrl.reload()
    else:
        ctrl.switch_entity(key)
    return _render_entity(ctrl)


@bp.route("/<key>", methods=["POST"])
def submit(key: str):
    """Apply the posted form values and create or update the record."""
    ctrl = _activate(key)
    for name in ctrl.schema.field_names:
        ctrl.set_value(name, request.form.get(name, ""))

    if ctrl.submit():
        return redirect(url_for("web.entity", key=key))
    return _render_entity(ctrl, status=400)


@bp.route("/<key>/edit/<record_id>")
def edit(key: str, record_id: str):
    ctrl = _activate(key)
    if ctrl.find_record(record_id) is None:
        ctrl.reload()
    ctrl.edit(record_id)
    return _render_entity(ctrl)


@bp.route("/<key>/cancel", methods=["POST"])
def cancel(key: str):
    ctrl = _activate(key)
    ctrl.cancel()
    return redirect(url_for("web.entity", key=key))


@bp.route("/<key>/delete/<record_id>")
def confirm_delete(key: str, record_id: str):
    """Ask the user to confirm an irreversible delete."""
    ctrl = _activate(key)
    record = ctrl.find_record(record_id)
    if record is None:
        ctrl.reload()
        record = ctrl.find_record(record_id)
    if record is None:
        abort(404)
    return render_template(
        "confirm_delete.html",
        active=key,
        schema=ctrl.schema,
        record_id=record_id,
        values=[(f.label, ctrl.display_value(f, record)) for f in ctrl.schema.fields],
    )


@bp.route("/<key>/delete/<record_id>", methods=["POST"])
def delete(key: str, record_id: str):
    ctrl = _activate(key)
    ctrl.delete(record_id, confirmed=request.form.get("confirm") == "yes")
    return redirect(url_for("web.entity", key=key))


@bp.route("/api/schemas")
def schemas():
    """GET API endpoint - returns every entity schema."""
    registry = _controller().registry
    return jsonify(
        {key: schema.model_dump(mode="json", by_alias=True) for key, schema in registry.items()}
    )
