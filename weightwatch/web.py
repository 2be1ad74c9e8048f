import logging
import time
from typing import Optional

from flask import Flask, abort, redirect, render_template, request, send_file, url_for

from weightwatch.config import Settings, load_settings
from weightwatch.domains.weight import WeightService
from weightwatch.errors import WeightWatchError

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, service: Optional[WeightService] = None) -> Flask:
    settings = settings or load_settings()
    service = service or WeightService(settings)

    app = Flask(__name__)

    @app.route("/")
    def index():
        render_error = None
        try:
            service.render_chart()
        except WeightWatchError as e:
            # keep serving the page; the previous image (if any) stays up
            logger.error("Chart render failed: %s", e.message)
            render_error = e.message
        return render_template(
            "index.html",
            rows=service.recent(),
            render_error=render_error,
            has_image=settings.output_image.exists(),
            stamp=int(time.time()),
        )

    @app.route("/weight", methods=["GET", "POST"])
    def weight():
        service.add(request.values.get("weight"), request.values.get("date"))
        return redirect(url_for("index"), code=303)

    @app.route("/favicon.ico")
    def favicon():
        return "", 204

    @app.route("/chart.png")
    def chart():
        if not settings.output_image.exists():
            abort(404)
        return send_file(settings.output_image, mimetype="image/png", max_age=0)

    @app.errorhandler(WeightWatchError)
    def handle_weightwatch_error(e):
        if e.http_status >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return render_template("error.html", message=e.message), e.http_status

    @app.errorhandler(404)
    def not_found(e):
        return render_template("error.html", message="Nothing here."), 404

    return app
