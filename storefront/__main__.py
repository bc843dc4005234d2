import logging

from storefront.app import create_app
from storefront.models.database import db
from storefront.utils.activity_log import ensure_log_file

logger = logging.getLogger(__name__)


def main():
    app = create_app()
    with app.app_context():
        db.create_all()
    ensure_log_file(app.config["ACTIVITY_LOG_PATH"])

    port = app.config["PORT"]
    logger.info("Server listening on port %s", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
