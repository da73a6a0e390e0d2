import logging

import uvicorn

from photoblog.app import create_app
from photoblog.config import configure_logging, load_settings


def main() -> None:
    # Startup failures (config, database, migrations) are not caught: the
    # process exits non-zero and the supervisor restarts it.
    settings = load_settings()
    configure_logging(settings.log_level)
    logging.getLogger("api").info(
        "Starting photoblog API on %s:%s", settings.host, settings.port
    )

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        reload=False,
        access_log=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
