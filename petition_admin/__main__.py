"""
Main entry point for running the petition admin server.
"""

import uvicorn

from petition_admin.settings import Settings


def main():
    """Run the admin server."""
    settings = Settings()
    uvicorn.run(
        "petition_admin.main:app",
        host=settings.get_app_host(),
        port=settings.get_app_port(),
        reload=settings.get_app_reload(),
        log_level=settings.get_log_level().lower(),
    )


if __name__ == "__main__":
    main()
