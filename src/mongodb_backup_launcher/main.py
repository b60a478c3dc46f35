"""Command-line entrypoint for the MongoDB backup launcher.

Run once per desired backup, typically from a Kubernetes CronJob:

    mongodb-backup-launcher --log-level debug

## Exit codes

- `0`: Job submitted
- `1`: Configuration missing or invalid
- `2`: MongoDB or Kubernetes client could not be created
- `3`: Unexpected error
- `10`-`17`: Pipeline failure, one code per failure kind (see
  `core.exceptions`)
"""

import logging
from typing import Annotated

import typer

from mongodb_backup_launcher.config import Settings
from mongodb_backup_launcher.core.exceptions import (
    UNEXPECTED_ERROR_EXIT_CODE,
    ConfigurationError,
    LauncherError,
)
from mongodb_backup_launcher.core.services import BackupLauncherService
from mongodb_backup_launcher.foundation.logger import configure_logging

logger = logging.getLogger("backup_launcher.main")

app = typer.Typer(pretty_exceptions_enable=False, add_completion=False)


def _fail(action: str, error: LauncherError) -> typer.Exit:
    logger.error(
        action,
        extra={
            "error": {"stage": error.stage, "message": str(error), "exit_code": error.exit_code}
        },
    )
    return typer.Exit(code=error.exit_code)


@app.command()
def launch(
    log_level: Annotated[
        str | None,
        typer.Option(envvar="LOG_LEVEL", help="debug, info, warn or error."),
    ] = None,
) -> None:
    """Select a SECONDARY replica and submit a backup Job next to it."""
    configure_logging(log_level)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise _fail("creating config", ConfigurationError(str(e))) from e

    try:
        service = BackupLauncherService.from_settings(settings)
    except LauncherError as e:
        raise _fail("creating service", e) from e
    except Exception as e:
        logger.exception("creating service")
        raise typer.Exit(code=UNEXPECTED_ERROR_EXIT_CODE) from e

    try:
        job = service.run(timeout=settings.request_timeout)
    except LauncherError as e:
        raise _fail("running the service", e) from e
    except Exception as e:
        logger.exception("running the service")
        raise typer.Exit(code=UNEXPECTED_ERROR_EXIT_CODE) from e
    finally:
        service.close()

    logger.info(
        "Backup Job submitted",
        extra={"job_name": job.name, "namespace": job.namespace, "uid": job.uid},
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
