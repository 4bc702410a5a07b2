"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs one segment of one job from the command line.
"""

import argparse
import logging

import uvicorn

from audit_pipeline.bootstrap import bootstrap_create_application, bootstrap_create_dispatcher
from audit_pipeline.config import config_load_settings
from audit_pipeline.jobs import UnknownSegmentError
from audit_pipeline.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when a segment run cannot be completed.
    """

    argument_parser = argparse.ArgumentParser(description="Audit segment pipeline runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "segment-run"),
        help="Runtime command: `api` starts server, `segment-run` re-runs one segment of one job",
        type=str,
    )
    argument_parser.add_argument(
        "--job-id",
        dest="job_id",
        type=str,
        help="Job identifier for `segment-run`",
    )
    argument_parser.add_argument(
        "--stage",
        dest="stage",
        type=str,
        help="Stage name for `segment-run`, for example `demographics`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    configure_logging(settings.log_level)

    if parsed_arguments.command == "segment-run":
        if not parsed_arguments.job_id or not parsed_arguments.stage:
            argument_parser.error("`segment-run` requires --job-id and --stage")

        dispatcher = bootstrap_create_dispatcher()
        try:
            outcome = dispatcher.dispatcher_run_manual(job_id=parsed_arguments.job_id, stage=parsed_arguments.stage)
        except UnknownSegmentError as error:
            logger.error("%s, known stages: %s", error, ", ".join(dispatcher.dispatcher_stages()))
            raise SystemExit(1) from error

        print(f"SEGMENT_RUN job_id={outcome.job_id} stage={outcome.stage} outcome={outcome.detail}")
        if not outcome.acknowledge:
            raise SystemExit(1)
        return

    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
