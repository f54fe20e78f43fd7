"""CLI bootstrap: settings, logging, database and notifier wiring."""

from approval_config import get_settings
from approval_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from approval_kernel.db.sample_data import seed_sample_data
from approval_kernel.logging_config import configure_logging, get_logger
from approval_notifications import EmailConfig, EmailNotifier, SlackConfig, SlackNotifier

logger = get_logger("cli")


def load_settings(args):
    """Resolve settings from defaults, config file, environment and global flags."""
    settings = get_settings(config_path=args.config)
    return settings.with_overrides(
        company_name=args.company,
        departments=args.departments,
        database_url=args.database_url,
        slack_connection_string=args.slack_connection_string,
        email_connection_string=args.email_connection_string,
        log_level="DEBUG" if args.verbose else None,
    )


def init_logging(settings):
    configure_logging(level=settings.log_level_number)


def init_database(settings):
    """Create the engine and tables; seed the reference company when enabled."""
    init_engine_from_url(settings.database_url, echo=settings.database_echo)
    create_tables()
    if settings.seed_sample_data:
        with session_scope() as session:
            seed_sample_data(session)


def build_notifiers(settings):
    """Return (slack, email) notification collaborators."""
    slack = SlackNotifier(SlackConfig(connection_string=settings.slack_connection_string))
    email = EmailNotifier(EmailConfig(connection_string=settings.email_connection_string))
    return slack, email


def describe_settings(settings):
    """Configuration summary printed in verbose mode; connection strings truncated."""
    return [
        "Configuration:",
        f"  Company:          {settings.company_name}",
        f"  Departments:      {', '.join(settings.departments) or '-'}",
        f"  Database:         {settings.database_url}",
        f"  Slack connection: {_mask(settings.slack_connection_string)}",
        f"  Email connection: {_mask(settings.email_connection_string)}",
    ]


def _mask(value):
    if len(value) <= 8:
        return value
    return value[:8] + "..."
