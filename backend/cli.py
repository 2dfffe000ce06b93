import click
import logging
from flask import current_app
from flask.cli import with_appcontext
from .models import db

logger = logging.getLogger(__name__)


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the participants and participant_images tables."""
    logger.info("Starting database initialization")
    db.create_all()
    logger.info("Database tables created successfully")
    click.echo('Initialized the database.')


@click.command('check-image-integrity')
@click.option('--participant', 'participant_id', help='Only check images of this participant id')
@with_appcontext
def check_image_integrity_command(participant_id):
    """Check that every recorded image exists in storage with the recorded size and hash."""
    from .services.image_integrity import check_images

    storage = current_app.extensions['image_storage']
    logger.info(f"Starting image integrity check (backend={storage.name}, participant={participant_id})")
    reports = check_images(storage, participant_id=participant_id)

    issues_found = 0
    for report in reports:
        if report.exists and report.size_matches and report.hash_matches:
            continue
        issues_found += 1
        click.echo(f"Integrity issue with image {report.image_id} ({report.image_type}) of participant {report.participant_id}:")
        if not report.exists:
            click.echo(f"  Missing from storage: {report.filename}")
        elif report.error:
            click.echo(f"  {report.error}")
        else:
            if not report.size_matches:
                click.echo("  Size mismatch")
            if not report.hash_matches:
                click.echo("  Hash mismatch")

    if issues_found == 0:
        click.echo(f"All {len(reports)} images passed integrity check")
    else:
        click.echo(f"Found {issues_found} integrity issues in {len(reports)} images")
        raise click.exceptions.Exit(1)
