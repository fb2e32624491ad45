# seed.py
# Seeds the registry database with the demo certificates.

from flask.cli import with_appcontext
from dateutil import parser
import click

from certchain.models import db, Certificate
from certchain.services.local_store import SAMPLE_CERTIFICATES


def seed_certificates():
    """Inserts the sample certificates that are not already present. Returns how many were added."""
    added = 0
    for sample in SAMPLE_CERTIFICATES:
        if Certificate.query.filter_by(certificate_id=sample['certificateId']).first():
            continue
        cert = Certificate(
            certificate_id=sample['certificateId'],
            recipient_name=sample['recipientName'],
            recipient_email=sample['recipientEmail'],
            course_name=sample['courseName'],
            issuer_name=sample['issuerName'],
            completion_date=parser.isoparse(sample['completionDate']).date(),
            description=sample['description'],
            issued_at=parser.isoparse(sample['issuedAt']),
            blockchain_hash=sample['blockchainHash'],
            is_valid=sample['isValid'],
        )
        db.session.add(cert)
        added += 1
    db.session.commit()
    return added


@click.command('seed-db')
@with_appcontext
def seed_command():
    """Drops and recreates the registry tables, then inserts the sample certificates."""
    click.echo("Starting database seeding process...")
    db.drop_all()
    db.create_all()
    click.echo("Database tables dropped and recreated.")

    added = seed_certificates()
    click.echo(f"✅ {added} sample certificates seeded.")
