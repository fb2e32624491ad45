# cli.py
# Flask CLI commands that drive the certificate client and the chain simulator.

import json

import click
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from certchain.config import validate_environment, mask_credentials
from certchain.errors import MalformedResponseError, NotFoundError, ValidationError
from certchain.services.blockchain_service import create_blockchain_simulator, format_wei, shorten_address
from certchain.services.certificate_service import create_certificate_service
from certchain.services.hash_service import generate_data_hash

certs_cli = AppGroup('certs', help="Issue, verify and list certificates through the API client.")
chain_cli = AppGroup('chain', help="Talk to the simulated certificate registry contract.")


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _service(seed_samples=True):
    return create_certificate_service(current_app.config, seed_samples=seed_samples)


@certs_cli.command('issue')
@click.option('--recipient-name', required=True)
@click.option('--course-name', required=True)
@click.option('--issuer-name', required=True)
@click.option('--recipient-email', default=None)
@click.option('--completion-date', default=None, help="ISO date, e.g. 2024-05-31")
@click.option('--description', default=None)
def issue_command(recipient_name, course_name, issuer_name, recipient_email, completion_date, description):
    """Issue a certificate."""
    try:
        result = _service().issue({
            "recipientName": recipient_name,
            "recipientEmail": recipient_email,
            "courseName": course_name,
            "issuerName": issuer_name,
            "completionDate": completion_date,
            "description": description,
        })
    except ValidationError as e:
        raise click.UsageError(str(e))
    except MalformedResponseError as e:
        raise click.ClickException(str(e))
    _echo_json(result)


@certs_cli.command('verify')
@click.argument('certificate_id')
def verify_command(certificate_id):
    """Look a certificate up by its CERT-YYYY-XXXXXX identifier."""
    try:
        record = _service().verify(certificate_id)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.UsageError(str(e))
    _echo_json(record.to_dict())


@certs_cli.command('list')
def list_command():
    """List all certificates, newest first."""
    _echo_json([record.to_dict() for record in _service().get_all()])


@certs_cli.command('health')
def health_command():
    """Report whether the API is reachable."""
    _echo_json(_service(seed_samples=False).health_check())


@certs_cli.command('seed-local')
def seed_local_command():
    """Write the sample certificates into an empty local store."""
    if _service(seed_samples=False).store.initialize_sample_data():
        click.echo("✅ Sample certificates written to local storage.")
    else:
        click.echo("Local storage already holds certificates; nothing to do.")


@certs_cli.command('reset-local')
@click.confirmation_option(prompt="Delete every locally stored certificate?")
def reset_local_command():
    """Remove all locally stored certificates."""
    _service(seed_samples=False).store.clear()
    click.echo("Local certificate storage cleared.")


@chain_cli.command('issue')
@click.argument('certificate_id')
@click.option('--issuer', required=True)
def chain_issue_command(certificate_id, issuer):
    """Submit a (simulated) issueCertificate transaction."""
    service = _service()
    try:
        record = service.verify(certificate_id)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.UsageError(str(e))
    data_hash = generate_data_hash(record.to_dict())
    simulator = create_blockchain_simulator(current_app.config)
    tx_hash = simulator.issue_certificate_on_chain(certificate_id, data_hash, issuer)
    _echo_json({"certificateId": certificate_id, "dataHash": data_hash, "transactionHash": tx_hash})


@chain_cli.command('verify')
@click.argument('certificate_id')
def chain_verify_command(certificate_id):
    """Query the (simulated) contract for a certificate."""
    simulator = create_blockchain_simulator(current_app.config)
    _echo_json(simulator.verify_certificate_on_chain(certificate_id).to_dict())


@chain_cli.command('gas')
@click.argument('function_name', default='issueCertificate')
def chain_gas_command(function_name):
    """Estimate the cost of a contract call."""
    simulator = create_blockchain_simulator(current_app.config)
    gas = simulator.get_gas_estimate(function_name)
    gas_price = simulator.get_current_gas_price()
    _echo_json({
        "function": function_name,
        "gas": gas,
        "gasPriceWei": gas_price,
        "estimatedCostEther": format_wei(gas * int(gas_price)),
    })


@chain_cli.command('info')
def chain_info_command():
    """Show the simulated wallet and contract."""
    simulator = create_blockchain_simulator(current_app.config)
    _echo_json({
        "connected": simulator.is_wallet_connected(),
        "account": shorten_address(simulator.account),
        "contractAddress": simulator.contract_address,
        "networkId": simulator.network_id,
    })


@click.command('check-env')
@with_appcontext
def check_env_command():
    """Print the active configuration and any problems with it."""
    cfg = current_app.config
    is_valid, errors = validate_environment(cfg)
    click.echo("=== CertChain Configuration ===")
    click.echo(f"Environment: {cfg.get('CONFIG_NAME')}")
    click.echo(f"API URL: {cfg.get('CERTCHAIN_API_URL')}")
    click.echo(f"Database URI: {mask_credentials(cfg.get('SQLALCHEMY_DATABASE_URI'))}")
    click.echo(f"Local storage: {cfg.get('CERTCHAIN_STORAGE_PATH')}")
    click.echo(f"Frontend URL: {cfg.get('FRONTEND_URL')}")
    click.echo(f"Configuration Valid: {is_valid}")
    for error in errors:
        click.echo(f"-  {error}")
