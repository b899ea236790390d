"""
Command-line interface of the issuer node.

    crcs issue   --age 22 --income 600000 [--out credential.json] [--print-metrics]
    crcs session --cred credential.json --verifier BANK_A
                 [--min-age 18] [--min-income 500000] [--out session.json] [--print-metrics]
    crcs verify  --cred credential.json

Any failure is fatal: a diagnostic goes to stderr, the exit status is 1
and no output file is written.
"""

from __future__ import annotations

import time
from typing import Optional

import click
from pydantic import ValidationError

from .config import Settings, get_settings
from .errors import CRCSError
from .issuer import CredentialIssuer, open_attribute, verify_credential
from .logger import get_logger, setup_logging
from .session import SessionBinder
from .storage import load_credential, save_credential, save_session

logger = get_logger(__name__)

U64 = click.IntRange(0, (1 << 64) - 1)


def _print_metrics(label: str, elapsed: float, size: int) -> None:
    click.echo("--- Metrics ---")
    click.echo(f"  {label:<12} : {elapsed * 1000:.2f}ms")
    click.echo(f"  {'File size':<12} : {size} bytes")


@click.group()
@click.version_option(package_name="crcs-issuer")
@click.pass_context
def main(ctx: click.Context) -> None:
    """CRCS issuer node: issue credentials and bind verifier sessions."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    setup_logging(settings.log_level.value, settings.json_logs)
    ctx.obj = settings


@main.command()
@click.option("--age", type=U64, required=True, help="Holder's age")
@click.option("--income", type=U64, required=True, help="Holder's annual income")
@click.option("-o", "--out", type=click.Path(dir_okay=False), default=None,
              help="Output path for the credential JSON  [default: credential.json]")
@click.option("--print-metrics", is_flag=True, help="Print timing and size metrics")
@click.pass_obj
def issue(settings: Settings, age: int, income: int, out: Optional[str], print_metrics: bool) -> None:
    """Issue a new credential for a holder's attributes."""
    out_path = out or str(settings.credential_path)
    t_start = time.perf_counter()
    try:
        issuer = CredentialIssuer(
            scheme=settings.signature_scheme(),
            hasher=settings.commitment_hash(),
        )
        credential = issuer.issue({"age": age, "income": income})
        size = save_credential(credential, out_path)
    except CRCSError as exc:
        logger.error("issue_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc
    elapsed = time.perf_counter() - t_start

    click.echo(f"Credential issued → {out_path}")
    if print_metrics:
        _print_metrics("Issue time", elapsed, size)


@main.command()
@click.option("--cred", type=click.Path(dir_okay=False), required=True,
              help="Path to an existing credential JSON")
@click.option("--verifier", required=True, help='Verifier identifier (e.g. "BANK_A")')
@click.option("--min-age", type=U64, default=None, help="Min age threshold  [default: 18]")
@click.option("--min-income", type=U64, default=None,
              help="Min income threshold  [default: 500000]")
@click.option("-o", "--out", type=click.Path(dir_okay=False), default=None,
              help="Output path for the session JSON  [default: session.json]")
@click.option("--print-metrics", is_flag=True, help="Print timing and size metrics")
@click.pass_obj
def session(
    settings: Settings,
    cred: str,
    verifier: str,
    min_age: Optional[int],
    min_income: Optional[int],
    out: Optional[str],
    print_metrics: bool,
) -> None:
    """Create a fresh proof session for a given verifier."""
    out_path = out or str(settings.session_path)
    thresholds = {
        "age": settings.min_age if min_age is None else min_age,
        "income": settings.min_income if min_income is None else min_income,
    }
    t_start = time.perf_counter()
    try:
        credential = load_credential(cred)
        binder = SessionBinder(hasher=settings.commitment_hash())
        bound = binder.bind(credential, verifier, thresholds)
        size = save_session(bound, out_path)
    except CRCSError as exc:
        logger.error("session_failed", error=str(exc), credential_path=cred)
        raise click.ClickException(str(exc)) from exc
    elapsed = time.perf_counter() - t_start

    click.echo(f"Session created → {out_path}  (verifier: {verifier})")
    if print_metrics:
        _print_metrics("Session time", elapsed, size)


@main.command()
@click.option("--cred", type=click.Path(dir_okay=False), required=True,
              help="Path to an existing credential JSON")
@click.pass_obj
def verify(settings: Settings, cred: str) -> None:
    """Check a credential's issuer signature and commitment openings."""
    try:
        credential = load_credential(cred)
        verify_credential(credential, settings.signature_scheme(), strict=True)
        hasher = settings.commitment_hash()
        for name in credential.attribute_order:
            open_attribute(credential, name, hasher)
    except CRCSError as exc:
        logger.error("verify_failed", error=str(exc), credential_path=cred)
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Credential {credential.credential_id} is valid "
        f"({len(credential.attribute_order)} attributes)"
    )


if __name__ == "__main__":
    main()
