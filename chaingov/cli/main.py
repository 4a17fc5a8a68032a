#!/usr/bin/env python3
"""
ChainGov CLI

Off-chain helpers for governor operators and voters.

Usage:
    chaingov params [--config FILE] [--json]
    chaingov ballot digest --governor ADDR --proposal-id N [--support/--against]
    chaingov ballot sign --key HEX --governor ADDR --proposal-id N [--support/--against]
    chaingov ballot recover --governor ADDR --proposal-id N --v V --r R --s S
    chaingov tx-hash --target ADDR --value N --signature SIG --data HEX --eta N
"""

import json
from typing import Optional

import click

from ..config import load_config, parse_amount
from ..constants import CHAINGOV_CHAIN_ID, CHAINGOV_GOVERNOR_NAME
from ..crypto import PrivateKey, is_valid_address, normalize_address
from ..exceptions import ChainGovException
from ..governance.ballots import ballot_digest, recover_ballot_signer, sign_ballot
from ..governance.guard import normalize_calldata
from ..governance.timelock import transaction_hash
from ..logger import set_log_level


def _parse_int(value: str, name: str) -> int:
    try:
        return parse_amount(value, name)
    except ChainGovException as e:
        raise click.BadParameter(str(e), param_hint=f"--{name}")


def _address(value: str, name: str) -> str:
    if not is_valid_address(value):
        raise click.BadParameter(f"Invalid address: {value}", param_hint=f"--{name}")
    return normalize_address(value)


@click.group()
@click.version_option(version="1.0.0", prog_name="chaingov")
@click.option("--log-level", default=None, help="Override the log level (DEBUG, INFO, ...)")
def cli(log_level: Optional[str]):
    """ChainGov Command Line Interface

    Inspect governor policy, prepare signed ballots and compute Timelock
    transaction hashes.
    """
    if log_level:
        try:
            set_log_level(log_level)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--log-level")


@cli.command("params")
@click.option("--config", "-c", "config_path", type=click.Path(), default=None,
              help="Path to chaingov.toml (default: $CHAINGOV_CONFIG or ./chaingov.toml)")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def params_cmd(config_path: Optional[str], as_json: bool):
    """Print the effective governor policy."""
    try:
        config = load_config(config_path)
    except ChainGovException as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    if as_json:
        click.echo(json.dumps(config.to_dict(), indent=2))
        return

    params = config.governance_parameters()
    click.echo(click.style("Governor", fg="cyan", bold=True))
    click.echo(f"  Name:                    {config.governor.name}")
    click.echo(f"  Guardian:                {config.governor.guardian or '-'}")
    click.echo(f"  Quorum votes:            {params.quorum_votes}")
    click.echo(f"  Proposal threshold:      {params.proposal_threshold}")
    click.echo(f"  Max operations:          {params.proposal_max_operations}")
    click.echo(f"  Voting delay (blocks):   {params.voting_delay}")
    click.echo(f"  Voting period (blocks):  {params.voting_period}")
    click.echo(click.style("Timelock", fg="cyan", bold=True))
    click.echo(f"  Delay (seconds):         {config.timelock.delay}")
    click.echo(click.style("Chain", fg="cyan", bold=True))
    click.echo(f"  Chain id:                {config.chain.chain_id}")


# ── Ballots ───────────────────────────────────────────────────────────

@cli.group("ballot")
def ballot():
    """EIP-712 signed ballots."""


def ballot_options(fn):
    fn = click.option("--support/--against", default=True, help="Vote for (default) or against")(fn)
    fn = click.option("--proposal-id", "-p", required=True, type=int, help="Proposal id")(fn)
    fn = click.option("--name", default=str(CHAINGOV_GOVERNOR_NAME), show_default=True,
                      help="Governor EIP-712 domain name")(fn)
    fn = click.option("--chain-id", default=int(CHAINGOV_CHAIN_ID), type=int, show_default=True,
                      help="Chain id")(fn)
    fn = click.option("--governor", "-g", required=True, help="Governor address")(fn)
    return fn


@ballot.command("digest")
@ballot_options
def ballot_digest_cmd(governor: str, chain_id: int, name: str, proposal_id: int, support: bool):
    """Print the 32-byte digest a voter signs."""
    governor = _address(governor, "governor")
    digest = ballot_digest(name, chain_id, governor, proposal_id, support)
    click.echo("0x" + digest.hex())


@ballot.command("sign")
@ballot_options
@click.option("--key", "-k", required=True, envvar="CHAINGOV_PRIVATE_KEY",
              help="secp256k1 private key (hex); may come from $CHAINGOV_PRIVATE_KEY")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def ballot_sign_cmd(governor: str, chain_id: int, name: str, proposal_id: int,
                    support: bool, key: str, as_json: bool):
    """Sign a ballot and print v, r, s."""
    governor = _address(governor, "governor")
    try:
        private_key = PrivateKey.from_hex(key)
    except ChainGovException as e:
        raise click.ClickException(f"Invalid private key: {e}")

    signed = sign_ballot(private_key, name, chain_id, governor, proposal_id, support)
    if as_json:
        data = signed.to_dict()
        data["signer"] = private_key.address
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Signer:      {private_key.address}")
    click.echo(f"Proposal:    #{signed.proposal_id} ({'for' if signed.support else 'against'})")
    click.echo(f"v: {signed.v}")
    click.echo(f"r: {hex(signed.r)}")
    click.echo(f"s: {hex(signed.s)}")


@ballot.command("recover")
@ballot_options
@click.option("--v", "v", required=True, type=int, help="Recovery id (27/28)")
@click.option("--r", "r", required=True, help="Signature r (hex or decimal)")
@click.option("--s", "s", required=True, help="Signature s (hex or decimal)")
def ballot_recover_cmd(governor: str, chain_id: int, name: str, proposal_id: int,
                       support: bool, v: int, r: str, s: str):
    """Print the account that signed a ballot."""
    governor = _address(governor, "governor")
    try:
        signer = recover_ballot_signer(
            name, chain_id, governor, proposal_id, support,
            v, _parse_int(r, "r"), _parse_int(s, "s"),
        )
    except ChainGovException as e:
        raise click.ClickException(f"invalid signature: {e}")
    click.echo(signer)


# ── Timelock ──────────────────────────────────────────────────────────

@cli.command("tx-hash")
@click.option("--target", "-t", required=True, help="Call target address")
@click.option("--value", default="0", show_default=True, help="Native value forwarded")
@click.option("--signature", default="", help="Function signature, e.g. 'setDelay(uint256)'")
@click.option("--data", default="0x", show_default=True, help="ABI-encoded arguments (hex)")
@click.option("--eta", required=True, help="Execution timestamp")
def tx_hash_cmd(target: str, value: str, signature: str, data: str, eta: str):
    """Print the Timelock queue key of one action."""
    target = _address(target, "target")
    try:
        calldata = normalize_calldata(data)
    except ChainGovException as e:
        raise click.BadParameter(str(e), param_hint="--data")
    tx_hash = transaction_hash(
        target, _parse_int(value, "value"), signature, calldata, _parse_int(eta, "eta")
    )
    click.echo("0x" + tx_hash.hex())


def main():
    cli()


if __name__ == "__main__":
    main()
